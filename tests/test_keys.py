import pytest

from rfbkit.keys import Key, int_to_keys


def test_int_to_keys_negative():
    assert int_to_keys(-42) == [Key.MINUS, Key.DIGIT4, Key.DIGIT2]


def test_int_to_keys_zero():
    assert int_to_keys(0) == [Key.DIGIT0]


def test_digit_keys_match_ascii():
    keys = int_to_keys(1234567890)
    assert [int(k) for k in keys] == [ord(c) for c in "1234567890"]


def test_latin1_keys_match_characters():
    assert Key(ord(" ")) is Key.SPACE
    assert Key(ord("A")) is Key.A
    assert Key(ord("z")) is Key.SMALL_Z
    assert Key(ord("~")) is Key.ASCII_TILDE


def test_special_keys():
    assert Key(0xFF1B) is Key.ESCAPE
    assert Key(0xFFFF) is Key.DELETE
    assert Key(0xFF0D) is Key.RETURN


def test_function_keys_are_consecutive():
    assert Key(int(Key.F1) + 11) is Key.F12
    assert Key(int(Key.SHIFT_LEFT) + 13) is Key.HYPER_RIGHT


def test_select_block_shares_value():
    assert Key(0xFF60) is Key.PRINT
    assert Key["PRINT"] is Key.SELECT


def test_int_to_keys_rejects_non_integers():
    with pytest.raises(ValueError):
        int_to_keys(1.5)