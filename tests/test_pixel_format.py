import io

import pytest

from rfbkit.pixel_format import (
    PIXEL_FORMAT_32BIT,
    PIXEL_FORMAT_LEN,
    PixelFormat,
    new_pixel_format,
    new_pixel_format_aten,
)


def test_32bit_format_fields():
    pf = new_pixel_format(32)
    assert (pf.bpp, pf.depth, pf.true_color) == (32, 24, 1)
    assert (pf.red_shift, pf.green_shift, pf.blue_shift) == (16, 8, 0)
    assert (pf.red_max, pf.green_max, pf.blue_max) == (255, 255, 255)
    assert pf == PIXEL_FORMAT_32BIT


def test_8bit_format_uses_color_map():
    pf = new_pixel_format(8)
    assert pf.true_color == 0
    assert pf.depth == 8


def test_16bit_shifts():
    pf = new_pixel_format(16)
    assert (pf.red_shift, pf.green_shift, pf.blue_shift) == (0, 4, 8)


def test_aten_format():
    pf = new_pixel_format_aten()
    assert (pf.bpp, pf.depth) == (16, 15)
    assert (pf.red_shift, pf.green_shift, pf.blue_shift) == (10, 5, 0)
    assert pf.red_max == pf.green_max == pf.blue_max


def test_wire_size_is_sixteen():
    assert len(new_pixel_format(32).to_bytes()) == PIXEL_FORMAT_LEN == 16


def test_wire_bytes_of_32bit_format():
    assert new_pixel_format(32).to_bytes() == bytes(
        [32, 24, 0, 1, 0, 255, 0, 255, 0, 255, 16, 8, 0, 0, 0, 0]
    )


@pytest.mark.parametrize("bpp", [8, 16, 32])
def test_round_trip(bpp):
    pf = new_pixel_format(bpp)
    assert PixelFormat.unmarshal(pf.to_bytes()) == pf


def test_read_from_stream():
    pf = new_pixel_format_aten()
    stream = io.BytesIO(pf.to_bytes() + b"tail")
    assert PixelFormat.read(stream) == pf
    assert stream.read() == b"tail"


def test_read_short_stream_raises():
    with pytest.raises(EOFError):
        PixelFormat.read(io.BytesIO(b"\x20\x18"))


def test_unmarshal_short_data_raises():
    with pytest.raises(ValueError):
        PixelFormat.unmarshal(b"\x00" * 5)


def test_marshal_accepts_valid_format():
    pf = new_pixel_format(8)
    assert pf.marshal() == pf.to_bytes()


def test_marshal_rejects_depth_below_bpp():
    with pytest.raises(ValueError, match="cannot be < BPP"):
        new_pixel_format(32).marshal()


def test_marshal_rejects_bad_bpp():
    with pytest.raises(ValueError, match="Invalid BPP"):
        PixelFormat(bpp=24, depth=24).marshal()


def test_marshal_rejects_bad_depth():
    with pytest.raises(ValueError, match="must be 8, 16, or 32"):
        PixelFormat(bpp=8, depth=12).marshal()


def test_byte_order():
    assert PixelFormat(big_endian=1).byte_order() == "big"
    assert PixelFormat(big_endian=0).byte_order() == "little"


def test_str():
    text = str(new_pixel_format(32))
    assert text.startswith("{ bpp: 32 depth: 24 big-endian: 0 true-color: 1")
    assert text.endswith("blue-shift: 0 }")