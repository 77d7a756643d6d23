import io
import struct

import pytest

from rfbkit.connection import Connection, ConnectionClosedError
from rfbkit.keys import Key
from rfbkit.messages_aten import (
    AteniKVMFrontGroundEvent,
    AteniKVMGetViewerLang,
    AteniKVMKeepAliveEvent,
    AteniKVMKeyEvent,
    AteniKVMMouseGetInfo,
    AteniKVMPointerEvent,
    AteniKVMSessionMessage,
    AteniKVMVideoGetInfo,
)


def _conn(data: bytes = b"") -> Connection:
    return Connection(io.BytesIO(data))


def test_key_event_read_layout():
    data = b"\x00\x01\x00\x00" + struct.pack(">I", Key.RETURN) + bytes(9) + b"tail"
    conn = _conn(data)
    msg = AteniKVMKeyEvent.read(conn)
    assert msg.down == 1
    assert msg.key == Key.RETURN
    assert conn.stream.tell() == 17


def test_key_event_str_uses_key_name():
    msg = AteniKVMKeyEvent(down=1, key=Key.ESCAPE)
    assert str(msg) == "down:1, key:ESCAPE"


def test_pointer_event_read_layout():
    data = b"\x00\x03" + struct.pack(">HH", 100, 200) + bytes(11)
    conn = _conn(data)
    msg = AteniKVMPointerEvent.read(conn)
    assert (msg.mask, msg.x, msg.y) == (3, 100, 200)
    assert conn.stream.tell() == 17


def test_pointer_event_str():
    assert str(AteniKVMPointerEvent(mask=1, x=2, y=3)) == "mask: 1, x:2, y:3"


@pytest.mark.parametrize(
    "cls, size",
    [
        (AteniKVMFrontGroundEvent, 20),
        (AteniKVMKeepAliveEvent, 1),
        (AteniKVMVideoGetInfo, 40),
        (AteniKVMSessionMessage, 264),
        (AteniKVMGetViewerLang, 8),
    ],
)
def test_opaque_messages_consume_body(cls, size):
    conn = _conn(bytes(size) + b"\xff")
    msg = cls.read(conn)
    assert msg == cls()
    assert conn.stream.tell() == size


def test_mouse_get_info_consumes_two_bytes():
    conn = _conn(b"\x00\x00\x07")
    msg = AteniKVMMouseGetInfo.read(conn)
    assert msg == AteniKVMFrontGroundEvent()
    assert conn.read_u8() == 7


@pytest.mark.parametrize(
    "cls", [AteniKVMFrontGroundEvent, AteniKVMVideoGetInfo, AteniKVMSessionMessage]
)
def test_short_body_raises(cls):
    with pytest.raises(ConnectionClosedError):
        cls.read(_conn(b"\x00"))


def test_short_key_event_raises():
    with pytest.raises(ConnectionClosedError):
        AteniKVMKeyEvent.read(_conn(bytes(10)))


@pytest.mark.parametrize(
    "msg",
    [
        AteniKVMKeyEvent(down=1, key=Key.A),
        AteniKVMPointerEvent(mask=1, x=5, y=6),
        AteniKVMFrontGroundEvent(),
        AteniKVMKeepAliveEvent(),
        AteniKVMVideoGetInfo(),
        AteniKVMMouseGetInfo(),
        AteniKVMSessionMessage(),
        AteniKVMGetViewerLang(),
    ],
)
def test_unsupported_messages_write_nothing(msg):
    conn = _conn()
    msg.write(conn)
    assert conn.stream.getvalue() == b""


@pytest.mark.parametrize(
    "msg, expected",
    [
        (AteniKVMFrontGroundEvent(), "4"),
        (AteniKVMKeepAliveEvent(), "22"),
        (AteniKVMVideoGetInfo(), "51"),
        (AteniKVMMouseGetInfo(), "55"),
        (AteniKVMSessionMessage(), "57"),
        (AteniKVMGetViewerLang(), "60"),
    ],
)
def test_opaque_message_str_is_type(msg, expected):
    assert str(msg) == expected