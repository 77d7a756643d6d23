"""Messages specific to Aten iKVM servers.

None of these messages is supported for sending, so every ``write`` is a
no-op; ``read`` consumes the message body, whose leading type byte has
already been read.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar

from .connection import Connection
from .keys import Key

# Server-to-client message types.
ATEN_IKVM_FRONT_GROUND_EVENT_MSG_TYPE = 4
ATEN_IKVM_KEEP_ALIVE_EVENT_MSG_TYPE = 22
ATEN_IKVM_VIDEO_GET_INFO_MSG_TYPE = 51
ATEN_IKVM_MOUSE_GET_INFO_MSG_TYPE = 55
ATEN_IKVM_SESSION_MESSAGE_MSG_TYPE = 57
ATEN_IKVM_GET_VIEWER_LANG_MSG_TYPE = 60

# Client-to-server message types.
ATEN_IKVM_KEY_EVENT_MSG_TYPE = 4
ATEN_IKVM_POINTER_EVENT_MSG_TYPE = 5

_KEY_EVENT = struct.Struct(">xB2xI9x")
_POINTER_EVENT = struct.Struct(">xBHH11x")


def _key_name(key: int) -> str:
    try:
        return Key(key).name
    except ValueError:
        return f"Key({int(key)})"


def _as_key(value: int) -> int:
    try:
        return Key(value)
    except ValueError:
        return value


@dataclass
class AteniKVMKeyEvent:
    """A key press or release in the Aten iKVM layout."""

    type: ClassVar[int] = ATEN_IKVM_KEY_EVENT_MSG_TYPE
    _SUPPORTED: ClassVar[bool] = False

    down: int = 0
    key: int = 0

    def __str__(self) -> str:
        return f"down:{self.down}, key:{_key_name(self.key)}"

    @classmethod
    def read(cls, conn: Connection) -> AteniKVMKeyEvent:
        down, key = _KEY_EVENT.unpack(conn.read(_KEY_EVENT.size))
        return cls(down=down, key=_as_key(key))

    def write(self, conn: Connection) -> None:
        if not self._SUPPORTED:
            return
        conn.write_u8(self.type)
        conn.write(_KEY_EVENT.pack(self.down, self.key))
        conn.flush()


@dataclass
class AteniKVMPointerEvent:
    """Pointer movement or button change in the Aten iKVM layout."""

    type: ClassVar[int] = ATEN_IKVM_POINTER_EVENT_MSG_TYPE
    _SUPPORTED: ClassVar[bool] = False

    mask: int = 0
    x: int = 0
    y: int = 0

    def __str__(self) -> str:
        return f"mask: {self.mask}, x:{self.x}, y:{self.y}"

    @classmethod
    def read(cls, conn: Connection) -> AteniKVMPointerEvent:
        return cls(*_POINTER_EVENT.unpack(conn.read(_POINTER_EVENT.size)))

    def write(self, conn: Connection) -> None:
        if not self._SUPPORTED:
            return
        conn.write_u8(self.type)
        conn.write(_POINTER_EVENT.pack(self.mask, self.x, self.y))
        conn.flush()


class _OpaqueServerMessage:
    """A server message whose body is padding of fixed size."""

    type: ClassVar[int]
    _SUPPORTED: ClassVar[bool] = False

    def __str__(self) -> str:
        return str(int(self.type))

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def _write_padding(self, conn: Connection, size: int, flush: bool = True) -> None:
        if not self._SUPPORTED:
            return
        conn.write_u8(self.type)
        conn.write(bytes(size))
        if flush:
            conn.flush()


class AteniKVMFrontGroundEvent(_OpaqueServerMessage):
    """Undocumented Aten iKVM message with a 20-byte body."""

    type = ATEN_IKVM_FRONT_GROUND_EVENT_MSG_TYPE

    @classmethod
    def read(cls, conn: Connection) -> AteniKVMFrontGroundEvent:
        conn.read(20)
        return cls()

    def write(self, conn: Connection) -> None:
        self._write_padding(conn, 20)


class AteniKVMKeepAliveEvent(_OpaqueServerMessage):
    """Aten iKVM keep-alive with a 1-byte body."""

    type = ATEN_IKVM_KEEP_ALIVE_EVENT_MSG_TYPE

    @classmethod
    def read(cls, conn: Connection) -> AteniKVMKeepAliveEvent:
        conn.read(1)
        return cls()

    def write(self, conn: Connection) -> None:
        self._write_padding(conn, 1)


class AteniKVMVideoGetInfo(_OpaqueServerMessage):
    """Undocumented Aten iKVM video info message; 40 bytes are read."""

    type = ATEN_IKVM_VIDEO_GET_INFO_MSG_TYPE

    @classmethod
    def read(cls, conn: Connection) -> AteniKVMVideoGetInfo:
        conn.read(40)
        return cls()

    def write(self, conn: Connection) -> None:
        self._write_padding(conn, 4)


class AteniKVMMouseGetInfo(_OpaqueServerMessage):
    """Undocumented Aten iKVM mouse info message with a 2-byte body."""

    type = ATEN_IKVM_MOUSE_GET_INFO_MSG_TYPE

    @classmethod
    def read(cls, conn: Connection) -> AteniKVMFrontGroundEvent:
        """Consume the body; the parsed result is reported as a front-ground event."""
        conn.read(2)
        return AteniKVMFrontGroundEvent()

    def write(self, conn: Connection) -> None:
        self._write_padding(conn, 2)


class AteniKVMSessionMessage(_OpaqueServerMessage):
    """Undocumented Aten iKVM session message with a 264-byte body."""

    type = ATEN_IKVM_SESSION_MESSAGE_MSG_TYPE

    @classmethod
    def read(cls, conn: Connection) -> AteniKVMSessionMessage:
        conn.read(264)
        return cls()

    def write(self, conn: Connection) -> None:
        self._write_padding(conn, 264, flush=False)


class AteniKVMGetViewerLang(_OpaqueServerMessage):
    """Undocumented Aten iKVM viewer-language message with an 8-byte body."""

    type = ATEN_IKVM_GET_VIEWER_LANG_MSG_TYPE

    @classmethod
    def read(cls, conn: Connection) -> AteniKVMGetViewerLang:
        conn.read(8)
        return cls()

    def write(self, conn: Connection) -> None:
        self._write_padding(conn, 8)