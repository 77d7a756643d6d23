"""Client-to-server and server-to-client RFB messages.

Each message's ``read`` expects the leading message-type byte to have been
consumed already. Each ``write`` emits the type byte, the body, and flushes.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, ClassVar

from . import logger
from .connection import COLOR_MAP_SIZE, Connection
from .image import Color, Rectangle
from .keys import Key
from .pixel_format import PixelFormat

# Pseudo-encoding announcing a change of framebuffer size.
_DESKTOP_SIZE_PSEUDO = -223

_FB_UPDATE_REQUEST = struct.Struct(">BHHHH")
_KEY_EVENT = struct.Struct(">B2xI")
_POINTER_EVENT = struct.Struct(">BHH")
_COLOR_ENTRY = struct.Struct(">HHH")


class ClientMessageType(IntEnum):
    """Client-to-server message types."""

    SET_PIXEL_FORMAT = 0
    SET_ENCODINGS = 2
    FRAMEBUFFER_UPDATE_REQUEST = 3
    KEY_EVENT = 4
    POINTER_EVENT = 5
    CLIENT_CUT_TEXT = 6


class ServerMessageType(IntEnum):
    """Server-to-client message types."""

    FRAMEBUFFER_UPDATE = 0
    SET_COLOR_MAP_ENTRIES = 1
    BELL = 2
    SERVER_CUT_TEXT = 3


def _text(data: bytes) -> str:
    return bytes(data).decode("utf-8", errors="replace")


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
class ServerInit:
    """The ServerInit message sent at the end of the handshake."""

    fb_width: int = 0
    fb_height: int = 0
    pixel_format: PixelFormat = field(default_factory=PixelFormat)
    name_length: int = 0
    name_text: bytes = b""

    def __str__(self) -> str:
        return (
            f"Width: {self.fb_width}, Height: {self.fb_height}, "
            f"PixelFormat: {self.pixel_format}, NameLength: {self.name_length}, "
            f"MameText: {_text(self.name_text)}"
        )


@dataclass
class FramebufferUpdate:
    """A set of rectangles of framebuffer data."""

    type: ClassVar[ServerMessageType] = ServerMessageType.FRAMEBUFFER_UPDATE

    num_rect: int = 0
    rects: list[Rectangle] = field(default_factory=list)

    def __str__(self) -> str:
        rects = " ".join(str(rect) for rect in self.rects)
        return f"rects {self.num_rect} rectangle[]: {{ [{rects}] }}"

    @classmethod
    def read(cls, conn: Connection) -> FramebufferUpdate:
        conn.read(1)
        msg = cls(num_rect=conn.read_u16())
        logger.debugf("-------Reading FrameBuffer update with %d rects-------", msg.num_rect)
        for i in range(msg.num_rect):
            logger.debugf_no_cr("----------RECT %d----------", i)
            rect = Rectangle().read(conn)
            if rect.enc_type == _DESKTOP_SIZE_PSEUDO:
                reset = getattr(conn, "reset_all_encodings", None)
                if reset is not None:
                    reset()
            logger.tracef(
                "----End RECT #%d Info (%dx%d) encType:%s",
                i, rect.width, rect.height, rect.enc_type,
            )
            msg.rects.append(rect)
        return msg

    def write(self, conn: Connection) -> None:
        conn.write_u8(self.type)
        conn.write(b"\x00")
        conn.write_u16(self.num_rect)
        for rect in self.rects:
            rect.write(conn)
        conn.flush()


@dataclass
class ServerCutText:
    """Clipboard text sent by the server."""

    type: ClassVar[ServerMessageType] = ServerMessageType.SERVER_CUT_TEXT

    length: int = 0
    text: bytes = b""

    def __str__(self) -> str:
        return f"lenght: {self.length} text: {_text(self.text)}"

    @classmethod
    def read(cls, conn: Connection) -> ServerCutText:
        conn.read(1)
        length = conn.read_u32()
        return cls(length=length, text=conn.read(length))

    def write(self, conn: Connection) -> None:
        conn.write_u8(self.type)
        conn.write(b"\x00")
        self.length = max(self.length, len(self.text))
        conn.write_u32(self.length)
        conn.write(self.text)
        conn.flush()


@dataclass
class Bell:
    """Audible bell request."""

    type: ClassVar[ServerMessageType] = ServerMessageType.BELL

    def __str__(self) -> str:
        return "bell"

    @classmethod
    def read(cls, conn: Connection) -> Bell:
        return cls()

    def write(self, conn: Connection) -> None:
        conn.write_u8(self.type)
        conn.flush()


@dataclass
class SetColorMapEntries:
    """Updates to the connection's colour map."""

    type: ClassVar[ServerMessageType] = ServerMessageType.SET_COLOR_MAP_ENTRIES

    first_color: int = 0
    colors_num: int = 0
    colors: list[Color] = field(default_factory=list)

    def __str__(self) -> str:
        colors = " ".join(f"{{{c.r} {c.g} {c.b}}}" for c in self.colors)
        return (
            f"first color: {self.first_color}, numcolors: {self.colors_num}, "
            f"colors[]: {{ [{colors}] }}"
        )

    @classmethod
    def read(cls, conn: Connection) -> SetColorMapEntries:
        logger.info("Reading SetColorMapEntries message")
        conn.read(1)
        msg = cls(first_color=conn.read_u16(), colors_num=conn.read_u16())
        if msg.first_color + msg.colors_num > COLOR_MAP_SIZE:
            raise ValueError(
                f"colour map entries {msg.first_color}..{msg.first_color + msg.colors_num - 1} "
                f"exceed map size {COLOR_MAP_SIZE}"
            )
        color_map = list(conn.color_map)
        for offset in range(msg.colors_num):
            color = Color(pf=conn.pixel_format, cm=color_map).read(conn)
            msg.colors.append(color)
            color_map[msg.first_color + offset] = color
        conn.color_map = color_map
        return msg

    def write(self, conn: Connection) -> None:
        conn.write_u8(self.type)
        conn.write(b"\x00")
        conn.write_u16(self.first_color)
        self.colors_num = max(self.colors_num, len(self.colors))
        conn.write_u16(self.colors_num)
        for color in self.colors:
            conn.write(
                _COLOR_ENTRY.pack(color.r & 0xFFFF, color.g & 0xFFFF, color.b & 0xFFFF)
            )
        conn.flush()


@dataclass
class SetPixelFormat:
    """Client request to change the pixel format."""

    type: ClassVar[ClientMessageType] = ClientMessageType.SET_PIXEL_FORMAT

    pf: PixelFormat = field(default_factory=PixelFormat)

    def __str__(self) -> str:
        return str(self.pf)

    @classmethod
    def read(cls, conn: Connection) -> SetPixelFormat:
        conn.read(3)
        return cls(pf=PixelFormat.unmarshal(conn.read(16)))

    def write(self, conn: Connection) -> None:
        conn.write_u8(self.type)
        conn.write(b"\x00" * 3)
        conn.write(self.pf.to_bytes())
        if conn.pixel_format.true_color != 0:
            # The colour map is invalidated.
            conn.color_map = [None] * COLOR_MAP_SIZE
        conn.flush()


@dataclass
class SetEncodings:
    """Client list of the encodings it accepts, in order of preference."""

    type: ClassVar[ClientMessageType] = ClientMessageType.SET_ENCODINGS

    enc_num: int = 0
    encodings: list[int] = field(default_factory=list)

    def __str__(self) -> str:
        encodings = " ".join(str(e) for e in self.encodings)
        return f"encnum: {self.enc_num}, encodings[]: {{ [{encodings}] }}"

    @classmethod
    def read(cls, conn: Connection) -> SetEncodings:
        conn.read(1)
        count = conn.read_u16()
        encodings = list(struct.unpack(f">{count}i", conn.read(4 * count)))
        setter: Any = getattr(conn, "set_encodings", None)
        if setter is not None:
            setter(encodings)
        return cls(enc_num=count, encodings=encodings)

    def write(self, conn: Connection) -> None:
        conn.write_u8(self.type)
        conn.write(b"\x00")
        self.enc_num = max(self.enc_num, len(self.encodings))
        conn.write_u16(self.enc_num)
        conn.write(struct.pack(f">{len(self.encodings)}i", *self.encodings))
        conn.flush()


@dataclass
class FramebufferUpdateRequest:
    """Client request for (part of) the framebuffer."""

    type: ClassVar[ClientMessageType] = ClientMessageType.FRAMEBUFFER_UPDATE_REQUEST

    inc: int = 0
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    def __str__(self) -> str:
        return (
            f"incremental: {self.inc}, x: {self.x}, y: {self.y}, "
            f"width: {self.width}, height: {self.height}"
        )

    @classmethod
    def read(cls, conn: Connection) -> FramebufferUpdateRequest:
        return cls(*_FB_UPDATE_REQUEST.unpack(conn.read(_FB_UPDATE_REQUEST.size)))

    def write(self, conn: Connection) -> None:
        conn.write_u8(self.type)
        conn.write(_FB_UPDATE_REQUEST.pack(self.inc, self.x, self.y, self.width, self.height))
        conn.flush()


@dataclass
class KeyEvent:
    """A key press or release."""

    type: ClassVar[ClientMessageType] = ClientMessageType.KEY_EVENT

    down: int = 0
    key: int = 0

    def __str__(self) -> str:
        return f"down: {self.down}, key: {_key_name(self.key)}"

    @classmethod
    def read(cls, conn: Connection) -> KeyEvent:
        down, key = _KEY_EVENT.unpack(conn.read(_KEY_EVENT.size))
        return cls(down=down, key=_as_key(key))

    def write(self, conn: Connection) -> None:
        conn.write_u8(self.type)
        conn.write(_KEY_EVENT.pack(self.down, self.key))
        conn.flush()


@dataclass
class PointerEvent:
    """Pointer movement or button change."""

    type: ClassVar[ClientMessageType] = ClientMessageType.POINTER_EVENT

    mask: int = 0
    x: int = 0
    y: int = 0

    def __str__(self) -> str:
        return f"mask {self.mask}, x: {self.x}, y: {self.y}"

    @classmethod
    def read(cls, conn: Connection) -> PointerEvent:
        return cls(*_POINTER_EVENT.unpack(conn.read(_POINTER_EVENT.size)))

    def write(self, conn: Connection) -> None:
        conn.write_u8(self.type)
        conn.write(_POINTER_EVENT.pack(self.mask, self.x, self.y))
        conn.flush()


@dataclass
class ClientCutText:
    """Clipboard text sent by the client."""

    type: ClassVar[ClientMessageType] = ClientMessageType.CLIENT_CUT_TEXT

    length: int = 0
    text: bytes = b""

    def __str__(self) -> str:
        return f"length: {self.length}, text: {_text(self.text)}"

    @classmethod
    def read(cls, conn: Connection) -> ClientCutText:
        conn.read(3)
        length = conn.read_u32()
        return cls(length=length, text=conn.read(length))

    def write(self, conn: Connection) -> None:
        conn.write_u8(self.type)
        conn.write(b"\x00" * 3)
        self.length = max(self.length, len(self.text))
        conn.write_u32(self.length)
        conn.write(self.text)
        conn.flush()


DEFAULT_CLIENT_MESSAGES = (
    SetPixelFormat,
    SetEncodings,
    FramebufferUpdateRequest,
    KeyEvent,
    PointerEvent,
    ClientCutText,
)

DEFAULT_SERVER_MESSAGES = (
    FramebufferUpdate,
    SetColorMapEntries,
    Bell,
    ServerCutText,
)