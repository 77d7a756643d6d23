"""Colours and rectangles as they appear in RFB framebuffer messages."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Any, Sequence

from . import logger
from .connection import COLOR_MAP_SIZE, Connection
from .pixel_format import PixelFormat

_PIXEL_SIZES = {8: 1, 16: 2, 32: 4}


class UnsupportedEncodingError(ValueError):
    """A rectangle uses an encoding the connection has not negotiated."""


@dataclass
class Color:
    """A single colour, either true-colour components or a colour-map entry."""

    pf: PixelFormat | None = field(default=None, repr=False, compare=False)
    cm: list[Any] | None = field(default=None, repr=False, compare=False)
    cm_index: int = 0
    r: int = 0
    g: int = 0
    b: int = 0

    def write(self, conn: Connection) -> None:
        """Encode the colour as one pixel in the connection's pixel format."""
        pf = conn.pixel_format
        pixel = self.cm_index
        if self.pf is not None and self.pf.true_color != 0:
            pixel = (
                (self.r << pf.red_shift)
                | (self.g << pf.green_shift)
                | (self.b << pf.blue_shift)
            )
        size = _PIXEL_SIZES.get(pf.bpp)
        if size is None:
            return
        pixel &= (1 << (8 * size)) - 1
        conn.write(pixel.to_bytes(size, pf.byte_order()))

    def read(self, conn: Connection) -> Color:
        """Decode one pixel from the connection in this colour's pixel format."""
        if self.pf is None:
            raise ValueError("colour has no pixel format")
        pf = self.pf
        size = _PIXEL_SIZES.get(pf.bpp)
        pixel = 0
        if size is not None:
            pixel = int.from_bytes(conn.read(size), pf.byte_order())

        if pf.true_color != 0:
            self.r = (pixel >> pf.red_shift) & pf.red_max
            self.g = (pixel >> pf.green_shift) & pf.green_max
            self.b = (pixel >> pf.blue_shift) & pf.blue_max
        else:
            if self.cm is None:
                raise ValueError("colour has no colour map")
            entry = self.cm[pixel]
            if entry is None:
                self.r = self.g = self.b = 0
            else:
                self.r, self.g, self.b = entry.r, entry.g, entry.b
            self.cm_index = pixel
        return self


def new_color_map() -> list[Color]:
    """A fresh colour map of black entries."""
    return [Color() for _ in range(COLOR_MAP_SIZE)]


@dataclass
class Rectangle:
    """A rectangle of pixel data within a framebuffer update."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0
    enc_type: int = 0
    enc: Any = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return (
            f"rect x: {self.x}, y: {self.y}, width: {self.width}, "
            f"height: {self.height}, enc: {self.enc_type}"
        )

    def write(self, conn: Connection) -> None:
        """Encode the rectangle header followed by its encoded pixel data."""
        if self.enc is None:
            raise UnsupportedEncodingError(f"unsupported encoding {self.enc_type}")
        conn.write(
            struct.pack(">HHHHi", self.x, self.y, self.width, self.height, self.enc_type)
        )
        self.enc.write(conn, self)

    def read(self, conn: Connection) -> Rectangle:
        """Decode a rectangle header and hand the body to its encoding."""
        self.x = conn.read_u16()
        self.y = conn.read_u16()
        self.width = conn.read_u16()
        self.height = conn.read_u16()
        self.enc_type = conn.read_s32()
        logger.debug(self)
        self.enc = conn.get_enc_instance(self.enc_type)
        if self.enc is None:
            raise UnsupportedEncodingError(f"unsupported encoding {self.enc_type}")
        self.enc.read(conn, self)
        return self

    def area(self) -> int:
        """Total number of pixels covered."""
        return self.width * self.height


def colors_to_image(
    x: int, y: int, width: int, height: int, colors: Sequence[Color]
) -> bytearray:
    """Pack colours into 16-bit-per-channel big-endian RGBA pixel data.

    The result holds ``width * height`` pixels of eight bytes each; pixels
    beyond the given colours stay zero and the alpha channel is 1.
    """
    if width < 0 or height < 0:
        raise ValueError("width and height must not be negative")
    if len(colors) > width * height:
        raise ValueError(
            f"{len(colors)} colours do not fit in a {width}x{height} image at ({x}, {y})"
        )
    pix = bytearray(8 * width * height)
    for i, color in enumerate(colors):
        struct.pack_into(
            ">HHHH", pix, 8 * i, color.r & 0xFFFF, color.g & 0xFFFF, color.b & 0xFFFF, 1
        )
    return pix