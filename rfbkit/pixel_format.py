"""The RFB pixel format structure (RFC 6143, section 7.4)."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO

PIXEL_FORMAT_LEN = 16

_STRUCT = struct.Struct(">BBBBHHHBBB3x")


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining:
        chunk = stream.read(remaining)
        if not chunk:
            raise EOFError(f"expected {size} bytes, got {size - remaining}")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


@dataclass(frozen=True)
class PixelFormat:
    """Describes how a pixel is laid out on the wire."""

    bpp: int = 0
    depth: int = 0
    big_endian: int = 0
    true_color: int = 0
    red_max: int = 0
    green_max: int = 0
    blue_max: int = 0
    red_shift: int = 0
    green_shift: int = 0
    blue_shift: int = 0

    def to_bytes(self) -> bytes:
        """Encode the 16-byte wire form without validation."""
        return _STRUCT.pack(
            self.bpp,
            self.depth,
            self.big_endian,
            self.true_color,
            self.red_max,
            self.green_max,
            self.blue_max,
            self.red_shift,
            self.green_shift,
            self.blue_shift,
        )

    def marshal(self) -> bytes:
        """Validate the format and encode it."""
        if self.bpp not in (8, 16, 32):
            raise ValueError(f"Invalid BPP value {self.bpp}; must be 8, 16, or 32")
        if self.depth < self.bpp:
            raise ValueError(f"Invalid Depth value {self.depth}; cannot be < BPP")
        if self.depth not in (8, 16, 32):
            raise ValueError(f"Invalid Depth value {self.depth}; must be 8, 16, or 32")
        return self.to_bytes()

    @classmethod
    def unmarshal(cls, data: bytes) -> PixelFormat:
        """Decode a pixel format from its wire form."""
        if len(data) < PIXEL_FORMAT_LEN:
            raise ValueError(
                f"pixel format needs {PIXEL_FORMAT_LEN} bytes, got {len(data)}"
            )
        return cls(*_STRUCT.unpack_from(data))

    @classmethod
    def read(cls, stream: BinaryIO) -> PixelFormat:
        """Read and decode a pixel format from a binary stream."""
        return cls.unmarshal(_read_exact(stream, PIXEL_FORMAT_LEN))

    def byte_order(self) -> str:
        """Byte order of pixel values, as accepted by int.from_bytes."""
        return "big" if self.big_endian == 1 else "little"

    def __str__(self) -> str:
        return (
            f"{{ bpp: {self.bpp} depth: {self.depth} big-endian: {self.big_endian} "
            f"true-color: {self.true_color} red-max: {self.red_max} "
            f"green-max: {self.green_max} blue-max: {self.blue_max} "
            f"red-shift: {self.red_shift} green-shift: {self.green_shift} "
            f"blue-shift: {self.blue_shift} }}"
        )


def new_pixel_format(bpp: int) -> PixelFormat:
    """Build the standard pixel format for 8, 16 or 32 bits per pixel."""
    true_color = 1
    depth = 0
    shifts = (0, 0, 0)
    if bpp == 8:
        true_color = 0
        depth = 8
    elif bpp == 16:
        depth = 16
        shifts = (0, 4, 8)
    elif bpp == 32:
        depth = 24
        shifts = (16, 8, 0)
    return PixelFormat(bpp, depth, 0, true_color, 255, 255, 255, *shifts)


def new_pixel_format_aten() -> PixelFormat:
    """Pixel format used by Aten iKVM servers."""
    component_max = (1 << 5) - 1
    return PixelFormat(16, 15, 0, 1, component_max, component_max, component_max, 10, 5, 0)


PIXEL_FORMAT_8BIT = new_pixel_format(8)
PIXEL_FORMAT_16BIT = new_pixel_format(16)
PIXEL_FORMAT_32BIT = new_pixel_format(32)
PIXEL_FORMAT_ATEN = new_pixel_format_aten()