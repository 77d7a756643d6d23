"""An in-memory image holding three bytes (R, G, B) per pixel."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence, Union

PixelBuffer = Union[bytearray, memoryview]


@dataclass(frozen=True)
class Bounds:
    """A half-open rectangle: min corner inclusive, max corner exclusive."""

    min_x: int = 0
    min_y: int = 0
    max_x: int = 0
    max_y: int = 0

    @property
    def dx(self) -> int:
        return self.max_x - self.min_x

    @property
    def dy(self) -> int:
        return self.max_y - self.min_y

    def is_empty(self) -> bool:
        return self.min_x >= self.max_x or self.min_y >= self.max_y

    def contains(self, x: int, y: int) -> bool:
        return self.min_x <= x < self.max_x and self.min_y <= y < self.max_y

    def intersect(self, other: Bounds) -> Bounds:
        """The overlap of two rectangles; the zero rectangle if they do not overlap."""
        result = Bounds(
            max(self.min_x, other.min_x),
            max(self.min_y, other.min_y),
            min(self.max_x, other.max_x),
            min(self.max_y, other.max_y),
        )
        return Bounds() if result.is_empty() else result


@dataclass(frozen=True)
class RGBColor:
    """An 8-bit-per-channel colour."""

    r: int = 0
    g: int = 0
    b: int = 0

    def rgba(self) -> tuple[int, int, int, int]:
        return self.r, self.g, self.b, 1


def _components(color: Any) -> tuple[int, int, int]:
    if hasattr(color, "rgba"):
        r, g, b, _ = color.rgba()
    else:
        r, g, b = tuple(color)[:3]
    return r & 0xFF, g & 0xFF, b & 0xFF


@dataclass
class RGBImage:
    """Pixels stored row by row, three bytes each, ``stride`` bytes per row."""

    pix: PixelBuffer = field(default_factory=bytearray)
    stride: int = 0
    rect: Bounds = field(default_factory=Bounds)

    def pix_offset(self, x: int, y: int) -> int:
        """Index in ``pix`` of the first byte of the pixel at (x, y)."""
        return (y - self.rect.min_y) * self.stride + (x - self.rect.min_x) * 3

    def rgb_at(self, x: int, y: int) -> RGBColor:
        """The pixel at (x, y); black outside the bounds."""
        if not self.rect.contains(x, y):
            return RGBColor()
        i = self.pix_offset(x, y)
        return RGBColor(self.pix[i], self.pix[i + 1], self.pix[i + 2])

    def at(self, x: int, y: int) -> tuple[int, int, int, int]:
        """The pixel at (x, y) as an (r, g, b, a) tuple with alpha 1."""
        return self.rgb_at(x, y).rgba()

    def set(self, x: int, y: int, color: Any) -> None:
        """Store a colour given as an RGB(A) sequence or an object with ``rgba()``.

        Points outside the bounds are ignored.
        """
        if not self.rect.contains(x, y):
            return
        i = self.pix_offset(x, y)
        self.pix[i : i + 3] = bytes(_components(color))

    def set_rgb(self, x: int, y: int, color: RGBColor) -> None:
        """Store a colour with ``r``, ``g`` and ``b`` attributes."""
        if not self.rect.contains(x, y):
            return
        i = self.pix_offset(x, y)
        self.pix[i : i + 3] = bytes((color.r & 0xFF, color.g & 0xFF, color.b & 0xFF))

    def sub_image(self, bounds: Bounds) -> RGBImage:
        """The part of the image inside ``bounds``, sharing its pixels."""
        bounds = bounds.intersect(self.rect)
        if bounds.is_empty():
            return RGBImage()
        i = self.pix_offset(bounds.min_x, bounds.min_y)
        return RGBImage(pix=memoryview(self.pix)[i:], stride=self.stride, rect=bounds)

    def opaque(self) -> bool:
        """Whether the red byte of every pixel after the first in each row is 0xff."""
        if self.rect.is_empty():
            return True
        row_start = 0
        for _ in range(self.rect.dy):
            if any(v != 0xFF for v in self.pix[row_start + 3 : row_start + self.rect.dx * 3 : 3]):
                return False
            row_start += self.stride
        return True


def new_rgb_image(bounds: Bounds) -> RGBImage:
    """A black image covering ``bounds``."""
    width, height = bounds.dx, bounds.dy
    return RGBImage(pix=bytearray(3 * width * height), stride=3 * width, rect=bounds)


__all__: Sequence[str] = ("Bounds", "RGBColor", "RGBImage", "new_rgb_image")