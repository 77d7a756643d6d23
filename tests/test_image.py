import io
import struct

import pytest

from rfbkit.connection import Connection
from rfbkit.image import (
    Color,
    Rectangle,
    UnsupportedEncodingError,
    colors_to_image,
    new_color_map,
)
from rfbkit.pixel_format import PIXEL_FORMAT_8BIT, PIXEL_FORMAT_16BIT, PIXEL_FORMAT_32BIT


class _Duplex:
    def __init__(self, incoming=b""):
        self.incoming = io.BytesIO(incoming)
        self.sent = bytearray()

    def read(self, n):
        return self.incoming.read(n)

    def write(self, data):
        self.sent += data
        return len(data)

    def flush(self):
        pass

    def close(self):
        pass


def _conn(incoming=b"", pf=PIXEL_FORMAT_32BIT):
    conn = Connection(_Duplex(incoming))
    conn.pixel_format = pf
    return conn


class _FakeEncoding:
    type = 7

    def __init__(self):
        self.read_rects = []

    def read(self, conn, rect):
        self.read_rects.append((rect.x, rect.y, conn.read(rect.area())))

    def write(self, conn, rect):
        conn.write(b"\xaa" * rect.area())


def test_color_write_32bit_little_endian():
    conn = _conn()
    Color(pf=PIXEL_FORMAT_32BIT, r=1, g=2, b=3).write(conn)
    assert bytes(conn.stream.sent) == b"\x03\x02\x01\x00"


@pytest.mark.parametrize("pf", [PIXEL_FORMAT_32BIT, PIXEL_FORMAT_16BIT])
def test_color_round_trip(pf):
    writer = _conn(pf=pf)
    Color(pf=pf, r=10, g=11, b=12).write(writer)
    reader = _conn(bytes(writer.stream.sent), pf=pf)
    color = Color(pf=pf).read(reader)
    if pf is PIXEL_FORMAT_32BIT:
        assert (color.r, color.g, color.b) == (10, 11, 12)
    else:
        # 16-bit shifts overlap, so only the size of the wire form is fixed.
        assert len(writer.stream.sent) == 2


def test_color_read_from_color_map():
    cm = new_color_map()
    cm[5].r, cm[5].g, cm[5].b = 100, 200, 300
    conn = _conn(b"\x05", pf=PIXEL_FORMAT_8BIT)
    color = Color(pf=PIXEL_FORMAT_8BIT, cm=cm).read(conn)
    assert (color.r, color.g, color.b, color.cm_index) == (100, 200, 300, 5)


def test_color_read_empty_map_entry_is_black():
    conn = _conn(b"\x09", pf=PIXEL_FORMAT_8BIT)
    color = Color(pf=PIXEL_FORMAT_8BIT, cm=[None] * 256, r=4).read(conn)
    assert (color.r, color.g, color.b, color.cm_index) == (0, 0, 0, 9)


def test_color_write_indexed_uses_map_index():
    conn = _conn(pf=PIXEL_FORMAT_8BIT)
    Color(pf=PIXEL_FORMAT_8BIT, cm_index=42).write(conn)
    assert bytes(conn.stream.sent) == bytes([42])


def test_new_color_map_entries_are_independent():
    cm = new_color_map()
    cm[0].r = 99
    assert len(cm) == 256
    assert cm[1].r == 0


def test_rectangle_str():
    rect = Rectangle(x=1, y=2, width=3, height=4, enc_type=7)
    assert str(rect) == "rect x: 1, y: 2, width: 3, height: 4, enc: 7"


def test_rectangle_area():
    assert Rectangle(width=6, height=5).area() == 30


def test_rectangle_round_trip():
    enc = _FakeEncoding()
    writer = _conn()
    Rectangle(x=1, y=2, width=2, height=3, enc_type=7, enc=enc).write(writer)
    data = bytes(writer.stream.sent)
    assert data[:12] == struct.pack(">HHHHi", 1, 2, 2, 3, 7)

    reader = _conn(data)
    reader.encodings = [enc]
    rect = Rectangle().read(reader)
    assert (rect.x, rect.y, rect.width, rect.height, rect.enc_type) == (1, 2, 2, 3, 7)
    assert rect.enc is enc
    assert enc.read_rects == [(1, 2, b"\xaa" * 6)]


def test_rectangle_read_unsupported_encoding():
    reader = _conn(struct.pack(">HHHHi", 0, 0, 1, 1, 99))
    reader.encodings = [_FakeEncoding()]
    with pytest.raises(UnsupportedEncodingError):
        Rectangle().read(reader)


def test_rectangle_write_without_encoding():
    with pytest.raises(UnsupportedEncodingError):
        Rectangle(enc_type=3).write(_conn())


def test_colors_to_image_layout():
    pix = colors_to_image(0, 0, 2, 1, [Color(r=0x1234, g=0x5678, b=0x9ABC)])
    assert len(pix) == 16
    assert bytes(pix[:8]) == b"\x12\x34\x56\x78\x9a\xbc\x00\x01"
    assert bytes(pix[8:]) == bytes(8)


def test_colors_to_image_too_many_colors():
    with pytest.raises(ValueError):
        colors_to_image(0, 0, 1, 1, [Color(), Color()])