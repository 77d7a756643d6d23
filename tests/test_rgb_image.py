import pytest

from rfbkit.rgb_image import Bounds, RGBColor, RGBImage, new_rgb_image


def test_new_image_size_and_stride():
    img = new_rgb_image(Bounds(0, 0, 4, 3))
    assert len(img.pix) == 3 * 4 * 3
    assert img.stride == 3 * 4
    assert img.at(1, 1) == (0, 0, 0, 1)


def test_pix_offset_relative_to_origin():
    img = new_rgb_image(Bounds(2, 3, 6, 5))
    assert img.pix_offset(2, 3) == 0
    assert img.pix_offset(3, 3) == 3
    assert img.pix_offset(2, 4) == img.stride


def test_set_rgb_round_trip():
    img = new_rgb_image(Bounds(0, 0, 5, 5))
    img.set_rgb(2, 3, RGBColor(10, 20, 30))
    assert img.rgb_at(2, 3) == RGBColor(10, 20, 30)
    assert img.at(2, 3) == (10, 20, 30, 1)


@pytest.mark.parametrize("color", [(7, 8, 9), (7, 8, 9, 255), RGBColor(7, 8, 9)])
def test_set_round_trip(color):
    img = new_rgb_image(Bounds(0, 0, 3, 3))
    img.set(1, 2, color)
    assert img.rgb_at(1, 2) == RGBColor(7, 8, 9)


def test_out_of_bounds_ignored_and_black():
    img = new_rgb_image(Bounds(0, 0, 2, 2))
    before = bytes(img.pix)
    img.set(5, 5, (1, 2, 3))
    img.set_rgb(-1, 0, RGBColor(1, 2, 3))
    assert bytes(img.pix) == before
    assert img.rgb_at(2, 0) == RGBColor()


def test_rgb_color_rgba():
    assert RGBColor(1, 2, 3).rgba() == (1, 2, 3, 1)


def test_bounds_contains_half_open():
    b = Bounds(0, 0, 2, 2)
    assert b.contains(0, 0)
    assert b.contains(1, 1)
    assert not b.contains(2, 1)
    assert not b.contains(1, 2)


def test_bounds_intersect():
    a = Bounds(0, 0, 4, 4)
    b = Bounds(2, 1, 6, 3)
    assert a.intersect(b) == Bounds(2, 1, 4, 3)
    assert a.intersect(b) == b.intersect(a)


def test_bounds_intersect_disjoint_is_empty():
    result = Bounds(0, 0, 2, 2).intersect(Bounds(5, 5, 7, 7))
    assert result.is_empty()
    assert result == Bounds()


def test_sub_image_shares_pixels():
    img = new_rgb_image(Bounds(0, 0, 4, 4))
    sub = img.sub_image(Bounds(1, 1, 3, 3))
    assert sub.rect == Bounds(1, 1, 3, 3)
    sub.set_rgb(2, 2, RGBColor(40, 50, 60))
    assert img.rgb_at(2, 2) == RGBColor(40, 50, 60)
    img.set_rgb(1, 1, RGBColor(9, 9, 9))
    assert sub.rgb_at(1, 1) == RGBColor(9, 9, 9)
    assert sub.rgb_at(0, 0) == RGBColor()


def test_sub_image_outside_is_empty():
    img = new_rgb_image(Bounds(0, 0, 4, 4))
    sub = img.sub_image(Bounds(10, 10, 12, 12))
    assert sub.rect.is_empty()
    assert len(sub.pix) == 0


def test_opaque():
    img = new_rgb_image(Bounds(0, 0, 3, 2))
    assert not img.opaque()
    for y in range(2):
        for x in range(3):
            img.set(x, y, (255, 0, 0))
    assert img.opaque()
    img.set(1, 1, (0, 0, 0))
    assert not img.opaque()


def test_empty_image_is_opaque():
    assert RGBImage().opaque()
    assert new_rgb_image(Bounds(3, 3, 3, 5)).opaque()