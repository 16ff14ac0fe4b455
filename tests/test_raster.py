from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from textdetect.raster import Grid, RasterView
from textdetect.schema import EMPTY, Rect


def test_rect_geometry():
    r = Rect.from_xywh(10, 20, 30, 40)
    assert (r.left, r.top, r.right, r.bottom) == (10, 20, 40, 60)
    assert r.as_xywh() == (10, 20, 30, 40)
    assert r.area == 1200
    assert not r.is_empty


def test_rect_intersects_requires_positive_overlap():
    a = Rect(0, 0, 10, 10)
    assert a.intersects(Rect(9, 9, 20, 20))
    assert not a.intersects(Rect(10, 0, 20, 10))  # touching edge only
    assert not a.intersects(Rect(0, 10, 10, 20))


def test_rect_clamp_and_inflate():
    bounds = Rect(0, 0, 100, 50)
    assert Rect(-5, -5, 20, 20).clamp(bounds) == Rect(0, 0, 20, 20)
    assert Rect(120, 0, 130, 10).clamp(bounds) is EMPTY
    assert Rect(1, 1, 5, 5).inflate(2, bounds) == Rect(0, 0, 7, 7)
    assert Rect(90, 40, 100, 50).inflate(4, bounds) == Rect(86, 36, 100, 50)
    r = Rect(3, 3, 5, 5)
    assert r.inflate(0, bounds) is r


def test_rect_line_metrics():
    a = Rect(0, 0, 10, 20)
    b = Rect(15, 5, 30, 25)
    assert a.vertical_overlap(b) == 15
    assert a.horizontal_gap(b) == 5
    assert b.horizontal_gap(a) == 5
    assert a.horizontal_gap(Rect(5, 0, 8, 3)) == 0


def test_grid_bounds_checked():
    g = Grid.zeros(4, 3)
    g.set(3, 2, True)
    assert g.get(3, 2)
    assert g.in_bounds(0, 0)
    assert not g.in_bounds(4, 0)
    with pytest.raises(IndexError):
        g.get(4, 0)
    with pytest.raises(IndexError):
        g.set(0, -1, True)


def test_grid_from_buffer_honours_stride():
    # 3 visible pixels per row, 5 stored
    flat = np.arange(10, dtype=np.uint32)
    g = Grid.from_buffer(flat, width=3, height=2, stride=5)
    assert g.width == 3 and g.height == 2
    assert g.data.tolist() == [[0, 1, 2], [5, 6, 7]]

    with pytest.raises(ValueError):
        Grid.from_buffer(flat, width=6, height=2, stride=5)
    with pytest.raises(ValueError):
        Grid.from_buffer(flat, width=3, height=3, stride=5)


def test_grid_from_little_endian_bytes():
    raw = np.array([0xFF102030, 0x80405060], dtype="<u4").tobytes()
    g = Grid.from_buffer(raw, width=2, height=1)
    assert int(g.get(0, 0)) == 0xFF102030
    assert int(g.get(1, 0)) == 0x80405060


def test_grid_activity_counts():
    g = Grid.zeros(5, 4)
    g.data[1, 1:4] = True
    g.data[2, 2] = True
    rect = Rect(0, 0, 5, 4)
    assert g.row_counts(rect).tolist() == [0, 3, 1, 0]
    assert g.column_counts(rect).tolist() == [0, 1, 2, 1, 0]
    assert g.count(Rect(2, 0, 10, 10)) == 3
    assert g.window(Rect(10, 10, 20, 20)).size == 0


def test_luminance_uses_integer_broadcast_weights():
    pixels = np.array([[0xFFFF0000, 0xFF00FF00, 0xFF0000FF, 0xFFFFFFFF]], dtype=np.uint32)
    raster = RasterView.from_argb(pixels, 4, 1)
    assert raster.luminance().tolist() == [[76, 149, 29, 255]]
    assert raster.luminance_at(0, 0) == 76


def test_transparent_pixels_read_as_white():
    pixels = np.array([[0x0F000000, 0x10000000]], dtype=np.uint32)
    raster = RasterView.from_argb(pixels, 2, 1)
    assert raster.luminance().tolist() == [[255, 0]]
    assert raster.luminance_at(0, 0) == 255
    assert raster.luminance_at(1, 0) == 0


def test_image_round_trip_keeps_channels():
    img = Image.new("RGBA", (3, 2), (10, 20, 30, 200))
    raster = RasterView.from_image(img)
    assert raster.argb(2, 1) == (200 << 24) | (10 << 16) | (20 << 8) | 30
    assert raster.to_image().getpixel((0, 0)) == (10, 20, 30, 200)


def test_from_bytes_and_coerce():
    buf = BytesIO()
    Image.new("RGB", (5, 4), (255, 255, 255)).save(buf, format="PNG")
    raster = RasterView.from_bytes(buf.getvalue())
    assert (raster.width, raster.height) == (5, 4)
    assert raster.argb(0, 0) == 0xFFFFFFFF

    assert RasterView.coerce(None) is None
    assert RasterView.coerce(raster) is raster
    assert RasterView.coerce(np.zeros((2, 3), dtype=np.uint32)).width == 3
    assert RasterView.coerce(np.zeros((2, 3, 3), dtype=np.uint8)).height == 2
    with pytest.raises(TypeError):
        RasterView.coerce("not an image")


def test_empty_raster():
    raster = RasterView.from_argb(np.zeros((0, 0), dtype=np.uint32), 0, 0)
    assert raster.is_empty
