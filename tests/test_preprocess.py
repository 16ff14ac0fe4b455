from io import BytesIO

import numpy as np
from PIL import Image

from textdetect.config import DEFAULT_VARIANTS
from textdetect.ocr.preprocess import VARIANTS, encode_png, variant_images
from textdetect.raster import RasterView


def _raster():
    # red text-ish pixel on a half transparent teal background
    pixels = np.full((4, 6), 0x8000C0C0, dtype=np.uint32)
    pixels[1, 2] = 0xFFFF2010
    return RasterView.from_argb(pixels, 6, 4)


def test_default_policy_order():
    names = [name for name, _ in variant_images(_raster())]
    assert names == list(DEFAULT_VARIANTS) == ["original", "inverted", "red", "green", "blue"]


def test_inverted_keeps_alpha():
    img = dict(variant_images(_raster(), ["inverted"]))["inverted"]
    assert img.mode == "RGBA"
    assert img.getpixel((2, 1)) == (0, 223, 239, 255)
    assert img.getpixel((0, 0)) == (255, 63, 63, 128)


def test_channel_isolation_becomes_gray():
    images = dict(variant_images(_raster(), ["red", "green", "blue"]))
    assert images["red"].getpixel((2, 1)) == (255, 255, 255, 255)
    assert images["green"].getpixel((2, 1)) == (32, 32, 32, 255)
    assert images["blue"].getpixel((2, 1)) == (16, 16, 16, 255)
    assert images["red"].getpixel((0, 0)) == (0, 0, 0, 128)


def test_original_round_trips():
    raster = _raster()
    img = dict(variant_images(raster, ["original"]))["original"]
    assert RasterView.from_image(img).pixels.data.tolist() == raster.pixels.data.tolist()


def test_unknown_variants_are_skipped(caplog):
    with caplog.at_level("WARNING", logger="textdetect"):
        out = variant_images(_raster(), ["nope", "green"])
    assert [n for n, _ in out] == ["green"]
    assert "nope" in caplog.text


def test_opt_in_variants_are_grayscale():
    images = dict(variant_images(_raster(), ["max_rgb", "clahe", "binary"]))
    assert set(images) == {"max_rgb", "clahe", "binary"}
    for img in images.values():
        assert img.mode == "L"
        assert img.size == (6, 4)
    # dark-on-light after thresholding
    assert np.asarray(images["binary"]).mean() >= 127
    assert set(VARIANTS) >= set(DEFAULT_VARIANTS)


def test_encode_png_is_decodable():
    raster = _raster()
    for _, img in variant_images(raster):
        data = encode_png(img)
        assert data[:8] == b"\x89PNG\r\n\x1a\n"
        assert Image.open(BytesIO(data)).size == (6, 4)
