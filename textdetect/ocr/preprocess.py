from __future__ import annotations

import logging
from io import BytesIO
from typing import Callable, Dict, Iterable, List, Tuple

import cv2 as cv
import numpy as np
from PIL import Image

from ..config import DEFAULT_VARIANTS
from ..raster import RasterView

logger = logging.getLogger("textdetect")


def _rgba(r: np.ndarray, g: np.ndarray, b: np.ndarray, a: np.ndarray) -> Image.Image:
    return Image.fromarray(np.ascontiguousarray(np.dstack((r, g, b, a))))


def _original(raster: RasterView) -> Image.Image:
    return raster.to_image()


def _inverted(raster: RasterView) -> Image.Image:
    # alpha is left alone
    a, r, g, b = raster.channels()
    return _rgba(255 - r, 255 - g, 255 - b, a)


def _channel(index: int) -> Callable[[RasterView], Image.Image]:
    def _isolate(raster: RasterView) -> Image.Image:
        a, r, g, b = raster.channels()
        c = (r, g, b)[index]
        return _rgba(c, c, c, a)

    return _isolate


def _max_rgb(raster: RasterView) -> Image.Image:
    # helps colored text on dark UI
    _, r, g, b = raster.channels()
    return Image.fromarray(np.maximum(np.maximum(r, g), b))


def _clahe(raster: RasterView) -> Image.Image:
    clahe = cv.createCLAHE(clipLimit=2.0, tileGridSize=(8, 8))
    return Image.fromarray(clahe.apply(raster.luminance()))


def _otsu(gray: np.ndarray) -> np.ndarray:
    _, bw = cv.threshold(gray, 0, 255, cv.THRESH_BINARY + cv.THRESH_OTSU)
    return bw


def _ensure_white_bg(binary: np.ndarray) -> np.ndarray:
    # Prefer black text on white bg for Tesseract.
    return (255 - binary) if binary.mean() < 127 else binary


def _binary(raster: RasterView) -> Image.Image:
    return Image.fromarray(_ensure_white_bg(_otsu(raster.luminance())))


VARIANTS: Dict[str, Callable[[RasterView], Image.Image]] = {
    "original": _original,
    "inverted": _inverted,
    "red": _channel(0),
    "green": _channel(1),
    "blue": _channel(2),
    # opt-in extras
    "max_rgb": _max_rgb,
    "clahe": _clahe,
    "binary": _binary,
}


def variant_images(raster: RasterView, names: Iterable[str] = DEFAULT_VARIANTS) -> List[Tuple[str, Image.Image]]:
    """Returns list of (variant_name, image) in policy order; unknown names are skipped."""
    out: List[Tuple[str, Image.Image]] = []
    for name in names:
        make = VARIANTS.get(name)
        if make is None:
            logger.warning("unknown OCR variant %r ignored", name)
            continue
        out.append((name, make(raster)))
    return out


def encode_png(image: Image.Image) -> bytes:
    buf = BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()
