from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np
import pytest

from textdetect.ocr.engines.itxt import EngineUnavailable, ITxtExtractor
from textdetect.raster import RasterView
from textdetect.schema import OcrToken, Rect

WHITE = 0xFFFFFFFF
BLACK = 0xFF000000


def blank(width: int, height: int, color: int = WHITE) -> np.ndarray:
    return np.full((height, width), color, dtype=np.uint32)


def draw_word(pixels: np.ndarray, left: int, top: int, blocks: int = 8, color: int = BLACK) -> None:
    """Stamp a row of 6x14 glyph-like blocks, 4px apart, like one rendered word."""
    for i in range(blocks):
        x = left + 10 * i
        pixels[top : top + 14, x : x + 6] = color


def word_raster(lines: Sequence[Tuple[int, int]] = ((20, 40),), width: int = 400, height: int = 200) -> RasterView:
    pixels = blank(width, height)
    for left, top in lines:
        draw_word(pixels, left, top)
    return RasterView.from_argb(pixels, width, height)


class FakeExtractor(ITxtExtractor):
    """Scripted engine: returns the same tokens for every variant it is asked about."""

    name = "fake"

    def __init__(
        self,
        tokens: Iterable[OcrToken] = (),
        reason: Optional[str] = None,
        fail_with: Optional[str] = None,
    ):
        self.tokens: List[OcrToken] = list(tokens)
        self.reason = reason
        self.fail_with = fail_with
        self.calls: List[bytes] = []

    def probe(self) -> Optional[str]:
        return self.reason

    def run(self, image_png: bytes, psm: int = 3) -> Iterator[OcrToken]:
        self.calls.append(image_png)
        if self.fail_with:
            raise EngineUnavailable(self.fail_with)
        yield from self.tokens


def token(x: int, y: int, w: int, h: int, text: str = "word", conf: float = 90.0) -> OcrToken:
    return OcrToken(Rect.from_xywh(x, y, w, h), text, conf)


@pytest.fixture
def word_image() -> RasterView:
    return word_raster()


@pytest.fixture
def two_line_image() -> RasterView:
    return word_raster(((20, 40), (20, 80)))


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "ENVIRONMENT",
        "ENV",
        "OCR_ENGINE",
        "TESSERACT_PATH",
        "TEXTDETECT_TESSDATA_PATH",
        "TESSDATA_PREFIX",
        "TEXTDETECT_TESSDATA_LANG",
        "OCR_VARIANTS",
        "OCR_PSM",
        "LOG_LEVEL",
        "TEXTDETECT_SHOW_ASCII",
    ):
        monkeypatch.delenv(name, raising=False)
