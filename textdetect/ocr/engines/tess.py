import logging
import math
import os
import threading
from io import BytesIO
from pathlib import Path
from typing import Iterator, Optional

import pytesseract
from PIL import Image
from pytesseract import Output  # type: ignore

from ...config import Settings
from ...schema import OcrToken, Rect
from ..tessdata import locate
from .itxt import EngineUnavailable, ITxtExtractor

logger = logging.getLogger("textdetect")

# image_to_data row level for single words
_WORD_LEVEL = 5


def _cfg(psm: int, tessdata_dir: Optional[Path]) -> str:
    # oem 1 = LSTM only
    cfg = f"--oem 1 --psm {psm}"
    if tessdata_dir is not None:
        cfg += f' --tessdata-dir "{tessdata_dir}"'
    return cfg


def _safe_float(x) -> float:
    try:
        return float(x)
    except (TypeError, ValueError):
        return float("nan")


class TesseractExtractor(ITxtExtractor):
    """
    Word-level Tesseract binding.

    One instance is one engine handle: calls through the same handle are
    serialised, so a handle can be shared between threads.
    """

    name = "tesseract"

    def __init__(self, language: str = "eng", settings: Optional[Settings] = None):
        self.settings = settings or Settings.from_env()
        self.language = language
        self._lock = threading.Lock()
        self._located = False
        self._tessdata_dir: Optional[Path] = None
        self._reason: Optional[str] = None

        cmd = self.settings.tesseract_cmd
        if cmd and os.path.exists(cmd):
            pytesseract.pytesseract.tesseract_cmd = cmd

    def probe(self) -> Optional[str]:
        with self._lock:
            if not self._located:
                self._tessdata_dir, self._reason = locate(self.language, self.settings)
                self._located = True
                if self._reason:
                    logger.info("tesseract unavailable: %s", self._reason)
            return self._reason

    def run(self, image_png: bytes, psm: int = 3) -> Iterator[OcrToken]:
        reason = self.probe()
        if reason:
            raise EngineUnavailable(reason)

        with self._lock:
            try:
                img = Image.open(BytesIO(image_png))
                data = pytesseract.image_to_data(
                    img,
                    lang=self.language,
                    config=_cfg(psm, self._tessdata_dir),
                    output_type=Output.DICT,
                )
            except pytesseract.TesseractNotFoundError as e:
                raise EngineUnavailable(f"tesseract binary not found: {e}") from e
            except pytesseract.TesseractError as e:
                raise EngineUnavailable(f"tesseract failed: {e}") from e

        n = len(data.get("text", []))
        for i in range(n):
            if int(data.get("level", [_WORD_LEVEL] * n)[i]) != _WORD_LEVEL:
                continue
            conf = _safe_float(data.get("conf", ["-1"] * n)[i])
            if math.isnan(conf):
                continue
            bbox = Rect.from_xywh(
                int(data["left"][i]),
                int(data["top"][i]),
                int(data["width"][i]),
                int(data["height"][i]),
            )
            yield OcrToken(bbox, str(data["text"][i] or ""), conf)
