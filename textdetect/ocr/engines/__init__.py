import threading
from typing import Dict, Optional, Tuple

from ...config import Settings
from .itxt import EngineUnavailable, ITxtExtractor
from .tess import TesseractExtractor

try:
    from .ppocr import PPOCRExtractor  # optional
except ImportError:  # pragma: no cover
    PPOCRExtractor = None  # type: ignore


class MissingEngine(ITxtExtractor):
    """Stand-in handle for an engine whose package is not installed; it never runs."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason

    def probe(self) -> Optional[str]:
        return self.reason

    def run(self, image_png: bytes, psm: int = 3):
        raise EngineUnavailable(self.reason)


def make_extractor(name: Optional[str], settings: Optional[Settings] = None, language: Optional[str] = None) -> Optional[ITxtExtractor]:
    """
    Factory. Supported names:
      - 'tesseract' (default)
      - 'ppocr' / 'rapidocr' / 'paddle'  (requires rapidocr_onnxruntime)
      - 'none' / 'off'  -> None, heuristic detection only
    """
    settings = settings or Settings.from_env()
    n = (name or "tesseract").strip().lower()
    if n in ("none", "off", "heuristic"):
        return None
    if n in ("ppocr", "rapidocr", "paddle"):
        if PPOCRExtractor is None:
            return MissingEngine(n, "PPOCR engine not available (pip install rapidocr_onnxruntime)")
        return PPOCRExtractor()
    return TesseractExtractor(language or settings.language, settings=settings)


class EnginePool:
    """One engine handle per (engine, language), created on first use."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings.from_env()
        self._lock = threading.Lock()
        self._engines: Dict[Tuple[str, str], Optional[ITxtExtractor]] = {}

    def get(self, name: Optional[str] = None, language: Optional[str] = None) -> Optional[ITxtExtractor]:
        key = ((name or self.settings.ocr_engine).strip().lower(), language or self.settings.language)
        with self._lock:
            if key not in self._engines:
                self._engines[key] = make_extractor(key[0], self.settings, language=key[1])
            return self._engines[key]


__all__ = [
    "EngineUnavailable",
    "EnginePool",
    "ITxtExtractor",
    "MissingEngine",
    "TesseractExtractor",
    "PPOCRExtractor",
    "make_extractor",
]
