"""
OCR-assisted text region detection: preprocessing variants, engine
bindings and word/line clustering.
"""

from .engines import EnginePool, EngineUnavailable, ITxtExtractor, make_extractor
from .router import find_text_regions_ocr

__all__ = [
    "EnginePool",
    "EngineUnavailable",
    "ITxtExtractor",
    "find_text_regions_ocr",
    "make_extractor",
]
