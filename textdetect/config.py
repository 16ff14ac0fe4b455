from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_VARIANTS: Tuple[str, ...] = ("original", "inverted", "red", "green", "blue")


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_csv(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    # ordered: the variant list is a policy, not a set
    parts = [p.strip().lower() for p in raw.split(",") if p.strip()]
    return tuple(dict.fromkeys(parts)) or default


def _get_str(name: str) -> Optional[str]:
    raw = (os.getenv(name) or "").strip()
    return raw or None


@dataclass(frozen=True)
class HeuristicThresholds:
    """Empirically tuned constants of the pixel-heuristic detector."""

    # edge classifier
    edge_threshold: int = 52
    secondary_edge_threshold: int = 26
    min_alpha: int = 16

    # connected components
    min_component_pixels: int = 32
    max_component_pixels_divisor: int = 12
    component_padding: int = 2

    # merge
    merge_padding: int = 4

    # refine: degenerate shapes
    min_refine_size: int = 6
    narrow_aspect: int = 6
    narrow_max_width: int = 120
    scrollbar_min_height: int = 300
    scrollbar_max_width: int = 160

    # refine: splitting
    split_min_area: int = 1500
    split_min_height: int = 10
    split_min_width: int = 20
    row_activity_min: int = 6
    row_activity_divisor: int = 30
    row_separator_min: int = 2
    row_separator_divisor: int = 40
    column_activity_divisor: int = 7
    column_gap_max: int = 12
    min_column_width: int = 6
    span_min_width: int = 12
    span_min_density: float = 0.02

    # keep/drop filter
    keep_min_width: int = 18
    keep_min_height: int = 8
    keep_max_height: int = 160
    keep_min_aspect: float = 1.6
    keep_min_density: float = 0.02
    dense_min_density: float = 0.18
    dense_min_column_fill: float = 0.92

    # consolidation
    align_min_overlap: float = 0.6
    align_gap_height_factor: int = 2
    align_max_gap: int = 28


@dataclass(frozen=True)
class OcrThresholds:
    """Constants of the OCR-assisted word/line clustering."""

    min_confidence: float = 45.0  # percent
    min_width: int = 12
    min_height: int = 8
    same_line_overlap: float = 0.55
    split_min_gap: float = 28.0
    split_max_gap: float = 160.0
    split_height_factor: float = 1.6
    merge_padding: int = 6
    merge_min_overlap: float = 0.4
    merge_gap_width_factor: float = 0.08
    merge_max_gap: float = 18.0


@dataclass(frozen=True)
class Settings:
    # General
    environment: str
    log_level: str

    # OCR engine
    ocr_engine: str  # tesseract | ppocr | none
    tesseract_cmd: Optional[str]
    tessdata_path: Optional[str]
    tessdata_prefix: Optional[str]
    language: str
    ocr_psm: int

    # Preprocessing policy; see ocr.preprocess for the known names
    ocr_variants: Tuple[str, ...]

    # Debug CLI
    show_ascii: bool

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            environment=(os.getenv("ENVIRONMENT") or os.getenv("ENV") or "local").strip() or "local",
            log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
            ocr_engine=(os.getenv("OCR_ENGINE") or "tesseract").strip().lower(),
            tesseract_cmd=_get_str("TESSERACT_PATH"),
            tessdata_path=_get_str("TEXTDETECT_TESSDATA_PATH"),
            tessdata_prefix=_get_str("TESSDATA_PREFIX"),
            language=_get_str("TEXTDETECT_TESSDATA_LANG") or "eng",
            ocr_psm=_get_int("OCR_PSM", 3),
            ocr_variants=_get_csv("OCR_VARIANTS", DEFAULT_VARIANTS),
            show_ascii=_get_bool("TEXTDETECT_SHOW_ASCII", False),
        )
