"""
Detection orchestrator: OCR-assisted clustering first, contrast heuristic as fallback.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Union

import numpy as np
from PIL import Image

from .config import DEFAULT_VARIANTS, HeuristicThresholds, OcrThresholds, Settings
from .heuristic import find_text_regions_heuristic
from .ocr import ITxtExtractor, find_text_regions_ocr
from .raster import RasterView
from .schema import DetectedTextRegion, DetectionResult, OcrRegions, OcrUnavailable, Rect

logger = logging.getLogger("textdetect")

ImageLike = Union[RasterView, Image.Image, np.ndarray, None]

STRATEGIES = ("auto", "ocr", "heuristic")


def detect(
    image: ImageLike,
    ocr: Optional[ITxtExtractor] = None,
    *,
    settings: Optional[Settings] = None,
    strategy: str = "auto",
    heuristic_thresholds: HeuristicThresholds = HeuristicThresholds(),
    ocr_thresholds: OcrThresholds = OcrThresholds(),
) -> DetectionResult:
    """Run the detection state machine and report which strategy produced the regions.

    `ocr` is the caller-owned engine handle; without one the OCR step is
    reported unavailable. `strategy` may pin a single path ("ocr" or
    "heuristic"); "auto" tries OCR and falls back to the heuristic.
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"unknown strategy {strategy!r}; expected one of {', '.join(STRATEGIES)}")

    raster = RasterView.coerce(image)
    if raster is None or raster.is_empty:
        return DetectionResult([], "none")

    unavailable: Optional[str] = None
    if strategy in ("auto", "ocr"):
        outcome = find_text_regions_ocr(
            raster,
            ocr,
            variants=settings.ocr_variants if settings else DEFAULT_VARIANTS,
            psm=settings.ocr_psm if settings else 3,
            thresholds=ocr_thresholds,
        )
        if isinstance(outcome, OcrRegions) and outcome.regions:
            logger.debug("using OCR result set (%d regions)", len(outcome.regions))
            return DetectionResult(list(outcome.regions), "ocr")
        if isinstance(outcome, OcrUnavailable):
            unavailable = outcome.reason
            logger.info("OCR unavailable: %s", outcome.reason)
        else:
            logger.debug("OCR returned zero regions, falling back to heuristic detector")
        if strategy == "ocr":
            return DetectionResult([], "none", unavailable)

    regions = find_text_regions_heuristic(raster, heuristic_thresholds)
    return DetectionResult(regions, "heuristic" if regions else "none", unavailable)


def find_text_regions_detailed(image: ImageLike, ocr: Optional[ITxtExtractor] = None, **kwargs) -> List[DetectedTextRegion]:
    """Locate areas that likely contain rendered text glyphs; empty when none."""
    return detect(image, ocr, **kwargs).regions


def find_text_regions(image: ImageLike, ocr: Optional[ITxtExtractor] = None, **kwargs) -> List[Rect]:
    return [r.bounds for r in find_text_regions_detailed(image, ocr, **kwargs)]
