from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from ..config import DEFAULT_VARIANTS, OcrThresholds
from ..raster import RasterView
from ..schema import DetectedWord, OcrOutcome, OcrRegions, OcrUnavailable
from .clustering import filter_words, group_words_into_lines, merge_lines_into_regions
from .engines import EngineUnavailable, ITxtExtractor
from .preprocess import encode_png, variant_images

logger = logging.getLogger("textdetect")


def find_text_regions_ocr(
    raster: RasterView,
    extractor: Optional[ITxtExtractor],
    *,
    variants: Iterable[str] = DEFAULT_VARIANTS,
    psm: int = 3,
    thresholds: OcrThresholds = OcrThresholds(),
) -> OcrOutcome:
    """
    OCR-assisted detection.
    Strategy:
      - Build every preprocessing variant of the policy (original, inverted, R/G/B by default)
      - Run the engine once per variant and pool the filtered words
      - Cluster the pooled words into lines, then lines into padded regions
    An engine that cannot run yields OcrUnavailable instead of raising.
    """
    if extractor is None:
        return OcrUnavailable("no OCR engine configured")

    reason = extractor.probe()
    if reason:
        return OcrUnavailable(reason)

    bounds = raster.bounds
    words: List[DetectedWord] = []
    for vname, image in variant_images(raster, variants):
        try:
            found = filter_words(extractor.run(encode_png(image), psm=psm), bounds, thresholds)
        except EngineUnavailable as e:
            return OcrUnavailable(str(e))
        logger.debug("ocr[%s:%s] words=%d", extractor.name, vname, len(found))
        words.extend(found)

    if not words:
        return OcrRegions([], word_count=0, line_count=0)

    lines = group_words_into_lines(words, bounds, thresholds)
    regions = merge_lines_into_regions(lines, bounds, thresholds)
    logger.debug("ocr[%s] words=%d lines=%d regions=%d", extractor.name, len(words), len(lines), len(regions))
    return OcrRegions(regions, word_count=len(words), line_count=len(lines))
