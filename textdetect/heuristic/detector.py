from __future__ import annotations

import logging
from typing import List

from ..config import HeuristicThresholds
from ..raster import RasterView
from ..schema import DetectedTextRegion, Rect
from .components import extract_components
from .edges import EdgeClassifier
from .refine import consolidate_regions, merge_components, refine_component

logger = logging.getLogger("textdetect")


def find_text_regions_heuristic(
    raster: RasterView, thresholds: HeuristicThresholds = HeuristicThresholds()
) -> List[DetectedTextRegion]:
    """Contrast-based text localisation; every region reports confidence 0."""
    if raster is None or raster.is_empty:
        return []

    bounds = raster.bounds
    classifier = EdgeClassifier(raster, thresholds)
    components, edge_mask = extract_components(classifier.candidates, thresholds)
    if not components:
        return []

    merged = merge_components((c.rect for c in components), bounds, thresholds)
    logger.debug("heuristic: components=%d merged=%d", len(components), len(merged))
    if not merged:
        return []

    refined: List[Rect] = []
    for rect in merged:
        refine_component(rect, edge_mask, bounds, thresholds, output=refined)
    if not refined:
        return []

    consolidated = consolidate_regions(refined, bounds, edge_mask, thresholds)
    return [DetectedTextRegion(rect, 0.0) for rect in consolidated]
