"""
Connected-component extraction over edge candidates.

Components are 4-connected. OpenCV labels the candidate mask in one pass;
components whose pixel count exceeds the run-away cap are re-walked with
the stack flood fill so that the abort behaviour (and the fragments it
leaves behind) match a plain row-major scan.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2 as cv
import numpy as np

from ..config import HeuristicThresholds
from ..raster import Grid
from ..schema import Rect

logger = logging.getLogger("textdetect")

# (dx, dy); the order drives which pixels an aborted fill has already claimed
NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


@dataclass(frozen=True)
class Component:
    start: int  # row-major index of the first pixel of the fill
    rect: Rect
    pixel_count: int


def max_component_pixels(width: int, height: int, t: HeuristicThresholds = HeuristicThresholds()) -> int:
    return max(t.min_component_pixels, (width * height) // t.max_component_pixels_divisor)


def _finish(raw: Rect, bounds: Rect, t: HeuristicThresholds) -> Rect:
    return raw.clamp(bounds).inflate(t.component_padding, bounds)


def flood_fill(
    candidates: np.ndarray,
    visited: np.ndarray,
    edge_mask: np.ndarray,
    x: int,
    y: int,
    max_pixels: int,
    t: HeuristicThresholds = HeuristicThresholds(),
) -> Optional[Tuple[Rect, int]]:
    """Grow one component from (x, y) with an explicit stack.

    Returns the tight bounding box and pixel count, or None when the
    component is rejected (too small) or aborted (more than `max_pixels`).
    Rejected pixels stay visited but are cleared from `edge_mask`.
    """
    height, width = candidates.shape
    stack = [(x, y)]
    visited[y, x] = True
    edge_mask[y, x] = True
    collected: List[Tuple[int, int]] = []

    min_x = max_x = x
    min_y = max_y = y
    count = 0

    while stack:
        cx, cy = stack.pop()
        count += 1
        collected.append((cx, cy))

        if count > max_pixels:
            for px, py in collected:
                edge_mask[py, px] = False
            for px, py in stack:
                edge_mask[py, px] = False
            return None

        if cx < min_x:
            min_x = cx
        if cx > max_x:
            max_x = cx
        if cy < min_y:
            min_y = cy
        if cy > max_y:
            max_y = cy

        for dx, dy in NEIGHBOR_OFFSETS:
            nx, ny = cx + dx, cy + dy
            if nx < 0 or nx >= width or ny < 0 or ny >= height:
                continue
            if visited[ny, nx] or not candidates[ny, nx]:
                continue
            visited[ny, nx] = True
            edge_mask[ny, nx] = True
            stack.append((nx, ny))

    if count < t.min_component_pixels:
        for px, py in collected:
            edge_mask[py, px] = False
        return None

    return Rect(min_x, min_y, max_x + 1, max_y + 1), count


def extract_components(
    candidates: Grid, t: HeuristicThresholds = HeuristicThresholds()
) -> Tuple[List[Component], Grid]:
    """Return kept components (in scan order) and the edge mask of their pixels."""
    cand = np.ascontiguousarray(candidates.data, dtype=bool)
    height, width = cand.shape
    bounds = candidates.bounds
    edge_mask = np.zeros((height, width), dtype=bool)
    if height == 0 or width == 0 or not cand.any():
        return [], Grid(edge_mask)

    cap = max_component_pixels(width, height, t)
    n, labels, stats, _ = cv.connectedComponentsWithStats(cand.astype(np.uint8), connectivity=4)

    flat = labels.ravel()
    # label numbering is not guaranteed to follow raster order; recover it
    present, first = np.unique(flat, return_index=True)
    first_index = np.zeros(n, dtype=np.int64)
    first_index[present] = first
    areas = stats[:, cv.CC_STAT_AREA]

    keep = np.zeros(n, dtype=bool)
    keep[1:] = (areas[1:] >= t.min_component_pixels) & (areas[1:] <= cap)
    edge_mask |= keep[labels]

    components: List[Component] = []
    for k in np.flatnonzero(keep):
        x, y, w, h = (int(v) for v in stats[k, :4])
        rect = _finish(Rect(x, y, x + w, y + h), bounds, t)
        if rect.is_empty:
            continue
        components.append(Component(int(first_index[k]), rect, int(areas[k])))

    runaway = [int(k) for k in np.flatnonzero(areas > cap) if k != 0]
    if runaway:
        visited = np.zeros((height, width), dtype=bool)
        for k in runaway:
            for idx in np.flatnonzero(flat == k):
                y, x = divmod(int(idx), width)
                if visited[y, x]:
                    continue
                found = flood_fill(cand, visited, edge_mask, x, y, cap, t)
                if found is None:
                    continue
                raw, count = found
                rect = _finish(raw, bounds, t)
                if not rect.is_empty:
                    components.append(Component(int(idx), rect, count))
        logger.debug("components: %d run-away component(s) above %d px", len(runaway), cap)

    components.sort(key=lambda c: c.start)
    return components, Grid(edge_mask)
