"""
Rectangle merge / refine / filter / consolidate passes of the heuristic detector.

All passes are deterministic for a given input order. Activity is always
measured on the edge mask of kept components.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np

from ..config import HeuristicThresholds
from ..raster import Grid
from ..schema import Rect

logger = logging.getLogger("textdetect")


@dataclass(frozen=True)
class RowRange:
    start: int
    end: int


@dataclass(frozen=True)
class ColumnRange:
    start: int
    end: int


# ---------- pass 1: merge ----------
def merge_components(rects: Iterable[Rect], bounds: Rect, t: HeuristicThresholds = HeuristicThresholds()) -> List[Rect]:
    """Union rectangles whose padded forms intersect until no pair does.

    Equivalent to repeatedly merging the first intersecting pair (i, j) in
    lexicographic order: after growing rect i, only rows before i can gain
    a new partner, and their first one is necessarily i.
    """
    working = list(rects)
    pad = t.merge_padding
    i = 0
    while i < len(working):
        grown = working[i].inflate(pad, bounds)
        for j in range(i + 1, len(working)):
            if grown.intersects(working[j].inflate(pad, bounds)):
                working[i] = working[i].union(working[j]).clamp(bounds)
                del working[j]
                grown = working[i].inflate(pad, bounds)
                for earlier in range(i):
                    if working[earlier].inflate(pad, bounds).intersects(grown):
                        i = earlier
                        break
                break
        else:
            i += 1
    return working


# ---------- pass 3: keep/drop ----------
def edge_stats(rect: Rect, edge_mask: Grid) -> Tuple[int, int]:
    """(edge pixel count, number of columns holding at least one edge pixel)."""
    window = edge_mask.window(rect)
    if window.size == 0:
        return 0, 0
    per_column = np.count_nonzero(window, axis=0)
    return int(per_column.sum()), int(np.count_nonzero(per_column))


def should_keep(rect: Rect, edge_mask: Grid, t: HeuristicThresholds = HeuristicThresholds()) -> bool:
    if rect.width < t.keep_min_width or rect.height < t.keep_min_height:
        return False
    if rect.height > t.keep_max_height:
        return False
    if rect.width / float(rect.height) < t.keep_min_aspect:
        return False

    edges, active_columns = edge_stats(rect, edge_mask)
    density = edges / float(rect.width * rect.height)
    column_fill = active_columns / float(max(1, rect.width))
    if density < t.keep_min_density:
        return False
    if column_fill >= t.dense_min_column_fill and density >= t.dense_min_density:
        logger.debug("drop dense rect=%s density=%.3f fill=%.2f", rect.as_xywh(), density, column_fill)
        return False
    return True


# ---------- pass 2: refine ----------
def identify_row_ranges(rect: Rect, edge_mask: Grid, t: HeuristicThresholds = HeuristicThresholds()) -> List[RowRange]:
    rows: List[RowRange] = []
    separator = max(t.row_separator_min, rect.height // t.row_separator_divisor)
    threshold = max(t.row_activity_min, rect.width // t.row_activity_divisor)

    in_row = False
    row_start = rect.top
    whitespace_run = 0

    for offset, activity in enumerate(edge_mask.row_counts(rect).tolist()):
        y = rect.top + offset
        if activity > threshold:
            if not in_row:
                in_row = True
                row_start = y
            whitespace_run = 0
        elif in_row:
            whitespace_run += 1
            if whitespace_run >= separator:
                row_end = y - whitespace_run + 1
                if row_end > row_start:
                    rows.append(RowRange(row_start, row_end))
                in_row = False

    if in_row:
        rows.append(RowRange(row_start, rect.bottom))
    return rows


def identify_column_ranges(
    row: RowRange, rect: Rect, edge_mask: Grid, t: HeuristicThresholds = HeuristicThresholds()
) -> List[ColumnRange]:
    columns: List[ColumnRange] = []
    if rect.width <= 0:
        return columns

    line_height = max(1, row.end - row.start)
    counts = edge_mask.column_counts(Rect(rect.left, row.start, rect.right, row.end)).tolist()
    threshold = max(1, line_height // t.column_activity_divisor)
    gap_tolerance = max(1, min(t.column_gap_max, line_height // 2))

    def _add(start: int, last: int) -> None:
        if last < start or last - start + 1 < t.min_column_width:
            return
        columns.append(ColumnRange(rect.left + start, rect.left + last + 1))

    in_region = False
    region_start = last_active = gap = 0
    first_any = last_any = -1
    total = 0

    for offset, count in enumerate(counts):
        if count > 0:
            if first_any == -1:
                first_any = offset
            last_any = offset
            total += count

        if count >= threshold:
            if not in_region:
                in_region = True
                region_start = offset
            last_active = offset
            gap = 0
        elif in_region:
            gap += 1
            if gap > gap_tolerance:
                _add(region_start, last_active)
                in_region = False
                gap = 0

    if in_region:
        _add(region_start, last_active)

    # sparse rows: fall back to one span over everything that moved
    if not columns and first_any != -1 and last_any > first_any:
        span = last_any - first_any + 1
        density = total / float(max(1, span * line_height))
        if span >= t.span_min_width and density >= t.span_min_density:
            columns.append(ColumnRange(rect.left + first_any, rect.left + last_any + 1))

    return columns


def is_degenerate(rect: Rect, t: HeuristicThresholds = HeuristicThresholds()) -> bool:
    if rect.width < t.min_refine_size or rect.height < t.min_refine_size:
        return True
    if rect.height > rect.width * t.narrow_aspect and rect.width < t.narrow_max_width:
        return True
    # scrollbars and similar tall chrome
    return rect.height >= t.scrollbar_min_height and rect.width <= t.scrollbar_max_width


def refine_component(
    rect: Rect, edge_mask: Grid, bounds: Rect, t: HeuristicThresholds = HeuristicThresholds(), output: Optional[List[Rect]] = None
) -> List[Rect]:
    out: List[Rect] = [] if output is None else output
    rect = rect.clamp(bounds)
    if is_degenerate(rect, t):
        return out

    allow_split = (
        rect.area > t.split_min_area
        and rect.height > t.split_min_height
        and rect.width > t.split_min_width
    )
    if not allow_split:
        if should_keep(rect, edge_mask, t):
            out.append(rect)
        return out

    rows = identify_row_ranges(rect, edge_mask, t)
    if rect.area > 20000:
        logger.debug("refine %s rows=%d", rect.as_xywh(), len(rows))
    if not rows:
        if should_keep(rect, edge_mask, t):
            out.append(rect)
        return out

    for row in rows:
        for column in identify_column_ranges(row, rect, edge_mask, t):
            candidate = Rect(column.start, row.start, column.end, row.end).inflate(1, bounds)
            if should_keep(candidate, edge_mask, t):
                out.append(candidate)
    return out


# ---------- pass 4: consolidate ----------
def are_nearly_aligned(a: Rect, b: Rect, t: HeuristicThresholds = HeuristicThresholds()) -> bool:
    overlap = a.vertical_overlap(b)
    if overlap <= 0:
        return False
    min_height = min(a.height, b.height)
    if overlap < min_height * t.align_min_overlap:
        return False
    allowed_gap = min(min_height * t.align_gap_height_factor, t.align_max_gap)
    return a.horizontal_gap(b) <= allowed_gap


def consolidate_regions(
    regions: List[Rect], bounds: Rect, edge_mask: Grid, t: HeuristicThresholds = HeuristicThresholds()
) -> List[Rect]:
    if len(regions) <= 1:
        return list(regions)

    result: List[Rect] = []
    for rect in sorted(regions, key=lambda r: (r.top, r.left)):
        merged = False
        for i, existing in enumerate(result):
            if not are_nearly_aligned(existing, rect, t):
                continue
            union = existing.union(rect).inflate(1, bounds)
            # a union that no longer looks like text keeps the existing rect
            if should_keep(union, edge_mask, t):
                result[i] = union
            merged = True
            break

        if not merged and should_keep(rect, edge_mask, t):
            result.append(rect)
    return result
