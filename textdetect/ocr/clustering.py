"""
Word -> line -> region clustering for OCR word boxes.

Words are grouped into visual lines by vertical overlap, each line is
split at unusually wide horizontal gaps, and the resulting lines are
merged into padded regions.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Optional

from ..config import OcrThresholds
from ..schema import DetectedLine, DetectedTextRegion, DetectedWord, OcrToken, Rect
from .repair import repair_text


def filter_words(tokens: Iterable[OcrToken], bounds: Rect, t: OcrThresholds = OcrThresholds()) -> List[DetectedWord]:
    """Keep words that are big enough, non-blank and confidently recognised."""
    words: List[DetectedWord] = []
    for tok in tokens:
        rect = tok.bbox.clamp(bounds)
        if rect.width < t.min_width or rect.height < t.min_height:
            continue
        text = repair_text(tok.text or "")
        if not text:
            continue
        conf = float(tok.conf)
        if math.isnan(conf) or conf < t.min_confidence:
            continue
        words.append(DetectedWord(rect, conf / 100.0, text))
    return words


def are_on_same_line(a: Rect, b: Rect, t: OcrThresholds = OcrThresholds()) -> bool:
    overlap = a.vertical_overlap(b)
    if overlap <= 0:
        return False
    min_height = min(a.height, b.height)
    if min_height == 0:
        return False
    return overlap >= min_height * t.same_line_overlap


class WordGroup:
    """Words assigned to one visual line, with their running bounding box."""

    def __init__(self, word: DetectedWord):
        self.words: List[DetectedWord] = [word]
        self.bounds: Rect = word.bounds

    def add(self, word: DetectedWord) -> None:
        self.words.append(word)
        self.bounds = self.bounds.union(word.bounds)

    def sort_words(self) -> None:
        self.words.sort(key=lambda w: (w.bounds.left, w.bounds.top))

    def build_text(self) -> str:
        return " ".join(w.text for w in self.words)


def _center_y(r: Rect) -> float:
    return r.top + r.height / 2.0


def group_words(words: Iterable[DetectedWord], t: OcrThresholds = OcrThresholds()) -> List[WordGroup]:
    groups: List[WordGroup] = []
    for word in sorted(words, key=lambda w: (w.bounds.top, w.bounds.left)):
        best: Optional[WordGroup] = None
        best_distance = math.inf
        for group in groups:
            if not are_on_same_line(group.bounds, word.bounds, t):
                continue
            distance = abs(_center_y(group.bounds) - _center_y(word.bounds))
            if distance < best_distance:
                best_distance = distance
                best = group
        if best is None:
            groups.append(WordGroup(word))
        else:
            best.add(word)
    return groups


def split_threshold(words: List[DetectedWord], t: OcrThresholds = OcrThresholds()) -> float:
    mean_height = sum(w.bounds.height for w in words) / float(len(words))
    return max(t.split_min_gap, min(t.split_max_gap, mean_height * t.split_height_factor))


def _add_line(words: List[DetectedWord], lines: List[DetectedLine], bounds: Rect, t: OcrThresholds) -> None:
    if not words:
        return
    rect = words[0].bounds
    for w in words[1:]:
        rect = rect.union(w.bounds)
    rect = rect.clamp(bounds)
    if rect.width < t.min_width or rect.height < t.min_height:
        return
    text = " ".join(w.text for w in words)
    if not text:
        return
    confidence = sum(w.confidence for w in words) / len(words)
    lines.append(DetectedLine(rect, confidence, text, len(words)))


def split_runs(
    words: List[DetectedWord], lines: List[DetectedLine], bounds: Rect, t: OcrThresholds = OcrThresholds()
) -> None:
    """Recursively cut a left-to-right word run at its widest gap while that gap is too wide."""
    if not words:
        return
    if len(words) == 1:
        _add_line(words, lines, bounds, t)
        return

    threshold = split_threshold(words, t)
    max_gap = 0
    max_gap_index = -1
    for i in range(len(words) - 1):
        gap = words[i + 1].bounds.left - words[i].bounds.right
        if gap > max_gap:
            max_gap = gap
            max_gap_index = i

    if max_gap_index >= 0 and max_gap > threshold:
        split_runs(words[: max_gap_index + 1], lines, bounds, t)
        split_runs(words[max_gap_index + 1 :], lines, bounds, t)
        return

    _add_line(words, lines, bounds, t)


def group_words_into_lines(words: Iterable[DetectedWord], bounds: Rect, t: OcrThresholds = OcrThresholds()) -> List[DetectedLine]:
    lines: List[DetectedLine] = []
    for group in group_words(words, t):
        group.sort_words()
        split_runs(group.words, lines, bounds, t)
    return lines


def should_merge_lines(a: Rect, b: Rect, t: OcrThresholds = OcrThresholds()) -> bool:
    overlap = a.vertical_overlap(b)
    if overlap <= 0:
        return False
    min_height = min(a.height, b.height)
    if min_height == 0:
        return False
    if overlap < min_height * t.merge_min_overlap:
        return False
    allowed = min(max(a.width, b.width) * t.merge_gap_width_factor, t.merge_max_gap)
    return a.horizontal_gap(b) <= allowed


def merge_lines_into_regions(
    lines: Iterable[DetectedLine], bounds: Rect, t: OcrThresholds = OcrThresholds()
) -> List[DetectedTextRegion]:
    result: List[DetectedTextRegion] = []
    for line in sorted(lines, key=lambda ln: (ln.bounds.top, ln.bounds.left)):
        rect = line.bounds.inflate(t.merge_padding, bounds)
        if rect.width < t.min_width or rect.height < t.min_height:
            continue

        for i, existing in enumerate(result):
            if should_merge_lines(existing.bounds, rect, t):
                result[i] = DetectedTextRegion(
                    existing.bounds.union(rect).clamp(bounds),
                    max(existing.confidence, line.confidence),
                )
                break
        else:
            result.append(DetectedTextRegion(rect, line.confidence))
    return result
