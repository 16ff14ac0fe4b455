from __future__ import annotations

from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Tuple, Union

XYWH = Tuple[int, int, int, int]  # x, y, w, h


@dataclass(frozen=True)
class Rect:
    """Axis-aligned integer rectangle, half-open: [left, right) x [top, bottom)."""

    left: int
    top: int
    right: int
    bottom: int

    @staticmethod
    def from_xywh(x: int, y: int, w: int, h: int) -> "Rect":
        return Rect(int(x), int(y), int(x) + int(w), int(y) + int(h))

    @property
    def x(self) -> int:
        return self.left

    @property
    def y(self) -> int:
        return self.top

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def area(self) -> int:
        return max(0, self.width) * max(0, self.height)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def as_xywh(self) -> XYWH:
        return (self.left, self.top, self.width, self.height)

    def union(self, other: "Rect") -> "Rect":
        return Rect(
            min(self.left, other.left),
            min(self.top, other.top),
            max(self.right, other.right),
            max(self.bottom, other.bottom),
        )

    def intersects(self, other: "Rect") -> bool:
        # positive-area overlap only; touching edges do not count
        return (
            other.left < self.right
            and self.left < other.right
            and other.top < self.bottom
            and self.top < other.bottom
        )

    def vertical_overlap(self, other: "Rect") -> int:
        return min(self.bottom, other.bottom) - max(self.top, other.top)

    def horizontal_gap(self, other: "Rect") -> int:
        return max(0, max(self.left, other.left) - min(self.right, other.right))

    def clamp(self, bounds: "Rect") -> "Rect":
        left = max(bounds.left, self.left)
        top = max(bounds.top, self.top)
        right = min(bounds.right, self.right)
        bottom = min(bounds.bottom, self.bottom)
        if right <= left or bottom <= top:
            return EMPTY
        return Rect(left, top, right, bottom)

    def inflate(self, padding: int, bounds: "Rect") -> "Rect":
        """Grow by `padding` on every side, clamped to `bounds`."""
        if padding <= 0 or self.is_empty:
            return self
        return Rect(
            self.left - padding,
            self.top - padding,
            self.right + padding,
            self.bottom + padding,
        ).clamp(bounds)

    def contains(self, other: "Rect") -> bool:
        return (
            self.left <= other.left
            and self.top <= other.top
            and other.right <= self.right
            and other.bottom <= self.bottom
        )


EMPTY = Rect(0, 0, 0, 0)


@dataclass(frozen=True)
class DetectedTextRegion:
    bounds: Rect
    confidence: float  # 0..1; always 0.0 from the heuristic path


class OcrToken(NamedTuple):
    """One word as reported by an OCR engine, before any filtering."""

    bbox: Rect
    text: str
    conf: float  # percent, may be NaN or negative when the engine has none


@dataclass(frozen=True)
class DetectedWord:
    bounds: Rect
    confidence: float
    text: str


@dataclass(frozen=True)
class DetectedLine:
    bounds: Rect
    confidence: float
    text: str
    word_count: int


@dataclass(frozen=True)
class OcrRegions:
    regions: List[DetectedTextRegion]
    word_count: int = 0
    line_count: int = 0


@dataclass(frozen=True)
class OcrUnavailable:
    reason: str


OcrOutcome = Union[OcrRegions, OcrUnavailable]


@dataclass(frozen=True)
class DetectionResult:
    regions: List[DetectedTextRegion]
    strategy: str  # "ocr" | "heuristic" | "none"
    ocr_unavailable: Optional[str] = None
