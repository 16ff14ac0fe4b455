"""
Text region detection for screenshots and other raster images.
"""

from .config import HeuristicThresholds, OcrThresholds, Settings
from .detector import detect, find_text_regions, find_text_regions_detailed
from .raster import Grid, RasterView
from .schema import DetectedTextRegion, DetectionResult, Rect

__version__ = "0.3.0"

__all__ = [
    "DetectedTextRegion",
    "DetectionResult",
    "Grid",
    "HeuristicThresholds",
    "OcrThresholds",
    "RasterView",
    "Rect",
    "Settings",
    "detect",
    "find_text_regions",
    "find_text_regions_detailed",
]
