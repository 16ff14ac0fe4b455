"""
Pixel-heuristic text region detection (no OCR involved).
"""

from .components import Component, extract_components, flood_fill
from .detector import find_text_regions_heuristic
from .edges import EdgeClassifier
from .refine import consolidate_regions, merge_components, refine_component, should_keep

__all__ = [
    "Component",
    "EdgeClassifier",
    "consolidate_regions",
    "extract_components",
    "find_text_regions_heuristic",
    "flood_fill",
    "merge_components",
    "refine_component",
    "should_keep",
]
