from __future__ import annotations

import numpy as np

from ..config import HeuristicThresholds
from ..raster import Grid, RasterView


def _axis_diffs(lum: np.ndarray):
    """Max absolute luminance difference to the horizontal and vertical neighbours.

    Missing neighbours (image border) contribute 0.
    """
    g = lum.astype(np.int16)
    h = np.zeros_like(g)
    v = np.zeros_like(g)

    dx = np.abs(g[:, 1:] - g[:, :-1])
    h[:, 1:] = dx  # left neighbour
    h[:, :-1] = np.maximum(h[:, :-1], dx)  # right neighbour

    dy = np.abs(g[1:, :] - g[:-1, :])
    v[1:, :] = dy
    v[:-1, :] = np.maximum(v[:-1, :], dy)
    return h, v


class EdgeClassifier:
    """Per-pixel "possible glyph stroke" test from local contrast.

    A pixel qualifies when its strongest axis difference reaches
    `edge_threshold` and at least one axis reaches the secondary threshold.
    """

    def __init__(self, raster: RasterView, thresholds: HeuristicThresholds = HeuristicThresholds()):
        self.raster = raster
        self.thresholds = thresholds
        t = thresholds

        alpha = raster.channels()[0]
        h, v = _axis_diffs(raster.luminance(t.min_alpha))
        strongest = np.maximum(h, v)
        diagonal_noise = (h < t.secondary_edge_threshold) & (v < t.secondary_edge_threshold)
        self.candidates = Grid((alpha >= t.min_alpha) & (strongest >= t.edge_threshold) & ~diagonal_noise)

    def is_edge_candidate(self, x: int, y: int) -> bool:
        if not self.candidates.in_bounds(x, y):
            return False
        return bool(self.candidates.get(x, y))

    __call__ = is_edge_candidate
