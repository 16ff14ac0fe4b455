"""
Read-only access to packed ARGB pixel buffers.

`Grid` is the one bounds-checked 2D view used across the package (pixels,
edge masks, activity scans); `RasterView` wraps a Grid of packed ARGB
values and derives channels and luminance from it.
"""

from __future__ import annotations

from io import BytesIO
from typing import Optional, Tuple, Union

import numpy as np
from PIL import Image, ImageFile

from .schema import Rect

ImageFile.LOAD_TRUNCATED_IMAGES = True


class Grid:
    """Bounds-checked (x, y) view over a row-major 2D array."""

    def __init__(self, data: np.ndarray):
        if data.ndim != 2:
            raise ValueError("expect a 2D array (H,W)")
        self.data = data

    @staticmethod
    def zeros(width: int, height: int, dtype=bool) -> "Grid":
        return Grid(np.zeros((height, width), dtype=dtype))

    @staticmethod
    def from_buffer(buffer, width: int, height: int, stride: Optional[int] = None, dtype=np.uint32) -> "Grid":
        stride = width if stride is None else int(stride)
        if stride < width:
            raise ValueError(f"stride {stride} is smaller than width {width}")
        if isinstance(buffer, (bytes, bytearray, memoryview)):
            flat = np.frombuffer(buffer, dtype=np.dtype(dtype).newbyteorder("<"))
        else:
            flat = np.asarray(buffer).astype(dtype, copy=False).ravel()
        if flat.size < stride * height:
            raise ValueError(f"buffer holds {flat.size} values, need {stride * height}")
        # the padding past `width` in each row is never visible
        return Grid(flat[: stride * height].reshape(height, stride)[:, :width])

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def bounds(self) -> Rect:
        return Rect(0, 0, self.width, self.height)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int):
        if not self.in_bounds(x, y):
            raise IndexError(f"({x}, {y}) outside {self.width}x{self.height}")
        return self.data[y, x]

    def set(self, x: int, y: int, value) -> None:
        if not self.in_bounds(x, y):
            raise IndexError(f"({x}, {y}) outside {self.width}x{self.height}")
        self.data[y, x] = value

    def window(self, rect: Rect) -> np.ndarray:
        r = rect.clamp(self.bounds)
        if r.is_empty:
            return self.data[0:0, 0:0]
        return self.data[r.top : r.bottom, r.left : r.right]

    def row_counts(self, rect: Rect) -> np.ndarray:
        """Number of set cells per row of `rect` (activity along y)."""
        return np.count_nonzero(self.window(rect), axis=1)

    def column_counts(self, rect: Rect) -> np.ndarray:
        """Number of set cells per column of `rect` (activity along x)."""
        return np.count_nonzero(self.window(rect), axis=0)

    def count(self, rect: Rect) -> int:
        return int(np.count_nonzero(self.window(rect)))


class RasterView:
    """A width x height image of packed 32-bit ARGB pixels."""

    def __init__(self, pixels: Grid):
        self.pixels = pixels

    # ---------- constructors ----------
    @staticmethod
    def from_argb(buffer, width: int, height: int, stride: Optional[int] = None) -> "RasterView":
        return RasterView(Grid.from_buffer(buffer, width, height, stride, dtype=np.uint32))

    @staticmethod
    def from_image(image: Image.Image) -> "RasterView":
        rgba = np.asarray(image.convert("RGBA"), dtype=np.uint32)
        packed = (rgba[:, :, 3] << 24) | (rgba[:, :, 0] << 16) | (rgba[:, :, 1] << 8) | rgba[:, :, 2]
        return RasterView(Grid(packed.astype(np.uint32)))

    @staticmethod
    def from_bytes(image_bytes: bytes) -> "RasterView":
        return RasterView.from_image(Image.open(BytesIO(image_bytes)))

    @staticmethod
    def coerce(source: Union["RasterView", Image.Image, np.ndarray, None]) -> Optional["RasterView"]:
        if source is None or isinstance(source, RasterView):
            return source
        if isinstance(source, Image.Image):
            return RasterView.from_image(source)
        if isinstance(source, np.ndarray):
            if source.ndim == 2 and source.dtype == np.uint32:
                return RasterView(Grid(source))
            return RasterView.from_image(Image.fromarray(source))
        raise TypeError(f"unsupported image type: {type(source).__name__}")

    # ---------- geometry ----------
    @property
    def width(self) -> int:
        return self.pixels.width

    @property
    def height(self) -> int:
        return self.pixels.height

    @property
    def bounds(self) -> Rect:
        return self.pixels.bounds

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    # ---------- pixel access ----------
    def argb(self, x: int, y: int) -> int:
        return int(self.pixels.get(x, y))

    def channels(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """(alpha, red, green, blue) as uint8 arrays."""
        p = self.pixels.data
        return (
            ((p >> 24) & 0xFF).astype(np.uint8),
            ((p >> 16) & 0xFF).astype(np.uint8),
            ((p >> 8) & 0xFF).astype(np.uint8),
            (p & 0xFF).astype(np.uint8),
        )

    def luminance(self, min_alpha: int = 16) -> np.ndarray:
        """Integer broadcast luma per pixel; near-transparent pixels read as white."""
        a, r, g, b = self.channels()
        lum = (r.astype(np.int32) * 299 + g.astype(np.int32) * 587 + b.astype(np.int32) * 114) // 1000
        lum[a < min_alpha] = 255
        return lum.astype(np.uint8)

    def luminance_at(self, x: int, y: int, min_alpha: int = 16) -> int:
        v = self.argb(x, y)
        if ((v >> 24) & 0xFF) < min_alpha:
            return 255
        return (((v >> 16) & 0xFF) * 299 + ((v >> 8) & 0xFF) * 587 + (v & 0xFF) * 114) // 1000

    def to_rgba(self) -> np.ndarray:
        a, r, g, b = self.channels()
        return np.dstack((r, g, b, a))

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.to_rgba()))
