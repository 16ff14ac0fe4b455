#!/usr/bin/env python3
"""Run text region detection on one image and write an annotated preview.

Prints one line per detected region and saves `<name>-annotated.png` next to
the input. With TEXTDETECT_SHOW_ASCII set, wide regions are also dumped as a
coarse luminance ramp so results can be eyeballed from a terminal.

Examples:
  python -m textdetect.tools.debug_detect screenshot.png
  OCR_ENGINE=none python -m textdetect.tools.debug_detect screenshot.png --strategy heuristic
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional, Sequence

import numpy as np
from PIL import Image, ImageDraw

from ..config import Settings
from ..detector import STRATEGIES, detect
from ..ocr import make_extractor
from ..raster import RasterView
from ..schema import DetectedTextRegion, Rect

logger = logging.getLogger("textdetect")

ASCII_RAMP = " .:-=+*#%@"
LIME = (50, 205, 50)


def annotated_path(origin: str) -> str:
    base, _ = os.path.splitext(os.path.abspath(origin))
    return base + "-annotated.png"


def write_annotated_preview(raster: RasterView, regions: Sequence[DetectedTextRegion], path: str) -> str:
    base = raster.to_image().convert("RGBA")
    overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    for region in regions:
        r = region.bounds
        # PIL boxes are inclusive on the far edge
        box = (r.left, r.top, r.right - 1, r.bottom - 1)
        draw.rectangle(box, fill=LIME + (60,))
        draw.rectangle(box, outline=LIME + (255,), width=2)
    Image.alpha_composite(base, overlay).save(path, format="PNG")
    return path


def format_region(index: int, region: DetectedTextRegion) -> str:
    r = region.bounds
    return f"[{index:03d}] X:{r.x:4d} Y:{r.y:4d} W:{r.width:4d} H:{r.height:4d} C:{region.confidence * 100:5.1f}"


def ascii_preview(raster: RasterView, rect: Rect) -> List[str]:
    sample_width = min(120, rect.width)
    step_x = max(1, rect.width // sample_width)
    step_y = max(1, rect.height // 16)

    # plain luma, transparency is not special-cased here
    _, r, g, b = (c.astype(np.int32) for c in raster.channels())
    lum = (r * 299 + g * 587 + b * 114) // 1000

    lines = []
    for y in range(rect.top, rect.bottom, step_y):
        xs = range(rect.left, rect.right, step_x)
        chars = [ASCII_RAMP[int(lum[y, x]) * (len(ASCII_RAMP) - 1) // 255] for x in xs][:sample_width]
        lines.append("".join(chars))
    return lines


def dump_regions(raster: RasterView, regions: Sequence[DetectedTextRegion], show_ascii: bool = False) -> None:
    for i, region in enumerate(regions):
        print(format_region(i, region))
        r = region.bounds
        if show_ascii and r.width > 200 and r.height >= 16:
            print(f"      ascii preview ({r.width}x{r.height})")
            for line in ascii_preview(raster, r):
                print("      " + line)


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = Settings.from_env()
    p = argparse.ArgumentParser(description="Detect text regions in an image and write an annotated preview.")
    p.add_argument("image", help="Path to a PNG/JPEG/WebP image")
    p.add_argument("--strategy", choices=STRATEGIES, default="auto", help="Detection path to use")
    p.add_argument("--engine", default=settings.ocr_engine, help="OCR engine: tesseract, ppocr or none")
    p.add_argument("--ascii", action="store_true", default=settings.show_ascii, help="Print ASCII previews of wide regions")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = p.parse_args(argv)
    logging.basicConfig(level="DEBUG" if args.verbose else settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        with Image.open(args.image) as img:
            raster = RasterView.from_image(img)
        print(f"Loaded image {os.path.abspath(args.image)} ({raster.width}x{raster.height}).")

        ocr = make_extractor(args.engine, settings) if args.strategy != "heuristic" else None

        result = detect(raster, ocr, settings=settings, strategy=args.strategy)
        print(f"Detected {len(result.regions)} candidate text regions ({result.strategy}).")
        if result.ocr_unavailable:
            print(f"OCR unavailable: {result.ocr_unavailable}")

        out = write_annotated_preview(raster, result.regions, annotated_path(args.image))
        dump_regions(raster, result.regions, show_ascii=args.ascii)
        print(f"Annotated preview saved to {out}.")
    except Exception as e:
        logger.debug("debug_detect failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
