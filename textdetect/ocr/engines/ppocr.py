import threading
from io import BytesIO
from typing import Iterator

import numpy as np
from PIL import Image
from rapidocr_onnxruntime import RapidOCR

from ...schema import OcrToken, Rect
from .itxt import ITxtExtractor


class PPOCRExtractor(ITxtExtractor):
    """RapidOCR (PP-OCR ONNX models). Boxes are text-line quads, reported as words."""

    name = "ppocr"

    def __init__(self):
        # Downloads tiny models on first use; keep one instance
        self.ocr = RapidOCR()
        self._lock = threading.Lock()

    def run(self, image_png: bytes, psm: int = 3) -> Iterator[OcrToken]:
        rgb = np.asarray(Image.open(BytesIO(image_png)).convert("RGB"))
        with self._lock:
            result, _ = self.ocr(rgb)
        for box, text, score in result or []:
            if not text:
                continue
            xs = [int(p[0]) for p in box]
            ys = [int(p[1]) for p in box]
            yield OcrToken(Rect(min(xs), min(ys), max(xs), max(ys)), text, float(score) * 100.0)
