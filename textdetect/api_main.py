# api_main.py
# FastAPI service for text region detection
# - /detect accepts multipart `file`/`image` or raw image/* bytes
# - OCR engine handles are created once per process and shared (calls are serialised per handle)

from __future__ import annotations

import logging
import os
from typing import List, Optional

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from PIL import UnidentifiedImageError
from pydantic import BaseModel

from . import __version__
from .config import Settings
from .detector import STRATEGIES, detect
from .ocr import EnginePool
from .raster import RasterView

logger = logging.getLogger("textdetect")

# ---------- environment ----------
SETTINGS = Settings.from_env()
ENGINES = EnginePool(SETTINGS)


# ---------- models ----------
class RegionOut(BaseModel):
    x: int
    y: int
    w: int
    h: int
    confidence: float


class DetectResponse(BaseModel):
    strategy: str
    width: int
    height: int
    ocr_unavailable: Optional[str] = None
    regions: List[RegionOut]


# ---------- app ----------
app = FastAPI(title="Text Region Detection API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- utils ----------
def _raster_from_bytes(b: bytes) -> RasterView:
    try:
        return RasterView.from_bytes(b)
    except (UnidentifiedImageError, OSError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid image bytes")


async def _read_image_from_request(
    request: Request, file: UploadFile | None, image: UploadFile | None
) -> bytes:
    up = file or image
    if up is not None:
        ct = (up.content_type or "").lower()
        if not ct.startswith("image/"):
            raise HTTPException(status_code=400, detail="Uploaded part must be an image (png, jpeg, webp).")
        return await up.read()

    # allow raw image bytes
    ct = (request.headers.get("content-type") or "").lower()
    if not ct.startswith("image/"):
        raise HTTPException(
            status_code=422,
            detail="No file provided. Send multipart field 'file' or 'image', or raw image bytes with Content-Type: image/*.",
        )
    return await request.body()


def detect_bytes(image_bytes: bytes, strategy: str = "auto", engine: Optional[str] = None) -> DetectResponse:
    raster = _raster_from_bytes(image_bytes)

    ocr = ENGINES.get(engine) if strategy != "heuristic" else None

    res = detect(raster, ocr, settings=SETTINGS, strategy=strategy)
    return DetectResponse(
        strategy=res.strategy,
        width=raster.width,
        height=raster.height,
        ocr_unavailable=res.ocr_unavailable,
        regions=[
            RegionOut(x=r.bounds.x, y=r.bounds.y, w=r.bounds.width, h=r.bounds.height, confidence=r.confidence)
            for r in res.regions
        ],
    )


# ---------- routes ----------
@app.get("/")
async def root():
    return {"service": "textdetect", "env": SETTINGS.environment, "ok": True}


@app.get("/healthz")
async def healthz():
    return {"ok": True, "env": SETTINGS.environment}


@app.post("/detect", response_model=DetectResponse)
@app.post("/api/detect", response_model=DetectResponse)
async def detect_regions(
    request: Request,
    file: UploadFile | None = File(None),
    image: UploadFile | None = File(None),
    strategy: str = "auto",
    engine: Optional[str] = None,
):
    if strategy not in STRATEGIES:
        raise HTTPException(status_code=422, detail=f"strategy must be one of: {', '.join(STRATEGIES)}")
    try:
        data = await _read_image_from_request(request, file, image)
        # detection is CPU bound and may block on the engine lock
        return await run_in_threadpool(detect_bytes, data, strategy, engine)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("detect failed")
        raise HTTPException(status_code=500, detail=str(e))


# ---------- uvicorn entry ----------
if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=SETTINGS.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    port = int(os.getenv("PORT", "8080"))
    uvicorn.run("textdetect.api_main:app", host="0.0.0.0", port=port, reload=False)
