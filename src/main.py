"""Main FastAPI application."""

import logging
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from src.config import ALLOW_ALL_ORIGINS, CORS_ORIGINS
from src.recognition.models import Modality, RecognitionOutcome
from src.recognition.pipeline import RecognitionPipeline, build_pipeline

logging.basicConfig(
    level=logging.INFO,
    stream=sys.stdout,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

ALLOWED_CONTENT_TYPES = ["image/jpeg", "image/png"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Tests may install their own pipeline before startup
    if getattr(app.state, "pipeline", None) is None:
        app.state.pipeline = build_pipeline()
    yield


# -----------------------------------
# App initialization
# -----------------------------------

app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=not ALLOW_ALL_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _pipeline(request: Request) -> RecognitionPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        pipeline = build_pipeline()
        request.app.state.pipeline = pipeline
    return pipeline


def _response(outcome: RecognitionOutcome, started: float) -> dict:
    return {
        "ingredients": [c.to_dict() for c in outcome.candidates],
        "meta": {
            "modality": outcome.modality.value,
            "status": outcome.status.value,
            "reason": outcome.reason,
            "processing_time_ms": round((time.time() - started) * 1000, 2),
        },
    }


async def _read_image(image: UploadFile) -> bytes:
    if not image:
        raise HTTPException(422, "Image field is required")

    if image.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(422, "Unsupported format (use jpeg/png)")

    content = await image.read()
    if not content:
        raise HTTPException(422, "Image is empty")
    return content


# -----------------------------------
# Tech endpoints
# -----------------------------------

@app.get("/health")
def health():
    return {"status": "ok"}


# -----------------------------------
# Recognition endpoints
# -----------------------------------

@app.post("/recognize/photo")
async def recognize_photo(request: Request, image: UploadFile = File(None)):
    """Photographed food -> catalog ingredients."""
    started = time.time()
    content = await _read_image(image)
    logging.info("[API] /recognize/photo file=%s size=%s", image.filename, len(content))

    outcome = await _pipeline(request).recognize(Modality.OBJECTS, content)
    return _response(outcome, started)


@app.post("/recognize/receipt")
async def recognize_receipt(request: Request, image: UploadFile = File(None)):
    """Photographed receipt -> catalog ingredients."""
    started = time.time()
    content = await _read_image(image)
    logging.info("[API] /recognize/receipt file=%s size=%s", image.filename, len(content))

    outcome = await _pipeline(request).recognize(Modality.RECEIPT, content)
    return _response(outcome, started)


@app.get("/recognize/barcode/{code}")
async def recognize_barcode(request: Request, code: str):
    started = time.time()
    logging.info("[API] /recognize/barcode code=%s", code)

    outcome = await _pipeline(request).recognize(Modality.BARCODE, code)
    return _response(outcome, started)
