"""
Detector adapters: one per input modality.

Each adapter wraps one recognition backend, validates its loosely shaped
output into fixed types and reports backend failures as
DetectionUnavailable instead of leaking backend exceptions.
"""
import logging
from typing import List

from .errors import CatalogUnavailable, DetectionUnavailable
from .models import UNSCORED, DetectedLabel, ImageRef, IngredientCandidate

logger = logging.getLogger(__name__)


def _summarize(image: ImageRef) -> str:
    if isinstance(image, (bytes, bytearray)):
        return f"<{len(image)} bytes>"
    return str(image)


class ObjectDetectionAdapter:
    """Photographed food -> object labels with detector scores."""

    def __init__(self, backend):
        self.backend = backend

    def detect(self, image: ImageRef) -> List[DetectedLabel]:
        backend_name = getattr(self.backend, "name", type(self.backend).__name__)
        if not getattr(self.backend, "has_localization", False):
            raise DetectionUnavailable(backend_name, "object localization is not available")

        try:
            objects = self.backend.localize(image)
        except Exception as e:
            logger.error("[DETECT] %s failed for %s: %s", backend_name, _summarize(image), e)
            raise DetectionUnavailable(backend_name, str(e)) from e

        labels: List[DetectedLabel] = []
        for obj in objects or []:
            name = obj.get("name") if isinstance(obj, dict) else None
            if not isinstance(name, str):
                continue
            score = obj.get("score")
            confidence = float(score) if isinstance(score, (int, float)) else UNSCORED
            logger.info("Object: %s, Score: %s", name, confidence)
            labels.append(DetectedLabel(text=name, confidence=confidence))

        logger.info(
            "[DETECT] backend=%s input=%s labels=%d",
            backend_name,
            _summarize(image),
            len(labels),
        )
        return labels


class TextDetectionAdapter:
    """Photographed receipt -> one unscored label per recognized text unit."""

    def __init__(self, backend):
        self.backend = backend

    def detect(self, image: ImageRef) -> List[DetectedLabel]:
        backend_name = getattr(self.backend, "name", type(self.backend).__name__)
        if not getattr(self.backend, "has_text_detection", False):
            raise DetectionUnavailable(backend_name, "text detection is not available")

        try:
            texts = self.backend.detect_text(image)
        except Exception as e:
            logger.error("[DETECT] %s failed for %s: %s", backend_name, _summarize(image), e)
            raise DetectionUnavailable(backend_name, str(e)) from e

        labels: List[DetectedLabel] = []
        for text in texts or []:
            description = text.get("description") if isinstance(text, dict) else None
            if not isinstance(description, str):
                continue
            logger.info("Text: %s", description)
            labels.append(DetectedLabel(text=description, confidence=UNSCORED))

        logger.info(
            "[DETECT] backend=%s input=%s labels=%d",
            backend_name,
            _summarize(image),
            len(labels),
        )
        return labels


class BarcodeAdapter:
    """
    Barcode -> ingredient candidates.

    The lookup backend already resolves catalog identity, so its records
    become candidates directly. Failures raise; RecognitionPipeline is the
    layer that turns them into an empty result.
    """

    def __init__(self, backend):
        self.backend = backend

    def lookup(self, code: str) -> List[IngredientCandidate]:
        backend_name = getattr(self.backend, "name", type(self.backend).__name__)
        logger.info("Recognizing barcode: %s", code)
        try:
            records = self.backend.lookup(code)
        except CatalogUnavailable:
            raise
        except Exception as e:
            logger.error("[DETECT] %s failed for barcode %s: %s", backend_name, code, e)
            raise DetectionUnavailable(backend_name, str(e)) from e

        candidates: List[IngredientCandidate] = []
        for record in records or []:
            name = record.get("name") if isinstance(record, dict) else None
            if not isinstance(name, str) or not name.strip():
                continue
            candidates.append(
                IngredientCandidate(
                    name=name,
                    category=str(record.get("category") or ""),
                    image_url=str(record.get("imageURL") or ""),
                )
            )

        logger.info(
            "[DETECT] backend=%s input=%s candidates=%d",
            backend_name,
            code,
            len(candidates),
        )
        return candidates
