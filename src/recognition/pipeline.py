import asyncio
import logging
import time
from typing import Any, List

from src import config
from src.openai_client import create_openai_client

from .adapters import BarcodeAdapter, ObjectDetectionAdapter, TextDetectionAdapter
from .assembler import assemble
from .barcode_lookup import CatalogBarcodeLookup, OpenFoodFactsLookup
from .catalog import CatalogProvider, HttpCatalog, JsonFileCatalog
from .errors import CatalogUnavailable, DetectionUnavailable
from .localizer import YoloObjectLocalizer
from .matcher import match
from .models import (
    CatalogIngredient,
    DetectedLabel,
    ImageRef,
    IngredientCandidate,
    Modality,
    RecognitionOutcome,
)
from .text_reader import GptTextReader

logger = logging.getLogger(__name__)


def _summarize(payload: Any) -> str:
    if isinstance(payload, (bytes, bytearray)):
        return f"<{len(payload)} bytes>"
    return repr(payload)


class RecognitionPipeline:
    """
    Single entry point for turning recognizer output into inventory candidates.

    photo / receipt:
      detector adapter ─┐
                        ├─> match (normalized names) ─> assemble
      catalog.load() ───┘

    barcode:
      barcode adapter (lookup resolved against the catalog) ─> candidates

    No recognition failure raises past this class: each one is logged and becomes an
    UNAVAILABLE outcome with no candidates. The pipeline keeps no state
    between calls, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        object_adapter: ObjectDetectionAdapter,
        text_adapter: TextDetectionAdapter,
        barcode_adapter: BarcodeAdapter,
        catalog: CatalogProvider,
        concurrent_catalog_load: bool = True,
        timeout_s: float = 0.0,
    ):
        self.object_adapter = object_adapter
        self.text_adapter = text_adapter
        self.barcode_adapter = barcode_adapter
        self.catalog = catalog
        self.concurrent_catalog_load = concurrent_catalog_load
        self.timeout_s = timeout_s

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------
    async def recognize_from_image_objects(self, image: ImageRef) -> List[IngredientCandidate]:
        outcome = await self.recognize(Modality.OBJECTS, image)
        return outcome.candidates

    async def recognize_from_receipt_text(self, image: ImageRef) -> List[IngredientCandidate]:
        outcome = await self.recognize(Modality.RECEIPT, image)
        return outcome.candidates

    async def recognize_from_barcode(self, code: str) -> List[IngredientCandidate]:
        outcome = await self.recognize(Modality.BARCODE, code)
        return outcome.candidates

    async def recognize(self, modality: Modality, payload: Any) -> RecognitionOutcome:
        """Dispatch by modality. Raises ValueError only for an unknown modality."""
        modality = Modality(modality)
        t0 = time.perf_counter()
        logger.info("[RECOGNIZE] Start modality=%s input=%s", modality.value, _summarize(payload))

        try:
            run = self._dispatch(modality, payload)
            if self.timeout_s and self.timeout_s > 0:
                outcome = await asyncio.wait_for(run, timeout=self.timeout_s)
            else:
                outcome = await run
        except asyncio.TimeoutError:
            outcome = self._unavailable(
                modality, payload, f"timed out after {self.timeout_s}s"
            )
        except DetectionUnavailable as e:
            outcome = self._unavailable(modality, payload, f"detection unavailable: {e}")
        except CatalogUnavailable as e:
            outcome = self._unavailable(modality, payload, f"catalog unavailable: {e}")
        except Exception as e:
            logger.exception(
                "[RECOGNIZE] Unexpected failure modality=%s input=%s",
                modality.value,
                _summarize(payload),
            )
            outcome = RecognitionOutcome.unavailable(modality, f"unexpected error: {e}")

        logger.info(
            "[RECOGNIZE] Done modality=%s status=%s candidates=%d in %.3fs",
            modality.value,
            outcome.status.value,
            len(outcome.candidates),
            time.perf_counter() - t0,
        )
        return outcome

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _dispatch(self, modality: Modality, payload: Any):
        if modality is Modality.OBJECTS:
            return self._recognize_with_catalog(modality, self.object_adapter, payload)
        if modality is Modality.RECEIPT:
            return self._recognize_with_catalog(modality, self.text_adapter, payload)
        return self._recognize_barcode(payload)

    @staticmethod
    def _unavailable(modality: Modality, payload: Any, reason: str) -> RecognitionOutcome:
        logger.error(
            "[RECOGNIZE] modality=%s input=%s unavailable: %s",
            modality.value,
            _summarize(payload),
            reason,
        )
        return RecognitionOutcome.unavailable(modality, reason)

    async def _recognize_with_catalog(self, modality: Modality, adapter, image) -> RecognitionOutcome:
        if self.concurrent_catalog_load:
            labels, catalog = await asyncio.gather(
                asyncio.to_thread(adapter.detect, image),
                asyncio.to_thread(self.catalog.load),
            )
        else:
            labels = await asyncio.to_thread(adapter.detect, image)
            if not labels:
                logger.info("[RECOGNIZE] No labels detected (modality=%s)", modality.value)
                return RecognitionOutcome.from_candidates(modality, [])
            catalog = await asyncio.to_thread(self.catalog.load)

        return RecognitionOutcome.from_candidates(modality, self._resolve(labels, catalog))

    @staticmethod
    def _resolve(
        labels: List[DetectedLabel], catalog: List[CatalogIngredient]
    ) -> List[IngredientCandidate]:
        if not labels:
            logger.info("[RECOGNIZE] No labels detected.")
            return []

        candidates = assemble(match(labels, catalog))
        if candidates:
            logger.info(
                "[RECOGNIZE] Matched ingredients: %s",
                ", ".join(c.name for c in candidates),
            )
        else:
            logger.info("[RECOGNIZE] No matching ingredients found.")
        return candidates

    async def _recognize_barcode(self, code: str) -> RecognitionOutcome:
        candidates = await asyncio.to_thread(self.barcode_adapter.lookup, code)
        return RecognitionOutcome.from_candidates(Modality.BARCODE, candidates)


def build_pipeline(openai_client=None) -> RecognitionPipeline:
    """
    Construct backends and clients from configuration.

    Called once at process start; the returned pipeline is shared by all
    requests.
    """
    if openai_client is None and config.OPENAI_API_KEY:
        openai_client = create_openai_client(config.OPENAI_API_KEY)
    if openai_client is None:
        logger.warning("OPENAI_API_KEY is not set; receipt recognition will be unavailable")

    localizer = YoloObjectLocalizer(
        model_path=config.LOCALIZER_MODEL_PATH,
        labels_path=config.LOCALIZER_LABELS_PATH,
        min_score=config.LOCALIZER_MIN_SCORE,
    )
    text_reader = GptTextReader(client=openai_client, model=config.OCR_MODEL)
    if config.CATALOG_URL:
        catalog = HttpCatalog(config.CATALOG_URL, timeout=config.CATALOG_TIMEOUT_S)
    else:
        catalog = JsonFileCatalog(config.CATALOG_PATH)

    barcode_lookup = CatalogBarcodeLookup(
        OpenFoodFactsLookup(
            base_url=config.BARCODE_LOOKUP_URL,
            timeout=config.BARCODE_TIMEOUT_S,
        ),
        catalog,
    )

    logger.info(
        "Recognition pipeline ready: localizer=%s, text_reader=%s, catalog=%s",
        "ENABLED" if localizer.has_localization else "DISABLED",
        "ENABLED" if text_reader.has_text_detection else "DISABLED",
        catalog.name,
    )

    return RecognitionPipeline(
        object_adapter=ObjectDetectionAdapter(localizer),
        text_adapter=TextDetectionAdapter(text_reader),
        barcode_adapter=BarcodeAdapter(barcode_lookup),
        catalog=catalog,
        concurrent_catalog_load=config.CONCURRENT_CATALOG_LOAD,
        timeout_s=config.RECOGNITION_TIMEOUT_S,
    )
