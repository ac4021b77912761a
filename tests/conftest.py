import pytest

from src.recognition.adapters import BarcodeAdapter, ObjectDetectionAdapter, TextDetectionAdapter
from src.recognition.catalog import CatalogProvider, parse_catalog
from src.recognition.pipeline import RecognitionPipeline


class FakeLocalizer:
    name = "fake_localizer"

    def __init__(self, objects=None, error=None, available=True):
        self.objects = objects or []
        self.error = error
        self.has_localization = available
        self.calls = []

    def localize(self, image):
        self.calls.append(image)
        if self.error:
            raise self.error
        return self.objects


class FakeTextReader:
    name = "fake_text_reader"

    def __init__(self, texts=None, error=None, available=True):
        self.texts = texts or []
        self.error = error
        self.has_text_detection = available

    def detect_text(self, image):
        if self.error:
            raise self.error
        return self.texts


class FakeBarcodeLookup:
    name = "fake_barcode"

    def __init__(self, records=None, error=None):
        self.records = records or []
        self.error = error

    def lookup(self, code):
        if self.error:
            raise self.error
        return self.records


class StaticCatalog(CatalogProvider):
    """Catalog returning a fixed raw payload, validated like real sources."""

    name = "static"

    def __init__(self, raw):
        self.raw = raw
        self.loads = 0

    def load(self):
        self.loads += 1
        return parse_catalog(self.raw)


@pytest.fixture
def make_pipeline():
    def _make(
        objects=None,
        texts=None,
        barcode_records=None,
        catalog=None,
        localizer=None,
        text_reader=None,
        barcode_lookup=None,
        **kwargs,
    ):
        return RecognitionPipeline(
            object_adapter=ObjectDetectionAdapter(localizer or FakeLocalizer(objects)),
            text_adapter=TextDetectionAdapter(text_reader or FakeTextReader(texts)),
            barcode_adapter=BarcodeAdapter(barcode_lookup or FakeBarcodeLookup(barcode_records)),
            catalog=catalog if isinstance(catalog, CatalogProvider) else StaticCatalog(catalog or []),
            **kwargs,
        )

    return _make
