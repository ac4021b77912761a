import json
from unittest.mock import Mock

import cv2
import numpy as np
import pytest
import requests

from src.recognition.barcode_lookup import CatalogBarcodeLookup, OpenFoodFactsLookup
from src.recognition.errors import CatalogUnavailable
from src.recognition.localizer import YoloObjectLocalizer, load_image
from src.recognition.text_reader import GptTextReader
from src.utils import extract_json

from conftest import FakeBarcodeLookup, StaticCatalog


# -----------------------------------
# Open Food Facts
# -----------------------------------

def _session_returning(payload, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    session = Mock()
    session.get.return_value = response
    return session


def test_openfoodfacts_maps_product():
    session = _session_returning(
        {
            "status": 1,
            "product": {
                "product_name": "Whole Milk ",
                "categories": "Dairies, Milks, Whole milks",
                "image_front_url": "https://images.off/milk.jpg",
            },
        }
    )
    lookup = OpenFoodFactsLookup(base_url="https://off.local/api/v2/product/", session=session, timeout=3)

    assert lookup.lookup("3017620422003") == [
        {
            "name": "Whole Milk",
            "category": "Dairies",
            "categories": ["Dairies", "Milks", "Whole milks"],
            "imageURL": "https://images.off/milk.jpg",
        }
    ]
    session.get.assert_called_once_with(
        "https://off.local/api/v2/product/3017620422003.json", timeout=3
    )


def test_openfoodfacts_unknown_product():
    session = _session_returning({"status": 0, "status_verbose": "product not found"})
    assert OpenFoodFactsLookup(session=session).lookup("3017620422003") == []


def test_openfoodfacts_404():
    session = _session_returning({}, status_code=404)
    assert OpenFoodFactsLookup(session=session).lookup("3017620422003") == []


def test_openfoodfacts_defaults_category_and_image():
    session = _session_returning({"status": 1, "product": {"product_name": "Salt"}})
    assert OpenFoodFactsLookup(session=session).lookup("12345678") == [
        {"name": "Salt", "category": "Other", "categories": [], "imageURL": ""}
    ]


@pytest.mark.parametrize("code", ["", "abc", "1234", "12345678901234567"])
def test_openfoodfacts_skips_malformed_codes(code):
    session = Mock()
    assert OpenFoodFactsLookup(session=session).lookup(code) == []
    session.get.assert_not_called()


def test_openfoodfacts_propagates_network_errors():
    session = Mock()
    session.get.side_effect = requests.Timeout("slow")
    with pytest.raises(requests.Timeout):
        OpenFoodFactsLookup(session=session).lookup("3017620422003")


CATALOG_RAW = [
    {"name": "Milk", "category": "Dairy", "imageURL": "milk.png"},
    {"name": "Butter", "category": "Dairy", "imageURL": "butter.png"},
]


def _product(name, categories=()):
    return {"name": name, "category": "x", "categories": list(categories), "imageURL": "off.jpg"}


def test_catalog_lookup_prefers_product_name():
    products = FakeBarcodeLookup([_product("butter", ["Dairies", "Milk"])])
    lookup = CatalogBarcodeLookup(products, StaticCatalog(CATALOG_RAW))

    assert lookup.lookup("3017620422003") == [
        {"name": "Butter", "category": "Dairy", "imageURL": "butter.png"}
    ]
    assert lookup.name == "fake_barcode"


def test_catalog_lookup_falls_back_to_most_specific_category():
    products = FakeBarcodeLookup([_product("Whole Milk", ["Dairies", "Butter", "Milk"])])
    lookup = CatalogBarcodeLookup(products, StaticCatalog(CATALOG_RAW))

    assert lookup.lookup("3017620422003") == [
        {"name": "Milk", "category": "Dairy", "imageURL": "milk.png"}
    ]


def test_catalog_lookup_drops_unknown_products():
    products = FakeBarcodeLookup([_product("Whole Milk", ["Dairies", "Milks"])])
    assert CatalogBarcodeLookup(products, StaticCatalog(CATALOG_RAW)).lookup("3017620422003") == []


def test_catalog_lookup_skips_catalog_when_product_unknown():
    catalog = StaticCatalog(CATALOG_RAW)
    assert CatalogBarcodeLookup(FakeBarcodeLookup([]), catalog).lookup("3017620422003") == []
    assert catalog.loads == 0


def test_catalog_lookup_propagates_catalog_errors():
    products = FakeBarcodeLookup([_product("Milk")])
    with pytest.raises(CatalogUnavailable):
        CatalogBarcodeLookup(products, StaticCatalog(None)).lookup("3017620422003")


# -----------------------------------
# GPT text reader
# -----------------------------------

def _openai_client_returning(content):
    message = Mock()
    message.content = content
    choice = Mock()
    choice.message = message
    response = Mock()
    response.choices = [choice]
    client = Mock()
    client.chat.completions.create.return_value = response
    return client


def test_text_reader_returns_lines_in_order():
    client = _openai_client_returning(json.dumps({"lines": ["MILK 2%", "BREAD", 7]}))
    reader = GptTextReader(client=client, model="gpt-4o")

    texts = reader.detect_text(b"\x89PNG fake image")

    assert texts == [{"description": "MILK 2%"}, {"description": "BREAD"}, {"description": None}]
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o"
    image_part = kwargs["messages"][0]["content"][1]
    assert image_part["image_url"]["url"].startswith("data:image/png;base64,")


def test_text_reader_reads_files(tmp_path):
    path = tmp_path / "receipt.jpg"
    path.write_bytes(b"\xff\xd8 fake jpeg")
    client = _openai_client_returning('```json\n{"lines": ["EGGS"]}\n```')

    assert GptTextReader(client=client).detect_text(str(path)) == [{"description": "EGGS"}]


def test_text_reader_rejects_response_without_lines():
    client = _openai_client_returning('{"items": []}')
    with pytest.raises(ValueError):
        GptTextReader(client=client).detect_text(b"img")


def test_text_reader_without_client():
    reader = GptTextReader(client=None)
    assert reader.has_text_detection is False
    with pytest.raises(RuntimeError):
        reader.detect_text(b"img")


def test_extract_json_variants():
    assert extract_json('{"lines": []}') == {"lines": []}
    assert extract_json('Sure:\n```json\n{"lines": ["A"]}\n```') == {"lines": ["A"]}
    with pytest.raises(ValueError):
        extract_json("")
    with pytest.raises(ValueError):
        extract_json("no json here")


# -----------------------------------
# YOLO localizer
# -----------------------------------

class _FakeIO:
    def __init__(self, name):
        self.name = name


class _FakeSession:
    def __init__(self, rows):
        self.rows = np.asarray(rows, dtype=np.float32)
        self.inputs = None

    def get_inputs(self):
        return [_FakeIO("images")]

    def get_outputs(self):
        return [_FakeIO("output0")]

    def run(self, output_names, feeds):
        self.inputs = feeds
        return [self.rows[None]]


def _png_bytes():
    img = np.zeros((32, 48, 3), dtype=np.uint8)
    ok, buf = cv2.imencode(".png", img)
    assert ok
    return buf.tobytes()


def test_localizer_decodes_rows_into_named_objects():
    session = _FakeSession(
        [
            [0, 0, 10, 10, 0.40, 47],
            [0, 0, 10, 10, 0.90, 51],
            [0, 0, 10, 10, 0.10, 46],
            [0, 0, 10, 10, 0.80, 999],
        ]
    )
    localizer = YoloObjectLocalizer(
        model_path="unused.onnx",
        labels_path="unused.json",
        min_score=0.25,
        session=session,
        labels={"46": "Banana", "47": "Apple", "51": "Carrot"},
    )

    objects = localizer.localize(_png_bytes())

    assert [o["name"] for o in objects] == ["Carrot", "Apple"]
    assert objects[0]["score"] == pytest.approx(0.9)
    assert session.inputs["images"].shape == (1, 3, 640, 640)


def test_localizer_without_model(tmp_path):
    localizer = YoloObjectLocalizer(
        model_path=str(tmp_path / "missing.onnx"),
        labels_path=str(tmp_path / "missing.json"),
    )
    assert localizer.has_localization is False
    with pytest.raises(RuntimeError):
        localizer.localize(_png_bytes())


def test_load_image_rejects_garbage():
    with pytest.raises(ValueError):
        load_image(b"not an image")
