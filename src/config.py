import os


def _parse_cors_origins(raw: str) -> list[str]:
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
CORS_ORIGINS = _parse_cors_origins(os.getenv("CORS_ORIGINS", "*"))
ALLOW_ALL_ORIGINS = CORS_ORIGINS == ["*"]

# -----------------------------------
# Ingredient catalog
# -----------------------------------

# CATALOG_PATH: JSON array of {"name", "category", "imageURL"} records
CATALOG_PATH = os.getenv("CATALOG_PATH", "data/ingredients.json")

# CATALOG_URL: if set, the catalog is fetched over HTTP instead of CATALOG_PATH
CATALOG_URL = os.getenv("CATALOG_URL", "")

CATALOG_TIMEOUT_S = float(os.getenv("CATALOG_TIMEOUT_S", "5"))

# -----------------------------------
# Object localization (ONNX YOLO)
# -----------------------------------

LOCALIZER_MODEL_PATH = os.getenv("LOCALIZER_MODEL_PATH", "models/yolo_general.onnx")

# LOCALIZER_LABELS_PATH: JSON map {"<class id>": "<label>"} for the model above
LOCALIZER_LABELS_PATH = os.getenv("LOCALIZER_LABELS_PATH", "models/yolo_general_labels.json")

# LOCALIZER_MIN_SCORE: detector-side cut for raw YOLO rows, not applied to matching
LOCALIZER_MIN_SCORE = float(os.getenv("LOCALIZER_MIN_SCORE", "0.25"))

# -----------------------------------
# Receipt text detection (GPT vision)
# -----------------------------------

# OCR_MODEL: vision model used to transcribe receipt lines
# Expected values: "gpt-4o-mini" (default) or "gpt-4o"
OCR_MODEL = os.getenv("OCR_MODEL", "gpt-4o-mini")

# -----------------------------------
# Barcode lookup (Open Food Facts)
# -----------------------------------

BARCODE_LOOKUP_URL = os.getenv(
    "BARCODE_LOOKUP_URL", "https://world.openfoodfacts.org/api/v2/product"
)
BARCODE_TIMEOUT_S = float(os.getenv("BARCODE_TIMEOUT_S", "5"))

# -----------------------------------
# Pipeline behaviour
# -----------------------------------

# CONCURRENT_CATALOG_LOAD: issue detector call and catalog load together
CONCURRENT_CATALOG_LOAD = os.getenv("CONCURRENT_CATALOG_LOAD", "true").lower() == "true"

# RECOGNITION_TIMEOUT_S: overall budget per recognition call (0 = disabled)
RECOGNITION_TIMEOUT_S = float(os.getenv("RECOGNITION_TIMEOUT_S", "0"))
