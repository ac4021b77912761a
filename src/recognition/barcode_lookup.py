import logging
import re
from typing import Dict, List, Optional

import requests

from .catalog import CatalogProvider
from .matcher import match
from .models import DetectedLabel

logger = logging.getLogger(__name__)

_BARCODE_RE = re.compile(r"^\d{8,14}$")

DEFAULT_CATEGORY = "Other"


def _categories_from_product(product: Dict) -> List[str]:
    # "categories" is a comma separated list, broadest first
    raw = product.get("categories") or ""
    return [part.strip() for part in raw.split(",") if part.strip()]


class OpenFoodFactsLookup:
    """
    Barcode lookup against the Open Food Facts product API.

    Returns raw product records {"name", "category", "categories", "imageURL"}.
    These are not catalog entries yet; see CatalogBarcodeLookup.
    Network and HTTP errors propagate as requests exceptions.
    """

    name = "openfoodfacts"

    def __init__(
        self,
        base_url: str = "https://world.openfoodfacts.org/api/v2/product",
        session: Optional[requests.Session] = None,
        timeout: float = 5.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def lookup(self, barcode: str) -> List[Dict[str, str]]:
        code = (barcode or "").strip()
        if not _BARCODE_RE.match(code):
            logger.info("Ignoring malformed barcode %r", barcode)
            return []

        url = f"{self.base_url}/{code}.json"
        response = self.session.get(url, timeout=self.timeout)
        if response.status_code == 404:
            return []
        response.raise_for_status()

        js = response.json()
        if js.get("status") != 1:
            return []

        product = js.get("product") or {}
        categories = _categories_from_product(product)
        name = (product.get("product_name") or "").strip()
        if not name:
            logger.info("Barcode %s has no product name", code)
            return []

        return [
            {
                "name": name,
                "category": categories[0] if categories else DEFAULT_CATEGORY,
                "categories": categories,
                "imageURL": product.get("image_front_url") or product.get("image_url") or "",
            }
        ]


class CatalogBarcodeLookup:
    """
    Resolves a product lookup into catalog entries.

    The product name is tried first, then its categories from the most
    specific to the broadest. The first key with a catalog match wins and
    all catalog rows for it are returned. Products with no catalog match
    resolve to nothing.
    """

    def __init__(self, products, catalog: CatalogProvider):
        self.products = products
        self.catalog = catalog
        self.name = getattr(products, "name", type(products).__name__)

    def lookup(self, barcode: str) -> List[Dict[str, str]]:
        products = self.products.lookup(barcode)
        if not products:
            return []

        catalog = self.catalog.load()
        records: List[Dict[str, str]] = []
        for product in products:
            keys = [product.get("name")] + list(reversed(product.get("categories") or []))
            for key in keys:
                entries = match([DetectedLabel(text=key)], catalog)
                if entries:
                    logger.info(
                        "Barcode %s resolved via %r to %d catalog entries",
                        barcode,
                        key,
                        len(entries),
                    )
                    records.extend(
                        {"name": e.name, "category": e.category, "imageURL": e.image_url}
                        for e in entries
                    )
                    break
            else:
                logger.info("Barcode %s product %r has no catalog entry", barcode, product.get("name"))
        return records
