"""
Ingredient catalog sources.

A provider has a single `load()` method and is called once per recognition
call; nothing here caches. Swapping in a caching or pre-indexed provider
does not change how labels are matched.
"""
import json
import logging
from typing import Any, List, Optional

import requests

from .errors import CatalogUnavailable
from .models import CatalogIngredient

logger = logging.getLogger(__name__)


def parse_catalog(raw: Any) -> List[CatalogIngredient]:
    """
    Validate raw catalog data.

    Raises CatalogUnavailable when `raw` is not a list. Entries that are
    not objects or have no non-empty string name are skipped.
    """
    if not isinstance(raw, list):
        raise CatalogUnavailable(
            f"catalog is not a list (got {type(raw).__name__})"
        )

    entries: List[CatalogIngredient] = []
    skipped = 0
    for item in raw:
        if not isinstance(item, dict):
            skipped += 1
            continue
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            skipped += 1
            continue
        entries.append(
            CatalogIngredient(
                name=name,
                category=str(item.get("category") or ""),
                image_url=str(item.get("imageURL") or ""),
            )
        )

    if skipped:
        logger.warning("[CATALOG] Skipped %d malformed catalog entries", skipped)
    return entries


class CatalogProvider:
    """Read-only source of the current ingredient catalog."""

    name = "catalog"

    def load(self) -> List[CatalogIngredient]:
        raise NotImplementedError


class JsonFileCatalog(CatalogProvider):
    name = "json_file"

    def __init__(self, path: str):
        self.path = path

    def load(self) -> List[CatalogIngredient]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogUnavailable(f"cannot read {self.path}: {e}") from e

        entries = parse_catalog(raw)
        logger.info("[CATALOG] Loaded %d entries from %s", len(entries), self.path)
        return entries


class HttpCatalog(CatalogProvider):
    name = "http"

    def __init__(
        self,
        url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 5.0,
    ):
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout

    def load(self) -> List[CatalogIngredient]:
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            raw = response.json()
        except (requests.RequestException, ValueError) as e:
            raise CatalogUnavailable(f"cannot fetch {self.url}: {e}") from e

        entries = parse_catalog(raw)
        logger.info("[CATALOG] Loaded %d entries from %s", len(entries), self.url)
        return entries
