import logging
from typing import List, Sequence

from .models import CatalogIngredient, DetectedLabel
from .normalizer import normalize

logger = logging.getLogger(__name__)


def match(
    labels: Sequence[DetectedLabel],
    catalog: Sequence[CatalogIngredient],
) -> List[CatalogIngredient]:
    """
    Resolve detector labels against the catalog by exact normalized name.

    Output follows label order, then catalog order within one label.
    A label repeated by the detector, or a name repeated in the catalog,
    yields repeated entries. Labels with no catalog entry are dropped.
    """
    keyed = [(normalize(entry.name), entry) for entry in catalog]

    matched: List[CatalogIngredient] = []
    for label in labels:
        key = normalize(label.text)
        if not key:
            continue
        hits = [entry for entry_key, entry in keyed if entry_key == key]
        if not hits:
            logger.debug("No catalog entry for label %r", label.text)
        matched.extend(hits)

    return matched
