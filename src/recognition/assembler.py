from typing import Iterable, List

from .models import DEFAULT_QUANTITY, CatalogIngredient, IngredientCandidate


def assemble(entries: Iterable[CatalogIngredient]) -> List[IngredientCandidate]:
    """Shape matched catalog entries into inventory candidates (quantity 1)."""
    return [
        IngredientCandidate(
            name=entry.name,
            category=entry.category,
            image_url=entry.image_url,
            quantity=DEFAULT_QUANTITY,
        )
        for entry in entries
    ]
