"""
Value types passed between recognition stages.

All of them are created fresh per recognition call and never stored.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

# Local file path or encoded image bytes
ImageRef = Union[str, bytes]

# Confidence of labels coming from backends that do not score their output
UNSCORED: Optional[float] = None

DEFAULT_QUANTITY = 1


class Modality(str, Enum):
    OBJECTS = "objects"
    RECEIPT = "receipt"
    BARCODE = "barcode"


class OutcomeStatus(str, Enum):
    OK = "ok"
    NO_MATCH = "no_match"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class CatalogIngredient:
    name: str
    category: str
    image_url: str


@dataclass(frozen=True)
class DetectedLabel:
    text: str
    confidence: Optional[float] = UNSCORED


@dataclass(frozen=True)
class IngredientCandidate:
    name: str
    category: str
    image_url: str
    quantity: int = DEFAULT_QUANTITY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "imageURL": self.image_url,
            "quantity": self.quantity,
        }


@dataclass
class RecognitionOutcome:
    """
    Result of one recognition call.

    Callers that only need the ingredient list read `candidates`; `status`
    and `reason` tell "nothing found" apart from "backend unavailable".
    """

    modality: Modality
    status: OutcomeStatus
    candidates: List[IngredientCandidate] = field(default_factory=list)
    reason: Optional[str] = None

    @classmethod
    def from_candidates(
        cls, modality: Modality, candidates: List[IngredientCandidate]
    ) -> "RecognitionOutcome":
        status = OutcomeStatus.OK if candidates else OutcomeStatus.NO_MATCH
        return cls(modality=modality, status=status, candidates=candidates)

    @classmethod
    def unavailable(cls, modality: Modality, reason: str) -> "RecognitionOutcome":
        return cls(modality=modality, status=OutcomeStatus.UNAVAILABLE, reason=reason)
