"""Errors raised inside the recognition pipeline.

None of them reach callers of RecognitionPipeline; the facade turns them
into an UNAVAILABLE outcome.
"""


class RecognitionError(Exception):
    """Base class for recognition failures."""


class DetectionUnavailable(RecognitionError):
    """Backend has no capability for the request or its call failed."""

    def __init__(self, backend: str, reason: str):
        super().__init__(f"{backend}: {reason}")
        self.backend = backend
        self.reason = reason


class CatalogUnavailable(RecognitionError):
    """Catalog source failed or returned data that is not a list."""
