"""Error taxonomy for the analysis core.

Every failure that crosses a module boundary is one of these types:

- ValidationError: bad input detected before any I/O (unknown contract type,
  missing prerequisite data, missing credential).
- ProviderError: transport, HTTP status, or response-envelope failure from an
  AI backend.
- NormalizationError: model output that is not structurally valid JSON after
  unwrapping. Missing optional fields never raise this.
- NotFoundError: a referenced entity is absent from storage.
- PersistenceError: the storage layer failed.
"""

from __future__ import annotations

from typing import Optional


class AnalysisError(Exception):
    """Base class for analysis-core errors."""

    pass


class ValidationError(AnalysisError):
    """Input rejected before any network or storage call."""

    pass


class NotFoundError(AnalysisError):
    """Referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class PersistenceError(AnalysisError):
    """Storage layer failure, wrapping the underlying driver error."""

    pass


class NormalizationError(AnalysisError):
    """Model output could not be decoded as the expected JSON structure."""

    def __init__(self, message: str, raw: str = ""):
        self.raw = raw
        super().__init__(message)


# HTTP statuses worth retrying from a caller-level decorator
RETRYABLE_STATUSES = frozenset({408, 409, 425, 429, 500, 502, 503, 504, 529})

# Response bodies kept on ProviderError are cut to this many characters
MAX_BODY_CHARS = 500


class ProviderError(AnalysisError):
    """AI backend failure with enough context to diagnose without re-running."""

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        retryable: Optional[bool] = None,
    ):
        self.provider = provider
        self.message = message
        self.status_code = status_code
        self.body = body[:MAX_BODY_CHARS] if body else body
        if retryable is None:
            retryable = status_code is None or status_code in RETRYABLE_STATUSES
        self.retryable = retryable
        super().__init__(self.__str__())

    def __str__(self) -> str:
        text = f"{self.provider}: {self.message}"
        if self.status_code is not None:
            text += f" (HTTP {self.status_code})"
        if self.body:
            text += f": {self.body}"
        return text


__all__ = [
    "AnalysisError",
    "NormalizationError",
    "NotFoundError",
    "PersistenceError",
    "ProviderError",
    "MAX_BODY_CHARS",
    "RETRYABLE_STATUSES",
    "ValidationError",
]
