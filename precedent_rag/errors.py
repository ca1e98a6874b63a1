"""Typed failures raised at the collaborator boundaries."""

from __future__ import annotations


class PrecedentRAGError(Exception):
    """Base class for every error raised by this package."""


class ExtractionError(PrecedentRAGError):
    """A source document could not be read or decoded into page text."""

    def __init__(self, source: str, cause: str) -> None:
        self.source = source
        self.cause = cause
        super().__init__(f"Could not extract text from {source}: {cause}")


class EmbeddingUnavailable(PrecedentRAGError):
    """No embedding backend is configured, or the batch call failed."""


class CompletionUnavailable(PrecedentRAGError):
    """No completion backend is configured, or the completion call failed."""


class StoreError(PrecedentRAGError):
    """A precedent store query, insert or delete failed."""
