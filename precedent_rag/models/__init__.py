"""Typed models shared across the application."""

from .audit import AuditRequest, DocumentType, TriageRequest
from .chunk import (
    ChunkAnnotations,
    Jurisdiction,
    PrecedentChunk,
    PrecedentMeta,
    ReviewerSentiment,
    ReviewType,
    TextChunk,
)
from .document import (
    DocumentIngestResult,
    DocumentMeta,
    DocumentTriage,
    IngestionReport,
    IngestStatus,
    SourceDocument,
)
from .retrieval import (
    AuditResult,
    Finding,
    RiskLevel,
    RiskSummary,
    SearchAngle,
    SearchFilters,
    StoreMatch,
)

__all__ = [
    "AuditRequest",
    "AuditResult",
    "ChunkAnnotations",
    "DocumentIngestResult",
    "DocumentMeta",
    "DocumentTriage",
    "DocumentType",
    "Finding",
    "IngestionReport",
    "IngestStatus",
    "Jurisdiction",
    "PrecedentChunk",
    "PrecedentMeta",
    "ReviewerSentiment",
    "ReviewType",
    "RiskLevel",
    "RiskSummary",
    "SearchAngle",
    "SearchFilters",
    "SourceDocument",
    "StoreMatch",
    "TextChunk",
    "TriageRequest",
]
