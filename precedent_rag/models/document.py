"""Document-level data models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class SourceDocument(BaseModel):
    """A source file resolved into an ordered sequence of page texts."""

    file_name: str
    source_path: str
    pages: List[str] = Field(default_factory=list)

    @property
    def num_pages(self) -> int:
        return len(self.pages)


class DocumentMeta(BaseModel):
    """Metadata guessed for a review document before it is parsed."""

    file_name: str
    source_path: str
    jurisdiction: str
    approval_year: Optional[int] = None


class DocumentTriage(BaseModel):
    """Per-document statistics over the annotated chunks."""

    file_name: str
    total_chunks: int = 0
    chunks_with_tables: int = 0
    chunks_with_rtf_keywords: int = 0
    all_table_references: List[str] = Field(default_factory=list)
    all_rtf_keywords: List[str] = Field(default_factory=list)


class IngestStatus(str, Enum):
    STORED = "stored"
    FAILED = "failed"
    SKIPPED = "skipped"


class DocumentIngestResult(BaseModel):
    source_document: str
    status: IngestStatus
    chunks_stored: int = 0
    chunks_failed: int = 0
    error: Optional[str] = None


class IngestionReport(BaseModel):
    """Outcome of one ingestion batch."""

    documents: List[DocumentIngestResult] = Field(default_factory=list)

    @property
    def stored_documents(self) -> List[str]:
        return [d.source_document for d in self.documents if d.status == IngestStatus.STORED]

    @property
    def failed_documents(self) -> List[str]:
        return [d.source_document for d in self.documents if d.status == IngestStatus.FAILED]

    @property
    def total_chunks_stored(self) -> int:
        return sum(d.chunks_stored for d in self.documents)
