"""Chunk-level models used for ingestion and retrieval."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReviewType(str, Enum):
    MEDICAL = "Medical"
    CMC = "CMC"
    PHARMACOLOGY = "Pharmacology"
    CLINICAL = "Clinical"
    NONCLINICAL = "Nonclinical"
    OTHER = "Other"


class ReviewerSentiment(str, Enum):
    POSITIVE = "Positive"
    CONCERNED = "Concerned"
    CRITICAL = "Critical"
    NEUTRAL = "Neutral"
    UNSPECIFIED = "Unspecified"


class Jurisdiction(str, Enum):
    FDA = "FDA"
    EMA = "EMA"
    PMDA = "PMDA"
    OTHER = "Other"


class TextChunk(BaseModel):
    """A bounded span of page text emitted by the segmenter."""

    content: str
    source_document: str
    source_page: int
    chunk_index: int


class ChunkAnnotations(BaseModel):
    """Domain patterns detected in one chunk."""

    contains_table: bool = False
    table_references: List[str] = Field(default_factory=list)
    rtf_keywords: List[str] = Field(default_factory=list)


class PrecedentMeta(BaseModel):
    """Structured metadata curated per chunk and used for filtered search."""

    drug_class: Optional[str] = None
    therapeutic_area: Optional[str] = None
    review_type: Optional[ReviewType] = None
    reviewer_sentiment: ReviewerSentiment = ReviewerSentiment.UNSPECIFIED
    jurisdiction: Optional[Jurisdiction] = None
    application_type: Optional[str] = None
    approval_year: Optional[int] = None


class PrecedentChunk(PrecedentMeta):
    """A stored precedent. Immutable once built; corrections are delete + reinsert."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    content: str
    source_document: str
    source_page: int
    chunk_index: int
    contains_table: bool = False
    table_references: List[str] = Field(default_factory=list)
    rtf_keywords: List[str] = Field(default_factory=list)
    embedding: List[float] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def build(
        cls,
        chunk: TextChunk,
        annotations: ChunkAnnotations,
        meta: PrecedentMeta,
        embedding: List[float],
    ) -> "PrecedentChunk":
        return cls(
            **chunk.model_dump(),
            **annotations.model_dump(),
            **meta.model_dump(),
            embedding=list(embedding),
        )
