"""Retrieval and audit result models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .chunk import Jurisdiction, PrecedentChunk, ReviewType


class RiskLevel(str, Enum):
    RED = "RED"
    YELLOW = "YELLOW"
    GREEN = "GREEN"


class SearchFilters(BaseModel):
    """Conjunctive metadata filters; an unset field matches everything."""

    review_type: Optional[ReviewType] = None
    jurisdiction: Optional[Jurisdiction] = None
    drug_class: Optional[str] = None


class SearchAngle(BaseModel):
    """One independently filtered retrieval pass over the shared query vector."""

    key: str
    label: str
    filters: SearchFilters = Field(default_factory=SearchFilters)
    limit: int = 12


class StoreMatch(BaseModel):
    chunk: PrecedentChunk
    similarity: float


class Finding(BaseModel):
    """A retrieved precedent with its similarity, risk level and originating angle."""

    chunk_id: str
    angle: str
    angle_label: str
    rank: int
    similarity: float
    risk_level: RiskLevel
    summary: str
    content: str
    source_document: Optional[str] = None
    source_page: Optional[int] = None
    drug_class: Optional[str] = None
    therapeutic_area: Optional[str] = None
    review_type: Optional[str] = None
    reviewer_sentiment: Optional[str] = None


class RiskSummary(BaseModel):
    red: int = 0
    yellow: int = 0
    green: int = 0

    @classmethod
    def tally(cls, findings: List[Finding]) -> "RiskSummary":
        counts = {level: 0 for level in RiskLevel}
        for finding in findings:
            counts[finding.risk_level] += 1
        return cls(
            red=counts[RiskLevel.RED],
            yellow=counts[RiskLevel.YELLOW],
            green=counts[RiskLevel.GREEN],
        )


class AuditResult(BaseModel):
    findings: List[Finding] = Field(default_factory=list)
    risk_summary: RiskSummary = Field(default_factory=RiskSummary)
    narrative: str = ""
    guidance_context_used: bool = False
