"""Request/response models for the public API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

DocumentType = Literal["Clinical Protocol", "IND Submission"]


class AuditRequest(BaseModel):
    """Draft submission text to audit against stored precedents."""

    draft_text: str = Field(..., min_length=3)
    document_type: DocumentType = "Clinical Protocol"


class TriageRequest(BaseModel):
    """Pre-extracted document text; pages may be separated by form feeds."""

    file_name: str = "document.txt"
    text: str = Field(..., min_length=1)
