"""FastAPI application entry point."""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException

from precedent_rag.audit import PredictiveAuditor
from precedent_rag.config import settings
from precedent_rag.ingestion.annotator import annotate, summarize_document
from precedent_rag.ingestion.extract_text import TextExtractor
from precedent_rag.ingestion.segmenter import DocumentSegmenter
from precedent_rag.llm.provider import build_provider
from precedent_rag.models.audit import AuditRequest, TriageRequest
from precedent_rag.models.document import DocumentTriage
from precedent_rag.models.retrieval import AuditResult
from precedent_rag.retrieval.vector_store import QdrantPrecedentStore

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Precedent RAG",
    description="Predictive audit of regulatory submissions against SBA/EPAR precedents",
    version="0.1.0",
)


@lru_cache(maxsize=1)
def get_auditor() -> PredictiveAuditor:
    provider = build_provider(settings)
    return PredictiveAuditor(provider, QdrantPrecedentStore(config=settings), config=settings)


def get_segmenter() -> DocumentSegmenter:
    return DocumentSegmenter(config=settings)


@app.get("/health")
def health() -> dict[str, str]:
    """Simple readiness probe."""
    return {"status": "ok"}


@app.post("/audit", response_model=AuditResult)
def audit(payload: AuditRequest, auditor: PredictiveAuditor = Depends(get_auditor)) -> AuditResult:
    """Audit a draft against stored precedents; empty findings when no backend is reachable."""
    try:
        return auditor.audit(payload.draft_text, payload.document_type)
    except Exception as exc:
        logger.error("Predictive audit failed: %s", exc)
        raise HTTPException(status_code=500, detail="Predictive audit failed.") from exc


@app.post("/triage", response_model=DocumentTriage)
def triage(payload: TriageRequest, segmenter: DocumentSegmenter = Depends(get_segmenter)) -> DocumentTriage:
    """Table and refusal-to-file statistics for pre-extracted document text."""
    document = TextExtractor().extract_text(payload.file_name, payload.text)
    chunks = segmenter.segment(document)
    return summarize_document(document.file_name, [(chunk, annotate(chunk.content)) for chunk in chunks])
