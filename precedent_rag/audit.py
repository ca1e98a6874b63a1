"""Predictive audit of a draft submission against stored review precedents."""

from __future__ import annotations

import logging
from typing import List, Optional

from precedent_rag.config import Settings, settings as default_settings
from precedent_rag.ingestion.guidance_loader import load_guidance_context
from precedent_rag.llm.narrative import NarrativeSummarizer
from precedent_rag.llm.provider import ModelProvider
from precedent_rag.models.chunk import Jurisdiction, ReviewType
from precedent_rag.models.retrieval import AuditResult, RiskSummary, SearchAngle, SearchFilters
from precedent_rag.retrieval.multi_angle import MultiAngleRetriever
from precedent_rag.retrieval.vector_store import PrecedentStore

logger = logging.getLogger(__name__)


def default_angles(limit: int = 12) -> List[SearchAngle]:
    return [
        SearchAngle(
            key="A",
            label="Safety Signals (Similar Drug Classes)",
            filters=SearchFilters(review_type=ReviewType.MEDICAL),
            limit=limit,
        ),
        SearchAngle(
            key="B",
            label="Reviewer Stickler Points (PK/PD)",
            filters=SearchFilters(review_type=ReviewType.PHARMACOLOGY),
            limit=limit,
        ),
        SearchAngle(
            key="C",
            label="EMA EPAR Safety Warnings",
            filters=SearchFilters(jurisdiction=Jurisdiction.EMA),
            limit=limit,
        ),
    ]


class PredictiveAuditor:
    """Retrieves precedents from every angle, tallies risk and writes a narrative."""

    def __init__(
        self,
        provider: ModelProvider,
        store: PrecedentStore,
        retriever: Optional[MultiAngleRetriever] = None,
        summarizer: Optional[NarrativeSummarizer] = None,
        config: Optional[Settings] = None,
    ) -> None:
        self.config = config or default_settings
        self.retriever = retriever or MultiAngleRetriever(
            provider,
            store,
            default_angles(self.config.angle_limit),
            config=self.config,
        )
        self.summarizer = summarizer or NarrativeSummarizer(provider, config=self.config)

    def load_guidance(self) -> str:
        try:
            return load_guidance_context(self.config.guidance_root_path, self.config.guidance_max_chars)
        except OSError as exc:
            logger.warning("Guidance context unavailable: %s", exc)
            return ""

    def audit(
        self,
        draft_text: str,
        document_type: str = "Clinical Protocol",
        timeout: Optional[float] = None,
    ) -> AuditResult:
        if timeout is None:
            timeout = self.config.retrieval_timeout_seconds
        guidance = self.load_guidance()
        draft_excerpt = draft_text[: self.config.draft_excerpt_chars]

        findings = self.retriever.retrieve(draft_excerpt, timeout=timeout)
        risk_summary = RiskSummary.tally(findings)
        logger.info(
            "Audit of %s: %s findings (%s RED, %s YELLOW, %s GREEN)",
            document_type,
            len(findings),
            risk_summary.red,
            risk_summary.yellow,
            risk_summary.green,
        )
        narrative = self.summarizer.generate(
            document_type,
            findings,
            risk_summary,
            draft_excerpt,
            guidance,
        )
        return AuditResult(
            findings=findings,
            risk_summary=risk_summary,
            narrative=narrative,
            guidance_context_used=bool(guidance),
        )
