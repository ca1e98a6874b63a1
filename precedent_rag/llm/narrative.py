"""Glue module that turns audit findings into an executive narrative."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from precedent_rag.config import Settings, settings as default_settings
from precedent_rag.llm.prompts import build_system_prompt, build_user_prompt
from precedent_rag.llm.provider import ModelProvider
from precedent_rag.models.retrieval import Finding, RiskSummary

logger = logging.getLogger(__name__)

NO_DATA_NARRATIVE = "Insufficient precedent data to generate summary. Ingest SBAs/EPARs first."


def fallback_narrative(risk_summary: RiskSummary) -> str:
    return (
        "Could not generate an executive summary; configure a completion backend. "
        f"Risks: {risk_summary.red} RED, {risk_summary.yellow} YELLOW, {risk_summary.green} GREEN."
    )


class NarrativeSummarizer:
    """Best-effort executive summary; failures only degrade the narrative text."""

    def __init__(self, provider: ModelProvider, config: Optional[Settings] = None) -> None:
        config = config or default_settings
        self.provider = provider
        self.max_findings = config.narrative_max_findings
        self.draft_chars = config.narrative_draft_chars
        self.guidance_chars = config.guidance_prompt_chars
        self.max_output_tokens = config.narrative_max_tokens

    def generate(
        self,
        document_type: str,
        findings: Sequence[Finding],
        risk_summary: RiskSummary,
        draft_excerpt: str,
        guidance: str = "",
    ) -> str:
        system_prompt = build_system_prompt(document_type, bool(guidance))
        user_prompt = build_user_prompt(
            document_type,
            findings[: self.max_findings],
            risk_summary,
            draft_excerpt[: self.draft_chars],
            guidance[: self.guidance_chars],
        )
        try:
            narrative = self.provider.complete(system_prompt, user_prompt, self.max_output_tokens)
        except Exception as exc:
            logger.error("Narrative summary failed: %s", exc)
            return fallback_narrative(risk_summary)
        return narrative.strip() or NO_DATA_NARRATIVE
