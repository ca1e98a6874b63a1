"""Prompt templates for the audit narrative."""

from __future__ import annotations

from typing import Iterable

from precedent_rag.models.retrieval import Finding, RiskSummary

NO_PRECEDENTS = "No precedents (ingest SBAs/EPARs for vector search)."


def build_system_prompt(document_type: str, guidance_used: bool) -> str:
    prompt = (
        "You are a regulatory intelligence assistant for bio-pharma submissions.\n"
        f"Analyze precedent findings and produce a concise executive summary for a {document_type}.\n"
        "Use the Red/Yellow/Green risk framework. Be specific about regulatory roadblocks."
    )
    if guidance_used:
        prompt += "\nIncorporate insights from the provided FDA guidance when relevant."
    return prompt


def format_finding(finding: Finding) -> str:
    return (
        f"[{finding.angle}] {finding.risk_level.value} "
        f"({finding.similarity * 100:.0f}% match): {finding.summary}"
    )


def build_user_prompt(
    document_type: str,
    findings: Iterable[Finding],
    risk_summary: RiskSummary,
    draft_excerpt: str,
    guidance: str = "",
) -> str:
    excerpts = "\n".join(format_finding(finding) for finding in findings)
    prompt = f"""Draft document type: {document_type}

Precedent findings from SBAs/EPARs:
{excerpts or NO_PRECEDENTS}

Risk counts: {risk_summary.red} RED, {risk_summary.yellow} YELLOW, {risk_summary.green} GREEN

Draft excerpt for context:
{draft_excerpt}

Generate a 3-5 sentence executive summary with actionable recommendations."""
    if guidance:
        prompt += f"\n\nLocal FDA Guidance context:\n{guidance}"
    return prompt
