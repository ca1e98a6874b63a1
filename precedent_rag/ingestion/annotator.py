"""Detect table references and refusal-to-file vocabulary in review chunks."""

from __future__ import annotations

import argparse
import logging
import re
from typing import Iterable, List, NamedTuple, Pattern, Sequence, Tuple

from precedent_rag.config import settings
from precedent_rag.models.chunk import ChunkAnnotations, TextChunk
from precedent_rag.models.document import DocumentTriage

logger = logging.getLogger(__name__)


class TablePattern(NamedTuple):
    form: str
    regex: Pattern[str]


# FDA/EMA reviews number their tables consistently; order decides which
# original spelling is reported when two forms normalize to the same text.
TABLE_PATTERNS: Tuple[TablePattern, ...] = (
    TablePattern("numeric", re.compile(r"\bTable\s+\d+(?:\.\d+)?[a-z]?\b", re.IGNORECASE)),
    TablePattern("roman", re.compile(r"\bTable\s+[IVXLCDM]+\b", re.IGNORECASE)),
    TablePattern("lettered", re.compile(r"\bTable\s+[A-Z](?:-\d+)?\b", re.IGNORECASE)),
    TablePattern("supplementary", re.compile(r"\bTable\s+S\d+(?:\.\d+)?\b", re.IGNORECASE)),
    TablePattern("range", re.compile(r"\bTables\s+\d+(?:\s*[-–]\s*\d+)?\b", re.IGNORECASE)),
    TablePattern("ocr_artifact", re.compile(r"\bTable\.\s*\d+\b", re.IGNORECASE)),
    TablePattern("labeled", re.compile(r"\b(?:Summary|Safety|Efficacy)\s+Table\b", re.IGNORECASE)),
)

# Refusal-to-file terminology, after FDA guidance and 21 CFR 314.101 / 601.2.
# Entries are lower case; matching is substring containment on lowered text.
RTF_KEYWORDS: Tuple[str, ...] = (
    # primary
    "refusal to file",
    "refuse to file",
    "refused for filing",
    "refused to file",
    "refuse-to-file",
    "refusal-to-file",
    "rtf letter",
    "rtf action",
    "rtf decision",
    # administrative incompleteness
    "administrative incompleteness",
    "administratively incomplete",
    "clear omission",
    "omission of required",
    "missing required",
    "incomplete application",
    "incomplete submission",
    # scientific incompleteness
    "scientific incompleteness",
    "scientifically incomplete",
    "inadequate clinical information",
    "inadequate clinical data",
    "inadequate quality data",
    "inadequate manufacturing",
    "inadequate manufacturing information",
    "missing pharmacology",
    "missing toxicology",
    "insufficient statistical",
    "post-hoc analys",
    "post hoc analys",
    "incomplete analysis",
    "incomplete analysis of studies",
    "inadequate facility information",
    # regulatory citations
    "21 cfr 314.101",
    "21 cfr 601.2",
    "314.101(d)",
    "601.2",
    "section 505(b)",
    "section 351",
    # actions
    "not file",
    "refuse to accept",
    "refusal to accept",
    "incomplete upon submission",
    "deficiencies preclude review",
    "cannot commence review",
    "cannot begin review",
)


def detect_tables(text: str) -> List[str]:
    """Return table references in pattern order, deduplicated case-insensitively."""
    references: List[str] = []
    seen = set()
    for entry in TABLE_PATTERNS:
        for match in entry.regex.finditer(text):
            original = match.group(0).strip()
            normalized = original.lower()
            if normalized not in seen:
                seen.add(normalized)
                references.append(original)
    return references


def detect_rtf_keywords(text: str, vocabulary: Sequence[str] = RTF_KEYWORDS) -> List[str]:
    lowered = text.lower()
    found: List[str] = []
    for phrase in vocabulary:
        if phrase in lowered and phrase not in found:
            found.append(phrase)
    return found


def annotate(text: str) -> ChunkAnnotations:
    references = detect_tables(text)
    return ChunkAnnotations(
        contains_table=bool(references),
        table_references=references,
        rtf_keywords=detect_rtf_keywords(text),
    )


def summarize_document(
    file_name: str, annotated: Iterable[Tuple[TextChunk, ChunkAnnotations]]
) -> DocumentTriage:
    """Aggregate per-chunk annotations into document triage statistics."""
    triage = DocumentTriage(file_name=file_name)
    for _, annotations in annotated:
        triage.total_chunks += 1
        if annotations.contains_table:
            triage.chunks_with_tables += 1
        if annotations.rtf_keywords:
            triage.chunks_with_rtf_keywords += 1
        for reference in annotations.table_references:
            if reference not in triage.all_table_references:
                triage.all_table_references.append(reference)
        for keyword in annotations.rtf_keywords:
            if keyword not in triage.all_rtf_keywords:
                triage.all_rtf_keywords.append(keyword)
    return triage


def _print_samples(title: str, rows: List[Tuple[TextChunk, str]], limit: int = 3) -> None:
    print(f"\n--- {title} ---")
    for chunk, label in rows[:limit]:
        print(f"\n[Page {chunk.source_page}] {label}")
        print(chunk.content[:300] + "...")


def main(argv: List[str] | None = None) -> None:
    """Print triage statistics for a single review document."""
    from precedent_rag.ingestion.extract_text import TextExtractor
    from precedent_rag.ingestion.segmenter import DocumentSegmenter

    parser = argparse.ArgumentParser(description="Triage a regulatory review document.")
    parser.add_argument("path", help="PDF, DOCX or TXT file to triage")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level)
    document = TextExtractor().extract(args.path)
    chunks = DocumentSegmenter(config=settings).segment(document)
    annotated = [(chunk, annotate(chunk.content)) for chunk in chunks]
    triage = summarize_document(document.file_name, annotated)

    print(f"File: {triage.file_name}")
    print(f"Pages: {document.num_pages}")
    print(f"Chunks: {triage.total_chunks}")
    print(f"Chunks with Tables: {triage.chunks_with_tables}")
    print(f"Chunks with RTF Keywords: {triage.chunks_with_rtf_keywords}")
    if triage.all_table_references:
        print(f"\nTables detected: {', '.join(triage.all_table_references)}")
    if triage.all_rtf_keywords:
        print(f"\nRTF keywords found: {', '.join(triage.all_rtf_keywords)}")

    _print_samples(
        "Sample Chunks with RTF Keywords",
        [(c, "Keywords: " + ", ".join(a.rtf_keywords)) for c, a in annotated if a.rtf_keywords],
    )
    _print_samples(
        "Sample Chunks with Tables",
        [(c, "Tables: " + ", ".join(a.table_references)) for c, a in annotated if a.contains_table],
    )


if __name__ == "__main__":
    main()
