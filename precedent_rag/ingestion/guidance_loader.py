"""Load local agency guidance PDFs as extra narrative context."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from precedent_rag.errors import ExtractionError
from precedent_rag.ingestion.extract_text import TextExtractor
from precedent_rag.ingestion.segmenter import PARAGRAPH_BREAK

logger = logging.getLogger(__name__)

MIN_GUIDANCE_PARAGRAPH = 50


def load_guidance_context(
    docs_dir: Path,
    max_chars: int = 12000,
    extractor: Optional[TextExtractor] = None,
) -> str:
    """Return a delimited block of guidance paragraphs, or "" when none are available."""
    if not docs_dir.is_dir():
        return ""
    pdfs = sorted(path for path in docs_dir.iterdir() if path.suffix.lower() == ".pdf")
    if not pdfs:
        return ""

    extractor = extractor or TextExtractor()
    sections: List[str] = []
    total_chars = 0
    for pdf in pdfs:
        if total_chars >= max_chars:
            break
        try:
            document = extractor.extract(pdf)
        except ExtractionError as exc:
            logger.warning("Failed to load guidance %s: %s", pdf.name, exc.cause)
            continue
        for page in document.pages:
            for paragraph in PARAGRAPH_BREAK.split(page):
                paragraph = paragraph.strip()
                if len(paragraph) <= MIN_GUIDANCE_PARAGRAPH:
                    continue
                if total_chars + len(paragraph) > max_chars:
                    break
                sections.append(f"[{pdf.name}]\n{paragraph}")
                total_chars += len(paragraph)

    if not sections:
        return ""
    body = "\n\n---\n\n".join(sections)
    return f"\n--- LOCAL FDA GUIDANCE ---\n{body}\n--- END GUIDANCE ---\n"
