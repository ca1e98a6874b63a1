"""Decode PDF, Word and plain-text review documents into ordered page text."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

import fitz
from docx import Document as DocxDocument

from precedent_rag.errors import ExtractionError
from precedent_rag.models.document import SourceDocument

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".pdf", ".docx", ".txt")
PAGE_BREAK = "\f"


def normalize_block_text(text: str) -> str:
    parts = [line.strip() for line in text.splitlines() if line.strip()]
    return " ".join(parts)


def iter_page_paragraphs(page: fitz.Page) -> Iterable[str]:
    """Yield cleaned text blocks from a PDF page in reading order."""
    blocks = page.get_text("blocks")
    for block in sorted(blocks, key=lambda b: (b[1], b[0])):
        text = normalize_block_text(block[4])
        if text:
            yield text


def split_pages(text: str) -> List[str]:
    """Split on form feeds, the page marker PDF text dumps inject."""
    pages = [page for page in text.split(PAGE_BREAK) if page.strip()]
    return pages or [text]


class TextExtractor:
    """Resolve a source file into a :class:`SourceDocument`.

    Every failure surfaces as :class:`ExtractionError` carrying a readable cause.
    """

    def extract(self, path: str | Path) -> SourceDocument:
        source = Path(path)
        suffix = source.suffix.lower()
        if not source.is_file():
            raise ExtractionError(source.name, "file not found")
        if suffix not in SUPPORTED_EXTENSIONS:
            raise ExtractionError(source.name, f"unsupported format: {suffix or 'none'}")

        try:
            if suffix == ".pdf":
                pages = self._extract_pdf(source)
            elif suffix == ".docx":
                pages = self._extract_docx(source)
            else:
                pages = split_pages(source.read_text(encoding="utf-8"))
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(source.name, str(exc) or exc.__class__.__name__) from exc

        if not any(page.strip() for page in pages):
            raise ExtractionError(source.name, "no extractable text")

        logger.debug("Extracted %s pages from %s", len(pages), source)
        return SourceDocument(
            file_name=source.name,
            source_path=str(source.resolve()),
            pages=pages,
        )

    def extract_text(self, file_name: str, text: str) -> SourceDocument:
        """Wrap already-extracted text, honouring form-feed page markers."""
        return SourceDocument(file_name=file_name, source_path=file_name, pages=split_pages(text))

    @staticmethod
    def _extract_pdf(source: Path) -> List[str]:
        pages: List[str] = []
        with fitz.open(source) as doc:
            for page in doc:
                pages.append("\n\n".join(iter_page_paragraphs(page)))
        return pages

    @staticmethod
    def _extract_docx(source: Path) -> List[str]:
        doc = DocxDocument(str(source))
        parts = [para.text.strip() for para in doc.paragraphs if para.text.strip()]
        for table in doc.tables:
            for row in table.rows:
                row_text = " | ".join(cell.text for cell in row.cells if cell.text.strip())
                if row_text:
                    parts.append(row_text)
        # Word files carry no page geometry; the whole body is one page.
        return ["\n\n".join(parts)]
