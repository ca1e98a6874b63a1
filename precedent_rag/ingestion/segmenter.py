"""Split per-page review text into overlapping, size-bounded chunks."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional

from precedent_rag.config import Settings, settings as default_settings
from precedent_rag.models.chunk import TextChunk
from precedent_rag.models.document import SourceDocument

logger = logging.getLogger(__name__)

PARAGRAPH_BREAK = re.compile(r"\n\s*\n+")
PARAGRAPH_JOIN = "\n\n"


@dataclass(frozen=True)
class SegmenterOptions:
    chunk_size: int = 1500
    chunk_overlap: int = 200
    min_chunk_length: int = 100

    @classmethod
    def from_settings(cls, config: Settings) -> "SegmenterOptions":
        return cls(
            chunk_size=config.chunk_size,
            chunk_overlap=config.chunk_overlap,
            min_chunk_length=config.min_chunk_length,
        )


def split_paragraphs(text: str, min_length: int) -> List[str]:
    """Split on blank lines and drop paragraphs shorter than ``min_length``."""
    paragraphs = (part.strip() for part in PARAGRAPH_BREAK.split(text))
    return [part for part in paragraphs if len(part) >= min_length]


class DocumentSegmenter:
    """Greedy paragraph accumulator.

    Paragraph boundaries are never broken, so a single paragraph longer than
    ``chunk_size`` becomes one oversized chunk.
    """

    def __init__(self, options: Optional[SegmenterOptions] = None, config: Optional[Settings] = None) -> None:
        if options is None:
            options = SegmenterOptions.from_settings(config or default_settings)
        self.options = options

    def chunk_page(self, text: str, page_number: int, source_document: str, start_index: int = 0) -> List[TextChunk]:
        chunk_size = self.options.chunk_size
        overlap = self.options.chunk_overlap
        chunks: List[TextChunk] = []
        buffer = ""
        counter = start_index

        def emit(content: str) -> None:
            nonlocal counter
            chunks.append(
                TextChunk(
                    content=content.strip(),
                    source_document=source_document,
                    source_page=page_number,
                    chunk_index=counter,
                )
            )
            counter += 1

        for paragraph in split_paragraphs(text, self.options.min_chunk_length):
            if buffer and len(buffer) + len(paragraph) > chunk_size:
                emit(buffer)
                tail = buffer[-overlap:] if overlap > 0 else ""
                buffer = f"{tail}{PARAGRAPH_JOIN}{paragraph}" if tail else paragraph
            else:
                buffer = f"{buffer}{PARAGRAPH_JOIN}{paragraph}" if buffer else paragraph

        if buffer.strip():
            emit(buffer)
        return chunks

    def iter_chunks(self, document: SourceDocument) -> Iterator[TextChunk]:
        """Yield chunks page by page; ``chunk_index`` runs across the whole document."""
        next_index = 0
        for page_number, page_text in enumerate(document.pages, start=1):
            page_chunks = self.chunk_page(page_text, page_number, document.file_name, next_index)
            next_index += len(page_chunks)
            yield from page_chunks

    def segment(self, document: SourceDocument) -> List[TextChunk]:
        chunks = list(self.iter_chunks(document))
        logger.debug(
            "Segmented %s pages of %s into %s chunks",
            document.num_pages,
            document.file_name,
            len(chunks),
        )
        return chunks
