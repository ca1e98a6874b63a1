"""Ingest review documents into the precedent store.

Per document: extract pages, segment, annotate, drop near-empty chunks, embed
the survivors in one batch and persist each chunk with its metadata.
Documents run one at a time; a failing document never aborts the batch.
"""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from precedent_rag.config import Settings, settings as default_settings
from precedent_rag.errors import EmbeddingUnavailable, ExtractionError, StoreError
from precedent_rag.ingestion.annotator import annotate, summarize_document
from precedent_rag.ingestion.extract_text import SUPPORTED_EXTENSIONS, TextExtractor
from precedent_rag.ingestion.scan_documents import guess_year, infer_jurisdiction
from precedent_rag.ingestion.segmenter import DocumentSegmenter
from precedent_rag.llm.provider import ModelProvider, build_provider
from precedent_rag.models.chunk import (
    ChunkAnnotations,
    PrecedentChunk,
    PrecedentMeta,
    ReviewerSentiment,
    TextChunk,
)
from precedent_rag.models.document import (
    DocumentIngestResult,
    DocumentTriage,
    IngestionReport,
    IngestStatus,
    SourceDocument,
)
from precedent_rag.retrieval.vector_store import PrecedentStore, QdrantPrecedentStore

logger = logging.getLogger(__name__)

AnnotatedChunk = Tuple[TextChunk, ChunkAnnotations]


class IngestionPipeline:
    """Orchestrates extraction, segmentation, annotation, embedding and storage."""

    def __init__(
        self,
        provider: ModelProvider,
        store: PrecedentStore,
        extractor: Optional[TextExtractor] = None,
        segmenter: Optional[DocumentSegmenter] = None,
        config: Optional[Settings] = None,
    ) -> None:
        config = config or default_settings
        self.provider = provider
        self.store = store
        self.extractor = extractor or TextExtractor()
        self.segmenter = segmenter or DocumentSegmenter(config=config)
        self.min_chunk_chars = config.min_ingest_chunk_chars
        self.ema_marker = config.ema_filename_marker

    def metadata_for(self, file_name: str) -> PrecedentMeta:
        """Heuristic metadata; drug class, therapeutic area and review type await curation."""
        return PrecedentMeta(
            jurisdiction=infer_jurisdiction(file_name, self.ema_marker),
            reviewer_sentiment=ReviewerSentiment.UNSPECIFIED,
            approval_year=guess_year(Path(file_name).stem),
        )

    def annotate_chunks(self, chunks: Iterable[TextChunk]) -> List[AnnotatedChunk]:
        annotated: List[AnnotatedChunk] = []
        for chunk in chunks:
            try:
                annotations = annotate(chunk.content)
            except Exception as exc:
                logger.warning(
                    "Annotation failed for %s chunk %s: %s",
                    chunk.source_document,
                    chunk.chunk_index,
                    exc,
                )
                annotations = ChunkAnnotations()
            annotated.append((chunk, annotations))
        return annotated

    def triage(self, document: SourceDocument) -> DocumentTriage:
        chunks = self.segmenter.segment(document)
        return summarize_document(document.file_name, self.annotate_chunks(chunks))

    def ingest_document(self, document: SourceDocument) -> DocumentIngestResult:
        annotated = self.annotate_chunks(self.segmenter.segment(document))
        annotated = [
            (chunk, annotations)
            for chunk, annotations in annotated
            if len(chunk.content.strip()) >= self.min_chunk_chars
        ]
        if not annotated:
            logger.info("No valid chunks extracted from %s", document.file_name)
            return DocumentIngestResult(source_document=document.file_name, status=IngestStatus.STORED)

        try:
            vectors = self.provider.embed([chunk.content for chunk, _ in annotated])
        except EmbeddingUnavailable as exc:
            logger.error("Embedding failed for %s: %s", document.file_name, exc)
            return DocumentIngestResult(
                source_document=document.file_name,
                status=IngestStatus.FAILED,
                error=str(exc),
            )
        if len(vectors) != len(annotated):
            message = f"expected {len(annotated)} embeddings, got {len(vectors)}"
            logger.error("Embedding failed for %s: %s", document.file_name, message)
            return DocumentIngestResult(
                source_document=document.file_name,
                status=IngestStatus.FAILED,
                error=message,
            )

        meta = self.metadata_for(document.file_name)
        stored = failed = 0
        for (chunk, annotations), vector in zip(annotated, vectors):
            precedent = PrecedentChunk.build(chunk, annotations, meta, vector)
            try:
                self.store.insert(precedent)
                stored += 1
            except StoreError as exc:
                failed += 1
                logger.error("Store insert failed: %s", exc)

        logger.info("Inserted %s chunks from %s", stored, document.file_name)
        return DocumentIngestResult(
            source_document=document.file_name,
            status=IngestStatus.STORED if stored or not failed else IngestStatus.FAILED,
            chunks_stored=stored,
            chunks_failed=failed,
            error=f"{failed} chunk inserts failed" if failed else None,
        )

    def ingest_path(self, path: str | Path) -> DocumentIngestResult:
        try:
            document = self.extractor.extract(path)
        except ExtractionError as exc:
            logger.error("Skipping %s: %s", exc.source, exc.cause)
            return DocumentIngestResult(
                source_document=exc.source,
                status=IngestStatus.FAILED,
                error=exc.cause,
            )
        return self.ingest_document(document)

    def run(self, paths: Sequence[str | Path], timeout: Optional[float] = None) -> IngestionReport:
        """Ingest ``paths`` in order; documents not started before ``timeout`` are skipped."""
        deadline = time.monotonic() + timeout if timeout is not None else None
        report = IngestionReport()
        for path in paths:
            if deadline is not None and time.monotonic() >= deadline:
                logger.warning("Ingestion deadline reached; skipping %s", Path(path).name)
                report.documents.append(
                    DocumentIngestResult(
                        source_document=Path(path).name,
                        status=IngestStatus.SKIPPED,
                        error="deadline exceeded",
                    )
                )
                continue
            logger.info("Processing: %s", Path(path).name)
            try:
                result = self.ingest_path(path)
            except Exception as exc:
                logger.exception("Ingestion failed for %s", Path(path).name)
                result = DocumentIngestResult(
                    source_document=Path(path).name,
                    status=IngestStatus.FAILED,
                    error=str(exc) or exc.__class__.__name__,
                )
            report.documents.append(result)
        logger.info(
            "Ingestion complete: %s chunks stored, %s documents failed",
            report.total_chunks_stored,
            len(report.failed_documents),
        )
        return report


def find_source_files(input_dir: Path) -> List[Path]:
    return sorted(
        path for path in input_dir.iterdir()
        if path.is_file() and path.suffix.lower() in SUPPORTED_EXTENSIONS
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Ingest SBA/EPAR review documents into the precedent store.")
    parser.add_argument("input_dir", nargs="?", default=None, help="Directory of review documents")
    parser.add_argument("--recreate", action="store_true", help="Drop and re-create the collection first")
    args = parser.parse_args(argv)

    config = default_settings
    logging.basicConfig(level=config.log_level)
    input_dir = Path(args.input_dir) if args.input_dir else config.source_root_path
    if not input_dir.is_dir():
        logger.error("Input directory not found: %s", input_dir)
        return 1

    paths = find_source_files(input_dir)
    if not paths:
        logger.info("No review documents found in %s", input_dir)
        return 0

    provider = build_provider(config)
    if not provider.dimensions:
        logger.error("No embedding backend configured; set OPENAI_API_KEY or EMBEDDING_BACKEND=bge-m3")
        return 1
    store = QdrantPrecedentStore(config=config)
    store.ensure_collection(provider.dimensions, recreate=args.recreate)

    report = IngestionPipeline(provider, store, config=config).run(paths)
    for name in report.failed_documents:
        logger.warning("Failed: %s", name)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
