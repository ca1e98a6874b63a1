"""Concurrent filtered retrieval over one shared query vector."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from concurrent.futures import TimeoutError as FuturesTimeout
from typing import Iterable, List, Optional, Sequence

from precedent_rag.config import Settings, settings as default_settings
from precedent_rag.llm.provider import ModelProvider
from precedent_rag.models.retrieval import Finding, SearchAngle, StoreMatch
from precedent_rag.retrieval.risk import classify
from precedent_rag.retrieval.vector_store import PrecedentStore

logger = logging.getLogger(__name__)


def truncate_summary(content: str, max_chars: int) -> str:
    if len(content) <= max_chars:
        return content
    return content[:max_chars] + "..."


def build_finding(angle: SearchAngle, rank: int, match: StoreMatch, summary_chars: int) -> Finding:
    chunk = match.chunk
    return Finding(
        chunk_id=chunk.id or f"{chunk.source_document}#{chunk.chunk_index}",
        angle=angle.key,
        angle_label=angle.label,
        rank=rank,
        similarity=match.similarity,
        risk_level=classify(match.similarity, chunk.reviewer_sentiment),
        summary=truncate_summary(chunk.content, summary_chars),
        content=chunk.content,
        source_document=chunk.source_document,
        source_page=chunk.source_page,
        drug_class=chunk.drug_class,
        therapeutic_area=chunk.therapeutic_area,
        review_type=chunk.review_type.value if chunk.review_type else None,
        reviewer_sentiment=chunk.reviewer_sentiment.value if chunk.reviewer_sentiment else None,
    )


def merge_findings(per_angle: Iterable[Sequence[Finding]]) -> List[Finding]:
    """Concatenate in angle order and keep the first finding per chunk.

    An earlier angle's label wins even when a later angle scored the same
    chunk higher.
    """
    merged: List[Finding] = []
    seen = set()
    for findings in per_angle:
        for finding in findings:
            if finding.chunk_id in seen:
                continue
            seen.add(finding.chunk_id)
            merged.append(finding)
    return merged


def _remaining(deadline: Optional[float]) -> Optional[float]:
    if deadline is None:
        return None
    return max(deadline - time.monotonic(), 0.0)


class MultiAngleRetriever:
    """Embeds the query once and fans the configured angles out concurrently."""

    def __init__(
        self,
        provider: ModelProvider,
        store: PrecedentStore,
        angles: Sequence[SearchAngle],
        threshold: Optional[float] = None,
        config: Optional[Settings] = None,
    ) -> None:
        config = config or default_settings
        self.provider = provider
        self.store = store
        self.angles = list(angles)
        self.threshold = config.match_threshold if threshold is None else threshold
        self.summary_chars = config.finding_summary_chars
        self.max_workers = max(1, config.max_angle_workers)

    def _run_angle(self, angle: SearchAngle, query_vector: Sequence[float]) -> List[Finding]:
        matches = self.store.nearest_neighbors(query_vector, self.threshold, angle.limit, angle.filters)
        return [
            build_finding(angle, rank, match, self.summary_chars)
            for rank, match in enumerate(matches, start=1)
        ]

    def retrieve(self, query: str, timeout: Optional[float] = None) -> List[Finding]:
        """Return deduplicated findings; degrades to fewer (or no) findings, never raises.

        ``timeout`` bounds the whole call. Angles still running when it
        expires are abandoned and contribute nothing.
        """
        if not self.angles or not query.strip():
            return []
        deadline = time.monotonic() + timeout if timeout is not None else None
        executor = ThreadPoolExecutor(
            max_workers=min(len(self.angles), self.max_workers),
            thread_name_prefix="angle",
        )
        try:
            embed_future = executor.submit(self.provider.embed, [query])
            try:
                vectors = embed_future.result(timeout=_remaining(deadline))
            except FuturesTimeout:
                logger.error("Query embedding timed out; skipping all angles")
                return []
            except Exception as exc:
                logger.error("Query embedding failed; skipping all angles: %s", exc)
                return []
            if not vectors or not vectors[0]:
                logger.error("Embedding backend returned no vector; skipping all angles")
                return []
            query_vector = vectors[0]

            futures = [executor.submit(self._run_angle, angle, query_vector) for angle in self.angles]
            done, _ = wait(futures, timeout=_remaining(deadline))
            per_angle: List[List[Finding]] = []
            for angle, future in zip(self.angles, futures):
                if future not in done:
                    future.cancel()
                    logger.warning("Angle %s (%s) timed out", angle.key, angle.label)
                    per_angle.append([])
                    continue
                try:
                    per_angle.append(future.result())
                except Exception as exc:
                    logger.warning("Angle %s (%s) failed: %s", angle.key, angle.label, exc)
                    per_angle.append([])
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        findings = merge_findings(per_angle)
        logger.debug(
            "Retrieved %s findings across %s angles (%s before dedup)",
            len(findings),
            len(self.angles),
            sum(len(items) for items in per_angle),
        )
        return findings
