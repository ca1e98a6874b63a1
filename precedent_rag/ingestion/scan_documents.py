"""Scan the review directory and guess metadata from file names."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional

from precedent_rag.config import Settings, settings
from precedent_rag.ingestion.extract_text import SUPPORTED_EXTENSIONS
from precedent_rag.models.chunk import Jurisdiction
from precedent_rag.models.document import DocumentMeta

logger = logging.getLogger(__name__)

YEAR_PATTERN = re.compile(r"(?<!\d)(?:19|20)\d{2}(?!\d)")


def infer_jurisdiction(file_name: str, ema_marker: str = "epar") -> Jurisdiction:
    """EMA public assessment reports carry the marker in their name; everything else is FDA."""
    if ema_marker and ema_marker.lower() in file_name.lower():
        return Jurisdiction.EMA
    return Jurisdiction.FDA


def guess_year(name: str) -> Optional[int]:
    match = YEAR_PATTERN.search(name)
    if match:
        return int(match.group(0))
    return None


def discover_documents(root: Optional[Path] = None, config: Optional[Settings] = None) -> List[DocumentMeta]:
    """Return metadata for every supported review document under ``root``."""
    config = config or settings
    root_path = Path(root) if root else config.source_root_path
    if not root_path.exists():
        logger.warning("Source root %s does not exist", root_path)
        return []

    metas: List[DocumentMeta] = []
    for path in sorted(root_path.rglob("*")):
        if not path.is_file() or path.suffix.lower() not in SUPPORTED_EXTENSIONS:
            continue
        metas.append(
            DocumentMeta(
                file_name=path.name,
                source_path=str(path.resolve()),
                jurisdiction=infer_jurisdiction(path.name, config.ema_filename_marker).value,
                approval_year=guess_year(path.stem),
            )
        )
    logger.info("Discovered %s review documents under %s", len(metas), root_path)
    return metas


def export_metadata(metas: Iterable[DocumentMeta], output_path: Path) -> None:
    """Persist metadata as JSON lines."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with output_path.open("w", encoding="utf-8") as handle:
        for count, meta in enumerate(metas, start=1):
            handle.write(json.dumps(meta.model_dump()) + "\n")
    logger.info("Wrote %s document metadata rows to %s", count, output_path)


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(level=settings.log_level)
    metas = discover_documents()
    if not metas:
        logger.error("No review documents found at %s", settings.source_root)
        return
    export_metadata(metas, settings.source_root_path / "documents_meta.jsonl")


if __name__ == "__main__":
    main()
