"""Application configuration loaded from environment variables."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings.

    Read once at startup and handed to components explicitly; instances are
    frozen so nothing downstream can mutate provider credentials or budgets.
    """

    openai_api_key: Optional[str] = Field(
        default=None, description="Secret key for OpenAI APIs."
    )
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model_chat: str = "gpt-4o-mini"
    openai_model_embedding: str = "text-embedding-3-small"
    openai_embedding_dimensions: int = 1536
    embedding_max_tokens: int = 8000
    embedding_backend: Literal["auto", "openai", "bge-m3"] = "auto"

    qdrant_url: str = "http://localhost:6333"
    qdrant_api_key: Optional[str] = None
    qdrant_collection: str = "regulatory_precedents"

    source_root: str = "data/pdfs"
    guidance_root: str = "docs"

    chunk_size: int = 1500
    chunk_overlap: int = 200
    min_chunk_length: int = 100
    min_ingest_chunk_chars: int = 50
    ema_filename_marker: str = "epar"

    match_threshold: float = 0.6
    angle_limit: int = 12
    draft_excerpt_chars: int = 6000
    finding_summary_chars: int = 200
    narrative_max_findings: int = 15
    narrative_draft_chars: int = 2000
    narrative_max_tokens: int = 500
    guidance_max_chars: int = 12000
    guidance_prompt_chars: int = 8000

    request_timeout_seconds: float = 60.0
    retrieval_timeout_seconds: float = 30.0
    max_angle_workers: int = 6

    log_level: str = "INFO"
    allow_tiktoken_fallback: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @property
    def source_root_path(self) -> Path:
        return Path(self.source_root)

    @property
    def guidance_root_path(self) -> Path:
        return Path(self.guidance_root)


settings = Settings()
