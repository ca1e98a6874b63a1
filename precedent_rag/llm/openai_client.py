"""Thin wrapper around the OpenAI embeddings and Responses APIs."""

from __future__ import annotations

from typing import List, Optional, Sequence

from openai import OpenAI, OpenAIError

from precedent_rag.config import Settings, settings as default_settings
from precedent_rag.errors import CompletionUnavailable, EmbeddingUnavailable
from precedent_rag.llm.provider import ModelProvider
from precedent_rag.utils.tokenization import get_cl100k_encoding, truncate_to_tokens


class OpenAIProvider(ModelProvider):
    """Lazily initializes the OpenAI Python SDK."""

    name = "openai"

    def __init__(self, config: Optional[Settings] = None, client: Optional[OpenAI] = None) -> None:
        config = config or default_settings
        if client is None:
            if not config.openai_api_key:
                raise ValueError("OPENAI_API_KEY is not configured in the environment.")
            client = OpenAI(
                api_key=config.openai_api_key,
                base_url=config.openai_base_url,
                timeout=config.request_timeout_seconds,
            )
        self.client = client
        self.chat_model = config.openai_model_chat
        self.embedding_model = config.openai_model_embedding
        self.dimensions = config.openai_embedding_dimensions
        self.max_tokens = config.embedding_max_tokens
        self.encoding = get_cl100k_encoding(config.allow_tiktoken_fallback)

    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []
        inputs = [truncate_to_tokens(text, self.max_tokens, self.encoding) or " " for text in texts]
        try:
            response = self.client.embeddings.create(model=self.embedding_model, input=inputs)
        except OpenAIError as exc:
            raise EmbeddingUnavailable(f"OpenAI embedding request failed: {exc}") from exc
        data = sorted(response.data, key=lambda item: item.index)
        if len(data) != len(inputs):
            raise EmbeddingUnavailable(
                f"OpenAI returned {len(data)} embeddings for {len(inputs)} inputs"
            )
        return [list(item.embedding) for item in data]

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_output_tokens: int = 800,
        temperature: float = 0.2,
    ) -> str:
        try:
            response = self.client.responses.create(
                model=self.chat_model,
                temperature=temperature,
                max_output_tokens=max_output_tokens,
                input=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except OpenAIError as exc:
            raise CompletionUnavailable(f"OpenAI completion request failed: {exc}") from exc
        return self._extract_text(response)

    @staticmethod
    def _extract_text(response) -> str:
        chunks: list[str] = []
        for item in response.output or []:
            for content in getattr(item, "content", None) or []:
                content_type = getattr(content, "type", None)
                content_text = getattr(content, "text", None)
                if isinstance(content, dict):
                    content_type = content.get("type", content_type)
                    content_text = content.get("text", content_text)
                if content_type in {"output_text", "text"} and content_text:
                    chunks.append(str(content_text))
        return "\n".join(part.strip() for part in chunks if part).strip()
