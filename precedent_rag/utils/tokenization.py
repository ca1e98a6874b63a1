"""Helpers for loading tiktoken encodings with operator-controlled fallback."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List, Optional

import tiktoken

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4


@lru_cache(maxsize=None)
def get_cl100k_encoding(allow_fallback: bool = True) -> Optional[tiktoken.Encoding]:
    """Load the OpenAI tokenizer; ``None`` means callers approximate by characters."""
    try:
        return tiktoken.get_encoding("cl100k_base")
    except Exception as exc:
        if not allow_fallback:
            raise RuntimeError(
                f"Failed to load tiktoken 'cl100k_base': {exc}. "
                "Set ALLOW_TIKTOKEN_FALLBACK=1 to allow character approximation."
            ) from exc
        logger.warning(
            "Failed to load tiktoken 'cl100k_base' (%s); approximating tokens by characters.",
            exc,
        )
        return None


def encode_plain(text: str, encoding: tiktoken.Encoding) -> List[int]:
    """Encode with special-token strings treated as ordinary text."""
    return encoding.encode(text, disallowed_special=())


def truncate_to_tokens(text: str, max_tokens: int, encoding: Optional[tiktoken.Encoding]) -> str:
    """Cut ``text`` to at most ``max_tokens``; oversize input is shortened, never rejected."""
    if max_tokens <= 0:
        return ""
    if encoding is None:
        return text[: max_tokens * CHARS_PER_TOKEN]
    tokens = encode_plain(text, encoding)
    if len(tokens) <= max_tokens:
        return text
    return encoding.decode(tokens[:max_tokens])
