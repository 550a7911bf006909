"""Token budget: count tokens and truncate prompt text to fit within a limit."""

from __future__ import annotations

import functools

import tiktoken

TRUNCATION_MARKER = "\n[... truncated to fit token budget ...]"


@functools.lru_cache(maxsize=None)
def _encoding(name: str) -> tiktoken.Encoding:
    return tiktoken.get_encoding(name)


class TokenBudget:
    """Counts tokens in a prompt section and truncates it to a budget."""

    def __init__(self, max_tokens: int = 6000, *, encoding: str = "cl100k_base") -> None:
        self.max_tokens = max_tokens
        self._encoding_name = encoding

    @property
    def _enc(self) -> tiktoken.Encoding:
        return _encoding(self._encoding_name)

    def count(self, text: str) -> int:
        return len(self._enc.encode(text))

    def truncate(self, text: str, max_tokens: int | None = None) -> tuple[str, bool]:
        """
        Truncate text to fit within max_tokens (the instance budget by default).
        Returns (truncated_text, was_truncated).
        """
        limit = self.max_tokens if max_tokens is None else max_tokens
        tokens = self._enc.encode(text)
        if len(tokens) <= limit:
            return text, False
        return self._enc.decode(tokens[:limit]) + TRUNCATION_MARKER, True
