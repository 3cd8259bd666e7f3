"""Embedding client that validates provider results."""

import logging
import math
import re

from dream_rag.errors import EmbeddingFailure
from dream_rag.llm.base import EmbeddingResult, LLMProvider

logger = logging.getLogger(__name__)

_NEWLINES = re.compile(r"[\r\n]+")


def normalize_text(text: str) -> str:
    """Collapse line breaks to single spaces.

    Embedding quality degrades on raw newlines.
    """
    return _NEWLINES.sub(" ", text)


class EmbeddingClient:
    """Turns text into a vector and its token count."""

    def __init__(self, provider: LLMProvider):
        """Initialize embedding client.

        Args:
            provider: LLM provider used for embeddings
        """
        self.provider = provider

    async def embed(self, text: str) -> EmbeddingResult:
        """Embed text.

        Args:
            text: Raw text, may contain newlines

        Returns:
            EmbeddingResult with a non-empty vector and a token count

        Raises:
            EmbeddingFailure: If the text is blank, the backend fails, or the
                result has an invalid shape
        """
        normalized = normalize_text(text)
        if not normalized.strip():
            raise EmbeddingFailure("Cannot embed blank text")

        try:
            result = await self.provider.generate_embedding(normalized)
        except Exception as e:
            logger.error(f"Embedding request failed: {e}")
            raise EmbeddingFailure(f"Embedding backend failed: {e}", cause=e) from e

        self._validate(result)
        logger.debug(
            f"Embedded {len(normalized)} chars into {len(result.embedding)} dims, "
            f"{result.token_count} tokens"
        )
        return result

    def _validate(self, result: EmbeddingResult) -> None:
        """Fail fast on results that would break scoring or budgeting."""
        context = {"model": result.model}
        if not result.embedding:
            raise EmbeddingFailure("Embedding backend returned an empty vector", context=context)
        if not all(math.isfinite(value) for value in result.embedding):
            raise EmbeddingFailure(
                "Embedding backend returned non-finite values", context=context
            )
        if result.token_count is None or result.token_count < 0:
            raise EmbeddingFailure(
                "Embedding backend returned no usable token count", context=context
            )
