"""Generation client that validates provider responses."""

import logging

from dream_rag.errors import GenerationFailure
from dream_rag.llm.base import LLMProvider

logger = logging.getLogger(__name__)


class GenerationClient:
    """Obtains answer text for a rendered prompt. Never retries."""

    def __init__(self, provider: LLMProvider):
        self.provider = provider

    async def generate(self, prompt: str) -> str:
        """Generate an answer.

        Raises:
            GenerationFailure: If the backend fails or returns no text
        """
        try:
            result = await self.provider.generate_response(prompt)
        except Exception as e:
            logger.error(f"Generation request failed: {e}")
            raise GenerationFailure(f"Generation backend failed: {e}", cause=e) from e

        if not result.content or not result.content.strip():
            raise GenerationFailure(
                "Generation backend returned an empty answer",
                context={"model": result.model, "finish_reason": result.finish_reason},
            )

        logger.debug(f"Generated {len(result.content)} chars with {result.model}")
        return result.content
