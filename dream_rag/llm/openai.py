"""OpenAI backend: chat completions for answers, embeddings with usage-based token counts."""

import logging
from typing import Any

import openai
from pydantic import BaseModel

from dream_rag.llm.base import EmbeddingResult, LLMProvider, ResponseResult

logger = logging.getLogger(__name__)


class OpenAIConfig(BaseModel):
    """Model names and request limits for the OpenAI backend."""

    api_key: str
    model: str = "gpt-4o-mini"
    embedding_model: str = "text-embedding-3-small"
    max_tokens: int = 1000
    temperature: float = 0.7
    timeout: int = 30


class OpenAIProvider(LLMProvider):
    """Answers a rendered prompt as one user message; embeds one text per request."""

    def __init__(self, config: OpenAIConfig | None = None, **kwargs: Any) -> None:
        self.config = config or OpenAIConfig(**kwargs)
        # No retries at this layer
        self.client = openai.AsyncOpenAI(
            api_key=self.config.api_key,
            timeout=self.config.timeout,
            max_retries=0,
        )

    async def generate_embedding(self, text: str) -> EmbeddingResult:
        """Embed text; the token count is the usage block of the same request."""
        try:
            response = await self.client.embeddings.create(
                model=self.config.embedding_model,
                input=text,
            )
        except openai.OpenAIError as e:
            logger.error(f"OpenAI embedding request failed: {e}")
            raise RuntimeError(f"Failed to generate embedding: {e}") from e

        return EmbeddingResult(
            embedding=response.data[0].embedding,
            model=self.config.embedding_model,
            token_count=response.usage.total_tokens,
        )

    async def generate_response(self, prompt: str) -> ResponseResult:
        """Send the prompt as a single user message, with no system turn."""
        try:
            response = await self.client.chat.completions.create(
                model=self.config.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
            )
        except openai.OpenAIError as e:
            logger.error(f"OpenAI response request failed: {e}")
            raise RuntimeError(f"Failed to generate response: {e}") from e

        choice = response.choices[0]

        return ResponseResult(
            content=choice.message.content or "",
            model=self.config.model,
            token_count=response.usage.total_tokens if response.usage else None,
            finish_reason=choice.finish_reason,
        )

    async def health_check(self) -> bool:
        """Probe the configured chat model."""
        try:
            await self.client.models.retrieve(self.config.model)
            return True
        except Exception as e:
            logger.warning(f"OpenAI health check failed: {e}")
            return False
