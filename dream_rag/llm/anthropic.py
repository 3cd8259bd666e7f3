"""Anthropic Claude LLM provider implementation."""

import logging
from typing import Any

import anthropic
from pydantic import BaseModel

from dream_rag.llm.base import EmbeddingResult, LLMProvider, ResponseResult

logger = logging.getLogger(__name__)


class AnthropicConfig(BaseModel):
    """Configuration for Anthropic provider.

    Anthropic offers no embedding endpoint, so this provider only answers
    prompts; embeddings come from the fallback chosen by the factory.
    """

    api_key: str
    model: str = "claude-3-5-haiku-20241022"
    max_tokens: int = 1000
    temperature: float = 0.7
    timeout: int = 30


class AnthropicProvider(LLMProvider):
    """Anthropic Claude LLM provider implementation."""

    def __init__(self, config: AnthropicConfig | None = None, **kwargs: Any) -> None:
        """Initialize Anthropic provider.

        Args:
            config: Anthropic configuration
            **kwargs: Additional configuration options
        """
        self.config = config or AnthropicConfig(**kwargs)
        self.client = anthropic.AsyncAnthropic(
            api_key=self.config.api_key,
            timeout=self.config.timeout,
            max_retries=0,
        )

    async def generate_embedding(self, text: str) -> EmbeddingResult:
        """Anthropic doesn't provide embeddings.

        Raises:
            NotImplementedError: Always
        """
        raise NotImplementedError(
            "Anthropic doesn't provide embeddings. Configure EMBEDDING_PROVIDER "
            "to use OpenAI, Gemini or Ollama."
        )

    async def generate_response(self, prompt: str) -> ResponseResult:
        """Generate response using Anthropic's Claude model."""
        try:
            response = await self.client.messages.create(
                model=self.config.model,
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.AnthropicError as e:
            logger.error(f"Anthropic response request failed: {e}")
            raise RuntimeError(f"Failed to generate response: {e}") from e

        # Anthropic returns content as a list of blocks
        content = "".join(block.text for block in response.content if block.type == "text")

        return ResponseResult(
            content=content,
            model=self.config.model,
            token_count=response.usage.output_tokens + response.usage.input_tokens,
            finish_reason=response.stop_reason,
        )

    async def health_check(self) -> bool:
        """Check if Anthropic service is accessible."""
        try:
            await self.client.models.retrieve(self.config.model)
            return True
        except Exception as e:
            logger.warning(f"Anthropic health check failed: {e}")
            return False
