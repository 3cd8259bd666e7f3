"""Google Gemini LLM provider implementation."""

import asyncio
import logging
from typing import Any

import google.generativeai as genai
from pydantic import BaseModel

from dream_rag.llm.base import EmbeddingResult, LLMProvider, ResponseResult

logger = logging.getLogger(__name__)


class GeminiConfig(BaseModel):
    """Configuration for Gemini provider."""

    api_key: str
    model: str = "gemini-1.5-flash"
    embedding_model: str = "models/text-embedding-004"
    max_tokens: int = 1000
    temperature: float = 0.7
    timeout: int = 30


class GeminiProvider(LLMProvider):
    """Google Gemini LLM provider implementation.

    The SDK calls are blocking, so each one runs in a worker thread.
    """

    def __init__(self, config: GeminiConfig | None = None, **kwargs: Any) -> None:
        """Initialize Gemini provider.

        Args:
            config: Gemini configuration
            **kwargs: Additional configuration options
        """
        self.config = config or GeminiConfig(**kwargs)
        genai.configure(api_key=self.config.api_key)
        self.model = genai.GenerativeModel(self.config.model)

    async def generate_embedding(self, text: str) -> EmbeddingResult:
        """Generate embedding using Gemini's embedding model.

        The embedding endpoint reports no usage, so the token count is taken
        from the generation model, which is the model that will later consume
        the text as context.
        """
        try:
            result = await asyncio.to_thread(
                genai.embed_content,
                model=self.config.embedding_model,
                content=text,
                task_type="retrieval_document",
                request_options={"timeout": self.config.timeout},
            )
            tokens = await asyncio.to_thread(
                self.model.count_tokens,
                text,
                request_options={"timeout": self.config.timeout},
            )
        except Exception as e:
            logger.error(f"Gemini embedding request failed: {e}")
            raise RuntimeError(f"Failed to generate embedding: {e}") from e

        return EmbeddingResult(
            embedding=result["embedding"],
            model=self.config.embedding_model,
            token_count=tokens.total_tokens,
        )

    async def generate_response(self, prompt: str) -> ResponseResult:
        """Generate response using Gemini's generative model."""
        try:
            response = await asyncio.to_thread(
                self.model.generate_content,
                prompt,
                generation_config=genai.types.GenerationConfig(
                    max_output_tokens=self.config.max_tokens,
                    temperature=self.config.temperature,
                ),
                request_options={"timeout": self.config.timeout},
            )
            content = response.text
        except Exception as e:
            logger.error(f"Gemini response request failed: {e}")
            raise RuntimeError(f"Failed to generate response: {e}") from e

        return ResponseResult(
            content=content,
            model=self.config.model,
            token_count=response.usage_metadata.total_token_count
            if response.usage_metadata
            else None,
            finish_reason=response.candidates[0].finish_reason.name
            if response.candidates
            else None,
        )

    async def health_check(self) -> bool:
        """Check if Gemini service is accessible."""
        try:
            await asyncio.to_thread(
                genai.embed_content,
                model=self.config.embedding_model,
                content="health check",
            )
            return True
        except Exception as e:
            logger.warning(f"Gemini health check failed: {e}")
            return False
