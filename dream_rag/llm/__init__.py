"""LLM providers module."""

from dream_rag.llm.anthropic import AnthropicConfig, AnthropicProvider
from dream_rag.llm.base import EmbeddingResult, LLMProvider, LLMProviderFactory, ResponseResult
from dream_rag.llm.factory import create_embedding_provider, create_llm_provider
from dream_rag.llm.gemini import GeminiConfig, GeminiProvider
from dream_rag.llm.ollama import OllamaConfig, OllamaProvider
from dream_rag.llm.openai import OpenAIConfig, OpenAIProvider

# Register all providers
LLMProviderFactory.register("ollama", OllamaProvider)
LLMProviderFactory.register("openai", OpenAIProvider)
LLMProviderFactory.register("gemini", GeminiProvider)
LLMProviderFactory.register("anthropic", AnthropicProvider)

__all__ = [
    "AnthropicConfig",
    "AnthropicProvider",
    "EmbeddingResult",
    "GeminiConfig",
    "GeminiProvider",
    "LLMProvider",
    "LLMProviderFactory",
    "OllamaConfig",
    "OllamaProvider",
    "OpenAIConfig",
    "OpenAIProvider",
    "ResponseResult",
    "create_embedding_provider",
    "create_llm_provider",
]
