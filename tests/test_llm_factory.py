"""Tests for LLM factory functions."""

from unittest.mock import patch

import pytest

from dream_rag.config import LLMProvider as LLMProviderEnum
from dream_rag.config import Settings
from dream_rag.llm.anthropic import AnthropicProvider
from dream_rag.llm.factory import create_embedding_provider, create_llm_provider
from dream_rag.llm.gemini import GeminiProvider
from dream_rag.llm.ollama import OllamaProvider
from dream_rag.llm.openai import OpenAIProvider


def make_settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestLLMFactory:
    """Test LLM factory functions."""

    @patch("dream_rag.llm.factory.get_settings")
    def test_create_ollama_provider(self, mock_get_settings):
        """Test creating Ollama provider."""
        mock_get_settings.return_value = make_settings(
            llm_provider=LLMProviderEnum.OLLAMA,
            ollama_host="http://test:11434",
            ollama_model="llama3.2",
            request_timeout=12,
        )

        provider = create_llm_provider()
        assert isinstance(provider, OllamaProvider)
        assert provider.config.host == "http://test:11434"
        assert provider.config.model == "llama3.2"
        assert provider.config.timeout == 12

    @patch("dream_rag.llm.factory.get_settings")
    def test_create_openai_provider(self, mock_get_settings):
        """Test creating OpenAI provider."""
        mock_get_settings.return_value = make_settings(
            llm_provider=LLMProviderEnum.OPENAI,
            openai_api_key="test-key",
        )

        provider = create_llm_provider()
        assert isinstance(provider, OpenAIProvider)
        assert provider.config.api_key == "test-key"

    @patch("dream_rag.llm.factory.get_settings")
    def test_create_gemini_provider(self, mock_get_settings):
        """Test creating Gemini provider."""
        mock_get_settings.return_value = make_settings(
            llm_provider=LLMProviderEnum.GEMINI,
            gemini_api_key="test-key",
            gemini_model="gemini-test",
        )

        provider = create_llm_provider()
        assert isinstance(provider, GeminiProvider)
        assert provider.config.model == "gemini-test"

    @patch("dream_rag.llm.factory.get_settings")
    def test_create_openai_provider_missing_key(self, mock_get_settings):
        """Test creating OpenAI provider without API key."""
        mock_get_settings.return_value = make_settings(
            llm_provider=LLMProviderEnum.OPENAI,
            openai_api_key=None,
        )

        with pytest.raises(ValueError, match="OpenAI API key is required"):
            create_llm_provider()

    @patch("dream_rag.llm.factory.get_settings")
    def test_create_anthropic_provider(self, mock_get_settings):
        """Test creating Anthropic provider for generation."""
        mock_get_settings.return_value = make_settings(
            llm_provider=LLMProviderEnum.ANTHROPIC,
            anthropic_api_key="test-key",
        )

        provider = create_llm_provider()
        assert isinstance(provider, AnthropicProvider)

    @patch("dream_rag.llm.factory.get_settings")
    def test_create_embedding_provider_override(self, mock_get_settings):
        """Test that embedding_provider overrides llm_provider for embeddings."""
        mock_get_settings.return_value = make_settings(
            llm_provider=LLMProviderEnum.GEMINI,
            gemini_api_key="test-key",
            embedding_provider=LLMProviderEnum.OLLAMA,
        )

        provider = create_embedding_provider()
        assert isinstance(provider, OllamaProvider)

    @patch("dream_rag.llm.factory.get_settings")
    def test_create_embedding_provider_anthropic_fallback(self, mock_get_settings):
        """Test embedding provider fallback for Anthropic."""
        mock_get_settings.return_value = make_settings(
            llm_provider=LLMProviderEnum.ANTHROPIC,
            anthropic_api_key="test-key",
            openai_api_key="test-key",
        )

        provider = create_embedding_provider()
        assert isinstance(provider, OpenAIProvider)

    @patch("dream_rag.llm.factory.get_settings")
    def test_create_embedding_provider_anthropic_fallback_ollama(self, mock_get_settings):
        """Test embedding provider fallback to Ollama for Anthropic."""
        mock_get_settings.return_value = make_settings(
            llm_provider=LLMProviderEnum.ANTHROPIC,
            anthropic_api_key="test-key",
            openai_api_key=None,
            ollama_host="http://test:11434",
        )

        provider = create_embedding_provider()
        assert isinstance(provider, OllamaProvider)
        assert provider.config.host == "http://test:11434"

    @patch("dream_rag.llm.factory.get_settings")
    def test_explicit_settings_bypass_global(self, mock_get_settings):
        """Test that passed settings are used instead of the global instance."""
        mock_get_settings.return_value = make_settings(
            llm_provider=LLMProviderEnum.OPENAI,
            openai_api_key="global-key",
        )
        settings = make_settings(
            llm_provider=LLMProviderEnum.ANTHROPIC,
            anthropic_api_key="test-key",
            ollama_host="http://local:11434",
            openai_api_key=None,
        )

        assert isinstance(create_llm_provider(settings=settings), AnthropicProvider)
        provider = create_embedding_provider(settings=settings)
        assert isinstance(provider, OllamaProvider)
        assert provider.config.host == "http://local:11434"
        mock_get_settings.assert_not_called()
