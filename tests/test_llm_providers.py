"""Tests for LLM providers."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from dream_rag.llm.anthropic import AnthropicConfig, AnthropicProvider
from dream_rag.llm.base import EmbeddingResult, LLMProviderFactory, ResponseResult
from dream_rag.llm.gemini import GeminiConfig, GeminiProvider
from dream_rag.llm.ollama import OllamaConfig, OllamaProvider
from dream_rag.llm.openai import OpenAIConfig, OpenAIProvider


class TestLLMProviderFactory:
    """Test the LLM provider factory."""

    def test_list_providers(self):
        """Test listing registered providers."""
        providers = LLMProviderFactory.list_providers()
        assert "ollama" in providers
        assert "openai" in providers
        assert "gemini" in providers
        assert "anthropic" in providers

    def test_create_ollama_provider(self):
        """Test creating Ollama provider."""
        provider = LLMProviderFactory.create("ollama", host="http://test:11434")
        assert isinstance(provider, OllamaProvider)
        assert provider.config.host == "http://test:11434"

    def test_create_openai_provider(self):
        """Test creating OpenAI provider."""
        provider = LLMProviderFactory.create("openai", api_key="test-key")
        assert isinstance(provider, OpenAIProvider)
        assert provider.config.api_key == "test-key"

    def test_create_unknown_provider(self):
        """Test creating unknown provider raises error."""
        with pytest.raises(ValueError, match="Unknown provider 'unknown'"):
            LLMProviderFactory.create("unknown")


class TestOllamaProvider:
    """Test Ollama provider."""

    @pytest.fixture
    def ollama_provider(self):
        """Create Ollama provider for testing."""
        config = OllamaConfig(host="http://test:11434")
        return OllamaProvider(config=config)

    @pytest.mark.asyncio
    async def test_generate_embedding_success(self, ollama_provider):
        """Test successful embedding generation."""
        mock_response = MagicMock()
        mock_response.json.return_value = {
            "embeddings": [[0.1, 0.2, 0.3, 0.4]],
            "prompt_eval_count": 3,
        }
        mock_response.raise_for_status.return_value = None

        with patch.object(ollama_provider.client, "post", return_value=mock_response):
            result = await ollama_provider.generate_embedding("test text")

            assert isinstance(result, EmbeddingResult)
            assert result.embedding == [0.1, 0.2, 0.3, 0.4]
            assert result.model == "nomic-embed-text"
            assert result.token_count == 3

    @pytest.mark.asyncio
    async def test_generate_embedding_connection_error(self, ollama_provider):
        """Test that connection errors surface as RuntimeError."""
        with patch.object(
            ollama_provider.client,
            "post",
            side_effect=httpx.ConnectError("Connection refused"),
        ):
            with pytest.raises(RuntimeError, match="Failed to generate embedding"):
                await ollama_provider.generate_embedding("test text")

    @pytest.mark.asyncio
    async def test_generate_response_success(self, ollama_provider):
        """Test successful response generation."""
        mock_response = MagicMock()
        mock_response.json.return_value = {
            "response": "This is a test response",
            "eval_count": 50,
            "done_reason": "stop",
        }
        mock_response.raise_for_status.return_value = None

        with patch.object(ollama_provider.client, "post", return_value=mock_response) as mock_post:
            result = await ollama_provider.generate_response("test prompt")

            assert isinstance(result, ResponseResult)
            assert result.content == "This is a test response"
            assert result.model == "llama3.2"
            assert result.token_count == 50
            assert mock_post.call_args[1]["json"]["prompt"] == "test prompt"

    @pytest.mark.asyncio
    async def test_generate_response_timeout(self, ollama_provider):
        """Test that timeouts surface as RuntimeError."""
        with patch.object(
            ollama_provider.client,
            "post",
            side_effect=httpx.ReadTimeout("timed out"),
        ):
            with pytest.raises(RuntimeError, match="timed out"):
                await ollama_provider.generate_response("test prompt")

    @pytest.mark.asyncio
    async def test_health_check_success(self, ollama_provider):
        """Test successful health check."""
        mock_response = MagicMock()
        mock_response.status_code = 200

        with patch.object(ollama_provider.client, "get", return_value=mock_response):
            result = await ollama_provider.health_check()
            assert result is True

    @pytest.mark.asyncio
    async def test_health_check_failure(self, ollama_provider):
        """Test failed health check."""
        with patch.object(ollama_provider.client, "get", side_effect=Exception("Connection error")):
            result = await ollama_provider.health_check()
            assert result is False


class TestOpenAIProvider:
    """Test OpenAI provider."""

    @pytest.fixture
    def openai_provider(self):
        """Create OpenAI provider for testing."""
        config = OpenAIConfig(api_key="test-key")
        return OpenAIProvider(config=config)

    @pytest.mark.asyncio
    async def test_generate_embedding_success(self, openai_provider):
        """Test successful embedding generation."""
        mock_embedding = MagicMock()
        mock_embedding.embedding = [0.1, 0.2, 0.3, 0.4]

        mock_response = MagicMock()
        mock_response.data = [mock_embedding]
        mock_response.usage.total_tokens = 10

        with patch.object(
            openai_provider.client.embeddings,
            "create",
            new_callable=AsyncMock,
            return_value=mock_response,
        ):
            result = await openai_provider.generate_embedding("test text")

            assert isinstance(result, EmbeddingResult)
            assert result.embedding == [0.1, 0.2, 0.3, 0.4]
            assert result.model == "text-embedding-3-small"
            assert result.token_count == 10

    @pytest.mark.asyncio
    async def test_generate_response_success(self, openai_provider):
        """Test successful response generation."""
        mock_choice = MagicMock()
        mock_choice.message.content = "This is a test response"
        mock_choice.finish_reason = "stop"

        mock_response = MagicMock()
        mock_response.choices = [mock_choice]
        mock_response.usage.total_tokens = 50

        with patch.object(
            openai_provider.client.chat.completions,
            "create",
            new_callable=AsyncMock,
            return_value=mock_response,
        ) as mock_create:
            result = await openai_provider.generate_response("test prompt")

            assert isinstance(result, ResponseResult)
            assert result.content == "This is a test response"
            assert result.model == "gpt-4o-mini"
            assert result.token_count == 50
            assert result.finish_reason == "stop"

            messages = mock_create.call_args[1]["messages"]
            assert messages == [{"role": "user", "content": "test prompt"}]


class TestGeminiProvider:
    """Test Gemini provider."""

    @pytest.fixture
    def gemini_provider(self):
        """Create Gemini provider for testing."""
        return GeminiProvider(config=GeminiConfig(api_key="test-key"))

    @pytest.mark.asyncio
    async def test_generate_embedding_counts_tokens(self, gemini_provider):
        """Test that the token count comes from the generation model."""
        with patch(
            "dream_rag.llm.gemini.genai.embed_content",
            return_value={"embedding": [0.5, 0.5]},
        ), patch.object(
            gemini_provider.model,
            "count_tokens",
            return_value=MagicMock(total_tokens=8),
        ) as mock_count:
            result = await gemini_provider.generate_embedding("Paris is the capital of France.")

            assert result.embedding == [0.5, 0.5]
            assert result.token_count == 8
            assert mock_count.call_args[0][0] == "Paris is the capital of France."

    @pytest.mark.asyncio
    async def test_generate_embedding_failure(self, gemini_provider):
        """Test that SDK errors surface as RuntimeError."""
        with patch(
            "dream_rag.llm.gemini.genai.embed_content",
            side_effect=Exception("quota exceeded"),
        ):
            with pytest.raises(RuntimeError, match="quota exceeded"):
                await gemini_provider.generate_embedding("text")

    @pytest.mark.asyncio
    async def test_generate_response_success(self, gemini_provider):
        """Test successful response generation."""
        mock_response = MagicMock()
        mock_response.text = "A dream about flying"
        mock_response.usage_metadata.total_token_count = 42
        mock_response.candidates[0].finish_reason.name = "STOP"

        with patch.object(gemini_provider.model, "generate_content", return_value=mock_response):
            result = await gemini_provider.generate_response("prompt")

            assert result.content == "A dream about flying"
            assert result.token_count == 42
            assert result.finish_reason == "STOP"


class TestAnthropicProvider:
    """Test Anthropic provider."""

    @pytest.fixture
    def anthropic_provider(self):
        """Create Anthropic provider for testing."""
        return AnthropicProvider(config=AnthropicConfig(api_key="test-key"))

    @pytest.mark.asyncio
    async def test_generate_embedding_not_supported(self, anthropic_provider):
        """Test that Anthropic refuses to embed."""
        with pytest.raises(NotImplementedError):
            await anthropic_provider.generate_embedding("text")

    @pytest.mark.asyncio
    async def test_generate_response_joins_text_blocks(self, anthropic_provider):
        """Test that text blocks are concatenated."""
        first = MagicMock(type="text", text="Hello ")
        second = MagicMock(type="text", text="dreamer")
        mock_response = MagicMock()
        mock_response.content = [first, second]
        mock_response.usage.input_tokens = 10
        mock_response.usage.output_tokens = 5
        mock_response.stop_reason = "end_turn"

        with patch.object(
            anthropic_provider.client.messages,
            "create",
            new_callable=AsyncMock,
            return_value=mock_response,
        ):
            result = await anthropic_provider.generate_response("prompt")

            assert result.content == "Hello dreamer"
            assert result.token_count == 15
