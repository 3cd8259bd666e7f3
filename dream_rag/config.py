"""Configuration management using pydantic-settings."""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FALLBACK_ANSWER = "Sorry, I couldn't interpret that dream right now. Please try again."
DEFAULT_FAILURE_NOTICE = "Something went wrong while looking into your dream. Please try again."


class LLMProvider(str, Enum):
    """Supported LLM providers."""

    OLLAMA = "ollama"
    OPENAI = "openai"
    GEMINI = "gemini"
    ANTHROPIC = "anthropic"


class VectorStoreBackend(str, Enum):
    """Supported similarity store backends."""

    CHROMA = "chroma"
    MEMORY = "memory"


class Environment(str, Enum):
    """Application environments."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # LLM Provider Configuration
    llm_provider: LLMProvider = Field(
        default=LLMProvider.GEMINI,
        description="LLM provider used to generate answers",
    )
    embedding_provider: LLMProvider | None = Field(
        default=None,
        description="LLM provider used for embeddings, defaults to llm_provider",
    )
    request_timeout: int = Field(
        default=30,
        description="Timeout in seconds for embedding and generation requests",
    )

    # Ollama Configuration
    ollama_host: str = Field(
        default="http://localhost:11434",
        description="Ollama API host URL",
    )
    ollama_model: str = Field(
        default="llama3.2",
        description="Ollama model to use",
    )
    ollama_embedding_model: str = Field(
        default="nomic-embed-text",
        description="Ollama embedding model to use",
    )

    # OpenAI Configuration
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI chat model to use",
    )
    openai_embedding_model: str = Field(
        default="text-embedding-3-small",
        description="OpenAI embedding model to use",
    )

    # Google Gemini Configuration
    gemini_api_key: str | None = Field(
        default=None,
        description="Google Gemini API key",
    )
    gemini_model: str = Field(
        default="gemini-1.5-flash",
        description="Google Gemini model to use",
    )
    gemini_embedding_model: str = Field(
        default="models/text-embedding-004",
        description="Google Gemini embedding model to use",
    )

    # Anthropic Configuration
    anthropic_api_key: str | None = Field(
        default=None,
        description="Anthropic API key",
    )
    anthropic_model: str = Field(
        default="claude-3-5-haiku-20241022",
        description="Anthropic model to use",
    )

    # Similarity Store Configuration
    vector_store: VectorStoreBackend = Field(
        default=VectorStoreBackend.CHROMA,
        description="Similarity store backend",
    )
    chroma_host: str = Field(
        default="localhost",
        description="ChromaDB host",
    )
    chroma_port: int = Field(
        default=8000,
        description="ChromaDB port",
    )
    collection_name: str = Field(
        default="documents",
        description="Collection holding the reference documents",
    )

    # Retrieval Configuration
    match_threshold: float = Field(
        default=0.2,
        description="Minimum cosine similarity for a document to match",
    )
    match_count: int = Field(
        default=1,
        ge=0,
        description="Maximum number of documents retrieved per question",
    )
    context_token_budget: int = Field(
        default=1500,
        ge=0,
        description="Maximum number of tokens of retrieved context put in a prompt",
    )

    # Prompt and Answer Configuration
    persona_preamble: str | None = Field(
        default=None,
        description="Instructional preamble for the prompt, built-in persona if unset",
    )
    generation_fallback_answer: str = Field(
        default=DEFAULT_FALLBACK_ANSWER,
        description="Answer shown when the generation backend fails",
    )
    failure_notice: str = Field(
        default=DEFAULT_FAILURE_NOTICE,
        description="Answer shown when a turn fails before generation",
    )

    # Web Server Configuration
    web_host: str = Field(
        default="0.0.0.0",
        description="Web server bind address",
    )
    web_port: int = Field(
        default=3000,
        description="Web server port",
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )

    @property
    def chroma_url(self) -> str:
        """Get the full ChromaDB URL."""
        return f"http://{self.chroma_host}:{self.chroma_port}"

    @property
    def effective_embedding_provider(self) -> LLMProvider:
        """Get the provider used for embeddings."""
        return self.embedding_provider or self.llm_provider

    @property
    def resolved_embedding_provider(self) -> LLMProvider:
        """Get the provider that actually serves embeddings.

        Anthropic has no embedding API, so it falls back to OpenAI when a key
        is set and to Ollama otherwise.
        """
        provider = self.effective_embedding_provider
        if provider == LLMProvider.ANTHROPIC:
            return LLMProvider.OPENAI if self.openai_api_key else LLMProvider.OLLAMA
        return provider

    def validate_provider_config(self) -> None:
        """Validate that required API keys are set for the selected providers."""
        for provider in (self.llm_provider, self.resolved_embedding_provider):
            if provider == LLMProvider.OPENAI and not self.openai_api_key:
                raise ValueError("OpenAI API key is required when using OpenAI provider")
            elif provider == LLMProvider.GEMINI and not self.gemini_api_key:
                raise ValueError("Gemini API key is required when using Gemini provider")
            elif provider == LLMProvider.ANTHROPIC and not self.anthropic_api_key:
                raise ValueError("Anthropic API key is required when using Anthropic provider")


# Global settings instance - lazy loaded
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
