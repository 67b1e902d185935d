"""Application settings and configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: Literal["json", "text"] = Field(default="json", alias="LOG_FORMAT")

    # API Keys (Optional - only needed for real LLM / embedding backends)
    anthropic_api_key: str | None = Field(default=None, alias="ANTHROPIC_API_KEY")
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")

    # LLM Configuration
    llm_provider: Literal["anthropic", "openai"] = Field(default="openai", alias="LLM_PROVIDER")
    llm_model: str = Field(default="gpt-4o-mini", alias="LLM_MODEL")
    llm_temperature: float = Field(default=0.0, alias="LLM_TEMPERATURE")
    llm_max_tokens: int = Field(default=1024, alias="LLM_MAX_TOKENS")

    # Embedding Configuration
    embedding_model: str = Field(default="text-embedding-3-small", alias="EMBEDDING_MODEL")
    embedding_dimension: int = Field(default=256, alias="EMBEDDING_DIMENSION")

    # RAG Defaults
    rag_default_top_k: int = Field(default=5, ge=1, alias="RAG_DEFAULT_TOP_K")
    rag_bm25_weight: float = Field(default=0.5, ge=0.0, alias="RAG_BM25_WEIGHT")
    rag_vector_weight: float = Field(default=0.5, ge=0.0, alias="RAG_VECTOR_WEIGHT")
    rag_chunk_size: int = Field(default=200, alias="RAG_CHUNK_SIZE")
    rag_chunk_overlap: int = Field(default=50, alias="RAG_CHUNK_OVERLAP")
    rag_generator_temperature: float = Field(default=0.0, alias="RAG_GENERATOR_TEMPERATURE")
    rag_generator_max_tokens: int = Field(default=1024, alias="RAG_GENERATOR_MAX_TOKENS")

    # Cost model (USD per 1k tokens, simplified)
    cost_per_1k_tokens: float = Field(default=0.002, ge=0.0, alias="COST_PER_1K_TOKENS")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
