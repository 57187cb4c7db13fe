"""Configuration management using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Catalog snapshot (JSON list of books with embeddings)
    catalog_path: str | None = Field(
        default=None,
        description="Path to the JSON book catalog; empty catalog when unset"
    )

    # Embeddings Configuration (local HuggingFace model)
    embedding_model: str = "all-MiniLM-L6-v2"
    embedding_batch_size: int = Field(
        default=64,
        description="Batch size for embedding generation"
    )
    embedding_max_workers: int = Field(
        default=4,
        description="Thread pool size for async embedding calls"
    )

    # Retrieval Parameters
    retrieval_vector_k: int = Field(default=10, ge=1)
    retrieval_keyword_k: int = Field(default=10, ge=1)

    # RRF Fusion Parameters
    rrf_k: int = Field(
        default=60,
        ge=0,
        description="RRF constant k, higher values reduce top rank dominance"
    )

    # Similarity Graph Parameters
    graph_similarity_threshold: float = Field(
        default=0.50,
        ge=-1.0,
        le=1.0,
        description="Cosine similarity a pair must strictly exceed to be linked"
    )

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    log_level: str = "INFO"


def get_test_settings() -> Settings:
    """Get test environment settings."""
    return Settings(
        catalog_path=None,
        embedding_model="all-MiniLM-L6-v2",
        embedding_max_workers=1,
    )


# Global settings instance
settings = Settings()
