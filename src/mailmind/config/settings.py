"""Application settings using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    storage_mode: Literal["postgresql", "local"] = Field(
        default="local",
        description="Storage backend: 'postgresql' (DATABASE_URL) or 'local' (SQLite in DATA_DIR)",
    )
    data_dir: str = Field(
        default="./data",
        description="Data directory for local SQLite storage and attachments",
    )
    database_url: Optional[str] = Field(
        default=None,
        description="Database connection URL (required in postgresql mode)",
    )

    # LLM
    llm_provider: Literal["ollama", "anthropic"] = Field(
        default="ollama",
        description="Chat backend used for classification, extraction and chat",
    )
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama server URL",
    )
    ollama_chat_model: str = Field(
        default="llama3.2",
        description="Ollama model for chat completions",
    )
    ollama_embed_model: str = Field(
        default="nomic-embed-text",
        description="Ollama model for embeddings",
    )
    anthropic_api_key: Optional[str] = Field(
        default=None,
        description="Anthropic API key (only needed with llm_provider=anthropic)",
    )
    claude_model: str = Field(
        default="claude-sonnet-4-5-20250929",
        description="Claude model used when llm_provider=anthropic",
    )
    llm_timeout: float = Field(
        default=120.0,
        description="Timeout in seconds for LLM HTTP calls",
    )

    # Processing
    chunk_size: int = Field(
        default=500,
        description="Maximum characters per RAG chunk",
    )
    save_attachments: bool = Field(
        default=True,
        description="Save attachments found in PST/EML uploads",
    )
    max_upload_mb: int = Field(
        default=100,
        description="Maximum accepted upload size in megabytes",
    )

    # Server
    host: str = Field(default="127.0.0.1", description="HTTP bind address")
    port: int = Field(default=5000, description="HTTP port")
    log_level: str = Field(default="INFO", description="Root log level")

    @property
    def data_path(self) -> Path:
        """Get the data directory path."""
        return Path(self.data_dir)

    @property
    def attachments_dir(self) -> Path:
        """Get the directory attachments are written to."""
        return self.data_path / "attachments"

    @property
    def resolved_database_url(self) -> str:
        """Database URL for the configured storage mode."""
        if self.storage_mode == "postgresql":
            if not self.database_url:
                raise ValueError(
                    "DATABASE_URL must be set in postgresql mode, "
                    "or set STORAGE_MODE=local for local SQLite storage."
                )
            return self.database_url
        return f"sqlite:///{(self.data_path / 'emails.db').as_posix()}"

    @property
    def storage_label(self) -> str:
        """Human readable storage mode, reported by /api/stats."""
        if self.storage_mode == "postgresql":
            return "PostgreSQL"
        return f"Local SQLite ({self.data_dir})"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
