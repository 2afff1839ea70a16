"""
Application configuration.

Central settings sourced from environment. Model provider credentials,
chunking and rendering limits, Q&A context size, server and CORS options.
Single source of truth for config.

Uses pydantic-settings for type-safe environment variable loading.
"""

from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings

from meetinglens.models.schemas import SummaryLimits

SUPPORTED_PROVIDERS = frozenset({"anthropic", "azure_openai"})
SUPPORTED_FORMATS = ("markdown", "xml", "plain")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Variable names are case-insensitive.
    """

    # ---- Environment ----
    app_env: str = "development"
    log_level: str = "INFO"

    # ---- Server ----
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # ---- API Routing ----
    # Empty string or "/" mounts routes at the root
    api_prefix: str = "/api"

    # ---- CORS ----
    # Comma-separated string of allowed origins (no wildcards in production)
    cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173"

    # ---- Model Provider ----
    llm_provider: str = "anthropic"
    llm_temperature: float = 0.2
    llm_max_tokens: int = 4096

    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    anthropic_base_url: str | None = None

    azure_openai_endpoint: str = ""
    azure_openai_api_key: str = ""
    azure_openai_deployment: str = ""
    azure_openai_api_version: str = "2024-06-01"

    # ---- Summarization ----
    # Token counts use the 4-characters-per-token estimate
    summary_max_tokens_per_chunk: int = 1500
    summary_overlap_tokens: int = 150
    summary_max_chunks: int = 6
    summary_parallelism: int = 1
    summary_max_parallelism: int = 4
    summary_default_format: str = "xml"

    # ---- Rendering Limits ----
    summary_limit_action_items: int = 5
    summary_limit_key_points: int = 5
    summary_limit_topics: int = 4
    summary_limit_observations_per_topic: int = 3
    summary_limit_next_steps_per_party: int = 4

    # ---- Q&A ----
    qa_max_cues: int = 6

    # ---- Language ----
    default_language: str = "en"

    @field_validator(
        "summary_max_tokens_per_chunk",
        "summary_max_chunks",
        "summary_parallelism",
        "summary_max_parallelism",
        "summary_limit_action_items",
        "summary_limit_key_points",
        "summary_limit_topics",
        "summary_limit_observations_per_topic",
        "summary_limit_next_steps_per_party",
        "qa_max_cues",
        mode="before",
    )
    @classmethod
    def _positive_or_default(cls, value, info):
        """Non-positive or unparsable counts fall back to the field default."""
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            parsed = 0
        if parsed <= 0:
            return cls.model_fields[info.field_name].default
        return parsed

    @field_validator("summary_overlap_tokens", mode="before")
    @classmethod
    def _non_negative_overlap(cls, value):
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            return 150
        return max(0, parsed)

    @field_validator("llm_provider", "summary_default_format", "default_language", mode="before")
    @classmethod
    def _normalize_token(cls, value):
        return str(value).strip().lower() if value is not None else value

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env.lower() == "production"

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS_ORIGINS env into a list. Never pass a raw string to allow_origins.
        Example ENV: CORS_ORIGINS=http://localhost:5173,https://lens.example.com
        """
        if not self.cors_origins or not self.cors_origins.strip():
            return []
        origins = [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
        # Never use wildcard with allow_credentials=True
        if self.is_production:
            origins = [o for o in origins if o != "*"]
        return origins

    @property
    def normalized_api_prefix(self) -> str:
        """
        Get normalized API prefix.
        Returns empty string if prefix is "/" or empty.
        Ensures prefix starts with "/" if non-empty.
        """
        prefix = self.api_prefix.strip()
        if not prefix or prefix == "/":
            return ""
        if not prefix.startswith("/"):
            prefix = "/" + prefix
        return prefix.rstrip("/")

    @property
    def effective_parallelism(self) -> int:
        """Chunk fan-out width, clamped to the configured maximum."""
        return min(self.summary_parallelism, self.summary_max_parallelism)

    @property
    def summary_limits(self) -> SummaryLimits:
        """Per-list rendering caps."""
        return SummaryLimits(
            action_items=self.summary_limit_action_items,
            key_points=self.summary_limit_key_points,
            topics=self.summary_limit_topics,
            observations_per_topic=self.summary_limit_observations_per_topic,
            next_steps_per_party=self.summary_limit_next_steps_per_party,
        )

    class Config:
        # Load from .env file
        env_file = ".env"
        env_file_encoding = "utf-8"
        # Allow extra fields from environment
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience instance for direct import
settings = get_settings()
