"""
Configuration management for the vocabulary trainer
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Session Configuration
    daily_goal: int = Field(default=20)
    dictation_speed: float = Field(default=1.0, ge=0.5, le=2.0)

    # Database Configuration
    database_url: str = Field(default="sqlite:///data/vocab.db")

    # OpenAI Configuration
    openai_api_key: str = Field(default="")
    openai_model: str = Field(default="gpt-4o-mini")
    openai_max_tokens: int = Field(default=4000)
    openai_temperature: float = Field(default=1.0)
    api_timeout: int = Field(default=60)
    max_extract_chars: int = Field(default=200000)

    # Application Configuration
    log_level: str = Field(default="INFO")
    debug: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def get_database_path() -> str:
    """Get the database file path from URL"""
    settings = get_settings()
    if settings.database_url.startswith("sqlite:///"):
        return settings.database_url.replace("sqlite:///", "")
    return "data/vocab.db"
