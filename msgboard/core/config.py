"""
Application configuration using Pydantic settings.
"""
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MSGBOARD_",
        env_file=".env",
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"
    cors_allowed_origins: str = "*"  # "*" or comma-separated origins

    # Admin token verification key (HS256)
    secret: str = ""

    # Rate limiting
    messages_per_interval: int = 5
    messages_interval_length: float = 60.0  # seconds

    # Messages
    max_message_length: int = 280
    seed_messages: list[str] = [
        "Send us a message!",
        "Welcome to the board",
    ]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
