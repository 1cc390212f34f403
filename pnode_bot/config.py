"""
Configuration management for the pNode stats bot.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RPC_URL = "http://127.0.0.1:6000/rpc"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Telegram Configuration
    telegram_bot_token: Optional[str] = Field(default=None, description="Telegram bot token")
    telegram_poll_timeout: int = Field(default=30, ge=0, description="Long-poll timeout for getUpdates in seconds")

    # pNode RPC
    rpc_url: str = Field(default=DEFAULT_RPC_URL, description="JSON-RPC endpoint of the local pNode daemon")
    rpc_timeout_seconds: float = Field(default=30.0, gt=0, description="Per-request RPC timeout in seconds")


# Singleton settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
