"""
Infrastructure Layer: Configuration Adapter
"""
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Global application settings loaded from .env file and environment variables.
    Follows 12-factor app methodology.
    """

    # CoinGecko
    coingecko_api_key: SecretStr = Field(SecretStr(""), alias="COINGECKO_API_KEY")
    coingecko_base_url: str = Field("https://api.coingecko.com/api/v3/", alias="COINGECKO_BASE_URL")
    request_timeout: float = Field(30.0, alias="REQUEST_TIMEOUT")

    # Market listing
    vs_currency: str = Field("usd", alias="VS_CURRENCY")
    per_page: int = Field(50, alias="PER_PAGE")

    # Local state
    favorites_path: Path = Field(Path("data/favorites.json"), alias="FAVORITES_PATH")

    # Dashboard
    refresh_interval: float = Field(60.0, alias="REFRESH_INTERVAL")

    # System
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

# Singleton instance
settings = Settings()  # type: ignore[call-arg]
