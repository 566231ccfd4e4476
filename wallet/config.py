"""Dashboard configuration."""
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Backend endpoints and paging, loaded from ``WALLET_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WALLET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Backend of record
    wallet_api_url: str = "https://copartners.in:5135/api"
    dashboard_api_url: str = "https://copartners.in:5132/api"
    subscription_api_url: str = "https://copartners.in:5009/api"
    user_type: str = "RA"  # role discriminator sent with wallet/withdrawal requests

    # Paging
    page: int = 1
    page_size: int = 10

    request_timeout: float = 30.0
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
