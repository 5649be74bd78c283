from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables (and .env)."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App Settings
    APP_NAME: str = "AutoTradeHub API"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # Catalog defaults
    DEFAULT_STOCK_QUANTITY: int = 10
    PLACEHOLDER_IMAGE_URL: str = "https://placehold.co/600x400/EEE/31343C?text=Product+Image"

    # Partner economics
    DEFAULT_COMMISSION_RATE: float = 10.0  # percent

    # Client-side cart storage
    CART_STORAGE_KEY: str = "auto_vault_cart"
    CART_STORAGE_DIR: str = ".autotradehub"

    # Email (Resend)
    RESEND_API_KEY: Optional[str] = None
    RESEND_API_URL: str = "https://api.resend.com/emails"
    EMAIL_FROM: str = "noreply@athub.store"
    SUPPORT_EMAIL: str = "support@athub.store"

    # Outgoing HTTP / SDK
    HTTP_TIMEOUT: float = 10.0
    API_BASE_URL: str = "http://127.0.0.1:8085"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
