from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application settings.

    Flat fields so every value can be overridden with an APP_* variable,
    e.g. APP_DEMO=true, APP_RESEND_KEY=..., APP_FILES_DIR=./files.
    """

    name: str = "Content Service"
    version: str = "0.1.0"

    # Demo mode rejects every mutating endpoint with 401.
    demo: bool = False

    # Outbound email; without a key verification codes are only logged.
    resend_key: Optional[SecretStr] = None
    email_from: str = "develop@resend.dev"

    # Local directories; None keeps files in memory and disables the SPA fallback.
    files_dir: Optional[str] = None
    assets_dir: Optional[str] = None

    session_lifetime_seconds: int = Field(default=60 * 60 * 24 * 3)
    verification_lifetime_seconds: int = Field(default=300)

    bigcommerce_client_id: Optional[str] = None
    bigcommerce_client_secret: Optional[SecretStr] = None
    bigcommerce_batch_size: int = Field(default=5)

    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def bigcommerce_enabled(self) -> bool:
        return bool(self.bigcommerce_client_id and self.bigcommerce_client_secret)


@lru_cache
def get_app_settings(**kwargs) -> AppSettings:
    # Only include kwargs that are not None, so defaults in AppSettings are used
    filtered_kwargs = {k: v for k, v in kwargs.items() if v is not None}
    return AppSettings(**filtered_kwargs)
