"""Configuration for the token registry service."""

from __future__ import annotations

import logging

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from accesstokens.config.registry import TokenRegistrySettings
from accesstokens.config.vault import VaultSettings


class Settings(BaseSettings):
    """Service configuration resolved from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    # --- Server ---
    listen_host: str = Field(default="0.0.0.0", alias="ACCESSTOKENS_HOST")  # noqa: S104
    port: int = Field(default=8300, alias="ACCESSTOKENS_PORT")
    api_key: SecretStr = Field(default_factory=lambda: SecretStr(""), alias="ACCESSTOKENS_API_KEY")

    # --- Component settings ---
    registry: TokenRegistrySettings = Field(default_factory=TokenRegistrySettings)
    vault: VaultSettings = Field(default_factory=VaultSettings)

    @property
    def api_key_value(self) -> str:
        return self.api_key.get_secret_value()

    # --- Loader ---
    @classmethod
    def load(cls) -> Settings:
        instance = cls()
        logger = logging.getLogger("accesstokens.settings")
        logger.info("token registry settings loaded: %r", instance)
        return instance


__all__ = ["Settings"]
