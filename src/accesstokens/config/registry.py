"""Backend selection for the token registry."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

TokenRegistryBackend = Literal["memory", "vault"]


class TokenRegistrySettings(BaseSettings):
    """Which registry backend to build and where it keeps its secrets."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    backend: TokenRegistryBackend = Field(default="memory", alias="TOKEN_REGISTRY_BACKEND")
    path_prefix: str = Field(default="accesstokens", alias="TOKEN_REGISTRY_PATH_PREFIX", min_length=1)


__all__ = ["TokenRegistryBackend", "TokenRegistrySettings"]
