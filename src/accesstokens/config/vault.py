"""Vault connectivity and authentication settings."""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_K8S_TOKEN_PATH = "/var/run/secrets/kubernetes.io/serviceaccount/token"  # noqa: S105


class VaultSettings(BaseSettings):
    """Address, login role and KV mount used by the Vault-backed registry."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    addr: str = Field(default="http://127.0.0.1:8200", alias="VAULT_ADDR")
    token: SecretStr = Field(default_factory=lambda: SecretStr(""), alias="VAULT_TOKEN")
    role: str = Field(default="pipeline", alias="VAULT_ROLE")
    auth_path: str = Field(default="kubernetes", alias="VAULT_AUTH_PATH")
    k8s_token_path: str = Field(default=DEFAULT_K8S_TOKEN_PATH, alias="VAULT_K8S_TOKEN_PATH")
    kv_mount: str = Field(default="secret", alias="VAULT_KV_MOUNT")
    namespace: str | None = Field(default=None, alias="VAULT_NAMESPACE")
    timeout_seconds: float = Field(default=10.0, alias="VAULT_TIMEOUT_SECONDS", gt=0)

    @property
    def token_value(self) -> str:
        return self.token.get_secret_value().strip()


__all__ = ["DEFAULT_K8S_TOKEN_PATH", "VaultSettings"]
