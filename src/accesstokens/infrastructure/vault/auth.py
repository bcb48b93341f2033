"""Resolve the Vault client token from settings or a Kubernetes role login."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

import httpx

from accesstokens.config.vault import VaultSettings
from accesstokens.errors import VaultAuthError
from accesstokens.infrastructure.vault.client import vault_errors

logger = logging.getLogger("accesstokens.vault")


def resolve_vault_token(
    settings: VaultSettings,
    *,
    transport: httpx.BaseTransport | None = None,
) -> str:
    """Return ``VAULT_TOKEN`` when set, otherwise log in with the configured role."""

    if settings.token_value:
        logger.info("using static vault token", extra={"data": {"addr": settings.addr}})
        return settings.token_value
    return kubernetes_login(settings, transport=transport)


def kubernetes_login(
    settings: VaultSettings,
    *,
    transport: httpx.BaseTransport | None = None,
) -> str:
    jwt = _read_service_account_jwt(Path(settings.k8s_token_path))
    path = f"/v1/auth/{settings.auth_path.strip('/')}/login"
    headers = {"Accept": "application/json", "X-Vault-Request": "true"}
    if settings.namespace:
        headers["X-Vault-Namespace"] = settings.namespace
    logger.info(
        "vault kubernetes login starting",
        extra={"data": {"addr": settings.addr, "auth_path": settings.auth_path, "role": settings.role}},
    )
    try:
        with httpx.Client(
            base_url=settings.addr,
            timeout=settings.timeout_seconds,
            transport=transport,
        ) as client:
            response = client.post(path, json={"role": settings.role, "jwt": jwt}, headers=headers)
    except httpx.HTTPError as exc:
        raise VaultAuthError(f"vault login failed: POST {path}: {exc}") from exc

    if response.status_code != httpx.codes.OK:
        raise VaultAuthError(
            f"vault returned {response.status_code} for POST {path}",
            status_code=response.status_code,
            errors=vault_errors(response),
        )
    token = _client_token(response)
    if token is None:
        raise VaultAuthError(f"vault login response for {path} has no auth.client_token")
    logger.info("vault kubernetes login succeeded", extra={"data": {"role": settings.role}})
    return token


def _read_service_account_jwt(path: Path) -> str:
    try:
        jwt = path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise VaultAuthError(f"cannot read service account token at {path}: {exc}") from exc
    if not jwt:
        raise VaultAuthError(f"service account token at {path} is empty")
    return jwt


def _client_token(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    auth = payload.get("auth") if isinstance(payload, Mapping) else None
    token = auth.get("client_token") if isinstance(auth, Mapping) else None
    return token if isinstance(token, str) and token else None


__all__ = ["kubernetes_login", "resolve_vault_token"]
