from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from accesstokens.config.vault import VaultSettings
from accesstokens.errors import VaultAuthError
from accesstokens.infrastructure.vault.auth import resolve_vault_token


def _settings(tmp_path: Path, **env: str) -> VaultSettings:
    jwt_path = tmp_path / "token"
    jwt_path.write_text("service-account-jwt\n", encoding="utf-8")
    values = {"VAULT_ADDR": "https://vault.local", "VAULT_K8S_TOKEN_PATH": str(jwt_path)}
    values.update(env)
    return VaultSettings(**values)


def test_static_token_skips_login(tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not be called
        raise AssertionError("login should not be attempted")

    settings = _settings(tmp_path, VAULT_TOKEN=" s.static ")

    assert resolve_vault_token(settings, transport=httpx.MockTransport(handler)) == "s.static"


def test_kubernetes_login_posts_role_and_jwt(tmp_path: Path) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"auth": {"client_token": "s.from-login"}})

    settings = _settings(tmp_path, VAULT_AUTH_PATH="k8s-prod", VAULT_NAMESPACE="team-a")

    token = resolve_vault_token(settings, transport=httpx.MockTransport(handler))

    assert token == "s.from-login"
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/v1/auth/k8s-prod/login"
    assert json.loads(request.content) == {"role": "pipeline", "jwt": "service-account-jwt"}
    assert request.headers["X-Vault-Namespace"] == "team-a"


def test_login_rejection_raises(tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"errors": ["invalid role name"]})

    with pytest.raises(VaultAuthError) as raised:
        resolve_vault_token(_settings(tmp_path), transport=httpx.MockTransport(handler))

    assert raised.value.status_code == 400
    assert raised.value.errors == ("invalid role name",)


def test_login_without_client_token_raises(tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"auth": None})

    with pytest.raises(VaultAuthError, match="client_token"):
        resolve_vault_token(_settings(tmp_path), transport=httpx.MockTransport(handler))


def test_login_transport_error_raises(tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(VaultAuthError) as raised:
        resolve_vault_token(_settings(tmp_path), transport=httpx.MockTransport(handler))

    assert isinstance(raised.value.__cause__, httpx.ConnectTimeout)


def test_missing_service_account_token_raises(tmp_path: Path) -> None:
    settings = VaultSettings(VAULT_K8S_TOKEN_PATH=str(tmp_path / "missing"))

    with pytest.raises(VaultAuthError, match="service account token"):
        resolve_vault_token(settings)
