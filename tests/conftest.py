from __future__ import annotations

import json
from collections.abc import Generator
from urllib.parse import unquote

import httpx
import pytest

from accesstokens.observability.tracing import reset_tracing_state


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Generator[None, None, None]:
    # Settings read .env from the working directory and the process environment.
    monkeypatch.chdir(tmp_path)
    for name in (
        "TOKEN_REGISTRY_BACKEND",
        "TOKEN_REGISTRY_PATH_PREFIX",
        "VAULT_ADDR",
        "VAULT_TOKEN",
        "VAULT_ROLE",
        "VAULT_AUTH_PATH",
        "VAULT_K8S_TOKEN_PATH",
        "VAULT_KV_MOUNT",
        "VAULT_NAMESPACE",
        "VAULT_TIMEOUT_SECONDS",
        "ACCESSTOKENS_API_KEY",
        "OTEL_TRACES_EXPORTER",
        "OTEL_EXPORTER_OTLP_ENDPOINT",
        "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT",
        "K_SERVICE",
        "KUBERNETES_SERVICE_HOST",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_tracing_state()
    yield
    reset_tracing_state()


class FakeVault:
    """In-memory stand-in for Vault's KV v1 HTTP API, served through httpx.MockTransport."""

    def __init__(self, *, mount: str = "secret", token: str = "root-token") -> None:  # noqa: S107
        self.mount = mount
        self.token = token
        self.secrets: dict[str, dict[str, object]] = {}
        self.requests: list[httpx.Request] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.headers.get("X-Vault-Token") != self.token:
            return httpx.Response(403, json={"errors": ["permission denied"]})

        prefix = f"/v1/{self.mount}/"
        raw_path = request.url.raw_path.decode().split("?", 1)[0]
        if not raw_path.startswith(prefix):
            return httpx.Response(404, json={"errors": ["no handler for route"]})
        path = "/".join(unquote(segment) for segment in raw_path[len(prefix) :].split("/"))

        if request.method == "GET":
            if path not in self.secrets:
                return httpx.Response(404, json={"errors": []})
            return httpx.Response(200, json={"data": self.secrets[path]})
        if request.method in {"POST", "PUT"}:
            self.secrets[path] = json.loads(request.content)
            return httpx.Response(204)
        if request.method == "DELETE":
            self.secrets.pop(path, None)
            return httpx.Response(204)
        if request.method == "LIST":
            return self._list(path)
        return httpx.Response(405, json={"errors": ["unsupported operation"]})

    def _list(self, path: str) -> httpx.Response:
        directory = path.rstrip("/") + "/"
        keys: set[str] = set()
        for secret_path in self.secrets:
            if not secret_path.startswith(directory):
                continue
            child, _, rest = secret_path[len(directory) :].partition("/")
            keys.add(f"{child}/" if rest else child)
        if not keys:
            return httpx.Response(404, json={"errors": []})
        return httpx.Response(200, json={"data": {"keys": sorted(keys)}})


@pytest.fixture
def fake_vault() -> FakeVault:
    return FakeVault()
