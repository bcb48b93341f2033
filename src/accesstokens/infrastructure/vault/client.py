"""HTTP client for Vault's KV (version 1) secrets engine."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx
from opentelemetry import trace

from accesstokens.application.ports.secret_store import SecretStorePort
from accesstokens.errors import (
    MalformedSecretError,
    SecretNotFoundError,
    SecretStoreError,
    VaultAuthError,
)

logger = logging.getLogger("accesstokens.vault")
_tracer = trace.get_tracer("accesstokens.vault")

_OK_STATUSES = frozenset({httpx.codes.OK, httpx.codes.NO_CONTENT})
_AUTH_STATUSES = frozenset({httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN})


def vault_errors(response: httpx.Response) -> tuple[str, ...]:
    """Return Vault's ``errors`` list from an error response, if it carries one."""

    try:
        payload = response.json()
    except ValueError:
        return ()
    if not isinstance(payload, Mapping):
        return ()
    errors = payload.get("errors")
    if not isinstance(errors, list):
        return ()
    return tuple(str(error) for error in errors)


@dataclass
class HttpVaultClient(SecretStorePort):
    """Implementation of SecretStorePort backed by HTTPX."""

    base_url: str
    token: str = field(repr=False)
    mount: str = "secret"
    namespace: str | None = None
    timeout_seconds: float = 10.0
    transport: httpx.BaseTransport | None = None
    _client: httpx.Client = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("vault base_url must not be empty")
        if not self.token:
            raise ValueError("vault token must not be empty")
        self.mount = self.mount.strip("/")
        if not self.mount:
            raise ValueError("vault mount must not be empty")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            transport=self.transport,
            headers=self._headers(),
        )

    def _headers(self) -> dict[str, str]:
        headers = {
            "X-Vault-Token": self.token,
            "X-Vault-Request": "true",
            "Accept": "application/json",
        }
        if self.namespace:
            headers["X-Vault-Namespace"] = self.namespace
        return headers

    def _url(self, path: str) -> str:
        segments = [quote(segment, safe="") for segment in path.strip("/").split("/")]
        return f"/v1/{self.mount}/{'/'.join(segments)}"

    def read(self, path: str) -> Mapping[str, Any]:
        response = self._send("GET", path)
        return _data(response, path)

    def write(self, path: str, data: Mapping[str, Any]) -> None:
        self._send("POST", path, json=dict(data))

    def delete(self, path: str) -> None:
        self._send("DELETE", path)

    def list_keys(self, path: str) -> Mapping[str, Any]:
        response = self._send("LIST", path)
        return _data(response, path)

    def close(self) -> None:
        self._client.close()

    def _send(
        self,
        method: str,
        path: str,
        *,
        json: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        url = self._url(path)
        with _tracer.start_as_current_span(f"vault.{method.lower()}") as span:
            span.set_attribute("vault.mount", self.mount)
            try:
                response = self._client.request(method, url, json=json)
            except httpx.HTTPError as exc:
                logger.warning(
                    "vault request failed",
                    extra={
                        "data": {
                            "method": method,
                            "mount": self.mount,
                            "error_type": type(exc).__name__,
                            "error": str(exc),
                        }
                    },
                )
                raise SecretStoreError(f"vault {method} {url} failed: {exc}") from exc
            span.set_attribute("http.status_code", response.status_code)

        status = response.status_code
        if status in _OK_STATUSES:
            return response
        errors = vault_errors(response)
        if status == httpx.codes.NOT_FOUND:
            raise SecretNotFoundError(
                f"vault returned 404 for {method} {url}", status_code=status, errors=errors
            )
        logger.warning(
            "vault returned unexpected status",
            extra={"data": {"method": method, "status_code": status, "errors": list(errors)}},
        )
        error_type = VaultAuthError if status in _AUTH_STATUSES else SecretStoreError
        raise error_type(
            f"vault returned {status} for {method} {url}", status_code=status, errors=errors
        )


def _data(response: httpx.Response, path: str) -> Mapping[str, Any]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise MalformedSecretError(f"vault response for {path} is not JSON") from exc
    data = payload.get("data") if isinstance(payload, Mapping) else None
    if not isinstance(data, Mapping):
        raise MalformedSecretError(f"vault response for {path} has no 'data' object")
    return data


__all__ = ["HttpVaultClient", "vault_errors"]
