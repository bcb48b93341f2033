"""Token registry backed by a path-addressed secret service such as Vault."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

from accesstokens.application.ports.secret_store import SecretStorePort
from accesstokens.application.ports.token_registry import TokenRegistryPort
from accesstokens.errors import MalformedSecretError, SecretNotFoundError

logger = logging.getLogger("accesstokens.registry")

DEFAULT_PATH_PREFIX = "accesstokens"
TOKEN_FIELD = "token"

_T = TypeVar("_T")


def _absent_as_empty(call: Callable[[], _T]) -> _T | None:
    """Run a secret-store call, turning the service's not-found signal into ``None``.

    This is the only place ``SecretNotFoundError`` is swallowed, so both
    registry backends share one "unknown user or token" contract.
    """

    try:
        return call()
    except SecretNotFoundError:
        return None


def _addressable(value: str) -> bool:
    return bool(value) and "/" not in value and value not in {".", ".."}


def _validate_segment(kind: str, value: str) -> str:
    if not _addressable(value):
        raise ValueError(f"invalid {kind}: {value!r}")
    return value


@dataclass
class VaultTokenRegistry(TokenRegistryPort):
    """Stateless adapter mapping registry calls onto secret-store paths.

    No client-side locking is performed; concurrent calls are serialized by
    the secret service itself.
    """

    secrets: SecretStorePort
    path_prefix: str = field(default=DEFAULT_PATH_PREFIX)

    def __post_init__(self) -> None:
        self.path_prefix = self.path_prefix.strip("/")
        if not self.path_prefix:
            raise ValueError("path_prefix must not be empty")

    def user_path(self, user_id: str) -> str:
        return f"{self.path_prefix}/{_validate_segment('user_id', user_id)}"

    def token_path(self, user_id: str, token_id: str) -> str:
        return f"{self.user_path(user_id)}/{_validate_segment('token_id', token_id)}"

    def store(self, user_id: str, token_id: str) -> None:
        self.secrets.write(self.token_path(user_id, token_id), {TOKEN_FIELD: token_id})
        logger.debug("token stored", extra={"data": {"user_id": user_id, "backend": "vault"}})

    def lookup(self, user_id: str, token_id: str) -> str:
        # ids that cannot be stored are unknown by definition
        if not (_addressable(user_id) and _addressable(token_id)):
            return ""
        path = self.token_path(user_id, token_id)
        data = _absent_as_empty(lambda: self.secrets.read(path))
        if data is None:
            return ""
        return _token_field(data, path)

    def revoke(self, user_id: str, token_id: str) -> None:
        if not (_addressable(user_id) and _addressable(token_id)):
            return
        path = self.token_path(user_id, token_id)
        _absent_as_empty(lambda: self.secrets.delete(path))
        logger.debug("token revoked", extra={"data": {"user_id": user_id, "backend": "vault"}})

    def list_tokens(self, user_id: str) -> list[str]:
        if not _addressable(user_id):
            return []
        path = self.user_path(user_id)
        listing = _absent_as_empty(lambda: self.secrets.list_keys(path))
        if listing is None:
            return []
        tokens = _token_keys(listing, path)
        logger.debug(
            "tokens listed",
            extra={"data": {"user_id": user_id, "count": len(tokens), "backend": "vault"}},
        )
        return tokens


def _token_field(data: Mapping[str, Any], path: str) -> str:
    token = data.get(TOKEN_FIELD) if isinstance(data, Mapping) else None
    if not isinstance(token, str):
        raise MalformedSecretError(f"secret at {path} has no string {TOKEN_FIELD!r} field")
    return token


def _token_keys(listing: Mapping[str, Any], path: str) -> list[str]:
    keys = listing.get("keys") if isinstance(listing, Mapping) else None
    if not isinstance(keys, list) or not all(isinstance(key, str) for key in keys):
        raise MalformedSecretError(f"listing at {path} has no string 'keys' list")
    # trailing slash marks a nested directory, not a token
    return [key for key in keys if not key.endswith("/")]


__all__ = ["DEFAULT_PATH_PREFIX", "TOKEN_FIELD", "VaultTokenRegistry"]
