"""Exceptions raised by token registries and the secret-store boundary."""

from __future__ import annotations

from collections.abc import Sequence


class TokenRegistryError(RuntimeError):
    """Base class for token registry failures."""


class SecretStoreError(TokenRegistryError):
    """Raised when the secret service cannot be reached or rejects a request."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        errors: Sequence[str] = (),
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.errors = tuple(errors)


class SecretNotFoundError(SecretStoreError):
    """Raised when the secret service reports the requested path as absent."""


class VaultAuthError(SecretStoreError):
    """Raised when Vault refuses the client token or login fails."""


class MalformedSecretError(SecretStoreError):
    """Raised when a secret payload lacks the expected token field or key list."""


__all__ = [
    "TokenRegistryError",
    "SecretStoreError",
    "SecretNotFoundError",
    "VaultAuthError",
    "MalformedSecretError",
]
