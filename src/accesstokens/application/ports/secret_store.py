"""Port describing the path-addressed secret service used by remote registries."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol


class SecretStorePort(Protocol):
    """Minimal read/write/delete/list surface of a secret service.

    Implementations raise ``SecretNotFoundError`` when the service reports a
    path as absent and ``SecretStoreError`` for every other failure.
    """

    def read(self, path: str) -> Mapping[str, Any]:
        """Return the data stored at ``path``."""

    def write(self, path: str, data: Mapping[str, Any]) -> None:
        """Replace the data stored at ``path``."""

    def delete(self, path: str) -> None:
        """Delete the secret at ``path``."""

    def list_keys(self, path: str) -> Mapping[str, Any]:
        """Return the directory listing at ``path`` (``{"keys": [...]}``)."""


__all__ = ["SecretStorePort"]
