"""Port describing per-user access token storage."""

from __future__ import annotations

from typing import Protocol


class TokenRegistryPort(Protocol):
    """Stores opaque token identifiers grouped under a user scope.

    Unknown users and unknown tokens are not errors: ``lookup`` returns an
    empty string and ``list_tokens`` an empty list.
    """

    def store(self, user_id: str, token_id: str) -> None:
        """Add ``token_id`` to the user's tokens; storing it again is a no-op."""

    def lookup(self, user_id: str, token_id: str) -> str:
        """Return ``token_id`` when stored for ``user_id``, otherwise ``""``."""

    def revoke(self, user_id: str, token_id: str) -> None:
        """Remove ``token_id``; revoking an absent token succeeds."""

    def list_tokens(self, user_id: str) -> list[str]:
        """Return every token stored for ``user_id`` in no particular order."""


__all__ = ["TokenRegistryPort"]
