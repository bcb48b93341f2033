"""In-memory implementation of the token registry port."""

from __future__ import annotations

import logging

from accesstokens.application.ports.token_registry import TokenRegistryPort
from accesstokens.infrastructure.state.rwlock import ReadWriteLock

logger = logging.getLogger("accesstokens.registry")


class InMemoryTokenRegistry(TokenRegistryPort):
    """Keeps token identifiers in memory for the lifetime of the instance."""

    def __init__(self) -> None:
        self._tokens: dict[str, set[str]] = {}
        self._lock = ReadWriteLock()

    def store(self, user_id: str, token_id: str) -> None:
        with self._lock.write():
            self._tokens.setdefault(user_id, set()).add(token_id)
        logger.debug("token stored", extra={"data": {"user_id": user_id, "backend": "memory"}})

    def lookup(self, user_id: str, token_id: str) -> str:
        with self._lock.read():
            user_tokens = self._tokens.get(user_id)
            found = user_tokens is not None and token_id in user_tokens
        return token_id if found else ""

    def revoke(self, user_id: str, token_id: str) -> None:
        with self._lock.write():
            user_tokens = self._tokens.get(user_id)
            if user_tokens is not None:
                user_tokens.discard(token_id)
                if not user_tokens:
                    del self._tokens[user_id]
        logger.debug("token revoked", extra={"data": {"user_id": user_id, "backend": "memory"}})

    def list_tokens(self, user_id: str) -> list[str]:
        with self._lock.write():
            return list(self._tokens.get(user_id, ()))


__all__ = ["InMemoryTokenRegistry"]
