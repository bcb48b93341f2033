"""Access token value object."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True, slots=True)
class Token:
    """An opaque access token identifier; registries never interpret ``name``."""

    name: str
    created_at: datetime | None = None

    @classmethod
    def issued(cls, name: str, *, now: datetime | None = None) -> Token:
        return cls(name=name, created_at=now or datetime.now(UTC))


__all__ = ["Token"]
