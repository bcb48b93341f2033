"""HTTP request/response models for the token management API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from accesstokens.domain.token import Token


class TokenModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    created_at: datetime | None = Field(
        default=None,
        description="Time of the store request that returned this token. Not persisted.",
    )

    @classmethod
    def from_token(cls, token: Token) -> TokenModel:
        return cls(name=token.name, created_at=token.created_at)


class TokenListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    tokens: list[str]


class HealthResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str
    backend: str


__all__ = ["HealthResponse", "TokenListResponse", "TokenModel"]
