"""HTTP route definitions for the token management API."""

from __future__ import annotations

import hmac
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from fastapi import Depends, FastAPI, HTTPException, Response, Security
from fastapi.security import APIKeyHeader

from accesstokens.application.ports.token_registry import TokenRegistryPort
from accesstokens.domain.token import Token
from accesstokens.errors import SecretStoreError
from accesstokens.infrastructure.http.schemas import HealthResponse, TokenListResponse, TokenModel

logger = logging.getLogger("accesstokens.http")


@dataclass(frozen=True)
class TokenRouteDeps:
    registry: TokenRegistryPort
    backend: str
    api_key: str | None = None


def add_token_routes(app: FastAPI, dependency_provider: Callable[[], TokenRouteDeps]) -> None:
    def get_dependencies() -> TokenRouteDeps:
        return dependency_provider()

    api_key_header = APIKeyHeader(name="X-API-Key", scheme_name="ApiKeyAuth", auto_error=False)

    def require_api_key(
        deps: TokenRouteDeps = Depends(get_dependencies),  # noqa: B008
        presented: str | None = Security(api_key_header),
    ) -> TokenRouteDeps:
        if deps.api_key is None:
            return deps
        if presented is None or not hmac.compare_digest(presented.encode(), deps.api_key.encode()):
            raise HTTPException(status_code=401, detail="invalid or missing API key")
        return deps

    @app.get("/healthz", response_model=HealthResponse)
    def healthz(deps: TokenRouteDeps = Depends(get_dependencies)) -> HealthResponse:  # noqa: B008
        return HealthResponse(status="ok", backend=deps.backend)

    @app.put(
        "/v1/users/{user_id}/tokens/{token_id}",
        response_model=TokenModel,
        description=(
            "Store a token for the user; storing an existing token is a no-op. "
            "`created_at` is the time of this request and is not persisted."
        ),
    )
    def store_token(
        user_id: str,
        token_id: str,
        deps: TokenRouteDeps = Depends(require_api_key),  # noqa: B008
    ) -> TokenModel:
        with _registry_errors("store", user_id):
            deps.registry.store(user_id, token_id)
        return TokenModel.from_token(Token.issued(token_id))

    @app.get(
        "/v1/users/{user_id}/tokens/{token_id}",
        response_model=TokenModel,
        description="Return the token when it is stored for the user.",
    )
    def lookup_token(
        user_id: str,
        token_id: str,
        deps: TokenRouteDeps = Depends(require_api_key),  # noqa: B008
    ) -> TokenModel:
        with _registry_errors("lookup", user_id):
            found = deps.registry.lookup(user_id, token_id)
        if not found:
            raise HTTPException(status_code=404, detail="token not found")
        return TokenModel(name=found)

    @app.delete(
        "/v1/users/{user_id}/tokens/{token_id}",
        status_code=204,
        description="Revoke the token; revoking an unknown token succeeds.",
    )
    def revoke_token(
        user_id: str,
        token_id: str,
        deps: TokenRouteDeps = Depends(require_api_key),  # noqa: B008
    ) -> Response:
        with _registry_errors("revoke", user_id):
            deps.registry.revoke(user_id, token_id)
        return Response(status_code=204)

    @app.get(
        "/v1/users/{user_id}/tokens",
        response_model=TokenListResponse,
        description="List every token stored for the user.",
    )
    def list_tokens(
        user_id: str,
        deps: TokenRouteDeps = Depends(require_api_key),  # noqa: B008
    ) -> TokenListResponse:
        with _registry_errors("list", user_id):
            tokens = deps.registry.list_tokens(user_id)
        return TokenListResponse(user_id=user_id, tokens=sorted(tokens))


@contextmanager
def _registry_errors(operation: str, user_id: str) -> Iterator[None]:
    """Map registry exceptions onto HTTP errors."""

    try:
        yield
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SecretStoreError as exc:
        logger.warning(
            "token registry operation failed",
            extra={
                "data": {
                    "operation": operation,
                    "user_id": user_id,
                    "error_type": type(exc).__name__,
                    "status_code": exc.status_code,
                }
            },
        )
        raise HTTPException(status_code=502, detail="secret store unavailable") from exc


__all__ = ["TokenRouteDeps", "add_token_routes"]
