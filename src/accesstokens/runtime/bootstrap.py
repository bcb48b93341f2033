"""Runtime wiring for the token registry service."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from accesstokens.application.ports.token_registry import TokenRegistryPort
from accesstokens.infrastructure.http.routes import TokenRouteDeps
from accesstokens.infrastructure.state.token_registry import InMemoryTokenRegistry
from accesstokens.infrastructure.state.vault_token_registry import VaultTokenRegistry
from accesstokens.infrastructure.vault.auth import resolve_vault_token
from accesstokens.infrastructure.vault.client import HttpVaultClient
from accesstokens.runtime.settings import Settings

logger = logging.getLogger("accesstokens.runtime")


@dataclass(frozen=True, slots=True)
class RuntimeContext:
    """Aggregated runtime components for the token registry service."""

    settings: Settings
    token_registry: TokenRegistryPort
    vault_client: HttpVaultClient | None
    token_route_deps_provider: Callable[[], TokenRouteDeps]


def build_vault_client(
    settings: Settings,
    *,
    transport: httpx.BaseTransport | None = None,
) -> HttpVaultClient:
    vault = settings.vault
    return HttpVaultClient(
        base_url=vault.addr,
        token=resolve_vault_token(vault, transport=transport),
        mount=vault.kv_mount,
        namespace=vault.namespace,
        timeout_seconds=vault.timeout_seconds,
        transport=transport,
    )


def build_token_registry(
    settings: Settings,
    *,
    transport: httpx.BaseTransport | None = None,
) -> tuple[TokenRegistryPort, HttpVaultClient | None]:
    """Construct the configured registry backend (and its Vault client, if any)."""

    backend = settings.registry.backend
    if backend == "memory":
        logger.info("token registry backend selected", extra={"data": {"backend": backend}})
        return InMemoryTokenRegistry(), None
    if backend == "vault":
        client = build_vault_client(settings, transport=transport)
        logger.info(
            "token registry backend selected",
            extra={
                "data": {
                    "backend": backend,
                    "vault_addr": settings.vault.addr,
                    "kv_mount": settings.vault.kv_mount,
                    "path_prefix": settings.registry.path_prefix,
                }
            },
        )
        return VaultTokenRegistry(client, path_prefix=settings.registry.path_prefix), client
    raise ValueError(f"unknown token registry backend: {backend!r}")


def build_runtime(
    settings: Settings,
    *,
    transport: httpx.BaseTransport | None = None,
) -> RuntimeContext:
    registry, vault_client = build_token_registry(settings, transport=transport)
    deps = TokenRouteDeps(
        registry=registry,
        backend=settings.registry.backend,
        api_key=settings.api_key_value or None,
    )
    return RuntimeContext(
        settings=settings,
        token_registry=registry,
        vault_client=vault_client,
        token_route_deps_provider=lambda: deps,
    )


def close_runtime_resources(context: RuntimeContext) -> None:
    if context.vault_client is not None:
        context.vault_client.close()
        logger.info("vault client closed")


__all__ = [
    "RuntimeContext",
    "build_runtime",
    "build_token_registry",
    "build_vault_client",
    "close_runtime_resources",
]
