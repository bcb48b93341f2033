"""Entrypoint for running the token registry API under uvicorn."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from accesstokens.infrastructure.http.middleware import request_logging_middleware
from accesstokens.infrastructure.http.routes import add_token_routes
from accesstokens.observability.logging import configure_logging
from accesstokens.observability.tracing import configure_tracing
from accesstokens.runtime.bootstrap import RuntimeContext, build_runtime, close_runtime_resources
from accesstokens.runtime.settings import Settings


def create_app(runtime: RuntimeContext) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        yield
        close_runtime_resources(runtime)

    app = FastAPI(title="Access Token Registry API", version="0.1.0", lifespan=lifespan)
    app.middleware("http")(request_logging_middleware)
    add_token_routes(app, runtime.token_route_deps_provider)
    return app


def main() -> None:
    import uvicorn

    configure_logging()
    configure_tracing(service_name="accesstokens")
    settings = Settings.load()
    runtime = build_runtime(settings)

    uvicorn.run(
        create_app(runtime),
        host=settings.listen_host,
        port=settings.port,
        # logging already setup
        log_config=None,
    )


__all__ = ["create_app", "main"]


if __name__ == "__main__":
    main()
