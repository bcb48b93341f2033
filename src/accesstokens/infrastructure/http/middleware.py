from __future__ import annotations

import logging
import re
import time
from collections.abc import Awaitable, Callable
from typing import Any
from uuid import uuid4

from fastapi import Request

logger = logging.getLogger("accesstokens.http")

_TOKEN_SEGMENT = re.compile(r"(/tokens/)[^/]+")


def redact_path(path: str) -> str:
    """Replace token ids in a request path with a placeholder."""

    return _TOKEN_SEGMENT.sub(r"\1{token_id}", path)


async def request_logging_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Any]],
) -> Any:
    # Bodies and query strings are never logged; token ids are redacted from the path.
    request_id = request.headers.get("x-request-id", uuid4().hex)
    request_data = {
        "request_id": request_id,
        "method": request.method,
        "path": redact_path(request.url.path),
    }
    logger.info("request_received", extra={"data": request_data})

    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("request_failed", extra={"data": request_data})
        raise

    logger.info(
        "request_completed",
        extra={
            "data": {
                **request_data,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        },
    )
    response.headers["x-request-id"] = request_id
    return response
