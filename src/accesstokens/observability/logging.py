"""Logging setup: extras-aware formatter, trace context filter, dictConfig builder."""

from __future__ import annotations

import json
import logging
import os
import time
import traceback
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from logging.config import dictConfig
from typing import Any

from opentelemetry import baggage, trace


def _level(env_var: str, default: str) -> str:
    return os.getenv(env_var, default).upper()


def _should_emit_json_payload() -> bool:
    # Managed runtimes parse one JSON object per line into structured logs.
    return bool(os.getenv("K_SERVICE") or os.getenv("KUBERNETES_SERVICE_HOST"))


def _structured_payload(record: logging.LogRecord) -> dict[str, Any]:
    record_dict = record.__dict__
    payload: dict[str, Any] = {
        "message": record.getMessage(),
        "severity": record.levelname,
        "logger": record.name,
        "timestamp": (
            f"{time.strftime('%Y-%m-%dT%H:%M:%S', time.gmtime(record.created))}"
            f".{int(record.msecs):03d}Z"
        ),
    }
    record_data = record_dict.get("data")
    if record_data:
        payload["data"] = _sanitize_for_json(record_data)
    json_fields = record_dict.get("json_fields")
    if isinstance(json_fields, Mapping):
        for key, value in _sanitize_for_json(json_fields).items():
            payload.setdefault(key, value)
    if record.exc_info:
        payload["exception"] = "".join(traceback.format_exception(*record.exc_info)).rstrip("\n")
    return payload


class ExtrasFormatter(logging.Formatter):
    """Append structured `data` payloads when present."""

    def format(self, record: logging.LogRecord) -> str:
        if _should_emit_json_payload():
            return json.dumps(_structured_payload(record), sort_keys=True, separators=(",", ":"))

        formatted = super().format(record)
        record_data = record.__dict__.get("data")
        if record_data:
            try:
                encoded = json.dumps(record_data, sort_keys=True, separators=(",", ":"))
            except TypeError:
                encoded = json.dumps(_sanitize_for_json(record_data), sort_keys=True, separators=(",", ":"))
            return f"{formatted} | data={encoded}"
        return formatted


class OtelContextLogFilter(logging.Filter):
    """Inject OpenTelemetry trace context + baggage into json_fields."""

    def filter(self, record: logging.LogRecord) -> bool:
        record_dict = record.__dict__
        json_fields = record_dict.get("json_fields")
        json_fields_map: dict[str, Any] = dict(json_fields) if isinstance(json_fields, Mapping) else {}

        otel: dict[str, Any] = {}
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            otel["trace_id"] = f"{span_context.trace_id:032x}"
            otel["span_id"] = f"{span_context.span_id:016x}"

        baggage_values = baggage.get_all()
        if baggage_values:
            otel["baggage"] = {key: str(value) for key, value in baggage_values.items()}

        if otel:
            json_fields_map["otel"] = otel
            record_dict["json_fields"] = json_fields_map
        return True


def build_log_config(
    *,
    root_level_env: str = "LOG_LEVEL",
    root_default: str = "INFO",
    extra_loggers: Mapping[str, dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Return a dictConfig-compatible logging configuration."""

    loggers: dict[str, dict[str, Any]] = {
        "uvicorn": {"level": _level("UVICORN_LOG_LEVEL", "INFO")},
        "uvicorn.error": {"level": _level("UVICORN_LOG_LEVEL", "INFO")},
        "uvicorn.access": {"level": _level("UVICORN_ACCESS_LOG_LEVEL", "WARNING")},
        "httpx": {"level": _level("HTTPX_LOG_LEVEL", "WARNING")},
        "httpcore": {"level": _level("HTTPX_LOG_LEVEL", "WARNING")},
    }
    for config in loggers.values():
        config.update({"handlers": ["console"], "propagate": False})
    if extra_loggers:
        loggers.update(extra_loggers)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "()": ExtrasFormatter,
                "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
            }
        },
        "filters": {"otel_context": {"()": OtelContextLogFilter}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
                "stream": "ext://sys.stdout",
                "filters": ["otel_context"],
            }
        },
        "root": {"level": _level(root_level_env, root_default), "handlers": ["console"]},
        "loggers": loggers,
    }


def configure_logging(
    *,
    root_level_env: str = "LOG_LEVEL",
    root_default: str = "INFO",
    extra_loggers: Mapping[str, dict[str, Any]] | None = None,
) -> None:
    """Apply the shared logging config."""

    dictConfig(
        build_log_config(
            root_level_env=root_level_env,
            root_default=root_default,
            extra_loggers=extra_loggers,
        )
    )
    logging.getLogger("accesstokens.observability.logging").debug(
        "configured logging",
        extra={"data": {"root_level": logging.getLevelName(logging.getLogger().level)}},
    )


def _sanitize_for_json(value: Any, depth: int = 10, max_items: int = 200) -> Any:
    """Return a JSON-serializable copy; fallback to string for unknowns."""

    if depth <= 0:
        return "<depth_exceeded>"
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes len={len(value)}>"
    if is_dataclass(value) and not isinstance(value, type):
        return _sanitize_for_json(asdict(value), depth - 1, max_items)
    if isinstance(value, Mapping):
        result: dict[str, Any] = {}
        for idx, (key, item) in enumerate(value.items()):
            if idx >= max_items:
                result["<truncated>"] = f"...{len(value) - idx} more"
                break
            result[str(key)] = _sanitize_for_json(item, depth - 1, max_items)
        return result
    if isinstance(value, (list, tuple, set, frozenset)):
        items = list(value)
        out = [_sanitize_for_json(item, depth - 1, max_items) for item in items[:max_items]]
        if len(items) > max_items:
            out.append(f"... {len(items) - max_items} more")
        return out
    return str(value)


__all__ = ["ExtrasFormatter", "OtelContextLogFilter", "build_log_config", "configure_logging"]
