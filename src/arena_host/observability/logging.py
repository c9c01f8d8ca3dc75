"""Shared logging helpers (formatter + base config builder)."""

from __future__ import annotations

import json
import logging
import os
import time
import traceback
from collections.abc import Mapping
from logging.config import dictConfig
from typing import Any

from opentelemetry import baggage, trace

_PACKAGE_LOGGER = "arena_host"


def _level(env_var: str, default: str) -> str:
    return os.getenv(env_var, default).upper()


def _should_emit_json_payload(requested: bool = False) -> bool:
    if requested:
        return True
    # Cloud Run and Kubernetes log ingestion can parse JSON log lines into structured payloads.
    # Outside managed runtimes we keep logs human-readable unless explicitly requested.
    if os.getenv("K_SERVICE") or os.getenv("KUBERNETES_SERVICE_HOST"):
        return True
    return os.getenv("ARENA_LOG_JSON", "").strip().lower() in {"1", "true", "yes"}


def _compact_json(value: Any, *, limit: int = 512) -> str:
    encoded = json.dumps(value, sort_keys=True, separators=(",", ":"))
    if len(encoded) <= limit:
        return encoded
    return encoded[:limit] + "... (truncated)"


def _structured_payload(record: logging.LogRecord) -> dict[str, Any]:
    """One JSON log line: message, severity, logger, timestamp, data and otel context."""
    timestamp = time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
    payload: dict[str, Any] = {
        "message": record.getMessage(),
        "severity": record.levelname,
        "logger": record.name,
        "timestamp": f"{timestamp}.{int(record.msecs):03d}Z",
    }

    data = getattr(record, "data", None)
    if data:
        payload["data"] = _sanitize_for_json(data)
        payload["message"] += f" | data={_compact_json(payload['data'])}"
    if record.exc_info:
        payload["exception"] = "".join(traceback.format_exception(*record.exc_info)).rstrip("\n")

    # json_fields never overwrite the core keys above
    json_fields = getattr(record, "json_fields", None)
    if isinstance(json_fields, Mapping):
        for key, value in json_fields.items():
            payload.setdefault(str(key), _sanitize_for_json(value))

    return payload


class ExtrasFormatter(logging.Formatter):
    """Append structured `data` payloads when present.

    ``json_payload`` forces one JSON object per line; otherwise JSON is used
    only inside managed runtimes or when ``ARENA_LOG_JSON`` is set.
    """

    def __init__(self, *args: Any, json_payload: bool = False, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._json_payload = json_payload

    def format(self, record: logging.LogRecord) -> str:
        if _should_emit_json_payload(self._json_payload):
            return json.dumps(_structured_payload(record), sort_keys=True, separators=(",", ":"))

        formatted = super().format(record)
        data = getattr(record, "data", None)
        if data:
            return f"{formatted} | data={_compact_json(_sanitize_for_json(data))}"
        return formatted


class OtelContextLogFilter(logging.Filter):
    """Inject OpenTelemetry trace context + baggage into json_fields."""

    def filter(self, record: logging.LogRecord) -> bool:
        otel: dict[str, Any] = {}
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            otel["trace_id"] = f"{span_context.trace_id:032x}"
            otel["span_id"] = f"{span_context.span_id:016x}"

        baggage_values = baggage.get_all()
        if baggage_values:
            otel["baggage"] = {key: str(value) for key, value in baggage_values.items()}

        if otel:
            existing = getattr(record, "json_fields", None)
            json_fields = dict(existing) if isinstance(existing, Mapping) else {}
            json_fields["otel"] = otel
            record.json_fields = json_fields
        return True


def build_log_config(
    *,
    root_level_env: str,
    root_default: str,
    package_level: str | None = None,
    json_payload: bool = False,
) -> dict[str, Any]:
    """Return a dictConfig-compatible logging configuration.

    ``package_level`` overrides the level of the ``arena_host`` loggers, which
    is how the host's debug option turns on verbose diagnostics.
    ``json_payload`` makes the console formatter emit JSON lines.
    """

    loggers: dict[str, dict[str, Any]] = {
        _PACKAGE_LOGGER: {
            "level": (package_level or _level(root_level_env, root_default)).upper(),
            "handlers": ["console"],
            "propagate": False,
        },
        "opentelemetry": {
            "level": _level("OTEL_LOG_LEVEL", "WARNING"),
            "handlers": ["console"],
            "propagate": False,
        },
    }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "()": ExtrasFormatter,
                "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
                "json_payload": json_payload,
            }
        },
        "filters": {
            "otel_context": {"()": OtelContextLogFilter},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
                "stream": "ext://sys.stdout",
                "filters": ["otel_context"],
            }
        },
        "root": {
            "level": _level(root_level_env, root_default),
            "handlers": ["console"],
        },
        "loggers": loggers,
    }


def _sanitize_for_json(value: Any, depth: int = 6) -> Any:
    """Return a JSON-serializable copy; unknown objects are rendered with ``str``."""
    if depth <= 0:
        return "<depth_exceeded>"
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes len={len(value)}>"
    if isinstance(value, Mapping):
        return {str(key): _sanitize_for_json(item, depth - 1) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_sanitize_for_json(item, depth - 1) for item in value]
    return str(value)


def configure_logging(
    *,
    root_level_env: str,
    root_default: str,
    package_level: str | None = None,
    json_payload: bool = False,
) -> None:
    """Apply the shared logging config."""
    config = build_log_config(
        root_level_env=root_level_env,
        root_default=root_default,
        package_level=package_level,
        json_payload=json_payload,
    )
    dictConfig(config)
    logging.getLogger("arena_host.observability.logging").debug(
        "configured logging",
        extra={"data": {"package_level": config["loggers"][_PACKAGE_LOGGER]["level"]}},
    )


__all__ = ["ExtrasFormatter", "OtelContextLogFilter", "build_log_config", "configure_logging"]
