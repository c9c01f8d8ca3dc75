"""OpenTelemetry bootstrap for the session host."""

from __future__ import annotations

import os

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

_TRACING_CONFIGURED = False


def _exporter_endpoint() -> str | None:
    """Return the OTLP endpoint, or None when exporting is off or unconfigured."""
    exporter = (os.getenv("OTEL_TRACES_EXPORTER") or "").strip().lower()
    if exporter == "none":
        return None
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT") or os.getenv(
        "OTEL_EXPORTER_OTLP_ENDPOINT"
    )
    if not endpoint and exporter:
        raise RuntimeError(
            f"Tracing enabled (OTEL_TRACES_EXPORTER={exporter}) but OTLP endpoint missing: "
            "set OTEL_EXPORTER_OTLP_ENDPOINT or OTEL_TRACES_EXPORTER=none."
        )
    return endpoint or None


def configure_tracing(*, service_name: str) -> bool:
    """Install an OTLP span exporter when the environment asks for one.

    Without an endpoint the ``action.dispatch`` spans stay on the no-op
    tracer. Only the first call has any effect; it returns True when it
    installed a provider.
    """
    global _TRACING_CONFIGURED
    if _TRACING_CONFIGURED:
        return False

    endpoint = _exporter_endpoint()
    _TRACING_CONFIGURED = True
    if endpoint is None:
        return False

    resolved_name = (os.getenv("OTEL_SERVICE_NAME") or service_name).strip() or "arena-host"
    provider = TracerProvider(resource=Resource.create({"service.name": resolved_name}))
    # the exporter reads the endpoint from the same environment variables
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter()))
    trace.set_tracer_provider(provider)
    return True


__all__ = ["configure_tracing"]
