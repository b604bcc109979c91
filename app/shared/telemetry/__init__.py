"""Logging setup, OpenTelemetry tracing and span helpers."""

from app.shared.telemetry.logging import get_logger, setup_logging
from app.shared.telemetry.telemetry import (
    configure_tracing,
    get_tracer_provider,
    instrument,
    shutdown_tracing,
)
from app.shared.telemetry.tracing import add_span_attributes, get_trace_id, traced

__all__ = [
    "add_span_attributes",
    "configure_tracing",
    "get_logger",
    "get_trace_id",
    "get_tracer_provider",
    "instrument",
    "setup_logging",
    "shutdown_tracing",
    "traced",
]
