"""OpenTelemetry tracing for the taskflow process.

configure_tracing() registers one tracer provider per process from Settings;
instrument() hooks FastAPI, the SQLAlchemy engine and stdlib logging into it;
shutdown_tracing() flushes it. All three are no-ops when telemetry is off.
"""

import logging
import threading

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from sqlalchemy.ext.asyncio import AsyncEngine

from app.core.config import Settings

logger = logging.getLogger(__name__)

# Health checks would otherwise dominate the trace volume.
_UNTRACED_URLS = "/api/v1/health"

_provider: TracerProvider | None = None
_lock = threading.RLock()


def _span_exporter(settings: Settings) -> SpanExporter | None:
    kind = settings.telemetry_exporter.lower()
    if kind == "none":
        return None
    if kind == "otlp" and settings.telemetry_otlp_endpoint:
        endpoint = settings.telemetry_otlp_endpoint
        logger.info("Exporting spans over OTLP to %s", endpoint)
        return OTLPSpanExporter(endpoint=endpoint, insecure=endpoint.startswith("http://"))
    if kind == "otlp":
        logger.warning("TELEMETRY_EXPORTER=otlp without TELEMETRY_OTLP_ENDPOINT; printing spans")
    elif kind != "console":
        logger.warning("Unknown TELEMETRY_EXPORTER %r; printing spans", kind)
    return ConsoleSpanExporter()


def configure_tracing(settings: Settings) -> TracerProvider | None:
    """Create and register the global tracer provider.

    Returns the already registered provider on repeated calls, and None when
    TELEMETRY_ENABLED is false or setup fails (tracing is never fatal).
    """
    global _provider
    if not settings.telemetry_enabled:
        logger.info("Telemetry disabled")
        return None
    with _lock:
        if _provider is not None:
            return _provider
        try:
            provider = TracerProvider(
                resource=Resource(
                    attributes={
                        SERVICE_NAME: settings.app_name,
                        SERVICE_VERSION: settings.app_version,
                        "deployment.environment": settings.telemetry_environment,
                    }
                ),
                sampler=ParentBased(TraceIdRatioBased(settings.telemetry_sample_rate)),
            )
            exporter = _span_exporter(settings)
            if exporter is not None:
                provider.add_span_processor(BatchSpanProcessor(exporter))
            trace.set_tracer_provider(provider)
        except Exception:
            logger.exception("Tracing setup failed; continuing without spans")
            return None
        _provider = provider
        logger.info(
            "Tracing on: service=%s exporter=%s sample_rate=%s",
            settings.app_name,
            settings.telemetry_exporter,
            settings.telemetry_sample_rate,
        )
        return provider


def get_tracer_provider() -> TracerProvider | None:
    with _lock:
        return _provider


def instrument(app: FastAPI, engine: AsyncEngine | None) -> None:
    """Attach FastAPI, SQLAlchemy and logging instrumentation to the provider."""
    provider = get_tracer_provider()
    if provider is None:
        return
    try:
        FastAPIInstrumentor.instrument_app(
            app, tracer_provider=provider, excluded_urls=_UNTRACED_URLS
        )
        # Adds trace_id / span_id to every log record.
        LoggingInstrumentor().instrument(tracer_provider=provider, set_logging_format=True)
        if engine is not None:
            SQLAlchemyInstrumentor().instrument(
                engine=engine.sync_engine, tracer_provider=provider
            )
    except Exception:
        logger.exception("Instrumentation failed; requests are served untraced")


def shutdown_tracing() -> None:
    """Flush buffered spans and forget the provider."""
    global _provider
    with _lock:
        provider, _provider = _provider, None
    if provider is None:
        return
    try:
        provider.shutdown()
    except Exception:
        logger.exception("Tracer provider shutdown failed")
