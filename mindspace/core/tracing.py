"""
OpenTelemetry tracing for the journal service.

Disabled unless OTEL_ENABLED=true. When enabled, incoming FastAPI requests and
outgoing httpx calls are traced, and enrichment calls get their own spans via
``get_tracer``. Spans go to the console exporter, or to OTLP when
OTEL_EXPORTER_OTLP_ENDPOINT is set and the grpc exporter is installed.

Usage:
    from mindspace.core.tracing import setup_tracing, instrument_app, get_tracer

    setup_tracing()
    instrument_app(app)

    tracer = get_tracer(__name__)
    with tracer.start_as_current_span("enrichment.entry") as span:
        span.set_attribute("journal.mood", "good")
"""

import logging
import os
from typing import Optional

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.trace import Tracer
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

logger = logging.getLogger("MindSpace.Tracing")

DEFAULT_SERVICE_NAME = "mindspace-journal-service"

_tracer_provider: Optional[TracerProvider] = None
_is_initialized = False


def is_tracing_enabled() -> bool:
    return os.getenv("OTEL_ENABLED", "false").lower() == "true"


def setup_tracing(service_name: Optional[str] = None) -> Optional[TracerProvider]:
    """
    Install a global TracerProvider with a batch span processor.

    Returns:
        The provider, or None when tracing is disabled.
    """
    global _tracer_provider, _is_initialized

    if _is_initialized:
        return _tracer_provider

    if not is_tracing_enabled():
        logger.info("OpenTelemetry tracing is disabled (set OTEL_ENABLED=true to enable)")
        _is_initialized = True
        return None

    effective_service_name = (
        service_name
        or os.getenv("OTEL_SERVICE_NAME")
        or DEFAULT_SERVICE_NAME
    )

    _tracer_provider = TracerProvider(resource=Resource.create({SERVICE_NAME: effective_service_name}))

    otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
            exporter = OTLPSpanExporter(endpoint=otlp_endpoint)
            logger.info(f"Using OTLP exporter with endpoint: {otlp_endpoint}")
        except ImportError:
            logger.warning("OTLP exporter requested but grpc dependencies not installed, falling back to console")
            exporter = ConsoleSpanExporter()
    else:
        exporter = ConsoleSpanExporter()

    _tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(_tracer_provider)

    _is_initialized = True
    logger.info(f"OpenTelemetry tracing initialized for service: {effective_service_name}")
    return _tracer_provider


def get_tracer(name: str) -> Tracer:
    """Tracer for custom spans; a no-op tracer while tracing is disabled."""
    return trace.get_tracer(name)


def instrument_app(app) -> None:
    """Trace incoming requests and outgoing httpx calls."""
    if not is_tracing_enabled():
        return

    FastAPIInstrumentor.instrument_app(app)
    HTTPXClientInstrumentor().instrument()
    logger.info("FastAPI and httpx instrumentation enabled")


def shutdown_tracing() -> None:
    """Flush remaining spans and drop the provider."""
    global _tracer_provider, _is_initialized

    if _tracer_provider is not None:
        _tracer_provider.shutdown()
        logger.info("OpenTelemetry tracing shut down")

    _tracer_provider = None
    _is_initialized = False
