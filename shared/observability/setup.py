import logging
import structlog
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

# OpenTelemetry
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

from shared.config.settings import Settings

# 1. Structlog Processor: Injects Trace/Span IDs into every log line
def add_otel_ids(logger, log_method, event_dict):
    span = trace.get_current_span()
    if span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = trace.format_trace_id(ctx.trace_id)
        event_dict["span_id"] = trace.format_span_id(ctx.span_id)
    return event_dict

# 2. Configure Structlog for JSON output
def configure_logging(level: int = logging.INFO):
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_otel_ids,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

# 3. Configure OpenTelemetry Tracing
def configure_tracing(app: FastAPI, service_name: str, otlp_endpoint: str):
    resource = Resource.create({SERVICE_NAME: service_name})
    provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(provider)

    # Export via OTLP gRPC (defaults to localhost:4317)
    exporter = OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)
    provider.add_span_processor(BatchSpanProcessor(exporter))

    # Spans for every incoming request
    FastAPIInstrumentor.instrument_app(app)

    # Child spans for outgoing payment gateway calls
    HTTPXClientInstrumentor().instrument()

# 4. Configure Prometheus Metrics
def configure_metrics(app: FastAPI):
    # Request latency, status codes, etc. exposed at /metrics
    Instrumentator().instrument(app).expose(app)

# --- THE MASTER SETUP FUNCTION ---
def setup_observability(app: FastAPI, settings: Settings):
    """
    Bootstraps Logging, Tracing, and Metrics for the FastAPI app.
    Tracing and metrics can be switched off through Settings (tests do).
    """
    configure_logging(getattr(logging, settings.log_level.upper(), logging.INFO))
    if settings.tracing_enabled:
        configure_tracing(app, settings.service_name, settings.otlp_endpoint)
    if settings.metrics_enabled:
        configure_metrics(app)
