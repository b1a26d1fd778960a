"""Observability setup for OpenTelemetry, metrics, and structured logging."""

import logging

import structlog
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest

from .config import settings

SERVICE_NAME = "aerodemo-api"

# Prometheus metrics
REGISTRY = CollectorRegistry()

RECORDS_CREATED = Counter(
    'workflow_records_created_total',
    'Total records created',
    ['record_type', 'origin'],
    registry=REGISTRY
)

STATUS_TRANSITIONS = Counter(
    'workflow_status_transitions_total',
    'Total status transitions applied',
    ['record_type', 'status'],
    registry=REGISTRY
)

RECORDS_EDITED = Counter(
    'workflow_records_edited_total',
    'Total full-field record edits',
    ['record_type'],
    registry=REGISTRY
)

RECORDS_DELETED = Counter(
    'workflow_records_deleted_total',
    'Total records deleted',
    ['record_type'],
    registry=REGISTRY
)

NOTIFICATIONS = Counter(
    'workflow_notifications_total',
    'Webhook notifications by outcome',
    ['outcome'],
    registry=REGISTRY
)

LIVE_SUBSCRIPTIONS = Gauge(
    'live_subscriptions_active',
    'Open live snapshot subscriptions',
    ['collection'],
    registry=REGISTRY
)


def setup_structured_logging():
    """Configure structured logging with structlog."""

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict['trace_id'] = format(ctx.trace_id, '032x')
            event_dict['span_id'] = format(ctx.span_id, '016x')
        return event_dict

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _resource() -> Resource:
    return Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": "1.0.0",
        "environment": settings.environment,
    })


def setup_tracing():
    """Setup OpenTelemetry tracing."""
    provider = TracerProvider(resource=_resource())
    if settings.otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint)))
    trace.set_tracer_provider(provider)
    return trace.get_tracer(__name__)


def setup_metrics():
    """Setup OpenTelemetry metrics export when a collector is configured."""
    if settings.otlp_endpoint:
        reader = PeriodicExportingMetricReader(
            exporter=OTLPMetricExporter(endpoint=settings.otlp_endpoint),
            export_interval_millis=60000,
        )
        metrics.set_meter_provider(MeterProvider(resource=_resource(), metric_readers=[reader]))
    return metrics.get_meter(__name__)


def instrument_fastapi(app):
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine):
    """Instrument the record store engine with OpenTelemetry."""
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


class MetricsCollector:
    """Collector for workflow metrics."""

    @staticmethod
    def record_created(record_type: str, origin: str):
        RECORDS_CREATED.labels(record_type=record_type, origin=origin).inc()

    @staticmethod
    def record_status_transition(record_type: str, status: str):
        STATUS_TRANSITIONS.labels(record_type=record_type, status=status).inc()

    @staticmethod
    def record_edited(record_type: str):
        RECORDS_EDITED.labels(record_type=record_type).inc()

    @staticmethod
    def record_deleted(record_type: str):
        RECORDS_DELETED.labels(record_type=record_type).inc()

    @staticmethod
    def record_notification(outcome: str):
        """Record a notification outcome: sent, failed or error."""
        NOTIFICATIONS.labels(outcome=outcome).inc()

    @staticmethod
    def set_live_subscriptions(collection: str, count: int):
        LIVE_SUBSCRIPTIONS.labels(collection=collection).set(count)


def get_prometheus_metrics():
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()


class StructuredLogger:
    """Structured logger with business context."""

    def __init__(self, name_or_logger):
        if isinstance(name_or_logger, str):
            self.logger = structlog.get_logger(name_or_logger)
        else:
            self.logger = name_or_logger

    def info(self, message: str, **kwargs):
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs):
        self.logger.error(message, **kwargs)

    def debug(self, message: str, **kwargs):
        self.logger.debug(message, **kwargs)

    def with_context(self, **kwargs):
        """Add context to logger."""
        return StructuredLogger(self.logger.bind(**kwargs))


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name)
