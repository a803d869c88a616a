"""Logging helpers with optional OpenTelemetry export."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import TelemetryConfig

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s "
    "| trace_id=%(otelTraceID)s span_id=%(otelSpanID)s"
)

_OTLP_HANDLER: logging.Handler | None = None


class _OtelContextFilter(logging.Filter):
    """Fill trace/span placeholders when no span is active."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        if not hasattr(record, "otelTraceID"):
            record.otelTraceID = "-"
        if not hasattr(record, "otelSpanID"):
            record.otelSpanID = "-"
        return True


def get_logger(name: str = "armada") -> logging.Logger:
    """Return a logger below the `armada` namespace."""
    if name != "armada" and not name.startswith("armada."):
        name = f"armada.{name}"
    return logging.getLogger(name)


def init_logging(config: TelemetryConfig, level: int = logging.INFO) -> logging.Logger:
    """Install the console format and, if configured, the OTLP log handler."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    for handler in root_logger.handlers:
        if not any(isinstance(f, _OtelContextFilter) for f in handler.filters):
            handler.addFilter(_OtelContextFilter())

    logger = get_logger(config.service_name)
    logger.setLevel(level)

    if config.otlp_logs_endpoint:
        _install_otlp_handler(config, level)
    return logger


def _install_otlp_handler(config: TelemetryConfig, level: int) -> None:
    global _OTLP_HANDLER
    if _OTLP_HANDLER is not None:
        return

    from opentelemetry._logs import set_logger_provider
    from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
    from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
    from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
    from opentelemetry.sdk.resources import Resource

    attributes = {
        "service.name": config.service_name,
        "service.namespace": config.service_namespace,
    }
    attributes.update(config.resource_attributes)
    provider = LoggerProvider(resource=Resource.create(attributes))
    exporter = OTLPLogExporter(endpoint=config.otlp_logs_endpoint, insecure=True)
    provider.add_log_record_processor(BatchLogRecordProcessor(exporter))
    set_logger_provider(provider)

    handler = LoggingHandler(level=level, logger_provider=provider)
    handler.addFilter(_OtelContextFilter())
    logging.getLogger().addHandler(handler)
    _OTLP_HANDLER = handler
