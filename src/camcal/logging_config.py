# SPDX-FileCopyrightText: 2025 robot-visual-perception
#
# SPDX-License-Identifier: MIT
import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Optional

from opentelemetry import trace, _logs
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource
from opentelemetry.semconv.resource import ResourceAttributes


_configured = False
_STANDARD_FIELDS: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


def _record_extras(record: logging.LogRecord, skip: dict[str, Any]) -> dict[str, Any]:
    """Collect fields passed through `extra=` that are not already present."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_FIELDS and key not in skip
    }


def _trace_fields() -> dict[str, str]:
    span_ctx = trace.get_current_span().get_span_context()
    if span_ctx and span_ctx.is_valid:
        return {
            "trace_id": format(span_ctx.trace_id, "032x"),
            "span_id": format(span_ctx.span_id, "016x"),
        }
    return {}


class JsonFormatter(logging.Formatter):
    """Format log records as structured JSON."""

    def __init__(self, service_name: str, environment: str) -> None:
        super().__init__()
        self.service_name = service_name
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "environment": self.environment,
        }
        payload.update(_trace_fields())
        payload.update(_record_extras(record, payload))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        # numpy scalars and enums in extras fall back to str()
        return json.dumps(payload, ensure_ascii=True, default=str)


class PrettyFormatter(logging.Formatter):
    """Human-readable, single-line log formatter."""

    def __init__(self, service_name: str, environment: str) -> None:
        super().__init__()
        self.service_name = service_name
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        extras: dict[str, Any] = {"service": self.service_name, "env": self.environment}
        extras.update(_trace_fields())
        extras.update(_record_extras(record, extras))
        if record.exc_info:
            extras["exception"] = self.formatException(record.exc_info)

        parts = [
            ts,
            f"{record.levelname:<7}",
            f"[{record.name}]",
            record.getMessage(),
            " ".join(f"{k}={v}" for k, v in extras.items()),
        ]
        return " ".join(filter(None, parts))


def build_formatter(
    service_name: str, environment: str, log_format: str
) -> logging.Formatter:
    """Return the console formatter for LOG_FORMAT ("json" or "pretty")."""
    if log_format == "pretty":
        return PrettyFormatter(service_name, environment)
    return JsonFormatter(service_name, environment)


def configure_logging(
    service_name: str,
    service_version: Optional[str] = None,
    environment: Optional[str] = None,
    log_format: Optional[str] = None,
) -> None:
    """
    Configure root logging with a console handler and OpenTelemetry.

    Level comes from LOG_LEVEL, console format from `log_format` or LOG_FORMAT
    (default "json"). Logs are exported over OTLP HTTP only when
    OTEL_EXPORTER_OTLP_LOGS_ENDPOINT or OTEL_EXPORTER_OTLP_ENDPOINT is set. Calling it again is a no-op.
    """
    global _configured
    if _configured:
        return

    log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_name, logging.INFO)
    env = environment if environment is not None else os.getenv("ENVIRONMENT", "development")
    fmt = (log_format or os.getenv("LOG_FORMAT", "json")).lower()

    resource = Resource.create(
        {
            ResourceAttributes.SERVICE_NAME: service_name,
            ResourceAttributes.SERVICE_VERSION: service_version or "unknown",
            ResourceAttributes.DEPLOYMENT_ENVIRONMENT: env,
        }
    )
    logger_provider = LoggerProvider(resource=resource)
    _logs.set_logger_provider(logger_provider)

    otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_LOGS_ENDPOINT") or os.getenv(
        "OTEL_EXPORTER_OTLP_ENDPOINT"
    )
    if otlp_endpoint:
        try:
            logger_provider.add_log_record_processor(
                BatchLogRecordProcessor(OTLPLogExporter(endpoint=otlp_endpoint))
            )
        except Exception as err:  # pragma: no cover - exporter failures handled gracefully
            logging.getLogger(__name__).warning(
                "OTLP exporter setup failed; console logging only",
                extra={"error": str(err)},
            )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(build_formatter(service_name, env, fmt))

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    root.addHandler(console_handler)
    root.addHandler(LoggingHandler(level=log_level, logger_provider=logger_provider))

    _configured = True
