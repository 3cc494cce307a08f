# SPDX-FileCopyrightText: 2025 robot-visual-perception
#
# SPDX-License-Identifier: MIT
import logging
import os
from dataclasses import dataclass
from typing import Optional

from opentelemetry import metrics
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.semconv.resource import ResourceAttributes


_configured = False
_meter: Optional[metrics.Meter] = None


def configure_metrics(
    service_name: str,
    service_version: str,
    environment: str | None = None,
) -> metrics.Meter:
    """
    Configure OpenTelemetry metrics and return a Meter instance.

    Metrics are exported over OTLP HTTP only when
    OTEL_EXPORTER_OTLP_METRICS_ENDPOINT or OTEL_EXPORTER_OTLP_ENDPOINT is set;
    otherwise the provider records without exporting.

    Args:
        service_name: Name of the service (e.g., "camcal")
        service_version: Version of the service
        environment: Deployment environment (defaults to ENVIRONMENT)

    Returns:
        Meter instance for creating metrics
    """
    global _configured, _meter
    if _configured and _meter is not None:
        return _meter

    env = (
        os.getenv("ENVIRONMENT", "development") if environment is None else environment
    )
    resource = Resource.create(
        {
            ResourceAttributes.SERVICE_NAME: service_name,
            ResourceAttributes.SERVICE_VERSION: service_version,
            ResourceAttributes.DEPLOYMENT_ENVIRONMENT: env,
        }
    )

    otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_METRICS_ENDPOINT") or os.getenv(
        "OTEL_EXPORTER_OTLP_ENDPOINT"
    )
    meter_provider = MeterProvider(resource=resource)
    if otlp_endpoint:
        try:
            reader = PeriodicExportingMetricReader(
                OTLPMetricExporter(endpoint=otlp_endpoint), export_interval_millis=5000
            )
            meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
        except Exception as err:  # pragma: no cover
            logging.getLogger(__name__).warning(
                "OTLP metrics exporter setup failed; metrics not exported",
                extra={"error": str(err)},
            )

    metrics.set_meter_provider(meter_provider)
    _meter = metrics.get_meter(service_name, service_version)
    _configured = True
    return _meter


def get_meter() -> metrics.Meter:
    """Get the configured Meter instance.

    Raises:
        RuntimeError: If metrics have not been configured yet
    """
    if _meter is None:
        raise RuntimeError("Metrics not configured. Call configure_metrics() first.")
    return _meter


@dataclass
class CameraMetrics:
    """Counters recorded by the preview loop."""

    frames_read: metrics.Counter
    frames_corrected: metrics.Counter
    faults: metrics.Counter

    @classmethod
    def create(cls, meter: metrics.Meter) -> "CameraMetrics":
        return cls(
            frames_read=meter.create_counter(
                "camcal.frames_read", unit="1", description="Frames read from the device"
            ),
            frames_corrected=meter.create_counter(
                "camcal.frames_corrected",
                unit="1",
                description="Frames with distortion compensated",
            ),
            faults=meter.create_counter(
                "camcal.faults", unit="1", description="Camera faults by kind"
            ),
        )
