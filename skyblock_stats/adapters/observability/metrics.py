"""OpenTelemetry metrics provider for skyblock-stats."""

import logging
from typing import Optional
from contextlib import contextmanager
import time

from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    PeriodicExportingMetricReader,
)
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME

from ...config import Config
from .constants import (
    UPSTREAM_CALLS_TOTAL,
    UPSTREAM_CALL_DURATION,
    CARDS_RENDERED,
    CARD_FAILURES,
    LABEL_UPSTREAM_SERVICE,
    LABEL_STATUS_CODE,
    LABEL_ERROR_TYPE,
    LABEL_STAGE,
    LABEL_DOWNSCALED,
)

logger = logging.getLogger(__name__)


class MetricsProvider:
    """Manages OpenTelemetry metrics for the banner service."""

    def __init__(self, config: Config):
        """Initialize the metrics provider.

        Args:
            config: Application configuration
        """
        self.config = config
        self._meter_provider: Optional[MeterProvider] = None
        self._meter: Optional[metrics.Meter] = None
        self._initialized = False

        # Metric instruments - initialized in setup()
        self._upstream_calls_counter = None
        self._upstream_duration_histogram = None
        self._cards_rendered_counter = None
        self._card_failures_counter = None

    @property
    def enabled(self) -> bool:
        return self._initialized and self.config.otel_enabled

    def initialize(self) -> None:
        """Initialize the OpenTelemetry metrics provider."""
        if self._initialized:
            logger.warning("Metrics provider already initialized")
            return

        if not self.config.otel_enabled:
            logger.info("OpenTelemetry metrics disabled")
            self._initialized = True
            return

        try:
            resource = Resource.create({
                SERVICE_NAME: self.config.otel_service_name,
                "environment": self.config.environment.value,
            })

            if self.config.otel_exporter_type == "console":
                exporter = ConsoleMetricExporter()
                logger.info("Using console metric exporter")
            elif self.config.otel_exporter_type == "otlp":
                exporter = OTLPMetricExporter(
                    endpoint=self.config.otel_otlp_endpoint,
                    insecure=True,
                )
                logger.info(f"Using OTLP metric exporter: {self.config.otel_otlp_endpoint}")
            else:
                logger.info("Metrics export disabled (exporter_type='none')")
                self._initialized = True
                return

            reader = PeriodicExportingMetricReader(
                exporter=exporter,
                export_interval_millis=self.config.otel_export_interval_millis,
                export_timeout_millis=self.config.otel_export_timeout_millis,
            )

            self._meter_provider = MeterProvider(
                resource=resource,
                metric_readers=[reader],
            )
            metrics.set_meter_provider(self._meter_provider)
            self._meter = metrics.get_meter(__name__)

            self._create_instruments()

            self._initialized = True
            logger.info("Metrics provider initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize metrics provider: {e}")
            self._initialized = False
            raise

    def _create_instruments(self) -> None:
        """Create all metric instruments."""
        if not self._meter:
            return

        self._upstream_calls_counter = self._meter.create_counter(
            name=UPSTREAM_CALLS_TOTAL,
            description="Total number of upstream API calls",
            unit="1",
        )

        self._upstream_duration_histogram = self._meter.create_histogram(
            name=UPSTREAM_CALL_DURATION,
            description="Duration of upstream API calls in seconds",
            unit="s",
        )

        self._cards_rendered_counter = self._meter.create_counter(
            name=CARDS_RENDERED,
            description="Total number of banners delivered",
            unit="1",
        )

        self._card_failures_counter = self._meter.create_counter(
            name=CARD_FAILURES,
            description="Total number of banner requests that failed in a pipeline stage",
            unit="1",
        )

    def shutdown(self) -> None:
        """Shutdown the metrics provider and flush any pending metrics."""
        if self._meter_provider:
            try:
                self._meter_provider.shutdown()
                logger.info("Metrics provider shut down")
            except Exception as e:
                logger.error(f"Error shutting down metrics provider: {e}")

    # Upstream API metrics

    def record_upstream_call(
        self,
        service: str,
        status_code: int,
        duration: float,
        error_type: Optional[str] = None
    ) -> None:
        """Record an upstream API call."""
        if not self.enabled:
            return

        labels = {
            LABEL_UPSTREAM_SERVICE: service,
            LABEL_STATUS_CODE: str(status_code),
        }

        if error_type:
            labels[LABEL_ERROR_TYPE] = error_type

        if self._upstream_calls_counter:
            self._upstream_calls_counter.add(1, labels)

        if self._upstream_duration_histogram:
            self._upstream_duration_histogram.record(duration, labels)

    @contextmanager
    def measure_upstream_call(self, service: str):
        """Context manager to measure upstream call duration.

        Usage:
            with metrics.measure_upstream_call("profiles") as record:
                response = await make_api_call()
                record(response.status_code)
        """
        start_time = time.time()

        def record(status_code: int, error_type: Optional[str] = None):
            self.record_upstream_call(
                service=service,
                status_code=status_code,
                duration=time.time() - start_time,
                error_type=error_type
            )

        yield record

    # Banner metrics

    def record_card_rendered(self, downscaled: bool) -> None:
        """Record a delivered banner."""
        if not self.enabled:
            return

        if self._cards_rendered_counter:
            self._cards_rendered_counter.add(1, {LABEL_DOWNSCALED: str(downscaled).lower()})

    def record_card_failure(self, stage: str, error_type: str) -> None:
        """Record a banner request that failed in a pipeline stage."""
        if not self.enabled:
            return

        if self._card_failures_counter:
            self._card_failures_counter.add(1, {
                LABEL_STAGE: stage,
                LABEL_ERROR_TYPE: error_type,
            })


# Global metrics provider instance
_metrics_provider: Optional[MetricsProvider] = None


def get_metrics_provider() -> Optional[MetricsProvider]:
    """Get the global metrics provider instance."""
    return _metrics_provider


def initialize_metrics(config: Config) -> MetricsProvider:
    """Initialize the global metrics provider.

    Args:
        config: Application configuration

    Returns:
        The initialized MetricsProvider instance
    """
    global _metrics_provider

    if _metrics_provider is not None:
        logger.warning("Metrics provider already initialized")
        return _metrics_provider

    _metrics_provider = MetricsProvider(config)
    _metrics_provider.initialize()

    return _metrics_provider


def shutdown_metrics() -> None:
    """Shutdown the global metrics provider."""
    global _metrics_provider

    if _metrics_provider:
        _metrics_provider.shutdown()
        _metrics_provider = None
