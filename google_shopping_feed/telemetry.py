"""OpenTelemetry helpers for feed metrics."""

from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, PeriodicExportingMetricReader


_meter_provider_initialized = False


def init_metrics(console: bool = False) -> None:
    """Install a meter provider, exporting to the console when asked."""
    global _meter_provider_initialized
    if _meter_provider_initialized:
        return
    readers = [PeriodicExportingMetricReader(ConsoleMetricExporter())] if console else []
    metrics.set_meter_provider(MeterProvider(metric_readers=readers))
    _meter_provider_initialized = True


def get_export_duration_histogram() -> metrics.Histogram:
    """Return a histogram for feed export durations."""
    meter = metrics.get_meter("google_shopping_feed")
    return meter.create_histogram(
        name="feed.export.duration",
        unit="ms",
        description="Duration of feed record exports",
    )
