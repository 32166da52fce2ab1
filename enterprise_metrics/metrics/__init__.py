"""Metrics registry, exposition and instrumentation.

Metrics are defined in an explicitly constructed ``MetricsRegistry`` owned by
the service container:

    from enterprise_metrics.metrics import MetricsRegistry

    registry = MetricsRegistry()
    requests = registry.counter("requests_total", "Requests", ["route"])
    requests.labels("/api/orders").inc()

Application metrics live in ``catalog.AppMetrics``; the request middleware,
update coordinator and exposition helpers are in their own modules.
"""

from enterprise_metrics.metrics.registry import (
    CounterSeries,
    GaugeSeries,
    HistogramSeries,
    Metric,
    MetricKind,
    MetricsRegistry,
)

__all__ = [
    "CounterSeries",
    "GaugeSeries",
    "HistogramSeries",
    "Metric",
    "MetricKind",
    "MetricsRegistry",
]
