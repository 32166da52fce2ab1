"""Prometheus exposition for the metrics registry.

Two output paths exist:

- ``render_text()`` writes the classic text format (version 0.0.4) directly,
  with integral values printed without a fractional part (``orders_total 1``).
- ``RegistryCollector`` adapts a registry to prometheus_client's collector
  interface, so OpenMetrics output and the client's default process
  collectors can be produced by prometheus_client itself.

The two formats name counters differently. The text format prints each
counter under its registered name. OpenMetrics strips a trailing ``_total``
from the family name and always appends ``_total`` to the sample, so
``orders_total`` becomes family ``orders`` with sample ``orders_total``, while
``revenue_total_dollars`` keeps its family name and gets the sample
``revenue_total_dollars_total``.
"""

import math
from collections.abc import Iterable, Iterator

from prometheus_client.core import (
    CounterMetricFamily,
    GaugeMetricFamily,
    HistogramMetricFamily,
    Metric as PrometheusMetricFamily,
)
from prometheus_client.registry import Collector
from prometheus_client.utils import floatToGoString

from enterprise_metrics.metrics.registry import (
    HistogramSnapshot,
    Metric,
    MetricKind,
    MetricsRegistry,
)

CONTENT_TYPE_TEXT = "text/plain; version=0.0.4; charset=utf-8"


def format_value(value: float) -> str:
    """Format a sample value or bucket bound for exposition."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == int(value) and abs(value) < 1e15:
        return str(int(value))
    return repr(float(value))


def escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def escape_help(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def _format_labels(pairs: Iterable[tuple[str, str]]) -> str:
    rendered = ",".join(f'{name}="{escape_label_value(value)}"' for name, value in pairs)
    return f"{{{rendered}}}" if rendered else ""


def _render_metric(metric: Metric) -> list[str]:
    lines = [
        f"# HELP {metric.name} {escape_help(metric.help)}",
        f"# TYPE {metric.name} {metric.kind.value}",
    ]

    for series in metric.series():
        pairs = list(zip(metric.label_names, series.label_values))
        snapshot = series.snapshot()

        if isinstance(snapshot, HistogramSnapshot):
            for bound, count in snapshot.buckets():
                bucket_labels = _format_labels([*pairs, ("le", format_value(bound))])
                lines.append(f"{metric.name}_bucket{bucket_labels} {count}")
            labels = _format_labels(pairs)
            lines.append(f"{metric.name}_sum{labels} {format_value(snapshot.sum)}")
            lines.append(f"{metric.name}_count{labels} {snapshot.count}")
        else:
            lines.append(f"{metric.name}{_format_labels(pairs)} {format_value(snapshot)}")

    return lines


def render_text(metrics: Iterable[Metric]) -> str:
    """Render metrics in order; an empty input yields an empty string."""
    lines: list[str] = []
    for metric in metrics:
        lines.extend(_render_metric(metric))
    return "\n".join(lines) + "\n" if lines else ""


class RegistryCollector(Collector):
    """Expose a MetricsRegistry through prometheus_client's collector API."""

    def __init__(self, registry: MetricsRegistry):
        self._registry = registry

    def collect(self) -> Iterator[PrometheusMetricFamily]:
        for metric in self._registry.metrics():
            yield self._to_family(metric)

    def _to_family(self, metric: Metric) -> PrometheusMetricFamily:
        label_names = list(metric.label_names)
        family: CounterMetricFamily | GaugeMetricFamily | HistogramMetricFamily

        match metric.kind:
            case MetricKind.COUNTER:
                family = CounterMetricFamily(metric.name, metric.help, labels=label_names)
            case MetricKind.GAUGE:
                family = GaugeMetricFamily(metric.name, metric.help, labels=label_names)
            case MetricKind.HISTOGRAM:
                family = HistogramMetricFamily(
                    metric.name, metric.help, labels=label_names
                )

        for series in metric.series():
            label_values = list(series.label_values)
            snapshot = series.snapshot()
            if isinstance(snapshot, HistogramSnapshot):
                buckets = [
                    (floatToGoString(bound), count)
                    for bound, count in snapshot.buckets()
                ]
                family.add_metric(label_values, buckets, snapshot.sum)  # type: ignore[call-arg]
            else:
                family.add_metric(label_values, snapshot)  # type: ignore[call-arg]

        return family
