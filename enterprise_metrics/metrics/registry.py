"""In-process metrics registry.

The registry owns a set of named metrics (counters, gauges and histograms),
each with a fixed list of label names and any number of time series. It is
constructed by the application container and injected wherever metrics are
recorded, so tests can build as many isolated registries as they need.

    registry = MetricsRegistry()
    orders = registry.counter("orders_total", "Orders", ["status", "payment_method"])
    orders.labels("completed", "credit_card").inc()
    print(registry.render())

All mutation is thread-safe: each metric serializes series creation and each
series serializes its own updates, so a concurrent render sees every series
either before or after an observation, never half of one.
"""

import logging
import math
import re
import threading
import time
from abc import ABC, abstractmethod
from bisect import bisect_left
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum

from enterprise_metrics.exceptions import (
    DuplicateMetricError,
    InvalidDefinitionError,
    InvalidObservationError,
    LabelCardinalityError,
    UnknownMetricError,
)

logger = logging.getLogger(__name__)

METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")
LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

# Histogram series carry an implicit "le" label on their bucket lines
RESERVED_HISTOGRAM_LABELS = frozenset({"le"})

DEFAULT_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class MetricKind(str, Enum):
    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"


@dataclass(frozen=True)
class HistogramSnapshot:
    """Consistent point-in-time view of a histogram series."""

    bounds: tuple[float, ...]
    cumulative_counts: tuple[int, ...]
    count: int
    sum: float

    def buckets(self) -> list[tuple[float, int]]:
        """Return (upper bound, cumulative count) pairs including +Inf."""
        pairs = list(zip(self.bounds, self.cumulative_counts))
        pairs.append((math.inf, self.count))
        return pairs


class Series(ABC):
    """A single time series: one metric plus one assignment of label values."""

    def __init__(self, metric_name: str, label_values: tuple[str, ...]):
        self.metric_name = metric_name
        self.label_values = label_values
        self._lock = threading.Lock()

    @abstractmethod
    def snapshot(self) -> "float | HistogramSnapshot":
        """Return a consistent copy of the series' current value."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.metric_name!r}, {self.label_values!r})"


class CounterSeries(Series):
    """Monotonically non-decreasing accumulator."""

    def __init__(self, metric_name: str, label_values: tuple[str, ...]):
        super().__init__(metric_name, label_values)
        self._value = 0.0

    def inc(self, amount: float = 1.0) -> None:
        """Add a non-negative amount to the counter."""
        if math.isnan(amount) or amount < 0:
            raise InvalidObservationError(
                self.metric_name, f"counters can only increase, got {amount}"
            )
        with self._lock:
            self._value += amount

    def observe(self, value: float) -> None:
        self.inc(value)

    @property
    def value(self) -> float:
        with self._lock:
            return self._value

    def snapshot(self) -> float:
        return self.value


class GaugeSeries(Series):
    """Point-in-time value that may go up and down."""

    def __init__(self, metric_name: str, label_values: tuple[str, ...]):
        super().__init__(metric_name, label_values)
        self._value = 0.0

    def set(self, value: float) -> None:
        with self._lock:
            self._value = float(value)

    def inc(self, amount: float = 1.0) -> None:
        with self._lock:
            self._value += amount

    def dec(self, amount: float = 1.0) -> None:
        with self._lock:
            self._value -= amount

    @property
    def value(self) -> float:
        with self._lock:
            return self._value

    def snapshot(self) -> float:
        return self.value


class HistogramSeries(Series):
    """Distribution recorded as cumulative buckets plus sum and count."""

    def __init__(
        self,
        metric_name: str,
        label_values: tuple[str, ...],
        bounds: tuple[float, ...],
    ):
        super().__init__(metric_name, label_values)
        self._bounds = bounds
        # Per-bucket (non-cumulative) hits; accumulated when snapshotting
        self._bucket_hits = [0] * len(bounds)
        self._count = 0
        self._sum = 0.0

    def observe(self, value: float) -> None:
        """Record one observation."""
        if math.isnan(value):
            raise InvalidObservationError(self.metric_name, "cannot observe NaN")

        # First bucket whose upper bound is >= value; past the end means +Inf only
        index = bisect_left(self._bounds, value)
        with self._lock:
            if index < len(self._bucket_hits):
                self._bucket_hits[index] += 1
            self._count += 1
            self._sum += value

    def start_timer(self) -> Callable[[], float]:
        """Start timing and return a callable that records the elapsed seconds.

        The returned callable records at most once; later calls return the
        same duration without observing again.
        """
        start = time.perf_counter()
        recorded: list[float] = []
        stop_lock = threading.Lock()

        def stop() -> float:
            with stop_lock:
                if not recorded:
                    duration = time.perf_counter() - start
                    self.observe(duration)
                    recorded.append(duration)
                return recorded[0]

        return stop

    @contextmanager
    def time(self) -> Iterator[None]:
        """Context manager observing the duration of its block.

        Nothing is recorded if the block raises.
        """
        stop = self.start_timer()
        yield
        stop()

    def snapshot(self) -> HistogramSnapshot:
        with self._lock:
            hits = list(self._bucket_hits)
            count = self._count
            total = self._sum

        cumulative: list[int] = []
        running = 0
        for hit in hits:
            running += hit
            cumulative.append(running)

        return HistogramSnapshot(
            bounds=self._bounds,
            cumulative_counts=tuple(cumulative),
            count=count,
            sum=total,
        )


class Metric:
    """A named metric with a fixed kind, help text and label names."""

    def __init__(
        self,
        name: str,
        kind: MetricKind,
        help: str,
        label_names: Sequence[str] = (),
        buckets: Sequence[float] | None = None,
    ):
        self.name = name
        self.kind = kind
        self.help = help
        self.label_names = tuple(label_names)
        self.buckets = tuple(float(b) for b in buckets) if buckets is not None else None
        self._series: dict[tuple[str, ...], Series] = {}
        self._lock = threading.Lock()

        # Unlabelled metrics always expose their single series
        if not self.label_names:
            self.labels()

    def labels(self, *label_values: object, **label_kwargs: object) -> Series:
        """Return the series for the given label values, creating it if needed.

        Values may be passed positionally, in declaration order, or as
        keywords naming every label. ``None`` is treated as the empty string.

        Raises:
            LabelCardinalityError: If the values do not match the label names.
        """
        if label_values and label_kwargs:
            raise LabelCardinalityError(
                self.name, self.label_names, [*label_values, *label_kwargs.values()]
            )

        if label_kwargs:
            if set(label_kwargs) != set(self.label_names):
                raise LabelCardinalityError(
                    self.name, self.label_names, list(label_kwargs.values())
                )
            label_values = tuple(label_kwargs[name] for name in self.label_names)

        if len(label_values) != len(self.label_names):
            raise LabelCardinalityError(self.name, self.label_names, label_values)

        key = tuple("" if value is None else str(value) for value in label_values)

        with self._lock:
            series = self._series.get(key)
            if series is None:
                series = self._new_series(key)
                self._series[key] = series
            return series

    def labels_or_fallback(self, *label_values: object) -> Series:
        """Like labels(), but never raises on a label count mismatch.

        Used on request-handling paths, where a recording bug must not fail
        the request. Missing values become the empty string and surplus
        values are dropped.
        """
        try:
            return self.labels(*label_values)
        except LabelCardinalityError as e:
            logger.error(
                "Label cardinality mismatch, recording under fallback labels",
                extra={"metric": self.name, "error": str(e)},
            )
            width = len(self.label_names)
            padded = (list(label_values) + [""] * width)[:width]
            return self.labels(*padded)

    def series(self) -> list[Series]:
        """Return all series in first-seen order."""
        with self._lock:
            return list(self._series.values())

    def _new_series(self, key: tuple[str, ...]) -> Series:
        match self.kind:
            case MetricKind.COUNTER:
                return CounterSeries(self.name, key)
            case MetricKind.GAUGE:
                return GaugeSeries(self.name, key)
            case MetricKind.HISTOGRAM:
                return HistogramSeries(self.name, key, self.buckets or DEFAULT_BUCKETS)
        raise InvalidDefinitionError(self.name, f"unknown metric kind {self.kind!r}")

    def __repr__(self) -> str:
        return f"Metric({self.name!r}, {self.kind.value}, labels={list(self.label_names)})"


class MetricsRegistry:
    """Ordered collection of metrics with text exposition."""

    def __init__(self) -> None:
        self._metrics: dict[str, Metric] = {}
        self._lock = threading.Lock()

    def define(
        self,
        name: str,
        kind: MetricKind,
        help: str,
        label_names: Sequence[str] = (),
        buckets: Sequence[float] | None = None,
    ) -> Metric:
        """Define and register a new metric.

        Raises:
            DuplicateMetricError: If the name is already registered.
            InvalidDefinitionError: If the kind is unknown or the name, labels
                or buckets are malformed.
        """
        try:
            kind = MetricKind(kind)
        except ValueError as e:
            raise InvalidDefinitionError(str(name), f"unknown metric kind {kind!r}") from e
        label_names = tuple(label_names)

        # The +Inf bucket is implicit; accept it spelled out as the last bound
        if buckets is not None:
            buckets = [float(b) for b in buckets]
            if buckets and buckets[-1] == math.inf:
                buckets = buckets[:-1]

        self._validate_definition(name, kind, label_names, buckets)

        metric = Metric(name, kind, help, label_names, buckets)

        with self._lock:
            if name in self._metrics:
                raise DuplicateMetricError(name)
            self._metrics[name] = metric

        logger.debug(
            "Registered metric",
            extra={"metric": name, "kind": kind.value, "labels": list(label_names)},
        )
        return metric

    def counter(self, name: str, help: str, label_names: Sequence[str] = ()) -> Metric:
        return self.define(name, MetricKind.COUNTER, help, label_names)

    def gauge(self, name: str, help: str, label_names: Sequence[str] = ()) -> Metric:
        return self.define(name, MetricKind.GAUGE, help, label_names)

    def histogram(
        self,
        name: str,
        help: str,
        label_names: Sequence[str] = (),
        buckets: Sequence[float] = DEFAULT_BUCKETS,
    ) -> Metric:
        return self.define(name, MetricKind.HISTOGRAM, help, label_names, buckets)

    def get(self, name: str) -> Metric:
        with self._lock:
            metric = self._metrics.get(name)
        if metric is None:
            raise UnknownMetricError(name)
        return metric

    def get_or_create_series(self, name: str, label_values: Sequence[object]) -> Series:
        """Return the series of metric ``name`` matching ``label_values``."""
        return self.get(name).labels(*label_values)

    def metrics(self) -> list[Metric]:
        """Return all metrics in registration order."""
        with self._lock:
            return list(self._metrics.values())

    def render(self) -> str:
        """Serialize every metric in Prometheus text exposition format."""
        from enterprise_metrics.metrics.exposition import render_text

        return render_text(self.metrics())

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._metrics

    def __len__(self) -> int:
        with self._lock:
            return len(self._metrics)

    def _validate_definition(
        self,
        name: str,
        kind: MetricKind,
        label_names: tuple[str, ...],
        buckets: Sequence[float] | None,
    ) -> None:
        if not isinstance(name, str) or not METRIC_NAME_RE.match(name):
            raise InvalidDefinitionError(str(name), "name is not a valid metric name")

        for label in label_names:
            if not LABEL_NAME_RE.match(label) or label.startswith("__"):
                raise InvalidDefinitionError(name, f"invalid label name {label!r}")
        if len(set(label_names)) != len(label_names):
            raise InvalidDefinitionError(name, "label names must be unique")

        if kind != MetricKind.HISTOGRAM:
            if buckets is not None:
                raise InvalidDefinitionError(name, "only histograms take buckets")
            return

        reserved = RESERVED_HISTOGRAM_LABELS.intersection(label_names)
        if reserved:
            raise InvalidDefinitionError(
                name, f"label {sorted(reserved)[0]!r} is reserved for histograms"
            )

        if not buckets:
            raise InvalidDefinitionError(name, "histogram buckets must not be empty")

        bounds = [float(b) for b in buckets]
        if any(math.isnan(b) or math.isinf(b) for b in bounds):
            raise InvalidDefinitionError(name, "histogram buckets must be finite")
        if any(lower >= upper for lower, upper in zip(bounds, bounds[1:])):
            raise InvalidDefinitionError(
                name, "histogram buckets must be strictly increasing"
            )
