"""Tests for the metrics registry."""

import math
import threading

import pytest

from enterprise_metrics.exceptions import (
    DuplicateMetricError,
    InvalidDefinitionError,
    InvalidObservationError,
    LabelCardinalityError,
    UnknownMetricError,
)
from enterprise_metrics.metrics.registry import (
    DEFAULT_BUCKETS,
    CounterSeries,
    GaugeSeries,
    HistogramSeries,
    Metric,
    MetricKind,
    MetricsRegistry,
    Series,
)


class TestDefinition:
    """Defining metrics."""

    def test_define_registers_metric(self):
        """A defined metric is retrievable by name with its label names."""
        registry = MetricsRegistry()

        metric = registry.define("jobs_total", MetricKind.COUNTER, "Jobs", ["queue"])

        assert "jobs_total" in registry
        assert registry.get("jobs_total") is metric
        assert metric.label_names == ("queue",)

    def test_duplicate_definition_leaves_registry_unchanged(self):
        """Redefining a name raises and keeps the original metric and its values."""
        registry = MetricsRegistry()
        original = registry.counter("orders_total", "Orders", ["status"])
        original.labels("completed").inc()
        before = registry.render()

        with pytest.raises(DuplicateMetricError):
            registry.gauge("orders_total", "Something else", ["other"])

        assert len(registry) == 1
        assert registry.get("orders_total") is original
        assert registry.render() == before

    def test_duplicate_across_kinds_is_rejected(self):
        """A name is unique across metric kinds."""
        registry = MetricsRegistry()
        registry.histogram("latency_seconds", "Latency")

        with pytest.raises(DuplicateMetricError):
            registry.counter("latency_seconds", "Latency")

    @pytest.mark.parametrize(
        "buckets",
        [[], [0.5, 0.1], [0.1, 0.1], [0.1, float("nan")]],
    )
    def test_invalid_histogram_buckets(self, buckets):
        """Empty, unordered, repeated or NaN bounds are rejected and nothing is registered."""
        registry = MetricsRegistry()

        with pytest.raises(InvalidDefinitionError):
            registry.histogram("latency_seconds", "Latency", buckets=buckets)

        assert "latency_seconds" not in registry

    def test_trailing_inf_bucket_is_implicit(self):
        """A spelled-out +Inf bound is dropped from the stored buckets."""
        registry = MetricsRegistry()

        metric = registry.histogram("latency_seconds", "Latency", buckets=[0.1, 1, math.inf])

        assert metric.buckets == (0.1, 1.0)

    @pytest.mark.parametrize("name", ["", "1starts_with_digit", "has-dash", "has space"])
    def test_invalid_metric_name(self, name):
        """Names outside the Prometheus name grammar are rejected."""
        with pytest.raises(InvalidDefinitionError):
            MetricsRegistry().counter(name, "Bad name")

    @pytest.mark.parametrize("labels", [["bad-label"], ["__reserved"], ["dup", "dup"]])
    def test_invalid_label_names(self, labels):
        """Malformed, reserved and duplicate label names are rejected."""
        with pytest.raises(InvalidDefinitionError):
            MetricsRegistry().counter("things_total", "Things", labels)

    def test_le_label_reserved_for_histograms(self):
        """Histograms cannot declare an le label; other kinds can."""
        registry = MetricsRegistry()

        with pytest.raises(InvalidDefinitionError):
            registry.histogram("latency_seconds", "Latency", ["le"])

        # Other kinds may use it
        registry.gauge("threshold", "Threshold", ["le"])

    def test_buckets_rejected_for_counters(self):
        """Only histograms accept bucket bounds."""
        with pytest.raises(InvalidDefinitionError):
            MetricsRegistry().define("jobs_total", MetricKind.COUNTER, "Jobs", buckets=[1, 2])

    @pytest.mark.parametrize("kind", ["summary", "info", ""])
    def test_unknown_kind_is_invalid_definition(self, kind):
        """An unknown kind is a definition error and registers nothing."""
        registry = MetricsRegistry()

        with pytest.raises(InvalidDefinitionError) as exc_info:
            registry.define("latency_seconds", kind, "Latency")

        assert exc_info.value.name == "latency_seconds"
        assert "unknown metric kind" in exc_info.value.cause
        assert "latency_seconds" not in registry
        assert len(registry) == 0

    def test_kind_accepts_its_string_value(self):
        """A kind given by its string value is coerced to MetricKind."""
        metric = MetricsRegistry().define("queue_size", "gauge", "Queue")

        assert metric.kind is MetricKind.GAUGE

    def test_get_unknown_metric(self):
        """Looking up an undefined metric raises UnknownMetricError."""
        with pytest.raises(UnknownMetricError):
            MetricsRegistry().get("missing")


class TestSeries:
    """Resolving and updating series."""

    def test_get_or_create_series_is_idempotent(self):
        """Resolving the same label values twice returns the same series."""
        registry = MetricsRegistry()
        registry.counter("orders_total", "Orders", ["status", "payment_method"])

        first = registry.get_or_create_series("orders_total", ["completed", "paypal"])
        second = registry.get_or_create_series("orders_total", ["completed", "paypal"])

        assert first is second
        assert len(registry.get("orders_total").series()) == 1

    def test_series_types_follow_kind(self):
        """Each metric kind produces its own series type."""
        registry = MetricsRegistry()

        assert isinstance(registry.counter("a_total", "A").labels(), CounterSeries)
        assert isinstance(registry.gauge("b", "B").labels(), GaugeSeries)
        assert isinstance(registry.histogram("c", "C").labels(), HistogramSeries)

    def test_series_base_is_abstract(self):
        """The Series base cannot be instantiated without a snapshot()."""
        with pytest.raises(TypeError):
            Series("orders_total", ())

    def test_histogram_without_buckets_uses_defaults(self):
        """A histogram Metric built directly without buckets gets the default bounds."""
        metric = Metric("latency_seconds", MetricKind.HISTOGRAM, "Latency")

        assert metric.labels().snapshot().bounds == DEFAULT_BUCKETS

    def test_new_series_is_zero_initialized(self):
        """A freshly created series starts at zero."""
        registry = MetricsRegistry()
        metric = registry.counter("orders_total", "Orders", ["status"])

        assert metric.labels("pending").value == 0

    @pytest.mark.parametrize("values", [[], ["only_one"], ["a", "b", "c"]])
    def test_cardinality_mismatch_creates_nothing(self, values):
        """The wrong number of label values raises without creating a series."""
        registry = MetricsRegistry()
        metric = registry.counter("orders_total", "Orders", ["status", "payment_method"])

        with pytest.raises(LabelCardinalityError):
            registry.get_or_create_series("orders_total", values)

        assert metric.series() == []

    def test_keyword_labels(self):
        """Keyword label values resolve to the same series as positional ones."""
        registry = MetricsRegistry()
        metric = registry.counter("orders_total", "Orders", ["status", "payment_method"])

        by_keyword = metric.labels(payment_method="paypal", status="completed")

        assert by_keyword is metric.labels("completed", "paypal")

    def test_keyword_labels_must_name_every_label(self):
        """Partial keyword label values are rejected."""
        registry = MetricsRegistry()
        metric = registry.counter("orders_total", "Orders", ["status", "payment_method"])

        with pytest.raises(LabelCardinalityError):
            metric.labels(status="completed")

    def test_none_label_value_is_empty_string(self):
        """None is stored as the empty label value."""
        registry = MetricsRegistry()
        metric = registry.counter("orders_total", "Orders", ["status"])

        assert metric.labels(None) is metric.labels("")

    def test_fallback_pads_missing_values(self):
        """Missing values are padded with empty strings."""
        registry = MetricsRegistry()
        metric = registry.counter("orders_total", "Orders", ["status", "payment_method"])

        series = metric.labels_or_fallback("completed")

        assert series.label_values == ("completed", "")

    def test_fallback_truncates_extra_values(self):
        """Surplus values are dropped."""
        registry = MetricsRegistry()
        metric = registry.counter("orders_total", "Orders", ["status"])

        series = metric.labels_or_fallback("completed", "extra")

        assert series.label_values == ("completed",)

    def test_counter_rejects_negative_increment(self):
        """A negative increment raises and leaves the counter unchanged."""
        registry = MetricsRegistry()
        series = registry.counter("orders_total", "Orders").labels()
        series.inc(2)

        with pytest.raises(InvalidObservationError):
            series.inc(-1)

        assert series.value == 2

    def test_gauge_set_inc_dec(self):
        """Gauges support set, inc and dec."""
        registry = MetricsRegistry()
        series = registry.gauge("queue_size", "Queue").labels()

        series.set(10)
        series.inc(5)
        series.dec(7)

        assert series.value == 8

    def test_histogram_observe_fills_buckets(self):
        """Observations land in the first bucket whose bound is not below them."""
        registry = MetricsRegistry()
        series = registry.histogram("latency_seconds", "Latency", buckets=[0.1, 0.5, 1]).labels()

        for value in (0.05, 0.1, 0.3, 0.7, 3.0):
            series.observe(value)

        snapshot = series.snapshot()
        assert snapshot.cumulative_counts == (2, 3, 4)
        assert snapshot.count == 5
        assert snapshot.sum == pytest.approx(4.15)
        assert snapshot.buckets()[-1] == (math.inf, 5)

    def test_histogram_timer_records_once(self):
        """Stopping a timer twice records a single observation."""
        registry = MetricsRegistry()
        series = registry.histogram("latency_seconds", "Latency").labels()

        stop = series.start_timer()
        first = stop()
        second = stop()

        assert first == second
        assert series.snapshot().count == 1

    def test_histogram_time_block(self):
        """The time() block records one observation."""
        registry = MetricsRegistry()
        series = registry.histogram("latency_seconds", "Latency").labels()

        with series.time():
            pass

        assert series.snapshot().count == 1

    def test_unfinished_timer_records_nothing(self):
        """A timer that is never stopped records nothing."""
        registry = MetricsRegistry()
        series = registry.histogram("latency_seconds", "Latency").labels()

        series.start_timer()

        assert series.snapshot().count == 0


class TestProperties:
    """Invariants that hold across any sequence of updates."""

    def test_counter_never_decreases_between_renders(self):
        """Counter values read between renders never go down."""
        registry = MetricsRegistry()
        series = registry.counter("events_total", "Events").labels()
        seen = []

        for amount in (0, 1, 0.5, 0, 3):
            series.inc(amount)
            seen.append(series.value)
            registry.render()

        assert seen == sorted(seen)

    def test_cumulative_buckets_are_monotone(self):
        """Cumulative bucket counts are non-decreasing and end at the total count."""
        registry = MetricsRegistry()
        series = registry.histogram(
            "latency_seconds", "Latency", buckets=[0.01, 0.05, 0.1, 0.5, 1, 2]
        ).labels()

        for i in range(200):
            series.observe((i * 37 % 250) / 100)

        counts = [count for _, count in series.snapshot().buckets()]
        assert counts == sorted(counts)
        assert counts[-1] == 200

    def test_render_is_deterministic(self):
        """Rendering twice without updates gives identical output."""
        registry = MetricsRegistry()
        registry.counter("orders_total", "Orders", ["status"]).labels("completed").inc()
        registry.histogram("latency_seconds", "Latency").labels().observe(0.2)

        assert registry.render() == registry.render()


class TestConcurrency:
    """Thread-safety of series creation and updates."""

    def test_concurrent_first_creation_yields_one_series(self):
        """Racing first lookups of one label set share a single series."""
        registry = MetricsRegistry()
        metric = registry.counter("orders_total", "Orders", ["status", "payment_method"])
        barrier = threading.Barrier(16)
        handles = []
        handles_lock = threading.Lock()

        def worker():
            barrier.wait()
            series = registry.get_or_create_series("orders_total", ["completed", "paypal"])
            series.inc()
            with handles_lock:
                handles.append(series)

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert len(metric.series()) == 1
        assert all(handle is handles[0] for handle in handles)
        assert handles[0].value == 16

    def test_concurrent_observations_keep_sum_and_count_consistent(self):
        """Concurrent observations lose no updates."""
        registry = MetricsRegistry()
        series = registry.histogram("latency_seconds", "Latency", buckets=[1]).labels()

        def worker():
            for _ in range(1000):
                series.observe(1.0)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        snapshot = series.snapshot()
        assert snapshot.count == 8000
        assert snapshot.sum == 8000.0
        assert snapshot.cumulative_counts == (8000,)
