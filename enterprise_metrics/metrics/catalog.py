"""Application metric catalog.

Every metric the service exposes is defined here, once, when the container
builds ``AppMetrics``. Definition errors therefore surface at startup.

The ``record_*`` helpers are what request handlers and background jobs call.
They never raise: a failure is logged and the caller carries on, because
metrics must not break request handling.
"""

import logging
from collections.abc import Callable

from enterprise_metrics.metrics.registry import MetricsRegistry

logger = logging.getLogger(__name__)

HTTP_LABELS = ("method", "route", "status_code")
HTTP_DURATION_BUCKETS = (0.1, 0.5, 1, 2, 5)
DATABASE_QUERY_BUCKETS = (0.01, 0.05, 0.1, 0.5, 1, 2)


def _noop() -> float:
    return 0.0


class AppMetrics:
    """Owns the service's HTTP, business and infrastructure metrics."""

    def __init__(self, registry: MetricsRegistry):
        self.registry = registry

        # HTTP request tracking
        self.http_request_duration_seconds = registry.histogram(
            "http_request_duration_seconds",
            "Duration of HTTP requests in seconds",
            HTTP_LABELS,
            buckets=HTTP_DURATION_BUCKETS,
        )
        self.http_requests_total = registry.counter(
            "http_requests_total",
            "Total number of HTTP requests",
            HTTP_LABELS,
        )

        # Business metrics
        self.orders_total = registry.counter(
            "orders_total",
            "Total number of orders processed",
            ["status", "payment_method"],
        )
        self.revenue_total_dollars = registry.counter(
            "revenue_total_dollars",
            "Total revenue in dollars",
            ["product_category"],
        )
        self.active_users_current = registry.gauge(
            "active_users_current",
            "Current number of active users",
            ["user_type"],
        )
        self.user_registrations_total = registry.counter(
            "user_registrations_total",
            "Total number of user registrations",
            ["registration_method"],
        )

        # Technical metrics
        self.database_query_duration_seconds = registry.histogram(
            "database_query_duration_seconds",
            "Duration of database queries in seconds",
            ["query_type", "table"],
            buckets=DATABASE_QUERY_BUCKETS,
        )
        self.cache_hits_total = registry.counter(
            "cache_hits_total",
            "Total number of cache hits",
            ["cache_type"],
        )
        self.cache_misses_total = registry.counter(
            "cache_misses_total",
            "Total number of cache misses",
            ["cache_type"],
        )
        self.application_errors_total = registry.counter(
            "application_errors_total",
            "Total number of application errors",
            ["error_type", "severity"],
        )
        self.active_connections_current = registry.gauge(
            "active_connections_current",
            "Current number of active connections",
            ["connection_type"],
        )
        self.queue_size_current = registry.gauge(
            "queue_size_current",
            "Current size of processing queues",
            ["queue_name"],
        )

    def record_http_request(
        self, method: str, route: str, status_code: int | str, duration: float
    ) -> None:
        """Record one completed HTTP request."""
        try:
            labels = (method, route, str(status_code))
            self.http_requests_total.labels_or_fallback(*labels).inc()
            self.http_request_duration_seconds.labels_or_fallback(*labels).observe(
                max(duration, 0.0)
            )
        except Exception as e:
            logger.error(f"Error recording HTTP request metric: {e}")

    def record_order(
        self, status: str, payment_method: str, product_category: str, amount: float
    ) -> None:
        try:
            self.orders_total.labels_or_fallback(status, payment_method).inc()
            self.revenue_total_dollars.labels_or_fallback(product_category).inc(amount)
        except Exception as e:
            logger.error(f"Error recording order metric: {e}")

    def record_registration(self, registration_method: str) -> None:
        try:
            self.user_registrations_total.labels_or_fallback(registration_method).inc()
        except Exception as e:
            logger.error(f"Error recording registration metric: {e}")

    def set_active_users(self, premium: int, free: int) -> None:
        try:
            self.active_users_current.labels_or_fallback("premium").set(premium)
            self.active_users_current.labels_or_fallback("free").set(free)
        except Exception as e:
            logger.error(f"Error setting active users metric: {e}")

    def record_cache_lookup(self, cache_type: str, hit: bool) -> None:
        try:
            metric = self.cache_hits_total if hit else self.cache_misses_total
            metric.labels_or_fallback(cache_type).inc()
        except Exception as e:
            logger.error(f"Error recording cache metric: {e}")

    def start_database_query_timer(
        self, query_type: str, table: str
    ) -> Callable[[], float]:
        """Start a query timer; call the result to record the observation."""
        try:
            series = self.database_query_duration_seconds.labels_or_fallback(
                query_type, table
            )
            return series.start_timer()  # type: ignore[attr-defined]
        except Exception as e:
            logger.error(f"Error starting database query timer: {e}")
            return _noop

    def record_application_error(self, error_type: str, severity: str) -> None:
        try:
            self.application_errors_total.labels_or_fallback(error_type, severity).inc()
        except Exception as e:
            logger.error(f"Error recording application error metric: {e}")

    def set_active_connections(self, connection_type: str, value: int) -> None:
        try:
            self.active_connections_current.labels_or_fallback(connection_type).set(value)
        except Exception as e:
            logger.error(f"Error setting active connections metric: {e}")

    def set_queue_size(self, queue_name: str, value: int) -> None:
        try:
            self.queue_size_current.labels_or_fallback(queue_name).set(value)
        except Exception as e:
            logger.error(f"Error setting queue size metric: {e}")
