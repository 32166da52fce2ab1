"""Background activity simulation.

Models metrics that change without any inbound request: connection counts and
queue depths drift on their own, and now and then an error happens. The
metrics update coordinator calls ``update_metrics()`` on a fixed interval.
"""

import logging

from enterprise_metrics.metrics.catalog import AppMetrics
from enterprise_metrics.utils.data_source import DataSourceProtocol

logger = logging.getLogger(__name__)

CONNECTION_RANGES = {
    "http": (20, 119),
    "database": (10, 59),
}
QUEUE_RANGES = {
    "email": (0, 999),
    "processing": (0, 499),
}
BACKGROUND_ERROR_TYPES = ("validation", "database", "network")
BACKGROUND_SEVERITIES = ("low", "medium", "high")


class BackgroundActivityService:
    """Refreshes infrastructure gauges and injects occasional errors."""

    def __init__(
        self,
        app_metrics: AppMetrics,
        data_source: DataSourceProtocol,
        error_probability: float,
    ):
        self.app_metrics = app_metrics
        self.data_source = data_source
        self.error_probability = error_probability

    def update_metrics(self) -> None:
        """Run one background tick."""
        for connection_type, (low, high) in CONNECTION_RANGES.items():
            self.app_metrics.set_active_connections(
                connection_type, self.data_source.randint(low, high)
            )

        for queue_name, (low, high) in QUEUE_RANGES.items():
            self.app_metrics.set_queue_size(
                queue_name, self.data_source.randint(low, high)
            )

        if self.data_source.random() < self.error_probability:
            error_type = self.data_source.choice(BACKGROUND_ERROR_TYPES)
            severity = self.data_source.choice(BACKGROUND_SEVERITIES)
            self.app_metrics.record_application_error(error_type, severity)
            logger.info(
                "Simulated background error",
                extra={"error_type": error_type, "severity": severity},
            )
