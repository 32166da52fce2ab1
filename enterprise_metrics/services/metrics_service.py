"""Metrics exposition service.

Produces the body served at ``/metrics``. The application registry is always
rendered by its own text writer; when runtime metrics are enabled, the
process/platform/GC collectors of prometheus_client's default registry are
appended. Scrapers asking for OpenMetrics get prometheus_client's OpenMetrics
encoder over a bridge of the same data.
"""

import logging

from prometheus_client import REGISTRY, CollectorRegistry, generate_latest
from prometheus_client.exposition import choose_encoder
from prometheus_client.registry import Collector

from enterprise_metrics.metrics.exposition import CONTENT_TYPE_TEXT, RegistryCollector
from enterprise_metrics.metrics.registry import MetricsRegistry

logger = logging.getLogger(__name__)

OPENMETRICS_MEDIA_TYPE = "application/openmetrics-text"


class _DefaultRegistryCollector(Collector):
    """Re-export whatever prometheus_client's default registry collects."""

    def collect(self):  # type: ignore[no-untyped-def]
        return REGISTRY.collect()


class MetricsService:
    """Serializes the application registry for scraping."""

    def __init__(self, registry: MetricsRegistry, include_runtime: bool = True):
        """Initialize metrics service.

        Args:
            registry: The application metrics registry
            include_runtime: Append prometheus_client's default process metrics
        """
        self.registry = registry
        self.include_runtime = include_runtime

        self._openmetrics_registry = CollectorRegistry(auto_describe=False)
        self._openmetrics_registry.register(RegistryCollector(registry))
        if include_runtime:
            self._openmetrics_registry.register(_DefaultRegistryCollector())

    def get_metrics_text(self) -> str:
        """Generate metrics in Prometheus text format (version 0.0.4)."""
        text = self.registry.render()
        if self.include_runtime:
            text += generate_latest(REGISTRY).decode("utf-8")
        return text

    def get_openmetrics_text(self) -> str:
        """Generate metrics in OpenMetrics text format."""
        encoder, _ = choose_encoder(OPENMETRICS_MEDIA_TYPE)
        return encoder(self._openmetrics_registry).decode("utf-8")

    def render(self, accept_header: str | None) -> tuple[str, str]:
        """Render metrics for a scrape request.

        Args:
            accept_header: The scraper's Accept header, if any

        Returns:
            Tuple of (body, content type)
        """
        _, content_type = choose_encoder(accept_header or "")
        if content_type.startswith(OPENMETRICS_MEDIA_TYPE):
            return self.get_openmetrics_text(), content_type
        return self.get_metrics_text(), CONTENT_TYPE_TEXT
