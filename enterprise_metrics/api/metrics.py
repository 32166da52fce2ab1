"""Metrics API endpoint for Prometheus scraping."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint, Response, request

from enterprise_metrics.services.container import ServiceContainer
from enterprise_metrics.services.metrics_service import MetricsService

metrics_bp = Blueprint("metrics", __name__, url_prefix="/metrics")


@metrics_bp.route("", methods=["GET"])
@inject
def get_metrics(
    metrics_service: MetricsService = Provide[ServiceContainer.metrics_service],
) -> Any:
    """Return metrics in Prometheus text format.

    Scrapers that accept ``application/openmetrics-text`` get OpenMetrics.
    """
    body, content_type = metrics_service.render(request.headers.get("Accept"))

    return Response(body, content_type=content_type)
