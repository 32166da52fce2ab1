"""Service index."""

from typing import Any

from flask import Blueprint
from spectree import Response as SpectreeResponse

from enterprise_metrics.consts import API_TITLE
from enterprise_metrics.schemas.service_schema import ServiceInfoSchema
from enterprise_metrics.utils.spectree_config import api

root_bp = Blueprint("root", __name__)

DEMO_ENDPOINTS = [
    "POST /api/orders",
    "POST /api/users/register",
    "GET /api/users/active",
    "GET /api/cache/test",
    "GET /api/database/query",
    "GET /api/error",
    "GET /metrics",
    "GET /health",
]


@root_bp.route("/", methods=["GET"])
@api.validate(resp=SpectreeResponse(HTTP_200=ServiceInfoSchema))
def index() -> Any:
    """List the demo endpoints."""
    return ServiceInfoSchema(
        message=f"{API_TITLE} - visit /metrics for Prometheus metrics",
        endpoints=DEMO_ENDPOINTS,
    ).model_dump()
