"""Health check endpoints."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint
from spectree import Response as SpectreeResponse

from enterprise_metrics.schemas.service_schema import (
    HealthResponseSchema,
    ReadinessResponseSchema,
)
from enterprise_metrics.services.container import ServiceContainer
from enterprise_metrics.utils import format_timestamp, utc_now
from enterprise_metrics.utils.lifecycle_coordinator import LifecycleCoordinatorProtocol
from enterprise_metrics.utils.spectree_config import api

health_bp = Blueprint("health", __name__, url_prefix="/health")


@health_bp.route("", methods=["GET"])
@api.validate(resp=SpectreeResponse(HTTP_200=HealthResponseSchema))
def health() -> Any:
    """Liveness check."""
    return HealthResponseSchema(
        status="healthy",
        timestamp=format_timestamp(utc_now()),
    ).model_dump()


@health_bp.route("/readyz", methods=["GET"])
@api.validate(
    resp=SpectreeResponse(
        HTTP_200=ReadinessResponseSchema,
        HTTP_503=ReadinessResponseSchema,
    )
)
@inject
def readyz(
    lifecycle_coordinator: LifecycleCoordinatorProtocol = Provide[
        ServiceContainer.lifecycle_coordinator
    ],
) -> Any:
    """Readiness check; fails once shutdown has started."""
    if lifecycle_coordinator.is_shutting_down():
        return ReadinessResponseSchema(status="shutting down", ready=False).model_dump(), 503

    return ReadinessResponseSchema(status="ready", ready=True).model_dump()
