"""Simulated error endpoint."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint
from spectree import Response as SpectreeResponse

from enterprise_metrics.schemas.demo_schema import SimulatedErrorResponseSchema
from enterprise_metrics.services.container import ServiceContainer
from enterprise_metrics.services.shop_simulation_service import ShopSimulationService
from enterprise_metrics.utils.spectree_config import api

errors_bp = Blueprint("errors", __name__, url_prefix="/error")


@errors_bp.route("", methods=["GET"])
@api.validate(resp=SpectreeResponse(HTTP_500=SimulatedErrorResponseSchema))
@inject
def simulate_error(
    shop_simulation_service: ShopSimulationService = Provide[
        ServiceContainer.shop_simulation_service
    ],
) -> Any:
    """Record a simulated application error and answer with HTTP 500."""
    error = shop_simulation_service.simulate_error()
    return SimulatedErrorResponseSchema.from_outcome(error).model_dump(), 500
