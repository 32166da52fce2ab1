"""Orders API endpoints."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint
from spectree import Response as SpectreeResponse

from enterprise_metrics.schemas.demo_schema import OrderResponseSchema
from enterprise_metrics.services.container import ServiceContainer
from enterprise_metrics.services.shop_simulation_service import ShopSimulationService
from enterprise_metrics.utils.spectree_config import api

orders_bp = Blueprint("orders", __name__, url_prefix="/orders")


@orders_bp.route("", methods=["POST"])
@api.validate(resp=SpectreeResponse(HTTP_200=OrderResponseSchema))
@inject
def create_order(
    shop_simulation_service: ShopSimulationService = Provide[
        ServiceContainer.shop_simulation_service
    ],
) -> Any:
    """Place a simulated order."""
    outcome = shop_simulation_service.create_order()
    return OrderResponseSchema.from_outcome(outcome).model_dump(by_alias=True)
