"""Cache API endpoints."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint
from spectree import Response as SpectreeResponse

from enterprise_metrics.schemas.demo_schema import CacheResponseSchema
from enterprise_metrics.services.container import ServiceContainer
from enterprise_metrics.services.shop_simulation_service import ShopSimulationService
from enterprise_metrics.utils.spectree_config import api

cache_bp = Blueprint("cache", __name__, url_prefix="/cache")


@cache_bp.route("/test", methods=["GET"])
@api.validate(resp=SpectreeResponse(HTTP_200=CacheResponseSchema))
@inject
def cache_test(
    shop_simulation_service: ShopSimulationService = Provide[
        ServiceContainer.shop_simulation_service
    ],
) -> Any:
    """Perform a simulated cache lookup."""
    outcome = shop_simulation_service.lookup_cache()
    return CacheResponseSchema.from_outcome(outcome).model_dump(by_alias=True)
