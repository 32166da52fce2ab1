"""Database API endpoints."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint
from spectree import Response as SpectreeResponse

from enterprise_metrics.schemas.demo_schema import DatabaseQueryResponseSchema
from enterprise_metrics.services.container import ServiceContainer
from enterprise_metrics.services.shop_simulation_service import ShopSimulationService
from enterprise_metrics.utils.spectree_config import api

database_bp = Blueprint("database", __name__, url_prefix="/database")


@database_bp.route("/query", methods=["GET"])
@api.validate(resp=SpectreeResponse(HTTP_200=DatabaseQueryResponseSchema))
@inject
def database_query(
    shop_simulation_service: ShopSimulationService = Provide[
        ServiceContainer.shop_simulation_service
    ],
) -> Any:
    """Run a simulated, timed database query."""
    outcome = shop_simulation_service.run_database_query()
    return DatabaseQueryResponseSchema.from_outcome(outcome).model_dump(by_alias=True)
