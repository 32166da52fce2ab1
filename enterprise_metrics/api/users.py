"""Users API endpoints."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint
from spectree import Response as SpectreeResponse

from enterprise_metrics.schemas.demo_schema import (
    ActiveUsersResponseSchema,
    RegistrationResponseSchema,
)
from enterprise_metrics.services.container import ServiceContainer
from enterprise_metrics.services.shop_simulation_service import ShopSimulationService
from enterprise_metrics.utils.spectree_config import api

users_bp = Blueprint("users", __name__, url_prefix="/users")


@users_bp.route("/register", methods=["POST"])
@api.validate(resp=SpectreeResponse(HTTP_200=RegistrationResponseSchema))
@inject
def register_user(
    shop_simulation_service: ShopSimulationService = Provide[
        ServiceContainer.shop_simulation_service
    ],
) -> Any:
    """Register a simulated user."""
    outcome = shop_simulation_service.register_user()
    return RegistrationResponseSchema.from_outcome(outcome).model_dump(by_alias=True)


@users_bp.route("/active", methods=["GET"])
@api.validate(resp=SpectreeResponse(HTTP_200=ActiveUsersResponseSchema))
@inject
def active_users(
    shop_simulation_service: ShopSimulationService = Provide[
        ServiceContainer.shop_simulation_service
    ],
) -> Any:
    """Sample the current active user counts."""
    users = shop_simulation_service.sample_active_users()
    return ActiveUsersResponseSchema.from_outcome(users).model_dump()
