"""Demo API schemas."""

from pydantic import BaseModel, ConfigDict, Field

from enterprise_metrics.services.shop_simulation_service import (
    ActiveUsers,
    CacheLookupOutcome,
    OrderOutcome,
    QueryOutcome,
    RegistrationOutcome,
    SimulatedError,
)
from enterprise_metrics.utils import format_timestamp


class OrderResponseSchema(BaseModel):
    """Schema for a simulated order."""

    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(..., alias="orderId", description="Random order identifier")
    status: str = Field(..., description="Order status")
    payment: str = Field(..., description="Payment method")
    category: str = Field(..., description="Product category")
    amount: int = Field(..., description="Order amount in dollars")

    @classmethod
    def from_outcome(cls, outcome: OrderOutcome) -> "OrderResponseSchema":
        return cls(
            order_id=outcome.order_id,
            status=outcome.status,
            payment=outcome.payment_method,
            category=outcome.category,
            amount=outcome.amount,
        )


class RegistrationResponseSchema(BaseModel):
    """Schema for a simulated user registration."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", description="Random user identifier")
    method: str = Field(..., description="Registration method")
    timestamp: str = Field(..., description="ISO-8601 registration time")

    @classmethod
    def from_outcome(cls, outcome: RegistrationOutcome) -> "RegistrationResponseSchema":
        return cls(
            user_id=outcome.user_id,
            method=outcome.method,
            timestamp=format_timestamp(outcome.timestamp),
        )


class ActiveUsersResponseSchema(BaseModel):
    """Schema for the sampled active user counts."""

    premium: int
    free: int
    total: int

    @classmethod
    def from_outcome(cls, users: ActiveUsers) -> "ActiveUsersResponseSchema":
        return cls(premium=users.premium, free=users.free, total=users.total)


class CacheResponseSchema(BaseModel):
    """Schema for a simulated cache lookup."""

    model_config = ConfigDict(populate_by_name=True)

    cache_type: str = Field(..., alias="cacheType", description="Cache backend")
    hit: bool = Field(..., description="Whether the lookup was a hit")

    @classmethod
    def from_outcome(cls, outcome: CacheLookupOutcome) -> "CacheResponseSchema":
        return cls(cache_type=outcome.cache_type, hit=outcome.hit)


class DatabaseQueryResponseSchema(BaseModel):
    """Schema for a simulated database query."""

    model_config = ConfigDict(populate_by_name=True)

    query_type: str = Field(..., alias="queryType", description="SQL statement kind")
    table: str
    duration: str = Field(..., description="Simulated duration in seconds, 3 decimals")

    @classmethod
    def from_outcome(cls, outcome: QueryOutcome) -> "DatabaseQueryResponseSchema":
        return cls(
            query_type=outcome.query_type,
            table=outcome.table,
            duration=f"{outcome.duration:.3f}",
        )


class SimulatedErrorResponseSchema(BaseModel):
    """Schema for a simulated application error."""

    error: str = Field(..., description="Error type")
    severity: str

    @classmethod
    def from_outcome(cls, error: SimulatedError) -> "SimulatedErrorResponseSchema":
        return cls(error=error.error_type, severity=error.severity)
