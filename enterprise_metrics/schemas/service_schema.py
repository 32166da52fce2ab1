"""Schemas for the service's own endpoints."""

from pydantic import BaseModel, Field


class ServiceInfoSchema(BaseModel):
    """Schema for the root endpoint."""

    message: str
    endpoints: list[str] = Field(..., description="Demo endpoints worth calling")


class HealthResponseSchema(BaseModel):
    """Schema for the liveness check."""

    status: str = Field(..., description="Always 'healthy' while the process serves")
    timestamp: str = Field(..., description="ISO-8601 time of the check")


class ReadinessResponseSchema(BaseModel):
    """Schema for the readiness check."""

    status: str = Field(..., description="'ready' or 'shutting down'")
    ready: bool
