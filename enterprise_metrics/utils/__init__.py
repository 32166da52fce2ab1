"""Utility functions and helpers."""

import uuid
from datetime import UTC, datetime

from flask import Flask, g, has_request_context, request


def get_current_correlation_id() -> str | None:
    """Get the current request's correlation ID."""
    if not has_request_context():
        return None
    return getattr(g, "correlation_id", None)


def _init_request_id(app: Flask) -> None:
    """Register before_request handler to set correlation ID from X-Request-ID header."""

    @app.before_request
    def set_request_id() -> None:
        g.correlation_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(UTC)


def format_timestamp(value: datetime) -> str:
    """Format a datetime as ISO-8601 with millisecond precision and a Z suffix."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
