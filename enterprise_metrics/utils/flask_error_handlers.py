"""JSON error handlers.

Every failure leaves the service as a JSON body carrying ``error`` and the
request's ``correlationId``, never as an HTML error page.
"""

import logging
from typing import Any

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from enterprise_metrics.utils import get_current_correlation_id

logger = logging.getLogger(__name__)


def _error_body(message: str) -> dict[str, Any]:
    body: dict[str, Any] = {"error": message}
    body["correlationId"] = get_current_correlation_id()
    return body


def register_core_error_handlers(app: Flask) -> None:
    """Register handlers for HTTP errors and unexpected exceptions."""

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException) -> Any:
        return jsonify(_error_body(error.description or error.name)), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_exception(error: Exception) -> Any:
        logger.error("Unhandled exception: %s", error, exc_info=True)
        return jsonify(_error_body("Internal server error")), 500

