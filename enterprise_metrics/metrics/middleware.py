"""Request-tracking middleware.

Every request is timed from ``before_request`` until the WSGI server closes
the response body. Only a body that was iterated to the end counts as sent;
then ``http_requests_total`` and ``http_request_duration_seconds`` are
recorded, labelled by method, route pattern and status code.

A client that disconnects mid-response makes the server stop iterating and
close the body early. Such a request records nothing.
"""

import logging
import time
from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING, Any

from flask import Flask, Response, g, request

if TYPE_CHECKING:
    from enterprise_metrics.metrics.catalog import AppMetrics

logger = logging.getLogger(__name__)

# Set by after_request, consumed when the WSGI body is closed
RECORDER_ENVIRON_KEY = "enterprise_metrics.record_request"


class CompletionTrackingBody:
    """WSGI body wrapper that runs the request recorder only after full iteration."""

    def __init__(self, app_iter: Iterable[bytes], environ: dict[str, Any]):
        self._app_iter = app_iter
        self._environ = environ
        self.completed = False

    def __iter__(self) -> Iterator[bytes]:
        for chunk in self._app_iter:
            yield chunk
        self.completed = True

    def close(self) -> None:
        try:
            close = getattr(self._app_iter, "close", None)
            if close is not None:
                close()
        finally:
            recorder = self._environ.pop(RECORDER_ENVIRON_KEY, None)
            if recorder is not None and self.completed:
                recorder()
            elif recorder is not None:
                logger.debug("Response body not fully sent, request not recorded")


class RequestMetricsMiddleware:
    """Records per-request count and latency into the application metrics."""

    def __init__(self, app_metrics: "AppMetrics"):
        self.app_metrics = app_metrics

    def init_app(self, app: Flask) -> None:
        """Register the request hooks and wrap the WSGI app."""
        app.before_request(self._before_request)
        app.after_request(self._after_request)
        app.wsgi_app = self._wrap_wsgi_app(app.wsgi_app)  # type: ignore[method-assign]

    @staticmethod
    def _wrap_wsgi_app(wsgi_app: Callable[..., Iterable[bytes]]) -> Callable[..., Iterable[bytes]]:
        def tracked_wsgi_app(environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
            return CompletionTrackingBody(wsgi_app(environ, start_response), environ)

        return tracked_wsgi_app

    def _before_request(self) -> None:
        g._request_metrics_start = time.perf_counter()

    def _after_request(self, response: Response) -> Response:
        start = getattr(g, "_request_metrics_start", None)
        if start is None:
            logger.debug("Request finished without a start time, not recording")
            return response

        # Capture labels now; the request context is gone once the body is closed
        method = request.method
        route = self.resolve_route()
        status_code = response.status_code

        def record_request() -> None:
            duration = time.perf_counter() - start
            self.app_metrics.record_http_request(method, route, status_code, duration)

        request.environ[RECORDER_ENVIRON_KEY] = record_request
        return response

    @staticmethod
    def resolve_route() -> str:
        """Return the matched URL rule, or the raw path when nothing matched.

        Using the rule (``/api/items/<int:item_id>``) rather than the path
        keeps label cardinality bounded.
        """
        if request.url_rule is not None:
            return request.url_rule.rule
        return request.path
