"""Tests for JSON error handling and correlation IDs."""

import pytest

from enterprise_metrics.utils import get_current_correlation_id


class TestErrorHandlers:
    def test_not_found_is_json(self, client):
        response = client.get("/no/such/page")

        assert response.status_code == 404
        assert response.is_json
        assert "error" in response.json
        assert response.json["correlationId"]

    def test_method_not_allowed_is_json(self, client):
        response = client.delete("/api/orders")

        assert response.status_code == 405
        assert response.is_json

    def test_unhandled_exception_is_500_without_details(self, app, client):
        @app.route("/explode")
        def explode():
            raise RuntimeError("secret internals")

        response = client.get("/explode")

        assert response.status_code == 500
        assert response.json["error"] == "Internal server error"
        assert "secret internals" not in response.get_data(as_text=True)


class TestCorrelationId:
    def test_request_id_header_is_adopted(self, client):
        response = client.get("/missing", headers={"X-Request-ID": "req-123"})

        assert response.json["correlationId"] == "req-123"

    def test_correlation_id_generated_when_absent(self, client):
        first = client.get("/missing").json["correlationId"]
        second = client.get("/missing").json["correlationId"]

        assert first and second and first != second

    @pytest.mark.parametrize("header", [None, "abc"])
    def test_correlation_id_visible_inside_request(self, app, header):
        captured = []

        @app.route("/capture")
        def capture():
            captured.append(get_current_correlation_id())
            return {}

        headers = {"X-Request-ID": header} if header else {}
        app.test_client().get("/capture", headers=headers)

        assert captured[0]
        if header:
            assert captured[0] == header

    def test_no_correlation_id_outside_request(self):
        assert get_current_correlation_id() is None
