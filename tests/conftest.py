"""Pytest fixtures for the metrics service tests.

Every ``app`` fixture builds a fresh container, and with it a fresh metrics
registry, so tests never see each other's counts. Background services are
not started; tests drive the updater directly.
"""

from collections.abc import Generator

import pytest
from dependency_injector import providers
from flask import Flask
from flask.testing import FlaskClient

from enterprise_metrics import create_app
from enterprise_metrics.config import Settings
from enterprise_metrics.metrics.registry import MetricsRegistry
from enterprise_metrics.services.container import ServiceContainer
from tests.testing_utils import ScriptedDataSource


def _build_test_settings() -> Settings:
    """Construct base Settings object for tests."""
    return Settings(
        flask_env="testing",
        debug=False,
        host="127.0.0.1",
        port=3000,
        cors_origins=["http://localhost:3001"],
        graceful_shutdown_timeout=5,
        metrics_include_runtime=False,
        background_activity_interval=60,
        cache_hit_probability=0.7,
        background_error_probability=0.2,
        database_query_max_delay=0.5,
        random_seed=1234,
    )


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return _build_test_settings()


@pytest.fixture
def data_source() -> ScriptedDataSource:
    """Scripted randomness; tests queue the values they want drawn."""
    return ScriptedDataSource()


@pytest.fixture
def sleeps() -> list[float]:
    """Delays requested by the simulated database, in call order."""
    return []


@pytest.fixture
def app(
    test_settings: Settings, data_source: ScriptedDataSource, sleeps: list[float]
) -> Generator[Flask, None, None]:
    """Create Flask app with scripted randomness and no real sleeping."""
    app = create_app(test_settings, skip_background_services=True)

    app.container.data_source.override(providers.Object(data_source))
    app.container.sleeper.override(providers.Object(sleeps.append))

    yield app

    app.container.unwire()


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Create test client."""
    return app.test_client()


@pytest.fixture
def container(app: Flask) -> ServiceContainer:
    """Access to the DI container for testing with proper app context."""
    return app.container  # type: ignore[attr-defined]


@pytest.fixture
def registry(container: ServiceContainer) -> MetricsRegistry:
    """The app's metrics registry."""
    return container.metrics_registry()
