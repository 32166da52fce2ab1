"""Dependency injection container for services."""

import logging
import time

from dependency_injector import containers, providers

from enterprise_metrics.config import Settings
from enterprise_metrics.metrics.catalog import AppMetrics
from enterprise_metrics.metrics.coordinator import MetricsUpdateCoordinator
from enterprise_metrics.metrics.middleware import RequestMetricsMiddleware
from enterprise_metrics.metrics.registry import MetricsRegistry
from enterprise_metrics.services.background_activity_service import (
    BackgroundActivityService,
)
from enterprise_metrics.services.metrics_service import MetricsService
from enterprise_metrics.services.shop_simulation_service import ShopSimulationService
from enterprise_metrics.utils.data_source import RandomDataSource
from enterprise_metrics.utils.lifecycle_coordinator import LifecycleCoordinator

logger = logging.getLogger(__name__)


class ServiceContainer(containers.DeclarativeContainer):
    """Container for service dependency injection."""

    # Configuration - must be overridden by create_app()
    config = providers.Dependency(instance_of=Settings)

    # One registry per container; tests get a fresh one with every app
    metrics_registry = providers.Singleton(MetricsRegistry)

    lifecycle_coordinator = providers.Singleton(
        LifecycleCoordinator,
        graceful_shutdown_timeout=config.provided.graceful_shutdown_timeout,
        registry=metrics_registry,
    )

    app_metrics = providers.Singleton(AppMetrics, registry=metrics_registry)

    metrics_service = providers.Singleton(
        MetricsService,
        registry=metrics_registry,
        include_runtime=config.provided.metrics_include_runtime,
    )

    metrics_coordinator = providers.Singleton(
        MetricsUpdateCoordinator,
        lifecycle_coordinator=lifecycle_coordinator,
    )

    request_metrics = providers.Singleton(
        RequestMetricsMiddleware,
        app_metrics=app_metrics,
    )

    # Randomness and delays are overridable so tests can script outcomes
    data_source = providers.Singleton(
        RandomDataSource,
        seed=config.provided.random_seed,
    )
    sleeper = providers.Object(time.sleep)

    shop_simulation_service = providers.Singleton(
        ShopSimulationService,
        app_metrics=app_metrics,
        data_source=data_source,
        cache_hit_probability=config.provided.cache_hit_probability,
        database_query_max_delay=config.provided.database_query_max_delay,
        sleeper=sleeper,
    )

    background_activity_service = providers.Singleton(
        BackgroundActivityService,
        app_metrics=app_metrics,
        data_source=data_source,
        error_probability=config.provided.background_error_probability,
    )


def start_background_services(container: ServiceContainer) -> None:
    """Eagerly build background services and start the periodic updater."""
    settings = container.config()

    background_activity_service = container.background_activity_service()
    metrics_coordinator = container.metrics_coordinator()
    metrics_coordinator.register_updater(background_activity_service.update_metrics)
    metrics_coordinator.start(settings.background_activity_interval)

    logger.info("Background services started")
