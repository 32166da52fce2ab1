"""Flask application factory."""

from typing import TYPE_CHECKING

from flask_cors import CORS

from enterprise_metrics.app import App

if TYPE_CHECKING:
    from enterprise_metrics.config import Settings


def create_app(settings: "Settings | None" = None, skip_background_services: bool = False) -> App:
    """Create and configure the Flask application.

    Args:
        settings: Optional settings instance (loaded from the environment if not provided)
        skip_background_services: Skip starting the background updater (for CLI/tests)

    Returns:
        Configured Flask application instance
    """
    app = App(__name__)

    # Load configuration
    if settings is None:
        from enterprise_metrics.config import Settings

        settings = Settings.load()

    # Validate configuration before proceeding
    settings.validate_config()

    app.config.from_object(settings.to_flask_config())

    # Initialize SpecTree for OpenAPI docs; must precede any API module import
    from enterprise_metrics.utils.spectree_config import configure_spectree

    configure_spectree(app)

    # Initialize service container
    from enterprise_metrics.services.container import ServiceContainer

    container = ServiceContainer()
    container.config.override(settings)

    # Wire container to all API modules via package scanning
    container.wire(packages=["enterprise_metrics.api"])

    app.container = container

    # Configure CORS
    CORS(app, origins=settings.cors_origins)

    # Initialize correlation ID tracking
    from enterprise_metrics.utils import _init_request_id

    _init_request_id(app)

    # Register error handlers
    from enterprise_metrics.utils.flask_error_handlers import register_core_error_handlers

    register_core_error_handlers(app)

    # Define every metric up front so definition errors fail startup
    container.app_metrics()
    container.lifecycle_coordinator()
    container.metrics_service()

    # Request tracking covers every route, including /metrics and /health
    container.request_metrics().init_app(app)

    # Register blueprints
    from enterprise_metrics.api import api_bp
    from enterprise_metrics.api.health import health_bp
    from enterprise_metrics.api.metrics import metrics_bp
    from enterprise_metrics.api.root import root_bp

    app.register_blueprint(root_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(metrics_bp)
    app.register_blueprint(api_bp)

    # Start background services only when not in CLI mode
    if not skip_background_services:
        from enterprise_metrics.services.container import start_background_services

        start_background_services(container)

        # Signal that application startup is complete
        container.lifecycle_coordinator().fire_startup()

    return app
