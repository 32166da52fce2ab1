"""Configuration management using Pydantic settings.

Two-layer configuration system:
1. Environment: Loads raw values from environment variables (UPPER_CASE)
2. Settings: Clean application settings with lowercase fields and derived values
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from enterprise_metrics.consts import (
    DEFAULT_BACKGROUND_ACTIVITY_INTERVAL,
    DEFAULT_BACKGROUND_ERROR_PROBABILITY,
    DEFAULT_CACHE_HIT_PROBABILITY,
    DEFAULT_DATABASE_QUERY_MAX_DELAY,
)

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Environment(BaseSettings):
    """Raw environment variable loading."""

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── Core ───────────────────────────────────────────────────────────

    FLASK_ENV: str = Field(default="development")
    DEBUG: bool = Field(default=True)
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3000)
    WAITRESS_THREADS: int = Field(default=8)
    CORS_ORIGINS: list[str] = Field(default=["http://localhost:3001"])
    GRACEFUL_SHUTDOWN_TIMEOUT: int = Field(default=30)

    # ── Metrics & simulation ───────────────────────────────────────────

    METRICS_INCLUDE_RUNTIME: bool = Field(default=True)
    BACKGROUND_ACTIVITY_INTERVAL: float = Field(default=DEFAULT_BACKGROUND_ACTIVITY_INTERVAL)
    CACHE_HIT_PROBABILITY: float = Field(default=DEFAULT_CACHE_HIT_PROBABILITY)
    BACKGROUND_ERROR_PROBABILITY: float = Field(default=DEFAULT_BACKGROUND_ERROR_PROBABILITY)
    DATABASE_QUERY_MAX_DELAY: float = Field(default=DEFAULT_DATABASE_QUERY_MAX_DELAY)
    RANDOM_SEED: int | None = Field(default=None)


class Settings(BaseModel):
    """Application settings with lowercase fields and derived values."""

    model_config = ConfigDict(from_attributes=True)

    # ── Core ───────────────────────────────────────────────────────────

    flask_env: str = "development"
    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 3000
    waitress_threads: int = 8
    cors_origins: list[str] = Field(default=["http://localhost:3001"])
    graceful_shutdown_timeout: int = 30

    # ── Metrics & simulation ───────────────────────────────────────────

    metrics_include_runtime: bool = True
    background_activity_interval: float = DEFAULT_BACKGROUND_ACTIVITY_INTERVAL
    cache_hit_probability: float = DEFAULT_CACHE_HIT_PROBABILITY
    background_error_probability: float = DEFAULT_BACKGROUND_ERROR_PROBABILITY
    database_query_max_delay: float = DEFAULT_DATABASE_QUERY_MAX_DELAY
    random_seed: int | None = None

    @property
    def is_production(self) -> bool:
        return self.flask_env == "production"

    def to_flask_config(self) -> "FlaskConfig":
        return FlaskConfig(DEBUG=self.debug)

    def validate_config(self) -> None:
        from enterprise_metrics.exceptions import ConfigurationError

        errors: list[str] = []

        if not 0.0 <= self.cache_hit_probability <= 1.0:
            errors.append("CACHE_HIT_PROBABILITY must be between 0 and 1")

        if not 0.0 <= self.background_error_probability <= 1.0:
            errors.append("BACKGROUND_ERROR_PROBABILITY must be between 0 and 1")

        if self.background_activity_interval <= 0:
            errors.append("BACKGROUND_ACTIVITY_INTERVAL must be positive")

        if self.database_query_max_delay < 0:
            errors.append("DATABASE_QUERY_MAX_DELAY must not be negative")

        if not 1 <= self.port <= 65535:
            errors.append("PORT must be between 1 and 65535")

        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            )

    @classmethod
    def load(cls, env: "Environment | None" = None) -> "Settings":
        if env is None:
            env = Environment()

        # Never run the debugger in production, whatever DEBUG says
        debug = env.DEBUG and env.FLASK_ENV != "production"

        return cls(
            # Core
            flask_env=env.FLASK_ENV,
            debug=debug,
            host=env.HOST,
            port=env.PORT,
            waitress_threads=env.WAITRESS_THREADS,
            cors_origins=env.CORS_ORIGINS,
            graceful_shutdown_timeout=env.GRACEFUL_SHUTDOWN_TIMEOUT,

            # Metrics & simulation
            metrics_include_runtime=env.METRICS_INCLUDE_RUNTIME,
            background_activity_interval=env.BACKGROUND_ACTIVITY_INTERVAL,
            cache_hit_probability=env.CACHE_HIT_PROBABILITY,
            background_error_probability=env.BACKGROUND_ERROR_PROBABILITY,
            database_query_max_delay=env.DATABASE_QUERY_MAX_DELAY,
            random_seed=env.RANDOM_SEED,
        )


class FlaskConfig:
    """Flask-specific configuration for app.config.from_object()."""

    def __init__(self, DEBUG: bool) -> None:
        self.DEBUG = DEBUG
