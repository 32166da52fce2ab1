"""Application-wide constants."""

API_TITLE = "Enterprise Metrics Application"
API_DESCRIPTION = (
    "Demo service instrumented with Prometheus metrics. Every endpoint "
    "simulates business activity and records it for scraping at /metrics."
)

# Simulation defaults; each can be overridden through configuration
DEFAULT_CACHE_HIT_PROBABILITY = 0.7
DEFAULT_BACKGROUND_ERROR_PROBABILITY = 0.2
DEFAULT_BACKGROUND_ACTIVITY_INTERVAL = 5
DEFAULT_DATABASE_QUERY_MAX_DELAY = 0.5
