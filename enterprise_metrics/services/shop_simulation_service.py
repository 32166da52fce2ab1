"""Simulated shop activity behind the demo API endpoints.

Each operation rolls its outcome from the injected data source, records the
matching business metrics and returns the outcome for the API layer to
serialize. None of these operations fail: even the simulated error is just
data.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from enterprise_metrics.metrics.catalog import AppMetrics
from enterprise_metrics.utils import utc_now
from enterprise_metrics.utils.data_source import DataSourceProtocol

logger = logging.getLogger(__name__)

ORDER_STATUSES = ("completed", "pending", "failed")
PAYMENT_METHODS = ("credit_card", "paypal", "bank_transfer")
PRODUCT_CATEGORIES = ("electronics", "clothing", "food", "books")
REGISTRATION_METHODS = ("email", "google_oauth", "facebook_oauth", "phone")
CACHE_TYPES = ("redis", "memcached")
QUERY_TYPES = ("SELECT", "INSERT", "UPDATE", "DELETE")
TABLES = ("users", "orders", "products", "transactions")
ERROR_TYPES = ("validation", "database", "network", "authentication")
SEVERITIES = ("low", "medium", "high", "critical")

ORDER_AMOUNT_RANGE = (10, 509)
PREMIUM_USERS_RANGE = (50, 149)
FREE_USERS_RANGE = (200, 699)


@dataclass(frozen=True)
class OrderOutcome:
    order_id: str
    status: str
    payment_method: str
    category: str
    amount: int


@dataclass(frozen=True)
class RegistrationOutcome:
    user_id: str
    method: str
    timestamp: datetime


@dataclass(frozen=True)
class ActiveUsers:
    premium: int
    free: int

    @property
    def total(self) -> int:
        return self.premium + self.free


@dataclass(frozen=True)
class CacheLookupOutcome:
    cache_type: str
    hit: bool


@dataclass(frozen=True)
class QueryOutcome:
    query_type: str
    table: str
    duration: float


@dataclass(frozen=True)
class SimulatedError:
    error_type: str
    severity: str


class ShopSimulationService:
    """Generates demo business activity and records it as metrics."""

    def __init__(
        self,
        app_metrics: AppMetrics,
        data_source: DataSourceProtocol,
        cache_hit_probability: float,
        database_query_max_delay: float,
        sleeper: Callable[[float], None] = time.sleep,
    ):
        self.app_metrics = app_metrics
        self.data_source = data_source
        self.cache_hit_probability = cache_hit_probability
        self.database_query_max_delay = database_query_max_delay
        self._sleep = sleeper

    def create_order(self) -> OrderOutcome:
        """Simulate an order and count it, with its revenue."""
        status = self.data_source.choice(ORDER_STATUSES)
        payment_method = self.data_source.choice(PAYMENT_METHODS)
        category = self.data_source.choice(PRODUCT_CATEGORIES)
        amount = self.data_source.randint(*ORDER_AMOUNT_RANGE)

        self.app_metrics.record_order(status, payment_method, category, amount)

        return OrderOutcome(
            order_id=self.data_source.identifier(),
            status=status,
            payment_method=payment_method,
            category=category,
            amount=amount,
        )

    def register_user(self) -> RegistrationOutcome:
        method = self.data_source.choice(REGISTRATION_METHODS)

        self.app_metrics.record_registration(method)

        return RegistrationOutcome(
            user_id=self.data_source.identifier(),
            method=method,
            timestamp=utc_now(),
        )

    def sample_active_users(self) -> ActiveUsers:
        """Roll fresh active-user counts; the gauges are replaced, not summed."""
        users = ActiveUsers(
            premium=self.data_source.randint(*PREMIUM_USERS_RANGE),
            free=self.data_source.randint(*FREE_USERS_RANGE),
        )

        self.app_metrics.set_active_users(users.premium, users.free)

        return users

    def lookup_cache(self) -> CacheLookupOutcome:
        cache_type = self.data_source.choice(CACHE_TYPES)
        hit = self.data_source.random() < self.cache_hit_probability

        self.app_metrics.record_cache_lookup(cache_type, hit)

        return CacheLookupOutcome(cache_type=cache_type, hit=hit)

    def run_database_query(self) -> QueryOutcome:
        """Time a simulated query of random duration.

        The timer only records once the simulated delay has elapsed.
        """
        query_type = self.data_source.choice(QUERY_TYPES)
        table = self.data_source.choice(TABLES)
        duration = self.data_source.random() * self.database_query_max_delay

        stop_timer = self.app_metrics.start_database_query_timer(query_type, table)
        self._sleep(duration)
        stop_timer()

        logger.debug(
            "Simulated database query",
            extra={"query_type": query_type, "table": table, "duration": duration},
        )

        return QueryOutcome(query_type=query_type, table=table, duration=duration)

    def simulate_error(self) -> SimulatedError:
        """Count a simulated application error.

        Nothing is raised; the API layer turns the outcome into a 500 response.
        """
        error = SimulatedError(
            error_type=self.data_source.choice(ERROR_TYPES),
            severity=self.data_source.choice(SEVERITIES),
        )

        self.app_metrics.record_application_error(error.error_type, error.severity)

        return error
