"""Lifecycle coordinator for managing application startup and graceful shutdown."""

import logging
import signal
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum

from enterprise_metrics.metrics.registry import MetricsRegistry

logger = logging.getLogger(__name__)

SHUTDOWN_DURATION_BUCKETS = (1, 5, 10, 30, 60, 120, 300, 600)


class LifecycleEvent(str, Enum):
    STARTUP = "startup"
    PREPARE_SHUTDOWN = "prepare-shutdown"
    SHUTDOWN = "shutdown"
    AFTER_SHUTDOWN = "after-shutdown"


class LifecycleCoordinatorProtocol(ABC):
    """Protocol for lifecycle coordinator implementations."""

    @abstractmethod
    def initialize(self) -> None: ...

    @abstractmethod
    def register_lifecycle_notification(self, callback: Callable[[LifecycleEvent], None]) -> None: ...

    @abstractmethod
    def register_shutdown_waiter(self, name: str, handler: Callable[[float], bool]) -> None: ...

    @abstractmethod
    def is_shutting_down(self) -> bool: ...

    @abstractmethod
    def shutdown(self) -> None: ...

    @abstractmethod
    def fire_startup(self) -> None: ...


class LifecycleCoordinator(LifecycleCoordinatorProtocol):
    """Coordinator for application lifecycle events and graceful shutdown.

    Handles SIGTERM/SIGINT and walks registered services through
    PREPARE_SHUTDOWN, the shutdown waiters (bounded by the graceful timeout),
    SHUTDOWN and AFTER_SHUTDOWN.
    """

    def __init__(self, graceful_shutdown_timeout: int, registry: MetricsRegistry):
        self._graceful_shutdown_timeout = graceful_shutdown_timeout
        self._shutting_down = False
        self._started = False
        self._lifecycle_lock = threading.RLock()
        self._lifecycle_notifications: list[Callable[[LifecycleEvent], None]] = []
        self._shutdown_waiters: dict[str, Callable[[float], bool]] = {}

        self.application_shutting_down = registry.gauge(
            "application_shutting_down",
            "Whether application is shutting down (1=yes, 0=no)",
        )
        self.graceful_shutdown_duration_seconds = registry.histogram(
            "graceful_shutdown_duration_seconds",
            "Duration of graceful shutdowns",
            buckets=SHUTDOWN_DURATION_BUCKETS,
        )

        logger.info("LifecycleCoordinator initialized")

    def initialize(self) -> None:
        signal.signal(signal.SIGTERM, self._handle_sigterm)
        signal.signal(signal.SIGINT, self._handle_sigterm)

    def register_lifecycle_notification(self, callback: Callable[[LifecycleEvent], None]) -> None:
        with self._lifecycle_lock:
            self._lifecycle_notifications.append(callback)

    def register_shutdown_waiter(self, name: str, handler: Callable[[float], bool]) -> None:
        with self._lifecycle_lock:
            self._shutdown_waiters[name] = handler

    def is_shutting_down(self) -> bool:
        with self._lifecycle_lock:
            return self._shutting_down

    def fire_startup(self) -> None:
        with self._lifecycle_lock:
            if self._started:
                return
            self._started = True
        self._raise_lifecycle_event(LifecycleEvent.STARTUP)

    def _handle_sigterm(self, signum: int, frame: object) -> None:
        logger.info(f"Received signal {signum}, initiating graceful shutdown")
        self.shutdown()

    def shutdown(self) -> None:
        with self._lifecycle_lock:
            if self._shutting_down:
                logger.warning("Shutdown already in progress, ignoring request")
                return
            self._shutting_down = True
            shutdown_start_time = time.perf_counter()
            self.application_shutting_down.labels().set(1)  # type: ignore[attr-defined]
            self._raise_lifecycle_event(LifecycleEvent.PREPARE_SHUTDOWN)

        start_time = time.perf_counter()
        all_ready = True

        for name, waiter in self._shutdown_waiters.items():
            elapsed = time.perf_counter() - start_time
            remaining = self._graceful_shutdown_timeout - elapsed
            if remaining <= 0:
                logger.error(f"Shutdown timeout exceeded before checking {name}")
                all_ready = False
                break
            try:
                ready = waiter(remaining)
                if not ready:
                    logger.warning(f"{name} was not ready within timeout")
                    all_ready = False
            except Exception as e:
                logger.error(f"Error in shutdown waiter {name}: {e}")
                all_ready = False

        total_duration = time.perf_counter() - shutdown_start_time
        self.graceful_shutdown_duration_seconds.labels().observe(total_duration)  # type: ignore[attr-defined]

        if not all_ready:
            logger.error(
                f"Shutdown timeout exceeded after {total_duration:.1f}s, forcing shutdown"
            )

        self._raise_lifecycle_event(LifecycleEvent.SHUTDOWN)
        self._raise_lifecycle_event(LifecycleEvent.AFTER_SHUTDOWN)

    def _raise_lifecycle_event(self, event: LifecycleEvent) -> None:
        logger.info(f"Raising lifecycle event {event.value}")

        for callback in list(self._lifecycle_notifications):
            try:
                callback(event)
            except Exception as e:
                logger.error(
                    f"Error in lifecycle event notification "
                    f"{getattr(callback, '__name__', repr(callback))}: {e}"
                )
