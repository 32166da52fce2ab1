"""Metrics update coordinator for periodic metric refreshes.

Services whose gauges change without any inbound request register an
updater here. The coordinator calls every updater from a background thread
at a fixed interval until the application shuts down.
"""

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from enterprise_metrics.utils.lifecycle_coordinator import LifecycleEvent

if TYPE_CHECKING:
    from enterprise_metrics.utils.lifecycle_coordinator import (
        LifecycleCoordinatorProtocol,
    )

logger = logging.getLogger(__name__)


class MetricsUpdateCoordinator:
    """Coordinates periodic metric updates across services.

    Example usage:
        coordinator = container.metrics_coordinator()
        coordinator.register_updater(background_activity_service.update_metrics)
        coordinator.start(interval_seconds=5)
    """

    def __init__(self, lifecycle_coordinator: "LifecycleCoordinatorProtocol"):
        """Initialize the coordinator.

        Args:
            lifecycle_coordinator: Coordinator for graceful shutdown integration.
        """
        self._updaters: list[Callable[[], None]] = []
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

        lifecycle_coordinator.register_lifecycle_notification(self._on_lifecycle_event)
        lifecycle_coordinator.register_shutdown_waiter(
            "MetricsUpdateCoordinator", self._wait_for_shutdown
        )

    def register_updater(self, updater: Callable[[], None]) -> None:
        """Register a callable to run on every update cycle.

        Args:
            updater: Callable that refreshes some metrics. Exceptions it raises
                     are logged and do not stop the other updaters.
        """
        with self._lock:
            self._updaters.append(updater)
            logger.debug(
                "Registered metrics updater",
                extra={"updater": getattr(updater, "__name__", repr(updater))},
            )

    def unregister_updater(self, updater: Callable[[], None]) -> None:
        with self._lock:
            try:
                self._updaters.remove(updater)
            except ValueError:
                pass  # Never registered

    def start(self, interval_seconds: float = 5) -> None:
        """Start the background update loop.

        Args:
            interval_seconds: Time between update cycles.
        """
        if self._thread is not None and self._thread.is_alive():
            logger.warning("Metrics update coordinator already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._update_loop,
            args=(interval_seconds,),
            daemon=True,
            name="MetricsUpdateCoordinator",
        )
        self._thread.start()
        logger.info(
            "Started metrics update coordinator",
            extra={"interval_seconds": interval_seconds},
        )

    def stop(self) -> None:
        """Stop the background update loop."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
            logger.info("Stopped metrics update coordinator")

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_updaters(self) -> None:
        """Execute all registered updaters once."""
        with self._lock:
            updaters = list(self._updaters)

        for updater in updaters:
            try:
                updater()
            except Exception as e:
                logger.error(
                    "Metrics updater failed",
                    exc_info=True,
                    extra={
                        "updater": getattr(updater, "__name__", repr(updater)),
                        "error": str(e),
                    },
                )

    def _update_loop(self, interval_seconds: float) -> None:
        while not self._stop_event.is_set():
            # Wait first, then update (allows immediate shutdown on startup)
            if self._stop_event.wait(interval_seconds):
                break

            self.run_updaters()

    def _wait_for_shutdown(self, timeout: float) -> bool:
        """Stop the loop and wait up to ``timeout`` seconds for the thread to exit."""
        self._stop_event.set()
        thread = self._thread
        if thread is None:
            return True

        thread.join(timeout=timeout)
        return not thread.is_alive()

    def _on_lifecycle_event(self, event: LifecycleEvent) -> None:
        if event == LifecycleEvent.SHUTDOWN:
            self.stop()
