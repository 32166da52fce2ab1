"""Server entry point."""

import logging
import os
import threading

from paste.translogger import TransLogger  # type: ignore[import-untyped]
from waitress import serve

from enterprise_metrics import create_app
from enterprise_metrics.config import Settings
from enterprise_metrics.utils.lifecycle_coordinator import LifecycleEvent


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    settings = Settings.load()
    app = create_app(settings)

    lifecycle_coordinator = app.container.lifecycle_coordinator()

    if not settings.is_production:
        app.logger.info("Running Flask development server")

        if not settings.debug or os.environ.get("WERKZEUG_RUN_MAIN") == "true":
            lifecycle_coordinator.initialize()

        def signal_shutdown(lifecycle_event: LifecycleEvent) -> None:
            if lifecycle_event == LifecycleEvent.AFTER_SHUTDOWN:
                os._exit(0)

        lifecycle_coordinator.register_lifecycle_notification(signal_shutdown)
        app.run(host=settings.host, port=settings.port, debug=settings.debug)
    else:
        lifecycle_coordinator.initialize()

        def runner() -> None:
            wsgi = TransLogger(app, setup_console_handler=False)
            wsgi.logger.info(
                f"Using Waitress WSGI server with {settings.waitress_threads} threads"
            )
            serve(wsgi, host=settings.host, port=settings.port, threads=settings.waitress_threads)

        thread = threading.Thread(target=runner, daemon=True)
        thread.start()

        event = threading.Event()

        def signal_shutdown_prod(lifecycle_event: LifecycleEvent) -> None:
            if lifecycle_event == LifecycleEvent.AFTER_SHUTDOWN:
                event.set()

        lifecycle_coordinator.register_lifecycle_notification(signal_shutdown_prod)
        event.wait()


if __name__ == "__main__":
    main()
