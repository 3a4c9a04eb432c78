"""Background purge of expired revocation state.

- daemon thread: dies with the process, never blocks shutdown
- fixed interval (``TOKEN_CLEANUP_INTERVAL_SECONDS``, once a day by default)
- a failed pass is logged and retried on the next tick
"""

from __future__ import annotations

import logging
import threading

from flask import Flask

from filmauth.services.auth.cleanup import CleanupReport

logger = logging.getLogger(__name__)

EXTENSION_KEY = "filmauth.cleanup_scheduler"


class TokenCleanupScheduler(threading.Thread):
    """
    Run :meth:`TokenCleanupService.purge_expired` every ``interval_seconds``.

    Each pass runs inside a fresh application context so it gets its own
    database session, independent from request traffic.
    """

    def __init__(self, app: Flask, *, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        super().__init__(daemon=True, name="TokenCleanupScheduler")
        self.app = app
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()

    def run(self) -> None:
        logger.info("tokens.cleanup.scheduler_started")
        while not self._stop_event.wait(self.interval_seconds):
            self.run_once()
        logger.info("tokens.cleanup.scheduler_stopped")

    def run_once(self) -> CleanupReport | None:
        """Execute one pass; failures are logged, never raised."""
        from filmauth.core.auth import get_cleanup_service

        with self.app.app_context():
            try:
                return get_cleanup_service().purge_expired()
            except Exception:
                logger.exception("tokens.cleanup.failed")
                return None

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        if self.is_alive():
            self.join(timeout)


def start_cleanup_scheduler(app: Flask) -> TokenCleanupScheduler | None:
    """Start the scheduler once per app when ``TOKEN_CLEANUP_ENABLED`` is set."""
    if not app.config.get("TOKEN_CLEANUP_ENABLED", False):
        return None
    existing = app.extensions.get(EXTENSION_KEY)
    if existing is not None and existing.is_alive():
        return existing
    scheduler = TokenCleanupScheduler(
        app, interval_seconds=float(app.config.get("TOKEN_CLEANUP_INTERVAL_SECONDS", 86400))
    )
    scheduler.start()
    app.extensions[EXTENSION_KEY] = scheduler
    return scheduler
