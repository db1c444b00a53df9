from __future__ import annotations

import atexit
import logging
import threading
from dataclasses import dataclass, field

from flask import Flask

from app.config import AppConfig
from app.services.diagnostic_service import DiagnosticService
from infrastructure.database.repositories.diagnostics import DiagnosticRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Aggregate and manage core backend services."""

    config: AppConfig
    database: SQLiteDatabaseHandler
    diagnostic_repo: DiagnosticRepository
    diagnostic_service: DiagnosticService
    _shutdown_complete: bool = False
    _shutdown_lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    @classmethod
    def build(cls, config: AppConfig, *, app: Flask | None = None) -> "ServiceContainer":
        """Construct the service container with all dependencies.

        Args:
            config: Application configuration
            app: Flask application whose teardown should release per-request connections
        """
        logger.info("Building ServiceContainer (database: %s)", config.database_path)
        database = SQLiteDatabaseHandler(config.database_path, cache_size_kb=config.db_cache_size_kb)
        database.check_connection()
        database.init_app(app)

        diagnostic_repo = DiagnosticRepository(database)
        container = cls(
            config=config,
            database=database,
            diagnostic_repo=diagnostic_repo,
            diagnostic_service=DiagnosticService(diagnostic_repo),
        )
        logger.info("ServiceContainer built successfully.")
        return container

    @property
    def is_shut_down(self) -> bool:
        return self._shutdown_complete

    def shutdown(self, reason: str = "requested") -> None:
        """Release external resources before process exit.

        Safe to call more than once and from a signal handler. Also drops the
        atexit registration made for this container, so app factories called
        repeatedly (tests) do not keep finished containers alive.
        """
        with self._shutdown_lock:
            if self._shutdown_complete:
                return
            logger.info("Graceful shutdown initiated (%s)", reason)
            try:
                self.database.close_all()
            except Exception as exc:
                logger.warning("Error during graceful shutdown: %s", exc)
            self._shutdown_complete = True
        atexit.unregister(self.shutdown)
        logger.info("ServiceContainer shutdown complete.")
