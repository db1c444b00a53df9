"""
System Health Endpoints
=======================

Liveness and storage reachability checks.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response

from app.blueprints.api._common import get_container as _container, success as _success
from app.utils.http import safe_route
from app.utils.time import iso_now

logger = logging.getLogger("health_api")

API_VERSION = "1.0.0"


def register_system_routes(health_api: Blueprint):
    """Register system health routes on the blueprint."""

    @health_api.get("")
    @safe_route("Failed to handle health check")
    def health_check() -> Response:
        """
        Basic liveness check for monitoring tools.

        Returns:
            {"status": "healthy", "message": "...", "version": "1.0.0"}
        """
        return _success(
            {
                "status": "healthy",
                "message": "Diagnostic backend operational",
                "version": API_VERSION,
                "timestamp": iso_now(),
            }
        )

    @health_api.get("/database")
    @safe_route("Failed to check database health")
    def get_database_health() -> Response:
        """
        Check that the diagnostics store answers queries.

        Returns:
            {"status": "healthy", "database": "<path>"}; 500 when unreachable
        """
        database = _container().database
        database.check_connection()
        return _success({"status": "healthy", "database": database.database_path})
