"""
Health API Blueprint
====================

Routes:
- GET /api/v1/health - Basic liveness check
- GET /api/v1/health/database - Database connection health
"""

from __future__ import annotations

import logging

from flask import Blueprint

logger = logging.getLogger("health_api")

# Create the blueprint
health_api = Blueprint("health_api", __name__)

from app.blueprints.api.health.system import register_system_routes  # noqa: E402

register_system_routes(health_api)

__all__ = ["health_api"]
