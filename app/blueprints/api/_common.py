"""
Blueprint Common Utilities
==========================

Shared helper functions for all API blueprints.
Import these instead of duplicating helper code in each blueprint.

Usage:
    from app.blueprints.api._common import (
        get_container, get_diagnostic_service, get_json_object, get_limit, success,
    )
"""
from __future__ import annotations

import logging
from typing import Any

from flask import current_app, request

from app.domain.exceptions import FormatError
from app.utils.http import success_response

logger = logging.getLogger("api._common")

# ============================================================================
# CONTAINER ACCESS
# ============================================================================


def get_container():
    """
    Get the service container from Flask app config.

    Returns:
        ServiceContainer: The application service container

    Raises:
        RuntimeError: If container is not configured
    """
    container = current_app.config.get("CONTAINER")
    if not container:
        raise RuntimeError("ServiceContainer not found in app config")
    return container


def get_diagnostic_service():
    return get_container().diagnostic_service


# ============================================================================
# REQUEST HELPERS
# ============================================================================


def get_json_object() -> Any:
    """
    Parse the request body as JSON.

    Returns:
        The decoded body (shape checks are left to the normalizer)

    Raises:
        FormatError: body is missing or is not valid JSON
    """
    payload = request.get_json(force=True, silent=True)
    if payload is None:
        raise FormatError("Invalid JSON format: request body is missing or not valid JSON")
    return payload


def get_limit(name: str = "limit") -> int:
    """Read an integer query parameter; absent or non-numeric means 0 (no limit)."""
    return request.args.get(name, 0, type=int)


# ============================================================================
# RESPONSE HELPERS
# ============================================================================


def success(payload: dict | None = None, status: int = 200, *, message: str | None = None):
    """
    Standard success response wrapper.

    Returns:
        Flask Response with format: {"success": true, "ok": true, **payload}
    """
    return success_response(payload, status, message=message)
