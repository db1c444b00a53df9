"""
JSON response helpers
=====================

Every response body is a flat JSON object carrying a ``success`` flag (with
``ok`` as an alias) next to the route's own keys, which is the shape the
desktop client decodes::

    {"success": true, "ok": true, "count": 2, "diagnostics": [...]}
    {"success": false, "ok": false, "error": "Diagnostic 9 not found",
     "message": "Diagnostic 9 not found", "timestamp": "..."}
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable

from flask import Response, jsonify
from werkzeug.exceptions import HTTPException

from app.utils.time import iso_now

_log = logging.getLogger(__name__)

# Server-side failures are reported to clients with these texts only
_PUBLIC_MESSAGES: dict[int, str] = {
    400: "Invalid request",
    404: "Resource not found",
    405: "Method not allowed",
    413: "Request payload too large",
    500: "An internal error occurred",
}

_ENVELOPE_KEYS = frozenset({"success", "ok"})


def _respond(body: dict[str, Any], status: int) -> Response:
    response = jsonify(body)
    response.status_code = status
    return response


def success_response(
    payload: dict[str, Any] | None = None,
    status: int = 200,
    *,
    message: str | None = None,
) -> Response:
    """Merge *payload* into a successful envelope."""
    body: dict[str, Any] = {"success": True, "ok": True}
    if message is not None:
        body["message"] = message
    for key, value in (payload or {}).items():
        if key not in _ENVELOPE_KEYS:
            body[key] = value
    return _respond(body, status)


def error_response(
    message: str,
    status: int = 500,
    *,
    details: dict | None = None,
) -> Response:
    body: dict[str, Any] = {
        "success": False,
        "ok": False,
        "error": message,
        "message": message,
        "timestamp": iso_now(),
    }
    if details:
        body["details"] = details
    return _respond(body, status)


def safe_error(exc: BaseException, status: int = 500, *, context: str = "") -> Response:
    """Log *exc* with its traceback and answer with a fixed public message.

    Args:
        exc: The failure; only the server log sees it
        status: HTTP status, which also picks the public message
        context: What was being attempted, e.g. ``"saving diagnostic"``
    """
    _log.error("API error [%s] %s: %s", status, context, exc, exc_info=exc)
    return error_response(_PUBLIC_MESSAGES.get(status, _PUBLIC_MESSAGES[500]), status)


def safe_route(error_message: str = "An internal error occurred", *, error_status: int = 500) -> Callable:
    """Turn the exceptions a route raises into JSON error responses.

    ``DiagnosticError`` subclasses answer with their own ``http_status``;
    client errors (4xx) show the exception text and ``detail``, server errors
    go through :func:`safe_error`. Werkzeug HTTP errors (e.g. 413) are left
    to the app-level handler. Anything else is logged and answered with
    *error_status*.

    Usage::

        @diagnostics_api.get("/diagnostics/<int:diagnostic_id>")
        @safe_route("Failed to get diagnostic")
        def get_diagnostic(diagnostic_id):
            ...
    """
    from app.domain.exceptions import DiagnosticError

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Response:
            try:
                return fn(*args, **kwargs)
            except HTTPException:
                raise
            except DiagnosticError as exc:
                if exc.http_status >= 500:
                    return safe_error(exc, exc.http_status, context=error_message)
                return error_response(str(exc) or error_message, exc.http_status, details=exc.detail or None)
            except Exception as exc:
                return safe_error(exc, error_status, context=error_message)

        return wrapper

    return decorator
