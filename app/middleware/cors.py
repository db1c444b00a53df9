"""
CORS Middleware
===============

Lets browser dashboards on other origins call the API.

Answers ``OPTIONS`` preflight requests directly and decorates every other
response with the matching ``Access-Control-*`` headers. Credentials are
never allowed, so a wildcard origin is safe to send back verbatim.
"""

from __future__ import annotations

import logging

from flask import Flask, Response, request

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE", "OPTIONS")
ALLOWED_HEADERS = ("Content-Type", "Authorization")
PREFLIGHT_MAX_AGE = 300


def parse_origins(raw: str) -> tuple[str, ...]:
    """``"*"`` or a comma-separated origin list -> tuple of origins."""
    origins = tuple(origin.strip().rstrip("/") for origin in (raw or "").split(",") if origin.strip())
    return origins or ("*",)


def init_cors(app: Flask, origins: str = "*") -> None:
    """Register preflight handling and CORS response headers.

    Args:
        app: Flask application instance
        origins: ``"*"`` or comma-separated list of allowed origins
    """
    allowed = parse_origins(origins)
    allow_any = "*" in allowed

    def _allowed_origin() -> str | None:
        origin = request.headers.get("Origin")
        if not origin:
            return None
        if allow_any:
            return "*"
        return origin if origin.rstrip("/") in allowed else None

    @app.before_request
    def _answer_preflight():
        if request.method != "OPTIONS" or "Access-Control-Request-Method" not in request.headers:
            return None
        response = Response(status=204)
        origin = _allowed_origin()
        if origin:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Methods"] = ", ".join(ALLOWED_METHODS)
            response.headers["Access-Control-Allow-Headers"] = ", ".join(ALLOWED_HEADERS)
            response.headers["Access-Control-Max-Age"] = str(PREFLIGHT_MAX_AGE)
        return response

    @app.after_request
    def _add_cors_headers(response):
        origin = _allowed_origin()
        if origin and "Access-Control-Allow-Origin" not in response.headers:
            response.headers["Access-Control-Allow-Origin"] = origin
            if not allow_any:
                response.headers.add("Vary", "Origin")
        return response

    logger.info("CORS enabled for origins: %s", ", ".join(allowed))
