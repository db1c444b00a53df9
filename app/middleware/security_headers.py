"""
Security Headers Middleware
===========================

Adds standard HTTP security response headers to every JSON response.
The API serves no HTML, so the policy is locked down to "nothing".

Reference: https://owasp.org/www-project-secure-headers/
"""

from __future__ import annotations

import logging

from flask import Flask

logger = logging.getLogger(__name__)

_DEFAULT_HEADERS: dict[str, str] = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "no-referrer",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    # Diagnostic data changes with every submission
    "Cache-Control": "no-store",
}


def init_security_headers(app: Flask, *, enable_hsts: bool = False, hsts_max_age: int = 31_536_000) -> None:
    """Register an after_request handler that adds security headers.

    Args:
        app: The Flask application instance.
        enable_hsts: Whether to add Strict-Transport-Security. Only enable
                     when serving behind TLS (HTTPS).
        hsts_max_age: HSTS max-age in seconds (default 1 year).
    """

    @app.after_request
    def _add_security_headers(response):
        # Don't overwrite headers already set by individual routes
        for header, value in _DEFAULT_HEADERS.items():
            if header not in response.headers:
                response.headers[header] = value

        if enable_hsts and "Strict-Transport-Security" not in response.headers:
            response.headers["Strict-Transport-Security"] = f"max-age={hsts_max_age}; includeSubDomains"

        return response

    logger.info("Security headers middleware initialised (HSTS=%s)", enable_hsts)
