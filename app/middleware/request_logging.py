"""
Request Logging Middleware
==========================
Logs every request with its outcome and processing time.
"""

import logging
import time

from flask import Flask, g, request

logger = logging.getLogger("api.requests")


def init_request_logging(app: Flask) -> None:
    """
    Initialize request logging for the Flask application.

    Args:
        app: Flask application instance
    """

    @app.before_request
    def before_request_handler():
        g.request_start_time = time.perf_counter()
        logger.info("%s %s - %s", request.method, request.full_path.rstrip("?"), request.remote_addr)

    @app.after_request
    def after_request_handler(response):
        started = getattr(g, "request_start_time", None)
        if started is None:
            return response
        elapsed_ms = (time.perf_counter() - started) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(level, "%s %s -> %s in %.1f ms", request.method, request.path, response.status_code, elapsed_ms)
        return response
