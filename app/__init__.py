from __future__ import annotations

import atexit
import contextlib
import logging
import signal
from typing import Any

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from app.blueprints.api.diagnostics import diagnostics_api
from app.blueprints.api.health import health_api
from app.config import load_config, setup_logging, validate_config
from app.extensions import init_extensions
from app.middleware.cors import init_cors
from app.middleware.request_logging import init_request_logging
from app.middleware.security_headers import init_security_headers

API_PREFIX = "/api/v1"


def create_app(config_overrides: dict[str, Any] | None = None, *, install_signal_handlers: bool = False) -> Flask:
    config = load_config()
    if config_overrides:
        config.apply_overrides(config_overrides)
        problems = validate_config(config)
        if problems:
            raise ValueError("Invalid configuration: " + "; ".join(problems))

    # Configure logging early so storage initialisation is visible
    setup_logging(debug=config.DEBUG, log_level=config.log_level, log_file=config.log_file)

    flask_app = Flask(__name__)
    flask_app.config.update(config.as_flask_config())
    flask_app.json.sort_keys = False

    init_extensions(flask_app)

    from app.services.container import ServiceContainer

    container = ServiceContainer.build(config, app=flask_app)
    flask_app.config["CONTAINER"] = container

    # ── Graceful shutdown handlers ──────────────────────────────────
    def _signal_handler(signum: int, _frame: object) -> None:
        sig_name = signal.Signals(signum).name
        logging.info("Received %s: shutting down", sig_name)
        container.shutdown(sig_name)
        raise SystemExit(0)

    # Register atexit (covers normal interpreter exit)
    atexit.register(container.shutdown, "atexit")

    # Register OS signal handlers (SIGINT=Ctrl-C, SIGTERM=container/systemd stop)
    if install_signal_handlers:
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(OSError, ValueError):
                signal.signal(sig, _signal_handler)

    init_request_logging(flask_app)
    init_cors(flask_app, config.cors_origins)
    init_security_headers(flask_app, enable_hsts=config.environment == "production")

    # Global JSON error handler: catches anything the routes did not map
    # and returns a generic message instead of leaking stack traces.
    @flask_app.errorhandler(Exception)
    def _handle_unhandled(exc):
        from app.domain.exceptions import DiagnosticError
        from app.utils.http import error_response, safe_error

        if isinstance(exc, HTTPException):
            status = int(exc.code or 500)
            if status >= 500:
                return safe_error(exc, status, context="http-exception")
            if status == 413:
                return error_response("Request payload too large", 413)
            return error_response(exc.description or "Request failed", status)

        if isinstance(exc, DiagnosticError):
            status = exc.http_status
            if status >= 500:
                return safe_error(exc, status, context=type(exc).__name__)
            # 4xx: surface the message; it was written for the caller.
            return error_response(str(exc) or "Request failed", status)

        return safe_error(exc, 500, context=f"unhandled {request.method} {request.path}")

    flask_app.register_blueprint(diagnostics_api, url_prefix=API_PREFIX)
    flask_app.register_blueprint(health_api, url_prefix=f"{API_PREFIX}/health")

    for bp_name in flask_app.blueprints:
        logging.info(" Registered blueprint: %s", bp_name)

    # ── Backward-compat: rewrite /api/* → /api/v1/* ─────────────
    # WSGI-level rewrite, no HTTP redirect.
    _original_wsgi = flask_app.wsgi_app

    def _legacy_api_rewrite(environ, start_response):
        path = environ.get("PATH_INFO", "")
        if path.startswith("/api/") and not path.startswith(f"{API_PREFIX}/"):
            environ["PATH_INFO"] = API_PREFIX + path[4:]
        return _original_wsgi(environ, start_response)

    flask_app.wsgi_app = _legacy_api_rewrite  # type: ignore[assignment]

    logger = logging.getLogger(__name__)
    logger.info("Diagnostic backend initialized (database: %s)", config.database_path)

    return flask_app


__all__ = ["API_PREFIX", "create_app"]
