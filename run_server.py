"""WSGI entry point for the diagnostic backend.

Used both as the ``diagnostic-backend`` console script and by WSGI servers
(``gunicorn run_server:app``). Configuration comes from the environment;
see ``app.config.AppConfig``.
"""
from __future__ import annotations

import logging
import sys

from app import API_PREFIX, create_app

if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")

app = create_app(install_signal_handlers=True)

logger = logging.getLogger("run_server")


def _log_endpoints() -> None:
    logger.info("API endpoints:")
    for rule in sorted(app.url_map.iter_rules(), key=lambda r: r.rule):
        if not rule.rule.startswith(API_PREFIX):
            continue
        methods = ",".join(sorted(m for m in rule.methods if m not in {"HEAD", "OPTIONS"}))
        logger.info("  %-6s %s", methods, rule.rule)


def main() -> int:
    config = app.config["CONTAINER"].config

    logger.info("Starting diagnostic backend on %s:%s", config.host, config.port)
    logger.info("Database: %s", config.database_path)
    _log_endpoints()

    try:
        app.run(host=config.host, port=config.port, debug=config.DEBUG, use_reloader=False)
        logger.info("Server stopped.")
        return 0
    except KeyboardInterrupt:
        logger.info("Server stopped by user.")
        return 0
    except Exception as exc:  # pragma: no cover - top-level runtime errors
        logger.exception("ERROR: Failed to start server: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
