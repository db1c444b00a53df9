"""
Configuration for the Diagnostic Backend
========================================
Runtime settings loaded from environment variables.
Sets up the logging configuration as well.
"""

import os
from contextlib import suppress
from dataclasses import dataclass, field, fields
from typing import Any


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


def _env_str_multi(names: tuple[str, ...], default: str) -> str:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return default


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("DIAG_ENV", "development"))
    # DB_PATH is what deployments of the first backend release already set
    database_path: str = field(
        default_factory=lambda: _env_str_multi(("DIAG_DATABASE_PATH", "DB_PATH"), "./diagnostics.db")
    )
    db_cache_size_kb: int = field(default_factory=lambda: _env_int("DIAG_DB_CACHE_SIZE_KB", 8_000))

    host: str = field(default_factory=lambda: os.getenv("DIAG_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("PORT", 8080))
    cors_origins: str = field(default_factory=lambda: os.getenv("DIAG_CORS_ORIGINS", "*"))

    # Upload / request size limits
    max_upload_mb: int = field(default_factory=lambda: _env_int("DIAG_MAX_UPLOAD_MB", 1))

    DEBUG: bool = field(default_factory=lambda: _env_bool("DIAG_DEBUG", False))
    log_level: str = field(default_factory=lambda: os.getenv("DIAG_LOG_LEVEL", "INFO"))
    log_file: str = field(default_factory=lambda: os.getenv("DIAG_LOG_FILE", "logs/diagnostics.log"))

    def __post_init__(self) -> None:
        self.environment = self.environment.lower()
        self.log_level = self.log_level.upper()

    def apply_overrides(self, overrides: dict[str, Any]) -> None:
        """Set fields by name; ``DEBUG`` and ``database_path`` style keys both work."""
        known = {f.name for f in fields(self)}
        for key, value in overrides.items():
            name = key if key in known else key.lower()
            if name not in known:
                raise ValueError(f"Unknown configuration key: {key}")
            setattr(self, name, value)
        self.__post_init__()

    def as_flask_config(self) -> dict[str, Any]:
        return {
            "DEBUG": self.DEBUG,
            "DATABASE_PATH": self.database_path,
            "MAX_CONTENT_LENGTH": self.max_upload_mb * 1024 * 1024,
        }


def validate_config(config: AppConfig) -> list[str]:
    """Return a list of problems with the configuration (empty when valid)."""
    problems: list[str] = []
    if not config.database_path:
        problems.append("database_path must not be empty")
    if not 0 < config.port < 65536:
        problems.append(f"port {config.port} is out of range")
    if config.max_upload_mb <= 0:
        problems.append("max_upload_mb must be positive")
    if config.log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        problems.append(f"unknown log level {config.log_level}")
    return problems


def setup_logging(debug: bool = False, log_level: str = "INFO", log_file: str | None = None) -> None:
    """Setup logging configuration."""
    import logging
    import sys
    from logging.handlers import RotatingFileHandler

    level = logging.DEBUG if debug else logging.getLevelName(log_level)
    if not isinstance(level, int):
        level = logging.INFO

    # Root logger
    root = logging.getLogger()
    root.setLevel(level)

    # Keep existing handlers but avoid adding duplicates when create_app is called multiple times
    has_console = any(getattr(h, "name", "") == "diagnostics_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "diagnostics_file" for h in root.handlers)
    added_handler = False

    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "diagnostics_console"
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    if log_file and not has_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.name = "diagnostics_file"
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    # Ensure handler levels follow the desired log level
    for handler in root.handlers:
        if getattr(handler, "name", "") in {"diagnostics_console", "diagnostics_file"}:
            handler.setLevel(level)

    if added_handler:
        root.info("Logging initialized at level: %s", logging.getLevelName(level))

    if _env_bool("DIAG_SILENCE_WERKZEUG", True):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)


def load_config() -> AppConfig:
    """Helper for callers to load and validate configuration."""
    config = AppConfig()
    problems = validate_config(config)
    if problems:
        raise ValueError("Invalid configuration: " + "; ".join(problems))
    return config
