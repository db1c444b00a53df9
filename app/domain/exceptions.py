"""Centralized exception hierarchy for the diagnostic backend.

Every core operation either returns a value or raises exactly one of the
classified errors below, so the HTTP layer can map outcomes without knowing
where they came from.

Blueprint-level error handling (see ``app/utils/http.safe_route``) maps these
to the correct HTTP status codes automatically.

Hierarchy
---------
::

    DiagnosticError (base, maps to 500)
    ├── FormatError        (400, body matches neither wire shape)
    ├── ValidationError    (400, decoded record breaks a business rule)
    ├── NotFoundError      (404, no record with that identity)
    └── StorageError       (500, persistence failure)
"""

from __future__ import annotations


class DiagnosticError(Exception):
    """Base exception for all diagnostic backend errors.

    Parameters
    ----------
    message:
        Human-readable description (logged server-side, **not** leaked to
        the HTTP client unless the exception class is a 4xx).
    detail:
        Optional machine-readable context dict attached to the error for
        structured logging.
    """

    http_status: int = 500

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


# ── Client errors (4xx) ──────────────────────────────────────────────


class FormatError(DiagnosticError):
    """Request body does not decode into either supported shape (HTTP 400)."""

    http_status: int = 400


class ValidationError(DiagnosticError):
    """Decoded record fails a business rule (HTTP 400)."""

    http_status: int = 400


class NotFoundError(DiagnosticError):
    """Requested diagnostic does not exist (HTTP 404)."""

    http_status: int = 404


# ── Server errors (5xx) ──────────────────────────────────────────────


class StorageError(DiagnosticError):
    """Database / persistence layer failure (HTTP 500)."""

    http_status: int = 500
