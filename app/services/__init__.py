"""Application services for diagnostic ingestion and retrieval."""

from app.services.diagnostic_service import DiagnosticService

__all__ = ["DiagnosticService"]
