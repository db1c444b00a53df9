"""Diagnostic ingestion and retrieval service.

Runs the ingestion pipeline (normalize → validate → persist) and exposes the
read side of the repository to the HTTP layer. Every failure leaves this
service as one of the classified errors in ``app.domain.exceptions``.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from app.domain.diagnostic import DiagnosticRecord, DiagnosticStatistics
from app.domain.exceptions import ValidationError
from app.services.normalizer import normalize_payload
from app.services.validator import validate_diagnostic
from infrastructure.database.repositories.base import DiagnosticStore

logger = logging.getLogger(__name__)


class DiagnosticService:
    """Ingest diagnostics and serve stored ones."""

    def __init__(self, repo: DiagnosticStore):
        """
        Args:
            repo: Storage for diagnostic records
        """
        self._repo = repo

    def ingest(self, payload: Any) -> DiagnosticRecord:
        """Normalize, validate and store one submission.

        Args:
            payload: Decoded JSON body in either accepted shape

        Returns:
            The stored record carrying its assigned ``id`` and ``created_at``

        Raises:
            FormatError: body matches neither shape
            ValidationError: a required field is missing or out of range
            StorageError: the insert failed (nothing was written)
        """
        record = normalize_payload(payload)
        try:
            validate_diagnostic(record)
        except ValidationError as exc:
            logger.info("Diagnostic validation failed: %s", exc)
            raise

        stored = self._repo.create(record)
        logger.info(
            "Diagnostic created - ID: %s, Machine: %s, Serial: %s",
            stored.id,
            stored.system_info.machine_name,
            stored.serial_number,
        )
        return stored

    def list_diagnostics(self, limit: int = 0) -> list[DiagnosticRecord]:
        """Newest first; ``limit <= 0`` returns every record."""
        diagnostics = self._repo.list_all(limit)
        logger.debug("Retrieved %d diagnostics", len(diagnostics))
        return diagnostics

    def get_diagnostic(self, diagnostic_id: int) -> DiagnosticRecord:
        return self._repo.get_by_id(diagnostic_id)

    def list_for_machine(self, serial_number: str) -> list[DiagnosticRecord]:
        diagnostics = self._repo.list_by_serial(serial_number)
        logger.debug("Retrieved %d diagnostics for machine %s", len(diagnostics), serial_number)
        return diagnostics

    def statistics(self) -> DiagnosticStatistics:
        stats = self._repo.statistics()
        logger.info("Statistics: %s", json.dumps(stats.to_dict(), sort_keys=True))
        return stats
