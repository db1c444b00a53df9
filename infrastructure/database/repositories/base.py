"""
Base Repository Protocol
========================

Defines the minimal contract the diagnostic repository implements.
Uses ``typing.Protocol`` (structural subtyping) so services can depend on
the contract rather than on the SQLite-backed class, and tests can hand in
any object with the same methods.

Usage in service type hints::

    from infrastructure.database.repositories.base import DiagnosticStore


    class MyService:
        def __init__(self, repo: DiagnosticStore) -> None: ...
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from app.domain.diagnostic import DiagnosticRecord, DiagnosticStatistics


@runtime_checkable
class ReadRepository(Protocol):
    """Repository that supports reading a single record by ID."""

    def get(self, record_id: int) -> DiagnosticRecord | None:
        """Retrieve a record by its primary key.

        Returns ``None`` when the record does not exist.
        """
        ...


@runtime_checkable
class WriteRepository(Protocol):
    """Repository that supports creating a record."""

    def create(self, record: DiagnosticRecord) -> DiagnosticRecord:
        """Persist a new record and return it carrying its generated ID.

        Raises ``StorageError`` on failure; never returns a partial write.
        """
        ...


@runtime_checkable
class DiagnosticStore(ReadRepository, WriteRepository, Protocol):
    """Full contract consumed by :class:`DiagnosticService`."""

    def get_by_id(self, record_id: int) -> DiagnosticRecord: ...

    def list_all(self, limit: int = 0) -> list[DiagnosticRecord]: ...

    def list_by_serial(self, serial_number: str) -> list[DiagnosticRecord]: ...

    def statistics(self) -> DiagnosticStatistics: ...


__all__ = [
    "DiagnosticStore",
    "ReadRepository",
    "WriteRepository",
]
