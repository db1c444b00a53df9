"""
Diagnostic Enumerations
=======================

Status vocabularies spoken by the canonical API and by the legacy client.
Statuses are persisted as free text; these enums name the known values.
"""

from enum import Enum


class DiagnosticStatus(str, Enum):
    """
    Outcome of a diagnostic run (canonical vocabulary).
    Used by: normalizer, statistics breakdown
    """
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class LegacyStatus(str, Enum):
    """
    Outcome vocabulary of the flat legacy client.
    Anything the client sends outside these values counts as partial.
    """
    COMPLETED = "completed"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def to_canonical(cls, raw: str | None) -> DiagnosticStatus:
        if raw == cls.COMPLETED.value:
            return DiagnosticStatus.SUCCESS
        if raw == cls.FAILED.value:
            return DiagnosticStatus.FAILED
        return DiagnosticStatus.PARTIAL
