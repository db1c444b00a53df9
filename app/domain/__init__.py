"""
Domain Package
==============
Immutable value objects describing a diagnostic run and its aggregates.
"""

from .diagnostic import (
    BatteryInfo,
    CPUInfo,
    DiagnosticRecord,
    DiagnosticStatistics,
    RAMInfo,
    StorageInfo,
    SystemInfo,
)
from .exceptions import DiagnosticError, FormatError, NotFoundError, StorageError, ValidationError

__all__ = [
    # Diagnostic record
    "SystemInfo",
    "CPUInfo",
    "RAMInfo",
    "StorageInfo",
    "BatteryInfo",
    "DiagnosticRecord",
    "DiagnosticStatistics",
    # Errors
    "DiagnosticError",
    "FormatError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
]
