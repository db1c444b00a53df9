"""Repository facades exposing typed accessors over low-level mixins.

Base protocols are available for type-checking and dependency injection::

    from infrastructure.database.repositories.base import DiagnosticStore
"""

from infrastructure.database.repositories.base import (
    DiagnosticStore,
    ReadRepository,
    WriteRepository,
)
from infrastructure.database.repositories.diagnostics import DiagnosticRepository

__all__ = [
    "DiagnosticRepository",
    "DiagnosticStore",
    "ReadRepository",
    "WriteRepository",
]
