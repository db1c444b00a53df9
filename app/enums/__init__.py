"""
Enums Module
============

Enumeration types shared by the diagnostic backend.
"""

from app.enums.diagnostic import DiagnosticStatus, LegacyStatus

__all__ = [
    "DiagnosticStatus",
    "LegacyStatus",
]
