"""
Pydantic Schemas
================

Wire models for the two diagnostic payload shapes accepted by the API.
"""

from app.schemas.diagnostics import (
    BatteryPayload,
    CPUPayload,
    DiagnosticCreatedResponse,
    DiagnosticPayload,
    LegacyClientReport,
    RAMPayload,
    StoragePayload,
    SystemInfoPayload,
)

__all__ = [
    "SystemInfoPayload",
    "CPUPayload",
    "RAMPayload",
    "StoragePayload",
    "BatteryPayload",
    "DiagnosticPayload",
    "LegacyClientReport",
    "DiagnosticCreatedResponse",
]
