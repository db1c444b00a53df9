"""
Submission Normalizer
=====================

Turns a decoded JSON body into a canonical :class:`DiagnosticRecord`.

Two wire shapes are accepted:

* **canonical**: nested ``system_info``/``cpu``/``ram``/``storage``/``battery``
  objects, decoded as-is;
* **legacy**: the flat report of the older desktop client, with numeric GB
  quantities and a battery percentage, translated field by field.

The presence of a ``system_info`` key selects the canonical shape. Decoding
produces one of two payload variants; each has its own pure translation
function, so nothing downstream needs to know which shape arrived.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Union

from pydantic import ValidationError as PydanticValidationError

from app.domain.diagnostic import BatteryInfo, CPUInfo, DiagnosticRecord, RAMInfo, StorageInfo, SystemInfo
from app.domain.exceptions import FormatError
from app.enums.diagnostic import LegacyStatus
from app.schemas.diagnostics import DiagnosticPayload, LegacyClientReport
from app.utils.time import ensure_utc, utc_now

logger = logging.getLogger(__name__)

SHAPE_KEY = "system_info"

# Values the legacy client never reports
LEGACY_MODEL = "Unknown"
LEGACY_OS_VERSION = "macOS"
LEGACY_CPU_FREQUENCY = "N/A"
LEGACY_STORAGE_TYPE = "SSD"

Payload = Union[DiagnosticPayload, LegacyClientReport]


def format_gigabytes(value: float) -> str:
    """16 -> ``"16.00 GB"``."""
    return f"{value:.2f} GB"


def format_percentage(value: int) -> str:
    """85 -> ``"85%"``."""
    return f"{value}%"


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "body"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def decode_payload(payload: Any) -> Payload:
    """Probe for the shape key and decode into the matching variant.

    Raises:
        FormatError: body is not an object, or a field has the wrong JSON type
            or a required nested object is missing
    """
    if not isinstance(payload, Mapping):
        raise FormatError("Request body must be a JSON object")

    model = DiagnosticPayload if SHAPE_KEY in payload else LegacyClientReport
    try:
        return model.model_validate(dict(payload))
    except PydanticValidationError as exc:
        shape = "standard" if model is DiagnosticPayload else "legacy"
        reason = _describe(exc)
        logger.info("Rejected %s diagnostic payload: %s", shape, reason)
        raise FormatError(f"Invalid JSON format: {reason}", detail={"shape": shape}) from exc


def translate_canonical(payload: DiagnosticPayload, *, received_at: datetime | None = None) -> DiagnosticRecord:
    timestamp = payload.timestamp or received_at or utc_now()
    return DiagnosticRecord(
        system_info=SystemInfo(**payload.system_info.model_dump()),
        cpu=CPUInfo(**payload.cpu.model_dump()),
        ram=RAMInfo(**payload.ram.model_dump()),
        storage=StorageInfo(**payload.storage.model_dump()),
        battery=BatteryInfo(**payload.battery.model_dump()),
        status=payload.status,
        duration=float(payload.duration),
        timestamp=ensure_utc(timestamp),
    )


def translate_legacy(report: LegacyClientReport, *, received_at: datetime | None = None) -> DiagnosticRecord:
    # used > total is not rejected; the negative remainder is stored as reported
    ram_available = report.ram_total_gb - report.ram_used_gb
    storage_available = report.storage_total_gb - report.storage_used_gb

    return DiagnosticRecord(
        system_info=SystemInfo(
            machine_name=report.machine_name,
            serial_number=report.serial_number,
            model=LEGACY_MODEL,
            os_version=LEGACY_OS_VERSION,
        ),
        cpu=CPUInfo(
            model=report.cpu_model,
            cores=report.cpu_cores,
            frequency=LEGACY_CPU_FREQUENCY,
        ),
        ram=RAMInfo(
            total=format_gigabytes(report.ram_total_gb),
            used=format_gigabytes(report.ram_used_gb),
            available=format_gigabytes(ram_available),
        ),
        storage=StorageInfo(
            type=LEGACY_STORAGE_TYPE,
            capacity=format_gigabytes(report.storage_total_gb),
            used=format_gigabytes(report.storage_used_gb),
            available=format_gigabytes(storage_available),
        ),
        battery=BatteryInfo(
            cycle_count=report.battery_cycle_count,
            health=report.battery_health,
            capacity=format_percentage(report.battery_percentage),
            is_charging=False,
        ),
        status=LegacyStatus.to_canonical(report.status).value,
        duration=float(report.test_duration_seconds),
        timestamp=ensure_utc(received_at or utc_now()),
    )


def normalize_payload(payload: Any, *, received_at: datetime | None = None) -> DiagnosticRecord:
    """Decode either wire shape into a canonical record ready for validation.

    Args:
        payload: Decoded JSON body
        received_at: Fallback run timestamp when the client reports none
            (defaults to now)

    Raises:
        FormatError: body matches neither shape
    """
    decoded = decode_payload(payload)
    if isinstance(decoded, LegacyClientReport):
        logger.info("Legacy client format detected, converting to standard format")
        return translate_legacy(decoded, received_at=received_at)
    logger.debug("Standard diagnostic format detected")
    return translate_canonical(decoded, received_at=received_at)
