"""Business-rule checks applied to normalized diagnostics before storage.

Intentionally permissive: status vocabulary, duration sign and the
RAM/storage arithmetic are not checked.
"""

from __future__ import annotations

from app.domain.diagnostic import DiagnosticRecord
from app.domain.exceptions import ValidationError

_REQUIRED_TEXT = (
    ("machine_name", lambda r: r.system_info.machine_name),
    ("serial_number", lambda r: r.system_info.serial_number),
    ("model", lambda r: r.system_info.model),
    ("cpu.model", lambda r: r.cpu.model),
)


def validate_diagnostic(record: DiagnosticRecord) -> None:
    """Raise :class:`ValidationError` for the first rule the record breaks."""
    for name, getter in _REQUIRED_TEXT:
        if not getter(record):
            raise ValidationError(f"{name} is required", detail={"field": name})
    if record.cpu.cores <= 0:
        raise ValidationError("cpu.cores must be greater than 0", detail={"field": "cpu.cores"})
    if not record.ram.total:
        raise ValidationError("ram.total is required", detail={"field": "ram.total"})
    if not record.storage.type:
        raise ValidationError("storage.type is required", detail={"field": "storage.type"})
    if record.battery.cycle_count < 0:
        raise ValidationError("battery.cycle_count cannot be negative", detail={"field": "battery.cycle_count"})
    if not record.status:
        raise ValidationError("status is required", detail={"field": "status"})
