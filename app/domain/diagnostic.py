"""
Diagnostic Domain Objects
=========================
Immutable records describing one hardware diagnostic run of a client machine.

Size values (``"16.00 GB"``) are free-form descriptors and are kept as text.
Optional descriptors are ``None`` when the client did not report them and
are omitted from ``to_dict()`` output rather than emitted as empty strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any


def _without_unset(values: dict[str, Any], optional: tuple[str, ...]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if not (key in optional and value is None)}


@dataclass(frozen=True)
class SystemInfo:
    machine_name: str
    serial_number: str
    model: str
    os_version: str
    macos_version: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _without_unset(
            {
                "machine_name": self.machine_name,
                "serial_number": self.serial_number,
                "model": self.model,
                "os_version": self.os_version,
                "macos_version": self.macos_version,
            },
            ("macos_version",),
        )


@dataclass(frozen=True)
class CPUInfo:
    model: str
    cores: int
    frequency: str
    temperature: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _without_unset(
            {
                "model": self.model,
                "cores": self.cores,
                "frequency": self.frequency,
                "temperature": self.temperature,
            },
            ("temperature",),
        )


@dataclass(frozen=True)
class RAMInfo:
    total: str
    used: str
    available: str
    type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _without_unset(
            {"total": self.total, "used": self.used, "available": self.available, "type": self.type},
            ("type",),
        )


@dataclass(frozen=True)
class StorageInfo:
    type: str  # SSD, HDD or free text
    capacity: str
    used: str
    available: str
    health: str | None = None
    device_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _without_unset(
            {
                "type": self.type,
                "capacity": self.capacity,
                "used": self.used,
                "available": self.available,
                "health": self.health,
                "device_name": self.device_name,
            },
            ("health", "device_name"),
        )


@dataclass(frozen=True)
class BatteryInfo:
    cycle_count: int
    health: str
    capacity: str
    is_charging: bool = False
    max_capacity: str | None = None
    condition: str | None = None
    power_adapter: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _without_unset(
            {
                "cycle_count": self.cycle_count,
                "health": self.health,
                "capacity": self.capacity,
                "max_capacity": self.max_capacity,
                "condition": self.condition,
                "is_charging": self.is_charging,
                "power_adapter": self.power_adapter,
            },
            ("max_capacity", "condition", "power_adapter"),
        )


@dataclass(frozen=True)
class DiagnosticRecord:
    """
    Canonical diagnostic of one machine.

    ``id`` and ``created_at`` are ``None`` until the record has been
    persisted; both are assigned by the storage layer, never by the client.
    """

    system_info: SystemInfo
    cpu: CPUInfo
    ram: RAMInfo
    storage: StorageInfo
    battery: BatteryInfo
    status: str  # success, partial, failed (not enforced)
    duration: float  # seconds
    timestamp: datetime
    id: int | None = None
    created_at: datetime | None = None

    @property
    def serial_number(self) -> str:
        return self.system_info.serial_number

    def persisted(self, record_id: int, created_at: datetime) -> DiagnosticRecord:
        """Return a copy carrying the identity assigned at insertion."""
        return replace(self, id=record_id, created_at=created_at)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the nested JSON representation."""
        return {
            "id": self.id,
            "system_info": self.system_info.to_dict(),
            "cpu": self.cpu.to_dict(),
            "ram": self.ram.to_dict(),
            "storage": self.storage.to_dict(),
            "battery": self.battery.to_dict(),
            "status": self.status,
            "duration": self.duration,
            "timestamp": self.timestamp.isoformat(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class DiagnosticStatistics:
    """Aggregate view over every stored diagnostic."""

    total_diagnostics: int = 0
    unique_machines: int = 0
    status_distribution: dict[str, int] = field(default_factory=dict)
    last_diagnostic: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "total_diagnostics": self.total_diagnostics,
            "unique_machines": self.unique_machines,
            "status_distribution": dict(self.status_distribution),
        }
        if self.last_diagnostic is not None:
            result["last_diagnostic"] = self.last_diagnostic.isoformat()
        return result
