"""Diagnostic Repository
=====================

Maps between :class:`DiagnosticRecord` and rows of the ``diagnostics`` table.
Unset optional descriptors are written as NULL and read back as ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from app.domain.diagnostic import (
    BatteryInfo,
    CPUInfo,
    DiagnosticRecord,
    DiagnosticStatistics,
    RAMInfo,
    StorageInfo,
    SystemInfo,
)
from app.domain.exceptions import NotFoundError, StorageError
from app.utils.time import coerce_datetime, to_storage, utc_now
from infrastructure.database.ops.diagnostics import DiagnosticOperations


def _to_row(record: DiagnosticRecord, created_at: str) -> dict[str, Any]:
    system, cpu, ram, storage, battery = record.system_info, record.cpu, record.ram, record.storage, record.battery
    return {
        "machine_name": system.machine_name,
        "serial_number": system.serial_number,
        "model": system.model,
        "os_version": system.os_version,
        "macos_version": system.macos_version,
        "cpu_model": cpu.model,
        "cpu_cores": cpu.cores,
        "cpu_frequency": cpu.frequency,
        "cpu_temperature": cpu.temperature,
        "ram_total": ram.total,
        "ram_used": ram.used,
        "ram_available": ram.available,
        "ram_type": ram.type,
        "storage_type": storage.type,
        "storage_capacity": storage.capacity,
        "storage_used": storage.used,
        "storage_available": storage.available,
        "storage_health": storage.health,
        "storage_device_name": storage.device_name,
        "battery_cycle_count": battery.cycle_count,
        "battery_health": battery.health,
        "battery_capacity": battery.capacity,
        "battery_max_capacity": battery.max_capacity,
        "battery_condition": battery.condition,
        "battery_is_charging": battery.is_charging,
        "battery_power_adapter": battery.power_adapter,
        "status": record.status,
        "duration": record.duration,
        "timestamp": to_storage(record.timestamp),
        "created_at": created_at,
    }


def _parse_timestamp(value: Any, column: str, record_id: Any) -> datetime:
    parsed = coerce_datetime(value)
    if parsed is None:
        raise StorageError(f"Unreadable {column} on diagnostic {record_id}")
    return parsed


def _from_row(row: dict[str, Any]) -> DiagnosticRecord:
    return DiagnosticRecord(
        id=row["id"],
        system_info=SystemInfo(
            machine_name=row["machine_name"],
            serial_number=row["serial_number"],
            model=row["model"],
            os_version=row["os_version"],
            macos_version=row["macos_version"],
        ),
        cpu=CPUInfo(
            model=row["cpu_model"],
            cores=row["cpu_cores"],
            frequency=row["cpu_frequency"],
            temperature=row["cpu_temperature"],
        ),
        ram=RAMInfo(
            total=row["ram_total"],
            used=row["ram_used"],
            available=row["ram_available"],
            type=row["ram_type"],
        ),
        storage=StorageInfo(
            type=row["storage_type"],
            capacity=row["storage_capacity"],
            used=row["storage_used"],
            available=row["storage_available"],
            health=row["storage_health"],
            device_name=row["storage_device_name"],
        ),
        battery=BatteryInfo(
            cycle_count=row["battery_cycle_count"],
            health=row["battery_health"],
            capacity=row["battery_capacity"],
            is_charging=bool(row["battery_is_charging"]),
            max_capacity=row["battery_max_capacity"],
            condition=row["battery_condition"],
            power_adapter=row["battery_power_adapter"],
        ),
        status=row["status"],
        duration=float(row["duration"]),
        timestamp=_parse_timestamp(row["timestamp"], "timestamp", row["id"]),
        created_at=_parse_timestamp(row["created_at"], "created_at", row["id"]),
    )


@dataclass(frozen=True)
class DiagnosticRepository:
    _backend: DiagnosticOperations

    def create(self, record: DiagnosticRecord) -> DiagnosticRecord:
        """Persist a record and return it with its assigned id and created_at."""
        created_at = utc_now()
        record_id = self._backend.insert_diagnostic(_to_row(record, to_storage(created_at)))
        return record.persisted(record_id, created_at)

    def get(self, record_id: int) -> DiagnosticRecord | None:
        row = self._backend.get_diagnostic(record_id)
        return _from_row(row) if row else None

    def get_by_id(self, record_id: int) -> DiagnosticRecord:
        record = self.get(record_id)
        if record is None:
            raise NotFoundError(f"Diagnostic {record_id} not found", detail={"id": record_id})
        return record

    def list_all(self, limit: int = 0) -> list[DiagnosticRecord]:
        return [_from_row(row) for row in self._backend.get_diagnostics(limit)]

    def list_by_serial(self, serial_number: str) -> list[DiagnosticRecord]:
        return [_from_row(row) for row in self._backend.get_diagnostics_by_serial(serial_number)]

    def statistics(self) -> DiagnosticStatistics:
        raw = self._backend.get_diagnostic_statistics()
        last = raw["last_created_at"]
        return DiagnosticStatistics(
            total_diagnostics=raw["total"],
            unique_machines=raw["unique_machines"],
            status_distribution=raw["by_status"],
            last_diagnostic=coerce_datetime(last) if last is not None else None,
        )
