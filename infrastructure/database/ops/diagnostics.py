from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from app.domain.exceptions import StorageError

logger = logging.getLogger(__name__)

# Insert order; ``id`` comes from AUTOINCREMENT.
DIAGNOSTIC_COLUMNS = (
    "machine_name",
    "serial_number",
    "model",
    "os_version",
    "macos_version",
    "cpu_model",
    "cpu_cores",
    "cpu_frequency",
    "cpu_temperature",
    "ram_total",
    "ram_used",
    "ram_available",
    "ram_type",
    "storage_type",
    "storage_capacity",
    "storage_used",
    "storage_available",
    "storage_health",
    "storage_device_name",
    "battery_cycle_count",
    "battery_health",
    "battery_capacity",
    "battery_max_capacity",
    "battery_condition",
    "battery_is_charging",
    "battery_power_adapter",
    "status",
    "duration",
    "timestamp",
    "created_at",
)

DIAGNOSTICS_SCHEMA = """
    CREATE TABLE IF NOT EXISTS diagnostics (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        machine_name TEXT NOT NULL,
        serial_number TEXT NOT NULL,
        model TEXT NOT NULL,
        os_version TEXT NOT NULL,
        macos_version TEXT,

        cpu_model TEXT NOT NULL,
        cpu_cores INTEGER NOT NULL,
        cpu_frequency TEXT NOT NULL,
        cpu_temperature TEXT,

        ram_total TEXT NOT NULL,
        ram_used TEXT NOT NULL,
        ram_available TEXT NOT NULL,
        ram_type TEXT,

        storage_type TEXT NOT NULL,
        storage_capacity TEXT NOT NULL,
        storage_used TEXT NOT NULL,
        storage_available TEXT NOT NULL,
        storage_health TEXT,
        storage_device_name TEXT,

        battery_cycle_count INTEGER NOT NULL,
        battery_health TEXT NOT NULL,
        battery_capacity TEXT NOT NULL,
        battery_max_capacity TEXT,
        battery_condition TEXT,
        battery_is_charging BOOLEAN NOT NULL,
        battery_power_adapter TEXT,

        status TEXT NOT NULL,
        duration REAL NOT NULL,
        timestamp DATETIME NOT NULL,
        created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
    );

    CREATE INDEX IF NOT EXISTS idx_serial_number ON diagnostics(serial_number);
    CREATE INDEX IF NOT EXISTS idx_created_at ON diagnostics(created_at);
    CREATE INDEX IF NOT EXISTS idx_status ON diagnostics(status);
"""

# Newest first; ids break ties between rows written in the same microsecond.
_NEWEST_FIRST = "ORDER BY created_at DESC, id DESC"


class DiagnosticOperations:
    """Database operations for the diagnostics table."""

    def create_diagnostics_table(self) -> None:
        try:
            with self.connection() as db:
                db.executescript(DIAGNOSTICS_SCHEMA)
        except sqlite3.Error as exc:
            logger.error("Failed to create diagnostics table: %s", exc)
            raise StorageError("Failed to initialise diagnostics storage") from exc

    def insert_diagnostic(self, row: Dict[str, Any]) -> int:
        columns = ", ".join(DIAGNOSTIC_COLUMNS)
        placeholders = ", ".join("?" for _ in DIAGNOSTIC_COLUMNS)
        try:
            with self.connection() as db:
                cur = db.execute(
                    f"INSERT INTO diagnostics ({columns}) VALUES ({placeholders})",
                    tuple(row.get(column) for column in DIAGNOSTIC_COLUMNS),
                )
                return int(cur.lastrowid)
        except (sqlite3.Error, OverflowError) as exc:
            logger.error("insert_diagnostic failed for serial %s: %s", row.get("serial_number"), exc)
            raise StorageError("Failed to save diagnostic") from exc

    def get_diagnostics(self, limit: int = 0) -> List[Dict[str, Any]]:
        query = f"SELECT * FROM diagnostics {_NEWEST_FIRST}"
        params: List[Any] = []
        if limit > 0:
            query += " LIMIT ?"
            params.append(limit)
        return self._fetch_all(query, params, "get_diagnostics")

    def get_diagnostic(self, diagnostic_id: int) -> Optional[Dict[str, Any]]:
        try:
            db = self.get_db()
            row = db.execute("SELECT * FROM diagnostics WHERE id = ?", (diagnostic_id,)).fetchone()
            return dict(row) if row else None
        except sqlite3.Error as exc:
            logger.error("get_diagnostic failed for id %s: %s", diagnostic_id, exc)
            raise StorageError("Failed to load diagnostic") from exc

    def get_diagnostics_by_serial(self, serial_number: str) -> List[Dict[str, Any]]:
        return self._fetch_all(
            f"SELECT * FROM diagnostics WHERE serial_number = ? {_NEWEST_FIRST}",
            [serial_number],
            "get_diagnostics_by_serial",
        )

    def get_diagnostic_statistics(self) -> Dict[str, Any]:
        try:
            db = self.get_db()
            total = db.execute("SELECT COUNT(*) FROM diagnostics").fetchone()[0]
            unique_machines = db.execute("SELECT COUNT(DISTINCT serial_number) FROM diagnostics").fetchone()[0]
            cursor = db.execute("SELECT status, COUNT(*) AS count FROM diagnostics GROUP BY status")
            by_status = {row[0]: row[1] for row in cursor.fetchall()}
            last_created = db.execute("SELECT MAX(created_at) FROM diagnostics").fetchone()[0]
            return {
                "total": total,
                "unique_machines": unique_machines,
                "by_status": by_status,
                "last_created_at": last_created,
            }
        except sqlite3.Error as exc:
            logger.error("get_diagnostic_statistics failed: %s", exc)
            raise StorageError("Failed to compute diagnostic statistics") from exc

    def _fetch_all(self, query: str, params: List[Any], operation: str) -> List[Dict[str, Any]]:
        try:
            db = self.get_db()
            return [dict(r) for r in db.execute(query, params).fetchall()]
        except sqlite3.Error as exc:
            logger.error("%s failed: %s", operation, exc)
            raise StorageError("Failed to load diagnostics") from exc
