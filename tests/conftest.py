"""
Shared test fixtures for the diagnostic backend test suite.

Provides:
- In-memory SQLite database with the diagnostics table created
- Repository and service instances wired to the test database
- Payload factories for both accepted submission shapes

Usage:
    def test_example(diagnostic_repo, canonical_payload):
        record = diagnostic_repo.create(normalize_payload(canonical_payload))
        assert record.id is not None
"""

from __future__ import annotations

import copy
import logging
from typing import Any

import pytest

from app.services.diagnostic_service import DiagnosticService
from infrastructure.database.repositories.diagnostics import DiagnosticRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler

# ---------------------------------------------------------------------------
# Logging: keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("infrastructure").setLevel(logging.WARNING)
logging.getLogger("app").setLevel(logging.WARNING)


_CANONICAL_PAYLOAD: dict[str, Any] = {
    "system_info": {
        "machine_name": "MacBook-Pro-de-Lea",
        "serial_number": "C02XK1ZZJG5H",
        "model": "MacBookPro16,1",
        "os_version": "macOS",
        "macos_version": "14.2.1",
    },
    "cpu": {"model": "Intel Core i7", "cores": 8, "frequency": "2.6 GHz"},
    "ram": {"total": "16.00 GB", "used": "9.20 GB", "available": "6.80 GB"},
    "storage": {"type": "SSD", "capacity": "512.00 GB", "used": "301.00 GB", "available": "211.00 GB"},
    "battery": {"cycle_count": 212, "health": "Good", "capacity": "91%", "is_charging": True},
    "status": "success",
    "duration": 12.4,
    "timestamp": "2026-03-01T09:30:00Z",
}

_LEGACY_PAYLOAD: dict[str, Any] = {
    "machine_name": "iMac-Atelier",
    "serial_number": "LEGACY0001",
    "cpu_model": "Apple M1",
    "cpu_cores": 8,
    "ram_total_gb": 16,
    "ram_used_gb": 4,
    "storage_total_gb": 256.5,
    "storage_used_gb": 100.25,
    "battery_health": "Normal",
    "battery_cycle_count": 37,
    "battery_percentage": 85,
    "test_duration_seconds": 3.5,
    "status": "completed",
}


# ========================== Payload Factories ==============================


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    result = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _merge(result[key], value)
        else:
            result[key] = value
    return result


@pytest.fixture()
def make_canonical_payload():
    """Factory for nested submissions; nested overrides are merged."""

    def _factory(**overrides: Any) -> dict[str, Any]:
        return _merge(_CANONICAL_PAYLOAD, overrides)

    return _factory


@pytest.fixture()
def make_legacy_payload():
    """Factory for flat submissions from the older desktop client."""

    def _factory(**overrides: Any) -> dict[str, Any]:
        return _merge(_LEGACY_PAYLOAD, overrides)

    return _factory


@pytest.fixture()
def canonical_payload(make_canonical_payload):
    return make_canonical_payload()


@pytest.fixture()
def legacy_payload(make_legacy_payload):
    return make_legacy_payload()


# ========================== Database Fixtures ==============================


@pytest.fixture()
def db_handler():
    """In-memory SQLite database with all tables created.

    Each test gets a fresh database: no cross-test contamination.
    """
    handler = SQLiteDatabaseHandler(":memory:")
    handler.create_tables()
    yield handler
    handler.close_all()


@pytest.fixture()
def db_connection(db_handler):
    """Raw sqlite3 connection for direct SQL in tests."""
    with db_handler.connection() as conn:
        yield conn


# ========================== Repository / Service Fixtures ==================


@pytest.fixture()
def diagnostic_repo(db_handler):
    """DiagnosticRepository backed by the in-memory DB."""
    return DiagnosticRepository(db_handler)


@pytest.fixture()
def diagnostic_service(diagnostic_repo):
    return DiagnosticService(diagnostic_repo)
