import dataclasses
import sqlite3
from datetime import datetime, timezone

import pytest

from app.domain.exceptions import NotFoundError, StorageError
from app.services.normalizer import normalize_payload
from infrastructure.database.repositories import DiagnosticRepository, DiagnosticStore, ReadRepository, WriteRepository


def _store(repo, payload):
    return repo.create(normalize_payload(payload))


def test_create_assigns_identity_and_round_trips(diagnostic_repo, canonical_payload):
    record = normalize_payload(canonical_payload)

    stored = diagnostic_repo.create(record)

    assert stored.id is not None and stored.id > 0
    assert stored.created_at is not None
    assert stored.created_at.tzinfo is not None

    fetched = diagnostic_repo.get_by_id(stored.id)
    assert fetched == stored
    assert fetched.timestamp == datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


def test_unset_optional_fields_come_back_as_none(diagnostic_repo, canonical_payload):
    stored = _store(diagnostic_repo, canonical_payload)

    fetched = diagnostic_repo.get_by_id(stored.id)
    assert fetched.cpu.temperature is None
    assert fetched.storage.health is None
    assert fetched.battery.power_adapter is None
    assert "temperature" not in fetched.to_dict()["cpu"]


def test_ids_are_distinct_and_increasing(diagnostic_repo, canonical_payload):
    ids = [_store(diagnostic_repo, canonical_payload).id for _ in range(3)]

    assert ids == sorted(ids)
    assert len(set(ids)) == 3


def test_list_all_empty_is_empty_list(diagnostic_repo):
    assert diagnostic_repo.list_all() == []


def test_list_all_is_newest_first_and_honours_limit(diagnostic_repo, make_canonical_payload):
    stored = [_store(diagnostic_repo, make_canonical_payload(duration=float(i))) for i in range(5)]

    everything = diagnostic_repo.list_all()
    assert [r.id for r in everything] == [r.id for r in reversed(stored)]

    latest_two = diagnostic_repo.list_all(2)
    assert [r.id for r in latest_two] == [stored[4].id, stored[3].id]

    assert len(diagnostic_repo.list_all(0)) == 5
    assert len(diagnostic_repo.list_all(-3)) == 5


def test_list_by_serial_filters_and_orders(diagnostic_repo, make_canonical_payload):
    first = _store(diagnostic_repo, make_canonical_payload())
    _store(diagnostic_repo, make_canonical_payload(system_info={"serial_number": "OTHER"}))
    second = _store(diagnostic_repo, make_canonical_payload())

    history = diagnostic_repo.list_by_serial("C02XK1ZZJG5H")

    assert [r.id for r in history] == [second.id, first.id]
    assert diagnostic_repo.list_by_serial("UNKNOWN") == []


def test_statistics_on_empty_store(diagnostic_repo):
    stats = diagnostic_repo.statistics()

    assert stats.total_diagnostics == 0
    assert stats.unique_machines == 0
    assert stats.status_distribution == {}
    assert stats.last_diagnostic is None
    assert "last_diagnostic" not in stats.to_dict()


def test_statistics_counts(diagnostic_repo, make_canonical_payload):
    _store(diagnostic_repo, make_canonical_payload())
    _store(diagnostic_repo, make_canonical_payload(status="partial"))
    last = _store(diagnostic_repo, make_canonical_payload(system_info={"serial_number": "SN-2"}))

    stats = diagnostic_repo.statistics()

    assert stats.total_diagnostics == 3
    assert stats.unique_machines == 2
    assert stats.status_distribution == {"success": 2, "partial": 1}
    assert stats.last_diagnostic == last.created_at


def test_get_missing_returns_none_and_get_by_id_raises(diagnostic_repo):
    assert diagnostic_repo.get(42) is None
    with pytest.raises(NotFoundError) as exc_info:
        diagnostic_repo.get_by_id(42)
    assert exc_info.value.http_status == 404


def test_unavailable_store_raises_storage_error(db_handler, canonical_payload):
    repo = DiagnosticRepository(db_handler)
    with db_handler.connection() as db:
        db.execute("DROP TABLE diagnostics")

    with pytest.raises(StorageError):
        repo.create(normalize_payload(canonical_payload))
    with pytest.raises(StorageError):
        repo.list_all()
    with pytest.raises(StorageError):
        repo.statistics()


def test_failed_insert_leaves_no_partial_row(db_handler, diagnostic_repo, canonical_payload):
    with db_handler.connection() as db:
        db.execute(
            "CREATE TRIGGER reject_failed BEFORE INSERT ON diagnostics "
            "WHEN NEW.status = 'failed' BEGIN SELECT RAISE(ABORT, 'rejected'); END"
        )
    canonical_payload["status"] = "failed"

    with pytest.raises(StorageError):
        _store(diagnostic_repo, canonical_payload)

    count = db_handler.get_db().execute("SELECT COUNT(*) FROM diagnostics").fetchone()[0]
    assert count == 0
    assert isinstance(db_handler.get_db(), sqlite3.Connection)


def test_repository_satisfies_store_protocols(diagnostic_repo):
    assert isinstance(diagnostic_repo, ReadRepository)
    assert isinstance(diagnostic_repo, WriteRepository)
    assert isinstance(diagnostic_repo, DiagnosticStore)


OPTIONAL_FIELDS = [
    ("system_info", "macos_version", "14.2.1"),
    ("cpu", "temperature", "61 °C"),
    ("ram", "type", "LPDDR5"),
    ("storage", "health", "Verified"),
    ("storage", "device_name", "APPLE SSD AP0512Q"),
    ("battery", "max_capacity", "97%"),
    ("battery", "condition", "Normal"),
    ("battery", "power_adapter", "96W USB-C"),
]


def _record_with_optionals(record, values):
    parts = {}
    for section, name, value in values:
        current = parts.get(section, getattr(record, section))
        parts[section] = dataclasses.replace(current, **{name: value})
    return dataclasses.replace(record, **parts)


@pytest.fixture()
def bare_record(canonical_payload):
    record = normalize_payload(canonical_payload)
    return _record_with_optionals(record, [(section, name, None) for section, name, _ in OPTIONAL_FIELDS])


@pytest.mark.parametrize(("section", "name", "value"), OPTIONAL_FIELDS)
def test_supplied_optional_field_round_trips(diagnostic_repo, bare_record, section, name, value):
    full = _record_with_optionals(bare_record, OPTIONAL_FIELDS)

    fetched = diagnostic_repo.get_by_id(diagnostic_repo.create(full).id)

    assert getattr(getattr(fetched, section), name) == value
    assert fetched.to_dict()[section][name] == value


@pytest.mark.parametrize(("section", "name", "value"), OPTIONAL_FIELDS)
def test_unset_optional_field_round_trips_as_unset(diagnostic_repo, bare_record, section, name, value):
    fetched = diagnostic_repo.get_by_id(diagnostic_repo.create(bare_record).id)

    assert getattr(getattr(fetched, section), name) is None
    assert name not in fetched.to_dict()[section]


def test_integer_overflow_in_storage_is_a_storage_error(diagnostic_repo, canonical_payload):
    record = normalize_payload(canonical_payload)
    oversized = dataclasses.replace(record, cpu=dataclasses.replace(record.cpu, cores=10**20))

    with pytest.raises(StorageError):
        diagnostic_repo.create(oversized)
    assert diagnostic_repo.list_all() == []
