from datetime import datetime, timezone

import pytest

from app.domain.exceptions import FormatError
from app.schemas.diagnostics import DiagnosticPayload, LegacyClientReport
from app.services.normalizer import (
    decode_payload,
    format_gigabytes,
    format_percentage,
    normalize_payload,
    translate_legacy,
)

RECEIVED_AT = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)


def test_format_helpers():
    assert format_gigabytes(16) == "16.00 GB"
    assert format_gigabytes(256.5) == "256.50 GB"
    assert format_gigabytes(-2) == "-2.00 GB"
    assert format_percentage(85) == "85%"


def test_shape_is_chosen_by_system_info_key(canonical_payload, legacy_payload):
    assert isinstance(decode_payload(canonical_payload), DiagnosticPayload)
    assert isinstance(decode_payload(legacy_payload), LegacyClientReport)


def test_canonical_payload_is_taken_as_is(canonical_payload):
    record = normalize_payload(canonical_payload, received_at=RECEIVED_AT)

    assert record.system_info.machine_name == "MacBook-Pro-de-Lea"
    assert record.system_info.macos_version == "14.2.1"
    assert record.cpu.cores == 8
    assert record.cpu.temperature is None
    assert record.ram.total == "16.00 GB"
    assert record.storage.type == "SSD"
    assert record.battery.is_charging is True
    assert record.status == "success"
    assert record.duration == pytest.approx(12.4)
    assert record.timestamp == datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
    assert record.id is None
    assert record.created_at is None


def test_canonical_payload_without_timestamp_uses_receipt_time(make_canonical_payload):
    payload = make_canonical_payload()
    del payload["timestamp"]

    record = normalize_payload(payload, received_at=RECEIVED_AT)

    assert record.timestamp == RECEIVED_AT


def test_canonical_unknown_fields_are_ignored(make_canonical_payload):
    payload = make_canonical_payload(extra_field="x", cpu={"vendor": "Intel"})

    record = normalize_payload(payload, received_at=RECEIVED_AT)

    assert record.cpu.model == "Intel Core i7"


def test_legacy_report_is_translated(legacy_payload):
    record = normalize_payload(legacy_payload, received_at=RECEIVED_AT)

    assert record.system_info.machine_name == "iMac-Atelier"
    assert record.system_info.serial_number == "LEGACY0001"
    assert record.system_info.model == "Unknown"
    assert record.system_info.os_version == "macOS"
    assert record.system_info.macos_version is None
    assert record.cpu.model == "Apple M1"
    assert record.cpu.frequency == "N/A"
    assert record.ram.total == "16.00 GB"
    assert record.ram.used == "4.00 GB"
    assert record.ram.available == "12.00 GB"
    assert record.storage.type == "SSD"
    assert record.storage.capacity == "256.50 GB"
    assert record.storage.used == "100.25 GB"
    assert record.storage.available == "156.25 GB"
    assert record.battery.capacity == "85%"
    assert record.battery.health == "Normal"
    assert record.battery.cycle_count == 37
    assert record.battery.is_charging is False
    assert record.status == "success"
    assert record.duration == pytest.approx(3.5)
    assert record.timestamp == RECEIVED_AT


@pytest.mark.parametrize(
    ("legacy_status", "expected"),
    [("completed", "success"), ("failed", "failed"), ("running", "partial"), ("", "partial")],
)
def test_legacy_status_mapping(make_legacy_payload, legacy_status, expected):
    report = LegacyClientReport.model_validate(make_legacy_payload(status=legacy_status))

    assert translate_legacy(report, received_at=RECEIVED_AT).status == expected


def test_legacy_negative_available_is_preserved(make_legacy_payload):
    record = normalize_payload(make_legacy_payload(ram_total_gb=8, ram_used_gb=10), received_at=RECEIVED_AT)

    assert record.ram.available == "-2.00 GB"


def test_legacy_missing_fields_default_to_zero_values():
    record = normalize_payload({"machine_name": "only-name"}, received_at=RECEIVED_AT)

    assert record.system_info.serial_number == ""
    assert record.cpu.cores == 0
    assert record.ram.total == "0.00 GB"
    assert record.battery.capacity == "0%"
    assert record.status == "partial"


@pytest.mark.parametrize("body", [[1, 2, 3], "text", 42, None])
def test_non_object_body_is_a_format_error(body):
    with pytest.raises(FormatError):
        normalize_payload(body)


def test_wrong_json_type_is_a_format_error(make_legacy_payload):
    with pytest.raises(FormatError) as exc_info:
        normalize_payload(make_legacy_payload(cpu_cores="eight"))

    assert "cpu_cores" in str(exc_info.value)
    assert exc_info.value.detail == {"shape": "legacy"}


def test_canonical_wrong_nested_type_is_a_format_error(make_canonical_payload):
    with pytest.raises(FormatError) as exc_info:
        normalize_payload(make_canonical_payload(battery={"cycle_count": "212"}))

    assert exc_info.value.detail == {"shape": "standard"}


def test_canonical_missing_nested_object_is_a_format_error(make_canonical_payload):
    payload = make_canonical_payload()
    del payload["battery"]

    with pytest.raises(FormatError):
        normalize_payload(payload)


@pytest.mark.parametrize(
    "overrides",
    [
        {"cpu": {"cores": 10**20}},
        {"battery": {"cycle_count": -(10**20)}},
    ],
)
def test_integers_beyond_64_bits_are_a_format_error(make_canonical_payload, overrides):
    with pytest.raises(FormatError):
        normalize_payload(make_canonical_payload(**overrides))


def test_legacy_integer_beyond_64_bits_is_a_format_error(make_legacy_payload):
    with pytest.raises(FormatError, match="battery_percentage"):
        normalize_payload(make_legacy_payload(battery_percentage=2**63))


def test_largest_storable_integer_is_accepted(make_canonical_payload):
    record = normalize_payload(make_canonical_payload(cpu={"cores": 2**63 - 1}), received_at=RECEIVED_AT)

    assert record.cpu.cores == 2**63 - 1


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
@pytest.mark.parametrize("field", ["test_duration_seconds", "ram_total_gb", "storage_used_gb"])
def test_non_finite_legacy_numbers_are_a_format_error(make_legacy_payload, field, value):
    with pytest.raises(FormatError, match=field):
        normalize_payload(make_legacy_payload(**{field: value}))


def test_non_finite_canonical_duration_is_a_format_error(make_canonical_payload):
    with pytest.raises(FormatError, match="duration"):
        normalize_payload(make_canonical_payload(duration=float("nan")))


def test_timestamp_that_cannot_be_expressed_in_utc_is_a_format_error(make_canonical_payload):
    with pytest.raises(FormatError, match="timestamp"):
        normalize_payload(make_canonical_payload(timestamp="0001-01-01T00:00:00+05:00"))


def test_offset_timestamp_is_converted_to_utc(make_canonical_payload):
    record = normalize_payload(make_canonical_payload(timestamp="2026-03-01T11:30:00+02:00"))

    assert record.timestamp == datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
    assert record.timestamp.tzinfo == timezone.utc


def test_null_scalars_fall_back_to_zero_values(make_canonical_payload, make_legacy_payload):
    canonical = normalize_payload(
        make_canonical_payload(system_info={"machine_name": None, "macos_version": None}, cpu={"cores": None}),
        received_at=RECEIVED_AT,
    )
    assert canonical.system_info.machine_name == ""
    assert canonical.system_info.macos_version is None
    assert canonical.cpu.cores == 0

    legacy = normalize_payload(make_legacy_payload(serial_number=None, status=None), received_at=RECEIVED_AT)
    assert legacy.system_info.serial_number == ""
    assert legacy.status == "partial"


def test_null_nested_object_is_a_format_error(make_canonical_payload):
    with pytest.raises(FormatError):
        normalize_payload(make_canonical_payload(battery=None))
