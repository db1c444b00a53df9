"""
Diagnostic Schemas
==================

Pydantic models for the two accepted submission shapes and for the
creation response.

Scalars are strictly typed: a number sent where text is expected (or the
reverse) is a decode failure. Scalars that are simply absent fall back to
their zero value so that the validator, not the decoder, reports the
missing business field; JSON null is treated the same way. Integers must
fit a signed 64-bit column, floats must be finite, and a client timestamp
must still be representable once converted to UTC.
"""

from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import (
    AllowInfNan,
    BaseModel,
    ConfigDict,
    Field,
    Strict,
    StrictBool,
    StrictStr,
    field_validator,
    model_validator,
)

from app.utils.time import ensure_utc

# SQLite stores INTEGER as a signed 64-bit value
SQLITE_INT_MAX = 2**63 - 1

WireInt = Annotated[int, Strict(), Field(ge=-SQLITE_INT_MAX - 1, le=SQLITE_INT_MAX)]
WireFloat = Annotated[float, Strict(), AllowInfNan(False)]


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, allow_inf_nan=False)

    @model_validator(mode="before")
    @classmethod
    def _null_is_unset(cls, data: Any) -> Any:
        # JSON null leaves a field at its zero value
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


# ============================================================================
# Canonical (nested) shape
# ============================================================================

class SystemInfoPayload(_WireModel):
    machine_name: StrictStr = ""
    serial_number: StrictStr = ""
    model: StrictStr = ""
    os_version: StrictStr = ""
    macos_version: Optional[StrictStr] = None


class CPUPayload(_WireModel):
    model: StrictStr = ""
    cores: WireInt = 0
    frequency: StrictStr = ""
    temperature: Optional[StrictStr] = None


class RAMPayload(_WireModel):
    total: StrictStr = ""
    used: StrictStr = ""
    available: StrictStr = ""
    type: Optional[StrictStr] = None


class StoragePayload(_WireModel):
    type: StrictStr = ""
    capacity: StrictStr = ""
    used: StrictStr = ""
    available: StrictStr = ""
    health: Optional[StrictStr] = None
    device_name: Optional[StrictStr] = None


class BatteryPayload(_WireModel):
    cycle_count: WireInt = 0
    health: StrictStr = ""
    capacity: StrictStr = ""
    max_capacity: Optional[StrictStr] = None
    condition: Optional[StrictStr] = None
    is_charging: StrictBool = False
    power_adapter: Optional[StrictStr] = None


class DiagnosticPayload(_WireModel):
    """Canonical nested submission; every sub-object is required."""

    system_info: SystemInfoPayload
    cpu: CPUPayload
    ram: RAMPayload
    storage: StoragePayload
    battery: BatteryPayload
    status: StrictStr = ""
    duration: WireFloat = 0.0
    timestamp: Optional[datetime] = Field(default=None, description="Client-reported run time")

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        allow_inf_nan=False,
        json_schema_extra={
            "example": {
                "system_info": {
                    "machine_name": "MacBook-Pro-de-Lea",
                    "serial_number": "C02XK1ZZJG5H",
                    "model": "MacBookPro16,1",
                    "os_version": "macOS",
                    "macos_version": "14.2.1",
                },
                "cpu": {"model": "Intel Core i7", "cores": 8, "frequency": "2.6 GHz"},
                "ram": {"total": "16.00 GB", "used": "9.20 GB", "available": "6.80 GB", "type": "DDR4"},
                "storage": {"type": "SSD", "capacity": "512.00 GB", "used": "301.00 GB", "available": "211.00 GB"},
                "battery": {"cycle_count": 212, "health": "Good", "capacity": "91%", "is_charging": False},
                "status": "success",
                "duration": 12.4,
            }
        },
    )

    @field_validator("timestamp")
    @classmethod
    def _timestamp_in_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        try:
            return ensure_utc(value)
        except OverflowError:
            raise ValueError("timestamp is out of range once converted to UTC") from None


# ============================================================================
# Legacy (flat) shape
# ============================================================================

class LegacyClientReport(_WireModel):
    """Flat submission sent by the older desktop client.

    Quantities are numeric gigabytes and the battery is a charge percentage;
    only exists while the request is being translated.
    """

    machine_name: StrictStr = ""
    serial_number: StrictStr = ""
    cpu_model: StrictStr = ""
    cpu_cores: WireInt = 0
    ram_total_gb: WireFloat = 0.0
    ram_used_gb: WireFloat = 0.0
    storage_total_gb: WireFloat = 0.0
    storage_used_gb: WireFloat = 0.0
    battery_health: StrictStr = ""
    battery_cycle_count: WireInt = 0
    battery_percentage: WireInt = 0
    test_duration_seconds: WireFloat = 0.0
    status: StrictStr = ""


# ============================================================================
# Responses
# ============================================================================

class DiagnosticCreatedResponse(BaseModel):
    """Payload returned after a diagnostic has been stored."""

    id: int = Field(..., description="Assigned diagnostic identity")
    serial_number: str
    status: str
    timestamp: datetime
    created_at: datetime
