"""Data containers shared by the device model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class ErrorInfo:
    """Device-reported error, either read from error_code or synthesized."""

    code: int | str
    message: str


CHARGING_ERROR = ErrorInfo(code="charging-error", message="Error during charging")
CHARGER_OFFLINE = ErrorInfo(code="charger-offline", message="Charger is offline")


@dataclass(frozen=True)
class ChangeEvent:
    """A single property change produced during one fetch cycle."""

    name: str
    new_value: Any
    old_value: Any


@dataclass
class VacuumSignals:
    """Observable values derived from the latest raw status."""

    charging: bool = False
    cleaning: bool = False
    error: ErrorInfo | None = None
    fan_speed: int | None = None


@dataclass
class CleaningHistory:
    """Summary of past cleaning runs."""

    count: int
    days: list[datetime] = field(default_factory=list)


@dataclass
class CleaningRecord:
    """One cleaning run from get_clean_record."""

    start: datetime
    end: datetime
    duration: int  # seconds
    area: float  # m2
    complete: bool


@dataclass
class DeviceModelInfo:
    """Firmware and hardware identity from miIO.info."""

    fw: str | None = None
    hw: str | None = None
    mac: str | None = None
    life: int | None = None
    model: str | None = None


@dataclass
class ZoneCleanResult:
    """Opaque serial returned by zone and navigation calls."""

    serial: Any
