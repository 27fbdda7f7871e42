"""Mi Robot Vacuum device model.

This device has no ``get_prop``: its state comes from ``get_status`` and
``get_consumable``, each returning a single record, which are merged before
being mapped through the property schema.
"""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

from ..constants import AREA_DIVISOR, ERROR_CODE_NAMES, STATE_LABELS, Signal, StatusKey
from ..constants import VacuumCommand as Cmd
from ..exceptions import DeviceCommunicationError
from ..models import (
    ChangeEvent,
    CleaningHistory,
    CleaningRecord,
    DeviceModelInfo,
    ErrorInfo,
    VacuumSignals,
    ZoneCleanResult,
)
from ..properties import enum_map, scale
from ..status import derive_status, map_error_code
from .base import MiioDevice

logger = logging.getLogger(__name__)


def _first_record(method: str, result: Any) -> dict[str, Any]:
    """Unwrap the single record returned by get_status / get_consumable."""
    if isinstance(result, list | tuple) and result and isinstance(result[0], dict):
        return result[0]
    raise DeviceCommunicationError(method, f"unexpected reply {result!r}")


def _from_timestamp(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=UTC)


class VacuumDevice(MiioDevice):
    """Client-side model of a Mi Robot Vacuum."""

    def __init__(self, transport: Any, config: dict[str, Any] | None = None):
        super().__init__(transport, config)
        self.refresh_delay = self.config.get("refresh_delay", 1.0)

        self.define_property(StatusKey.ERROR_CODE, "error", map_error_code)
        self.define_property(StatusKey.STATE, "state", enum_map(STATE_LABELS))
        self.define_property(StatusKey.BATTERY, "battery_level")
        self.define_property(StatusKey.CLEAN_TIME, "clean_time")
        self.define_property(StatusKey.CLEAN_AREA, "clean_area", scale(AREA_DIVISOR))
        self.define_property(StatusKey.FAN_POWER, "fan_speed")
        self.define_property(StatusKey.IN_CLEANING)

        # Consumables, wear times in seconds
        self.define_property(StatusKey.MAIN_BRUSH_WORK_TIME)
        self.define_property(StatusKey.SIDE_BRUSH_WORK_TIME)
        self.define_property(StatusKey.FILTER_WORK_TIME)
        self.define_property(StatusKey.SENSOR_DIRTY_TIME)

    # Signals

    @property
    def charging(self) -> bool:
        return self.signal(Signal.CHARGING, False)

    @property
    def cleaning(self) -> bool:
        return self.signal(Signal.CLEANING, False)

    @property
    def error(self) -> ErrorInfo | None:
        return self.signal(Signal.ERROR)

    @property
    def fan_speed(self) -> int | None:
        return self.signal(Signal.FAN_SPEED)

    @property
    def battery_level(self) -> int | None:
        return self.get_property("battery_level")

    @property
    def signals(self) -> VacuumSignals:
        """Return the derived signals as one object."""
        return VacuumSignals(
            charging=self.charging,
            cleaning=self.cleaning,
            error=self.error,
            fan_speed=self.fan_speed,
        )

    def property_updated(self, event: ChangeEvent) -> None:
        if event.name == "state":
            status = derive_status(event.new_value, self.get_property("error"))
            self.update_signal(Signal.CHARGING, status.charging)
            self.update_signal(Signal.CLEANING, status.cleaning)
            if self.update_signal(Signal.ERROR, status.error) and status.error is not None:
                name = ERROR_CODE_NAMES.get(status.error.code, status.error.message)
                logger.warning(f"🧹 Vacuum reports error {status.error.code}: {name}")
        elif event.name == "error" and self.get_property("state") == "error":
            # error_code moved while the state stayed in error
            self.update_signal(Signal.ERROR, event.new_value)
        elif event.name == "fan_speed":
            self.update_signal(Signal.FAN_SPEED, event.new_value)

    # Snapshot fetch

    async def load_properties(self, names: list[str]) -> dict[str, Any]:
        """Load ``names`` from get_status, falling back to get_consumable."""
        raw_keys = [self.schema.to_raw_key(name) for name in names]

        status_result, consumable_result = await asyncio.gather(
            self.call(Cmd.GET_STATUS), self.call(Cmd.GET_CONSUMABLE)
        )
        status = _first_record(Cmd.GET_STATUS, status_result)
        consumables = _first_record(Cmd.GET_CONSUMABLE, consumable_result)

        merged: dict[str, Any] = {}
        for key in raw_keys:
            if key in status:
                merged[key] = status[key]
            else:
                merged[key] = consumables.get(key)
        return self.schema.project(raw_keys, merged)

    # Cleaning lifecycle

    async def activate_cleaning(self) -> Any:
        """Start a cleaning session."""
        return await self.execute(Cmd.START, refresh=["state"], refresh_delay=self.refresh_delay)

    async def pause(self) -> Any:
        """Pause the current cleaning session."""
        return await self.execute(Cmd.PAUSE, refresh=["state"])

    async def deactivate_cleaning(self) -> Any:
        """Stop the current cleaning session."""
        return await self.execute(Cmd.STOP, refresh=["state"], refresh_delay=self.refresh_delay)

    async def activate_charging(self) -> Any:
        """Stop the current cleaning session and return to charge."""
        await self.execute(Cmd.STOP)
        return await self.execute(Cmd.CHARGE, refresh=["state"], refresh_delay=self.refresh_delay)

    async def activate_spot_clean(self) -> Any:
        """Start cleaning the current spot."""
        return await self.execute(Cmd.SPOT, refresh=["state"])

    async def change_fan_speed(self, speed: int) -> Any:
        """Set the power of the fan. Usually 38, 60 or 77."""
        return await self.execute(Cmd.SET_FAN_SPEED, [speed], refresh=["fan_speed"])

    # Zones and navigation

    async def start_clean_zones(self, zones: list[list[int]]) -> ZoneCleanResult:
        """Start cleaning the given zones.

        Each zone is ``[x1, y1, x2, y2, repeats]``, e.g.
        ``[[26234, 26042, 27284, 26642, 1], [26232, 25304, 27282, 25804, 2]]``
        cleans the first zone once and the second one twice.
        """
        return ZoneCleanResult(serial=await self.call(Cmd.ZONED_CLEAN, [zones]))

    async def stop_clean_zones(self) -> ZoneCleanResult:
        return ZoneCleanResult(serial=await self.call(Cmd.STOP_ZONED_CLEAN))

    async def resume_clean_zones(self) -> ZoneCleanResult:
        return ZoneCleanResult(serial=await self.call(Cmd.RESUME_ZONED_CLEAN))

    async def go_to_target(self, x: int, y: int) -> ZoneCleanResult:
        """Drive to a map position."""
        return ZoneCleanResult(serial=await self.call(Cmd.GOTO_TARGET, [x, y]))

    async def find(self) -> None:
        """Make the device give off a sound."""
        await self.call(Cmd.FIND_ME, [""])

    # History

    async def get_history(self) -> CleaningHistory:
        """Get the number of cleaning runs and the days the device has run."""
        result = await self.call(Cmd.CLEAN_SUMMARY)
        return CleaningHistory(count=result[2], days=[_from_timestamp(ts) for ts in result[3]])

    async def get_history_for_day(
        self, day: datetime | int
    ) -> tuple[datetime | int, list[CleaningRecord]]:
        """Get the cleaning runs of one day, as listed by ``get_history``."""
        record = int(day.timestamp()) if isinstance(day, datetime) else day
        result = await self.call(Cmd.CLEAN_RECORD, [record])
        history = [
            CleaningRecord(
                start=_from_timestamp(data[0]),
                end=_from_timestamp(data[1]),
                duration=data[2],
                area=data[3] / AREA_DIVISOR,
                complete=data[5] == 1,
            )
            for data in result
        ]
        return day, history

    async def get_map(self) -> dict[str, Any]:
        return {"map": await self.call(Cmd.GET_MAP)}

    # Identity

    async def get_info(self) -> dict[str, Any]:
        """Get the complete miIO.info record."""
        return await self.call(Cmd.INFO)

    async def get_wifi_info(self) -> dict[str, Any] | None:
        return (await self.get_info()).get("ap")

    async def get_network(self) -> dict[str, Any] | None:
        return (await self.get_info()).get("netif")

    async def get_token(self) -> dict[str, Any]:
        return {"token": (await self.get_info()).get("token")}

    async def get_model_info(self) -> DeviceModelInfo:
        """Get firmware, hardware and model identification."""
        info = await self.get_info()
        return DeviceModelInfo(
            fw=info.get("fw_ver"),
            hw=info.get("hw_ver"),
            mac=info.get("mac"),
            life=info.get("life"),
            model=info.get("model"),
        )

    async def get_serial(self) -> dict[str, Any]:
        result = await self.call(Cmd.SERIAL_NUMBER)
        return {"serial": result[0]["serial_number"]}

    # Raw records

    async def get_status(self) -> dict[str, Any]:
        return _first_record(Cmd.GET_STATUS, await self.call(Cmd.GET_STATUS))

    async def get_consumable(self) -> dict[str, Any]:
        return _first_record(Cmd.GET_CONSUMABLE, await self.call(Cmd.GET_CONSUMABLE))

    # Sound

    async def get_sound_volume(self) -> int:
        """Get the volume value (0-100)."""
        return (await self.call(Cmd.GET_SOUND_VOLUME))[0]

    async def set_volume(self, volume: int) -> Any:
        return await self.call(Cmd.CHANGE_SOUND_VOLUME, [volume])

    async def get_current_sound(self) -> Any:
        return (await self.call(Cmd.GET_CURRENT_SOUND))[0]

    async def test_sound_volume(self) -> Any:
        """Play a test sound at the current volume."""
        return (await self.call(Cmd.TEST_SOUND_VOLUME))[0]
