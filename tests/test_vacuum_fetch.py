"""Tests for loading vacuum properties and the signals derived from them."""

import asyncio
from unittest.mock import MagicMock

import pytest

from miiovac.devices import VacuumDevice
from miiovac.exceptions import DeviceCommunicationError
from miiovac.models import ChangeEvent, ErrorInfo, VacuumSignals


class TestSnapshotFetch:
    """Test the merged get_status / get_consumable fetch."""

    @pytest.mark.asyncio
    async def test_full_fetch_maps_every_declared_property(self, vacuum):
        await vacuum.refresh()

        assert vacuum.properties == {
            "error": None,
            "state": "charging",
            "battery_level": 80,
            "clean_time": 1510,
            "clean_area": 140.0,
            "fan_speed": 60,
            "in_cleaning": 0,
            "main_brush_work_time": 32400,
            "side_brush_work_time": 32400,
            "filter_work_time": 32400,
            "sensor_dirty_time": 3600,
        }

    @pytest.mark.asyncio
    async def test_both_calls_are_issued(self, vacuum, transport):
        await vacuum.refresh(["battery_level"])
        methods = sorted(call.args[0] for call in transport.send.await_args_list)
        assert methods == ["get_consumable", "get_status"]

    @pytest.mark.asyncio
    async def test_status_wins_over_consumables(self, responses, make_transport):
        responses["get_status"] = [{"state": 8, "filter_work_time": 10}]
        responses["get_consumable"] = [{"filter_work_time": 99, "main_brush_work_time": 7}]
        vacuum = VacuumDevice(make_transport(responses))

        values = await vacuum.load_properties(
            ["filter_work_time", "main_brush_work_time", "side_brush_work_time"]
        )

        assert values == {
            "filter_work_time": 10,
            "main_brush_work_time": 7,
            "side_brush_work_time": None,
        }

    @pytest.mark.asyncio
    async def test_undeclared_names_are_requested_raw(self, responses, status_record, make_transport):
        status_record["water_box_mode"] = 204
        vacuum = VacuumDevice(make_transport(responses))

        values = await vacuum.load_properties(["water_box_mode", "fan_speed"])

        assert values == {"water_box_mode": 204, "fan_speed": 60}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failing", ["get_status", "get_consumable"])
    async def test_failed_call_keeps_previous_snapshot(self, responses, failing, make_transport):
        vacuum = VacuumDevice(make_transport(responses))
        await vacuum.refresh()
        before = vacuum.properties

        responses[failing] = ConnectionError("no reply")
        with pytest.raises(DeviceCommunicationError) as exc_info:
            await vacuum.refresh()

        assert exc_info.value.method == failing
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert vacuum.properties == before

    @pytest.mark.asyncio
    async def test_malformed_status_reply_is_a_communication_error(self, responses, make_transport):
        responses["get_status"] = "unknown_method"
        vacuum = VacuumDevice(make_transport(responses))
        with pytest.raises(DeviceCommunicationError):
            await vacuum.refresh()
        assert vacuum.properties == {}

    @pytest.mark.asyncio
    async def test_call_timeout_is_a_communication_error(self):
        async def never_answers(method, params):
            await asyncio.sleep(10)

        transport = MagicMock()
        transport.send = never_answers
        vacuum = VacuumDevice(transport, {"call_timeout": 0.01})

        with pytest.raises(DeviceCommunicationError, match="timed out"):
            await vacuum.get_status()

    @pytest.mark.asyncio
    async def test_concurrent_fetches_apply_in_issue_order(self, consumable_record):
        gate = asyncio.Event()
        status_calls = 0

        async def send(method, params):
            nonlocal status_calls
            if method == "get_consumable":
                return [consumable_record]
            status_calls += 1
            if status_calls == 1:
                await gate.wait()
                return [{"state": 8}]
            return [{"state": 5}]

        transport = MagicMock()
        transport.send = send
        vacuum = VacuumDevice(transport)

        older = asyncio.create_task(vacuum.refresh(["state"]))
        for _ in range(20):
            if status_calls:
                break
            await asyncio.sleep(0)
        assert status_calls == 1

        await vacuum.refresh(["state"])
        assert vacuum.get_property("state") == "cleaning"

        gate.set()
        stale_changes = await older

        assert stale_changes == []
        assert vacuum.get_property("state") == "cleaning"
        assert vacuum.cleaning is True


class TestChangeDispatch:
    """Test change events and listener notification."""

    @pytest.mark.asyncio
    async def test_events_follow_declaration_order(self, vacuum):
        changes = await vacuum.refresh(["fan_speed", "state", "battery_level"])
        assert [event.name for event in changes] == ["state", "battery_level", "fan_speed"]

    @pytest.mark.asyncio
    async def test_unchanged_values_emit_nothing(self, vacuum):
        await vacuum.refresh()
        assert await vacuum.refresh() == []

    @pytest.mark.asyncio
    async def test_property_listeners_receive_events(self, vacuum, status_record):
        received = []

        async def async_listener(event):
            received.append(("async", event))

        vacuum.on_property_change(lambda event: received.append(("sync", event)))
        vacuum.on_property_change(async_listener)
        await vacuum.refresh()

        status_record["battery"] = 81
        received.clear()
        await vacuum.refresh()

        event = ChangeEvent(name="battery_level", new_value=81, old_value=80)
        assert received == [("sync", event), ("async", event)]

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_stop_dispatch(self, vacuum, caplog):
        seen = []

        def broken(event):
            raise RuntimeError("listener bug")

        vacuum.on_property_change(broken)
        vacuum.on_property_change(seen.append)
        await vacuum.refresh(["state"])

        assert [event.name for event in seen] == ["state"]
        assert "listener bug" in caplog.text

    @pytest.mark.asyncio
    async def test_removed_listener_is_not_called(self, vacuum):
        seen = []
        vacuum.on_property_change(seen.append)
        vacuum.remove_listener(seen.append)
        await vacuum.refresh()
        assert seen == []


class TestVacuumSignals:
    """Test signals driven by state, error and fan speed changes."""

    @pytest.mark.asyncio
    async def test_charging_scenario(self, responses, make_transport):
        responses["get_status"] = [{"state": 8, "error_code": 0, "battery": 80}]
        vacuum = VacuumDevice(make_transport(responses))

        await vacuum.refresh()

        assert vacuum.get_property("state") == "charging"
        assert vacuum.signals == VacuumSignals(charging=True, cleaning=False, error=None)
        assert vacuum.battery_level == 80

    @pytest.mark.asyncio
    async def test_charging_error_scenario(self, responses, make_transport):
        responses["get_status"] = [{"state": 9}]
        vacuum = VacuumDevice(make_transport(responses))

        await vacuum.refresh()

        assert vacuum.get_property("state") == "charging-error"
        assert vacuum.error == ErrorInfo(code="charging-error", message="Error during charging")
        assert vacuum.charging is False

    @pytest.mark.asyncio
    async def test_error_state_publishes_mapped_error_code(self, responses, status_record, make_transport):
        status_record.update(state=12, error_code=5)
        vacuum = VacuumDevice(make_transport(responses))

        await vacuum.refresh()
        assert vacuum.error == ErrorInfo(code=5, message="Unknown error 5")

        status_record["error_code"] = 8
        await vacuum.refresh()
        assert vacuum.error == ErrorInfo(code=8, message="Unknown error 8")

        status_record.update(state=8, error_code=0)
        await vacuum.refresh()
        assert vacuum.error is None

    @pytest.mark.asyncio
    async def test_pause_ends_cleaning(self, responses, status_record, make_transport):
        status_record["state"] = 5
        vacuum = VacuumDevice(make_transport(responses))
        await vacuum.refresh()
        assert vacuum.cleaning is True

        status_record["state"] = 10
        await vacuum.refresh()
        assert vacuum.cleaning is False
        assert vacuum.charging is False

    @pytest.mark.asyncio
    async def test_charger_offline(self, responses, status_record, make_transport):
        status_record["state"] = 2
        vacuum = VacuumDevice(make_transport(responses))
        await vacuum.refresh()
        assert vacuum.error == ErrorInfo(code="charger-offline", message="Charger is offline")

    @pytest.mark.asyncio
    async def test_unknown_state_code(self, responses, status_record, make_transport):
        status_record["state"] = 16
        vacuum = VacuumDevice(make_transport(responses))
        await vacuum.refresh()
        assert vacuum.get_property("state") == "unknown-16"
        assert vacuum.signals == VacuumSignals(charging=False, cleaning=False, error=None, fan_speed=60)

    @pytest.mark.asyncio
    async def test_fan_speed_signal_follows_property(self, vacuum, status_record):
        await vacuum.refresh()
        assert vacuum.fan_speed == 60
        status_record["fan_power"] = 77
        await vacuum.refresh(["fan_speed"])
        assert vacuum.fan_speed == 77

    @pytest.mark.asyncio
    async def test_signal_listener_sees_only_changes(self, vacuum, status_record):
        seen = []
        vacuum.on_signal_change(lambda name, value: seen.append((name, value)))

        await vacuum.refresh()
        assert seen == [("charging", True), ("cleaning", False), ("error", None), ("fan_speed", 60)]

        seen.clear()
        status_record["state"] = 5
        await vacuum.refresh()
        assert seen == [("charging", False), ("cleaning", True)]
