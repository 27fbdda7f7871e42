"""Test fixtures and configuration for miiovac tests."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from miiovac.devices import VacuumDevice


def _build_transport(responses: dict[str, Any]) -> AsyncMock:
    """Build a transport mock answering each method from ``responses``.

    A value that is an exception instance is raised instead of returned; a
    callable is called with the params.
    """

    async def send(method, params):
        response = responses[method]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(params)
        return response

    transport = AsyncMock()
    transport.send = AsyncMock(side_effect=send)
    return transport


@pytest.fixture
def status_record() -> dict[str, Any]:
    """get_status record of a docked, charging vacuum."""
    return {
        "battery": 80,
        "clean_area": 140000000,
        "clean_time": 1510,
        "dnd_enabled": 0,
        "error_code": 0,
        "fan_power": 60,
        "in_cleaning": 0,
        "map_present": 1,
        "msg_seq": 52,
        "msg_ver": 2,
        "state": 8,
    }


@pytest.fixture
def consumable_record() -> dict[str, Any]:
    """get_consumable record."""
    return {
        "main_brush_work_time": 32400,
        "side_brush_work_time": 32400,
        "filter_work_time": 32400,
        "sensor_dirty_time": 3600,
    }


@pytest.fixture
def responses(status_record, consumable_record) -> dict[str, Any]:
    """Default device responses, tests adjust entries as needed."""
    return {
        "get_status": [status_record],
        "get_consumable": [consumable_record],
        "app_start": 0,
        "app_pause": ["ok"],
        "app_stop": ["ok"],
        "app_charge": 0,
        "app_spot": ["ok"],
        "set_custom_mode": ["ok"],
    }


@pytest.fixture
def transport(responses) -> AsyncMock:
    return _build_transport(responses)


@pytest.fixture
def make_transport():
    """Factory for transports answering from a custom responses mapping."""
    return _build_transport


@pytest.fixture
def vacuum(transport) -> VacuumDevice:
    """Vacuum model with immediate refreshes and a short call timeout."""
    return VacuumDevice(transport, {"refresh_delay": 0, "call_timeout": 1.0})


@pytest.fixture
def temp_config_file(tmp_path):
    """Create a temporary config file for testing."""
    config_content = """
vacuum:
  monitor_interval: 30
  refresh_delay: 2.5
logging:
  level: DEBUG
"""
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content)
    return config_file
