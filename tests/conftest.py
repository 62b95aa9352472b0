"""
Pytest configuration and shared fixtures for the plant monitor tests.
"""

import pytest

from config import SEED_PLANTS
from device import NetworkFailure
from models import DeviceReading, DeviceStatus, WifiResult
from store import StateStore


class FakeDevice:
    """Stands in for DeviceClient; returns canned payloads or raises"""

    def __init__(self, readings=None, wifi_configured=True, ssid="greenhouse"):
        self.readings = readings or []
        self.status_result = DeviceStatus(wifi_configured=wifi_configured, ssid=ssid)
        self.wifi_result = WifiResult(success=True, message="ok")
        self.error = None
        self.calls = 0
        self.saved = []
        self.closed = False

    def status(self):
        if self.error:
            raise self.error
        return self.status_result

    def plants(self):
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.readings)

    def save_wifi(self, ssid, password):
        if self.error:
            raise self.error
        self.saved.append((ssid, password))
        return self.wifi_result

    def close(self):
        self.closed = True


@pytest.fixture
def store():
    return StateStore(SEED_PLANTS, stale_after=15.0)


@pytest.fixture
def sample_reading():
    """The reading from the dry-plant example: 25% moisture, shared 22.5°C / 55%"""
    return DeviceReading.model_validate(
        {"temperature": 22.5, "humidity": 55, "soilMoisture": 25, "soilRaw": 410, "status": "critical"}
    )


@pytest.fixture
def fake_device(sample_reading):
    return FakeDevice(readings=[sample_reading])


@pytest.fixture
def offline_device():
    device = FakeDevice(wifi_configured=False)
    device.error = NetworkFailure("connection refused")
    return device
