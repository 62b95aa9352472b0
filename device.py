# device.py
from typing import List

import requests
from pydantic import ValidationError

from models import DeviceReading, DeviceStatus, WifiResult

STATUS_PATH = "/api/status"
PLANTS_PATH = "/api/plants"
SAVE_WIFI_PATH = "/api/savewifi"


class DeviceError(Exception):
    """Anything that went wrong talking to the ESP32"""


class NetworkFailure(DeviceError):
    """Request never completed or came back with a non-2xx status"""


class MalformedResponse(DeviceError):
    """Body was not JSON or did not have the expected shape"""


class DeviceClient:
    """Blocking HTTP client for the plant monitor firmware"""

    def __init__(self, base_url: str, timeout: float = 5.0, session: requests.Session = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            r = self.session.request(method, url, timeout=self.timeout, **kwargs)
            r.raise_for_status()
        except requests.RequestException as e:
            raise NetworkFailure(f"{method} {url} failed: {e}") from e

        try:
            return r.json()
        except ValueError as e:
            raise MalformedResponse(f"{method} {url} returned a non-JSON body") from e

    def status(self) -> DeviceStatus:
        payload = self._request("GET", STATUS_PATH)
        try:
            return DeviceStatus.model_validate(payload)
        except ValidationError as e:
            raise MalformedResponse(f"unexpected status payload: {e}") from e

    def plants(self) -> List[DeviceReading]:
        payload = self._request("GET", PLANTS_PATH)
        if not isinstance(payload, list):
            raise MalformedResponse(f"expected a list of readings, got {type(payload).__name__}")
        # Validate the whole array up front so a bad element rejects the tick as a unit
        try:
            return [DeviceReading.model_validate(item) for item in payload]
        except ValidationError as e:
            raise MalformedResponse(f"unexpected reading in plants payload: {e}") from e

    def save_wifi(self, ssid: str, password: str) -> WifiResult:
        payload = self._request("POST", SAVE_WIFI_PATH, json={"ssid": ssid, "password": password})
        try:
            return WifiResult.model_validate(payload)
        except ValidationError as e:
            raise MalformedResponse(f"unexpected savewifi payload: {e}") from e

    def close(self):
        self.session.close()
