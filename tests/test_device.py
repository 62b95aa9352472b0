from unittest import mock

import pytest
import requests

from device import DeviceClient, MalformedResponse, NetworkFailure


def make_client(payload=None, status_error=None, request_error=None, json_error=None):
    response = mock.Mock()
    response.json.return_value = payload
    if status_error:
        response.raise_for_status.side_effect = status_error
    if json_error:
        response.json.side_effect = json_error

    session = mock.Mock(spec=requests.Session)
    if request_error:
        session.request.side_effect = request_error
    else:
        session.request.return_value = response
    return DeviceClient("http://esp32.local/", timeout=2.5, session=session), session


def test_plants_parses_readings():
    client, session = make_client(
        [
            {"temperature": 22.5, "humidity": 55, "soilMoisture": 25, "soilRaw": 410, "status": "critical"},
            {"temperature": 22.5, "humidity": 55, "soilMoisture": 48.2, "soilRaw": 280},
        ]
    )

    readings = client.plants()

    session.request.assert_called_once_with("GET", "http://esp32.local/api/plants", timeout=2.5)
    assert [r.soil_moisture for r in readings] == [25, 48.2]
    assert readings[0].soil_raw == 410


def test_status():
    client, _ = make_client({"wifiConfigured": True, "ssid": "greenhouse"})
    status = client.status()
    assert status.wifi_configured is True
    assert status.ssid == "greenhouse"


def test_save_wifi_posts_credentials():
    client, session = make_client({"success": False, "message": "Wrong password"})

    result = client.save_wifi("greenhouse", "hunter2")

    session.request.assert_called_once_with(
        "POST",
        "http://esp32.local/api/savewifi",
        timeout=2.5,
        json={"ssid": "greenhouse", "password": "hunter2"},
    )
    assert result.success is False
    assert result.message == "Wrong password"


def test_connection_error_is_network_failure():
    client, _ = make_client(request_error=requests.ConnectionError("refused"))
    with pytest.raises(NetworkFailure):
        client.plants()


def test_http_error_is_network_failure():
    client, _ = make_client([], status_error=requests.HTTPError("500 Server Error"))
    with pytest.raises(NetworkFailure):
        client.plants()


def test_non_json_body_is_malformed():
    client, _ = make_client(json_error=ValueError("Expecting value"))
    with pytest.raises(MalformedResponse):
        client.plants()


@pytest.mark.parametrize(
    "payload",
    [
        {"temperature": 20},
        [{"temperature": 20, "humidity": 40}],
        [{"temperature": 20, "humidity": 40, "soilMoisture": 30, "soilRaw": 1}, "garbage"],
    ],
)
def test_unexpected_shape_is_malformed(payload):
    client, _ = make_client(payload)
    with pytest.raises(MalformedResponse):
        client.plants()
