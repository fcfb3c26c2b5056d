import json
from unittest import mock

import pytest

from statusblocks.core import BlockError
from statusblocks.external_ip import IPAddressInfo, fetch_info, ip_values


class _Response:
    def __init__(self, body):
        self._body = body

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


SAMPLE = {
    "ip": "192.0.2.10",
    "version": "IPv4",
    "city": "Springfield",
    "country_code": "US",
    "in_eu": False,
    "postal": None,
    "latitude": 12,
    "longitude": -3.5,
    "unexpected": "ignored",
}


def test_from_json_fills_given_and_default_fields():
    info = IPAddressInfo.from_json(json.dumps(SAMPLE))
    assert info.ip == "192.0.2.10"
    assert info.city == "Springfield"
    assert info.latitude == 12.0
    assert info.longitude == -3.5
    assert info.region == ""
    assert info.postal is None
    assert info.error is False


def test_from_json_accepts_mapping():
    info = IPAddressInfo.from_json({"ip": "198.51.100.7", "in_eu": True})
    assert info.ip == "198.51.100.7"
    assert info.in_eu is True


@pytest.mark.parametrize(
    "payload",
    [b"nope", b"[]", b'{"ip": 5}', b'{"in_eu": "yes"}', b'{"latitude": "north"}'],
)
def test_from_json_rejects_bad_data(payload):
    with pytest.raises(BlockError, match="Failed to parse JSON"):
        IPAddressInfo.from_json(payload)


def test_ip_values_contents():
    info = IPAddressInfo.from_json(SAMPLE)
    values = ip_values(info)
    assert values["ip"] == "192.0.2.10"
    assert values["latitude"] == 12.0
    assert "postal" not in values
    assert "in_eu" not in values
    assert values["country_flag"] == "\U0001F1FA\U0001F1F8"


def test_ip_values_optional_fields_present():
    info = IPAddressInfo.from_json({"postal": "12345", "in_eu": True, "country_code": "de"})
    values = ip_values(info)
    assert values["postal"] == "12345"
    assert values["in_eu"] is True
    assert len(values["country_flag"]) == 2
    assert all(0x1F1E6 <= ord(ch) <= 0x1F1FF for ch in values["country_flag"])


def test_fetch_info_success():
    body = json.dumps(SAMPLE).encode()
    with mock.patch("urllib.request.urlopen", return_value=_Response(body)):
        info = fetch_info("http://localhost/json/", timeout=1)
    assert info == IPAddressInfo.from_json(SAMPLE)


def test_fetch_info_reports_service_error():
    body = json.dumps({"error": True, "reason": "RateLimited"}).encode()
    with mock.patch("urllib.request.urlopen", return_value=_Response(body)):
        with pytest.raises(BlockError) as info:
            fetch_info("http://localhost/json/")
    assert str(info.value) == "RateLimited"


def test_fetch_info_connection_failure():
    import urllib.error

    with mock.patch("urllib.request.urlopen", side_effect=urllib.error.URLError("down")):
        with pytest.raises(BlockError, match="Failed to request current location"):
            fetch_info("http://localhost/json/")