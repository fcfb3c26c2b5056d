"""The external IP address and information about its location."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional, Union

from statusblocks.core import BlockError

API_ENDPOINT = "https://ipapi.co/json/"
DEFAULT_FORMAT = " $ip $country_flag "
DEFAULT_INTERVAL = 300

_TEXT_KEYS = (
    "ip",
    "version",
    "city",
    "region",
    "region_code",
    "country",
    "country_name",
    "country_code",
    "country_code_iso3",
    "country_capital",
    "country_tld",
    "continent_code",
    "timezone",
    "utc_offset",
    "country_calling_code",
    "currency",
    "currency_name",
    "languages",
    "asn",
    "org",
)
_NUMBER_KEYS = ("latitude", "longitude", "country_area", "country_population")


def _country_flag(code: str) -> str:
    """Flag glyph made of regional indicator symbols for a two-letter code."""
    return "".join(
        chr(0x1F1E6 + ord(ch) - ord("A")) if "A" <= ch <= "Z" else ch
        for ch in code.upper()
    )


@dataclass(frozen=True)
class IPAddressInfo:
    error: bool = False
    reason: str = ""
    ip: str = ""
    version: str = ""
    city: str = ""
    region: str = ""
    region_code: str = ""
    country: str = ""
    country_name: str = ""
    country_code: str = ""
    country_code_iso3: str = ""
    country_capital: str = ""
    country_tld: str = ""
    continent_code: str = ""
    in_eu: bool = False
    postal: Optional[str] = None
    latitude: float = 0.0
    longitude: float = 0.0
    timezone: str = ""
    utc_offset: str = ""
    country_calling_code: str = ""
    currency: str = ""
    currency_name: str = ""
    languages: str = ""
    country_area: float = 0.0
    country_population: float = 0.0
    asn: str = ""
    org: str = ""

    @classmethod
    def from_json(
        cls, data: Union[bytes, str, Mapping[str, Any]]
    ) -> "IPAddressInfo":
        """Parse the API response; missing fields keep their defaults."""
        try:
            if isinstance(data, (bytes, bytearray, str)):
                data = json.loads(data)
            if not isinstance(data, Mapping):
                raise ValueError("expected a JSON object")
            values: Dict[str, Any] = {}
            for field in fields(cls):
                if field.name not in data:
                    continue
                values[field.name] = _check(field.name, data[field.name])
        except (ValueError, UnicodeDecodeError) as exc:
            raise BlockError("Failed to parse JSON") from exc
        return cls(**values)


def _check(name: str, value: Any) -> Any:
    if name in ("error", "in_eu"):
        if not isinstance(value, bool):
            raise ValueError(f"{name} must be a boolean")
        return value
    if name == "postal":
        if value is not None and not isinstance(value, str):
            raise ValueError("postal must be a string")
        return value
    if name in _NUMBER_KEYS:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{name} must be a number")
        return float(value)
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    return value


def fetch_info(url: str = API_ENDPOINT, timeout: float = 30.0) -> IPAddressInfo:
    """Query the location service; an error reported by it raises BlockError."""
    request = urllib.request.Request(url, headers={"User-Agent": "statusblocks"})
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            body = response.read()
    except urllib.error.HTTPError as err:
        try:
            body = err.read()
        except OSError as exc:
            raise BlockError("Failed to parse JSON") from exc
    except (urllib.error.URLError, OSError) as exc:
        raise BlockError("Failed to request current location") from exc
    info = IPAddressInfo.from_json(body)
    if info.error:
        raise BlockError(info.reason)
    return info


def ip_values(info: IPAddressInfo) -> Dict[str, Any]:
    """Placeholder values for the block."""
    values: Dict[str, Any] = {key: getattr(info, key) for key in _TEXT_KEYS}
    values.update({key: getattr(info, key) for key in _NUMBER_KEYS})
    values["country_flag"] = _country_flag(info.country_code)
    if info.postal is not None:
        values["postal"] = info.postal
    if info.in_eu:
        values["in_eu"] = True
    return values