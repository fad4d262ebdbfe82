"""Parser for National Weather Service station observations.

Source: https://api.weather.gov/stations/{station}/observations

Observations come newest first as a GeoJSON feature collection. Stations drop
readings now and then, so the newest feature that actually carries a
temperature value is used.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from ..errors import ParseError
from ..normalization import temperature_to_f
from .base import decode_json

STATIONS: Mapping[str, str] = {
    # Near Tiger Run
    "base_temperature": "E8345",
    # Horseshoe Bowl, about half-way up
    "mid_temperature": "CAHSB",
    # Peak 6 summit
    "summit_temperature": "CABP6",
}

OBSERVATIONS_URL = "https://api.weather.gov/stations/{station}/observations"


def station_url(station: str) -> str:
    return OBSERVATIONS_URL.format(station=station)


def _temperature(feature: Any) -> Optional[Mapping[str, Any]]:
    if not isinstance(feature, Mapping):
        return None
    properties = feature.get("properties")
    if not isinstance(properties, Mapping):
        return None
    temperature = properties.get("temperature")
    if not isinstance(temperature, Mapping) or temperature.get("value") is None:
        return None
    return temperature


def latest_temperature_f(payload: Any) -> Optional[float]:
    if not isinstance(payload, Mapping):
        raise ParseError("observation payload is not an object")
    features = payload.get("features")
    if not isinstance(features, list):
        raise ParseError("observation payload has no feature list")

    for feature in features:
        temperature = _temperature(feature)
        if temperature is None:
            continue
        try:
            return temperature_to_f(temperature["value"], temperature.get("unitCode"))
        except (TypeError, ValueError) as exc:
            raise ParseError(f"unreadable temperature {temperature['value']!r}") from exc
    return None


def parse_observations(body: str, field: str) -> Dict[str, Optional[float]]:
    """Parse a station observation body into ``{field: degrees_f}``."""
    return {field: latest_temperature_f(decode_json(body))}
