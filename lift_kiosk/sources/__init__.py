from __future__ import annotations

import uuid
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, List, Optional

from lift_kiosk.config import AppConfig, app_config
from lift_kiosk.errors import KioskError
from lift_kiosk.logging import get_logger

from ..http_client import HttpFetcher
from ..models import LiftStatusMap
from . import lifts, snow_report, stations

logger = get_logger(__name__)

Parser = Callable[[str], Dict[str, Any]]


@dataclass(frozen=True)
class WeatherSource:
    """One upstream endpoint and the parser for the report fields it owns."""

    source_id: str
    url: str
    parse: Parser


# Source id -> report field for the temperature endpoints.
_STATION_SOURCES = {
    "base_station": "base_temperature",
    "mid_station": "mid_temperature",
    "summit_station": "summit_temperature",
}


def _url_for(source_id: str, default: str, config: AppConfig) -> str:
    configured = config.sources.get(source_id)
    if configured and configured.url:
        return configured.url
    return default


def build_weather_sources(config: AppConfig | None = None) -> List[WeatherSource]:
    """Snow report page first, then the three station feeds."""
    config = config or app_config
    sources = [
        WeatherSource(
            snow_report.SOURCE_ID,
            _url_for(snow_report.SOURCE_ID, snow_report.DEFAULT_URL, config),
            snow_report.parse_report,
        )
    ]
    for source_id, field in _STATION_SOURCES.items():
        default_url = stations.station_url(stations.STATIONS[field])
        sources.append(
            WeatherSource(
                source_id,
                _url_for(source_id, default_url, config),
                partial(stations.parse_observations, field=field),
            )
        )
    return sources


def lift_status_url(config: AppConfig | None = None) -> str:
    return _url_for(lifts.SOURCE_ID, lifts.DEFAULT_URL, config or app_config)


async def fetch_lift_statuses(
    fetcher: HttpFetcher,
    url: str,
    *,
    trace_id: str | None = None,
) -> Optional[LiftStatusMap]:
    """Fetch and parse lift status; ``None`` when either step fails."""
    trace_id = trace_id or uuid.uuid4().hex
    result = await fetcher.fetch(url, trace_id=trace_id)
    try:
        statuses = lifts.parse_lift_statuses(result.unwrap())
    except KioskError as exc:
        logger.error("lifts.fetch.failure", trace_id=trace_id, url=url, error=str(exc))
        return None
    logger.info("lifts.fetch.success", trace_id=trace_id, url=url)
    return statuses
