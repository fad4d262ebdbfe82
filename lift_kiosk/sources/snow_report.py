"""Parser for the Breckenridge snow and weather report page.

Source: https://www.breckenridge.com/the-mountain/mountain-conditions/snow-and-weather-report.aspx

The page embeds two JSON blobs in inline scripts, ``FR.forecasts = [...];``
and ``FR.snowReportData = {...};``. The first carries per-period forecast
snowfall, the second the cumulative totals.
"""
from __future__ import annotations

from re import Pattern
from typing import Any, Dict

from bs4 import BeautifulSoup

from ..logging import get_logger
from ..normalization import FieldMapping, PayloadNormalizer, snow_string
from .base import create_soup, find_marked_json, marker_pattern

logger = get_logger(__name__)

SOURCE_ID = "snow_report"
DEFAULT_URL = "https://www.breckenridge.com/the-mountain/mountain-conditions/snow-and-weather-report.aspx"

FORECAST_MARKER = marker_pattern("FR.forecasts")
SNOW_REPORT_MARKER = marker_pattern("FR.snowReportData")

FORECAST_FIELDS = PayloadNormalizer(
    {
        "snow_tonight": FieldMapping((0, "ForecastData", 0, "SnowFallNightStandard"), converter=snow_string),
        "snow_tomorrow": FieldMapping((0, "ForecastData", 1, "SnowFallDayStandard"), converter=snow_string),
    }
)

HISTORY_FIELDS = PayloadNormalizer(
    {
        "snow_overnight": FieldMapping(("OvernightSnowfall", "Inches"), converter=snow_string),
        "snow_24hr": FieldMapping(("TwentyFourHourSnowfall", "Inches"), converter=snow_string),
        "snow_48hr": FieldMapping(("FortyEightHourSnowfall", "Inches"), converter=snow_string),
        "snow_7day": FieldMapping(("SevenDaySnowfall", "Inches"), converter=snow_string),
    }
)


def _extract_blob(
    html: str, soup: BeautifulSoup, marker: Pattern[str], normalizer: PayloadNormalizer, label: str
) -> Dict[str, Any]:
    try:
        payload = find_marked_json(html, marker, soup=soup)
    except Exception as exc:
        logger.warning("snow_report.blob_failed", blob=label, error=str(exc))
        return {name: None for name in normalizer.fields}
    return normalizer.normalize(payload, source=f"{SOURCE_ID}.{label}")


def parse_report(html: str) -> Dict[str, Any]:
    """Parse the report page into forecast and history snow fields."""
    soup = create_soup(html)
    values: Dict[str, Any] = {}
    values.update(_extract_blob(html, soup, FORECAST_MARKER, FORECAST_FIELDS, "forecast"))
    values.update(_extract_blob(html, soup, SNOW_REPORT_MARKER, HISTORY_FIELDS, "history"))
    return values
