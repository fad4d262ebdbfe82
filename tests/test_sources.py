import asyncio
import json

import httpx
import pytest

from lift_kiosk.errors import ParseError
from lift_kiosk.http_client import HttpFetcher
from lift_kiosk.models import LiftStatus
from lift_kiosk.sources import build_weather_sources, fetch_lift_statuses, lift_status_url, lifts, snow_report, stations
from lift_kiosk.sources.lifts import LIFT_ORDER


def test_snow_report_parsing(fixture_text):
    values = snow_report.parse_report(fixture_text("snow_report.html"))

    assert values == {
        "snow_tonight": "2-4",
        "snow_tomorrow": "3-5",
        "snow_overnight": "1",
        "snow_24hr": "2",
        "snow_48hr": "6",
        "snow_7day": "14",
    }


def test_snow_report_bad_forecast_keeps_history():
    html = """<html><head><script>
    FR.forecasts = [{"ForecastData": "unavailable"}];
    FR.snowReportData = {"TwentyFourHourSnowfall": {"Inches": "2"}, "SevenDaySnowfall": {"Inches": "14"}};
    </script></head></html>"""

    values = snow_report.parse_report(html)

    assert values["snow_tonight"] is None
    assert values["snow_tomorrow"] is None
    assert values["snow_overnight"] is None
    assert values["snow_24hr"] == "2"
    assert values["snow_7day"] == "14"


def test_snow_report_without_markers_is_empty():
    values = snow_report.parse_report("<html><body><p>Maintenance</p></body></html>")

    assert set(values) == {"snow_tonight", "snow_tomorrow", "snow_overnight", "snow_24hr", "snow_48hr", "snow_7day"}
    assert all(value is None for value in values.values())


def test_snow_report_malformed_blob_only_loses_that_blob(fixture_text):
    html = fixture_text("snow_report.html").replace('FR.snowReportData = {"Overnight', 'FR.snowReportData = {{"Overnight')

    values = snow_report.parse_report(html)

    assert values["snow_tonight"] == "2-4"
    assert values["snow_overnight"] is None
    assert values["snow_48hr"] is None


def test_station_uses_first_reported_temperature(fixture_text):
    values = stations.parse_observations(fixture_text("station_observations.json"), "mid_temperature")

    assert values == {"mid_temperature": pytest.approx(23.0)}


def test_station_zero_celsius_is_freezing():
    body = json.dumps({"features": [{"properties": {"temperature": {"value": 0, "unitCode": "wmoUnit:degC"}}}]})

    assert stations.parse_observations(body, "base_temperature")["base_temperature"] == pytest.approx(32.0)


def test_station_fahrenheit_passes_through():
    body = json.dumps({"features": [{"properties": {"temperature": {"value": 20.0, "unitCode": "wmoUnit:degF"}}}]})

    assert stations.parse_observations(body, "summit_temperature") == {"summit_temperature": 20.0}


def test_station_without_readings_is_none():
    body = json.dumps({"features": [{"properties": {"temperature": {"value": None}}}, {"properties": {}}]})

    assert stations.parse_observations(body, "base_temperature") == {"base_temperature": None}


@pytest.mark.parametrize("body", ["not json", "[]", '{"features": {}}'])
def test_station_malformed_payload(body):
    with pytest.raises(ParseError):
        stations.parse_observations(body, "base_temperature")


def test_lift_statuses_cover_known_lifts(fixture_text):
    statuses = lifts.parse_lift_statuses(fixture_text("lifts.json"))

    assert list(statuses) == list(LIFT_ORDER)
    assert "Snowflake Chair" not in statuses
    assert statuses["Zendo Chair"] is LiftStatus.OPEN
    assert statuses["Quicksilver SuperChair"] is LiftStatus.HOLD
    assert statuses["Mercury SuperChair"] is LiftStatus.SCHEDULED
    assert statuses["E-Chair"] is LiftStatus.CLOSED


def test_lift_statuses_missing_lifts_are_unknown():
    body = json.dumps({"lifts": {"status": {"Zendo Chair": "open", "6-Chair": "groomed"}}})

    statuses = lifts.parse_lift_statuses(body)

    assert statuses["Zendo Chair"] is LiftStatus.OPEN
    assert statuses["6-Chair"] is LiftStatus.UNKNOWN
    assert statuses["Falcon SuperChair"] is LiftStatus.UNKNOWN


@pytest.mark.parametrize("body", ["{}", '{"lifts": {}}', '{"lifts": {"status": null}}', "<html>"])
def test_lift_statuses_changed_format(body):
    with pytest.raises(ParseError):
        lifts.parse_lift_statuses(body)


def test_weather_sources_use_configured_urls():
    sources = build_weather_sources()

    assert [source.source_id for source in sources] == ["snow_report", "base_station", "mid_station", "summit_station"]
    assert sources[1].url.endswith("/stations/E8345/observations")
    assert sources[2].url.endswith("/stations/CAHSB/observations")
    assert sources[3].url.endswith("/stations/CABP6/observations")


def _fetch_lifts(handler):
    async def scenario():
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with HttpFetcher(client=client) as fetcher:
            return await fetch_lift_statuses(fetcher, lift_status_url())

    return asyncio.run(scenario())


def test_fetch_lift_statuses(fixture_text):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, text=fixture_text("lifts.json"))

    statuses = _fetch_lifts(handler)

    assert seen == ["https://liftie.info/api/resort/breck"]
    assert statuses["Horseshoe Bowl T-Bar"] is LiftStatus.OPEN


@pytest.mark.parametrize(
    "response",
    [httpx.Response(502, text="Bad Gateway"), httpx.Response(200, text='{"lifts": {"stats": {}}}')],
)
def test_fetch_lift_statuses_failure_is_none(response):
    assert _fetch_lifts(lambda _: response) is None
