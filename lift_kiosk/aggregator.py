from __future__ import annotations

import asyncio
import uuid
from typing import List, Optional, Sequence

from .errors import ValidationError
from .http_client import HttpFetcher
from .logging import get_logger
from .models import FetchError, FetchErrorKind, FetchResult, WeatherReport
from .sources import WeatherSource, build_weather_sources

logger = get_logger(__name__)


class ReportAggregator:
    """Fans out to every weather source and merges whatever came back.

    Failures are isolated per source (and, inside the parsers, per field): one
    bad feed only leaves its own fields empty.
    """

    def __init__(self, fetcher: HttpFetcher, sources: Optional[Sequence[WeatherSource]] = None) -> None:
        self.fetcher = fetcher
        self.sources: List[WeatherSource] = list(sources if sources is not None else build_weather_sources())

    async def _fetch_all(self, trace_id: str) -> List[FetchResult]:
        outcomes = await asyncio.gather(
            *(self.fetcher.fetch(source.url, trace_id=trace_id) for source in self.sources),
            return_exceptions=True,
        )
        results: List[FetchResult] = []
        for source, outcome in zip(self.sources, outcomes):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                outcome = FetchResult.failure(source.url, FetchError(FetchErrorKind.NETWORK, detail=repr(outcome)))
            results.append(outcome)
        return results

    async def aggregate(self, *, trace_id: str | None = None) -> Optional[WeatherReport]:
        """Latest report, or ``None`` when nothing usable could be retrieved."""
        trace_id = trace_id or uuid.uuid4().hex
        results = await self._fetch_all(trace_id)

        if all(not result.ok for result in results):
            logger.error("weather.aggregate.all_failed", trace_id=trace_id, sources=len(results))
            return None

        report = WeatherReport()
        for source, result in zip(self.sources, results):
            try:
                report.merge(source.parse(result.unwrap()))
            except Exception as exc:
                logger.error(
                    "weather.source.failure",
                    trace_id=trace_id,
                    source=source.source_id,
                    url=source.url,
                    error=str(exc),
                )
                continue
            logger.info("weather.source.success", trace_id=trace_id, source=source.source_id)

        try:
            return validate_report(report)
        except ValidationError as exc:
            logger.error("weather.aggregate.empty", trace_id=trace_id, error=str(exc))
            return None


def validate_report(report: WeatherReport) -> WeatherReport:
    if report.collapse() is None:
        raise ValidationError("no weather source produced a usable field")
    return report
