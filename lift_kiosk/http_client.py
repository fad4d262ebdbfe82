from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Optional

import httpx

from .logging import get_logger
from .models import FetchError, FetchErrorKind, FetchResult

logger = get_logger(__name__)


# Some upstreams serve a bot wall to browser-like agents.
DEFAULT_USER_AGENT = "curl/8.16.0"
DEFAULT_TIMEOUT = 10.0


def _read_body(response: httpx.Response) -> str:
    try:
        return response.text
    except (httpx.HTTPError, UnicodeDecodeError, LookupError):
        return ""


class HttpFetcher:
    """Async HTTP client wrapper that reports failures instead of raising them.

    One call is one bounded request: no retries happen here, the control loop
    owns retry and backoff.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": DEFAULT_USER_AGENT, "Accept": "*/*"},
            follow_redirects=True,
        )

    async def fetch(
        self,
        url: str,
        *,
        timeout: Optional[float] = None,
        extra_headers: Optional[Dict[str, str]] = None,
        trace_id: str | None = None,
    ) -> FetchResult:
        logger.debug("http.fetch", trace_id=trace_id, url=url)
        try:
            response = await self.client.get(
                url,
                headers=extra_headers,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except httpx.HTTPError as exc:
            logger.warning("http.fetch.failed", trace_id=trace_id, url=url, error=repr(exc))
            return FetchResult.failure(url, FetchError(FetchErrorKind.NETWORK, detail=repr(exc)))

        if not response.is_success:
            body = _read_body(response)
            logger.warning(
                "http.fetch.failed",
                trace_id=trace_id,
                url=url,
                status_code=response.status_code,
                body=body,
            )
            return FetchResult.failure(
                url,
                FetchError(FetchErrorKind.HTTP_STATUS, detail=body, status_code=response.status_code),
            )

        logger.debug("http.fetch.ok", trace_id=trace_id, url=url, status_code=response.status_code)
        return FetchResult.success(url, response.text)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "HttpFetcher":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


async def wait_for_network(
    fetcher: HttpFetcher,
    probe_url: str,
    *,
    attempts: int = 30,
    interval: float = 2.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> bool:
    """Probe ``probe_url`` until it answers or the attempt budget runs out.

    Any answer counts, even an error status: the point is that the network
    stack is up before the first real poll.
    """
    for attempt in range(1, attempts + 1):
        result = await fetcher.fetch(probe_url, timeout=1.0)
        if result.ok or (result.error and result.error.kind is FetchErrorKind.HTTP_STATUS):
            logger.info("network.ready", attempt=attempt)
            return True
        await sleep(interval)
    logger.warning("network.unavailable", attempts=attempts)
    return False
