"""Exceptions raised inside the acquisition layer.

None of these escape the control loop: per-field and per-source failures are
logged and recovered where they happen, and a poll that produced nothing is
reported to the orchestrator as ``None``.
"""

from __future__ import annotations

from typing import Optional


class KioskError(Exception):
    """Base exception for all kiosk errors."""


class FetchFailedError(KioskError):
    """Raised when a fetched result is unwrapped but the fetch did not succeed."""

    def __init__(self, url: str, detail: str = "") -> None:
        self.url = url
        self.detail = detail
        super().__init__(f"{url}: {detail}" if detail else url)


class NetworkError(FetchFailedError):
    """Connection failure or timeout."""


class HttpStatusError(FetchFailedError):
    """Upstream answered with a non-2xx status."""

    def __init__(self, url: str, status_code: Optional[int], detail: str = "") -> None:
        self.status_code = status_code
        super().__init__(url, f"HTTP {status_code}\nBody:\n{detail}")


class ParseError(KioskError):
    """Malformed JSON, unexpected structure or a missing marker in a payload."""


class ValidationError(KioskError):
    """An aggregated report carried no usable field."""


class InvalidTransition(KioskError):
    """The state machine has no transition for the given state and event."""
