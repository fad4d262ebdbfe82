from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .errors import HttpStatusError, NetworkError


class LiftStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    SCHEDULED = "scheduled"
    HOLD = "hold"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "LiftStatus":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


LiftStatusMap = Dict[str, LiftStatus]


class Color(Enum):
    """LED colors as (red, green, blue) triples."""

    RED = (0xFF, 0x00, 0x00)
    GREEN = (0x00, 0xFF, 0x00)
    BLUE = (0x00, 0x00, 0xFF)
    ORANGE = (0xFF, 0xA5, 0x00)
    OFF = (0x00, 0x00, 0x00)

    @property
    def r(self) -> int:
        return self.value[0]

    @property
    def g(self) -> int:
        return self.value[1]

    @property
    def b(self) -> int:
        return self.value[2]

    @property
    def is_off(self) -> bool:
        return self is Color.OFF

    def encode(self) -> int:
        """Pack into the GRB word the LED strip expects."""
        return self.g << 16 | self.r << 8 | self.b


@dataclass
class WeatherReport:
    """Display-ready snow and temperature figures.

    Snow amounts are kept as the strings the resort publishes (inches, possibly
    a range such as ``"3-5"``); temperatures are normalized to Fahrenheit.
    """

    # Forecast
    snow_tonight: Optional[str] = None
    snow_tomorrow: Optional[str] = None
    # Cumulative history
    snow_overnight: Optional[str] = None
    snow_24hr: Optional[str] = None
    snow_48hr: Optional[str] = None
    snow_7day: Optional[str] = None
    # Station temperatures
    base_temperature: Optional[float] = None
    mid_temperature: Optional[float] = None
    summit_temperature: Optional[float] = None

    @property
    def has_data(self) -> bool:
        return any(getattr(self, f.name) is not None for f in fields(self))

    def merge(self, values: Mapping[str, Any]) -> None:
        """Copy non-null values for known fields onto this report."""
        known = {f.name for f in fields(self)}
        for key, value in values.items():
            if key in known and value is not None:
                setattr(self, key, value)

    def collapse(self) -> Optional["WeatherReport"]:
        """Return ``None`` in place of a report with no populated field."""
        return self if self.has_data else None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class FetchErrorKind(str, Enum):
    NETWORK = "network"
    HTTP_STATUS = "http_status"


@dataclass(frozen=True)
class FetchError:
    kind: FetchErrorKind
    detail: str = ""
    status_code: Optional[int] = None


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one bounded request: either a body or a failure reason."""

    url: str
    body: Optional[str] = None
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, url: str, body: str) -> "FetchResult":
        return cls(url=url, body=body)

    @classmethod
    def failure(cls, url: str, error: FetchError) -> "FetchResult":
        return cls(url=url, error=error)

    def unwrap(self) -> str:
        if self.error is None:
            return self.body or ""
        if self.error.kind is FetchErrorKind.HTTP_STATUS:
            raise HttpStatusError(self.url, self.error.status_code, self.error.detail)
        raise NetworkError(self.url, self.error.detail)


class FailureCounter:
    """Consecutive-failure streak for one polling concern."""

    def __init__(self) -> None:
        self._errors = 0

    @property
    def errors(self) -> int:
        return self._errors

    def record_failure(self) -> int:
        self._errors += 1
        return self._errors

    def record_success(self) -> None:
        self._errors = 0

    def backoff(self, unit: float, maximum: float) -> float:
        return min(max(self._errors * unit, 0.0), maximum)

    def __repr__(self) -> str:
        return f"FailureCounter(errors={self._errors})"
