"""Control-flow table and polling policy for the kiosk loop.

Nothing here does I/O. :mod:`lift_kiosk.orchestrator` executes the states;
this module only decides where to go next and how long to back off.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Tuple

from .config import PollingConfig
from .errors import InvalidTransition
from .models import FailureCounter


class KioskState(str, Enum):
    UPDATE_WEATHER = "update_weather"
    UPDATE_LIFT_STATUS = "update_lift_status"
    WRITE_SCREEN_1 = "write_screen_1"
    WRITE_SCREEN_2 = "write_screen_2"
    WRITE_SCREEN_3 = "write_screen_3"
    WRITE_SCREEN_4 = "write_screen_4"


class KioskEvent(str, Enum):
    COMPLETED = "completed"
    WEATHER_DUE = "weather_due"
    LIFTS_DUE = "lifts_due"
    ROTATION_COMPLETE = "rotation_complete"


INITIAL_STATE = KioskState.UPDATE_WEATHER

TRANSITIONS: Mapping[Tuple[KioskState, KioskEvent], KioskState] = {
    (KioskState.UPDATE_WEATHER, KioskEvent.COMPLETED): KioskState.UPDATE_LIFT_STATUS,
    (KioskState.UPDATE_LIFT_STATUS, KioskEvent.COMPLETED): KioskState.WRITE_SCREEN_1,
    (KioskState.WRITE_SCREEN_1, KioskEvent.COMPLETED): KioskState.WRITE_SCREEN_2,
    (KioskState.WRITE_SCREEN_2, KioskEvent.COMPLETED): KioskState.WRITE_SCREEN_3,
    (KioskState.WRITE_SCREEN_3, KioskEvent.COMPLETED): KioskState.WRITE_SCREEN_4,
    (KioskState.WRITE_SCREEN_4, KioskEvent.WEATHER_DUE): KioskState.UPDATE_WEATHER,
    (KioskState.WRITE_SCREEN_4, KioskEvent.LIFTS_DUE): KioskState.UPDATE_LIFT_STATUS,
    (KioskState.WRITE_SCREEN_4, KioskEvent.ROTATION_COMPLETE): KioskState.WRITE_SCREEN_1,
}


def next_state(state: KioskState, event: KioskEvent) -> KioskState:
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        raise InvalidTransition(f"no transition from {state.value} on {event.value}") from None


@dataclass(frozen=True)
class Screen:
    """Three labeled LCD fields, each naming the :class:`WeatherReport` attribute it shows."""

    past_label: str
    past_field: str
    future_label: str
    future_field: str
    temperature_label: str
    temperature_field: str


SCREENS: Dict[KioskState, Screen] = {
    KioskState.WRITE_SCREEN_1: Screen("Overnight", "snow_overnight", "Tonight", "snow_tonight", "Base", "base_temperature"),
    KioskState.WRITE_SCREEN_2: Screen("Snow 24 hr", "snow_24hr", "Tomorrow", "snow_tomorrow", "Mid", "mid_temperature"),
    KioskState.WRITE_SCREEN_3: Screen("Snow 48 hr", "snow_48hr", "Tonight", "snow_tonight", "Summit", "summit_temperature"),
    KioskState.WRITE_SCREEN_4: Screen("Snow 7 day", "snow_7day", "Tomorrow", "snow_tomorrow", "Mid", "mid_temperature"),
}

FINAL_SCREEN = KioskState.WRITE_SCREEN_4


@dataclass(frozen=True)
class PollPolicy:
    backoff_unit: float = 5.0
    max_backoff: float = 30.0
    weather_rotations: int = 10
    weather_rotations_when_empty: int = 4
    lift_rotation_interval: int = 2
    lift_degrade_threshold: int = 6
    weather_degrade_threshold: int = 3
    dwell_seconds: float = 12.0

    @classmethod
    def from_config(cls, config: PollingConfig) -> "PollPolicy":
        return cls(
            backoff_unit=config.backoff_unit_seconds,
            max_backoff=config.max_backoff_seconds,
            weather_rotations=config.weather_rotations,
            weather_rotations_when_empty=config.weather_rotations_when_empty,
            lift_rotation_interval=config.lift_rotation_interval,
            lift_degrade_threshold=config.lift_degrade_threshold,
            weather_degrade_threshold=config.weather_degrade_threshold,
            dwell_seconds=config.dwell_seconds,
        )

    def backoff(self, counter: FailureCounter) -> float:
        return counter.backoff(self.backoff_unit, self.max_backoff)

    def lifts_stale(self, errors: int) -> bool:
        return errors >= self.lift_degrade_threshold

    def weather_stale(self, errors: int) -> bool:
        return errors >= self.weather_degrade_threshold

    def weather_due(self, rotations: int, has_report: bool) -> bool:
        # Poll sooner while there is nothing to show.
        limit = self.weather_rotations if has_report else self.weather_rotations_when_empty
        return rotations >= limit

    def rotation_event(self, rotations: int, has_report: bool) -> KioskEvent:
        """Event that ends the final screen, given rotations completed since the last weather poll."""
        if self.weather_due(rotations, has_report):
            return KioskEvent.WEATHER_DUE
        if rotations % self.lift_rotation_interval == 0:
            return KioskEvent.LIFTS_DUE
        return KioskEvent.ROTATION_COMPLETE
