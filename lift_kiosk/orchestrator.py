from __future__ import annotations

import asyncio
import uuid
from typing import Awaitable, Callable, Dict, Optional

from .aggregator import ReportAggregator
from .colors import lift_colors
from .display import Display
from .logging import get_logger
from .models import FailureCounter, LiftStatusMap, WeatherReport
from .state_machine import (
    FINAL_SCREEN,
    INITIAL_STATE,
    SCREENS,
    KioskEvent,
    KioskState,
    PollPolicy,
    next_state,
)

logger = get_logger(__name__)

LiftFetcher = Callable[[], Awaitable[Optional[LiftStatusMap]]]
Sleep = Callable[[float], Awaitable[None]]


class KioskController:
    """Runs the kiosk state machine against the display.

    Owns everything that persists between polls: the held weather report, the
    per-concern failure counters and the rotation count. Only this loop touches
    them, one state at a time.
    """

    def __init__(
        self,
        display: Display,
        aggregator: ReportAggregator,
        fetch_lifts: LiftFetcher,
        *,
        policy: Optional[PollPolicy] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.display = display
        self.aggregator = aggregator
        self.fetch_lifts = fetch_lifts
        self.policy = policy or PollPolicy()
        self._sleep = sleep

        self.state = INITIAL_STATE
        self.report: Optional[WeatherReport] = None
        self.lift_errors = FailureCounter()
        self.weather_errors = FailureCounter()
        self.rotations = 0

        self._handlers: Dict[KioskState, Callable[[], Awaitable[KioskEvent]]] = {
            KioskState.UPDATE_WEATHER: self._update_weather,
            KioskState.UPDATE_LIFT_STATUS: self._update_lift_status,
        }

    async def start(self) -> None:
        await self.display.init()

    async def run(self) -> None:
        """Loop forever; only cancellation ends it."""
        while True:
            try:
                await self.step()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("kiosk.step.failed", state=self.state.value)
                await self._sleep(self.policy.backoff_unit)

    async def step(self) -> KioskState:
        logger.info("kiosk.state", state=self.state.value)
        handler = self._handlers.get(self.state, self._write_screen)
        event = await handler()
        self.state = next_state(self.state, event)
        return self.state

    async def _back_off(self, counter: FailureCounter, concern: str) -> None:
        if counter.errors > 0:
            delay = self.policy.backoff(counter)
            logger.info("kiosk.backoff", concern=concern, errors=counter.errors, delay=delay)
            await self._sleep(delay)

    async def _update_lift_status(self) -> KioskEvent:
        await self._back_off(self.lift_errors, "lifts")

        colors = lift_colors(await self.fetch_lifts())
        if any(not color.is_off for color in colors):
            self.lift_errors.record_success()
            await self.display.set_loading_animation(False)
            await self.display.set_lights(colors)
            logger.info("lifts.updated", colors=[color.name for color in colors])
        else:
            errors = self.lift_errors.record_failure()
            logger.warning("lifts.poll_failed", errors=errors)
            if self.policy.lifts_stale(errors):
                logger.warning("lifts.stale", errors=errors)
                await self.display.set_loading_animation(True)

        return KioskEvent.COMPLETED

    async def _update_weather(self) -> KioskEvent:
        await self._back_off(self.weather_errors, "weather")

        latest = await self.aggregator.aggregate(trace_id=uuid.uuid4().hex)
        if latest is not None:
            self.weather_errors.record_success()
            self.report = latest
            logger.info("weather.updated", **latest.to_dict())
        else:
            errors = self.weather_errors.record_failure()
            logger.warning("weather.poll_failed", errors=errors)
            if self.policy.weather_stale(errors):
                logger.warning("weather.stale", errors=errors)
                self.report = None
                await self.display.clear_text()

        return KioskEvent.COMPLETED

    async def _write_screen(self) -> KioskEvent:
        screen = SCREENS[self.state]
        if self.report is not None:
            await self.display.set_text(
                screen.past_label,
                getattr(self.report, screen.past_field),
                screen.future_label,
                getattr(self.report, screen.future_field),
                screen.temperature_label,
                getattr(self.report, screen.temperature_field),
            )

        await self._sleep(self.policy.dwell_seconds)

        if self.state is not FINAL_SCREEN:
            return KioskEvent.COMPLETED

        self.rotations += 1
        event = self.policy.rotation_event(self.rotations, self.report is not None)
        if event is KioskEvent.WEATHER_DUE:
            self.rotations = 0
        return event
