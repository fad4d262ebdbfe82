"""Display boundary: a 16-LED strip and three character LCDs.

:class:`Display` is the only writer to the device. It owns the loading
animation task and serializes every device write behind one lock, so the
animation and the control loop never write at the same time.
"""
from __future__ import annotations

import abc
import asyncio
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .logging import get_logger
from .models import Color
from .normalization import compress_range, format_temperature

logger = get_logger(__name__)

NUM_LEDS = 16
WHITE = 0xFFFFFF


@dataclass(frozen=True)
class TextField:
    label: str
    value: str
    unit: str


class DisplayDriver(abc.ABC):
    """Low-level device writes. Implementations need not be thread or task safe."""

    @abc.abstractmethod
    def init(self) -> None:
        ...

    @abc.abstractmethod
    def write_leds(self, encoded: Sequence[int]) -> None:
        """Write exactly ``NUM_LEDS`` GRB words."""

    @abc.abstractmethod
    def write_text(self, past: TextField, future: TextField, temperature: TextField) -> None:
        ...


class ConsoleDriver(DisplayDriver):
    """Stands in for the hardware by logging every write."""

    def init(self) -> None:
        logger.info("display.console.init")

    def write_leds(self, encoded: Sequence[int]) -> None:
        logger.info("display.console.leds", leds=[f"{value:06x}" for value in encoded])

    def write_text(self, past: TextField, future: TextField, temperature: TextField) -> None:
        logger.info(
            "display.console.text",
            lines=[f"{field.label}: {field.value} {field.unit}" for field in (past, future, temperature)],
        )


def scale_brightness(encoded: Sequence[int], brightness: float) -> List[int]:
    factor = min(max(brightness, 0.0), 1.0)
    scaled = []
    for value in encoded:
        g = int(((value >> 16) & 0xFF) * factor)
        r = int(((value >> 8) & 0xFF) * factor)
        b = int((value & 0xFF) * factor)
        scaled.append(g << 16 | r << 8 | b)
    return scaled


class SnowfallFrames:
    """Falling-snow frames: one column per side of the board, flakes drop one slot per frame."""

    def __init__(self, rng: Optional[random.Random] = None, spawn_chance: float = 0.5) -> None:
        self.rng = rng or random.Random()
        self.spawn_chance = spawn_chance
        half = NUM_LEDS // 2
        self.left = [False] * half
        self.right = [False] * half

    def next_frame(self) -> List[int]:
        self.left = [self.rng.random() < self.spawn_chance] + self.left[:-1]
        self.right = [self.rng.random() < self.spawn_chance] + self.right[:-1]

        half = NUM_LEDS // 2
        frame = [0] * NUM_LEDS
        for i in range(half):
            # Left side is wired top to bottom, right side bottom to top.
            frame[i + half] = WHITE if self.left[i] else 0
            frame[half - 1 - i] = WHITE if self.right[i] else 0
        return frame


class Display:
    def __init__(
        self,
        driver: DisplayDriver,
        *,
        brightness: float = 0.1,
        frame_interval: float = 0.4,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.driver = driver
        self.brightness = brightness
        self.frame_interval = frame_interval
        self._rng = rng
        self._write_lock = asyncio.Lock()
        self._animation_lock = asyncio.Lock()
        self._animation: Optional[asyncio.Task] = None
        self._shut_down = False

    @property
    def animating(self) -> bool:
        return self._animation is not None and not self._animation.done()

    async def init(self) -> None:
        """Reset the device and show the loading animation until data arrives.

        The device may still show whatever a previous run left behind, so it is
        blanked first.
        """
        self.driver.init()
        await self.set_lights([])
        await self.clear_text()
        await self.set_loading_animation(True)
        logger.info("display.initialized")

    async def set_lights(self, colors: Sequence[Color]) -> None:
        """Show ``colors`` on the strip, slot 0 first; missing slots are off.

        Stops the loading animation first.
        """
        if len(colors) > NUM_LEDS:
            raise ValueError(f"at most {NUM_LEDS} colors, got {len(colors)}")
        await self._stop_animation()
        async with self._write_lock:
            self._write_leds([color.encode() for color in colors])

    async def set_text(
        self,
        past_label: str,
        past_value: Optional[str],
        future_label: str,
        future_value: Optional[str],
        temperature_label: str,
        temperature_value: Optional[float],
    ) -> None:
        async with self._write_lock:
            self._write_text(
                TextField(past_label, compress_range(past_value), "in"),
                TextField(future_label, compress_range(future_value), "in"),
                TextField(temperature_label, format_temperature(temperature_value), "f"),
            )

    async def clear_text(self) -> None:
        await self.set_text("Snow 24 hr", None, "Tonight", None, "Base", None)

    async def set_loading_animation(self, on: bool) -> None:
        """Start or stop the snowfall animation.

        Any running instance is cancelled and awaited before a new one starts,
        so at most one animation task exists at a time.
        """
        async with self._animation_lock:
            await self._cancel_animation()
            if on and not self._shut_down:
                self._animation = asyncio.create_task(self._animate(), name="loading-animation")
                logger.debug("display.animation.started")

    async def _stop_animation(self) -> None:
        async with self._animation_lock:
            await self._cancel_animation()

    async def _cancel_animation(self) -> None:
        task, self._animation = self._animation, None
        if task is None:
            return
        task.cancel()
        (outcome,) = await asyncio.gather(task, return_exceptions=True)
        if isinstance(outcome, Exception):
            logger.error("display.animation.crashed", error=repr(outcome))
        logger.debug("display.animation.stopped")

    async def _animate(self) -> None:
        frames = SnowfallFrames(self._rng)
        while not self._shut_down:
            frame = frames.next_frame()
            async with self._write_lock:
                self._write_leds(frame)
            await asyncio.sleep(self.frame_interval)

    def _write_leds(self, encoded: Sequence[int]) -> None:
        if self._shut_down:
            return
        padded = list(encoded) + [0] * (NUM_LEDS - len(encoded))
        self.driver.write_leds(scale_brightness(padded, self.brightness))

    def _write_text(self, past: TextField, future: TextField, temperature: TextField) -> None:
        if self._shut_down:
            return
        self.driver.write_text(past, future, temperature)

    def shutdown(self) -> None:
        """Blank every output so a dead kiosk does not keep showing stale data.

        Idempotent and synchronous, so it can run from a signal handler.
        """
        if self._shut_down:
            return
        task, self._animation = self._animation, None
        if task is not None:
            task.cancel()

        blank = TextField("Snow 24 hr", compress_range(None), "in")
        self.driver.write_leds([0] * NUM_LEDS)
        self.driver.write_text(
            blank,
            TextField("Tonight", compress_range(None), "in"),
            TextField("Base", format_temperature(None), "f"),
        )
        self._shut_down = True
        logger.info("display.shutdown")
