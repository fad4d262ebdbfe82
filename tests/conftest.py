from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Tuple

import pytest

from lift_kiosk.display import DisplayDriver, TextField

FIXTURES = Path(__file__).parent / "fixtures"


class RecordingDriver(DisplayDriver):
    def __init__(self) -> None:
        self.initialized = False
        self.leds: List[List[int]] = []
        self.texts: List[Tuple[TextField, TextField, TextField]] = []

    def init(self) -> None:
        self.initialized = True

    def write_leds(self, encoded: Sequence[int]) -> None:
        self.leds.append(list(encoded))

    def write_text(self, past: TextField, future: TextField, temperature: TextField) -> None:
        self.texts.append((past, future, temperature))


@pytest.fixture
def driver() -> RecordingDriver:
    return RecordingDriver()


@pytest.fixture
def fixture_text():
    def _read(name: str) -> str:
        return (FIXTURES / name).read_text()

    return _read
