from __future__ import annotations

from typing import Any, List, Mapping, Optional

from .models import Color, LiftStatus
from .sources.lifts import LIFT_ORDER

STATUS_COLORS: Mapping[str, Color] = {
    LiftStatus.CLOSED.value: Color.RED,
    LiftStatus.OPEN.value: Color.GREEN,
    LiftStatus.SCHEDULED.value: Color.BLUE,
    LiftStatus.HOLD.value: Color.ORANGE,
}


def map_status(value: Any) -> Color:
    """Color for one lift status; anything unrecognised is off."""
    if isinstance(value, LiftStatus):
        value = value.value
    if not isinstance(value, str):
        return Color.OFF
    return STATUS_COLORS.get(value, Color.OFF)


def lift_colors(statuses: Optional[Mapping[str, Any]]) -> List[Color]:
    """One color per LED slot, always the full strip."""
    statuses = statuses or {}
    return [map_status(statuses.get(name)) for name in LIFT_ORDER]
