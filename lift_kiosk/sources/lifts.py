"""Parser for Liftie lift status.

Source: https://liftie.info/api/resort/breck
"""
from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple

from ..errors import ParseError
from ..models import LiftStatus, LiftStatusMap
from .base import decode_json

SOURCE_ID = "lifts"
DEFAULT_URL = "https://liftie.info/api/resort/breck"

# One entry per LED, in slot order. The board is wired up the right side
# bottom to top, then down the left side:
#
#  8 -------------- 7
#  9 -------------- 6
# 10 -------------- 5
# 11 -------------- 4
# 12 -------------- 3
# 13 -------------- 2
# 14 -------------- 1
# 15 -------------- 0
LIFT_ORDER: Tuple[str, ...] = (
    "Zendo Chair",
    "Kensho SuperChair",
    "Freedom SuperChair",
    "BreckConnect Gondola",
    "Quicksilver SuperChair",
    "Mercury SuperChair",
    "Beaver Run SuperChair",
    "E-Chair",
    "Imperial SuperChair",
    "Horseshoe Bowl T-Bar",
    "6-Chair",
    "Rocky Mountain SuperChair",
    "Colorado SuperChair",
    "Peak 8 SuperConnect",
    "Independence SuperChair",
    "Falcon SuperChair",
)


def raw_statuses(payload: Any) -> Mapping[str, Any]:
    lifts = payload.get("lifts") if isinstance(payload, Mapping) else None
    status = lifts.get("status") if isinstance(lifts, Mapping) else None
    if not isinstance(status, Mapping):
        raise ParseError("'lifts.status' missing. Did the API format change?")
    return status


def build_status_map(statuses: Optional[Mapping[str, Any]]) -> LiftStatusMap:
    """Map every known lift to its status; lifts absent upstream are unknown."""
    statuses = statuses or {}
    return {name: LiftStatus.parse(statuses.get(name)) for name in LIFT_ORDER}


def parse_lift_statuses(body: str) -> LiftStatusMap:
    return build_status_map(raw_statuses(decode_json(body)))
