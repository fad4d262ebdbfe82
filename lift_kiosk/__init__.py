"""Ski resort lift status and snow report kiosk."""

from .aggregator import ReportAggregator
from .colors import lift_colors, map_status
from .display import Display
from .models import Color, LiftStatus, WeatherReport
from .orchestrator import KioskController

__all__ = [
    "Color",
    "Display",
    "KioskController",
    "LiftStatus",
    "ReportAggregator",
    "WeatherReport",
    "lift_colors",
    "map_status",
]
