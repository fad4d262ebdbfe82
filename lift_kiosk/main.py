"""Process entry point.

Wires the display, fetcher and controller together, and makes sure the
display is blanked however the process ends.
"""
from __future__ import annotations

import asyncio
import signal
import sys
from typing import Optional

from lift_kiosk.aggregator import ReportAggregator
from lift_kiosk.config import AppConfig, app_config
from lift_kiosk.display import ConsoleDriver, Display, DisplayDriver
from lift_kiosk.http_client import HttpFetcher, wait_for_network
from lift_kiosk.logging import get_logger, setup_logging
from lift_kiosk.orchestrator import KioskController
from lift_kiosk.sources import build_weather_sources, fetch_lift_statuses, lift_status_url
from lift_kiosk.state_machine import PollPolicy

logger = get_logger(__name__)


def _install_signal_handlers(display: Display, task: asyncio.Task) -> None:
    if sys.platform == "win32":
        return

    def _terminate(sig: signal.Signals) -> None:
        logger.info("kiosk.signal", signal=sig.name)
        display.shutdown()
        task.cancel()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _terminate, sig)


async def run_kiosk(config: AppConfig, driver: Optional[DisplayDriver] = None) -> None:
    display = Display(
        driver or ConsoleDriver(),
        brightness=config.display.brightness,
        frame_interval=config.display.animation_frame_seconds,
    )
    fetcher = HttpFetcher(timeout=config.polling.request_timeout_seconds)
    lift_url = lift_status_url(config)

    async def fetch_lifts():
        return await fetch_lift_statuses(fetcher, lift_url)

    controller = KioskController(
        display,
        ReportAggregator(fetcher, build_weather_sources(config)),
        fetch_lifts,
        policy=PollPolicy.from_config(config.polling),
    )

    current = asyncio.current_task()
    if current is not None:
        _install_signal_handlers(display, current)

    try:
        await controller.start()
        # Let the network come up so the first poll does not start a backoff.
        await wait_for_network(
            fetcher,
            config.network.probe_url,
            attempts=config.network.probe_attempts,
            interval=config.network.probe_interval_seconds,
        )
        await controller.run()
    except asyncio.CancelledError:
        logger.info("kiosk.stopping")
    finally:
        display.shutdown()
        await fetcher.aclose()


def main() -> None:
    setup_logging(app_config.logging)
    asyncio.run(run_kiosk(app_config))


if __name__ == "__main__":
    main()
