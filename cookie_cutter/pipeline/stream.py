"""
Streaming auto-accept run for one URL.

Opens an isolated browser session, navigates, runs the consent engine
under its scheduler and relays engine events as Server-Sent Events.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncGenerator
from typing import Any

from cookie_cutter import config
from cookie_cutter.browser import device_configs
from cookie_cutter.browser import driver as browser_driver
from cookie_cutter.browser import session as browser_session
from cookie_cutter.consent import engine as engine_mod
from cookie_cutter.pipeline import scheduler as scheduler_mod
from cookie_cutter.pipeline import sse_helpers
from cookie_cutter.usage import channel as channel_mod
from cookie_cutter.usage import store as store_mod
from cookie_cutter.utils import errors, logger
from cookie_cutter.utils import url as url_mod

log = logger.create_logger("Accept")

# Outer safety net for one run; the scheduler normally finishes
# when the mutation observer expires.
STREAM_TIMEOUT_SECONDS = 120

# How long the generator waits for an engine event before
# re-checking whether the run has finished.
_QUEUE_POLL_SECONDS = 0.1


def _drain_queue(queue: asyncio.Queue[str]) -> list[str]:
    """Drain all currently-queued events without blocking."""
    events: list[str] = []
    while not queue.empty():
        try:
            events.append(queue.get_nowait())
        except asyncio.QueueEmpty:
            break
    return events


async def accept_url_stream(
    url: str,
    device: str,
    *,
    store: store_mod.UsageStore,
    engine_settings: config.EngineSettings | None = None,
    headless: bool = True,
) -> AsyncGenerator[str]:
    """Load *url* and auto-accept its consent banner, streaming progress.

    Args:
        url: The page to open.
        device: Device profile name; unknown names fall back to
            ``windows-chrome``.
        store: Collaborator that answers the enable flag and counts
            acceptances.
        engine_settings: Engine timings and thresholds.
        headless: Whether Chromium runs without a window.
    """
    if not url:
        yield sse_helpers.format_sse_event("error", {"error": "URL is required"})
        return

    if device not in device_configs.DEVICE_CONFIGS:
        log.warn("Invalid device type, defaulting to 'windows-chrome'", {"device": device})
        device = "windows-chrome"

    settings = engine_settings or config.EngineSettings()
    hostname = url_mod.extract_hostname(url)
    session = browser_session.BrowserSession(headless=headless)
    queue: asyncio.Queue[str] = asyncio.Queue()
    channel: channel_mod.LocalChannel | None = None
    scheduler: scheduler_mod.Scheduler | None = None
    run_task: asyncio.Task[Any] | None = None

    def on_event(event_type: str, data: dict[str, Any]) -> None:
        queue.put_nowait(sse_helpers.format_sse_event(event_type, data))

    logger.clear_log_buffer()
    logger.start_log_file(hostname)
    log.section(f"Auto-accept: {url}")
    log.start_timer("total-run")

    try:
        async with asyncio.timeout(STREAM_TIMEOUT_SECONDS):
            yield sse_helpers.format_progress_event("browser", "Launching browser...", 10)
            page = await session.launch_browser(device)

            yield sse_helpers.format_progress_event("navigate", f"Loading {hostname}...", 30)
            nav_result = await session.navigate_to(url)
            if not nav_result.success:
                yield sse_helpers.format_sse_event(
                    "error",
                    {"error": nav_result.error_message or "Navigation failed", "statusCode": nav_result.status_code},
                )
                return

            driver = browser_driver.PlaywrightDriver(page, settings)
            channel = channel_mod.LocalChannel(store, driver.page_url())
            engine = engine_mod.ConsentEngine(
                driver,
                settings,
                channel_mod.StatusClient(channel),
                on_event=on_event,
            )
            scheduler = scheduler_mod.Scheduler(engine, driver, settings)

            yield sse_helpers.format_progress_event("search", "Looking for a consent banner...", 50)
            run_task = asyncio.create_task(scheduler.run())
            while not run_task.done() or not queue.empty():
                try:
                    yield await asyncio.wait_for(queue.get(), timeout=_QUEUE_POLL_SECONDS)
                except TimeoutError:
                    continue
            phase = run_task.result()

            for event in _drain_queue(queue):
                yield event
            total_time = log.end_timer("total-run", "Run complete")
            yield sse_helpers.format_sse_event(
                "complete",
                {
                    "url": driver.page_url(),
                    "phase": phase,
                    "accepted": phase == "accepted",
                    "passes": len(engine.reports),
                    "totalTime": f"{(total_time / 1000):.2f}s",
                    "debugLog": logger.get_log_buffer(),
                },
            )
    except TimeoutError:
        log.error("Run timed out", {"timeout_seconds": STREAM_TIMEOUT_SECONDS})
        yield sse_helpers.format_sse_event("error", {"error": f"Run timed out after {STREAM_TIMEOUT_SECONDS} seconds"})
    except Exception as error:
        log.error("Run failed with exception", {"error": errors.get_error_message(error)})
        yield sse_helpers.format_sse_event("error", {"error": errors.get_error_message(error)})
    finally:
        if scheduler is not None:
            await scheduler.cancel()
        if run_task is not None and not run_task.done():
            run_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await run_task
        if channel is not None:
            channel.close()
        logger.end_log_file()
        try:
            await session.close()
        except Exception as err:
            log.warn("Error during browser cleanup", {"error": errors.get_error_message(err)})
