"""
Pass scheduling for one page load.

Passes are triggered by:

- fixed delays after start (banners that render asynchronously),
- one extra pass shortly after the page ``load`` event,
- tree mutations, debounced so a burst yields a single pass.

Mutation observation is time-boxed.  :meth:`Scheduler.run` returns
once the engine reaches a terminal state or every trigger has
expired; straggler callbacks after that are no-ops.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

from cookie_cutter import config
from cookie_cutter.consent import engine as engine_mod
from cookie_cutter.consent import state
from cookie_cutter.dom import driver as driver_mod
from cookie_cutter.utils import errors, logger

log = logger.create_logger("Scheduler")


class Scheduler:
    """Drives :meth:`ConsentEngine.run_pass` until acceptance or expiry."""

    def __init__(
        self,
        engine: engine_mod.ConsentEngine,
        page: driver_mod.PageDriver,
        settings: config.EngineSettings | None = None,
    ) -> None:
        self._engine = engine
        self._page = page
        self._settings = settings or engine.settings
        self._tasks: set[asyncio.Task[Any]] = set()
        self._wake = asyncio.Event()
        self._debounce: asyncio.TimerHandle | None = None
        self._lifetime: asyncio.TimerHandle | None = None
        self._subscription: driver_mod.MutationSubscription | None = None
        self._observer_expired = False
        self._cancelled = False
        self._error: BaseException | None = None
        self.mutation_passes = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def run(self) -> state.Phase:
        """Start the engine and keep scheduling passes; returns the final phase."""
        if not await self._engine.start():
            return self._engine.state.phase

        loop = asyncio.get_running_loop()
        for delay in self._settings.pass_delays_ms:
            self._spawn(self._delayed_pass(delay, f"timer-{delay}ms"))
        self._spawn(self._load_pass())

        try:
            self._subscription = await self._page.observe_mutations(self._on_mutation)
        except Exception as exc:
            log.warn("Mutation observation unavailable", {"error": errors.get_error_message(exc)})
            self._observer_expired = True
        else:
            self._lifetime = loop.call_later(self._settings.observer_lifetime_ms / 1000, self._expire_observer)

        try:
            while not self._finished():
                self._wake.clear()
                await self._wake.wait()
        finally:
            await self.cancel()

        if self._error is not None:
            raise self._error
        log.info("Scheduling finished", {"phase": self._engine.state.phase})
        return self._engine.state.phase

    def _finished(self) -> bool:
        if self._cancelled or self._error is not None:
            return True
        if self._engine.state.is_terminal:
            return not self._engine.busy
        return self._observer_expired and self._debounce is None and not self._tasks

    async def cancel(self) -> None:
        """Stop every timer, pending pass and the mutation observer."""
        if self._cancelled:
            return
        self._cancelled = True
        for handle in (self._debounce, self._lifetime):
            if handle is not None:
                handle.cancel()
        self._debounce = None
        self._lifetime = None

        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        if self._subscription is not None and self._subscription.active:
            await self._subscription.cancel()
        self._wake.set()

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None and self._error is None:
            self._error = task.exception()
            log.error("Pass failed", {"error": errors.get_error_message(self._error)})
        self._wake.set()

    async def _delayed_pass(self, delay_ms: int, trigger: str) -> None:
        await asyncio.sleep(delay_ms / 1000)
        await self._engine.run_pass(trigger)

    async def _load_pass(self) -> None:
        try:
            await self._page.wait_for_load()
        except Exception as exc:
            log.debug("Load event not observed, skipping load pass", {"error": errors.get_error_message(exc)})
            return
        await asyncio.sleep(self._settings.load_pass_delay_ms / 1000)
        await self._engine.run_pass("load")

    def _on_mutation(self) -> None:
        if self._cancelled or self._observer_expired or self._engine.state.is_terminal:
            return
        if self._debounce is not None:
            self._debounce.cancel()
        loop = asyncio.get_running_loop()
        self._debounce = loop.call_later(self._settings.mutation_debounce_ms / 1000, self._fire_mutation_pass)

    def _fire_mutation_pass(self) -> None:
        self._debounce = None
        if self._cancelled or self._engine.state.is_terminal:
            self._wake.set()
            return
        self.mutation_passes += 1
        self._spawn(self._mutation_pass())

    async def _mutation_pass(self) -> None:
        report = await self._engine.run_pass("mutation")
        # The search in flight may predate this mutation.
        if report.outcome == "busy" and self._engine.state.phase == "searching":
            self._on_mutation()

    def _expire_observer(self) -> None:
        log.debug("Mutation observer lifetime elapsed")
        self._lifetime = None
        self._observer_expired = True
        if self._debounce is not None:
            self._debounce.cancel()
            self._debounce = None
        if self._subscription is not None:
            self._spawn(self._subscription.cancel())
        self._wake.set()
