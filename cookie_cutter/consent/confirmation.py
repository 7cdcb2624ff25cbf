"""
Second-step "save/confirm" follow-up.

Some consent frameworks only persist the choice after a second click
on a "save preferences" / "confirm" control that appears after the
first acceptance.  After the first activation the page is polled for
such a control (with the same context gate and threshold as the
accept step) for a bounded time; when none appears the framework is
assumed to be single-step and acceptance completes anyway.
"""

from __future__ import annotations

import asyncio
import time

from cookie_cutter import config
from cookie_cutter.consent import activation, discovery, scorer, state
from cookie_cutter.dom import driver as driver_mod
from cookie_cutter.models import consent, dom
from cookie_cutter.utils import errors, logger

log = logger.create_logger("Confirmation")


def rank_save_controls(document: dom.Document, settings: config.EngineSettings) -> list[consent.Candidate]:
    found = discovery.discover(document, max_isolated_depth=settings.max_isolated_depth)
    return scorer.rank(
        document,
        found.controls,
        gate_depth=settings.context_gate_depth,
        proximity_depth=settings.proximity_depth,
        label_matcher="save",
    )


def visible_save_labels(document: dom.Document, settings: config.EngineSettings) -> frozenset[str]:
    """Save/confirm labels already on screen before the accept click.

    These belong to the first layer of the banner and are never
    confirmation targets.
    """
    return frozenset(candidate.text_signature for candidate in rank_save_controls(document, settings))


class ConfirmationFollowUp:
    """Waits for and activates a save/confirm control.

    ``nudge()`` wakes the poll loop early, e.g. when a tree mutation
    arrives while the follow-up is waiting.
    """

    def __init__(
        self,
        page: driver_mod.PageDriver,
        acceptance: state.AcceptanceState,
        settings: config.EngineSettings,
        ignored_labels: frozenset[str] = frozenset(),
    ) -> None:
        self._page = page
        self._state = acceptance
        self._settings = settings
        self._ignored_labels = ignored_labels
        self._wake = asyncio.Event()
        self.winner: consent.Candidate | None = None

    def nudge(self) -> None:
        self._wake.set()

    async def find_save_control(self) -> consent.Candidate | None:
        """One look for a qualifying save/confirm control."""
        try:
            document = await self._page.snapshot()
        except Exception as exc:
            log.debug("Snapshot failed during confirmation", {"error": errors.get_error_message(exc)})
            return None
        candidates = [
            candidate
            for candidate in rank_save_controls(document, self._settings)
            if candidate.text_signature not in self._ignored_labels
        ]
        return scorer.select_winner(candidates, self._settings.activation_threshold)

    async def _sleep_or_wake(self, seconds: float) -> None:
        try:
            await asyncio.wait_for(self._wake.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
        self._wake.clear()

    async def run(self) -> consent.ConfirmationResult:
        """Drive ``AwaitingConfirmation`` to ``Accepted``."""
        timeout = self._settings.confirmation_timeout_ms / 1000
        poll = self._settings.confirmation_poll_ms / 1000
        deadline = time.monotonic() + timeout
        log.start_timer("confirmation")

        while True:
            candidate = await self.find_save_control()
            if candidate is not None and await activation.try_activate(self._page, candidate.control):
                self.winner = candidate
                self._state.record_confirmation()
                log.end_timer("confirmation", "Save control activated")
                log.success("Consent confirmed", {"text": candidate.text_signature, "score": candidate.score})
                return "confirmed"

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            await self._sleep_or_wake(min(poll, remaining))

        self._state.finish()
        log.end_timer("confirmation", "No save control appeared")
        log.info("Assuming single-step consent framework")
        return "confirmation-timeout"
