"""
Consent engine: one instance per page load.

A pass in ``searching`` tries, in order:

1. the fast-path table of known frameworks,
2. discovery + scoring of visible controls,
3. hidden accept controls (revealed, then activated),
4. fail-open removal of unreachable cross-origin consent frames.

After an accept activation the pass stays in charge of the
confirmation follow-up, so acceptance, cleanup and the single
``COOKIE_ACCEPTED`` notification all happen inside one pass.  Passes
never overlap: a pass that finds another one in flight returns
immediately (nudging a waiting confirmation step).
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import Any

from cookie_cutter import config
from cookie_cutter.consent import activation, cleanup, confirmation, discovery, fast_path, scorer, state
from cookie_cutter.dom import driver as driver_mod
from cookie_cutter.models import consent, dom
from cookie_cutter.usage import channel
from cookie_cutter.utils import errors, logger

log = logger.create_logger("Engine")

EventCallback = Callable[[str, dict[str, Any]], None]


class ConsentEngine:
    """Runs classification passes against one page and owns its state."""

    def __init__(
        self,
        page: driver_mod.PageDriver,
        settings: config.EngineSettings | None = None,
        status_client: channel.StatusClient | None = None,
        fast_paths: Sequence[fast_path.FastPath] = fast_path.DEFAULT_FAST_PATHS,
        on_event: EventCallback | None = None,
    ) -> None:
        self._page = page
        self._settings = settings or config.EngineSettings()
        self._status_client = status_client
        self._fast_paths = tuple(fast_paths)
        self._on_event = on_event
        self._lock = asyncio.Lock()
        self._follow_up: confirmation.ConfirmationFollowUp | None = None
        self._first_layer_save_labels: frozenset[str] = frozenset()
        self._notified = False
        self.state = state.AcceptanceState()
        self.reports: list[consent.PassReport] = []

    @property
    def settings(self) -> config.EngineSettings:
        return self._settings

    @property
    def notified(self) -> bool:
        return self._notified

    @property
    def busy(self) -> bool:
        """True while a pass is in flight."""
        return self._lock.locked()

    def _emit(self, event_type: str, data: dict[str, Any]) -> None:
        if self._on_event is not None:
            self._on_event(event_type, data)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def start(self) -> bool:
        """Move out of ``idle``; returns whether passes should run."""
        if self.state.phase != "idle":
            return not self.state.is_terminal

        enabled = await self._status_client.is_enabled() if self._status_client else True
        if not enabled:
            self.state.disable()
            log.info("Auto-accept disabled, engine inert")
            return False

        await self._page.wait_until_visible()
        self.state.begin_search()
        log.info("Searching for consent controls", {"url": self._page.page_url()})
        return True

    async def run_pass(self, trigger: str = "manual") -> consent.PassReport:
        """Run one classification pass; cheap no-op once terminal."""
        if self.state.is_terminal or self.state.phase == "idle":
            return self._report(trigger, "skipped")

        if self._lock.locked():
            if self._follow_up is not None:
                self._follow_up.nudge()
            return self._report(trigger, "busy")

        async with self._lock:
            if self.state.is_terminal:
                return self._report(trigger, "skipped")
            log.start_timer(f"pass-{trigger}")
            if self.state.phase == "awaiting-confirmation":
                report = await self._resume_confirmation(trigger)
            else:
                report = await self._search(trigger)
            log.end_timer(f"pass-{trigger}", f"Pass finished: {report.outcome}")

        self.reports.append(report)
        self._emit("pass", report.model_dump(by_alias=True))
        return report

    # ------------------------------------------------------------------
    # Pass steps
    # ------------------------------------------------------------------

    def _report(self, trigger: str, outcome: consent.PassOutcome, **fields: Any) -> consent.PassReport:
        return consent.PassReport(trigger=trigger, outcome=outcome, phase=self.state.phase, **fields)

    async def _search(self, trigger: str) -> consent.PassReport:
        framework = await fast_path.run_fast_paths(self._page, self._fast_paths)
        if framework is not None:
            self.state.finish()
            removed = await self._complete()
            return self._report(trigger, "fast-path", fast_path=framework, removed_remnants=removed)

        try:
            document = await self._page.snapshot()
        except Exception as exc:
            log.warn("Snapshot failed, pass abandoned", {"error": errors.get_error_message(exc)})
            return self._report(trigger, "no-winner")

        found = discovery.discover(document, max_isolated_depth=self._settings.max_isolated_depth)
        candidates = self._rank(document, found.controls)
        winner = scorer.select_winner(candidates, self._settings.activation_threshold)
        if winner is not None:
            return await self._activate_winner(trigger, document, winner, len(candidates), hidden=False)

        if self._settings.hidden_fallback and found.hidden_controls:
            hidden = scorer.select_winner(
                self._rank(document, found.hidden_controls),
                self._settings.activation_threshold,
            )
            if hidden is not None:
                try:
                    await self._page.reveal(hidden.control.node_id)
                except Exception as exc:
                    log.debug("Could not reveal hidden control", {"error": errors.get_error_message(exc)})
                else:
                    return await self._activate_winner(trigger, document, hidden, len(candidates), hidden=True)

        if cleanup.find_remnants(document):
            try:
                removed = await cleanup.remove_remnants(self._page, document)
            except Exception as exc:
                log.warn("Could not remove consent frame", {"error": errors.get_error_message(exc)})
                removed = 0
            if removed:
                log.warn("No reachable control, removed consent frame (fail open)", {"removed": removed})
                self.state.finish()
                removed += await self._complete()
                return self._report(trigger, "fail-open", candidate_count=len(candidates), removed_remnants=removed)

        log.debug("No qualifying candidate", {"trigger": trigger, "candidates": len(candidates)})
        return self._report(trigger, "no-winner", candidate_count=len(candidates))

    def _rank(self, document: dom.Document, controls: list[consent.Control]) -> list[consent.Candidate]:
        return scorer.rank(
            document,
            controls,
            gate_depth=self._settings.context_gate_depth,
            proximity_depth=self._settings.proximity_depth,
        )

    async def _activate_winner(
        self,
        trigger: str,
        document: dom.Document,
        winner: consent.Candidate,
        candidate_count: int,
        *,
        hidden: bool,
    ) -> consent.PassReport:
        details: dict[str, Any] = {
            "candidate_count": candidate_count,
            "winner_text": winner.text_signature,
            "winner_score": winner.score,
            "source_reason": winner.source_reason,
        }
        self._first_layer_save_labels = confirmation.visible_save_labels(document, self._settings)
        if not await activation.try_activate(self._page, winner.control):
            return self._report(trigger, "activation-failed", **details)

        self.state.record_activation()
        log.success(
            "Accept control activated",
            {"text": winner.text_signature, "score": winner.score, "reason": winner.source_reason, "hidden": hidden},
        )
        self._emit("activation", {"step": "accept", "text": winner.text_signature, "score": winner.score})

        result = await self._confirm()
        removed = await self._complete()
        outcome: consent.PassOutcome = "hidden-activated" if hidden else "activated"
        return self._report(trigger, outcome, confirmation=result, removed_remnants=removed, **details)

    async def _resume_confirmation(self, trigger: str) -> consent.PassReport:
        result = await self._confirm()
        removed = await self._complete()
        return self._report(trigger, "confirmation", confirmation=result, removed_remnants=removed)

    async def _confirm(self) -> consent.ConfirmationResult:
        self._follow_up = confirmation.ConfirmationFollowUp(
            self._page,
            self.state,
            self._settings,
            ignored_labels=self._first_layer_save_labels,
        )
        try:
            result = await self._follow_up.run()
        finally:
            winner = self._follow_up.winner
            self._follow_up = None
        if winner is not None:
            self._emit("activation", {"step": "confirm", "text": winner.text_signature, "score": winner.score})
        return result

    async def _complete(self) -> int:
        """Cleanup and the one acceptance notification; returns remnants removed."""
        report = await cleanup.run_cleanup(self._page)
        if not self._notified:
            self._notified = True
            if self._status_client is not None:
                await self._status_client.notify_accepted()
            log.success("Consent accepted", {"url": self._page.page_url()})
            self._emit("accepted", {"url": self._page.page_url(), "removedRemnants": report.removed})
        return report.removed
