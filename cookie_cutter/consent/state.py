"""
Per-page-load acceptance state machine.

    idle ──► searching ──► awaiting-confirmation ──► accepted
      │           └──────────────────────────────────────▲
      └──► disabled

``accepted`` and ``disabled`` are absorbing.  One instance is created
per page load and handed to every component that needs it; it is the
only state shared between scheduled and mutation-triggered passes.
"""

from __future__ import annotations

from typing import Literal

from cookie_cutter.utils import errors, logger

log = logger.create_logger("State")

Phase = Literal["idle", "searching", "awaiting-confirmation", "accepted", "disabled"]

_TRANSITIONS: dict[Phase, frozenset[Phase]] = {
    "idle": frozenset({"searching", "disabled"}),
    "searching": frozenset({"awaiting-confirmation", "accepted"}),
    "awaiting-confirmation": frozenset({"accepted"}),
    "accepted": frozenset(),
    "disabled": frozenset(),
}

TERMINAL_PHASES: frozenset[Phase] = frozenset({"accepted", "disabled"})


class AcceptanceState:
    """Owns the phase and the single accept activation for one page load."""

    def __init__(self) -> None:
        self._phase: Phase = "idle"
        self._accept_activations = 0
        self._confirm_activations = 0

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def is_terminal(self) -> bool:
        return self._phase in TERMINAL_PHASES

    @property
    def accept_activations(self) -> int:
        return self._accept_activations

    @property
    def confirm_activations(self) -> int:
        return self._confirm_activations

    def _move(self, target: Phase) -> None:
        if target not in _TRANSITIONS[self._phase]:
            raise errors.InvalidTransitionError(self._phase, target)
        log.debug("Phase change", {"from": self._phase, "to": target})
        self._phase = target

    def begin_search(self) -> None:
        """Feature enabled and page ready."""
        self._move("searching")

    def disable(self) -> None:
        """Feature disabled before any search began."""
        self._move("disabled")

    def record_activation(self) -> None:
        """The one accept activation happened; a save step may follow."""
        self._move("awaiting-confirmation")
        self._accept_activations += 1

    def record_confirmation(self) -> None:
        """A save/confirm control was activated."""
        if self._phase != "awaiting-confirmation":
            raise errors.InvalidTransitionError(self._phase, "accepted")
        self._confirm_activations += 1
        self._move("accepted")

    def finish(self) -> None:
        """Accept without a (further) click: single-step timeout, fast path or fail-open."""
        self._move("accepted")
