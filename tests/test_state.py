"""Tests for cookie_cutter.consent.state — the per-page acceptance state machine."""

from __future__ import annotations

import pytest

from cookie_cutter.consent.state import AcceptanceState
from cookie_cutter.utils.errors import InvalidTransitionError


class TestTransitions:
    def test_starts_idle(self) -> None:
        state = AcceptanceState()
        assert state.phase == "idle"
        assert not state.is_terminal

    def test_two_step_path(self) -> None:
        state = AcceptanceState()
        state.begin_search()
        state.record_activation()
        assert state.phase == "awaiting-confirmation"
        state.record_confirmation()
        assert state.phase == "accepted"
        assert state.accept_activations == 1
        assert state.confirm_activations == 1

    def test_single_step_timeout_path(self) -> None:
        state = AcceptanceState()
        state.begin_search()
        state.record_activation()
        state.finish()
        assert state.phase == "accepted"
        assert state.confirm_activations == 0

    def test_direct_acceptance_from_searching(self) -> None:
        state = AcceptanceState()
        state.begin_search()
        state.finish()
        assert state.is_terminal

    def test_disabled_is_absorbing(self) -> None:
        state = AcceptanceState()
        state.disable()
        assert state.is_terminal
        with pytest.raises(InvalidTransitionError):
            state.begin_search()


class TestForbiddenTransitions:
    def test_second_accept_activation_is_rejected(self) -> None:
        state = AcceptanceState()
        state.begin_search()
        state.record_activation()
        with pytest.raises(InvalidTransitionError):
            state.record_activation()
        assert state.accept_activations == 1

    def test_accepted_is_permanent(self) -> None:
        state = AcceptanceState()
        state.begin_search()
        state.finish()
        for move in (state.begin_search, state.record_activation, state.finish, state.disable):
            with pytest.raises(InvalidTransitionError):
                move()
        assert state.phase == "accepted"

    def test_disable_only_before_search(self) -> None:
        state = AcceptanceState()
        state.begin_search()
        with pytest.raises(InvalidTransitionError):
            state.disable()

    def test_confirmation_requires_activation(self) -> None:
        state = AcceptanceState()
        state.begin_search()
        with pytest.raises(InvalidTransitionError):
            state.record_confirmation()
        assert state.confirm_activations == 0
