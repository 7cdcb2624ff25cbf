"""Tests for cookie_cutter.consent.patterns — consent vocabulary and matchers."""

from __future__ import annotations

import pytest

from cookie_cutter.consent.patterns import (
    CONFIRM_EXCLUSION_PATTERNS,
    EXCLUSION_PATTERNS,
    MAX_LABEL_LENGTH,
    MatchTier,
    accept_tier,
    has_container_token,
    has_cookie_context,
    is_excluded,
    is_save_label,
    matched_exclusion,
)


class TestAcceptTier:
    @pytest.mark.parametrize(
        "label",
        ["Accept all", "accept", "I agree", "Verstanden", "j'accepte", "Alle akzeptieren", "Tout accepter", "Aceptar", "Accetta tutto", "Akkoord", "понятно", "Got it", "OK"],
    )
    def test_exact_labels_across_languages(self, label: str) -> None:
        assert accept_tier(label) is MatchTier.EXACT

    def test_prefix(self) -> None:
        assert accept_tier("Accept all cookies now") is MatchTier.PREFIX

    def test_substring(self) -> None:
        assert accept_tier("Yes, accept everything") is MatchTier.SUBSTRING

    def test_pattern(self) -> None:
        assert accept_tier("That's fine") is MatchTier.PATTERN

    def test_tiers_strictly_ordered(self) -> None:
        tiers = [accept_tier(t) for t in ("Accept all", "Accept all cookies now", "Please accept our terms")]
        assert tiers[0] > tiers[1] > tiers[2] > MatchTier.NONE

    @pytest.mark.parametrize("label", ["book now", "okta login", "yes or no survey", "continue reading"])
    def test_weak_phrases_only_match_whole_label(self, label: str) -> None:
        assert accept_tier(label) is MatchTier.NONE

    def test_over_long_label_never_matches(self) -> None:
        label = "accept " + "x" * MAX_LABEL_LENGTH
        assert accept_tier(label) is MatchTier.NONE

    def test_empty_label(self) -> None:
        assert accept_tier("") is MatchTier.NONE


class TestSaveLabels:
    @pytest.mark.parametrize("label", ["Save Preferences", "Save", "Confirm my choices", "Auswahl speichern", "Confirmer", "Guardar configuración"])
    def test_save_labels(self, label: str) -> None:
        assert is_save_label(label)

    @pytest.mark.parametrize("label", ["Accept all", "Save 20% today on shoes", "Settings"])
    def test_not_save_labels(self, label: str) -> None:
        assert not is_save_label(label)


class TestExclusions:
    @pytest.mark.parametrize(
        "text",
        [
            "accept and subscribe",
            "reject all",
            "manage settings",
            "privacy policy",
            "learn more",
            "sign in",
            "log out",
            "follow us",
            "buy now",
            "checkout",
            "download the app",
            "donate",
            "accept only necessary",
            "alle ablehnen",
            "i don't agree",
            "nicht akzeptieren",
            "accept necessary cookies",
        ],
    )
    def test_excluded(self, text: str) -> None:
        assert is_excluded(text)

    @pytest.mark.parametrize("text", ["accept all", "i agree", "got it", "ok"])
    def test_accept_labels_pass(self, text: str) -> None:
        assert not is_excluded(text)

    def test_href_is_checked(self) -> None:
        assert is_excluded("accept", href="/account/login")

    def test_matched_exclusion_reports_pattern(self) -> None:
        assert matched_exclusion("subscribe") is not None
        assert matched_exclusion("accept all") is None

    def test_confirm_step_allows_preferences(self) -> None:
        assert is_excluded("save preferences", patterns=EXCLUSION_PATTERNS)
        assert not is_excluded("save preferences", patterns=CONFIRM_EXCLUSION_PATTERNS)

    def test_confirm_step_still_vetoes_reject(self) -> None:
        assert is_excluded("reject and save", patterns=CONFIRM_EXCLUSION_PATTERNS)


class TestContextVocabulary:
    @pytest.mark.parametrize("text", ["We use cookies", "Your privacy matters", "GDPR notice", "This site uses tracking"])
    def test_cookie_context(self, text: str) -> None:
        assert has_cookie_context(text)

    def test_no_context(self) -> None:
        assert not has_cookie_context("Get the best stories in your inbox")

    def test_container_tokens(self) -> None:
        assert has_container_token("cookie-consent-bar")
        assert has_container_token("cmp-wrapper")
        assert not has_container_token("site-header")
