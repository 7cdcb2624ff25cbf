"""Tests for cookie_cutter.consent.scorer — scoring, exclusion veto and the context gate."""

from __future__ import annotations

import pytest

from cookie_cutter.consent import discovery, patterns, scorer
from cookie_cutter.models import consent, dom
from factories import build_document, consent_banner, el, find, page


def _candidate(document: dom.Document, label: str, **kwargs) -> consent.Candidate | None:
    found = discovery.discover(document)
    target = find(document, label)
    control = next(c for c in found.controls + found.hidden_controls if c.node.node_id == target.node_id)
    return scorer.score_control(document, control, **kwargs)


def _nested(levels: int):
    item = el("button", "Accept all")
    for _ in range(levels):
        item = el("div", "", item)
    return item


class TestExclusionPrecedence:
    @pytest.mark.parametrize("label", ["Accept and Subscribe", "Accept & sign in", "Accept all and buy now", "Accept (privacy policy)"])
    def test_excluded_even_with_accept_match(self, label: str) -> None:
        document = build_document(page(consent_banner(el("button", label))))
        assert _candidate(document, label) is None

    @pytest.mark.parametrize(
        "label",
        [
            "No acepto",
            "Nicht akzeptieren",
            "I don't agree",
            "I do not consent",
            "Non accetto",
            "Nie zgadzam się",
            "Não aceito",
            "Je n'accepte pas",
            "Accept necessary cookies",
            "Allow essential cookies",
        ],
    )
    def test_negated_and_minimal_labels_are_rejections(self, label: str) -> None:
        document = build_document(page(consent_banner(el("button", label))))
        assert _candidate(document, label) is None

    @pytest.mark.parametrize("label", ["Accept all", "I agree", "Alle akzeptieren", "No problem", "Accetto"])
    def test_plain_accept_labels_still_score(self, label: str) -> None:
        document = build_document(page(consent_banner(el("button", label))))
        assert _candidate(document, label) is not None

    def test_attribute_labels_are_checked(self) -> None:
        document = build_document(page(consent_banner(el("a", "Accept", href="javascript:void(0)", title="Subscribe"))))
        assert _candidate(document, "Accept Subscribe") is None

    def test_anchor_href_is_checked(self) -> None:
        document = build_document(page(consent_banner(el("a", "Accept", href="#newsletter"))))
        assert _candidate(document, "Accept") is None


class TestContextGate:
    def test_no_context_never_scores(self) -> None:
        document = build_document(
            page(el("div", "", el("button", "Accept all", style={"backgroundColor": "rgb(0, 0, 255)"}), class_name="toolbar")),
        )
        assert _candidate(document, "Accept all") is None

    def test_viewport_sized_ancestors_do_not_count(self) -> None:
        document = build_document(
            page(
                el("p", "We use cookies on this site"),
                el("div", "", el("button", "Accept all"), class_name="toolbar"),
            ),
        )
        assert _candidate(document, "Accept all") is None

    def test_gate_depth_is_bounded(self) -> None:
        document = build_document(page(el("div", "", el("p", "We use cookies"), _nested(10), class_name="box")))
        assert _candidate(document, "Accept all", gate_depth=10) is None
        assert _candidate(document, "Accept all", gate_depth=11) is not None

    def test_ancestor_text_satisfies_gate(self) -> None:
        document = build_document(page(el("div", "", el("span", "Cookies help us"), el("button", "OK"), class_name="notice")))
        candidate = _candidate(document, "OK")
        assert candidate is not None
        assert candidate.tier is patterns.MatchTier.EXACT


class TestSpecificity:
    def test_accept_points_strictly_decrease(self) -> None:
        points = [scorer.accept_points([label])[1] for label in ("accept all", "accept all cookies now", "please accept our terms")]
        assert points[0] > points[1] > points[2] > 0

    def test_scores_decrease_under_identical_context(self) -> None:
        labels = ("Accept all", "Accept all cookies now", "Yes, accept everything")
        document = build_document(page(consent_banner(*(el("button", label) for label in labels))))
        scores = [_candidate(document, label).score for label in labels]
        assert scores[0] > scores[1] > scores[2]

    def test_full_breakdown(self) -> None:
        document = build_document(
            page(consent_banner(el("button", "Accept All", style={"backgroundColor": "rgb(0, 90, 200)"}))),
        )
        candidate = _candidate(document, "Accept All")
        # exact + native button + filled + proximity at distance 1 + direct-match container
        assert candidate.score == 60 + 10 + 5 + 15 + 10
        assert candidate.source_reason == "direct-match"

    def test_anchor_penalty(self) -> None:
        document = build_document(page(consent_banner(el("button", "Accept all"), el("a", "Allow all", href="#"))))
        button = _candidate(document, "Accept all")
        anchor = _candidate(document, "Allow all")
        assert button.score - anchor.score == scorer.NATIVE_BUTTON_BONUS - scorer.ANCHOR_PENALTY


class TestProximity:
    def test_decays_with_distance(self) -> None:
        near = build_document(el("div", "", el("button", "OK"), class_name="cookie-box"))
        far = build_document(el("div", "", el("div", "", el("div", "", el("button", "OK"))), class_name="cookie-box"))
        assert scorer.proximity_bonus(near, find(near, "OK")) == 15
        assert scorer.proximity_bonus(far, find(far, "OK")) == 11

    def test_beyond_depth(self) -> None:
        document = build_document(el("div", "", _nested(6), class_name="cookie-box"))
        assert scorer.proximity_bonus(document, find(document, "Accept all"), depth=6) == 0


class TestSaveMatcher:
    def test_save_label_only_scores_for_save_step(self) -> None:
        document = build_document(page(consent_banner(el("button", "Save Preferences"))))
        assert _candidate(document, "Save Preferences") is None
        candidate = _candidate(document, "Save Preferences", label_matcher="save")
        assert candidate is not None
        assert candidate.score >= 50

    def test_accept_label_does_not_score_for_save_step(self) -> None:
        document = build_document(page(consent_banner(el("button", "Accept all"))))
        assert _candidate(document, "Accept all", label_matcher="save") is None


class TestRankAndSelect:
    def test_rank_orders_best_first(self) -> None:
        document = build_document(page(consent_banner(el("a", "OK", href="#"), el("button", "Accept all"), el("button", "Reject all"))))
        found = discovery.discover(document)
        ranked = scorer.rank(document, found.controls)
        assert [c.text_signature for c in ranked] == ["accept all", "ok"]

    def test_threshold(self) -> None:
        document = build_document(page(consent_banner(el("button", "Accept all"))))
        ranked = scorer.rank(document, discovery.discover(document).controls)
        assert scorer.select_winner(ranked, 50) is ranked[0]
        assert scorer.select_winner(ranked, ranked[0].score + 1) is None

    def test_no_candidates(self) -> None:
        assert scorer.select_winner([], 50) is None
