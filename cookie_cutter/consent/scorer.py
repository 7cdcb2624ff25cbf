"""
Acceptance classifier and scorer.

For each discovered control:

1. Build the text signature; an exclusion match on the signature (or
   on a link's href) discards the control outright.
2. Base points from the accept-match specificity tier.
3. Control kind: native buttons gain, anchors lose.
4. Filled background ("primary" styling) gains.
5. Proximity: the nearest ancestor whose class/id carries cookie
   vocabulary adds a bonus that decays with distance.
6. Container contribution from discovery.
7. Mandatory context gate over the ancestor chain.  A control that
   fails it is discarded whatever its score.

Survivors are ranked by score; the top one is the winner only if it
reaches the activation threshold.
"""

from __future__ import annotations

from typing import Literal

from cookie_cutter.consent import patterns
from cookie_cutter.dom import accessor
from cookie_cutter.models import consent, dom
from cookie_cutter.utils import logger

log = logger.create_logger("Scorer")

LabelKind = Literal["accept", "save"]

TIER_POINTS: dict[patterns.MatchTier, int] = {
    patterns.MatchTier.EXACT: 60,
    patterns.MatchTier.PREFIX: 50,
    patterns.MatchTier.SUBSTRING: 40,
    patterns.MatchTier.PATTERN: 30,
    patterns.MatchTier.NONE: 0,
}

NATIVE_BUTTON_BONUS = 10
ANCHOR_PENALTY = -10
FILLED_BACKGROUND_BONUS = 5
PROXIMITY_BONUS_MAX = 15
PROXIMITY_DECAY = 2
# Slice of an ancestor's own text the context gate reads.
GATE_TEXT_LIMIT = 1000


def accept_points(parts: list[str]) -> tuple[patterns.MatchTier, int]:
    """Best tier over the full signature and each of its parts."""
    candidates = [" ".join(parts), *parts] if len(parts) > 1 else parts
    best = max((patterns.accept_tier(text) for text in candidates), default=patterns.MatchTier.NONE)
    return best, TIER_POINTS[best]


def kind_adjustment(node: dom.Node) -> int:
    if accessor.is_native_button(node):
        return NATIVE_BUTTON_BONUS
    if node.tag == "a":
        return ANCHOR_PENALTY
    return 0


def emphasis_bonus(node: dom.Node) -> int:
    return FILLED_BACKGROUND_BONUS if accessor.has_filled_background(node) else 0


def proximity_bonus(document: dom.Document, node: dom.Node, depth: int = 6) -> int:
    """Bonus for the nearest ancestor whose class/id names cookie context."""
    for distance, ancestor in accessor.ancestors(document, node, depth):
        identity = accessor.normalize(f"{ancestor.attributes.class_name} {ancestor.attributes.id}")
        if patterns.has_cookie_context(identity):
            return max(PROXIMITY_BONUS_MAX - PROXIMITY_DECAY * (distance - 1), 0)
    return 0


def passes_context_gate(document: dom.Document, node: dom.Node, depth: int = 10) -> bool:
    """True if an ancestor within *depth* levels carries cookie-context vocabulary.

    Whole-viewport containers are skipped: they contain every control
    on the page and prove nothing.
    """
    for _distance, ancestor in accessor.ancestors(document, node, depth):
        if accessor.is_viewport_sized(ancestor, document.viewport):
            continue
        if patterns.has_cookie_context(accessor.identity_text(ancestor)):
            return True
        if patterns.has_cookie_context(ancestor.full_text[:GATE_TEXT_LIMIT]):
            return True
    return False


def _href(node: dom.Node) -> str | None:
    return node.attributes.href if node.tag == "a" else None


def score_control(
    document: dom.Document,
    control: consent.Control,
    *,
    gate_depth: int = 10,
    proximity_depth: int = 6,
    label_matcher: LabelKind = "accept",
) -> consent.Candidate | None:
    """Score one control, or return ``None`` if it can never be activated.

    ``label_matcher`` selects the vocabulary: ``"accept"`` for the first
    activation, ``"save"`` for the confirmation step.
    """
    node = control.node
    parts = accessor.text_parts(node)
    signature = " ".join(parts)
    if not signature:
        return None

    exclusions = patterns.EXCLUSION_PATTERNS if label_matcher == "accept" else patterns.CONFIRM_EXCLUSION_PATTERNS
    vetoed_by = patterns.matched_exclusion(signature, _href(node), patterns=exclusions)
    if vetoed_by is not None:
        log.debug("Excluded control", {"text": signature, "pattern": vetoed_by})
        return None

    if label_matcher == "accept":
        tier, points = accept_points(parts)
    else:
        tier = patterns.MatchTier.EXACT if any(patterns.is_save_label(p) for p in parts) else patterns.MatchTier.NONE
        points = TIER_POINTS[tier]
    if tier is patterns.MatchTier.NONE:
        return None

    if not passes_context_gate(document, node, gate_depth):
        log.debug("No cookie context for control", {"text": signature})
        return None

    score = (
        points
        + kind_adjustment(node)
        + emphasis_bonus(node)
        + proximity_bonus(document, node, proximity_depth)
        + control.container_bonus
    )
    return consent.Candidate(
        control=node,
        text_signature=signature,
        score=score,
        source_reason=control.reason,
        tier=tier,
    )


def rank(
    document: dom.Document,
    controls: list[consent.Control],
    *,
    gate_depth: int = 10,
    proximity_depth: int = 6,
    label_matcher: LabelKind = "accept",
) -> list[consent.Candidate]:
    """Score every control and return survivors, best first (stable on ties)."""
    candidates: list[consent.Candidate] = []
    for control in controls:
        candidate = score_control(
            document,
            control,
            gate_depth=gate_depth,
            proximity_depth=proximity_depth,
            label_matcher=label_matcher,
        )
        if candidate is not None:
            log.debug(
                "Candidate",
                {"text": candidate.text_signature, "score": candidate.score, "reason": candidate.source_reason},
            )
            candidates.append(candidate)
    candidates.sort(key=lambda c: c.score, reverse=True)
    return candidates


def select_winner(candidates: list[consent.Candidate], threshold: int) -> consent.Candidate | None:
    """Top-ranked candidate if it reaches *threshold*; ambiguity means no winner."""
    if not candidates:
        return None
    best = candidates[0]
    if best.score < threshold:
        log.debug("Best candidate below threshold", {"text": best.text_signature, "score": best.score, "threshold": threshold})
        return None
    return best

