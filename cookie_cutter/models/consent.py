"""Per-pass classification values and pass reports."""

from __future__ import annotations

import dataclasses
from typing import Literal

import pydantic

from cookie_cutter.consent import patterns
from cookie_cutter.models import dom
from cookie_cutter.utils import serialization

SourceReason = Literal[
    "direct-match",
    "visual-heuristic",
    "dialog",
    "isolated-subtree",
]

PassOutcome = Literal[
    "skipped",
    "busy",
    "fast-path",
    "activated",
    "hidden-activated",
    "confirmation",
    "fail-open",
    "activation-failed",
    "no-winner",
]

ConfirmationResult = Literal["confirmed", "confirmation-timeout"]


@dataclasses.dataclass(frozen=True)
class Container:
    """A banner-like element found by one of the discovery strategies."""

    node: dom.Node
    reason: SourceReason
    bonus: int


@dataclasses.dataclass(frozen=True)
class Control:
    """A clickable element plus the strongest container it sits in."""

    node: dom.Node
    reason: SourceReason
    container_bonus: int = 0


@dataclasses.dataclass(frozen=True)
class Candidate:
    """A scored acceptance candidate; never outlives the pass that made it."""

    control: dom.Node
    text_signature: str
    score: int
    source_reason: SourceReason
    tier: patterns.MatchTier = patterns.MatchTier.NONE


class PassReport(pydantic.BaseModel):
    """What a single classification pass did, for logging and SSE."""

    model_config = pydantic.ConfigDict(alias_generator=serialization.snake_to_camel, populate_by_name=True)

    trigger: str
    outcome: PassOutcome
    phase: str
    candidate_count: int = 0
    winner_text: str | None = None
    winner_score: int | None = None
    source_reason: SourceReason | None = None
    fast_path: str | None = None
    confirmation: ConfirmationResult | None = None
    removed_remnants: int = 0
