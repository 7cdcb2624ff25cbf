"""Pydantic models for the message pair exchanged with the usage collaborator."""

from __future__ import annotations

from typing import Literal

import pydantic

from cookie_cutter.utils import serialization

MessageType = Literal["GET_STATUS", "COOKIE_ACCEPTED"]


class Message(pydantic.BaseModel):
    """A message sent from the engine to the collaborator."""

    type: MessageType


class StatusResponse(pydantic.BaseModel):
    """Reply to ``GET_STATUS``; ``enabled`` defaults to true when unset."""

    enabled: bool = True


class AckResponse(pydantic.BaseModel):
    """Reply to ``COOKIE_ACCEPTED``."""

    success: bool = True


class UsageStats(pydantic.BaseModel):
    """Acceptance counters owned by the collaborator."""

    model_config = pydantic.ConfigDict(alias_generator=serialization.snake_to_camel, populate_by_name=True)

    total_accepted: int = 0
    sites_processed: set[str] = pydantic.Field(default_factory=set)

    @pydantic.field_serializer("sites_processed")
    def _sorted_sites(self, sites: set[str]) -> list[str]:
        return sorted(sites)


class StoredState(pydantic.BaseModel):
    """Everything the collaborator persists between runs."""

    enabled: bool = True
    stats: UsageStats = pydantic.Field(default_factory=UsageStats)


class StatsSummary(pydantic.BaseModel):
    """Counter view served to the status surface."""

    model_config = pydantic.ConfigDict(alias_generator=serialization.snake_to_camel, populate_by_name=True)

    enabled: bool
    total_accepted: int
    sites_processed: int
