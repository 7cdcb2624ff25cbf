"""
Runtime configuration for the consent engine and its HTTP host.

Uses ``pydantic_settings.BaseSettings`` for environment variable
binding and type coercion.  Every engine knob has an explicit
``COOKIE_CUTTER_*`` alias; list values are given as JSON
(``COOKIE_CUTTER_PASS_DELAYS_MS='[300, 800]'``).

The score threshold and bonuses are empirically calibrated starting
points, not derived constants.
"""

from __future__ import annotations

import pathlib

import pydantic
import pydantic_settings

_DEFAULT_STATS_PATH = pathlib.Path.home() / ".cookie-cutter" / "state.json"


class EngineSettings(pydantic_settings.BaseSettings):
    """Timing, bounds and thresholds for classification passes.

    Attributes:
        pass_delays_ms: Fixed delays after start at which a pass runs,
            catching banners that render asynchronously.
        load_pass_delay_ms: Extra pass this long after the ``load`` event.
        mutation_debounce_ms: Quiet period that collapses a burst of
            tree mutations into a single pass.
        observer_lifetime_ms: Mutation observation is cancelled after this.
        confirmation_timeout_ms: How long to wait for a save/confirm
            control after the first activation.
        confirmation_poll_ms: Poll interval while waiting for it.
        activation_threshold: Minimum final score for activation.
        max_isolated_depth: Deepest isolated sub-tree that is searched.
        context_gate_depth: Ancestors inspected by the context gate.
        proximity_depth: Ancestors inspected for the proximity bonus.
        snapshot_node_limit: Upper bound on elements captured per snapshot.
        hidden_fallback: Whether hidden accept controls may be revealed.
    """

    model_config = pydantic_settings.SettingsConfigDict(populate_by_name=True)

    pass_delays_ms: list[int] = pydantic.Field(
        default_factory=lambda: [300, 800, 1500, 3000],
        validation_alias="COOKIE_CUTTER_PASS_DELAYS_MS",
    )
    load_pass_delay_ms: int = pydantic.Field(default=500, validation_alias="COOKIE_CUTTER_LOAD_PASS_DELAY_MS")
    mutation_debounce_ms: int = pydantic.Field(default=200, validation_alias="COOKIE_CUTTER_MUTATION_DEBOUNCE_MS")
    observer_lifetime_ms: int = pydantic.Field(default=15000, validation_alias="COOKIE_CUTTER_OBSERVER_LIFETIME_MS")
    confirmation_timeout_ms: int = pydantic.Field(default=3000, validation_alias="COOKIE_CUTTER_CONFIRMATION_TIMEOUT_MS")
    confirmation_poll_ms: int = pydantic.Field(default=250, validation_alias="COOKIE_CUTTER_CONFIRMATION_POLL_MS")
    activation_threshold: int = pydantic.Field(default=50, validation_alias="COOKIE_CUTTER_ACTIVATION_THRESHOLD")
    max_isolated_depth: int = pydantic.Field(default=3, ge=0, validation_alias="COOKIE_CUTTER_MAX_ISOLATED_DEPTH")
    context_gate_depth: int = pydantic.Field(default=10, ge=1, validation_alias="COOKIE_CUTTER_CONTEXT_GATE_DEPTH")
    proximity_depth: int = pydantic.Field(default=6, ge=0, validation_alias="COOKIE_CUTTER_PROXIMITY_DEPTH")
    snapshot_node_limit: int = pydantic.Field(default=15000, ge=1, validation_alias="COOKIE_CUTTER_SNAPSHOT_NODE_LIMIT")
    hidden_fallback: bool = pydantic.Field(default=True, validation_alias="COOKIE_CUTTER_HIDDEN_FALLBACK")

    @pydantic.field_validator("pass_delays_ms")
    @classmethod
    def _sorted_delays(cls, value: list[int]) -> list[int]:
        if any(delay < 0 for delay in value):
            raise ValueError("pass delays must be non-negative")
        return sorted(value)


class ServerSettings(pydantic_settings.BaseSettings):
    """HTTP host configuration for the status and accept-stream API."""

    model_config = pydantic_settings.SettingsConfigDict(populate_by_name=True)

    host: str = pydantic.Field(default="0.0.0.0", validation_alias="UVICORN_HOST")
    port: int = pydantic.Field(default=3001, validation_alias="UVICORN_PORT")
    environment: str = pydantic.Field(default="development", validation_alias="ENVIRONMENT")
    stats_path: pathlib.Path = pydantic.Field(default=_DEFAULT_STATS_PATH, validation_alias="COOKIE_CUTTER_STATS_PATH")
    default_device: str = pydantic.Field(default="windows-chrome", validation_alias="COOKIE_CUTTER_DEVICE")
    headless: bool = pydantic.Field(default=True, validation_alias="COOKIE_CUTTER_HEADLESS")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"
