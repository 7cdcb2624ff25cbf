"""Shared fixtures for the test suite."""

from __future__ import annotations

import pathlib

import pytest

from cookie_cutter import config
from cookie_cutter.models import dom
from cookie_cutter.usage import channel, store
from factories import build_document, consent_banner, el, page

# ── Settings ────────────────────────────────────────────────────


@pytest.fixture()
def fast_settings() -> config.EngineSettings:
    """Engine settings with millisecond-scale timings."""
    return config.EngineSettings(
        pass_delays_ms=[0, 10, 20],
        load_pass_delay_ms=5,
        mutation_debounce_ms=5,
        observer_lifetime_ms=80,
        confirmation_timeout_ms=40,
        confirmation_poll_ms=5,
    )


# ── Page Fixtures ───────────────────────────────────────────────


@pytest.fixture()
def banner_page() -> dom.Document:
    """A cookie bar with an accept button and a policy link."""
    return build_document(
        page(
            el("main", "Welcome to the news of the day"),
            consent_banner(
                el("button", "Accept All", style={"backgroundColor": "rgb(0, 90, 200)"}),
                el("a", "Privacy Policy", href="/privacy"),
            ),
            body_class="modal-open",
            body_style={"overflow": "hidden"},
        ),
    )


@pytest.fixture()
def closed_page() -> dom.Document:
    """The same page once the banner has gone."""
    return build_document(page(el("main", "Welcome to the news of the day")))


@pytest.fixture()
def newsletter_page() -> dom.Document:
    """No consent UI at all, just a newsletter prompt."""
    return build_document(
        page(
            el("main", "Welcome to the news of the day"),
            el(
                "div",
                "",
                el("p", "Get the best stories in your inbox"),
                el("button", "Subscribe to our newsletter"),
                class_name="promo-box",
            ),
        ),
    )


# ── Usage Collaborator ──────────────────────────────────────────


@pytest.fixture()
def usage_store(tmp_path: pathlib.Path) -> store.UsageStore:
    """A store backed by a fresh state file."""
    return store.UsageStore(tmp_path / "state.json")


@pytest.fixture()
def status_client(usage_store: store.UsageStore) -> channel.StatusClient:
    """Engine-side client talking to ``usage_store`` for a fixed page URL."""
    return channel.StatusClient(channel.LocalChannel(usage_store, "https://www.example.com/article"))
