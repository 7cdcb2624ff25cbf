"""End-to-end acceptance flows over in-memory pages."""

from __future__ import annotations

import asyncio

from cookie_cutter import config
from cookie_cutter.consent.engine import ConsentEngine
from cookie_cutter.models import dom
from cookie_cutter.pipeline.scheduler import Scheduler
from cookie_cutter.usage import channel, store
from factories import FakeDriver, build_document, consent_banner, el, page


def _body(document: dom.Document) -> dom.Node:
    return next(node for node in document.nodes if node.tag == "body")


def _accept(engine: ConsentEngine):
    async def scenario():
        await engine.start()
        return await engine.run_pass("timer-0ms")

    return asyncio.run(scenario())


class TestSingleStepBanner:
    def test_accept_all_is_clicked_and_counted(
        self,
        banner_page: dom.Document,
        closed_page: dom.Document,
        fast_settings: config.EngineSettings,
        usage_store: store.UsageStore,
        status_client: channel.StatusClient,
    ) -> None:
        driver = FakeDriver(banner_page, after_click={"Accept All": closed_page})
        engine = ConsentEngine(driver, fast_settings, status_client)

        report = _accept(engine)

        assert report.outcome == "activated"
        assert driver.clicks == ["accept all"]
        assert "privacy policy" not in driver.clicks
        assert engine.state.phase == "accepted"
        assert usage_store.stats.total_accepted == 1
        assert usage_store.stats.sites_processed == {"www.example.com"}

    def test_scroll_lock_is_released(self, banner_page: dom.Document, fast_settings: config.EngineSettings) -> None:
        driver = FakeDriver(banner_page)
        _accept(ConsentEngine(driver, fast_settings))

        body = _body(driver.document)
        assert "modal-open" not in body.attributes.class_name.split()
        assert "overflow" not in body.inline_style

    def test_later_passes_are_no_ops(
        self,
        banner_page: dom.Document,
        closed_page: dom.Document,
        fast_settings: config.EngineSettings,
        usage_store: store.UsageStore,
        status_client: channel.StatusClient,
    ) -> None:
        driver = FakeDriver(banner_page, after_click={"Accept All": closed_page})
        engine = ConsentEngine(driver, fast_settings, status_client)
        _accept(engine)

        later = [asyncio.run(engine.run_pass("mutation")) for _ in range(2)]

        assert [r.outcome for r in later] == ["skipped", "skipped"]
        assert driver.clicks == ["accept all"]
        assert usage_store.stats.total_accepted == 1


class TestTwoStepBanner:
    def test_save_step_is_confirmed(
        self,
        banner_page: dom.Document,
        closed_page: dom.Document,
        fast_settings: config.EngineSettings,
        usage_store: store.UsageStore,
        status_client: channel.StatusClient,
    ) -> None:
        save_step = build_document(
            page(
                el("main", "Welcome to the news of the day"),
                consent_banner(
                    el("button", "Save Preferences"),
                    text="Review your cookie preferences before continuing.",
                ),
            ),
        )
        driver = FakeDriver(
            banner_page,
            after_click={"Accept All": save_step, "Save Preferences": closed_page},
        )
        engine = ConsentEngine(driver, fast_settings, status_client)

        report = _accept(engine)

        assert driver.clicks == ["accept all", "save preferences"]
        assert report.confirmation == "confirmed"
        assert engine.state.phase == "accepted"
        assert engine.state.confirm_activations == 1
        assert usage_store.stats.total_accepted == 1


class TestNoConsentUi:
    def test_newsletter_prompt_is_left_alone(
        self,
        newsletter_page: dom.Document,
        fast_settings: config.EngineSettings,
        usage_store: store.UsageStore,
        status_client: channel.StatusClient,
    ) -> None:
        driver = FakeDriver(newsletter_page)
        engine = ConsentEngine(driver, fast_settings, status_client)

        phase = asyncio.run(Scheduler(engine, driver).run())

        assert phase == "searching"
        assert driver.clicks == []
        assert usage_store.stats.total_accepted == 0
        assert all(r.outcome == "no-winner" for r in engine.reports)
