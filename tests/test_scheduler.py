"""Tests for cookie_cutter.pipeline.scheduler — timers, load pass and debounced mutations."""

from __future__ import annotations

import asyncio

from cookie_cutter import config
from cookie_cutter.consent.engine import ConsentEngine
from cookie_cutter.models import dom
from cookie_cutter.pipeline.scheduler import Scheduler
from cookie_cutter.usage import channel, store
from factories import FakeDriver, build_document, el, page


class TestScheduler:
    def test_timer_pass_accepts_and_stops_observing(self, banner_page: dom.Document, fast_settings: config.EngineSettings) -> None:
        driver = FakeDriver(banner_page)
        engine = ConsentEngine(driver, fast_settings)

        phase = asyncio.run(Scheduler(engine, driver).run())

        assert phase == "accepted"
        assert driver.clicks == ["accept all"]
        assert driver.subscriptions
        assert not any(s.active for s in driver.subscriptions)

    def test_banner_inserted_later_is_found_by_mutation(
        self,
        newsletter_page: dom.Document,
        banner_page: dom.Document,
        fast_settings: config.EngineSettings,
    ) -> None:
        settings = fast_settings.model_copy(update={"pass_delays_ms": [0], "load_pass_delay_ms": 0})
        driver = FakeDriver(newsletter_page)
        engine = ConsentEngine(driver, settings)
        scheduler = Scheduler(engine, driver)

        async def scenario():
            run = asyncio.create_task(scheduler.run())
            await asyncio.sleep(0.03)
            driver.mutate(banner_page)
            return await run

        phase = asyncio.run(scenario())

        assert phase == "accepted"
        assert scheduler.mutation_passes >= 1
        assert driver.clicks == ["accept all"]

    def test_mutation_burst_is_debounced(self, newsletter_page: dom.Document, fast_settings: config.EngineSettings) -> None:
        settings = fast_settings.model_copy(
            update={"pass_delays_ms": [0], "load_pass_delay_ms": 0, "mutation_debounce_ms": 20, "observer_lifetime_ms": 150}
        )
        driver = FakeDriver(newsletter_page)
        scheduler = Scheduler(ConsentEngine(driver, settings), driver)

        async def scenario():
            run = asyncio.create_task(scheduler.run())
            await asyncio.sleep(0.02)
            for _ in range(5):
                driver.mutate()
                await asyncio.sleep(0.002)
            return await run

        phase = asyncio.run(scenario())

        assert phase == "searching"
        assert scheduler.mutation_passes == 1

    def test_disabled_engine_schedules_nothing(
        self,
        banner_page: dom.Document,
        fast_settings: config.EngineSettings,
        usage_store: store.UsageStore,
        status_client: channel.StatusClient,
    ) -> None:
        usage_store.set_enabled(False)
        driver = FakeDriver(banner_page)
        engine = ConsentEngine(driver, fast_settings, status_client)

        phase = asyncio.run(Scheduler(engine, driver).run())

        assert phase == "disabled"
        assert driver.snapshots == 0
        assert driver.subscriptions == []

    def test_cancel_stops_a_running_scheduler(self, newsletter_page: dom.Document, fast_settings: config.EngineSettings) -> None:
        settings = fast_settings.model_copy(update={"observer_lifetime_ms": 10_000})
        driver = FakeDriver(newsletter_page)
        scheduler = Scheduler(ConsentEngine(driver, settings), driver)

        async def scenario():
            run = asyncio.create_task(scheduler.run())
            await asyncio.sleep(0.05)
            await scheduler.cancel()
            return await asyncio.wait_for(run, timeout=1)

        assert asyncio.run(scenario()) == "searching"
        assert not any(s.active for s in driver.subscriptions)

    def test_load_timeout_is_not_fatal(self, banner_page: dom.Document, fast_settings: config.EngineSettings) -> None:
        driver = FakeDriver(banner_page, fail_load=True)
        phase = asyncio.run(Scheduler(ConsentEngine(driver, fast_settings), driver).run())
        assert phase == "accepted"
        assert driver.clicks == ["accept all"]

    def test_failed_frame_removal_is_not_fatal(self, fast_settings: config.EngineSettings) -> None:
        document = build_document(page(el("main", "Article"), el("iframe", "", id="sp_message_iframe_123")))
        driver = FakeDriver(document, fail_remove=True)
        phase = asyncio.run(Scheduler(ConsentEngine(driver, fast_settings), driver).run())
        assert phase == "searching"

    def test_mutation_during_a_pass_is_retried(
        self,
        newsletter_page: dom.Document,
        banner_page: dom.Document,
        fast_settings: config.EngineSettings,
    ) -> None:
        settings = fast_settings.model_copy(update={"pass_delays_ms": [0], "load_pass_delay_ms": 0, "observer_lifetime_ms": 200})
        driver = FakeDriver(newsletter_page, snapshot_delay=0.03)
        scheduler = Scheduler(ConsentEngine(driver, settings), driver)

        async def scenario():
            run = asyncio.create_task(scheduler.run())
            await asyncio.sleep(0.01)
            driver.mutate(banner_page)
            return await run

        phase = asyncio.run(scenario())

        assert phase == "accepted"
        assert scheduler.mutation_passes >= 2
        assert driver.clicks == ["accept all"]
