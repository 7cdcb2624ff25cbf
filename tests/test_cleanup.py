"""Tests for cookie_cutter.consent.cleanup — scroll-lock release and remnant removal."""

from __future__ import annotations

import asyncio

from cookie_cutter.consent import cleanup
from factories import FakeDriver, build_document, el, page


def _locked_page():
    return build_document(
        page(
            el("main", "Article"),
            el("div", "", el("iframe", "", id="sp_message_iframe_1093"), id="sp_message_container_1093"),
            html_class="sp-message-open",
            body_class="modal-open theme-dark no-scroll",
            body_style={"overflow": "hidden", "position": "fixed"},
        ),
    )


class TestFindRemnants:
    def test_finds_frame_and_container(self) -> None:
        document = _locked_page()
        found = cleanup.find_remnants(document)
        assert sorted(node.tag for node in found) == ["div", "iframe"]

    def test_ignores_regular_frames(self) -> None:
        document = build_document(page(el("iframe", "", id="youtube-player")))
        assert cleanup.find_remnants(document) == []


class TestRunCleanup:
    def test_releases_scroll_lock(self) -> None:
        driver = FakeDriver(_locked_page())
        report = asyncio.run(cleanup.run_cleanup(driver))
        html, body = driver.document.nodes[0], driver.document.nodes[1]
        assert report.scroll_released
        assert html.attributes.class_name == ""
        assert body.attributes.class_name == "theme-dark"
        assert body.inline_style == {}

    def test_removes_remnants(self) -> None:
        driver = FakeDriver(_locked_page())
        report = asyncio.run(cleanup.run_cleanup(driver))
        assert report.removed == 2
        assert len(driver.removed) == 2

    def test_snapshot_failure_is_not_fatal(self) -> None:
        driver = FakeDriver(_locked_page(), fail_snapshot=True)
        report = asyncio.run(cleanup.run_cleanup(driver))
        assert report.removed == 0
        assert report.scroll_released
