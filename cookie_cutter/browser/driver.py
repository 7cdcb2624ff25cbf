"""
:class:`~cookie_cutter.dom.driver.PageDriver` over a Playwright page.

Each snapshot replaces the page-side element array held by the
previous one, so node ids from an older snapshot stop resolving.
Mutation notifications arrive through one exposed binding per page
and are fanned out to the live subscriptions on the Python side.
"""

from __future__ import annotations

import itertools
from collections.abc import Sequence

from playwright import async_api

from cookie_cutter import config
from cookie_cutter.browser import scripts
from cookie_cutter.dom import driver as driver_mod
from cookie_cutter.models import dom
from cookie_cutter.utils import errors, logger

log = logger.create_logger("PageDriver")

# Text captured per element; consent containers rarely need more.
FULL_TEXT_LIMIT = 2000
SELECTOR_CLICK_TIMEOUT_MS = 2000

_binding_ids = itertools.count(1)


class PlaywrightSubscription:
    """A mutation observer installed in the page."""

    def __init__(
        self,
        owner: PlaywrightDriver,
        callback: driver_mod.MutationCallback,
        observer: async_api.JSHandle,
    ) -> None:
        self._owner = owner
        self._callback = callback
        self._observer = observer
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def notify(self) -> None:
        if self._active:
            self._callback()

    async def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._owner._subscriptions.discard(self)
        try:
            await self._observer.evaluate(scripts.DISCONNECT_SCRIPT)
            await self._observer.dispose()
        except Exception as exc:
            log.debug("Observer disconnect failed", {"error": errors.get_error_message(exc)})


class PlaywrightDriver:
    """Reads and acts on one Playwright page."""

    def __init__(self, page: async_api.Page, settings: config.EngineSettings | None = None) -> None:
        self._page = page
        self._settings = settings or config.EngineSettings()
        self._snapshot: async_api.JSHandle | None = None
        self._binding_name: str | None = None
        self._subscriptions: set[PlaywrightSubscription] = set()

    def page_url(self) -> str:
        return self._page.url

    async def snapshot(self) -> dom.Document:
        if self._snapshot is not None:
            try:
                await self._snapshot.dispose()
            except Exception as exc:
                log.debug("Stale snapshot dispose failed", {"error": errors.get_error_message(exc)})
            self._snapshot = None

        self._snapshot = await self._page.evaluate_handle(
            scripts.SNAPSHOT_SCRIPT,
            {
                "nodeLimit": self._settings.snapshot_node_limit,
                "textLimit": FULL_TEXT_LIMIT,
                "skipped": list(scripts.SKIPPED_TAGS),
            },
        )
        payload = await self._snapshot.evaluate(scripts.PAYLOAD_SCRIPT)
        document = dom.Document.model_validate(payload)
        log.debug("Snapshot captured", {"nodes": len(document), "rootIds": len(document.root_ids)})
        return document

    def _require_snapshot(self) -> async_api.JSHandle:
        if self._snapshot is None:
            raise errors.CookieCutterError("No snapshot taken on this page yet")
        return self._snapshot

    async def click(self, node_id: int) -> None:
        await self._require_snapshot().evaluate(scripts.CLICK_SCRIPT, node_id)

    async def dispatch_click(self, node_id: int) -> None:
        await self._require_snapshot().evaluate(scripts.DISPATCH_CLICK_SCRIPT, node_id)

    async def reveal(self, node_id: int) -> None:
        await self._require_snapshot().evaluate(scripts.REVEAL_SCRIPT, node_id)

    async def remove(self, node_ids: Sequence[int]) -> int:
        removed = await self._require_snapshot().evaluate(scripts.REMOVE_SCRIPT, list(node_ids))
        return int(removed or 0)

    async def release_scroll_lock(self, class_names: Sequence[str]) -> None:
        await self._page.evaluate(scripts.RELEASE_SCROLL_LOCK_SCRIPT, list(class_names))

    async def has_selector(self, selector: str) -> bool:
        return await self._page.locator(selector).first.is_visible()

    async def click_selector(self, selector: str) -> bool:
        locator = self._page.locator(selector).first
        if not await locator.is_visible():
            return False
        await locator.click(timeout=SELECTOR_CLICK_TIMEOUT_MS)
        return True

    def _on_mutation(self, _source: object) -> None:
        for subscription in list(self._subscriptions):
            subscription.notify()

    async def observe_mutations(self, callback: driver_mod.MutationCallback) -> PlaywrightSubscription:
        if self._binding_name is None:
            name = f"__cookieCutterMutation{next(_binding_ids)}"
            await self._page.expose_binding(name, self._on_mutation)
            self._binding_name = name
        observer = await self._page.evaluate_handle(scripts.OBSERVE_SCRIPT, self._binding_name)
        subscription = PlaywrightSubscription(self, callback, observer)
        self._subscriptions.add(subscription)
        return subscription

    async def wait_until_visible(self) -> None:
        if not await self._page.evaluate(scripts.VISIBLE_STATE_EXPRESSION):
            log.info("Page hidden, deferring until visible")
            await self._page.wait_for_function(scripts.VISIBLE_STATE_EXPRESSION, timeout=0)

    async def wait_for_load(self) -> None:
        await self._page.wait_for_load_state("load")
