"""Deterministic per-framework shortcuts tried before general classification.

Each entry is a ``(detect, accept)`` capability pair; the table is
scanned in order and the first entry that both detects and accepts
wins.  Selectors come from the frameworks' stable element ids.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from typing import Protocol

from cookie_cutter.dom import driver as driver_mod
from cookie_cutter.utils import errors, logger

log = logger.create_logger("Fast-Path")


class FastPath(Protocol):
    name: str

    async def detect(self, page: driver_mod.PageDriver) -> bool: ...

    async def accept(self, page: driver_mod.PageDriver) -> bool: ...


@dataclasses.dataclass(frozen=True)
class SelectorFastPath:
    """A framework recognised by one visible element and accepted by clicking another."""

    name: str
    detect_selector: str
    accept_selector: str

    async def detect(self, page: driver_mod.PageDriver) -> bool:
        return await page.has_selector(self.detect_selector)

    async def accept(self, page: driver_mod.PageDriver) -> bool:
        return await page.click_selector(self.accept_selector)


DEFAULT_FAST_PATHS: tuple[FastPath, ...] = (
    SelectorFastPath("onetrust", "#onetrust-banner-sdk", "#onetrust-accept-btn-handler"),
    SelectorFastPath("cookiebot", "#CybotCookiebotDialog", "#CybotCookiebotDialogBodyLevelButtonLevelOptinAllowAll"),
    SelectorFastPath("didomi", "#didomi-notice", "#didomi-notice-agree-button"),
    SelectorFastPath("quantcast", "#qc-cmp2-ui", "[data-testid='GDPR-CTA-accept']"),
    SelectorFastPath("cookieyes", ".cky-consent-container", ".cky-btn-accept"),
    SelectorFastPath("osano", ".osano-cm-window", ".osano-cm-accept-all"),
    SelectorFastPath("termly", "#termly-code-snippet-support", "[data-tid='banner-accept']"),
    SelectorFastPath("complianz", "#cmplz-cookiebanner-container", ".cmplz-accept"),
)


async def run_fast_paths(page: driver_mod.PageDriver, table: Sequence[FastPath]) -> str | None:
    """Return the name of the first entry that accepted, or ``None``.

    A selector or evaluation failure only disqualifies that entry.
    """
    for entry in table:
        try:
            if not await entry.detect(page):
                continue
            if await entry.accept(page):
                log.success("Fast path accepted", {"framework": entry.name})
                return entry.name
            log.debug("Fast path detected but accept control missing", {"framework": entry.name})
        except Exception as exc:
            log.debug("Fast path check failed", {"framework": entry.name, "error": errors.get_error_message(exc)})
    return None
