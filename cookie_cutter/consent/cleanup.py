"""
Post-acceptance cleanup and the fail-open remnant removal.

Some consent frameworks leave scroll locks on the root elements or
keep a cross-origin frame and its overlay container in the page
after the choice is recorded.  Those remnants are recognised by
stable id/class prefixes.
"""

from __future__ import annotations

import dataclasses

from cookie_cutter.dom import driver as driver_mod
from cookie_cutter.models import dom
from cookie_cutter.utils import errors, logger

log = logger.create_logger("Cleanup")

SCROLL_LOCK_CLASSES: tuple[str, ...] = (
    "modal-open",
    "no-scroll",
    "noscroll",
    "overflow-hidden",
    "scroll-lock",
    "cookie-consent-active",
    "gdpr-active",
    "popin-gdpr-no-scroll",
    "sp-message-open",
    "didomi-popup-open",
    "ot-overflow-hidden",
    "cmp-open",
)

# Cross-origin message frames recognised by id prefix.
REMNANT_FRAME_ID_PREFIXES: tuple[str, ...] = ("sp_message_iframe",)

# Overlay containers recognised by a token in class or id.
REMNANT_CONTAINER_TOKENS: tuple[str, ...] = ("sp_message_container",)


@dataclasses.dataclass(frozen=True)
class CleanupReport:
    removed: int
    scroll_released: bool


def find_remnants(document: dom.Document) -> list[dom.Node]:
    """Known orphaned consent frames and their overlay containers."""
    found: list[dom.Node] = []
    for node in document.nodes:
        attrs = node.attributes
        if node.tag == "iframe" and attrs.id.startswith(REMNANT_FRAME_ID_PREFIXES):
            found.append(node)
        elif any(token in attrs.class_name or token in attrs.id for token in REMNANT_CONTAINER_TOKENS):
            found.append(node)
    return found


async def remove_remnants(page: driver_mod.PageDriver, document: dom.Document) -> int:
    remnants = find_remnants(document)
    if not remnants:
        return 0
    removed = await page.remove([node.node_id for node in remnants])
    log.info("Removed consent remnants", {"count": removed})
    return removed


async def run_cleanup(page: driver_mod.PageDriver) -> CleanupReport:
    """Best-effort restore of scrolling and removal of remnants."""
    released = True
    try:
        await page.release_scroll_lock(SCROLL_LOCK_CLASSES)
    except Exception as exc:
        released = False
        log.debug("Scroll lock release failed", {"error": errors.get_error_message(exc)})

    removed = 0
    try:
        removed = await remove_remnants(page, await page.snapshot())
    except Exception as exc:
        log.debug("Remnant removal failed", {"error": errors.get_error_message(exc)})

    return CleanupReport(removed=removed, scroll_released=released)
