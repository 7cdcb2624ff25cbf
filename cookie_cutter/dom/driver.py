"""
The seam between the consent engine and a live page.

The engine only ever talks to a page through :class:`PageDriver`.
:class:`~cookie_cutter.browser.driver.PlaywrightDriver` implements it
over a Playwright page; the test-suite implements it in memory.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol

from cookie_cutter.models import dom

MutationCallback = Callable[[], None]


class MutationSubscription(Protocol):
    """Handle for a live tree-mutation observation."""

    @property
    def active(self) -> bool: ...

    async def cancel(self) -> None: ...


class PageDriver(Protocol):
    """Read and act on one page load."""

    async def snapshot(self) -> dom.Document:
        """Capture the accessible tree; ids are valid until the next snapshot."""
        ...

    async def click(self, node_id: int) -> None:
        """Activate the element directly; raises if that is impossible."""
        ...

    async def dispatch_click(self, node_id: int) -> None:
        """Dispatch a bubbling mouse click event at the element."""
        ...

    async def reveal(self, node_id: int) -> None:
        """Force a hidden element (and hidden ancestors) visible."""
        ...

    async def remove(self, node_ids: Sequence[int]) -> int:
        """Detach elements from the page; returns how many were removed."""
        ...

    async def release_scroll_lock(self, class_names: Sequence[str]) -> None:
        """Clear inline overflow/position and scroll-lock classes on root and body."""
        ...

    async def has_selector(self, selector: str) -> bool:
        """True if a visible element matches *selector*."""
        ...

    async def click_selector(self, selector: str) -> bool:
        """Click the first element matching *selector*."""
        ...

    async def observe_mutations(self, callback: MutationCallback) -> MutationSubscription:
        """Call *callback* for every batch of child-list mutations."""
        ...

    async def wait_until_visible(self) -> None:
        """Return once the document is visible (not a background tab)."""
        ...

    async def wait_for_load(self) -> None:
        """Return once the page ``load`` event has fired."""
        ...

    def page_url(self) -> str: ...

