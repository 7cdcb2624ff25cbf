"""Dispatching a click to a chosen control."""

from __future__ import annotations

from cookie_cutter.dom import driver as driver_mod
from cookie_cutter.models import dom
from cookie_cutter.utils import errors, logger

log = logger.create_logger("Activation")


async def activate(page: driver_mod.PageDriver, node: dom.Node) -> None:
    """Click *node*, falling back to a dispatched bubbling click event.

    Raises:
        errors.ActivationError: when both paths fail.
    """
    try:
        await page.click(node.node_id)
        return
    except Exception as exc:
        log.debug("Direct click failed, dispatching click event", {"nodeId": node.node_id, "error": errors.get_error_message(exc)})

    try:
        await page.dispatch_click(node.node_id)
    except Exception as exc:
        raise errors.ActivationError(f"Could not activate node {node.node_id}: {errors.get_error_message(exc)}") from exc


async def try_activate(page: driver_mod.PageDriver, node: dom.Node) -> bool:
    """Like :func:`activate` but reports failure as ``False``."""
    try:
        await activate(page, node)
    except errors.ActivationError as exc:
        log.warn("Activation failed", {"error": str(exc)})
        return False
    return True
