"""
Message passing between the engine and the usage collaborator.

The engine never touches the store directly: it sends ``GET_STATUS``
once at start-up and ``COOKIE_ACCEPTED`` once per acceptance through a
:class:`Channel`.  An unreachable collaborator is never fatal; the
engine then behaves as if enabled and the notification is dropped.
"""

from __future__ import annotations

from typing import Any, Protocol

from cookie_cutter.models import status
from cookie_cutter.usage import store as store_mod
from cookie_cutter.utils import errors, logger

log = logger.create_logger("Channel")


class Channel(Protocol):
    async def send(self, message: status.Message) -> dict[str, Any]: ...


class LocalChannel:
    """In-process channel bound to one page's URL.

    ``close()`` models the host context going away (e.g. during
    navigation teardown): every later send raises
    :class:`~cookie_cutter.utils.errors.ChannelUnavailableError`.
    """

    def __init__(self, store: store_mod.UsageStore, sender_url: str) -> None:
        self._store = store
        self._sender_url = sender_url
        self._closed = False

    def close(self) -> None:
        self._closed = True

    async def send(self, message: status.Message) -> dict[str, Any]:
        if self._closed:
            raise errors.ChannelUnavailableError("Channel closed")
        reply = self._store.handle_message(message, self._sender_url)
        return reply.model_dump()


class StatusClient:
    """Engine-side wrapper that turns channel failures into defaults."""

    def __init__(self, channel: Channel) -> None:
        self._channel = channel

    async def is_enabled(self) -> bool:
        try:
            reply = await self._channel.send(status.Message(type="GET_STATUS"))
        except Exception as exc:
            log.debug("Status unavailable, assuming enabled", {"error": errors.get_error_message(exc)})
            return True
        return status.StatusResponse.model_validate(reply or {}).enabled

    async def notify_accepted(self) -> bool:
        """Send ``COOKIE_ACCEPTED``; returns whether it was delivered."""
        try:
            await self._channel.send(status.Message(type="COOKIE_ACCEPTED"))
        except Exception as exc:
            log.debug("Acceptance notification dropped", {"error": errors.get_error_message(exc)})
            return False
        return True
