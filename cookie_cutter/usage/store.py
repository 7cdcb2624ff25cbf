"""Persisted enable flag and acceptance counters.

The store answers the engine's two messages:

- ``GET_STATUS`` → ``{"enabled": bool}`` (true when never set)
- ``COOKIE_ACCEPTED`` → bumps ``totalAccepted`` and records the
  sender's hostname in ``sitesProcessed`` (deduplicated)

State lives in a single JSON file::

    {"enabled": true, "stats": {"totalAccepted": 3, "sitesProcessed": ["a.com"]}}
"""

from __future__ import annotations

import json
import pathlib

from cookie_cutter.models import status
from cookie_cutter.utils import logger, url

log = logger.create_logger("UsageStore")


class UsageStore:
    """JSON-file backed collaborator state.

    A missing or malformed file is treated as the default state
    (enabled, zero counters).
    """

    def __init__(self, path: pathlib.Path) -> None:
        self._path = path
        self._state = self._load()

    @property
    def path(self) -> pathlib.Path:
        return self._path

    @property
    def enabled(self) -> bool:
        return self._state.enabled

    @property
    def stats(self) -> status.UsageStats:
        return self._state.stats

    def _load(self) -> status.StoredState:
        if not self._path.exists():
            log.debug("No stored state, using defaults", {"path": str(self._path)})
            return status.StoredState()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return status.StoredState.model_validate(data)
        except Exception as exc:
            log.warn("Failed to read stored state, using defaults", {"path": str(self._path), "error": str(exc)})
            return status.StoredState()

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._path.write_text(self._state.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        except Exception as exc:
            log.warn("Failed to write stored state", {"path": str(self._path), "error": str(exc)})

    def set_enabled(self, enabled: bool) -> None:
        self._state.enabled = enabled
        self._save()
        log.info("Auto-accept toggled", {"enabled": enabled})

    def record_acceptance(self, page_url: str) -> None:
        """Count one acceptance on *page_url*'s host."""
        stats = self._state.stats
        stats.total_accepted += 1
        hostname = url.extract_hostname(page_url)
        if hostname != "unknown":
            stats.sites_processed.add(hostname)
        self._save()
        log.info("Acceptance recorded", {"hostname": hostname, "totalAccepted": stats.total_accepted})

    def summary(self) -> status.StatsSummary:
        return status.StatsSummary(
            enabled=self._state.enabled,
            total_accepted=self._state.stats.total_accepted,
            sites_processed=len(self._state.stats.sites_processed),
        )

    def handle_message(self, message: status.Message, sender_url: str) -> status.StatusResponse | status.AckResponse:
        """Answer one engine message sent from the page at *sender_url*."""
        if message.type == "GET_STATUS":
            return status.StatusResponse(enabled=self._state.enabled)
        self.record_acceptance(sender_url)
        return status.AckResponse()
