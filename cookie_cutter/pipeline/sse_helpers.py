"""
Server-Sent Events formatting helpers.

Pure functions with no side-effects.
"""

from __future__ import annotations

import json
from typing import Any


def format_sse_event(event_type: str, data: dict[str, Any]) -> str:
    """Format a Server-Sent Event string."""
    return f"event: {event_type}\ndata: {json.dumps(data)}\n\n"


def format_progress_event(step: str, message: str, progress: int) -> str:
    """Format a progress SSE event."""
    return format_sse_event(
        "progress",
        {"step": step, "message": message, "progress": progress},
    )
