"""camelCase conversion shared by the page snapshot models and SSE payloads.

The in-page snapshot script emits JavaScript-style keys
(``ariaLabel``, ``zIndex``, ``shadowChildren``); the pydantic
models use snake_case fields with this function as their alias
generator so the payload validates without a translation layer.
"""

from __future__ import annotations


def snake_to_camel(name: str) -> str:
    """Convert a snake_case string to camelCase.

    Args:
        name: A snake_case identifier such as ``"aria_label"``.

    Returns:
        The camelCase equivalent, e.g. ``"ariaLabel"``.
    """
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)
