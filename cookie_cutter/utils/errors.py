"""
Exception types and error message extraction.
"""

from __future__ import annotations


class CookieCutterError(Exception):
    """Base class for errors raised by the consent engine."""


class InvalidTransitionError(CookieCutterError):
    """An acceptance state transition that the state machine forbids."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move from {current} to {target}")
        self.current = current
        self.target = target


class ActivationError(CookieCutterError):
    """Neither a direct click nor a dispatched click event reached the control."""


class ChannelUnavailableError(CookieCutterError):
    """The usage collaborator could not be reached (host context torn down)."""


def get_error_message(error: BaseException | object) -> str:
    """
    Safely extract an error message from an unknown error type.
    """
    if isinstance(error, Exception):
        return str(error) or type(error).__name__
    return "Unknown error"
