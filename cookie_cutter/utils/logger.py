"""
Structured console logging with per-module context and timers.

Lines go to stderr with colour, an ANSI-stripped copy is buffered
for the SSE debug stream, and, when ``WRITE_TO_FILE`` is set, each
site run also gets its own log file under ``.logs/``.

Per-run state (timers, buffer, file handle) lives in
``contextvars.ContextVar`` so that concurrent page runs on the same
event loop never see each other's output.
"""

from __future__ import annotations

import contextvars
import io
import os
import pathlib
import re
import sys
import time
from datetime import UTC, datetime

_ANSI_RE = re.compile(r"\033\[[0-9;]*m")

# ============================================================================
# Per-run state
# ============================================================================

_timers_var: contextvars.ContextVar[dict[str, float]] = contextvars.ContextVar("_timers_var")
_buffer_var: contextvars.ContextVar[list[str]] = contextvars.ContextVar("_buffer_var")
_file_var: contextvars.ContextVar[io.TextIOWrapper | None] = contextvars.ContextVar("_file_var", default=None)


def _timers() -> dict[str, float]:
    try:
        return _timers_var.get()
    except LookupError:
        timers: dict[str, float] = {}
        _timers_var.set(timers)
        return timers


def _buffer() -> list[str]:
    try:
        return _buffer_var.get()
    except LookupError:
        buf: list[str] = []
        _buffer_var.set(buf)
        return buf


def get_log_buffer() -> list[str]:
    """Return a copy of the buffered log lines (ANSI-stripped)."""
    return list(_buffer())


def clear_log_buffer() -> None:
    """Reset the buffer and timers before the next page run."""
    _buffer().clear()
    _timers().clear()


# ============================================================================
# File output
# ============================================================================


def _file_logging_enabled() -> bool:
    return os.environ.get("WRITE_TO_FILE", "").lower() == "true"


def start_log_file(hostname: str) -> None:
    """Open a log file for a single site run when file logging is on."""
    if not _file_logging_enabled():
        return

    end_log_file()

    logs_dir = pathlib.Path.cwd() / ".logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    safe_host = hostname.removeprefix("www.")
    safe_host = "".join(c if c.isalnum() or c in ".-" else "_" for c in safe_host)[:50]
    now = datetime.now(UTC)
    path = logs_dir / f"{safe_host}_{now.strftime('%Y-%m-%d_%H-%M-%S')}.log"

    try:
        stream = open(path, "a", encoding="utf-8")  # noqa: SIM115
    except OSError as exc:
        print(f"\033[31m✗ [Logger] Failed to open log file: {exc}\033[0m", file=sys.stderr)
        return

    _file_var.set(stream)
    stream.write(f"\n{'=' * 80}\n  Cookie Cutter - {hostname}\n  Started: {now.isoformat()}\n{'=' * 80}\n")


def end_log_file() -> None:
    """Flush and close the current run's log file, if any."""
    stream = _file_var.get(None)
    if stream is None:
        return
    try:
        stream.flush()
        stream.close()
    except OSError:
        print("\033[33m⚠ [Logger] Failed to close log file\033[0m", file=sys.stderr)
    _file_var.set(None)


def _emit(line: str) -> None:
    print(line, file=sys.stderr)
    clean = _ANSI_RE.sub("", line)
    stream = _file_var.get(None)
    if stream is not None:
        stream.write(clean + "\n")
        stream.flush()
    _buffer().append(clean)


# ============================================================================
# Formatting
# ============================================================================

_C = {
    "reset": "\033[0m",
    "bright": "\033[1m",
    "dim": "\033[2m",
    "cyan": "\033[36m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "red": "\033[31m",
    "magenta": "\033[35m",
    "blue": "\033[34m",
    "gray": "\033[90m",
}

_LEVELS = {
    "info": (_C["cyan"], "ℹ"),
    "success": (_C["green"], "✓"),
    "warn": (_C["yellow"], "⚠"),
    "error": (_C["red"], "✗"),
    "debug": (_C["gray"], "•"),
    "timing": (_C["magenta"], "⏱"),
}


def _timestamp() -> str:
    now = datetime.now(UTC)
    return now.strftime("%H:%M:%S.") + f"{now.microsecond // 1000:03d}"


def _format_duration(ms: float) -> str:
    if ms < 1000:
        return f"{int(ms)}ms"
    return f"{ms / 1000:.2f}s"


def _format_value(value: object) -> str:
    if value is None:
        return f"{_C['dim']}None{_C['reset']}"
    if isinstance(value, bool):
        return f"{_C['green']}True{_C['reset']}" if value else f"{_C['red']}False{_C['reset']}"
    if isinstance(value, (int, float)):
        return f"{_C['yellow']}{value}{_C['reset']}"
    if isinstance(value, str):
        display = value[:197] + "..." if len(value) > 200 else value
        return f'{_C["green"]}"{display}"{_C["reset"]}'
    if isinstance(value, (list, tuple, set)):
        return f"{_C['cyan']}[{len(value)} items]{_C['reset']}"
    return str(value)


# ============================================================================
# Logger
# ============================================================================


class Logger:
    """Context-prefixed logger with timing support."""

    def __init__(self, context: str) -> None:
        self._context = context

    def _log(self, level: str, message: str, data: dict[str, object] | None = None) -> None:
        colour, symbol = _LEVELS.get(level, _LEVELS["info"])
        prefix = (
            f"{_C['gray']}[{_timestamp()}]{_C['reset']} {colour}{symbol}{_C['reset']} "
            f"{_C['bright']}[{self._context}]{_C['reset']}"
        )
        if data:
            pairs = " ".join(f"{_C['dim']}{k}={_C['reset']}{_format_value(v)}" for k, v in data.items())
            _emit(f"{prefix} {message} {pairs}")
        else:
            _emit(f"{prefix} {message}")

    def info(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("info", message, data)

    def success(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("success", message, data)

    def warn(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("warn", message, data)

    def error(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("error", message, data)

    def debug(self, message: str, data: dict[str, object] | None = None) -> None:
        self._log("debug", message, data)

    def start_timer(self, label: str) -> None:
        """Start a named timer scoped to this logger's context."""
        _timers()[f"{self._context}:{label}"] = time.monotonic() * 1000

    def end_timer(self, label: str, message: str | None = None) -> float:
        """Stop a named timer, log the elapsed time and return it in ms."""
        started = _timers().pop(f"{self._context}:{label}", None)
        if started is None:
            self.warn(f'Timer "{label}" was not started')
            return 0.0
        duration = time.monotonic() * 1000 - started
        self._log(
            "timing",
            f"{message or f'Completed: {label}'} {_C['dim']}took{_C['reset']} "
            f"{_C['magenta']}{_format_duration(duration)}{_C['reset']}",
        )
        return duration

    def section(self, title: str) -> None:
        """Print a divider with *title*."""
        line = "─" * 60
        for ln in ("", f"{_C['blue']}{line}{_C['reset']}", f"{_C['blue']}{_C['bright']}  {title}{_C['reset']}", f"{_C['blue']}{line}{_C['reset']}", ""):
            _emit(ln)


def create_logger(context: str) -> Logger:
    """Create a logger for a specific module."""
    return Logger(context)
