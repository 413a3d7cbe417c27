"""Optional debug logging for the service."""

from __future__ import annotations

import logging
from collections.abc import Iterable

_LOGGER = logging.getLogger("wumiibo")
_MAX_MESSAGE = 1499

_state = {"enabled": False}


def set_log_enabled(value: bool) -> None:
    """Turn debug logging on or off."""
    _state["enabled"] = bool(value)


def is_log_enabled() -> bool:
    """Return whether debug logging is on."""
    return _state["enabled"]


def log_str(text: str) -> bool:
    """Log ``text`` if logging is enabled; return whether it was logged."""
    if not _state["enabled"]:
        return False
    _LOGGER.info("%s", text)
    return True


def log_printf(fmt: str, *args: object) -> bool:
    """Format with printf-style ``%`` rules, truncate and log the result."""
    text = fmt % args if args else fmt
    return log_str(text[:_MAX_MESSAGE])


def format_buffer(prefix: str, data: Iterable[int]) -> str:
    """Render bytes as a hex dump line, breaking after every twelfth byte."""
    cells = []
    for pos, byte in enumerate(data):
        separator = "\n" if pos > 0 and pos % 12 == 0 else " "
        cells.append(f"{byte & 0xFF:02x}{separator}")
    return f"{prefix} hex: {''.join(cells)}\n"