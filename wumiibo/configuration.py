"""Reading of the service's INI configuration."""

from __future__ import annotations

import os
import re
from enum import IntFlag

from . import ini
from .logger import set_log_enabled


class Key(IntFlag):
    """Console button bits as reported by the input service."""

    A = 1 << 0
    B = 1 << 1
    SELECT = 1 << 2
    START = 1 << 3
    DRIGHT = 1 << 4
    DLEFT = 1 << 5
    DUP = 1 << 6
    DDOWN = 1 << 7
    R = 1 << 8
    L = 1 << 9
    X = 1 << 10
    Y = 1 << 11


_KEY_NAMES = (
    ("A", Key.A),
    ("B", Key.B),
    ("SELECT", Key.SELECT),
    ("START", Key.START),
    ("RIGHT", Key.DRIGHT),
    ("LEFT", Key.DLEFT),
    ("UP", Key.DUP),
    ("DOWN", Key.DDOWN),
    ("R", Key.R),
    ("L", Key.L),
    ("X", Key.X),
    ("Y", Key.Y),
)

DEFAULT_MENU_COMBO = Key.L | Key.START | Key.DDOWN
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


class ConfigurationError(Exception):
    """The configuration could not be parsed."""


def key_string_to_mask(text: str) -> int:
    """Convert a ``+``-separated list of button names to a button mask.

    An entry matches every name it starts with, so ``RIGHT`` also sets ``R``.
    """
    mask = 0
    for button in text.split("+"):
        if not button:
            continue
        button = button.lstrip(" ")
        for name, value in _KEY_NAMES:
            if button.startswith(name):
                mask |= value
    return mask


def _atoi(text: str) -> int:
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


class Configuration:
    """Menu button combination and debug flag read from an INI file."""

    def __init__(self, data: str | None = None) -> None:
        self.data = data
        self.menu_combo: int = DEFAULT_MENU_COMBO
        self.debug = 0

    def read_ini(self, path: str | os.PathLike[str]) -> None:
        """Load the raw configuration text from ``path``."""
        with open(path, encoding="utf-8", errors="replace") as handle:
            self.data = handle.read()

    def parse_ini(self) -> None:
        """Parse the loaded text, applying the debug flag and menu buttons."""
        if self.data is None:
            raise ConfigurationError("no configuration loaded")
        config = ini.load_string(self.data)
        menu_buttons = config.get("config", "menubuttons")
        if menu_buttons is None:
            raise ConfigurationError("missing config.menubuttons")
        debug = config.get("config", "debug")
        if debug is None:
            raise ConfigurationError("missing config.debug")
        self.debug = _atoi(debug) & 0xFF
        set_log_enabled(self.debug > 0)
        self.menu_combo = key_string_to_mask(menu_buttons)