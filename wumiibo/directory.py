"""Browsing of the amiibo folder on the SD card."""

from __future__ import annotations

import contextlib
import os
from dataclasses import dataclass
from enum import IntFlag
from pathlib import Path

ENTRIES_PER_PAGE = 20
MAX_ENTRIES = 400
DEFAULT_DIRECTORY = "/wumiibo"
PARENT_ENTRY = "..."


class Button(IntFlag):
    """Pad button bits as read from the hardware register."""

    A = 1 << 0
    B = 1 << 1
    SELECT = 1 << 2
    START = 1 << 3
    RIGHT = 1 << 4
    LEFT = 1 << 5
    UP = 1 << 6
    DOWN = 1 << 7
    R1 = 1 << 8
    L1 = 1 << 9
    X = 1 << 10
    Y = 1 << 11


@dataclass(frozen=True)
class DirectoryEntry:
    """One listed name and whether it is a directory."""

    name: str
    is_directory: bool


class DirectoryLister:
    """Paged listing of a directory with keyboard-style navigation."""

    def __init__(self, root: str | os.PathLike[str] = "/") -> None:
        self._root = Path(root)
        self._entries: list[DirectoryEntry] = []
        self._location = ""
        self.selected = -1
        self.page = 0

    @property
    def entries(self) -> tuple[DirectoryEntry, ...]:
        return tuple(self._entries)

    @property
    def selected_file_location(self) -> str:
        return self._location

    @property
    def has_selected(self) -> bool:
        return self.selected != -1

    def populate_entries(self, directory: str) -> None:
        """List ``directory`` (an SD path) behind a leading parent entry."""
        self._location = directory
        self._entries = []
        self.selected = 0
        self.page = 0
        with os.scandir(self._root / directory.lstrip("/")) as scan:
            found = sorted(
                (DirectoryEntry(item.name, item.is_dir()) for item in scan),
                key=lambda entry: entry.name,
            )
        self._entries = [DirectoryEntry(PARENT_ENTRY, True), *found[: MAX_ENTRIES - 1]]

    def construct_file_location(self) -> str:
        """Append the selected entry's name to the current location."""
        self._location = f"{self._location}/{self._entries[self.selected].name}"
        return self._location

    def _parent_location(self) -> str:
        cut = max(self._location.rfind("/"), 0)
        return self._location[:cut] or DEFAULT_DIRECTORY

    def _enter_selected(self) -> None:
        entry = self._entries[self.selected]
        if entry.name[:1] != "." and entry.name[1:2] != ".":
            self.construct_file_location()
        else:
            self._location = self._parent_location()
        with contextlib.suppress(OSError):
            self.populate_entries(self._location)
        self.selected = 0

    def handle_key(self, key: int) -> bool:
        """Apply one key press; return True once a file is chosen or B cancels."""
        key = int(key)
        if key & Button.DOWN:
            self.selected += 1
        if key & Button.UP:
            self.selected -= 1
        if key & Button.A and 0 <= self.selected < len(self._entries):
            if not self._entries[self.selected].is_directory:
                return True
            self._enter_selected()
        if key & Button.B:
            self.selected = -1
            return True

        count = len(self._entries)
        if key & Button.LEFT:
            self.selected -= ENTRIES_PER_PAGE
        if key & Button.RIGHT:
            if self.selected + ENTRIES_PER_PAGE < count:
                self.selected += ENTRIES_PER_PAGE
            elif (count - 1) // ENTRIES_PER_PAGE == self.page:
                self.selected %= ENTRIES_PER_PAGE
            else:
                self.selected = count - 1

        if self.selected < 0:
            self.selected = count - 1
        elif self.selected >= count:
            self.selected = 0
        self.page = self.selected // ENTRIES_PER_PAGE
        return False

    def visible_entries(self) -> list[tuple[DirectoryEntry, bool]]:
        """Entries on the current page, each with whether it is selected."""
        start = max(self.page, 0) * ENTRIES_PER_PAGE
        return [
            (entry, start + offset == self.selected)
            for offset, entry in enumerate(self._entries[start : start + ENTRIES_PER_PAGE])
        ]

    def reset(self) -> None:
        """Drop the listing and the selection."""
        self.selected = -1
        self._entries = []
        self.page = 0