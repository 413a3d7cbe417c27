"""Shared state of the emulated NFC service and its menu actions."""

from __future__ import annotations

import os
import threading
from collections.abc import Callable
from enum import IntEnum
from pathlib import Path

from .amiibo_file import AmiiboError, AmiiboFile
from .configuration import Configuration, ConfigurationError
from .directory import DEFAULT_DIRECTORY, DirectoryLister
from .logger import log_str
from .structs import TagStates
from .tagstate import TagState
from .util import hex_itoa

OUT_OF_RANGE_TIMEOUT_MS = 4000
MENU_TITLE = "Wumiibo Menu"


class MenuOption(IntEnum):
    """Entries of the service's pop-up menu."""

    SELECT_FIGURE = 0
    FORCE_STOP = 1
    RANDOMIZE_UID = 2
    SIGNAL_IN_RANGE = 3
    SIGNAL_OUT_OF_RANGE = 4


MENU_LABELS = {
    MenuOption.SELECT_FIGURE: "Select a figure.",
    MenuOption.FORCE_STOP: "Force Stop Emulation.",
    MenuOption.RANDOMIZE_UID: "Randomize UID(Bypass 1 use per day limit).",
}


def title_folder(title_id: int) -> str:
    """Return the per-title amiibo folder for a 64-bit title ID."""
    return f"{DEFAULT_DIRECTORY}/{hex_itoa(title_id, 16, True)}"


class NfcService:
    """The emulated tag, its state, events and the figure being emulated."""

    def __init__(
        self,
        root: str | os.PathLike[str] = "/",
        clock: Callable[[], int] | None = None,
        random_bytes: Callable[[int], bytes] = os.urandom,
    ) -> None:
        self._root = Path(root)
        self.amiibo = AmiiboFile(random_bytes=random_bytes)
        self.directory = DirectoryLister(root)
        self.config = Configuration()
        self._state = TagState(clock) if clock is not None else TagState()
        self.in_range_event = threading.Event()
        self.out_of_range_event = threading.Event()
        self.last_command_time = 0
        self.signal = 0
        self.figure_location: str | None = None
        self._awaiting_in_range = False

    @property
    def menu_combo(self) -> int:
        """Buttons that open the menu when held together."""
        return self.config.menu_combo

    def _resolve(self, sd_path: str) -> Path:
        return self._root / sd_path.lstrip("/")

    def read_configuration(self, path: str) -> bool:
        """Load and apply the configuration at ``path``; return whether it applied."""
        try:
            self.config.read_ini(self._resolve(path))
            self.config.parse_ini()
        except (OSError, ConfigurationError):
            return False
        return True

    def get_tag_state(self, skip: bool = True) -> int:
        return self._state.get(skip)

    def set_tag_state(self, state: int) -> None:
        self._state.set(state)

    def update_last_command_time(self, time_ms: int) -> None:
        self.last_command_time = time_ms

    def select_figure(self, path: str) -> None:
        """Load and decode the dump at the SD path ``path`` for emulation.

        A dump without a stored UID gets a random one and is written back.
        """
        self.amiibo.reset()
        self.figure_location = path
        self.amiibo.read_decrypted_file(self._resolve(path))
        if self.amiibo.parse_decrypted_file():
            self.save_amiibo()

    def save_amiibo(self) -> None:
        """Encode the emulated figure and write it back to its file."""
        if self.figure_location is None:
            raise AmiiboError("no figure selected")
        self.amiibo.save_decrypted_file()
        self.amiibo.write_decrypted_file(self._resolve(self.figure_location))

    def force_stop(self) -> None:
        """Stop emulating: drop the figure and report the tag out of range."""
        self.amiibo.reset()
        self.directory.reset()
        self.set_tag_state(TagStates.OUT_OF_RANGE)
        self.out_of_range_event.set()
        self.in_range_event.clear()
        log_str("Force stopped called\n")

    def randomize_uid(self) -> None:
        self.amiibo.generate_random_uid()

    def _consume_in_range(self) -> None:
        if self.in_range_event.is_set():
            self.in_range_event.clear()
            self._awaiting_in_range = False
        else:
            self._awaiting_in_range = True

    def event_tick(self, now_ms: int) -> bool:
        """Run one pass of the event loop; return True if out-of-range fired.

        After firing, the loop waits for the in-range event, which is consumed
        when it arrives; ticks do nothing else until then.
        """
        if self._awaiting_in_range:
            self._consume_in_range()
            return False
        if not self.amiibo.has_parsed:
            return False
        state = self.get_tag_state()
        if self.signal == 0 and state in (TagStates.SCANNING, TagStates.SCANNING_STOPPED):
            self.in_range_event.set()
        if now_ms - self.last_command_time > OUT_OF_RANGE_TIMEOUT_MS:
            self.update_last_command_time(now_ms)
            self.out_of_range_event.set()
            self._consume_in_range()
            return True
        return False