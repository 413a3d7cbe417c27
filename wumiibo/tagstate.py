"""Tracking of the emulated tag's state."""

from __future__ import annotations

import time
from collections.abc import Callable

from .structs import TagStates

_NAMES = {
    TagStates.UNINITIALIZED: "Unitialized",
    TagStates.SCANNING: "Scanning",
    TagStates.SCANNING_STOPPED: "Scanning Stopped",
    TagStates.IN_RANGE: "Tag In Range",
    TagStates.OUT_OF_RANGE: "Tag out of range",
    TagStates.DATA_READY: "DataReady",
}

_TRACKED = (TagStates.IN_RANGE, TagStates.IDENTIFICATION_DATA_READY, TagStates.DATA_READY)


def state_name(state: int) -> str | None:
    """Return a human-readable name for a tag state, or None if it has none."""
    return _NAMES.get(state)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _coerce(value: int) -> int:
    try:
        return TagStates(value)
    except ValueError:
        return value


class TagState:
    """Current tag state, counting how often a ready state is observed."""

    def __init__(self, clock: Callable[[], int] = _now_ms) -> None:
        self._clock = clock
        self._state: int = TagStates.UNINITIALIZED
        self._previous: int = TagStates.UNINITIALIZED
        self.tag_counter = 0
        self.last_change_time = 0

    def set(self, value: int) -> None:
        self._state = _coerce(value)

    def get(self, skip: bool = True) -> int:
        """Return the state; unless ``skip``, also update the observation counters."""
        if skip:
            return self._state
        if self._state in _TRACKED:
            if self._state != self._previous:
                self.tag_counter = 0
                self.last_change_time = self._clock()
            else:
                self.tag_counter = (self.tag_counter + 1) & 0xFF
        self._previous = self._state
        return self._state