"""A minimal INI reader with case-insensitive section and key lookup."""

from __future__ import annotations

import os
from collections.abc import Iterator

_BLANK = " \t\r"
_FOLD = str.maketrans("ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz")
_ESCAPES = {"r": "\r", "n": "\n", "t": "\t"}


def _fold(text: str) -> str:
    return text.translate(_FOLD)


def _unescape_quoted(body: str) -> str:
    """Decode a quoted value; ``body`` starts just after the opening quote."""
    out: list[str] = []
    chars = iter(body)
    for char in chars:
        if char in '"\r':
            break
        if char == "\\":
            escaped = next(chars, None)
            if escaped is None or escaped == "\r":
                break
            out.append(_ESCAPES.get(escaped, escaped))
        else:
            out.append(char)
    return "".join(out)


def _line_tokens(line: str) -> Iterator[str]:
    pos = 0
    while pos < len(line):
        char = line[pos]
        if char in _BLANK:
            pos += 1
        elif char == "[":
            end = line.find("]", pos)
            if end < 0:
                end = len(line)
            yield line[pos:end]
            pos = end + 1
        elif char == ";":
            return
        else:
            rest = line[pos:]
            eq = rest.find("=")
            if eq < 0:
                return
            key = rest[:eq].rstrip(_BLANK)
            value = rest[eq + 1:].lstrip(_BLANK)
            if not value:
                return
            if value[0] == '"':
                value = _unescape_quoted(value[1:])
                if not value:
                    return
            else:
                value = value.rstrip(_BLANK)
            if key:
                yield key
            yield value
            return


def _tokenize(text: str) -> tuple[str, ...]:
    text = text.split("\0", 1)[0]
    return tuple(token for line in text.split("\n") for token in _line_tokens(line))


class IniFile:
    """Parsed INI data."""

    def __init__(self, text: str = "") -> None:
        self._tokens = _tokenize(text)

    def get(self, section: str | None, key: str) -> str | None:
        """Return the first value for ``key`` in ``section`` (any section if None)."""
        current = ""
        wanted_key = _fold(key)
        wanted_section = None if section is None else _fold(section)
        tokens = iter(self._tokens)
        for token in tokens:
            if token.startswith("["):
                current = token[1:]
                continue
            value = next(tokens, "")
            if wanted_section is None or wanted_section == _fold(current):
                if _fold(token) == wanted_key:
                    return value
        return None


def load_string(text: str) -> IniFile:
    """Parse INI text."""
    return IniFile(text)


def load(path: str | os.PathLike[str]) -> IniFile:
    """Read and parse an INI file."""
    with open(path, encoding="utf-8") as handle:
        return IniFile(handle.read())