"""Loading, decoding and saving of decrypted amiibo dumps."""

from __future__ import annotations

import os
import struct
from collections.abc import Callable

from .structs import APP_DATA_SIZE, Date, IdentificationBlock, PlainData, TagInfo
from .util import bswap16

DUMP_SIZE = 540

_UID_FLAG = 532
_UID = slice(533, 540)
_IDENTITY = 0x1DC
_FLAG_SETTINGS = 0x10
_FLAG_APP_DATA = 0x20


class AmiiboError(Exception):
    """Base error for amiibo dumps."""


class EncryptedAmiiboError(AmiiboError):
    """The dump is still encrypted."""


class AmiiboParseError(AmiiboError):
    """The dump does not look like amiibo data."""


class AmiiboFile:
    """A decrypted amiibo dump and its decoded fields."""

    def __init__(
        self,
        data: bytes | None = None,
        random_bytes: Callable[[int], bytes] = os.urandom,
    ) -> None:
        self._data = bytearray(DUMP_SIZE)
        if data is not None:
            if len(data) > DUMP_SIZE:
                raise ValueError(f"dump longer than {DUMP_SIZE} bytes")
            self._data[: len(data)] = data
        self._random = random_bytes
        self.plain_data = PlainData()
        self.identity = IdentificationBlock()
        self.tag_info = TagInfo()
        self._parsed = False
        self._changed = False

    @property
    def data(self) -> bytes:
        """The raw dump bytes."""
        return bytes(self._data)

    @property
    def has_parsed(self) -> bool:
        return self._parsed

    def read_decrypted_file(self, path: str | os.PathLike[str]) -> None:
        """Read up to one dump's worth of bytes from ``path``."""
        with open(path, "rb") as handle:
            chunk = handle.read(DUMP_SIZE)
        self._data[: len(chunk)] = chunk

    def write_decrypted_file(self, path: str | os.PathLike[str]) -> None:
        """Write the dump to the start of ``path``, creating it if needed."""
        fd = os.open(path, os.O_WRONLY | os.O_CREAT, 0o644)
        with os.fdopen(fd, "wb") as handle:
            handle.write(self._data)

    def generate_random_uid(self) -> None:
        """Replace the tag UID with random bytes."""
        self.tag_info.id[0:8] = self._random(8)

    def parse_decrypted_file(self) -> bool:
        """Decode the dump; return True if a new UID had to be generated."""
        d = self._data
        if d[0x0C] == 0xF1 and d[0x0D] == 0x10:
            raise EncryptedAmiiboError("dump is encrypted")
        if d[0x02] != 0x0F and d[0x03] != 0xE0:
            raise AmiiboParseError("dump could not be parsed")

        b = _IDENTITY
        self.identity = IdentificationBlock(
            id=bytes(d[b : b + 2]),
            char_variant=d[b + 2],
            series=d[b + 6],
            model_no=bytes((d[b + 5], d[b + 4])),
            figure_type=d[b + 3],
            pad=bytes((d[b + 7],)) + bytes(self.identity.pad[1:]),
        )

        plain = self.plain_data
        plain.pagex4_byte3 = d[0x2B]
        plain.flag = d[0x2C]
        plain.last_write_date = Date.from_raw(struct.unpack_from(">H", d, 0x32)[0])
        plain.write_counter = struct.unpack_from("<H", d, 0xB4)[0]

        if plain.flag & _FLAG_SETTINGS:
            settings = plain.settings
            settings.mii = bytes(d[0x4C:0xAC])
            settings.nickname = bytes(d[0x38:0x4C]) + bytes(settings.nickname[20:22])
            settings.flags = d[0x2C] & 0xF
            settings.countrycodeid = d[0x2D]
            settings.setupdate = Date.from_raw(struct.unpack_from(">H", d, 0x30)[0])

        if plain.flag & _FLAG_APP_DATA:
            config = plain.app_data_config
            config.app_id = struct.unpack_from("<I", d, 0xB6)[0]
            config.title_id = struct.unpack_from(">Q", d, 0xAC)[0]
            config.counter = struct.unpack_from(">H", d, 0xB4)[0]
            config.unk = plain.flag >> 4
            plain.app_data[:] = d[0xDC : 0xDC + APP_DATA_SIZE]

        self._parsed = True
        self._changed = True
        if d[_UID_FLAG] == 0:
            self.generate_random_uid()
            return True
        self.tag_info.id[0:7] = d[_UID]
        return False

    def save_decrypted_file(self) -> None:
        """Encode the decoded fields back into the dump."""
        d = self._data
        plain = self.plain_data
        d[_UID_FLAG] = 1
        d[0x2B] = plain.pagex4_byte3 & 0xFF
        d[0x2C] = plain.flag & 0xFF
        plain.write_counter = bswap16(plain.write_counter + 1)
        struct.pack_into("<H", d, 0xB4, plain.write_counter)
        d[_UID] = self.tag_info.id[0:7]

        if plain.flag & _FLAG_SETTINGS:
            settings = plain.settings
            d[0x4C:0xAC] = bytes(settings.mii)[:0x60].ljust(0x60, b"\x00")
            d[0x38:0x4C] = bytes(settings.nickname)[:20].ljust(20, b"\x00")
            d[0x2D] = settings.countrycodeid & 0xFF
            struct.pack_into(">H", d, 0x30, settings.setupdate.raw())

        if plain.flag & _FLAG_APP_DATA:
            config = plain.app_data_config
            struct.pack_into("<I", d, 0xB6, config.app_id & 0xFFFFFFFF)
            struct.pack_into("<Q", d, 0xAC, config.title_id & 0xFFFFFFFFFFFFFFFF)
            d[0xDC : 0xDC + APP_DATA_SIZE] = bytes(plain.app_data)[:APP_DATA_SIZE].ljust(
                APP_DATA_SIZE, b"\x00"
            )

    def has_changed(self) -> bool:
        """Return whether the dump changed since the last call, clearing the mark."""
        changed = self._changed
        self._changed = False
        return changed

    def reset(self) -> None:
        """Forget that a dump was parsed."""
        self._parsed = False