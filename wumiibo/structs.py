"""Amiibo data structures and their binary layouts."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum


class TagStates(IntEnum):
    """States of the emulated NFC tag."""

    UNINITIALIZED = 0
    SCANNING_STOPPED = 1
    SCANNING = 2
    IN_RANGE = 3
    OUT_OF_RANGE = 4
    DATA_READY = 5
    IDENTIFICATION_DATA_READY = 6


@dataclass
class Date:
    """A calendar date as stored in amiibo data."""

    year: int = 0
    month: int = 0
    day: int = 0

    @classmethod
    def from_raw(cls, raw: int) -> Date:
        """Decode a packed 16-bit date."""
        raw &= 0xFFFF
        return cls(year=(raw >> 9) + 2000, month=(raw >> 5) & 0xF, day=raw & 0x1F)

    def raw(self) -> int:
        """Encode the date into its packed 16-bit form."""
        year = self.year & 0xFFFF
        month = self.month & 0xFF
        day = self.day & 0xFF
        return (((year << 9) + 0x6000) | (0x20 * month) | day) & 0xFFFF


_IDENTIFICATION = struct.Struct("<2sBB2sB47s")
_TAG_INFO = struct.Struct("<HBB40s")
_SETTINGS = struct.Struct("<96s22sBBHBB44s")
_CONFIG = struct.Struct("<HBBH3sB2sBBH48s")
_APP_DATA_CONFIG = struct.Struct("<QIHBBB47s")

SETTINGS_SIZE = _SETTINGS.size
APP_DATA_SIZE = 0xD8


@dataclass
class IdentificationBlock:
    """Character identification of an amiibo."""

    id: bytes = bytes(2)
    char_variant: int = 0
    series: int = 0
    model_no: bytes = bytes(2)
    figure_type: int = 0
    pad: bytes = bytes(0x2F)

    def to_bytes(self) -> bytes:
        return _IDENTIFICATION.pack(
            bytes(self.id),
            self.char_variant & 0xFF,
            self.series & 0xFF,
            bytes(self.model_no),
            self.figure_type & 0xFF,
            bytes(self.pad),
        )


@dataclass
class TagInfo:
    """Tag information: the UID and its size field."""

    id_offset_size: int = 0
    unk_x2: int = 0
    unk_x3: int = 0
    id: bytearray = field(default_factory=lambda: bytearray(0x28))

    def to_bytes(self) -> bytes:
        return _TAG_INFO.pack(
            self.id_offset_size & 0xFFFF,
            self.unk_x2 & 0xFF,
            self.unk_x3 & 0xFF,
            bytes(self.id),
        )


@dataclass
class AmiiboSettings:
    """Owner settings: Mii, nickname, country and setup date."""

    mii: bytes = bytes(0x60)
    nickname: bytes = bytes(22)
    flags: int = 0
    countrycodeid: int = 0
    setupdate: Date = field(default_factory=Date)
    unk_x7c: bytes = bytes(0x2C)

    def to_bytes(self) -> bytes:
        return _SETTINGS.pack(
            bytes(self.mii),
            bytes(self.nickname),
            self.flags & 0xFF,
            self.countrycodeid & 0xFF,
            self.setupdate.year & 0xFFFF,
            self.setupdate.month & 0xFF,
            self.setupdate.day & 0xFF,
            bytes(self.unk_x7c),
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> AmiiboSettings:
        """Decode settings; shorter input is padded with zero bytes."""
        if len(data) > _SETTINGS.size:
            raise ValueError(f"settings data longer than {_SETTINGS.size} bytes")
        padded = bytes(data).ljust(_SETTINGS.size, b"\x00")
        mii, nickname, flags, country, year, month, day, unk = _SETTINGS.unpack(padded)
        return cls(
            mii=mii,
            nickname=nickname,
            flags=flags,
            countrycodeid=country,
            setupdate=Date(year, month, day),
            unk_x7c=unk,
        )


@dataclass
class AmiiboConfig:
    """General amiibo configuration as reported to applications."""

    last_write_date: Date = field(default_factory=Date)
    write_counter: int = 0
    character_id: bytes = bytes(3)
    series: int = 0
    amiibo_id: bytes = bytes(2)
    amiibo_type: int = 0
    pagex4_byte3: int = 0
    appdata_size: int = APP_DATA_SIZE
    zeros: bytes = bytes(0x30)

    def to_bytes(self) -> bytes:
        return _CONFIG.pack(
            self.last_write_date.year & 0xFFFF,
            self.last_write_date.month & 0xFF,
            self.last_write_date.day & 0xFF,
            self.write_counter & 0xFFFF,
            bytes(self.character_id),
            self.series & 0xFF,
            bytes(self.amiibo_id),
            self.amiibo_type & 0xFF,
            self.pagex4_byte3 & 0xFF,
            self.appdata_size & 0xFFFF,
            bytes(self.zeros),
        )


@dataclass
class AppDataConfig:
    """Ownership record of the application data area."""

    title_id: int = 0
    app_id: int = 0
    counter: int = 0
    unk: int = 0
    unk2: int = 0
    tid_related: int = 0
    unk3: bytes = bytes(0x2F)

    def to_bytes(self) -> bytes:
        return _APP_DATA_CONFIG.pack(
            self.title_id & 0xFFFFFFFFFFFFFFFF,
            self.app_id & 0xFFFFFFFF,
            self.counter & 0xFFFF,
            self.unk & 0xFF,
            self.unk2 & 0xFF,
            self.tid_related & 0xFF,
            bytes(self.unk3),
        )


@dataclass
class PlainData:
    """The decoded, mutable part of a decrypted amiibo dump."""

    pagex4_byte3: int = 0
    flag: int = 0
    last_write_date: Date = field(default_factory=Date)
    write_counter: int = 0
    settings: AmiiboSettings = field(default_factory=AmiiboSettings)
    app_data_config: AppDataConfig = field(default_factory=AppDataConfig)
    app_data: bytearray = field(default_factory=lambda: bytearray(APP_DATA_SIZE))