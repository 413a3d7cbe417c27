"""Dispatch of NFC service requests against the emulated tag."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence

from .amiibo_file import AmiiboError
from .logger import is_log_enabled, log_printf
from .nfc import NfcService
from .structs import (
    APP_DATA_SIZE,
    AmiiboConfig,
    AmiiboSettings,
    Date,
    TagStates,
)
from .util import bswap32, bswap64

COMMAND_BUFFER_WORDS = 64
STATIC_BUFFER_SIZE = 0x800

RESULT_SUCCESS = 0
RESULT_APP_ID_MISMATCH = 0xC8A17638
RESULT_APP_DATA_NOT_INITIALIZED = 0xC8A17620
RESULT_SETTINGS_NOT_INITIALIZED = 0xC8A17628

COMMUNICATION_ESTABLISHED = 2
SETTINGS_COPY_SIZE = 0xA4
DEFAULT_SETUP_DATE = Date(28, 8, 20)

_FLAG_SETTINGS = 0x10
_FLAG_APP_DATA = 0x20

_COMMAND_NAMES = {
    0x0001: "Initialize",
    0x0002: "Shutdown",
    0x0003: "StartCommunication",
    0x0004: "StopCommunication",
    0x0005: "StartTagScanning",
    0x0006: "StopTagScanning",
    0x0007: "LoadAmiiboData",
    0x0008: "ResetTagScanState",
    0x0009: "UpdateStoredAmiiboData",
    0x000B: "GetTagInRangeEvent",
    0x000C: "GetTagOutOfRangeEvent",
    0x000D: "GetTagState",
    0x000F: "CommunicationGetStatus",
    0x0010: "GetTagInfo2",
    0x0011: "GetTagInfo",
    0x0012: "CommunicationGetResult",
    0x0013: "OpenAppData",
    0x0014: "InitializeWriteAppData",
    0x0015: "ReadAppData",
    0x0016: "WriteAppData",
    0x0017: "GetAmiiboSettings",
    0x0018: "GetAmiiboConfig",
    0x0019: "GetAppDataInitStruct",
    0x001A: "MountRomData",
    0x001B: "GetAmiiboIdentificationBlock",
    0x001F: "StartOtherTagScanning",
    0x0020: "SendTagCommand",
    0x0021: "Cmd21",
    0x0022: "Cmd22",
    0x0401: "Reset",
    0x0402: "GetAppDataConfig",
    0x0407: "IsAppdataInited",
    0x0404: "SetAmiiboSettings",
}


def command_name(cmdid: int) -> str:
    """Return the name of a service command."""
    return _COMMAND_NAMES.get(cmdid, "Unknown Command called")


def make_header(cmdid: int, normal: int, translate: int) -> int:
    """Build an IPC command header word."""
    return ((cmdid & 0xFFFF) << 16) | ((normal & 0x3F) << 6) | (translate & 0x3F)


def _static_buffer_descriptor(size: int, buffer_id: int) -> int:
    return ((size & 0x3FFFF) << 14) | ((buffer_id & 0xF) << 10) | 0x2


def _now_ms() -> int:
    return int(time.time() * 1000)


def _int(word: object) -> int:
    if not isinstance(word, int):
        raise TypeError(f"expected an integer command word, got {type(word).__name__}")
    return word & 0xFFFFFFFF


def _buffer(word: object) -> bytes:
    if not isinstance(word, (bytes, bytearray, memoryview)):
        raise TypeError("buffer word must hold the buffer's bytes")
    return bytes(word)


def _word_bytes(word: object) -> bytes:
    if isinstance(word, int):
        return (word & 0xFFFFFFFF).to_bytes(4, "little")
    return bytes(4)


def _load(buf: list, index: int, size: int) -> bytes:
    count = (size + 3) // 4
    return b"".join(_word_bytes(word) for word in buf[index : index + count])[:size]


def _store(buf: list, index: int, data: bytes) -> None:
    """Copy ``data`` into consecutive words, keeping bytes past its end."""
    for offset in range(0, len(data), 4):
        chunk = data[offset : offset + 4]
        pos = index + offset // 4
        if len(chunk) < 4:
            chunk += _word_bytes(buf[pos])[len(chunk):]
        buf[pos] = int.from_bytes(chunk, "little")


class IpcHandler:
    """Answers requests for the emulated NFC service."""

    def __init__(
        self,
        clock: Callable[[], int] = _now_ms,
        program_id_lookup: Callable[[int], int] | None = None,
    ) -> None:
        self._clock = clock
        self._program_id = program_id_lookup or (lambda pid: 0)
        self.has_called_0xc = False
        self.static_buffer = bytearray(STATIC_BUFFER_SIZE)
        self._handlers: dict[int, Callable[[NfcService, int, list], None]] = {
            0x01: self._initialize,
            0x02: self._finalize,
            0x03: self._ok,
            0x04: self._ok,
            0x05: self._start_scanning,
            0x06: self._stop_scanning,
            0x07: self._load_amiibo_data,
            0x08: self._reset_tag_state,
            0x09: self._update_stored_data,
            0x0B: self._get_in_range_event,
            0x0C: self._get_out_of_range_event,
            0x0D: self._get_tag_state,
            0x0F: self._get_status,
            0x11: self._get_tag_info,
            0x12: self._get_result,
            0x13: self._open_app_data,
            0x14: self._initialize_app_data,
            0x15: self._read_app_data,
            0x16: self._write_app_data,
            0x17: self._get_settings,
            0x18: self._get_config,
            0x19: self._get_app_data_init_struct,
            0x1A: self._mount_rom_data,
            0x1B: self._get_identification_block,
            0x24: self._is_installed,
            0x401: self._format,
            0x402: self._get_app_data_config,
            0x404: self._set_settings,
            0x406: self._format_app_data,
            0x407: self._is_app_data_set,
        }

    def handle_command(self, nfc: NfcService, cmdbuf: Sequence[object]) -> list:
        """Process one request and return the reply's command words."""
        buf = list(cmdbuf)[:COMMAND_BUFFER_WORDS]
        buf.extend([0] * (COMMAND_BUFFER_WORDS - len(buf)))
        header = _int(buf[0])
        cmdid = header >> 16
        self._debug(buf, "Recieved")

        if cmdid not in (0xF, 0xD) and self.has_called_0xc:
            log_printf("Updating last Update time\n")
            nfc.update_last_command_time(self._clock())
        elif cmdid in (0xF, 0xD):
            state = nfc.get_tag_state()
            if nfc.amiibo.has_parsed and state in (TagStates.SCANNING, TagStates.SCANNING_STOPPED):
                nfc.signal = 1
                nfc.in_range_event.set()

        handler = self._handlers.get(cmdid)
        if handler is None:
            log_printf("Unimplemented Command %08X\n", header)
        else:
            handler(nfc, cmdid, buf)
        self._debug(buf, "Sent")
        return buf

    def _debug(self, buf: list, label: str) -> None:
        if not is_log_enabled():
            return
        header = _int(buf[0])
        log_printf("%s : %s(cmdbuf[0]:%08X)\n", label, command_name(header >> 16), header)
        normal = (header >> 6) & 0x3F
        for index, word in enumerate(buf[1 : normal + 1], start=1):
            text = f"{word:X}" if isinstance(word, int) else repr(word)
            log_printf("cmdbuf[%d]:%s\n", index, text)

    @staticmethod
    def _save(nfc: NfcService) -> None:
        try:
            nfc.save_amiibo()
        except (AmiiboError, OSError) as exc:
            log_printf("Saving amiibo failed: %s\n", exc)

    @staticmethod
    def _reply(buf: list, cmdid: int, result: int = RESULT_SUCCESS) -> None:
        buf[0] = make_header(cmdid, 1, 0)
        buf[1] = result

    def _ok(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        self._reply(buf, cmdid)

    def _initialize(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        nfc.set_tag_state(TagStates.SCANNING_STOPPED)
        self._reply(buf, cmdid)

    def _finalize(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        nfc.set_tag_state(TagStates.UNINITIALIZED)
        self._reply(buf, cmdid)

    def _start_scanning(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        nfc.set_tag_state(TagStates.SCANNING)
        self._reply(buf, cmdid)

    def _stop_scanning(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        nfc.set_tag_state(TagStates.SCANNING_STOPPED)
        self._reply(buf, cmdid)

    def _load_amiibo_data(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        if nfc.get_tag_state() == TagStates.IN_RANGE:
            nfc.set_tag_state(TagStates.DATA_READY)
        self._reply(buf, cmdid)

    def _reset_tag_state(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        nfc.set_tag_state(TagStates.OUT_OF_RANGE)
        self._reply(buf, cmdid)

    def _update_stored_data(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        self._save(nfc)
        self._reply(buf, cmdid)

    def _get_in_range_event(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        buf[0:4] = [make_header(cmdid, 1, 2), 0, 0, nfc.in_range_event]

    def _get_out_of_range_event(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        self.has_called_0xc = True
        buf[0:4] = [make_header(cmdid, 1, 2), 0, 0, nfc.out_of_range_event]

    def _get_tag_state(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        buf[0:3] = [make_header(cmdid, 2, 0), 0, int(nfc.get_tag_state(False))]
        if nfc.get_tag_state() == TagStates.SCANNING and nfc.amiibo.has_parsed:
            nfc.set_tag_state(TagStates.IN_RANGE)
            nfc.in_range_event.set()
        if nfc.amiibo.has_changed():
            nfc.out_of_range_event.clear()
            nfc.in_range_event.set()

    def _get_status(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        buf[0:3] = [make_header(cmdid, 2, 0), 0, COMMUNICATION_ESTABLISHED]

    def _get_tag_info(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        tag = nfc.amiibo.tag_info
        tag.id_offset_size = 7
        tag.unk_x2 = 0
        tag.unk_x3 = 2
        _store(buf, 2, tag.to_bytes()[:0x2C])
        buf[0:2] = [make_header(cmdid, 12, 0), 0]

    def _get_result(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        buf[0:3] = [make_header(0x12, 2, 0), 0, 0]

    def _open_app_data(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        plain = nfc.amiibo.plain_data
        app_id = bswap32(_int(buf[1]))
        if not plain.flag & _FLAG_APP_DATA:
            result = RESULT_APP_DATA_NOT_INITIALIZED
        elif app_id == plain.app_data_config.app_id:
            result = RESULT_SUCCESS
        else:
            result = RESULT_APP_ID_MISMATCH
        self._reply(buf, cmdid, result)

    def _initialize_app_data(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        plain = nfc.amiibo.plain_data
        app_id = _int(buf[1])
        size = min(_int(buf[2]), APP_DATA_SIZE)
        data = _buffer(buf[0x12])[:size]
        program_id = self._program_id(_int(buf[16]))
        plain.app_data_config.title_id = bswap64(program_id)
        plain.app_data_config.app_id = bswap32(app_id)
        plain.flag |= _FLAG_APP_DATA
        plain.app_data[: len(data)] = data
        self._save(nfc)
        self._reply(buf, cmdid)

    def _read_app_data(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        size = min(_int(buf[1]), STATIC_BUFFER_SIZE)
        buf[0:3] = [make_header(cmdid, 1, 2), 0, _static_buffer_descriptor(size, 0)]
        copied = min(size, APP_DATA_SIZE)
        self.static_buffer[:copied] = nfc.amiibo.plain_data.app_data[:copied]
        buf[3] = bytes(self.static_buffer[:size])

    def _write_app_data(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        plain = nfc.amiibo.plain_data
        size = min(_int(buf[1]), APP_DATA_SIZE)
        data = _buffer(buf[11])[:size]
        plain.app_data[: len(data)] = data
        self._reply(buf, cmdid)
        self._save(nfc)

    def _get_settings(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        plain = nfc.amiibo.plain_data
        if plain.flag & _FLAG_SETTINGS:
            result = RESULT_SUCCESS
        else:
            plain.settings = AmiiboSettings()
            result = RESULT_SETTINGS_NOT_INITIALIZED
        buf[0:2] = [make_header(cmdid, 0x2B, 0), result]
        _store(buf, 2, plain.settings.to_bytes())

    def _get_config(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        buf[2:18] = [0] * 16
        plain = nfc.amiibo.plain_data
        identity = nfc.amiibo.identity
        config = AmiiboConfig(
            last_write_date=Date(
                plain.last_write_date.year,
                plain.last_write_date.month,
                plain.last_write_date.day,
            ),
            write_counter=plain.write_counter,
            character_id=bytes(identity.id[:2]) + bytes((identity.char_variant & 0xFF,)),
            series=identity.series,
            amiibo_id=bytes(identity.model_no[:2]),
            amiibo_type=identity.figure_type,
            pagex4_byte3=plain.pagex4_byte3,
            appdata_size=APP_DATA_SIZE,
        )
        _store(buf, 2, config.to_bytes()[:0x10])
        buf[0:2] = [make_header(cmdid, 17, 0), 0]

    def _get_app_data_init_struct(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        buf[0:2] = [make_header(cmdid, 16, 0), 0]
        buf[2:17] = [0] * 15

    def _mount_rom_data(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        nfc.set_tag_state(TagStates.IDENTIFICATION_DATA_READY)
        self._reply(buf, cmdid)

    def _get_identification_block(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        _store(buf, 2, nfc.amiibo.identity.to_bytes()[:0x36])
        buf[0:2] = [make_header(cmdid, 15, 0), 0]

    def _is_installed(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        self._reply(buf, cmdid, 1)

    def _format(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        nfc.amiibo.plain_data.flag = 0
        self._reply(buf, cmdid)
        self._save(nfc)

    def _get_app_data_config(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        plain = nfc.amiibo.plain_data
        config = plain.app_data_config
        config.unk2 = 2
        config.tid_related = 0xFF
        if plain.flag & _FLAG_APP_DATA:
            high = config.title_id >> 28
            if high in (0, 2):
                config.tid_related = 0
            elif high == 1:
                config.tid_related = 1
        _store(buf, 2, config.to_bytes())
        buf[0:2] = [make_header(cmdid, 17, 0), 0]

    def _set_settings(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        plain = nfc.amiibo.plain_data
        incoming = _load(buf, 1, SETTINGS_COPY_SIZE)
        kept = plain.settings.to_bytes()[SETTINGS_COPY_SIZE:]
        plain.settings = AmiiboSettings.from_bytes(incoming + kept)
        if not plain.flag & _FLAG_SETTINGS:
            plain.settings.setupdate = Date(
                DEFAULT_SETUP_DATE.year, DEFAULT_SETUP_DATE.month, DEFAULT_SETUP_DATE.day
            )
        plain.flag = (plain.flag & 0xF0) | (plain.settings.flags & 0xF) | _FLAG_SETTINGS
        self._reply(buf, cmdid)

    def _format_app_data(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        nfc.amiibo.plain_data.flag &= 0xDF
        self._reply(buf, cmdid)
        self._save(nfc)

    def _is_app_data_set(self, nfc: NfcService, cmdid: int, buf: list) -> None:
        is_set = 1 if nfc.amiibo.plain_data.flag & _FLAG_APP_DATA else 0
        log_printf("IsSet %d\n", is_set)
        buf[0:3] = [make_header(cmdid, 2, 0), 0, is_set]