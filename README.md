# wumiibo

A pure-Python model of an NFC figure service. It reads decrypted amiibo
dumps (540 bytes), decodes and re-encodes their fields, tracks the state of
the emulated tag, and answers the service's IPC commands given as a list of
command words. It has no dependencies outside the standard library.

## Install

    pip install .

For the tests:

    pip install ".[test]"
    pytest

## Modules

- `wumiibo.util`: `bswap16`, `bswap32`, `bswap64` swap byte order;
  `hex_itoa(number, digits, uppercase)` returns the low 64 bits of a number
  as exactly `digits` zero-padded hex digits.
- `wumiibo.structs`: `TagStates` (an `IntEnum`), `Date` (`from_raw`, `raw`
  for the packed 16-bit form), and the layouts `IdentificationBlock`,
  `TagInfo`, `AmiiboSettings` (`to_bytes`, `from_bytes`), `AmiiboConfig`,
  `AppDataConfig` and `PlainData`.
- `wumiibo.ini`: `load_string(text)` and `load(path)` return an `IniFile`;
  `IniFile.get(section, key)` looks up a value case-insensitively, in any
  section when `section` is `None`. Quoted values with `\r`, `\n`, `\t`
  escapes and `;` comment lines are understood.
- `wumiibo.tagstate`: `TagState` with `set(value)` and `get(skip=True)`;
  with `skip=False` it also counts repeated observations of the ready
  states. `state_name(state)` gives a readable name.
- `wumiibo.logger`: `set_log_enabled`, `is_log_enabled`, `log_str`,
  `log_printf` (printf-style `%` formatting, sent to the standard `logging`
  logger named `wumiibo`) and `format_buffer(prefix, data)` for hex dumps.
- `wumiibo.configuration`: `Configuration.read_ini(path)` and
  `Configuration.parse_ini()` read the menu button combination and the debug
  flag; a missing value raises `ConfigurationError`.
  `key_string_to_mask("L+START+DOWN")` turns button names into a `Key` mask.
- `wumiibo.amiibo_file`: `AmiiboFile` with `read_decrypted_file`,
  `parse_decrypted_file`, `save_decrypted_file`, `write_decrypted_file`,
  `generate_random_uid`, `has_changed` and `reset`. Parsing raises
  `EncryptedAmiiboError` for a still-encrypted dump and `AmiiboParseError`
  for data that is not amiibo data (both subclasses of `AmiiboError`), and
  returns `True` when the dump had no stored UID and a random one was made.
  Saving increments the write counter.
- `wumiibo.directory`: `DirectoryLister`, a paged listing (20 entries per
  page, at most 400) headed by a `...` parent entry. `populate_entries`,
  `handle_key` (driven by `Button` bits: up/down, left/right by page, A to
  enter or choose, B to cancel), `visible_entries`,
  `construct_file_location` and `reset`.
- `wumiibo.nfc`: `NfcService` holds the emulated figure, the tag state, the
  in-range and out-of-range events (`threading.Event`) and the
  configuration. It offers `read_configuration`, `select_figure`,
  `save_amiibo`, `force_stop`, `randomize_uid`, `get_tag_state`,
  `set_tag_state`, `update_last_command_time` and `event_tick(now_ms)`, which
  fires the out-of-range event after 4000 ms without commands.
  `MenuOption` lists the menu actions; `title_folder(title_id)` gives the
  per-title folder such as `/wumiibo/0004000000123400`.
- `wumiibo.ipc`: `IpcHandler.handle_command(nfc, cmdbuf)` answers one
  request and returns the reply words; `make_header` builds a header word
  and `command_name` names a command ID.

## Example

    from wumiibo.ipc import IpcHandler, make_header
    from wumiibo.nfc import NfcService
    from wumiibo.structs import TagStates

    nfc = NfcService(root="sdcard")          # SD paths are resolved below here
    nfc.read_configuration("/wumiibo.ini")
    nfc.select_figure("/wumiibo/figure.bin")

    handler = IpcHandler()
    reply = handler.handle_command(nfc, [make_header(0x5, 0, 0)])  # StartTagScanning
    reply = handler.handle_command(nfc, [make_header(0xD, 0, 0)])  # GetTagState
    assert reply[2] == TagStates.SCANNING
    assert nfc.get_tag_state() == TagStates.IN_RANGE

## Configuration

`wumiibo.ini`:

    [config]
    menubuttons = L+START+DOWN
    debug = 0

`menubuttons` names the buttons that open the menu (default
`L+START+DOWN`). A `debug` value above zero turns logging on.

## What it does not do

The package is a library of the service's logic only. It does not register
a service, run a receive loop, start background threads, draw a menu or
read buttons: the caller feeds command words to `IpcHandler`, key presses
to `DirectoryLister.handle_key`, and the current time to
`NfcService.event_tick`. It does not decrypt or encrypt amiibo dumps; it
works on dumps that are already decrypted.