import pytest

from wumiibo.structs import (
    AmiiboConfig,
    AmiiboSettings,
    AppDataConfig,
    Date,
    IdentificationBlock,
    PlainData,
    TagInfo,
)


@pytest.mark.parametrize("ymd", [(2000, 1, 1), (2020, 8, 28), (2127, 15, 31), (2063, 12, 0)])
def test_date_round_trip(ymd):
    date = Date(*ymd)
    assert Date.from_raw(date.raw()) == date


def test_raw_round_trip():
    for raw in range(0, 0x10000, 37):
        assert Date.from_raw(raw).raw() == raw


def test_raw_is_sixteen_bits():
    assert 0 <= Date(9999, 15, 31).raw() <= 0xFFFF


def test_from_raw_year_base():
    assert Date.from_raw(0).year == 2000


def test_identification_block_layout():
    block = IdentificationBlock(
        id=b"\x01\x02", char_variant=3, series=4, model_no=b"\x05\x06", figure_type=7
    )
    data = block.to_bytes()
    assert len(data) == 0x36
    assert data[:7] == bytes([1, 2, 3, 4, 5, 6, 7])
    assert data[7:] == bytes(0x36 - 7)


def test_tag_info_layout():
    info = TagInfo(id_offset_size=7, unk_x2=0, unk_x3=2)
    info.id[:7] = b"\x04\x11\x22\x33\x44\x55\x66"
    data = info.to_bytes()
    assert len(data) == 0x2C
    assert data[:2] == (7).to_bytes(2, "little")
    assert data[3] == 2
    assert data[4:11] == b"\x04\x11\x22\x33\x44\x55\x66"


def test_settings_round_trip():
    settings = AmiiboSettings(
        mii=bytes(range(0x60)),
        nickname="Figure".encode("utf-16-be").ljust(22, b"\x00"),
        flags=3,
        countrycodeid=49,
        setupdate=Date(2020, 8, 28),
        unk_x7c=b"\x09" * 0x2C,
    )
    data = settings.to_bytes()
    assert len(data) == 0xA8
    assert AmiiboSettings.from_bytes(data) == settings


def test_settings_short_input_is_padded():
    assert AmiiboSettings.from_bytes(bytes(0xA4)).to_bytes() == bytes(0xA8)


def test_settings_too_long_raises():
    with pytest.raises(ValueError):
        AmiiboSettings.from_bytes(bytes(0xA8 + 1))


def test_config_layout():
    config = AmiiboConfig(last_write_date=Date(2021, 3, 4), write_counter=5)
    data = config.to_bytes()
    assert len(data) == 16 * 4
    assert data[:2] == (2021).to_bytes(2, "little")
    assert data[14:16] == (0xD8).to_bytes(2, "little")


def test_app_data_config_layout():
    cfg = AppDataConfig(title_id=0x0004013000004002, app_id=0x10, tid_related=-1)
    data = cfg.to_bytes()
    assert len(data) == 16 * 4
    assert data[:8] == (0x0004013000004002).to_bytes(8, "little")
    assert data[8:12] == (0x10).to_bytes(4, "little")
    assert data[16] == 0xFF


def test_plain_data_instances_are_independent():
    first = PlainData()
    second = PlainData()
    first.app_data[0] = 1
    first.settings.flags = 2
    assert len(second.app_data) == 0xD8
    assert second.app_data[0] == 0
    assert second.settings.flags == 0