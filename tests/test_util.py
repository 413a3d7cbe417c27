import pytest

from wumiibo.util import bswap16, bswap32, bswap64, hex_itoa


def test_bswap16_pinned():
    assert bswap16(0x1234) == 0x3412


def test_bswap32_pinned():
    assert bswap32(0x12345678) == 0x78563412


def test_bswap64_pinned():
    assert bswap64(0x0102030405060708) == 0x0807060504030201


@pytest.mark.parametrize("value", [0, 1, 0xFF, 0xABCD, 0xFFFF, 0x8001])
def test_bswap16_is_involution(value):
    assert bswap16(bswap16(value)) == value


def test_bswap16_truncates_input():
    assert bswap16(0x12345) == bswap16(0x2345)


@pytest.mark.parametrize("raw", [b"\x01\x02\x03\x04", b"\xff\x00\x00\x10", b"\x00\x00\x00\x00"])
def test_bswap32_reverses_bytes(raw):
    assert bswap32(int.from_bytes(raw, "little")) == int.from_bytes(raw, "big")


@pytest.mark.parametrize("value", [0, 0xDEADBEEF, 0xFFFFFFFF, 0x00000100])
def test_bswap32_is_involution(value):
    assert bswap32(bswap32(value)) == value


@pytest.mark.parametrize("value", [0, 0x0004013000004002, (1 << 64) - 1, 1 << 63])
def test_bswap64_is_involution(value):
    assert bswap64(bswap64(value)) == value


def test_bswap64_reverses_bytes():
    raw = bytes(range(1, 9))
    assert bswap64(int.from_bytes(raw, "little")) == int.from_bytes(raw, "big")


@pytest.mark.parametrize("number", [0, 1, 0x0004013000004002, 0xABCDEF])
def test_hex_itoa_round_trip(number):
    text = hex_itoa(number, 16, True)
    assert len(text) == 16
    assert int(text, 16) == number


def test_hex_itoa_case():
    number = 0x0004013000004002 | 0xABC
    upper = hex_itoa(number, 16, True)
    lower = hex_itoa(number, 16, False)
    assert lower == upper.lower()
    assert upper == upper.upper()


def test_hex_itoa_negative_one_is_all_f():
    text = hex_itoa(-1, 16, True)
    assert len(text) == 16
    assert set(text) == {"F"}


def test_hex_itoa_keeps_low_digits():
    assert hex_itoa(0x12345, 4, True) == hex_itoa(0x2345, 4, True)


def test_hex_itoa_zero_digits():
    assert hex_itoa(0x1234, 0, True) == ""


def test_hex_itoa_negative_digits():
    with pytest.raises(ValueError):
        hex_itoa(1, -1, True)