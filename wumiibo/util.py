"""Byte-order and hexadecimal formatting helpers."""

_U64_MASK = (1 << 64) - 1


def _swap(value: int, width: int) -> int:
    value &= (1 << (8 * width)) - 1
    return int.from_bytes(value.to_bytes(width, "little"), "big")


def bswap16(value: int) -> int:
    """Swap the byte order of a 16-bit value."""
    return _swap(value, 2)


def bswap32(value: int) -> int:
    """Swap the byte order of a 32-bit value."""
    return _swap(value, 4)


def bswap64(value: int) -> int:
    """Swap the byte order of a 64-bit value."""
    return _swap(value, 8)


def hex_itoa(number: int, digits: int, uppercase: bool = True) -> str:
    """Format the low 64 bits of ``number`` as exactly ``digits`` zero-padded hex digits."""
    if digits < 0:
        raise ValueError("digits must not be negative")
    if digits == 0:
        return ""
    number &= _U64_MASK
    text = f"{number:0{digits}X}" if uppercase else f"{number:0{digits}x}"
    return text[-digits:]