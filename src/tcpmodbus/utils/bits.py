"""Packing of coil and discrete input states into bytes.

Modbus packs bits LSB-first: the first value ends up in the least significant
bit of the first byte. Unused bits of the last byte are zero.
"""

from collections.abc import Iterable, Sequence


def packed_size(quantity: int) -> int:
    """Return the number of bytes needed to hold `quantity` bits."""
    return (quantity + 7) // 8


def pack_bits(values: Sequence[bool]) -> bytes:
    """Pack a sequence of booleans into bytes, LSB-first."""
    data = bytearray(packed_size(len(values)))
    for i, value in enumerate(values):
        if value:
            data[i // 8] |= 1 << (i % 8)
    return bytes(data)


def unpack_bits(data: Iterable[int], quantity: int) -> list[bool]:
    """Unpack exactly `quantity` bits from LSB-first packed bytes.

    Padding bits beyond `quantity` are discarded.
    """
    bits: list[bool] = []
    for byte in data:
        bits.extend(bool(byte & (1 << bit)) for bit in range(8))
    if len(bits) < quantity:
        msg = f"Cannot unpack {quantity} bits from {len(bits) // 8} bytes"
        raise ValueError(msg)
    return bits[:quantity]
