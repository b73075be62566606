"""Tests for tcpmodbus/utils/bits.py ."""

import pytest
from tcpmodbus.utils.bits import pack_bits, packed_size, unpack_bits


@pytest.mark.parametrize(
    ("quantity", "expected"),
    [(1, 1), (7, 1), (8, 1), (9, 2), (16, 2), (17, 3), (2000, 250)],
)
def test_packed_size(quantity: int, expected: int) -> None:
    """Test the number of bytes needed for a number of bits."""
    assert packed_size(quantity) == expected


def test_pack_bits_lsb_first() -> None:
    """Test that the first value ends up in the least significant bit."""
    assert pack_bits([True]) == b"\x01"
    assert pack_bits([False, True]) == b"\x02"
    assert pack_bits([True, False, True, True, False, False, True, True, True, False]) == b"\xcd\x01"


@pytest.mark.parametrize("quantity", [1, 7, 8, 9, 2000])
def test_pack_bits_padding_is_zero(quantity: int) -> None:
    """Test that unused bits of the last byte are zero."""
    data = pack_bits([True] * quantity)

    assert len(data) == packed_size(quantity)
    assert all(byte == 0xFF for byte in data[:-1])
    remaining = quantity % 8 or 8
    assert data[-1] == (1 << remaining) - 1


@pytest.mark.parametrize("quantity", [1, 7, 8, 9, 2000])
def test_unpack_bits_returns_exact_quantity(quantity: int) -> None:
    """Test that padding bits are discarded."""
    values = [i % 3 == 0 for i in range(quantity)]

    assert unpack_bits(pack_bits(values), quantity) == values
    # set padding bits, they must not show up
    assert unpack_bits(b"\xff" * packed_size(quantity), quantity) == [True] * quantity


def test_unpack_bits_not_enough_data() -> None:
    """Test unpacking more bits than available."""
    with pytest.raises(ValueError, match="Cannot unpack 9 bits from 1 bytes"):
        unpack_bits(b"\xff", 9)
