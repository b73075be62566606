"""Tests for tcpmodbus/transport/mbap.py ."""

import struct
from unittest.mock import patch

import pytest
from tcpmodbus.exceptions import InvalidResponseError
from tcpmodbus.transport.mbap import ModbusTcpFrame, TransactionIdGenerator, frame_length

U16_BOUNDARY_VALUES = [0, 1, 0x00FF, 0x0100, 0x7FFF, 0x8000, 0xFFFF]


def test_build_frame() -> None:
    """Test wrapping a PDU in an MBAP header."""
    frame = ModbusTcpFrame.build(bytes.fromhex("03 00 64 00 02"), 0x1234)

    assert frame.transaction_id == 0x1234
    assert frame.protocol_id == 0
    assert frame.length == 6
    assert frame.unit_id == 0xFF
    assert frame.function_code == 0x03
    assert frame.bytes == bytes.fromhex("12 34 00 00 00 06 FF 03 00 64 00 02")


def test_build_frame_with_unit_id() -> None:
    """Test building a frame for a specific unit."""
    frame = ModbusTcpFrame.build(b"\x01\x00\x00\x00\x01", 1, unit_id=17)

    assert frame.bytes[6] == 17


def test_build_frame_validation() -> None:
    """Test that header fields must fit."""
    with pytest.raises(ValueError, match="PDU must be between 1 and 253 bytes long, got 0"):
        ModbusTcpFrame.build(b"", 1)
    with pytest.raises(ValueError, match="PDU must be between 1 and 253 bytes long, got 254"):
        ModbusTcpFrame.build(b"\x10" * 254, 1)
    with pytest.raises(ValueError, match=r"Transaction ID must be between 0 and 65535\."):
        ModbusTcpFrame.build(b"\x03", 0x10000)
    with pytest.raises(ValueError, match="Unit ID must be in range 0-255"):
        ModbusTcpFrame.build(b"\x03", 1, unit_id=256)


def test_parse_frame() -> None:
    """Test parsing a complete frame."""
    frame = ModbusTcpFrame.parse(bytes.fromhex("00 07 00 00 00 07 FF 03 04 00 0A 00 0B"))

    assert frame == ModbusTcpFrame(
        transaction_id=7,
        protocol_id=0,
        length=7,
        unit_id=0xFF,
        pdu_bytes=bytes.fromhex("03 04 00 0A 00 0B"),
    )


def test_parse_frame_ignores_trailing_bytes() -> None:
    """Test that bytes of a following frame are not part of the parsed frame."""
    frame = ModbusTcpFrame.parse(bytes.fromhex("00 01 00 00 00 03 01 83 02 00 02"))

    assert frame.pdu_bytes == bytes.fromhex("83 02")


def test_parse_incomplete_frame() -> None:
    """Test parsing a frame of which not all bytes have arrived."""
    with pytest.raises(InvalidResponseError, match="Incomplete frame: expected 13 bytes, got 10"):
        ModbusTcpFrame.parse(bytes.fromhex("00 07 00 00 00 07 FF 03 04 00"))


def test_frame_length() -> None:
    """Test computing the frame length from the MBAP header."""
    assert frame_length(bytes.fromhex("00 07 00 00 00 07 FF")) == 13
    assert frame_length(bytes.fromhex("00 07 00 00 00 02 FF 81")) == 8


@pytest.mark.parametrize("length", [0, 1, 255, 0xFFFF])
def test_frame_length_invalid_length_field(length: int) -> None:
    """Test that impossible length fields are rejected."""
    header = bytes.fromhex("00 01 00 00") + length.to_bytes(2, "big") + b"\xff"

    with pytest.raises(InvalidResponseError, match=f"Invalid MBAP length field: {length}"):
        frame_length(header)


def test_frame_length_incomplete_header() -> None:
    """Test that at least a full MBAP header is needed."""
    with pytest.raises(InvalidResponseError, match="Incomplete MBAP header: expected 7 bytes, got 4"):
        frame_length(b"\x00\x01\x00\x00")


def test_function_code_of_empty_pdu() -> None:
    """Test that a frame without PDU has no function code."""
    assert ModbusTcpFrame(1, 0, 1, 0xFF, b"").function_code is None


def test_transaction_ids_are_reproducible_with_seed() -> None:
    """Test that seeded generators produce the same sequence."""
    first = TransactionIdGenerator(seed=42)
    second = TransactionIdGenerator(seed=42)

    ids = [first() for _ in range(10)]

    assert ids == [second() for _ in range(10)]
    assert all(0 <= transaction_id <= 0xFFFF for transaction_id in ids)


def test_transaction_id_never_repeats_consecutively() -> None:
    """Test that the same identifier is never used twice in a row."""
    generator = TransactionIdGenerator()

    with patch.object(generator._random, "randint", side_effect=[5, 5, 5, 7, 7, 9]):
        assert generator() == 5
        assert generator() == 7
        assert generator() == 9


@pytest.mark.parametrize("transaction_id", U16_BOUNDARY_VALUES)
@pytest.mark.parametrize("pdu_size", [1, 2, 0x00FF - 2, 253])
@pytest.mark.parametrize("unit_id", [0, 1, 0xFF])
def test_header_fields_are_big_endian(transaction_id: int, pdu_size: int, unit_id: int) -> None:
    """Test that every header field survives building, serializing and parsing a frame."""
    pdu = bytes([0x03, *range(pdu_size - 1)])
    frame = ModbusTcpFrame.build(pdu, transaction_id, unit_id=unit_id)
    raw = frame.bytes

    assert struct.unpack(">HHHB", raw[:7]) == (transaction_id, 0, pdu_size + 1, unit_id)
    assert raw[0] == transaction_id >> 8
    assert raw[1] == transaction_id & 0xFF
    assert frame_length(raw) == len(raw) == 7 + pdu_size
    assert ModbusTcpFrame.parse(raw) == frame


@pytest.mark.parametrize("transaction_id", U16_BOUNDARY_VALUES)
def test_parse_ignores_trailing_bytes(transaction_id: int) -> None:
    """Test that a frame followed by the start of the next one is parsed on its own."""
    first = ModbusTcpFrame.build(b"\x06\x00\x01\x00\x02", transaction_id)
    second = ModbusTcpFrame.build(b"\x03\x02\x00\x01", transaction_id ^ 0xFFFF)

    assert ModbusTcpFrame.parse(first.bytes + second.bytes[:5]) == first
