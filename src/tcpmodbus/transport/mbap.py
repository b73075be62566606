"""Modbus TCP framing.

A Modbus TCP frame (ADU) is the MBAP header followed by the PDU:

- Transaction ID (2 bytes): chosen by the client, echoed by the server
- Protocol ID (2 bytes): always 0x0000 for Modbus
- Length (2 bytes): number of following bytes (Unit ID + PDU)
- Unit ID (1 byte): unit identifier
- PDU (Length - 1 bytes)

All fields are big endian.
"""

import random
import struct
from dataclasses import dataclass
from typing import Self

from tcpmodbus.const import DEFAULT_UNIT_ID, MAX_MBAP_LENGTH, MAX_PDU_SIZE, MBAP_HEADER_SIZE, MODBUS_PROTOCOL_ID
from tcpmodbus.exceptions import InvalidResponseError

MBAP_HEADER_FORMAT = ">HHHB"


@dataclass(frozen=True)
class ModbusTcpFrame:
    """Dataclass representing a Modbus TCP frame: MBAP header and PDU."""

    transaction_id: int
    protocol_id: int
    length: int
    unit_id: int
    pdu_bytes: bytes

    @classmethod
    def build(cls, pdu_bytes: bytes, transaction_id: int, unit_id: int = DEFAULT_UNIT_ID) -> Self:
        """Wrap a request PDU in an MBAP header.

        Args:
            pdu_bytes: The encoded PDU, starting with the function code
            transaction_id: Transaction identifier (0-65535)
            unit_id: Unit identifier (0-255)

        Raises:
            ValueError: If one of the fields does not fit in the header

        """
        if not 1 <= len(pdu_bytes) <= MAX_PDU_SIZE:
            msg = f"PDU must be between 1 and {MAX_PDU_SIZE} bytes long, got {len(pdu_bytes)}"
            raise ValueError(msg)
        if not 0 <= transaction_id <= 0xFFFF:
            msg = "Transaction ID must be between 0 and 65535."
            raise ValueError(msg)
        if not 0 <= unit_id <= 0xFF:
            msg = "Unit ID must be in range 0-255"
            raise ValueError(msg)

        return cls(
            transaction_id=transaction_id,
            protocol_id=MODBUS_PROTOCOL_ID,
            length=len(pdu_bytes) + 1,  # PDU length + 1 byte for Unit ID
            unit_id=unit_id,
            pdu_bytes=bytes(pdu_bytes),
        )

    @classmethod
    def parse(cls, data: bytes) -> Self:
        """Parse a received frame.

        Bytes following the frame are ignored.

        Raises:
            InvalidResponseError: If the data does not hold a complete frame

        """
        total_length = frame_length(data)
        if len(data) < total_length:
            msg = f"Incomplete frame: expected {total_length} bytes, got {len(data)}"
            raise InvalidResponseError(msg, response_bytes=bytes(data))

        transaction_id, protocol_id, length, unit_id = struct.unpack_from(MBAP_HEADER_FORMAT, data)
        return cls(
            transaction_id=transaction_id,
            protocol_id=protocol_id,
            length=length,
            unit_id=unit_id,
            pdu_bytes=bytes(data[MBAP_HEADER_SIZE:total_length]),
        )

    @property
    def function_code(self) -> int | None:
        """Function code of the PDU, None when the PDU is empty."""
        return self.pdu_bytes[0] if self.pdu_bytes else None

    @property
    def bytes(self) -> bytes:
        """Get full frame bytes including MBAP header and PDU."""
        mbap_header = struct.pack(MBAP_HEADER_FORMAT, self.transaction_id, self.protocol_id, self.length, self.unit_id)
        return mbap_header + self.pdu_bytes


def frame_length(data: bytes) -> int:
    """Compute the total length of the frame that starts with the given MBAP header.

    Raises:
        InvalidResponseError: If the header is incomplete or declares an impossible length

    """
    if len(data) < MBAP_HEADER_SIZE:
        msg = f"Incomplete MBAP header: expected {MBAP_HEADER_SIZE} bytes, got {len(data)}"
        raise InvalidResponseError(msg, response_bytes=bytes(data))

    (length,) = struct.unpack_from(">H", data, 4)
    # the unit id and at least a function code must follow
    if not 2 <= length <= MAX_MBAP_LENGTH:
        msg = f"Invalid MBAP length field: {length}"
        raise InvalidResponseError(msg, response_bytes=bytes(data))

    return MBAP_HEADER_SIZE + length - 1


class TransactionIdGenerator:
    """Pseudo-random transaction identifiers for a single connection.

    Two consecutive identifiers are never equal, so a late answer to the previous
    request cannot be mistaken for the answer to the current one.
    """

    def __init__(self, seed: int | None = None) -> None:
        """Initialize the generator, optionally seeded for reproducible sequences."""
        self._random = random.Random(seed)  # noqa: S311
        self._last: int | None = None

    def __call__(self) -> int:
        """Return the next transaction identifier."""
        transaction_id = self._random.randint(0, 0xFFFF)
        while transaction_id == self._last:
            transaction_id = self._random.randint(0, 0xFFFF)
        self._last = transaction_id
        return transaction_id
