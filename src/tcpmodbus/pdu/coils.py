"""Coils PDU Module."""

import struct

from tcpmodbus.const import (
    COIL_OFF,
    COIL_ON,
    MAX_READ_BITS,
    MAX_WRITE_COILS,
    SINGLE_UNIT,
    DataType,
    FunctionCode,
)
from tcpmodbus.exceptions import InvalidResponseError
from tcpmodbus.utils.bits import pack_bits, packed_size, unpack_bits

from .base import BaseClientPDU, ModbusUpdate
from .guard import check_address_range


class ReadCoilsPDU(BaseClientPDU[ModbusUpdate]):
    """Read Coils PDU."""

    function_code = FunctionCode.READ_COILS
    data_type = DataType.COIL

    def __init__(self, start_address: int, quantity: int) -> None:
        """Initialize Read Coils PDU.

        Args:
            start_address: Starting address of the coils to read
            quantity: Number of coils to read (1-2000)

        Raises:
            InvalidRequestError: If start_address or quantity is out of range

        """
        self.context = check_address_range(start_address, quantity, max_quantity=MAX_READ_BITS)

    def encode_request(self) -> bytes:
        """Convert PDU to bytes.

        Returns:
            Bytes representation of the Read Coils PDU

        """
        return struct.pack(">BHH", self.function_code, self.start_address, self.quantity)

    def decode_response(self, response: bytes) -> ModbusUpdate:
        """Decode the response PDU.

        Args:
            response: Response PDU bytes

        Returns:
            Update with exactly `quantity` bit values, starting at the requested address

        Raises:
            InvalidResponseError: If response format is invalid

        """
        data = self._unpack_byte_count(response)

        if len(data) < packed_size(self.quantity):
            msg = f"Invalid byte count: expected {packed_size(self.quantity)}, got {len(data)}"
            raise InvalidResponseError(msg, response_bytes=response)

        return ModbusUpdate(
            data_type=self.data_type,
            start_address=self.start_address,
            bits=unpack_bits(data, self.quantity),
        )


class WriteSingleCoilPDU(BaseClientPDU[ModbusUpdate]):
    """Write Single Coil PDU."""

    function_code = FunctionCode.WRITE_SINGLE_COIL
    data_type = DataType.COIL

    def __init__(
        self,
        address: int,
        value: bool,  # noqa: FBT001
    ) -> None:
        """Initialize Write Single Coil PDU.

        Args:
            address: Address of the coil to write
            value: Value to write (True for ON, False for OFF)

        Raises:
            InvalidRequestError: If address is out of range

        """
        self.context = check_address_range(address, SINGLE_UNIT, max_quantity=SINGLE_UNIT)
        self.value = value

    @property
    def address(self) -> int:
        """Address of the coil to write."""
        return self.start_address

    def encode_request(self) -> bytes:
        """Convert PDU to bytes.

        Returns:
            Bytes representation of the Write Single Coil PDU

        """
        coil_value = COIL_ON if self.value else COIL_OFF
        return struct.pack(">BHH", self.function_code, self.address, coil_value)

    def decode_response(self, response: bytes) -> ModbusUpdate:
        """Decode the response PDU.

        The server echoes the request: the echoed address and state are returned.

        Args:
            response: Response PDU bytes

        Raises:
            InvalidResponseError: If response format is invalid

        """
        address, coil_value = self._unpack_echo(response)
        return ModbusUpdate(
            data_type=self.data_type,
            start_address=address,
            bits=[coil_value >> 8 == 0xFF],
        )

    def __repr__(self) -> str:
        """Return a readable representation of the request."""
        return f"{type(self).__name__}(address={self.address}, value={self.value})"


class WriteMultipleCoilsPDU(BaseClientPDU[ModbusUpdate]):
    """Write Multiple Coils PDU."""

    function_code = FunctionCode.WRITE_MULTIPLE_COILS
    data_type = DataType.COIL

    def __init__(self, start_address: int, values: list[bool]) -> None:
        """Initialize Write Multiple Coils PDU.

        Args:
            start_address: Starting address of the coils to write
            values: List of boolean values representing the coil states (1-1968 values)

        Raises:
            InvalidRequestError: If start_address or the number of values is out of range

        """
        self.context = check_address_range(start_address, len(values), max_quantity=MAX_WRITE_COILS)
        self.values = list(values)

    def encode_request(self) -> bytes:
        """Convert PDU to bytes.

        Returns:
            Bytes representation of the Write Multiple Coils PDU

        """
        data = pack_bits(self.values)
        return (
            struct.pack(
                ">BHHB",
                self.function_code,
                self.start_address,
                self.quantity,
                len(data),
            )
            + data
        )

    def decode_response(self, response: bytes) -> ModbusUpdate:
        """Decode the response PDU.

        Args:
            response: Response PDU bytes, echoing the starting address and quantity

        Returns:
            Acknowledgement without payload, tagged with the echoed starting address

        Raises:
            InvalidResponseError: If response format is invalid

        """
        address, _quantity = self._unpack_echo(response)
        return ModbusUpdate(data_type=self.data_type, start_address=address)

    def echo_request(self) -> ReadCoilsPDU:
        """Return the request that reads back the written coils."""
        return ReadCoilsPDU(self.start_address, self.quantity)
