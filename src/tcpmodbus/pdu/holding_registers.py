"""Holding/Input Registers PDU Module."""

import struct

from tcpmodbus.const import MAX_READ_REGISTERS, MAX_WRITE_REGISTERS, SINGLE_UNIT, DataType, FunctionCode
from tcpmodbus.exceptions import InvalidResponseError

from .base import BaseClientPDU, ModbusUpdate
from .guard import check_address_range, check_register_value


class ReadHoldingRegistersPDU(BaseClientPDU[ModbusUpdate]):
    """Read Holding Registers PDU."""

    function_code = FunctionCode.READ_HOLDING_REGISTERS
    data_type = DataType.HOLDING_REGISTER

    def __init__(self, start_address: int, quantity: int) -> None:
        """Initialize Read Holding Registers PDU.

        Args:
            start_address: Starting address of the registers to read
            quantity: Number of registers to read (1-125)

        Raises:
            InvalidRequestError: If start_address or quantity is out of range

        """
        self.context = check_address_range(start_address, quantity, max_quantity=MAX_READ_REGISTERS)

    def encode_request(self) -> bytes:
        """Convert PDU to bytes.

        Returns:
            Bytes representation of the Read Holding Registers PDU

        """
        return struct.pack(">BHH", self.function_code, self.start_address, self.quantity)

    def decode_response(self, response: bytes) -> ModbusUpdate:
        """Decode the response PDU.

        Args:
            response: Response PDU bytes

        Returns:
            Update with the register values, each a 16-bit unsigned integer

        Raises:
            InvalidResponseError: If response format is invalid

        """
        data = self._unpack_byte_count(response)

        if len(data) != 2 * self.quantity:
            msg = f"Invalid register count: expected {self.quantity}, got {len(data) / 2:g}"
            raise InvalidResponseError(msg, response_bytes=response)

        return ModbusUpdate(
            data_type=self.data_type,
            start_address=self.start_address,
            registers=[*struct.unpack(f">{self.quantity}H", data)],
        )


class ReadInputRegistersPDU(ReadHoldingRegistersPDU):
    """Read Input Registers PDU."""

    function_code = FunctionCode.READ_INPUT_REGISTERS
    data_type = DataType.INPUT_REGISTER


class WriteSingleRegisterPDU(BaseClientPDU[ModbusUpdate]):
    """Write Single Register PDU."""

    function_code = FunctionCode.WRITE_SINGLE_REGISTER
    data_type = DataType.HOLDING_REGISTER

    def __init__(self, address: int, value: int) -> None:
        """Initialize Write Single Register PDU.

        Args:
            address: Address of the register to write
            value: Value to write (0-65535)

        Raises:
            InvalidRequestError: If address is out of range
            ValueError: If value does not fit in a register

        """
        self.context = check_address_range(address, SINGLE_UNIT, max_quantity=SINGLE_UNIT)
        self.value = check_register_value(value)

    @property
    def address(self) -> int:
        """Address of the register to write."""
        return self.start_address

    def encode_request(self) -> bytes:
        """Convert PDU to bytes.

        Returns:
            Bytes representation of the Write Single Register PDU

        """
        return struct.pack(">BHH", self.function_code, self.address, self.value)

    def decode_response(self, response: bytes) -> ModbusUpdate:
        """Decode the response PDU.

        The server echoes the request: the echoed address and value are returned.

        Args:
            response: Response PDU bytes

        Raises:
            InvalidResponseError: If response format is invalid

        """
        address, value = self._unpack_echo(response)
        return ModbusUpdate(data_type=self.data_type, start_address=address, registers=[value])

    def __repr__(self) -> str:
        """Return a readable representation of the request."""
        return f"{type(self).__name__}(address={self.address}, value={self.value})"


class WriteMultipleRegistersPDU(BaseClientPDU[ModbusUpdate]):
    """Write Multiple Registers PDU."""

    function_code = FunctionCode.WRITE_MULTIPLE_REGISTERS
    data_type = DataType.HOLDING_REGISTER

    def __init__(self, start_address: int, values: list[int]) -> None:
        """Initialize Write Multiple Registers PDU.

        Args:
            start_address: Starting address of the registers to write
            values: List of register values to write (1-123 values, each 0-65535)

        Raises:
            InvalidRequestError: If start_address or the number of values is out of range
            ValueError: If a value does not fit in a register

        """
        self.context = check_address_range(start_address, len(values), max_quantity=MAX_WRITE_REGISTERS)
        self.values = [check_register_value(value) for value in values]

    def encode_request(self) -> bytes:
        """Convert PDU to bytes.

        Returns:
            Bytes representation of the Write Multiple Registers PDU

        """
        byte_count = self.quantity * 2
        return struct.pack(
            f">BHHB{self.quantity}H",
            self.function_code,
            self.start_address,
            self.quantity,
            byte_count,
            *self.values,
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

    def echo_request(self) -> ReadHoldingRegistersPDU:
        """Return the request that reads back the written registers."""
        return ReadHoldingRegistersPDU(self.start_address, self.quantity)


class MaskWriteRegisterPDU(BaseClientPDU[ModbusUpdate]):
    """Mask Write Register PDU.

    The server computes `(current AND and_mask) OR (or_mask AND (NOT and_mask))`.
    """

    function_code = FunctionCode.MASK_WRITE_REGISTER
    data_type = DataType.HOLDING_REGISTER

    def __init__(self, address: int, and_mask: int, or_mask: int) -> None:
        """Initialize Mask Write Register PDU.

        Args:
            address: Address of the register to mask
            and_mask: AND mask (16-bit)
            or_mask: OR mask (16-bit)

        Raises:
            InvalidRequestError: If address is out of range
            ValueError: If a mask does not fit in a register

        """
        self.context = check_address_range(address, SINGLE_UNIT, max_quantity=SINGLE_UNIT)
        self.and_mask = check_register_value(and_mask, "AND mask")
        self.or_mask = check_register_value(or_mask, "OR mask")

    @property
    def address(self) -> int:
        """Address of the register to mask."""
        return self.start_address

    def encode_request(self) -> bytes:
        """Convert PDU to bytes.

        Returns:
            Bytes representation of the Mask Write Register PDU

        """
        return struct.pack(">BHHH", self.function_code, self.address, self.and_mask, self.or_mask)

    def decode_response(self, response: bytes) -> ModbusUpdate:
        """Decode the response PDU.

        Args:
            response: Response PDU bytes, echoing the request

        Returns:
            Acknowledgement without payload, tagged with the echoed address

        Raises:
            InvalidResponseError: If response format is invalid

        """
        self._check_function_code(response)
        try:
            _, address, _and_mask, _or_mask = struct.unpack(">BHHH", response)
        except struct.error as e:
            msg = f"Invalid response PDU length: expected 7, got {len(response)}"
            raise InvalidResponseError(msg, response_bytes=response) from e

        return ModbusUpdate(data_type=self.data_type, start_address=address)

    def echo_request(self) -> ReadHoldingRegistersPDU:
        """Return the request that reads back the masked register."""
        return ReadHoldingRegistersPDU(self.address, SINGLE_UNIT)

    def __repr__(self) -> str:
        """Return a readable representation of the request."""
        return (
            f"{type(self).__name__}(address={self.address}, "
            f"and_mask={self.and_mask:#06x}, or_mask={self.or_mask:#06x})"
        )
