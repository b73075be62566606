"""Base class for Modbus PDU (Protocol Data Unit) handling."""

import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from tcpmodbus.const import DataType
from tcpmodbus.exceptions import InvalidResponseError

from .guard import RequestContext

RT = TypeVar("RT")


@dataclass(frozen=True)
class ModbusUpdate:
    """Decoded response of a request.

    Read requests carry either `bits` or `registers`. Write requests carry the echoed
    value for single writes and no payload at all for multiple writes and mask writes.
    """

    data_type: DataType
    start_address: int
    bits: list[bool] | None = None
    registers: list[int] | None = None

    @property
    def is_acknowledgement(self) -> bool:
        """Report if this update only acknowledges a write, without any values."""
        return self.bits is None and self.registers is None


class BaseClientPDU(ABC, Generic[RT]):
    """Base class that defines the functions needed to handle Modbus PDUs on the client-side."""

    function_code: int
    data_type: DataType
    context: RequestContext

    @abstractmethod
    def encode_request(self) -> bytes:
        """Convert PDU to bytes.

        This method should be implemented by subclasses to convert the PDU
        into a byte representation suitable for transmission.
        """

    @abstractmethod
    def decode_response(self, response: bytes) -> RT:
        """Decode the response PDU.

        Args:
            response: Response PDU bytes

        Returns:
            Decoded response data, type depends on the specific PDU implementation

        """

    def echo_request(self) -> "BaseClientPDU[Any] | None":
        """Return the request that reads back what this request has written.

        Only write requests which are acknowledged without their values return a request here.
        """
        return None

    @property
    def start_address(self) -> int:
        """First address addressed by this request."""
        return self.context.start_address

    @property
    def quantity(self) -> int:
        """Number of values addressed by this request."""
        return self.context.quantity

    def _check_function_code(self, response: bytes) -> None:
        if not response:
            msg = "Expected response to start with a function code"
            raise InvalidResponseError(msg, response_bytes=response)

        if response[0] != self.function_code:
            msg = f"Invalid function code: expected {self.function_code:#04x}, received {response[0]:#04x}"
            raise InvalidResponseError(msg, response_bytes=response)

    def _unpack_echo(self, response: bytes) -> tuple[int, int]:
        """Unpack the `address, value` echo that write requests are acknowledged with."""
        self._check_function_code(response)
        try:
            _, address, value = struct.unpack(">BHH", response)
        except struct.error as e:
            msg = f"Invalid response PDU length: expected 5, got {len(response)}"
            raise InvalidResponseError(msg, response_bytes=response) from e
        return address, value

    def _unpack_byte_count(self, response: bytes) -> bytes:
        """Unpack the `byte count, data` layout that read requests are answered with."""
        # response format: function code + byte count + data
        try:
            _, byte_count = struct.unpack_from(">BB", response)
        except struct.error as e:
            msg = "Expected response to start with function code and byte count"
            raise InvalidResponseError(msg, response_bytes=response) from e

        self._check_function_code(response)

        if len(response) != 2 + byte_count:
            msg = f"Invalid response PDU length: expected {2 + byte_count}, got {len(response)}"
            raise InvalidResponseError(msg, response_bytes=response)

        return response[2:]

    def __repr__(self) -> str:
        """Return a readable representation of the request."""
        return f"{type(self).__name__}(start_address={self.start_address}, quantity={self.quantity})"
