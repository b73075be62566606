"""Exceptions."""

from typing import TYPE_CHECKING, Any

from .const import ExceptionCode

if TYPE_CHECKING:
    from .pdu.base import ModbusUpdate


class TcpModbusError(Exception):
    """Base exception class for the tcpmodbus library."""


class ModbusConnectionError(TcpModbusError):
    """Connection error exception.

    Raised when unable to establish or maintain connection with the Modbus server.
    """

    response_bytes: bytes
    """The bytes that were read before the connection error occurred. Can be empty."""

    def __init__(self, *args: Any, bytes_read: bytes | None = None, **kwargs: Any) -> None:
        """Initialize ModbusConnectionError."""
        super().__init__(*args, **kwargs)
        self.response_bytes = bytes_read or b""


class InvalidRequestError(TcpModbusError):
    """Invalid request error exception.

    Raised before anything is sent when the request parameters are not acceptable.
    """


class AddressOutOfRangeError(InvalidRequestError):
    """The start address lies beyond the highest allowed address."""


class LengthOutOfRangeError(InvalidRequestError):
    """The quantity is zero or exceeds the maximum for the function."""


class EndAddressOutOfRangeError(InvalidRequestError):
    """The addressed range runs past the highest allowed address."""


class InvalidResponseError(TcpModbusError):
    """Invalid response error exception.

    Raised when received response format is incorrect or unexpected.
    """

    response_bytes: bytes

    def __init__(self, *args: Any, response_bytes: bytes, **kwargs: Any) -> None:
        """Initialize InvalidResponseError."""
        super().__init__(*args, **kwargs)
        self.response_bytes = response_bytes


class TransactionMismatchError(InvalidResponseError):
    """The transaction ID of the response does not match the request."""


class NotModbusError(InvalidResponseError):
    """The protocol ID of the response is not the Modbus protocol ID."""


class FunctionCodeMismatchError(InvalidResponseError):
    """The function code of the response matches neither the request nor its exception code."""


class EchoReadError(TcpModbusError):
    """The write succeeded, but reading back the written values failed.

    The acknowledgement of the write is available in `write_result`,
    the failure of the read is the `__cause__` of this exception.
    """

    write_result: "ModbusUpdate"

    def __init__(self, *args: Any, write_result: "ModbusUpdate", **kwargs: Any) -> None:
        """Initialize EchoReadError."""
        super().__init__(*args, **kwargs)
        self.write_result = write_result


class ModbusResponseError(TcpModbusError):
    """Base class for all Modbus exception responses."""

    error_code: int
    description: str = "Unknown exception"

    def __init__(self, error_code: int, function_code: int) -> None:
        """Initialize ModbusResponseError.

        Args:
            error_code: Error code from the Modbus exception response
            function_code: Function code of the request that caused the exception

        """
        super().__init__(
            f"Modbus Exception {error_code:#04x} for function code {function_code:#04x}: {self.description}"
        )
        assert self.error_code == error_code
        self.function_code = function_code


class IllegalFunctionError(ModbusResponseError):
    """The function code received in the request is not an allowable action for the server."""

    error_code = ExceptionCode.ILLEGAL_FUNCTION
    description = "function code is not supported"


class IllegalDataAddressError(ModbusResponseError):
    """The data address received in the request is not an allowable address for the server."""

    error_code = ExceptionCode.ILLEGAL_DATA_ADDRESS
    description = "address is not available"


class IllegalDataValueError(ModbusResponseError):
    """The value contained in the request data field is not an allowable value for the server."""

    error_code = ExceptionCode.ILLEGAL_DATA_VALUE
    description = "data value is not supported"


class ServerDeviceFailureError(ModbusResponseError):
    """An unrecoverable error occurred."""

    error_code = ExceptionCode.SERVER_DEVICE_FAILURE
    description = "server device failure"


class UnknownModbusResponseError(ModbusResponseError):
    """Unknown Modbus exception response."""

    def __init__(self, error_code: int, function_code: int) -> None:
        """Initialize UnknownModbusResponseError.

        Args:
            error_code: Error code from the Modbus exception response
            function_code: Function code of the request that caused the exception

        """
        # skip the error_code assertion of the parent class
        self.error_code = error_code
        TcpModbusError.__init__(
            self, f"Modbus Exception {error_code:#04x} for function code {function_code:#04x}: {self.description}"
        )
        self.function_code = function_code


error_code_to_exception_map: dict[int, type[ModbusResponseError]] = {
    IllegalFunctionError.error_code: IllegalFunctionError,
    IllegalDataAddressError.error_code: IllegalDataAddressError,
    IllegalDataValueError.error_code: IllegalDataValueError,
    ServerDeviceFailureError.error_code: ServerDeviceFailureError,
}


def register_custom_exception(err_cls: type[ModbusResponseError]) -> None:
    """Register a custom Modbus exception class.

    Args:
        err_cls: Custom exception class to register

    """
    if err_cls.error_code in error_code_to_exception_map:
        msg = f"Error code {err_cls.error_code} is already registered."
        raise ValueError(msg)

    error_code_to_exception_map[err_cls.error_code] = err_cls
