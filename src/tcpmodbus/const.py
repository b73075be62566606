"""Modbus TCP constants."""

from enum import IntEnum


class FunctionCode(IntEnum):
    """Function codes supported by the client."""

    READ_COILS = 0x01
    READ_DISCRETE_INPUTS = 0x02
    READ_HOLDING_REGISTERS = 0x03
    READ_INPUT_REGISTERS = 0x04
    WRITE_SINGLE_COIL = 0x05
    WRITE_SINGLE_REGISTER = 0x06
    WRITE_MULTIPLE_COILS = 0x0F
    WRITE_MULTIPLE_REGISTERS = 0x10
    MASK_WRITE_REGISTER = 0x16


class ExceptionCode(IntEnum):
    """Exception codes a server can answer with."""

    ILLEGAL_FUNCTION = 0x01
    ILLEGAL_DATA_ADDRESS = 0x02
    ILLEGAL_DATA_VALUE = 0x03
    SERVER_DEVICE_FAILURE = 0x04


class DataType(IntEnum):
    """The data table a decoded response belongs to."""

    DISCRETE_INPUT = 1
    COIL = 2
    INPUT_REGISTER = 3
    HOLDING_REGISTER = 4


# Addressing
MAX_ADDRESS = 0xFFFF
MAX_REGISTER_VALUE = 0xFFFF

# Quantity limits per function
MAX_READ_BITS = 2000
MAX_WRITE_COILS = 1968
MAX_READ_REGISTERS = 125
MAX_WRITE_REGISTERS = 123
SINGLE_UNIT = 1

# Coil values on the wire
COIL_ON = 0xFF00
COIL_OFF = 0x0000

# MBAP header
MBAP_HEADER_SIZE = 7
MODBUS_PROTOCOL_ID = 0x0000
DEFAULT_UNIT_ID = 0xFF
EXCEPTION_OFFSET = 0x80
MAX_PDU_SIZE = 253
MAX_MBAP_LENGTH = MAX_PDU_SIZE + 1  # unit id + PDU

# Connection defaults
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 502
DEFAULT_TIMEOUT = 0.5  # seconds
DEFAULT_CONNECT_TIMEOUT = 10.0  # seconds
