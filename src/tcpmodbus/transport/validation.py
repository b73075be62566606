"""Validation of a received frame against the request it answers."""

import logging

from tcpmodbus.const import EXCEPTION_OFFSET
from tcpmodbus.exceptions import (
    FunctionCodeMismatchError,
    NotModbusError,
    TransactionMismatchError,
    UnknownModbusResponseError,
    error_code_to_exception_map,
)

from .mbap import ModbusTcpFrame

logger = logging.getLogger(__name__)


def validate_response(request: ModbusTcpFrame, response: ModbusTcpFrame) -> bytes:
    """Check that the response belongs to the request and return its PDU.

    The checks run in order: transaction ID, protocol ID, function code.

    Args:
        request: The frame that was sent
        response: The frame that was received

    Returns:
        The response PDU, ready to be decoded

    Raises:
        TransactionMismatchError: The transaction IDs differ
        NotModbusError: The protocol IDs differ
        ModbusResponseError: The server answered with an exception response
        FunctionCodeMismatchError: The function code is neither the request's nor its exception code

    """
    if response.transaction_id != request.transaction_id:
        msg = (
            f"Transaction ID mismatch: expected {request.transaction_id:#06x}, "
            f"received {response.transaction_id:#06x}"
        )
        raise TransactionMismatchError(msg, response_bytes=response.bytes)

    if response.protocol_id != request.protocol_id:
        msg = f"Protocol is not Modbus: protocol ID {response.protocol_id:#06x}"
        raise NotModbusError(msg, response_bytes=response.bytes)

    if response.unit_id != request.unit_id:
        logger.debug("Unit ID differs: sent %#04x, received %#04x", request.unit_id, response.unit_id)

    function_code = request.function_code
    assert function_code is not None

    if response.function_code == function_code:
        return response.pdu_bytes

    if response.function_code == function_code + EXCEPTION_OFFSET:
        exception_code = response.pdu_bytes[1] if len(response.pdu_bytes) > 1 else 0
        error_class = error_code_to_exception_map.get(exception_code, UnknownModbusResponseError)
        raise error_class(exception_code, function_code)

    msg = f"Function code mismatch: expected {function_code:#04x}, received {response.function_code:#04x}"
    raise FunctionCodeMismatchError(msg, response_bytes=response.bytes)
