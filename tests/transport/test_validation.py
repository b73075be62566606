"""Tests for tcpmodbus/transport/validation.py ."""

import pytest
from tcpmodbus.exceptions import (
    FunctionCodeMismatchError,
    IllegalDataAddressError,
    IllegalDataValueError,
    IllegalFunctionError,
    ModbusResponseError,
    NotModbusError,
    ServerDeviceFailureError,
    TransactionMismatchError,
    UnknownModbusResponseError,
)
from tcpmodbus.transport.mbap import ModbusTcpFrame
from tcpmodbus.transport.validation import validate_response

REQUEST = ModbusTcpFrame.build(bytes.fromhex("03 00 64 00 02"), 0x0102)


def _response(
    pdu: bytes,
    *,
    transaction_id: int = 0x0102,
    protocol_id: int = 0,
    unit_id: int = 0xFF,
) -> ModbusTcpFrame:
    return ModbusTcpFrame(
        transaction_id=transaction_id,
        protocol_id=protocol_id,
        length=len(pdu) + 1,
        unit_id=unit_id,
        pdu_bytes=pdu,
    )


def test_matching_response() -> None:
    """Test that the PDU of a matching response is returned."""
    pdu = bytes.fromhex("03 04 00 0A 00 0B")

    assert validate_response(REQUEST, _response(pdu)) == pdu


def test_transaction_id_mismatch() -> None:
    """Test that a response to another transaction is rejected."""
    response = _response(bytes.fromhex("03 04 00 0A 00 0B"), transaction_id=0x0103)

    with pytest.raises(TransactionMismatchError, match="Transaction ID mismatch: expected 0x0102, received 0x0103") as e:
        validate_response(REQUEST, response)

    assert e.value.response_bytes == response.bytes


def test_transaction_id_checked_first() -> None:
    """Test that the transaction ID is checked before the protocol ID and function code."""
    with pytest.raises(TransactionMismatchError):
        validate_response(REQUEST, _response(b"\x04\x00", transaction_id=1, protocol_id=1))


def test_protocol_id_mismatch() -> None:
    """Test that non-Modbus responses are rejected."""
    with pytest.raises(NotModbusError, match="Protocol is not Modbus: protocol ID 0x0001"):
        validate_response(REQUEST, _response(bytes.fromhex("03 02 00 0A"), protocol_id=1))


def test_unit_id_mismatch_is_only_logged(caplog: pytest.LogCaptureFixture) -> None:
    """Test that a different unit ID does not reject the response."""
    caplog.set_level("DEBUG", logger="tcpmodbus.transport.validation")
    pdu = bytes.fromhex("03 02 00 0A")

    assert validate_response(REQUEST, _response(pdu, unit_id=1)) == pdu
    assert any("Unit ID differs" in record.message for record in caplog.records)


@pytest.mark.parametrize(
    ("exception_code", "error_class"),
    [
        (0x01, IllegalFunctionError),
        (0x02, IllegalDataAddressError),
        (0x03, IllegalDataValueError),
        (0x04, ServerDeviceFailureError),
        (0x0B, UnknownModbusResponseError),
    ],
)
def test_exception_response(exception_code: int, error_class: type[ModbusResponseError]) -> None:
    """Test that exception responses raise the matching error."""
    with pytest.raises(error_class) as e:
        validate_response(REQUEST, _response(bytes([0x83, exception_code])))

    assert e.value.error_code == exception_code
    assert e.value.function_code == 0x03


def test_exception_response_illegal_data_address_message() -> None:
    """Test the message of an Illegal Data Address exception."""
    with pytest.raises(IllegalDataAddressError, match="Modbus Exception 0x02 for function code 0x03: address is not available"):
        validate_response(REQUEST, _response(b"\x83\x02"))


def test_exception_response_without_exception_code() -> None:
    """Test a truncated exception response."""
    with pytest.raises(UnknownModbusResponseError) as e:
        validate_response(REQUEST, _response(b"\x83"))

    assert e.value.error_code == 0


def test_function_code_mismatch() -> None:
    """Test that responses for another function are rejected."""
    with pytest.raises(FunctionCodeMismatchError, match="Function code mismatch: expected 0x03, received 0x04"):
        validate_response(REQUEST, _response(bytes.fromhex("04 02 00 0A")))

    # exception response for another function
    with pytest.raises(FunctionCodeMismatchError, match="received 0x84"):
        validate_response(REQUEST, _response(b"\x84\x02"))
