"""Tests for tcpmodbus/pdu/guard.py ."""

import pytest
from tcpmodbus.exceptions import (
    AddressOutOfRangeError,
    EndAddressOutOfRangeError,
    InvalidRequestError,
    LengthOutOfRangeError,
)
from tcpmodbus.pdu.guard import RequestContext, check_address_range, check_register_value


@pytest.mark.parametrize(
    ("start_address", "quantity", "max_quantity"),
    [
        (0, 1, 1),
        (0, 125, 125),
        (65534, 1, 1),
        (65410, 125, 125),
        (100, 2000, 2000),
    ],
)
def test_valid_ranges(start_address: int, quantity: int, max_quantity: int) -> None:
    """Test that valid ranges produce a request context."""
    context = check_address_range(start_address, quantity, max_quantity=max_quantity)

    assert context == RequestContext(start_address=start_address, quantity=quantity)


@pytest.mark.parametrize("start_address", [-1, 65536, 100_000])
def test_start_address_out_of_range(start_address: int) -> None:
    """Test that the start address must lie within 0-65535."""
    with pytest.raises(AddressOutOfRangeError, match=r"Start address is out of range: .* \(allowed: 0-65535\)"):
        check_address_range(start_address, 1, max_quantity=125)


@pytest.mark.parametrize(("quantity", "max_quantity"), [(0, 125), (126, 125), (2001, 2000), (-5, 1968)])
def test_length_out_of_range(quantity: int, max_quantity: int) -> None:
    """Test that the quantity must lie within 1 and the function maximum."""
    with pytest.raises(LengthOutOfRangeError, match=rf"Length is out of range: {quantity} \(allowed: 1-{max_quantity}\)"):
        check_address_range(0, quantity, max_quantity=max_quantity)


@pytest.mark.parametrize(("start_address", "quantity"), [(65535, 1), (65500, 100), (65411, 125)])
def test_end_address_out_of_range(start_address: int, quantity: int) -> None:
    """Test that start address plus quantity may not exceed 65535."""
    with pytest.raises(EndAddressOutOfRangeError, match=r"End address is out of range"):
        check_address_range(start_address, quantity, max_quantity=125)


def test_checks_stop_at_first_failure() -> None:
    """Test that the start address is checked before the quantity."""
    with pytest.raises(AddressOutOfRangeError):
        check_address_range(70000, 0, max_quantity=125)

    with pytest.raises(LengthOutOfRangeError):
        check_address_range(65535, 0, max_quantity=125)


def test_custom_max_start_address() -> None:
    """Test a lower address limit."""
    assert check_address_range(999, 1, max_quantity=1, max_start_address=1000).start_address == 999

    with pytest.raises(AddressOutOfRangeError, match=r"\(allowed: 0-1000\)"):
        check_address_range(1001, 1, max_quantity=1, max_start_address=1000)


def test_failures_are_invalid_requests(caplog: pytest.LogCaptureFixture) -> None:
    """Test that all failures share a base class and are logged."""
    caplog.set_level("DEBUG", logger="tcpmodbus.pdu.guard")

    with pytest.raises(InvalidRequestError):
        check_address_range(0, 0, max_quantity=1)

    assert any("Length is out of range" in record.message for record in caplog.records)


def test_check_register_value() -> None:
    """Test the 16-bit range of register values."""
    assert check_register_value(0) == 0
    assert check_register_value(0xFFFF) == 0xFFFF

    with pytest.raises(ValueError, match=r"Register value must be between 0 and 65535\."):
        check_register_value(0x10000)
    with pytest.raises(ValueError, match=r"OR mask must be between 0 and 65535\."):
        check_register_value(-1, "OR mask")
