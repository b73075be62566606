"""Address and quantity checks shared by all request PDUs."""

import logging
from dataclasses import dataclass

from tcpmodbus.const import MAX_ADDRESS, MAX_REGISTER_VALUE
from tcpmodbus.exceptions import AddressOutOfRangeError, EndAddressOutOfRangeError, LengthOutOfRangeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestContext:
    """Address range of a single request.

    The decoder of the response reads it to know where the returned data starts
    and how many values it should produce.
    """

    start_address: int
    quantity: int


def check_address_range(
    start_address: int,
    quantity: int,
    *,
    max_quantity: int,
    max_start_address: int = MAX_ADDRESS,
) -> RequestContext:
    """Validate the addressed range of a request.

    The checks run in order and stop at the first failure.

    Args:
        start_address: First address of the range
        quantity: Number of coils, inputs or registers in the range
        max_quantity: Maximum quantity allowed for the function
        max_start_address: Highest address that may be used

    Returns:
        The request context for the validated range

    Raises:
        AddressOutOfRangeError: start_address is negative or beyond max_start_address
        LengthOutOfRangeError: quantity is not between 1 and max_quantity
        EndAddressOutOfRangeError: start_address + quantity exceeds max_start_address

    """
    if not (0 <= start_address <= max_start_address):
        msg = f"Start address is out of range: {start_address} (allowed: 0-{max_start_address})"
        logger.debug(msg)
        raise AddressOutOfRangeError(msg)

    if not (1 <= quantity <= max_quantity):
        msg = f"Length is out of range: {quantity} (allowed: 1-{max_quantity})"
        logger.debug(msg)
        raise LengthOutOfRangeError(msg)

    if start_address + quantity > max_start_address:
        msg = f"End address is out of range: {start_address} + {quantity} exceeds {max_start_address}"
        logger.debug(msg)
        raise EndAddressOutOfRangeError(msg)

    return RequestContext(start_address=start_address, quantity=quantity)


def check_register_value(value: int, name: str = "Register value") -> int:
    """Ensure a value fits in a 16-bit register."""
    if not (0 <= value <= MAX_REGISTER_VALUE):
        msg = f"{name} must be between 0 and 65535."
        raise ValueError(msg)
    return value
