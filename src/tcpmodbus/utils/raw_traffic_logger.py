"""Raw traffic logger."""

from logging import getLogger
from typing import Literal

raw_traffic_logger = getLogger("tcpmodbus.raw_traffic")


def log_raw_traffic(
    transport_name: str,
    direction: Literal["sent", "recv"],
    data: bytes,
    *,
    is_error: bool = False,
) -> None:
    """Log raw Modbus traffic as a hex dump."""
    raw_traffic_logger.debug(
        "%6s %s: %s %s",
        transport_name,
        direction,
        format_bytes(data),
        "[!]" if is_error else "",
    )


def format_bytes(data: bytes) -> str:
    """Format bytes for logging."""
    return data.hex(" ").upper()
