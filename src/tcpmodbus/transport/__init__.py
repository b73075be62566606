"""Transport layer."""

from .async_base import AsyncBaseTransport
from .async_tcp import AsyncTcpTransport
from .mbap import ModbusTcpFrame, TransactionIdGenerator
from .validation import validate_response

__all__ = [
    "AsyncBaseTransport",
    "AsyncTcpTransport",
    "ModbusTcpFrame",
    "TransactionIdGenerator",
    "validate_response",
]
