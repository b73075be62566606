"""Async Transport layer base class.

Defines the unified interface that all transport layer implementations must follow.
"""

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Self, TypeVar

from tcpmodbus.pdu import BaseClientPDU

RT = TypeVar("RT")


class AsyncBaseTransport(ABC):
    """Transport Layer Base Class.

    All transport layer implementations must inherit from this class and implement all
    abstract methods. MBAP header processing and response validation are completely
    encapsulated within the transport layer, providing a unified and concise interface
    for clients.
    """

    @abstractmethod
    async def open(self) -> None:
        """Open Transport Connection.

        Raises:
            ModbusConnectionError: When connection cannot be established
            TimeoutError: When the connection is not established in time

        """

    @abstractmethod
    async def close(self) -> None:
        """Close Transport Connection.

        Closes connection with Modbus server and releases related resources.
        A request waiting for its response is aborted.
        """

    @abstractmethod
    def is_open(self) -> bool:
        """Check Connection Status.

        Returns:
            True if connection is established and available, False otherwise

        """

    @abstractmethod
    async def send_and_receive(self, unit_id: int, pdu: BaseClientPDU[RT]) -> RT:
        """Send PDU and Receive Response.

        This is the core method of the transport layer. It receives a pure PDU, adds the
        MBAP header, sends the request, receives the response, validates it against the
        request and returns the decoded response.

        Args:
            unit_id: Unit identifier
            pdu: Protocol Data Unit, contains function code and data

        Returns:
            The decoded response

        Raises:
            ModbusConnectionError: Connection error
            TimeoutError: Operation timeout
            InvalidResponseError: Invalid response format or response not matching the request
            ModbusResponseError: The server answered with an exception response

        """

    async def __aenter__(self) -> Self:
        """Async Context Manager Entry."""
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async Context Manager Exit."""
        await self.close()
