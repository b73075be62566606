"""Async TCP Transport Layer Implementation.

Implements async Modbus TCP protocol transport based on asyncio, including MBAP header processing.
Exactly one request is in flight per connection: the next request is only sent once the
previous one has been answered, has failed or has timed out.
"""

import asyncio
import logging
import struct
from collections.abc import Callable
from functools import partial
from typing import Any, TypeVar

from tcpmodbus.const import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    MBAP_HEADER_SIZE,
    MODBUS_PROTOCOL_ID,
)
from tcpmodbus.exceptions import InvalidResponseError, ModbusConnectionError
from tcpmodbus.pdu import BaseClientPDU
from tcpmodbus.utils.raw_traffic_logger import format_bytes
from tcpmodbus.utils.raw_traffic_logger import log_raw_traffic as base_log_raw_traffic

from .async_base import AsyncBaseTransport
from .mbap import ModbusTcpFrame, TransactionIdGenerator, frame_length
from .validation import validate_response

RT = TypeVar("RT")

logger = logging.getLogger(__name__)
log_raw_traffic = partial(base_log_raw_traffic, "TCP")


class AsyncTcpTransport(AsyncBaseTransport):
    """Async Modbus TCP Transport Layer Implementation.

    Handles async Modbus TCP communication based on asyncio, including:
    - Async TCP socket connection management
    - MBAP header construction and parsing
    - Pseudo-random transaction identifiers
    - Response validation, timeout and error handling
    """

    _transport: asyncio.Transport | None = None
    _protocol: "ModbusTcpProtocol | None" = None

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        seed: int | None = None,
        **connection_kwargs: Any,
    ) -> None:
        """Initialize async TCP transport layer.

        Args:
            host: Target host IP address or domain name
            port: Target port, default 502 (Modbus TCP standard port)
            timeout: Response timeout in seconds, default 0.5s
            connect_timeout: Timeout for establishing connection, default 10.0s
            seed: Seed for the transaction identifiers, for reproducible traffic
            connection_kwargs: Additional connection parameters passed to `loop.create_connection`
                               (e.g., SSL context)

        Raises:
            ValueError: When parameters are invalid

        """
        if not 0 < port < 65536:
            msg = "Port must be an integer between 1-65535."
            raise ValueError(msg)
        if timeout <= 0:
            msg = "Timeout must be a positive number."
            raise ValueError(msg)
        if connect_timeout <= 0:
            msg = "Connect timeout must be a positive number."
            raise ValueError(msg)

        self.host = host
        self.port = port
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.connection_kwargs = connection_kwargs
        self.transaction_ids = TransactionIdGenerator(seed)

    async def open(self) -> None:
        """Async establish TCP connection."""
        loop = asyncio.get_running_loop()
        if self.is_open():
            logger.debug("Async TCP connection already open: %s:%d", self.host, self.port)
            return

        try:
            self._transport, self._protocol = await asyncio.wait_for(
                loop.create_connection(
                    lambda: ModbusTcpProtocol(
                        on_connection_lost=self._on_connection_lost,
                        timeout=self.timeout,
                        transaction_ids=self.transaction_ids,
                    ),
                    host=self.host,
                    port=self.port,
                    **self.connection_kwargs,
                ),
                timeout=self.connect_timeout,
            )

            logger.info("Async TCP connection established: %s:%d", self.host, self.port)
        except TimeoutError:
            logger.warning("Async TCP connection timeout: %s:%d", self.host, self.port, exc_info=True)
            raise
        except Exception as e:
            logger.exception("Async TCP connection error: %s:%d", self.host, self.port)
            msg = f"Cannot connect to {self.host}:{self.port}: {e}"
            raise ModbusConnectionError(msg) from e

    async def close(self) -> None:
        """Close TCP connection."""
        if not self._transport or self._transport.is_closing():
            logger.debug("Async TCP connection already closed: %s:%d", self.host, self.port)
            return

        try:
            self._transport.close()
            logger.info("Async TCP connection closed: %s:%d", self.host, self.port)
        except Exception as e:  # noqa: BLE001
            logger.debug("Error during async connection close: %s", e)

    def is_open(self) -> bool:
        """Check if TCP connection is open."""
        return self._transport is not None and not self._transport.is_closing()

    def _on_connection_lost(self, exc: Exception | None) -> None:
        if exc:
            logger.error("Async TCP connection lost due to error: %s", exc)
        else:
            logger.info("Async TCP connection closed.")

        self._transport = None
        self._protocol = None

    async def send_and_receive(self, unit_id: int, pdu: BaseClientPDU[RT]) -> RT:
        """Async send PDU and receive response.

        Args:
            unit_id: Unit identifier
            pdu: PDU object to send

        """
        if not self.is_open() or self._protocol is None:
            msg = "Transport is not connected."
            raise ModbusConnectionError(msg)

        return await self._protocol.send_and_receive(unit_id, pdu)


class ModbusTcpProtocol(asyncio.Protocol):
    """Asyncio Protocol implementation for Modbus TCP with MBAP headers."""

    transport: "asyncio.WriteTransport | None" = None

    on_connection_lost: Callable[[Exception | None], None]
    timeout: float

    _buffer: bytearray
    _request_lock: asyncio.Lock
    _pending_response: "asyncio.Future[ModbusTcpFrame] | None" = None
    # transaction ID of the last request that timed out; its answer may still arrive
    _late_transaction_id: int | None = None

    def __init__(
        self,
        *,
        on_connection_lost: Callable[[Exception | None], None],
        timeout: float = DEFAULT_TIMEOUT,
        transaction_ids: TransactionIdGenerator | None = None,
    ) -> None:
        """Initialize Modbus TCP Protocol."""
        super().__init__()

        self.on_connection_lost = on_connection_lost
        self.timeout = timeout
        self.transaction_ids = transaction_ids or TransactionIdGenerator()

        self._buffer = bytearray()
        self._request_lock = asyncio.Lock()

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        """Handle connection made event."""
        if not isinstance(transport, asyncio.WriteTransport):
            msg = "Expected a WriteTransport"
            raise TypeError(msg)

        self.transport = transport
        logger.info("Modbus TCP protocol connection established.")

    async def send_and_receive(self, unit_id: int, pdu: BaseClientPDU[RT]) -> RT:
        """Async send PDU and receive response.

        Implements complete async TCP protocol communication flow:
        1. Build MBAP header with a fresh transaction ID
        2. Send request (MBAP header + PDU)
        3. Wait for a complete response frame
        4. Validate the response against the request
        5. Decode the response PDU
        """
        async with self._request_lock:
            if self.transport is None or self.transport.is_closing():
                msg = "Not connected."
                raise ModbusConnectionError(msg)

            request = ModbusTcpFrame.build(pdu.encode_request(), self.transaction_ids(), unit_id)

            if self._buffer:
                if self._buffer_starts_late_response():
                    # the rest of it is still on its way, and is dropped once complete
                    logger.debug("Keeping the start of a late response: %s", format_bytes(self._buffer))
                else:
                    logger.debug("Discarding stale bytes before request: %s", format_bytes(self._buffer))
                    self._buffer.clear()

            self._pending_response = asyncio.get_running_loop().create_future()

            self.transport.write(request.bytes)
            log_raw_traffic("sent", request.bytes)

            late_transaction_id = None
            try:
                response = await asyncio.wait_for(self._pending_response, timeout=self.timeout)
            except TimeoutError as e:
                late_transaction_id = request.transaction_id
                msg = (
                    f"Response timeout after {self.timeout} seconds "
                    f"for transaction with ID {request.transaction_id:#06x}"
                )
                raise TimeoutError(msg) from e
            finally:
                self._pending_response = None
                self._late_transaction_id = late_transaction_id

            response_pdu = validate_response(request, response)
            return pdu.decode_response(response_pdu)

    def data_received(self, data: bytes) -> None:
        """Handle data received event.

        Bytes are collected until the MBAP header is complete, and then until the
        number of bytes declared in its length field has arrived.
        """
        self._buffer.extend(data)
        log_raw_traffic("recv", data)

        while len(self._buffer) >= MBAP_HEADER_SIZE:
            try:
                total_length = frame_length(self._buffer)
            except InvalidResponseError as e:
                logger.debug("Discarding garbage bytes: %s", format_bytes(self._buffer))
                self._buffer.clear()
                self._fail_pending_response(e)
                return

            if len(self._buffer) < total_length:
                return  # wait for the rest of the frame

            frame = ModbusTcpFrame.parse(bytes(self._buffer[:total_length]))
            del self._buffer[:total_length]

            if self._late_transaction_id is not None and frame.transaction_id == self._late_transaction_id:
                self._late_transaction_id = None
                logger.warning(
                    "Received late response with Transaction ID: %d. Discarding bytes: %s",
                    frame.transaction_id,
                    format_bytes(frame.bytes),
                )
            elif self._pending_response is not None and not self._pending_response.done():
                self._pending_response.set_result(frame)
            else:
                logger.warning(
                    "Received unexpected response with Transaction ID: %d. Discarding bytes: %s",
                    frame.transaction_id,
                    format_bytes(frame.bytes),
                )

    def _buffer_starts_late_response(self) -> bool:
        """Check if the buffered bytes can be the first part of the answer to the request that timed out."""
        if self._late_transaction_id is None:
            return False
        header_start = struct.pack(">HH", self._late_transaction_id, MODBUS_PROTOCOL_ID)
        return header_start.startswith(bytes(self._buffer[: len(header_start)]))

    def _fail_pending_response(self, exc: Exception) -> None:
        if self._pending_response is not None and not self._pending_response.done():
            self._pending_response.set_exception(exc)

    def connection_lost(self, exc: Exception | None) -> None:
        """Handle connection lost event."""
        self._fail_pending_response(
            ModbusConnectionError("Connection lost before response was received.", bytes_read=bytes(self._buffer))
        )
        self._buffer.clear()
        self.transport = None

        self.on_connection_lost(exc)


__all__ = ["AsyncTcpTransport", "ModbusTcpProtocol"]
