"""Pacing and reconnecting transport.

Wraps another transport, normally `AsyncTcpTransport`, and adds the following
opt-in behaviour on top of it:

- a pause after connecting, for devices that are slow to accept their first request
- a minimum pause between the end of one request and the start of the next
- reconnecting with a tenacity strategy once the connection has been lost

Every request is sent exactly once. A failed request is raised to the caller as is;
when reconnecting is enabled, the request after it starts on a fresh connection.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import AsyncRetrying, RetryError, retry_if_exception_type, stop_after_delay, wait_exponential

from tcpmodbus.exceptions import ModbusConnectionError
from tcpmodbus.pdu import BaseClientPDU

from .async_base import AsyncBaseTransport

logger = logging.getLogger(__name__)

RT = TypeVar("RT")

ReconnectedCallback = Callable[[], Awaitable[None] | None]


def default_reconnect_strategy() -> AsyncRetrying:
    """Keep reconnecting for up to a minute, backing off from 0.1 to 10 seconds."""
    return AsyncRetrying(stop=stop_after_delay(60), wait=wait_exponential(min=0.1, max=10))


class AsyncSmartTransport(AsyncBaseTransport):
    """Transport wrapper that paces requests and can restore a lost connection.

    Reconnecting only happens for a transport that was opened by the caller and not
    closed since. The request that runs into a lost connection still fails.
    """

    reconnect_strategy: AsyncRetrying | None = None

    def __init__(  # noqa: PLR0913
        self,
        base_transport: AsyncBaseTransport,
        *,
        wait_between_requests: float = 0.0,
        wait_after_connect: float = 0.0,
        auto_reconnect: bool | AsyncRetrying = False,
        on_reconnected: ReconnectedCallback | None = None,
    ) -> None:
        """Initialize the transport wrapper.

        Args:
            base_transport: Transport that sends the requests (AsyncTcpTransport)
            wait_between_requests: Minimum pause between two requests in seconds (default: 0.0s)
            wait_after_connect: Pause after connecting in seconds (default: 0.0s)
            auto_reconnect: Reconnect before the next request once the connection was lost (default: False).
                            An AsyncRetrying instance controls how long and how often to try.
            on_reconnected: Called after the connection has been restored.

        """
        waits = {"wait_between_requests": wait_between_requests, "wait_after_connect": wait_after_connect}
        for name, value in waits.items():
            if value < 0:
                msg = f"{name} must be a positive value"
                raise ValueError(msg)

        if on_reconnected is not None and not auto_reconnect:
            msg = "on_reconnected callback provided but auto_reconnect is disabled"
            raise ValueError(msg)

        self.base_transport = base_transport
        self.wait_between_requests = wait_between_requests
        self.wait_after_connect = wait_after_connect
        self.on_reconnected = on_reconnected

        if isinstance(auto_reconnect, AsyncRetrying):
            strategy: AsyncRetrying | None = auto_reconnect
        else:
            strategy = default_reconnect_strategy() if auto_reconnect else None
        if strategy is not None:
            # only failures to connect are worth another attempt
            self.reconnect_strategy = strategy.copy(
                retry=retry_if_exception_type((ModbusConnectionError, TimeoutError))
            )

        self._lock = asyncio.Lock()
        self._opened = False
        self._connection_broken = False
        self._last_request_finished_at: float | None = None

    async def open(self) -> None:
        """Connect, then wait `wait_after_connect` seconds.

        Raises:
            ModbusConnectionError: When connection cannot be established

        """
        async with self._lock:
            await self._connect()

    async def _connect(self) -> None:
        await self.base_transport.open()
        self._opened = True
        self._connection_broken = False
        if self.wait_after_connect > 0:
            logger.debug("Connected, waiting %.2f seconds before the first request", self.wait_after_connect)
            await asyncio.sleep(self.wait_after_connect)

    async def close(self) -> None:
        """Close the connection and stop reconnecting."""
        async with self._lock:
            self._opened = False
            await self.base_transport.close()

    def is_open(self) -> bool:
        """Report whether requests can be sent.

        With reconnecting enabled, a transport that was opened counts as open even while
        its connection is down, since the next request restores it.
        """
        if self.reconnect_strategy is not None and self._opened:
            return True
        return self.base_transport.is_open()

    def _needs_reconnect(self) -> bool:
        if self.reconnect_strategy is None or not self._opened:
            return False
        return self._connection_broken or not self.base_transport.is_open()

    async def _reconnect(self) -> None:
        assert self.reconnect_strategy is not None
        if self.base_transport.is_open():
            logger.debug("Closing the broken connection before reconnecting")
            await self.base_transport.close()

        try:
            async for attempt in self.reconnect_strategy:
                with attempt:
                    logger.info("Reconnecting, attempt %d", attempt.retry_state.attempt_number)
                    await self._connect()
        except RetryError as e:
            msg = f"Failed to reconnect after {e.last_attempt.attempt_number} attempts"
            raise ModbusConnectionError(msg) from e

        logger.info("Connection restored")
        if self.on_reconnected is not None:
            result = self.on_reconnected()
            if asyncio.iscoroutine(result):
                await result

    async def _pace(self) -> None:
        if self.wait_between_requests <= 0 or self._last_request_finished_at is None:
            return
        remaining = self.wait_between_requests - (time.monotonic() - self._last_request_finished_at)
        if remaining > 0:
            logger.debug("Waiting %.2fs before the next request", remaining)
            await asyncio.sleep(remaining)

    async def send_and_receive(self, unit_id: int, pdu: BaseClientPDU[RT]) -> RT:
        """Send PDU and Receive Response, once."""
        async with self._lock:
            if self._needs_reconnect():
                await self._reconnect()
            await self._pace()

            try:
                return await self.base_transport.send_and_receive(unit_id, pdu)
            except ModbusConnectionError:
                if self.reconnect_strategy is not None:
                    logger.warning("Connection error, the next request will use a new connection")
                    self._connection_broken = True
                raise
            finally:
                self._last_request_finished_at = time.monotonic()
