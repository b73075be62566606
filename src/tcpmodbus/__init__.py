"""tcpmodbus library."""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from .client.async_client import AsyncModbusClient, ConnectedCallback, ErrorCallback, UpdateCallback
from .const import DEFAULT_CONNECT_TIMEOUT, DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT, DEFAULT_UNIT_ID, DataType
from .pdu import ModbusUpdate
from .transport import AsyncTcpTransport
from .transport.async_smart import AsyncSmartTransport

if TYPE_CHECKING:
    from tenacity import AsyncRetrying

try:
    from ._version import __version__
except ImportError:  # pragma: no cover
    __version__ = "0.0.0"


def create_async_tcp_client(  # noqa: PLR0913
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    *,
    unit_id: int = DEFAULT_UNIT_ID,
    timeout: float = DEFAULT_TIMEOUT,
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    echo: bool = False,
    on_connected: ConnectedCallback | None = None,
    on_update: UpdateCallback | None = None,
    on_error: ErrorCallback | None = None,
    wait_between_requests: float = 0.0,
    wait_after_connect: float = 0.0,
    auto_reconnect: "bool | AsyncRetrying" = False,
    on_reconnected: Callable[[], Awaitable[None] | None] | None = None,
    **connection_kwargs: Any,
) -> AsyncModbusClient:
    """Create an asynchronous Modbus TCP client.

    Every request is sent once and every failure is reported to the caller.
    Pacing and reconnecting after a lost connection can be switched on when needed.

    Args:
        host: The IP address or hostname of the Modbus server.
        port: The port number of the Modbus server (default is 502).
        unit_id: Unit ID put in the MBAP header of each request (default: 255).
        timeout: Response timeout in seconds, default 0.5s
        connect_timeout: Timeout for establishing connection, default 10.0s
        echo: Read back the values after writing multiple coils, multiple registers
              or masking a register (default: False).
        on_connected: Callback to be called after the connection has been established.
        on_update: Callback to be called with the result of every successful request.
        on_error: Callback to be called with a readable message for every error.
        wait_between_requests: Wait time between requests in seconds (default: 0.0s)
        wait_after_connect: Wait time after connection establishment in seconds (default: 0.0s)
        auto_reconnect: Whether to reconnect before the next request once the connection was lost (default: False).
                        Can be a custom AsyncRetrying instance when more control is needed.
        on_reconnected: Callback to be called after a successful reconnection.
        connection_kwargs: Additional connection parameters passed to `loop.create_connection` (e.g., SSL context)

    Returns:
        An instance of AsyncModbusClient configured for TCP transport.

    """
    smart_transport = AsyncSmartTransport(
        AsyncTcpTransport(
            host,
            port,
            timeout=timeout,
            connect_timeout=connect_timeout,
            **connection_kwargs,
        ),
        wait_between_requests=wait_between_requests,
        wait_after_connect=wait_after_connect,
        auto_reconnect=auto_reconnect,
        on_reconnected=on_reconnected,
    )
    return AsyncModbusClient(
        smart_transport,
        unit_id=unit_id,
        echo=echo,
        on_connected=on_connected,
        on_update=on_update,
        on_error=on_error,
    )


__all__ = [
    "AsyncModbusClient",
    "AsyncSmartTransport",
    "AsyncTcpTransport",
    "DataType",
    "ModbusUpdate",
    "create_async_tcp_client",
]
