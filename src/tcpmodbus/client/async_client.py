"""tcpmodbus Asynchronous Client Implementation.

Provides user-friendly asynchronous Modbus TCP client API.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from types import TracebackType
from typing import Any, Self

from tcpmodbus.const import DEFAULT_UNIT_ID
from tcpmodbus.exceptions import EchoReadError, InvalidRequestError
from tcpmodbus.pdu import (
    BaseClientPDU,
    MaskWriteRegisterPDU,
    ModbusUpdate,
    ReadCoilsPDU,
    ReadDiscreteInputsPDU,
    ReadHoldingRegistersPDU,
    ReadInputRegistersPDU,
    WriteMultipleCoilsPDU,
    WriteMultipleRegistersPDU,
    WriteSingleCoilPDU,
    WriteSingleRegisterPDU,
)
from tcpmodbus.transport.async_base import AsyncBaseTransport

logger = logging.getLogger(__name__)

ConnectedCallback = Callable[[], Awaitable[None] | None]
UpdateCallback = Callable[[ModbusUpdate], Awaitable[None] | None]
ErrorCallback = Callable[[str], Awaitable[None] | None]


async def _notify(callback: Callable[..., Awaitable[None] | None] | None, *args: Any) -> None:
    if callback is None:
        return
    result = callback(*args)
    if asyncio.iscoroutine(result):
        await result


class AsyncModbusClient:
    """Asynchronous Modbus TCP Client.

    Provides an user-friendly asynchronous Modbus interface to a single Modbus server.
    Every request returns a `ModbusUpdate` describing the data it read or wrote.

    Errors are raised to the caller. Optionally, the client also reports its
    activity through callbacks: `on_connected` after connecting, `on_update` for
    every successful request and `on_error` with a readable message for every
    failure. Requests are processed one at a time, so callbacks fire in the order
    the requests were issued. A write and its read-back count as one request, and
    callbacks run before the next request starts, so they must not await requests
    on the same client.

    Example:
        >>> import asyncio
        >>> from tcpmodbus import AsyncModbusClient, AsyncTcpTransport
        >>> async def main():
        ...     transport = AsyncTcpTransport('localhost', 502)
        ...     async with AsyncModbusClient(transport) as client:
        ...         update = await client.read_holding_registers(0, 1)
        ...         print("Contents of register 0:", update.registers)
        ...
        >>> asyncio.run(main())

    """

    def __init__(  # noqa: PLR0913
        self,
        transport: AsyncBaseTransport,
        *,
        unit_id: int = DEFAULT_UNIT_ID,
        echo: bool = False,
        on_connected: ConnectedCallback | None = None,
        on_update: UpdateCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        """Initialize Async Modbus Client.

        Args:
            transport: Async transport layer instance (AsyncTcpTransport, etc.)
            unit_id: Unit ID put in the MBAP header of each request (default: 255)
            echo: Read the written values back after writing multiple coils, multiple
                  registers or masking a register (default: False)
            on_connected: Called after the connection has been established
            on_update: Called with the result of every successful request
            on_error: Called with a readable message when something goes wrong

        """
        self.transport = transport

        if not (0 <= unit_id <= 255):
            msg = "Unit ID must be in range 0-255"
            raise ValueError(msg)

        self.unit_id = unit_id
        self.echo = echo
        self.on_connected = on_connected
        self.on_update = on_update
        self.on_error = on_error
        self._execute_lock = asyncio.Lock()

    async def connect(self) -> None:
        """Connect to the server."""
        try:
            await self.transport.open()
        except Exception as e:
            await self._report_error(e)
            raise
        await _notify(self.on_connected)

    @property
    def connected(self) -> bool:
        """Report if the client is connected to the server."""
        return self.transport.is_open()

    async def disconnect(self) -> None:
        """Close the server connection."""
        await self.transport.close()

    async def execute(self, pdu: BaseClientPDU[ModbusUpdate]) -> ModbusUpdate:
        """Execute PDU Request.

        When echo is enabled and the request has a read-back request, the read-back is
        executed after the write, and its result is returned instead of the acknowledgement.

        Args:
            pdu: Modbus PDU instance

        Returns:
            The decoded response

        Raises:
            ModbusConnectionError: If the transport is not connected or the connection is lost
            TimeoutError: If the server does not answer in time
            InvalidResponseError: If response is invalid or does not match request
            ModbusResponseError: If the server answered with an exception response
            EchoReadError: If the write succeeded, but reading back the values failed

        """
        # a write and its read-back form one exchange; no other request may run in between
        async with self._execute_lock:
            try:
                result = await self.transport.send_and_receive(self.unit_id, pdu)
            except Exception as e:
                await self._report_error(e)
                raise

            echo_pdu = pdu.echo_request() if self.echo else None
            if echo_pdu is not None:
                logger.debug("Reading back values written by %r", pdu)
                try:
                    result = await self.transport.send_and_receive(self.unit_id, echo_pdu)
                except Exception as e:
                    msg = f"Write to address {result.start_address} succeeded, but reading it back failed: {e}"
                    await _notify(self.on_error, msg)
                    raise EchoReadError(msg, write_result=result) from e

            await _notify(self.on_update, result)
            return result

    async def _build_and_execute(
        self,
        pdu_class: Callable[..., BaseClientPDU[ModbusUpdate]],
        *args: Any,
    ) -> ModbusUpdate:
        # address and value checks happen while building the PDU, before any I/O
        try:
            pdu = pdu_class(*args)
        except (InvalidRequestError, ValueError) as e:
            await self._report_error(e)
            raise
        return await self.execute(pdu)

    async def _report_error(self, error: Exception) -> None:
        await _notify(self.on_error, str(error) or type(error).__name__)

    async def read_discrete_inputs(
        self,
        start_address: int,
        quantity: int,
    ) -> ModbusUpdate:
        """Read Discrete Inputs (Function Code 0x02).

        Args:
            start_address:  Starting address
            quantity:  Quantity to read (1-2000)

        Returns:
            Update with the input states in `bits`, True for ON, False for OFF

        Example:
            >>> (await client.read_discrete_inputs(0, 8)).bits
            [True, False, True, False, False, False, True, False]

        """
        return await self._build_and_execute(ReadDiscreteInputsPDU, start_address, quantity)

    async def read_coils(
        self,
        start_address: int,
        quantity: int,
    ) -> ModbusUpdate:
        """Read Coil Status (Function Code 0x01).

        Args:
            start_address:  Starting address
            quantity:  Quantity to read (1-2000)

        Returns:
            Update with the coil states in `bits`, True for ON, False for OFF

        Example:
            >>> (await client.read_coils(0, 8)).bits
            [True, False, True, False, False, False, True, False]

        """
        return await self._build_and_execute(ReadCoilsPDU, start_address, quantity)

    async def write_single_coil(
        self,
        address: int,
        value: bool,  # noqa: FBT001
    ) -> ModbusUpdate:
        """Write Single Coil (Function Code 0x05).

        Args:
            address: Coil address
            value: Coil value (True for ON, False for OFF)

        Returns:
            Update with the echoed address and coil state

        Example:
            >>> await client.write_single_coil(0, True)  # Write ON to coil 0

        """
        return await self._build_and_execute(WriteSingleCoilPDU, address, value)

    async def write_multiple_coils(
        self,
        start_address: int,
        values: list[bool],
    ) -> ModbusUpdate:
        """Write Multiple Coils (Function Code 0x0F).

        Args:
            start_address: Starting address
            values: List of coil values (1-1968), True for ON, False for OFF

        Returns:
            An acknowledgement, or the coils read back when echo is enabled

        Example:
            >>> await client.write_multiple_coils(0, [True, False, True, False])

        """
        return await self._build_and_execute(WriteMultipleCoilsPDU, start_address, values)

    async def read_input_registers(
        self,
        start_address: int,
        quantity: int,
    ) -> ModbusUpdate:
        """Read Input Registers (Function Code 0x04).

        Args:
            start_address: Starting address
            quantity: Quantity to read (1-125)

        Returns:
            Update with the register values in `registers`, each a 16-bit unsigned integer

        Example:
            >>> (await client.read_input_registers(0, 4)).registers
            [1234, 5678, 9012, 3456]

        """
        return await self._build_and_execute(ReadInputRegistersPDU, start_address, quantity)

    async def read_holding_registers(
        self,
        start_address: int,
        quantity: int,
    ) -> ModbusUpdate:
        """Read Holding Registers (Function Code 0x03).

        Args:
            start_address: Starting address
            quantity: Quantity to read (1-125)

        Returns:
            Update with the register values in `registers`, each a 16-bit unsigned integer

        Example:
            >>> (await client.read_holding_registers(0, 4)).registers
            [1234, 5678, 9012, 3456]

        """
        return await self._build_and_execute(ReadHoldingRegistersPDU, start_address, quantity)

    async def write_single_register(
        self,
        address: int,
        value: int,
    ) -> ModbusUpdate:
        """Write Single Register (Function Code 0x06).

        Args:
            address: Register address
            value: Register value (0-65535)

        Returns:
            Update with the echoed address and value

        Example:
            >>> await client.write_single_register(0, 1234)  # Write 1234 to register 0

        """
        return await self._build_and_execute(WriteSingleRegisterPDU, address, value)

    async def write_multiple_registers(
        self,
        start_address: int,
        values: list[int],
    ) -> ModbusUpdate:
        """Write Multiple Registers (Function Code 0x10).

        Args:
            start_address: Starting address
            values: List of register values (1-123), each value 0-65535

        Returns:
            An acknowledgement, or the registers read back when echo is enabled

        Example:
            >>> await client.write_multiple_registers(0, [1234, 5678, 9012])

        """
        return await self._build_and_execute(WriteMultipleRegistersPDU, start_address, values)

    async def mask_write_register(
        self,
        address: int,
        and_mask: int,
        or_mask: int,
    ) -> ModbusUpdate:
        """Mask Write Register (Function Code 0x16).

        Args:
            address: Register address
            and_mask: AND mask (16-bit)
            or_mask: OR mask (16-bit)

        Returns:
            An acknowledgement, or the register read back when echo is enabled

        Example:
            >>> await client.mask_write_register(0, 0xFF00, 0x00FF)

        """
        return await self._build_and_execute(MaskWriteRegisterPDU, address, and_mask, or_mask)

    async def __aenter__(self) -> Self:
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit."""
        await self.disconnect()
