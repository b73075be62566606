"""Example of a long running Modbus TCP client that survives connection loss."""

import asyncio
import logging

from tenacity import AsyncRetrying, stop_after_attempt, wait_fixed

from tcpmodbus import create_async_tcp_client
from tcpmodbus.exceptions import ModbusConnectionError


async def example_polling_client() -> None:
    """Poll a few input registers every second, reconnecting when the device drops the connection."""
    client = create_async_tcp_client(
        "127.0.0.1",
        502,
        wait_after_connect=0.5,
        wait_between_requests=0.05,
        auto_reconnect=AsyncRetrying(stop=stop_after_attempt(5), wait=wait_fixed(1)),
        on_reconnected=lambda: print("Reconnected"),
    )

    async with client:
        for _ in range(10):
            try:
                update = await client.read_input_registers(start_address=0, quantity=4)
                print("Input registers 0-3:", update.registers)
            except (TimeoutError, ModbusConnectionError) as e:
                # a failed poll is not repeated, the next one runs on a fresh connection if needed
                print(f"Poll failed: {e}")
            await asyncio.sleep(1)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(example_polling_client())
