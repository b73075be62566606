"""Example of an asynchronous Modbus TCP client using tcpmodbus."""

import asyncio
import logging

from tcpmodbus import ModbusUpdate, create_async_tcp_client
from tcpmodbus.exceptions import (
    EchoReadError,
    InvalidRequestError,
    InvalidResponseError,
    ModbusConnectionError,
    ModbusResponseError,
)


def print_update(update: ModbusUpdate) -> None:
    """Print every value the client reads or writes."""
    if update.is_acknowledgement:
        print(f"{update.data_type.name} write at {update.start_address} acknowledged")
    else:
        print(f"{update.data_type.name} at {update.start_address}: {update.bits or update.registers}")


async def example_tcp_client() -> None:
    """Asynchronous Modbus TCP client example."""
    # Replace with your Modbus server's IP and port
    host = "127.0.0.1"
    port = 502

    client = create_async_tcp_client(
        host,
        port,
        timeout=1.0,
        echo=True,  # read back after writing multiple values
        on_connected=lambda: print(f"Connected to {host}:{port}"),
        on_update=print_update,
        on_error=lambda message: print(f"Error: {message}"),
    )

    try:
        await client.connect()

        update = await client.read_holding_registers(start_address=100, quantity=2)
        print("Contents of holding registers 100 and 101:", update.registers)

        await client.write_single_coil(address=5, value=True)
        await client.write_multiple_registers(start_address=10, values=[10, 20, 30])

        # keep bits 0-7, set bit 8, clear the others
        await client.mask_write_register(address=1, and_mask=0x00FF, or_mask=0x0100)

    except InvalidRequestError as e:
        print(f"Request was not sent: {e}")
    except EchoReadError as e:
        print(f"Write acknowledged ({e.write_result}), but reading back failed: {e.__cause__}")
    except ModbusResponseError as e:
        print(f"The server responded with error code {e.error_code:#04x} for function {e.function_code:#04x}")
    except InvalidResponseError as e:
        print(f"Received invalid response: {e}")
    except (ModbusConnectionError, TimeoutError) as e:
        print(f"A connection error occurred: {e}")
    finally:
        await client.disconnect()

    # Alternatively, you can use the client as an async context manager
    # which automatically handles connection and disconnection
    async with create_async_tcp_client(host, port) as client2:
        print("Status of coils 0-7:", (await client2.read_coils(start_address=0, quantity=8)).bits)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    # uncomment to see a hex dump of every frame
    # logging.getLogger("tcpmodbus.raw_traffic").setLevel(logging.DEBUG)
    asyncio.run(example_tcp_client())
