"""Modbus clients."""

from .async_client import AsyncModbusClient

__all__ = ["AsyncModbusClient"]
