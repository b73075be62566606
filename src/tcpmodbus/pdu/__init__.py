"""Modbus Protocol Data Unit (PDU)."""

from .base import BaseClientPDU, ModbusUpdate
from .coils import ReadCoilsPDU, WriteMultipleCoilsPDU, WriteSingleCoilPDU
from .discrete_inputs import ReadDiscreteInputsPDU
from .guard import RequestContext, check_address_range
from .holding_registers import (
    MaskWriteRegisterPDU,
    ReadHoldingRegistersPDU,
    ReadInputRegistersPDU,
    WriteMultipleRegistersPDU,
    WriteSingleRegisterPDU,
)

__all__ = [
    "BaseClientPDU",
    "MaskWriteRegisterPDU",
    "ModbusUpdate",
    "ReadCoilsPDU",
    "ReadDiscreteInputsPDU",
    "ReadHoldingRegistersPDU",
    "ReadInputRegistersPDU",
    "RequestContext",
    "WriteMultipleCoilsPDU",
    "WriteMultipleRegistersPDU",
    "WriteSingleCoilPDU",
    "WriteSingleRegisterPDU",
    "check_address_range",
]
