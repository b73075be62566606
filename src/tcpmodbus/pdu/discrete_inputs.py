"""Read Discrete Inputs PDU Module."""

from tcpmodbus.const import DataType, FunctionCode

from .coils import ReadCoilsPDU


class ReadDiscreteInputsPDU(ReadCoilsPDU):
    """Read Discrete Inputs PDU."""

    function_code = FunctionCode.READ_DISCRETE_INPUTS
    data_type = DataType.DISCRETE_INPUT
