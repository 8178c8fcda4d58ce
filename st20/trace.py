"""Debug trace of lifted instructions.

With ``ST20_DEBUG_DECODER`` set, the decoder passes every lifted instruction
to :func:`log_trace`, which writes one line per instruction::

    0x1000: LDC 0x7ff
    0x1002: J 8
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .constants import TRACE_DECIMAL_LIMIT
from .decoding.bind import DecodedInstr, Imm, Operand, Target, hex32
from .rtl.ast import RTL

logger = logging.getLogger(__name__)

TraceObserver = Callable[[DecodedInstr, RTL], None]


def format_value(value: int) -> str:
    if -TRACE_DECIMAL_LIMIT <= value <= TRACE_DECIMAL_LIMIT:
        return str(value)
    return hex32(value)


def format_operand(operand: Operand) -> str:
    if isinstance(operand, Imm):
        return format_value(operand.value)
    if isinstance(operand, Target):
        return format_value(operand.addr)
    raise TypeError(f"Unsupported operand {operand!r}")


def format_trace_line(instr: DecodedInstr) -> str:
    parts = [f"{instr.address:#x}:", instr.variant]
    parts.extend(format_operand(operand) for operand in instr.operands)
    return " ".join(parts)


def log_trace(instr: DecodedInstr, rtl: Optional[RTL] = None) -> None:
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("%s", format_trace_line(instr))


__all__ = [
    "TraceObserver",
    "format_operand",
    "format_trace_line",
    "format_value",
    "log_trace",
]
