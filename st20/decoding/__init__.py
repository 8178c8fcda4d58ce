"""
Prefix-folding decoder for ST20 instruction bytes.

Every byte carries a 4-bit function code and a 4-bit immediate; ``pfix`` and
``nfix`` bytes fold their immediate into an accumulator and the first other
byte ends the instruction.
"""

from .bind import (  # noqa: F401
    DecodedInstr,
    FunctionCode,
    Imm,
    Operand,
    Target,
)
from .decode_map import decode_instruction, fold_final, fold_prefix, wrap32  # noqa: F401
from .reader import ByteReader, ByteSource, MemoryImage  # noqa: F401
from .secondary import (  # noqa: F401
    NEGATIVE_OPCODES,
    POSITIVE_OPCODES,
    instruction_name,
)

__all__ = [
    "ByteReader",
    "ByteSource",
    "DecodedInstr",
    "FunctionCode",
    "Imm",
    "MemoryImage",
    "NEGATIVE_OPCODES",
    "Operand",
    "POSITIVE_OPCODES",
    "Target",
    "decode_instruction",
    "fold_final",
    "fold_prefix",
    "instruction_name",
    "wrap32",
]
