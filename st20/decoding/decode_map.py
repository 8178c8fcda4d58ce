from __future__ import annotations

from typing import Callable, Dict

from ..constants import WORD_BITS
from .bind import (
    DecodedInstr,
    FunctionCode,
    direct_instr,
    extended_instr,
    invalid_instr,
    relative_instr,
)
from .reader import ByteSource
from .secondary import extended_id, instruction_name

_SIGN = 1 << (WORD_BITS - 1)
_MASK = (1 << WORD_BITS) - 1


def wrap32(value: int) -> int:
    """Truncate ``value`` to a signed 32-bit integer (two's complement)."""
    value &= _MASK
    return value - (1 << WORD_BITS) if value & _SIGN else value


def split_byte(byte: int) -> tuple[FunctionCode, int]:
    return FunctionCode((byte >> 4) & 0xF), byte & 0xF


def _fold_pfix(total: int, imm: int) -> int:
    return wrap32((total + imm) << 4)


def _fold_nfix(total: int, imm: int) -> int:
    return wrap32((total + ~imm) << 4)


# Prefix codes extend the accumulator and never end an instruction.
PREFIX_FOLDS: Dict[FunctionCode, Callable[[int, int], int]] = {
    FunctionCode.PFIX: _fold_pfix,
    FunctionCode.NFIX: _fold_nfix,
}


def fold_prefix(total: int, code: FunctionCode, imm: int) -> int:
    return PREFIX_FOLDS[code](total, imm)


def fold_final(total: int, imm: int) -> int:
    return wrap32(total + imm)


DecoderFunc = Callable[[FunctionCode, int, int, int], DecodedInstr]


def _dec_direct(code: FunctionCode, address: int, length: int, total: int) -> DecodedInstr:
    return direct_instr(code, address, length, total)


def _dec_relative(code: FunctionCode, address: int, length: int, total: int) -> DecodedInstr:
    return relative_instr(code, address, length, total)


def _dec_operate(code: FunctionCode, address: int, length: int, total: int) -> DecodedInstr:
    name = instruction_name(total)
    if name is None:
        return invalid_instr(address, length, total)
    return extended_instr(address, length, total, name, extended_id(total))


DECODERS: Dict[FunctionCode, DecoderFunc] = {
    FunctionCode.J: _dec_relative,
    FunctionCode.LDLP: _dec_direct,
    FunctionCode.LDNL: _dec_direct,
    FunctionCode.LDC: _dec_direct,
    FunctionCode.LDNLP: _dec_direct,
    FunctionCode.LDL: _dec_direct,
    FunctionCode.ADC: _dec_direct,
    FunctionCode.CALL: _dec_relative,
    FunctionCode.CJ: _dec_relative,
    FunctionCode.AJW: _dec_direct,
    FunctionCode.EQC: _dec_direct,
    FunctionCode.STL: _dec_direct,
    FunctionCode.STNL: _dec_direct,
    FunctionCode.OPR: _dec_operate,
}

assert not set(DECODERS) & set(PREFIX_FOLDS)
assert set(DECODERS) | set(PREFIX_FOLDS) == set(FunctionCode)


def decode_instruction(source: ByteSource, address: int, delta: int = 0) -> DecodedInstr:
    """Decode the instruction starting at ``address``.

    Bytes are read from ``source`` at ``address + delta + n``; ``delta`` maps
    program addresses onto the host image.  Prefix bytes are consumed until a
    terminating function code is seen, so the result always spans at least
    one byte.  An ``opr`` total with no secondary opcode yields a record with
    ``valid`` set to False.
    """
    total = 0
    size = 0
    while True:
        code, imm = split_byte(source.read_byte(address + delta + size))
        size += 1

        if code in PREFIX_FOLDS:
            total = fold_prefix(total, code, imm)
            continue

        total = fold_final(total, imm)
        try:
            decoder = DECODERS[code]
        except KeyError as exc:
            raise AssertionError(f"No decoder for function code {code!r}") from exc
        return decoder(code, address, size, total)
