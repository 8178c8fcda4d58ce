from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple, Union

from ..constants import ADDR_MASK


class FunctionCode(IntEnum):
    """The sixteen primary function codes held in the top nibble of a byte."""

    J = 0
    LDLP = 1
    PFIX = 2
    LDNL = 3
    LDC = 4
    LDNLP = 5
    NFIX = 6
    LDL = 7
    ADC = 8
    CALL = 9
    CJ = 10
    AJW = 11
    EQC = 12
    STL = 13
    STNL = 14
    OPR = 15

    @property
    def mnemonic(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class Imm:
    """Signed integer operand folded from the prefix chain."""

    value: int


@dataclass(frozen=True, slots=True)
class Target:
    """Absolute code address operand of a relative jump or call."""

    addr: int

    def __post_init__(self) -> None:
        if not 0 <= self.addr <= ADDR_MASK:
            raise ValueError(f"Target out of range: {self.addr:#x}")


Operand = Union[Imm, Target]


@dataclass(frozen=True, slots=True)
class DecodedInstr:
    address: int
    length: int
    ident: int
    mnemonic: str
    operands: Tuple[Operand, ...] = ()
    operand_text: str = ""
    valid: bool = True
    variant: str = ""
    function_code: Optional[FunctionCode] = None
    total: int = 0

    @property
    def next_address(self) -> int:
        return (self.address + self.length) & ADDR_MASK

    def __str__(self) -> str:
        if not self.valid:
            return f"{self.address:#x}: <invalid>"
        if self.operand_text:
            return f"{self.address:#x}: {self.mnemonic} {self.operand_text}"
        return f"{self.address:#x}: {self.mnemonic}"


def hex32(value: int) -> str:
    """Render ``value`` as its 32-bit two's-complement pattern."""
    return f"{value & ADDR_MASK:#x}"


def direct_instr(
    code: FunctionCode, address: int, length: int, total: int
) -> DecodedInstr:
    return DecodedInstr(
        address=address,
        length=length,
        ident=int(code),
        mnemonic=code.mnemonic,
        operands=(Imm(total),),
        operand_text=hex32(total),
        variant=code.mnemonic.upper(),
        function_code=code,
        total=total,
    )


def relative_instr(
    code: FunctionCode, address: int, length: int, total: int
) -> DecodedInstr:
    dest = (address + length + total) & ADDR_MASK
    return DecodedInstr(
        address=address,
        length=length,
        ident=int(code),
        mnemonic=code.mnemonic,
        operands=(Target(dest),),
        operand_text=hex32(dest),
        variant=code.mnemonic.upper(),
        function_code=code,
        total=total,
    )


def extended_instr(
    address: int, length: int, total: int, name: str, ident: int
) -> DecodedInstr:
    return DecodedInstr(
        address=address,
        length=length,
        ident=ident,
        mnemonic=name,
        variant=name.upper(),
        function_code=FunctionCode.OPR,
        total=total,
    )


def invalid_instr(address: int, length: int, total: int) -> DecodedInstr:
    # No mnemonic, operands or variant: nothing here is usable for lifting.
    return DecodedInstr(
        address=address,
        length=length,
        ident=int(FunctionCode.OPR),
        mnemonic="",
        valid=False,
        function_code=FunctionCode.OPR,
        total=total,
    )
