from __future__ import annotations

from typing import List

from binja_test_mocks.tokens import TAddr, TInstr, TInt, Token, TSep, TText

from .bind import DecodedInstr, Imm, Target, hex32

_MNEMONIC_COLUMN = 8


def render(instr: DecodedInstr) -> List[Token]:
    if not instr.valid:
        return [TText("??")]
    tokens: List[Token] = [TInstr(instr.mnemonic)]
    if not instr.operands:
        return tokens
    tokens.append(TSep(" " * max(1, _MNEMONIC_COLUMN - len(instr.mnemonic))))
    for index, operand in enumerate(instr.operands):
        if index > 0:
            tokens.append(TSep(", "))
        if isinstance(operand, Target):
            tokens.append(TAddr(operand.addr))
        elif isinstance(operand, Imm):
            tokens.append(TInt(hex32(operand.value)))
        else:
            raise TypeError(f"Unsupported operand {operand!r}")
    return tokens
