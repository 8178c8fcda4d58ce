from typing import List, Optional, Tuple

from binaryninja import (
    Architecture,
    RegisterInfo,
    IntrinsicInfo,
    InstructionInfo,
    CallingConvention,
)
from binaryninja.enums import BranchType, Endianness
from binaryninja import log_error

from binja_test_mocks.tokens import Token, asm

from .constants import WORD_BYTES
from .decoder import InvalidInstruction, ST20Decoder
from .decoding.bind import DecodedInstr, FunctionCode, Target
from .decoding.reader import ByteReader
from .decoding.render import render
from .rtl.backend_llil import bits_to_bytes, emit_llil

_decoder = ST20Decoder()


def _decode(data: bytes, addr: int) -> Optional[DecodedInstr]:
    decoded = _decoder.decode(addr, source=ByteReader(addr, data))
    return decoded if decoded.valid else None


def analyze(decoded: DecodedInstr, info) -> None:
    """Record length and control flow of ``decoded`` on a Binary Ninja info object."""
    info.length = decoded.length
    target = None
    if decoded.operands and isinstance(decoded.operands[0], Target):
        target = decoded.operands[0].addr

    if decoded.function_code == FunctionCode.J:
        info.add_branch(BranchType.UnconditionalBranch, target)
    elif decoded.function_code == FunctionCode.CJ:
        info.add_branch(BranchType.TrueBranch, target)
        info.add_branch(BranchType.FalseBranch, decoded.next_address)
    elif decoded.function_code == FunctionCode.CALL:
        info.add_branch(BranchType.CallDestination, target)
    elif decoded.mnemonic == "ret":
        info.add_branch(BranchType.FunctionReturn)


def instruction_text(data: bytes, addr: int) -> Optional[Tuple[List[Token], int]]:
    if decoded := _decode(data, addr):
        return render(decoded), decoded.length
    return None


def lift_instruction(data: bytes, addr: int, il) -> Optional[int]:
    if decoded := _decode(data, addr):
        emit_llil(il, _decoder.lift(decoded), _decoder.dictionary.registers)
        return decoded.length
    return None


class ST20(Architecture):
    name = "ST20"
    endianness = Endianness.LittleEndian
    address_size = WORD_BYTES
    default_int_size = WORD_BYTES
    instr_alignment = 1
    max_instr_length = 16

    # Evaluation stack A/B/C, workspace pointer W and the process queue
    # registers, as declared by the semantic dictionary.
    regs = {
        name: RegisterInfo(name, bits_to_bytes(bits))
        for name, bits in _decoder.dictionary.registers.items()
    }
    stack_pointer = "W"

    intrinsics = {
        name: IntrinsicInfo(inputs=[], outputs=[])
        for name in _decoder.dictionary.intrinsic_names()
    }

    def get_instruction_info(self, data, addr):
        try:
            if decoded := _decode(data, addr):
                info = InstructionInfo()
                analyze(decoded, info)
                return info
        except (ValueError, InvalidInstruction):
            # Truncated or invalid encoding, return None to mark as data
            return None
        except Exception as exc:
            log_error(f"ST20.get_instruction_info() failed at {addr:#x}: {exc}")
            raise

    def get_instruction_text(self, data, addr):
        try:
            if result := instruction_text(data, addr):
                tokens, length = result
                return asm(tokens), length
        except (ValueError, InvalidInstruction):
            return None
        except Exception as exc:
            log_error(f"ST20.get_instruction_text() failed at {addr:#x}: {exc}")
            raise

    def get_instruction_low_level_il(self, data, addr, il):
        try:
            return lift_instruction(data, addr, il)
        except (ValueError, InvalidInstruction):
            return None
        except Exception as exc:
            log_error(
                f"ST20.get_instruction_low_level_il() failed at {addr:#x}: {exc}"
            )
            raise


class ST20CallingConvention(CallingConvention):
    int_return_reg = "A"
