from __future__ import annotations

import os

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from st20.decoding import decode_instruction
from st20.decoding.bind import FunctionCode, Imm, Target
from st20.decoding.reader import ByteReader
from st20.decoding.secondary import instruction_name, negative_index, negative_total

from .strategies import (
    DIRECT_CODES,
    addresses,
    encode_operand,
    instructions,
    make_byte,
    nibbles,
)

FAST_MAX_EXAMPLES = int(os.getenv("ST20_PROP_EXAMPLES", "300"))

prop_settings = settings(
    max_examples=FAST_MAX_EXAMPLES,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)


def _decode(data, address: int = 0):
    return decode_instruction(ByteReader(address, bytes(data)), address)


@given(data=instructions(), address=addresses)
@prop_settings
def test_prop_decode_is_deterministic(data, address) -> None:
    assert _decode(data, address) == _decode(data, address)


@given(data=instructions(), address=addresses)
@prop_settings
def test_prop_length_counts_prefixes_and_terminator(data, address) -> None:
    # The reader holds exactly the instruction, so any overread would raise.
    instr = _decode(data, address)
    assert instr.length == len(data)
    assert instr.address == address


@given(data=instructions())
@prop_settings
def test_prop_total_is_signed_word(data) -> None:
    instr = _decode(data)
    assert -(1 << 31) <= instr.total < (1 << 31)
    for operand in instr.operands:
        if isinstance(operand, Target):
            assert 0 <= operand.addr <= 0xFFFFFFFF


@given(n=nibbles, m=nibbles, code=st.sampled_from(DIRECT_CODES))
@prop_settings
def test_prop_pfix_law(n, m, code) -> None:
    instr = _decode([make_byte(FunctionCode.PFIX, n), make_byte(code, m)])
    assert instr.total == (n << 4) + m
    assert instr.operands == (Imm((n << 4) + m),)


@given(n=nibbles, m=nibbles, code=st.sampled_from(DIRECT_CODES))
@prop_settings
def test_prop_nfix_law(n, m, code) -> None:
    instr = _decode([make_byte(FunctionCode.NFIX, n), make_byte(code, m)])
    assert instr.total == ((~n) << 4) + m
    assert instr.total < 0


@given(value=st.integers(min_value=-256, max_value=(1 << 31) - 1))
@prop_settings
def test_prop_shortest_encoding_decodes_to_value(value) -> None:
    data = encode_operand(FunctionCode.LDC, value)
    instr = _decode(data)
    assert instr.operands == (Imm(value),)
    assert instr.length == len(data)


@given(data=instructions(codes=[FunctionCode.OPR]))
@prop_settings
def test_prop_operate_validity_matches_tables(data) -> None:
    instr = _decode(data)
    name = instruction_name(instr.total)
    assert instr.valid == (name is not None)
    if instr.valid:
        assert instr.mnemonic == name
        assert instr.variant == name.upper()
    else:
        assert instr.mnemonic == ""
        assert instr.variant == ""
    assert instr.operands == ()


@given(index=st.integers(min_value=0, max_value=0xFFFF))
@prop_settings
def test_prop_negative_index_inverts(index) -> None:
    total = negative_total(index)
    assert total < 0
    assert negative_index(total) == index
