import pytest

from st20.config import DecoderConfig
from st20.decoder import (
    InvalidInstruction,
    LiftError,
    SSLError,
    ST20Decoder,
    TemplateNotFound,
    disassemble,
    variant_key,
)
from st20.decoding.bind import Imm, Target
from st20.decoding.reader import ByteReader, MemoryImage
from st20.decoding.secondary import all_secondary_opcodes
from st20.rtl import ast
from st20.rtl.dictionary import SemanticDictionary
from st20.rtl.validate import iter_exprs, iter_stmt_exprs, iter_stmts


def _values(rtl):
    found = set()
    for stmt in iter_stmts(rtl.statements):
        for expr in iter_stmt_exprs(stmt):
            found.update(iter_exprs(expr))
    return found


def test_decode_and_lift_ldc(make_decoder) -> None:
    decoder = make_decoder([0x2F, 0x45], base=0x100)
    instr = decoder.decode(0x100)
    rtl = decoder.lift(instr)
    assert rtl.address == 0x100
    assert rtl.name == "LDC"
    assert ast.Const(245) in _values(rtl)


def test_decode_is_deterministic(make_decoder) -> None:
    decoder = make_decoder([0x63, 0xF0, 0x2F, 0x45])
    assert decoder.decode(0) == decoder.decode(0)
    assert decoder.decode(2) == decoder.decode(2)


def test_decode_with_explicit_source(dictionary) -> None:
    decoder = ST20Decoder(config=DecoderConfig(), dictionary=dictionary)
    instr = decoder.decode(0x10, source=ByteReader(0x10, b"\xF5"))
    assert instr.mnemonic == "add"
    with pytest.raises(ValueError, match="No byte source"):
        decoder.decode(0)


def test_invalid_instruction_is_never_lifted(make_decoder) -> None:
    decoder = make_decoder([0x6A, 0xF0])
    instr = decoder.decode(0)
    assert not instr.valid
    with pytest.raises(InvalidInstruction):
        decoder.lift(instr)


def test_missing_template_is_lift_error() -> None:
    partial = SemanticDictionary.from_text("register %A : 32; ADD { %A := %A; }")
    decoder = ST20Decoder(
        MemoryImage(0, b"\xF4"), config=DecoderConfig(), dictionary=partial
    )
    instr = decoder.decode(0)
    assert instr.valid
    assert instr.mnemonic == "diff"
    with pytest.raises(TemplateNotFound) as excinfo:
        decoder.lift(instr)
    assert excinfo.value.key == "DIFF"
    assert isinstance(excinfo.value, LiftError)


def test_bad_dictionary_aborts_construction(tmp_path) -> None:
    path = tmp_path / "st20.ssl"
    path.write_text("register %A : 32;\nLDC(n) { %B := n; }\n")
    with pytest.raises(SSLError):
        ST20Decoder(config=DecoderConfig(ssl_path=path))


def test_dictionary_loaded_from_configured_path(tmp_path) -> None:
    path = tmp_path / "tiny.ssl"
    path.write_text("register %A : 32;\nLDC(n) { %A := n; }\n")
    decoder = ST20Decoder(MemoryImage(0, b"\x43"), config=DecoderConfig(ssl_path=path))
    assert decoder.dictionary.keys() == ("LDC",)
    rtl = decoder.lift(decoder.decode(0))
    assert rtl.statements == (ast.Assign(ast.Reg("A"), ast.Const(3)),)


def test_variant_key_normalisation() -> None:
    assert variant_key("ldc") == "LDC"
    assert variant_key("fp.add") == "FPADD"
    assert variant_key("MOVE2DALL") == "MOVE2DALL"
    assert variant_key("ld_x-y") == "LD_XY"


def test_observer_sees_every_lift(make_decoder, dictionary) -> None:
    seen = []
    decoder = ST20Decoder(
        MemoryImage(0, b"\x01\xF5"),
        config=DecoderConfig(),
        dictionary=dictionary,
        observer=lambda instr, rtl: seen.append((instr.variant, rtl.name)),
    )
    decoder.lift(decoder.decode(0))
    decoder.lift(decoder.decode(1))
    assert seen == [("J", "J"), ("ADD", "ADD")]


def test_constant_folding_is_optional(make_decoder) -> None:
    plain = make_decoder([0x73])
    folded = make_decoder([0x73], fold_constants=True)
    plain_rtl = plain.lift(plain.decode(0))
    folded_rtl = folded.lift(folded.decode(0))
    assert ast.BinOp("shl", ast.Const(3), ast.Const(2)) in _values(plain_rtl)
    assert ast.Const(12) in _values(folded_rtl)


def test_instruction_name(make_decoder) -> None:
    decoder = make_decoder([])
    assert decoder.instruction_name(5) == "add"
    assert decoder.instruction_name(-16) == "swapqueue"
    assert decoder.instruction_name(0x11) is None


def test_disassemble_steps_over_invalid() -> None:
    image = MemoryImage(0x20, bytes([0x2F, 0x45, 0x6A, 0xF0, 0xF5]))
    instrs = list(disassemble(image, 0x20, image.end))
    assert [i.address for i in instrs] == [0x20, 0x22, 0x24]
    assert [i.valid for i in instrs] == [True, False, True]
    assert instrs[-1].mnemonic == "add"


def _encode(code: int, value: int) -> list:
    if 0 <= value < 16:
        return [(code << 4) | value]
    if value >= 16:
        return _encode(2, value >> 4) + [(code << 4) | (value & 0xF)]
    return _encode(6, (~value) >> 4) + [(code << 4) | (value & 0xF)]


def test_every_template_lifts(dictionary) -> None:
    primaries = {
        "J": 0x0, "LDLP": 0x1, "LDNL": 0x3, "LDC": 0x4, "LDNLP": 0x5, "LDL": 0x7,
        "ADC": 0x8, "CALL": 0x9, "CJ": 0xA, "AJW": 0xB, "EQC": 0xC, "STL": 0xD, "STNL": 0xE,
    }
    encodings = {key: _encode(code, 0x123) for key, code in primaries.items()}
    for total, name in all_secondary_opcodes():
        encodings.setdefault(variant_key(name), _encode(0xF, total))

    assert set(encodings) == set(dictionary)
    for key, data in encodings.items():
        decoder = ST20Decoder(
            MemoryImage(0x4000, bytes(data)),
            config=DecoderConfig(),
            dictionary=dictionary,
        )
        instr = decoder.decode(0x4000)
        assert instr.variant == key
        assert instr.length == len(data)
        rtl = decoder.lift(instr)
        assert rtl.address == 0x4000
        assert rtl.name == key
        values = _values(rtl)
        for operand in instr.operands:
            if isinstance(operand, Imm):
                assert ast.Const(operand.value) in values
            elif isinstance(operand, Target):
                assert ast.Addr(operand.addr) in values
