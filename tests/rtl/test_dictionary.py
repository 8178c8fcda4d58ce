import logging

import pytest

from st20.decoding.bind import Imm, Target
from st20.decoding.secondary import NEGATIVE_OPCODES, POSITIVE_OPCODES
from st20.rtl import ast
from st20.rtl.dictionary import (
    DEFAULT_SSL_PATH,
    LiftError,
    SemanticDictionary,
    TemplateNotFound,
)
from st20.rtl.parser import SSLError

PRIMARY_KEYS = [
    "J", "LDLP", "LDNL", "LDC", "LDNLP", "LDL", "ADC",
    "CALL", "CJ", "AJW", "EQC", "STL", "STNL",
]


def test_bundled_dictionary_covers_every_mnemonic(dictionary) -> None:
    names = set(POSITIVE_OPCODES.values()) | set(NEGATIVE_OPCODES.values())
    expected = {name.replace(".", "").upper() for name in names} | set(PRIMARY_KEYS)
    assert expected <= set(dictionary)
    assert set(dictionary) <= expected


def test_register_file(dictionary) -> None:
    for name in ("A", "B", "C", "W"):
        assert dictionary.registers[name] == 32
    assert dictionary.registers["ERR"] == 1


def test_intrinsic_names(dictionary) -> None:
    names = dictionary.intrinsic_names()
    assert "startp" in names
    assert "ldtimer" in names
    assert list(names) == sorted(names)


def test_instantiate_binds_operands(dictionary) -> None:
    rtl = dictionary.instantiate("LDC", 0x40, (Imm(7),))
    assert rtl.address == 0x40
    assert rtl.name == "LDC"
    assert rtl.statements[-1] == ast.Assign(ast.Reg("A"), ast.Const(7))

    jump = dictionary.instantiate("J", 0x40, (Target(0x80),))
    assert jump.statements == (ast.Goto(ast.Addr(0x80)),)


def test_missing_template(dictionary) -> None:
    with pytest.raises(TemplateNotFound) as excinfo:
        dictionary.instantiate("NOSUCH", 0, ())
    assert excinfo.value.key == "NOSUCH"
    assert isinstance(excinfo.value, LiftError)


def test_arity_mismatch(dictionary) -> None:
    with pytest.raises(LiftError, match="expects 1 operand"):
        dictionary.instantiate("LDC", 0, ())


def test_pc_is_bound_to_instruction_address() -> None:
    d = SemanticDictionary.from_text("register %A : 32; HERE { %A := %pc; }")
    rtl = d.instantiate("HERE", 0x1234, ())
    assert rtl.statements == (ast.Assign(ast.Reg("A"), ast.Addr(0x1234)),)


def test_validation_errors_abort_load() -> None:
    with pytest.raises(SSLError, match="undeclared register %Q"):
        SemanticDictionary.from_text("register %A : 32; T { %Q := 1; }")


def test_missing_file(tmp_path, caplog) -> None:
    path = tmp_path / "missing.ssl"
    with caplog.at_level(logging.ERROR, logger="st20.rtl.dictionary"):
        with pytest.raises(SSLError, match="Cannot read"):
            SemanticDictionary.from_file(path)
    assert "missing.ssl" in caplog.text


def test_broken_file(tmp_path) -> None:
    path = tmp_path / "broken.ssl"
    path.write_text("register %A : 32;\nLDC(n) { %A := n }\n")
    with pytest.raises(SSLError, match="Syntax error"):
        SemanticDictionary.from_file(path)


def test_dictionary_is_read_only(dictionary) -> None:
    with pytest.raises(TypeError):
        dictionary.registers["A"] = 8  # type: ignore[index]


def test_default_path_ships_with_package() -> None:
    assert DEFAULT_SSL_PATH.is_file()
