from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from lark import Lark, Token, Transformer, Tree
from lark.exceptions import LarkError, UnexpectedInput, VisitError

from . import ast

grammar_path = os.path.join(os.path.dirname(__file__), "ssl.lark")
with open(grammar_path, "r") as f:
    ssl_grammar = f.read()

ssl_parser = Lark(ssl_grammar, parser="lalr", maybe_placeholders=True)


class SSLError(Exception):
    """A semantic template source could not be read, parsed or validated."""


@dataclass(frozen=True)
class SSLDocument:
    registers: Dict[str, int]
    templates: Tuple[ast.Template, ...]


def _present(items: List[Any]) -> List[Any]:
    return [item for item in items if item is not None]


class SSLTransformer(Transformer):
    def __init__(self, registers: Dict[str, int]) -> None:
        super().__init__()
        self.registers = registers

    def start(self, items: List[Any]) -> List[Any]:
        return items

    def register_decl(self, items: List[Token]) -> Tuple[str, str, int]:
        name, size = items
        return ("register", str(name)[1:], int(size))

    def template(self, items: List[Any]) -> ast.Template:
        name, params, body = items
        return ast.Template(name=str(name), params=tuple(params or ()), body=body)

    def params(self, items: List[Optional[Token]]) -> Tuple[str, ...]:
        return tuple(str(item) for item in _present(items))

    def block(self, items: List[ast.Stmt]) -> Tuple[ast.Stmt, ...]:
        return tuple(items)

    # statements

    def assign(self, items: List[Any]) -> ast.Assign:
        dst, value = items
        return ast.Assign(dst, value)

    def goto(self, items: List[Any]) -> ast.Goto:
        return ast.Goto(items[0])

    def call(self, items: List[Any]) -> ast.Call:
        return ast.Call(items[0])

    def ret(self, items: List[Any]) -> ast.Ret:
        return ast.Ret(items[0] if items else None)

    def branch(self, items: List[Any]) -> ast.Branch:
        cond, target = items
        return ast.Branch(cond, target)

    def if_stmt(self, items: List[Any]) -> ast.If:
        cond, then_ops, else_ops = items
        return ast.If(cond, then_ops, else_ops or ())

    def effect(self, items: List[ast.Intrinsic]) -> ast.Effect:
        return ast.Effect(items[0])

    def nop(self, items: List[Any]) -> ast.Nop:
        return ast.Nop()

    # expressions

    def hex_number(self, items: List[Token]) -> ast.Const:
        return ast.Const(int(items[0], 16))

    def dec_number(self, items: List[Token]) -> ast.Const:
        return ast.Const(int(items[0]))

    def param(self, items: List[Token]) -> ast.Param:
        return ast.Param(str(items[0]))

    def pc(self, items: List[Any]) -> ast.Pc:
        return ast.Pc()

    def reg(self, items: List[Token]) -> ast.Reg:
        name = str(items[0])[1:]
        return ast.Reg(name, self.registers.get(name, 32))

    def mem8(self, items: List[Any]) -> ast.Mem:
        return ast.Mem(items[0], 8)

    def mem16(self, items: List[Any]) -> ast.Mem:
        return ast.Mem(items[0], 16)

    def mem32(self, items: List[Any]) -> ast.Mem:
        return ast.Mem(items[0], 32)

    def intrinsic(self, items: List[Any]) -> ast.Intrinsic:
        name, *args = items
        return ast.Intrinsic(str(name), tuple(_present(args)))


def _unary(op: str):
    def build(self: SSLTransformer, items: List[Any]) -> ast.UnOp:
        return ast.UnOp(op, items[0])  # type: ignore[arg-type]

    return build


def _binary(op: str):
    def build(self: SSLTransformer, items: List[Any]) -> ast.BinOp:
        a, b = items
        return ast.BinOp(op, a, b)  # type: ignore[arg-type]

    return build


for _name, _op in (("neg", "neg"), ("not_", "not")):
    setattr(SSLTransformer, _name, _unary(_op))
for _op in ("sext8", "sext16", "zext8", "zext16"):
    setattr(SSLTransformer, _op, _unary(_op))
for _name, _op in (
    ("or_", "or"),
    ("xor", "xor"),
    ("and_", "and"),
    ("eq", "eq"),
    ("ne", "ne"),
    ("le", "le"),
    ("ge", "ge"),
    ("lt", "lt"),
    ("gt", "gt"),
    ("shl", "shl"),
    ("shr", "shr"),
    ("add", "add"),
    ("sub", "sub"),
    ("mul", "mul"),
    ("div", "div"),
    ("rem", "rem"),
    ("sar", "sar"),
    ("ltu", "ltu"),
    ("gtu", "gtu"),
    ("leu", "leu"),
    ("geu", "geu"),
):
    setattr(SSLTransformer, _name, _binary(_op))


def _collect_registers(tree: Tree) -> Dict[str, int]:
    registers: Dict[str, int] = {}
    for decl in tree.find_data("register_decl"):
        name, size = decl.children
        key = str(name)[1:]
        if key in registers:
            raise SSLError(f"Register %{key} declared twice")
        registers[key] = int(size)
    return registers


def parse_ssl(text: str) -> SSLDocument:
    """Parse template source text; raises :class:`SSLError` on syntax errors."""
    try:
        tree = ssl_parser.parse(text)
    except UnexpectedInput as exc:
        raise SSLError(
            f"Syntax error at line {exc.line}, column {exc.column}: "
            f"{exc.get_context(text).strip()}"
        ) from exc
    except LarkError as exc:
        raise SSLError(str(exc)) from exc

    registers = _collect_registers(tree)
    try:
        items = SSLTransformer(registers).transform(tree)
    except VisitError as exc:
        raise SSLError(str(exc.orig_exc)) from exc

    templates = tuple(item for item in items if isinstance(item, ast.Template))
    return SSLDocument(registers=registers, templates=templates)
