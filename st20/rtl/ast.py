from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Sequence, Tuple, Union

UnaryOp = Literal["neg", "not", "sext8", "sext16", "zext8", "zext16"]
BinaryOp = Literal[
    "add",
    "sub",
    "mul",
    "div",
    "rem",
    "and",
    "or",
    "xor",
    "shl",
    "shr",
    "sar",
    "eq",
    "ne",
    "lt",
    "gt",
    "le",
    "ge",
    "ltu",
    "gtu",
    "leu",
    "geu",
]

COMPARE_OPS = frozenset({"eq", "ne", "lt", "gt", "le", "ge", "ltu", "gtu", "leu", "geu"})


def _as_tuple(items: Sequence["Stmt"]) -> Tuple["Stmt", ...]:
    return tuple(items) if not isinstance(items, tuple) else items


@dataclass(frozen=True, slots=True)
class Const:
    value: int
    size: int = 32  # bits


@dataclass(frozen=True, slots=True)
class Addr:
    """Absolute code address bound from an instruction operand or ``%pc``."""

    value: int


@dataclass(frozen=True, slots=True)
class Param:
    """Template parameter; replaced by a constant when a template is instantiated."""

    name: str


@dataclass(frozen=True, slots=True)
class Pc:
    """Address of the instruction being lifted."""


@dataclass(frozen=True, slots=True)
class Reg:
    name: str
    size: int = 32


@dataclass(frozen=True, slots=True)
class Mem:
    addr: "Expr"
    size: int  # bits


@dataclass(frozen=True, slots=True)
class UnOp:
    op: UnaryOp
    a: "Expr"


@dataclass(frozen=True, slots=True)
class BinOp:
    op: BinaryOp
    a: "Expr"
    b: "Expr"


@dataclass(frozen=True, slots=True)
class Intrinsic:
    """Opaque machine operation (scheduling, channels, long arithmetic...)."""

    name: str
    args: Tuple["Expr", ...] = ()


Expr = Union[Const, Addr, Param, Pc, Reg, Mem, UnOp, BinOp, Intrinsic]


@dataclass(frozen=True, slots=True)
class Assign:
    dst: Union[Reg, Mem]
    value: Expr


@dataclass(frozen=True, slots=True)
class Goto:
    target: Expr


@dataclass(frozen=True, slots=True)
class Branch:
    """Jump to ``target`` when ``cond`` is non-zero, otherwise fall through."""

    cond: Expr
    target: Expr


@dataclass(frozen=True, slots=True)
class Call:
    """Call ``target``; the return address is saved in the workspace."""

    target: Expr


@dataclass(frozen=True, slots=True)
class Ret:
    target: Optional[Expr] = None


@dataclass(frozen=True, slots=True)
class Effect:
    call: Intrinsic


@dataclass(frozen=True, slots=True)
class If:
    cond: Expr
    then_ops: Sequence["Stmt"]
    else_ops: Sequence["Stmt"] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "then_ops", _as_tuple(self.then_ops))
        object.__setattr__(self, "else_ops", _as_tuple(self.else_ops))


@dataclass(frozen=True, slots=True)
class Nop:
    pass


Stmt = Union[Assign, Goto, Branch, Call, Ret, Effect, If, Nop]


@dataclass(frozen=True, slots=True)
class Template:
    """Parametrised semantics for one variant key, as read from the dictionary."""

    name: str
    params: Tuple[str, ...]
    body: Sequence[Stmt]

    def __post_init__(self) -> None:
        object.__setattr__(self, "body", _as_tuple(self.body))


@dataclass(frozen=True, slots=True)
class RTL:
    """Instantiated semantics of a single decoded instruction."""

    address: int
    name: str
    statements: Sequence[Stmt]

    def __post_init__(self) -> None:
        object.__setattr__(self, "statements", _as_tuple(self.statements))

    def __iter__(self):
        return iter(self.statements)

    def __len__(self) -> int:
        return len(self.statements)
