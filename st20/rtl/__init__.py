"""
Register-transfer representation of lifted ST20 instructions.

Templates are written in a small declarative language (``ssl.lark``), loaded
into a :class:`~st20.rtl.dictionary.SemanticDictionary` and instantiated per
decoded instruction.  The LLIL backend lives in ``backend_llil`` and is only
imported by the Binary Ninja glue.
"""

from .ast import (  # noqa: F401
    Addr,
    Assign,
    BinOp,
    Branch,
    Call,
    Const,
    Effect,
    Expr,
    Goto,
    If,
    Intrinsic,
    Mem,
    Nop,
    Param,
    Pc,
    Reg,
    Ret,
    RTL,
    Stmt,
    Template,
    UnOp,
)
from .dictionary import LiftError, SemanticDictionary, TemplateNotFound  # noqa: F401
from .parser import SSLError, parse_ssl  # noqa: F401
from . import validate  # noqa: F401
from . import passes  # noqa: F401

__all__ = [
    "RTL",
    "Template",
    "Stmt",
    "Expr",
    "Const",
    "Addr",
    "Param",
    "Pc",
    "Reg",
    "Mem",
    "UnOp",
    "BinOp",
    "Intrinsic",
    "Assign",
    "Goto",
    "Branch",
    "Call",
    "Ret",
    "Effect",
    "If",
    "Nop",
    "SemanticDictionary",
    "LiftError",
    "TemplateNotFound",
    "SSLError",
    "parse_ssl",
    "validate",
    "passes",
]
