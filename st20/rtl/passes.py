from __future__ import annotations

from typing import Callable, Dict, Optional, Sequence, Tuple, Union

from . import ast

Binding = Union[ast.Const, ast.Addr]
ExprRewrite = Callable[[ast.Expr], Optional[ast.Expr]]


def _mask(bits: int) -> int:
    return (1 << bits) - 1


def _to_signed(value: int, bits: int) -> int:
    mask = _mask(bits)
    value &= mask
    sign_bit = 1 << (bits - 1)
    return value - (1 << bits) if value & sign_bit else value


def rewrite_expr(expr: ast.Expr, fn: ExprRewrite) -> ast.Expr:
    """Bottom-up rewrite; ``fn`` returns a replacement node or None to keep it."""
    if isinstance(expr, ast.Mem):
        new_addr = rewrite_expr(expr.addr, fn)
        if new_addr is not expr.addr:
            expr = ast.Mem(new_addr, expr.size)
    elif isinstance(expr, ast.UnOp):
        new_a = rewrite_expr(expr.a, fn)
        if new_a is not expr.a:
            expr = ast.UnOp(expr.op, new_a)
    elif isinstance(expr, ast.BinOp):
        new_a = rewrite_expr(expr.a, fn)
        new_b = rewrite_expr(expr.b, fn)
        if new_a is not expr.a or new_b is not expr.b:
            expr = ast.BinOp(expr.op, new_a, new_b)
    elif isinstance(expr, ast.Intrinsic):
        new_args = tuple(rewrite_expr(arg, fn) for arg in expr.args)
        if any(new is not old for new, old in zip(new_args, expr.args)):
            expr = ast.Intrinsic(expr.name, new_args)

    replacement = fn(expr)
    return expr if replacement is None else replacement


def rewrite_stmt(stmt: ast.Stmt, fn: ExprRewrite) -> ast.Stmt:
    if isinstance(stmt, ast.Assign):
        dst = rewrite_expr(stmt.dst, fn)
        if not isinstance(dst, (ast.Reg, ast.Mem)):
            raise TypeError(f"Bad assignment target {dst!r}")
        return ast.Assign(dst, rewrite_expr(stmt.value, fn))
    if isinstance(stmt, ast.Goto):
        return ast.Goto(rewrite_expr(stmt.target, fn))
    if isinstance(stmt, ast.Call):
        return ast.Call(rewrite_expr(stmt.target, fn))
    if isinstance(stmt, ast.Ret):
        if stmt.target is None:
            return stmt
        return ast.Ret(rewrite_expr(stmt.target, fn))
    if isinstance(stmt, ast.Branch):
        return ast.Branch(rewrite_expr(stmt.cond, fn), rewrite_expr(stmt.target, fn))
    if isinstance(stmt, ast.Effect):
        call = rewrite_expr(stmt.call, fn)
        if not isinstance(call, ast.Intrinsic):
            raise TypeError(f"Effect must call an intrinsic, got {call!r}")
        return ast.Effect(call)
    if isinstance(stmt, ast.If):
        return ast.If(
            rewrite_expr(stmt.cond, fn),
            rewrite_stmts(stmt.then_ops, fn),
            rewrite_stmts(stmt.else_ops, fn),
        )
    if isinstance(stmt, ast.Nop):
        return stmt
    raise TypeError(f"Unsupported statement {stmt!r}")


def rewrite_stmts(stmts: Sequence[ast.Stmt], fn: ExprRewrite) -> Tuple[ast.Stmt, ...]:
    return tuple(rewrite_stmt(stmt, fn) for stmt in stmts)


def substitute(
    stmts: Sequence[ast.Stmt], binder: Dict[str, Binding], address: int
) -> Tuple[ast.Stmt, ...]:
    """Replace template parameters and ``%pc`` with concrete values."""

    def bind(expr: ast.Expr) -> Optional[ast.Expr]:
        if isinstance(expr, ast.Param):
            if expr.name not in binder:
                raise KeyError(f"Parameter {expr.name} not bound")
            return binder[expr.name]
        if isinstance(expr, ast.Pc):
            return ast.Addr(address)
        return None

    return rewrite_stmts(stmts, bind)


_FOLDABLE = {
    "add": lambda a, b: a + b,
    "sub": lambda a, b: a - b,
    "mul": lambda a, b: a * b,
    "and": lambda a, b: a & b,
    "or": lambda a, b: a | b,
    "xor": lambda a, b: a ^ b,
    "shl": lambda a, b: a << b if 0 <= b < 32 else 0,
}


def _fold(expr: ast.Expr) -> Optional[ast.Expr]:
    if isinstance(expr, ast.BinOp) and expr.op in _FOLDABLE:
        if isinstance(expr.a, ast.Const) and isinstance(expr.b, ast.Const):
            value = _FOLDABLE[expr.op](expr.a.value, expr.b.value)
            return ast.Const(_to_signed(value, 32))
    if isinstance(expr, ast.UnOp) and isinstance(expr.a, ast.Const):
        if expr.op == "neg":
            return ast.Const(_to_signed(-expr.a.value, 32))
        if expr.op == "not":
            return ast.Const(_to_signed(~expr.a.value, 32))
    return None


def fold_constants(rtl: ast.RTL) -> ast.RTL:
    """Evaluate operator nodes whose operands are both constants."""
    return ast.RTL(rtl.address, rtl.name, rewrite_stmts(rtl.statements, _fold))
