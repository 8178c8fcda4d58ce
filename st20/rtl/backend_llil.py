from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional

from binja_test_mocks import binja_api  # noqa: F401  # pyright: ignore
from binaryninja.architecture import IntrinsicName, RegisterName  # type: ignore
from binaryninja.lowlevelil import (  # type: ignore
    LLIL_TEMP,
    LowLevelILFunction,
    LowLevelILLabel,
)

from . import ast
from ..constants import WORD_BITS, WORD_BYTES

ExpressionIndex = int


def bits_to_bytes(bits: int) -> int:
    return max(1, (bits + 7) // 8)


def _mask(bits: int) -> int:
    return (1 << bits) - 1


_BINARY: Dict[str, Callable[[LowLevelILFunction], Callable[..., ExpressionIndex]]] = {
    "add": lambda il: il.add,
    "sub": lambda il: il.sub,
    "mul": lambda il: il.mult,
    "div": lambda il: il.div_signed,
    "rem": lambda il: il.mod_signed,
    "and": lambda il: il.and_expr,
    "or": lambda il: il.or_expr,
    "xor": lambda il: il.xor_expr,
    "shl": lambda il: il.shift_left,
    "shr": lambda il: il.logical_shift_right,
    "sar": lambda il: il.arith_shift_right,
}

_COMPARE: Dict[str, Callable[[LowLevelILFunction], Callable[..., ExpressionIndex]]] = {
    "eq": lambda il: il.compare_equal,
    "ne": lambda il: il.compare_not_equal,
    "lt": lambda il: il.compare_signed_less_than,
    "gt": lambda il: il.compare_signed_greater_than,
    "le": lambda il: il.compare_signed_less_equal,
    "ge": lambda il: il.compare_signed_greater_equal,
    "ltu": lambda il: il.compare_unsigned_less_than,
    "gtu": lambda il: il.compare_unsigned_greater_than,
    "leu": lambda il: il.compare_unsigned_less_equal,
    "geu": lambda il: il.compare_unsigned_greater_equal,
}

_EXTEND_BITS = {"sext8": 8, "sext16": 16, "zext8": 8, "zext16": 16}


@dataclass
class _Env:
    il: LowLevelILFunction
    registers: Mapping[str, int]
    next_temp: int = 0

    def reg_bytes(self, name: str) -> int:
        return bits_to_bytes(self.registers.get(name, WORD_BITS))

    def temp(self):
        reg = LLIL_TEMP(self.next_temp)
        self.next_temp += 1
        return reg


def _emit_intrinsic(call: ast.Intrinsic, env: _Env, outputs: list) -> None:
    params = [_emit_value(arg, env) for arg in call.args]
    env.il.append(env.il.intrinsic(outputs, IntrinsicName(call.name), params))


def _emit_expr(expr: ast.Expr, env: _Env) -> ExpressionIndex:
    il = env.il
    if isinstance(expr, ast.Const):
        return il.const(bits_to_bytes(expr.size), expr.value & _mask(expr.size))

    if isinstance(expr, ast.Addr):
        return il.const_pointer(WORD_BYTES, expr.value)

    if isinstance(expr, ast.Reg):
        return il.reg(env.reg_bytes(expr.name), RegisterName(expr.name))

    if isinstance(expr, ast.Mem):
        return il.load(bits_to_bytes(expr.size), _emit_value(expr.addr, env))

    if isinstance(expr, ast.UnOp):
        if expr.op == "neg":
            return il.neg_expr(WORD_BYTES, _emit_value(expr.a, env))
        if expr.op == "not":
            return il.not_expr(WORD_BYTES, _emit_value(expr.a, env))
        narrow = bits_to_bytes(_EXTEND_BITS[expr.op])
        if isinstance(expr.a, ast.Mem) and bits_to_bytes(expr.a.size) == narrow:
            inner = _emit_expr(expr.a, env)
        else:
            inner = il.low_part(narrow, _emit_value(expr.a, env))
        if expr.op.startswith("sext"):
            return il.sign_extend(WORD_BYTES, inner)
        return il.zero_extend(WORD_BYTES, inner)

    if isinstance(expr, ast.BinOp):
        left = _emit_value(expr.a, env)
        right = _emit_value(expr.b, env)
        if expr.op in _COMPARE:
            return _COMPARE[expr.op](il)(WORD_BYTES, left, right)
        return _BINARY[expr.op](il)(WORD_BYTES, left, right)

    if isinstance(expr, ast.Intrinsic):
        temp = env.temp()
        _emit_intrinsic(expr, env, [temp])
        return il.reg(WORD_BYTES, temp)

    if isinstance(expr, (ast.Param, ast.Pc)):
        raise ValueError(f"Unbound template value {expr!r}; instantiate the template first")

    raise NotImplementedError(f"Unsupported expression {expr!r}")


def _is_compare(expr: ast.Expr) -> bool:
    return isinstance(expr, ast.BinOp) and expr.op in ast.COMPARE_OPS


def _emit_value(expr: ast.Expr, env: _Env) -> ExpressionIndex:
    """Emit ``expr`` where an integer is expected (comparisons become 0/1)."""
    value = _emit_expr(expr, env)
    if _is_compare(expr):
        return env.il.bool_to_int(WORD_BYTES, value)
    return value


def _emit_condition(expr: ast.Expr, env: _Env) -> ExpressionIndex:
    if _is_compare(expr):
        return _emit_expr(expr, env)
    return env.il.compare_not_equal(
        WORD_BYTES, _emit_value(expr, env), env.il.const(WORD_BYTES, 0)
    )


def _emit_assign(stmt: ast.Assign, env: _Env) -> None:
    il = env.il
    value = _emit_value(stmt.value, env)
    if isinstance(stmt.dst, ast.Reg):
        il.append(il.set_reg(env.reg_bytes(stmt.dst.name), RegisterName(stmt.dst.name), value))
        return
    addr = _emit_value(stmt.dst.addr, env)
    il.append(il.store(bits_to_bytes(stmt.dst.size), addr, value))


def _emit_return_address(env: _Env) -> ExpressionIndex:
    # Return addresses are saved at the bottom of the callee's workspace.
    il = env.il
    return il.load(WORD_BYTES, il.reg(env.reg_bytes("W"), RegisterName("W")))


def _emit_if(stmt: ast.If, env: _Env) -> None:
    il = env.il
    cond_expr = _emit_condition(stmt.cond, env)
    true_label = LowLevelILLabel()
    false_label = LowLevelILLabel()
    end_label = LowLevelILLabel() if stmt.else_ops else None

    il.append(il.if_expr(cond_expr, true_label, false_label))
    il.mark_label(true_label)
    for inner in stmt.then_ops:
        _emit_stmt(inner, env)
    if stmt.else_ops:
        il.append(il.goto(end_label))
    il.mark_label(false_label)
    if stmt.else_ops:
        for inner in stmt.else_ops:
            _emit_stmt(inner, env)
        il.mark_label(end_label)


def _emit_stmt(stmt: ast.Stmt, env: _Env) -> None:
    il = env.il
    if isinstance(stmt, ast.Assign):
        _emit_assign(stmt, env)
    elif isinstance(stmt, ast.Goto):
        il.append(il.jump(_emit_value(stmt.target, env)))
    elif isinstance(stmt, ast.Call):
        il.append(il.call(_emit_value(stmt.target, env)))
    elif isinstance(stmt, ast.Ret):
        if stmt.target is None:
            il.append(il.ret(_emit_return_address(env)))
        else:
            il.append(il.ret(_emit_value(stmt.target, env)))
    elif isinstance(stmt, ast.Branch):
        cond_expr = _emit_condition(stmt.cond, env)
        taken = LowLevelILLabel()
        fallthrough = LowLevelILLabel()
        il.append(il.if_expr(cond_expr, taken, fallthrough))
        il.mark_label(taken)
        il.append(il.jump(_emit_value(stmt.target, env)))
        il.mark_label(fallthrough)
    elif isinstance(stmt, ast.If):
        _emit_if(stmt, env)
    elif isinstance(stmt, ast.Effect):
        _emit_intrinsic(stmt.call, env, [])
    elif isinstance(stmt, ast.Nop):
        il.append(il.nop())
    else:
        raise NotImplementedError(f"Unsupported statement {stmt!r}")


def emit_llil(
    il: LowLevelILFunction,
    rtl: ast.RTL,
    registers: Optional[Mapping[str, int]] = None,
) -> None:
    env = _Env(il=il, registers=registers or {})
    if not rtl.statements:
        il.append(il.nop())
        return
    for stmt in rtl.statements:
        _emit_stmt(stmt, env)
