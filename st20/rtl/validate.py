from __future__ import annotations

from typing import Dict, Iterable, List

from . import ast

_MEM_SIZES = {8, 16, 32}


def _err(errors: List[str], template: ast.Template, message: str) -> None:
    errors.append(f"{template.name}: {message}")


def iter_expr_children(expr: ast.Expr) -> Iterable[ast.Expr]:
    if isinstance(expr, ast.Mem):
        yield expr.addr
    elif isinstance(expr, ast.UnOp):
        yield expr.a
    elif isinstance(expr, ast.BinOp):
        yield expr.a
        yield expr.b
    elif isinstance(expr, ast.Intrinsic):
        yield from expr.args


def iter_stmt_exprs(stmt: ast.Stmt) -> Iterable[ast.Expr]:
    if isinstance(stmt, ast.Assign):
        yield stmt.dst
        yield stmt.value
    elif isinstance(stmt, (ast.Goto, ast.Call)):
        yield stmt.target
    elif isinstance(stmt, ast.Ret):
        if stmt.target is not None:
            yield stmt.target
    elif isinstance(stmt, ast.Branch):
        yield stmt.cond
        yield stmt.target
    elif isinstance(stmt, ast.Effect):
        yield stmt.call
    elif isinstance(stmt, ast.If):
        yield stmt.cond


def iter_stmts(stmts: Iterable[ast.Stmt]) -> Iterable[ast.Stmt]:
    for stmt in stmts:
        yield stmt
        if isinstance(stmt, ast.If):
            yield from iter_stmts(stmt.then_ops)
            yield from iter_stmts(stmt.else_ops)


def iter_exprs(expr: ast.Expr) -> Iterable[ast.Expr]:
    yield expr
    for child in iter_expr_children(expr):
        yield from iter_exprs(child)


def _validate_expr(
    expr: ast.Expr,
    template: ast.Template,
    registers: Dict[str, int],
    errors: List[str],
) -> None:
    for node in iter_exprs(expr):
        if isinstance(node, ast.Reg) and node.name not in registers:
            _err(errors, template, f"undeclared register %{node.name}")
        elif isinstance(node, ast.Param) and node.name not in template.params:
            _err(errors, template, f"unknown parameter {node.name}")
        elif isinstance(node, ast.Mem) and node.size not in _MEM_SIZES:
            _err(errors, template, f"unsupported memory width {node.size}")


def validate(template: ast.Template, registers: Dict[str, int]) -> List[str]:
    errors: List[str] = []
    if not template.name.isupper():
        _err(errors, template, "template names must be upper case")
    if len(set(template.params)) != len(template.params):
        _err(errors, template, "duplicate parameter names")

    for stmt in iter_stmts(template.body):
        if isinstance(stmt, ast.Assign) and not isinstance(stmt.dst, (ast.Reg, ast.Mem)):
            _err(errors, template, f"cannot assign to {stmt.dst!r}")
        for expr in iter_stmt_exprs(stmt):
            _validate_expr(expr, template, registers, errors)

    return errors


def validate_all(templates: Iterable[ast.Template], registers: Dict[str, int]) -> List[str]:
    errors: List[str] = []
    seen = set()
    for template in templates:
        if template.name in seen:
            errors.append(f"{template.name}: defined more than once")
        seen.add(template.name)
        errors.extend(validate(template, registers))
    return errors
