from __future__ import annotations

import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Sequence, Tuple, Union

from . import ast
from .parser import SSLError, parse_ssl
from .passes import Binding, substitute
from .validate import iter_exprs, iter_stmt_exprs, iter_stmts, validate_all
from ..decoding.bind import Imm, Operand, Target

logger = logging.getLogger(__name__)

DEFAULT_SSL_PATH = Path(__file__).resolve().parent / "data" / "st20.ssl"


class LiftError(Exception):
    """A valid instruction could not be translated into RTL."""


class TemplateNotFound(LiftError):
    def __init__(self, key: str) -> None:
        super().__init__(f"No semantic template for {key!r}")
        self.key = key


def _binding(operand: Union[Operand, Binding]) -> Binding:
    if isinstance(operand, Imm):
        return ast.Const(operand.value, 32)
    if isinstance(operand, Target):
        return ast.Addr(operand.addr)
    if isinstance(operand, (ast.Const, ast.Addr)):
        return operand
    raise TypeError(f"Unsupported operand {operand!r}")


class SemanticDictionary:
    """Read-only mapping from variant keys to semantic templates.

    Instances are fully built by :meth:`from_text` / :meth:`from_file` and
    never change afterwards, so ``instantiate`` may be called from any
    number of threads.
    """

    def __init__(
        self, registers: Mapping[str, int], templates: Sequence[ast.Template]
    ) -> None:
        errors = validate_all(templates, dict(registers))
        if errors:
            raise SSLError("Invalid semantic templates:\n  " + "\n  ".join(errors))
        self._registers: Mapping[str, int] = MappingProxyType(dict(registers))
        self._templates: Mapping[str, ast.Template] = MappingProxyType(
            {template.name: template for template in templates}
        )

    @classmethod
    def from_text(cls, text: str) -> "SemanticDictionary":
        document = parse_ssl(text)
        return cls(document.registers, document.templates)

    @classmethod
    def from_file(cls, path: Union[str, os.PathLike]) -> "SemanticDictionary":
        try:
            with open(path, "r") as f:
                text = f.read()
        except OSError as exc:
            logger.error("Cannot read SSL file '%s': %s", path, exc)
            raise SSLError(f"Cannot read SSL file '{path}'") from exc

        try:
            dictionary = cls.from_text(text)
        except SSLError as exc:
            logger.error("Cannot load SSL file '%s': %s", path, exc)
            raise
        logger.info("Loaded %d semantic templates from %s", len(dictionary), path)
        return dictionary

    @classmethod
    def default(cls) -> "SemanticDictionary":
        return cls.from_file(DEFAULT_SSL_PATH)

    @property
    def registers(self) -> Mapping[str, int]:
        return self._registers

    def __contains__(self, key: object) -> bool:
        return key in self._templates

    def __iter__(self) -> Iterator[str]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def keys(self) -> Tuple[str, ...]:
        return tuple(self._templates)

    def template(self, key: str) -> ast.Template:
        try:
            return self._templates[key]
        except KeyError:
            raise TemplateNotFound(key) from None

    def intrinsic_names(self) -> Tuple[str, ...]:
        names = set()
        for template in self._templates.values():
            for stmt in iter_stmts(template.body):
                for expr in iter_stmt_exprs(stmt):
                    for node in iter_exprs(expr):
                        if isinstance(node, ast.Intrinsic):
                            names.add(node.name)
        return tuple(sorted(names))

    def instantiate(
        self,
        key: str,
        address: int,
        operands: Sequence[Union[Operand, Binding]] = (),
    ) -> ast.RTL:
        template = self.template(key)
        if len(operands) != len(template.params):
            raise LiftError(
                f"{key} expects {len(template.params)} operand(s), got {len(operands)}"
            )
        binder: Dict[str, Binding] = {
            name: _binding(operand) for name, operand in zip(template.params, operands)
        }
        return ast.RTL(address, key, substitute(template.body, binder, address))
