from __future__ import annotations

import logging
import re
from typing import Iterator, Optional

from .config import DecoderConfig, load_decoder_config
from .decoding.bind import DecodedInstr
from .decoding.decode_map import decode_instruction
from .decoding.reader import ByteSource
from .decoding.secondary import instruction_name
from .rtl.ast import RTL
from .rtl.dictionary import LiftError, SemanticDictionary, TemplateNotFound
from .rtl.parser import SSLError
from .rtl.passes import fold_constants
from .trace import TraceObserver, log_trace

logger = logging.getLogger(__name__)

_KEY_PUNCTUATION = re.compile(r"[^A-Za-z0-9_]")


class InvalidInstruction(LiftError):
    """Raised when lifting a record whose ``valid`` flag is False."""

    def __init__(self, instr: DecodedInstr) -> None:
        super().__init__(f"Invalid instruction at {instr.address:#x} (opr total {instr.total:#x})")
        self.instr = instr


def variant_key(variant: str) -> str:
    """Normalise a variant string to a dictionary key (``"ld.x"`` -> ``"LDX"``).

    Characters other than letters, digits and underscores are dropped.
    """
    return _KEY_PUNCTUATION.sub("", variant).upper()


class ST20Decoder:
    """Decode and lift ST20 instructions.

    The semantic dictionary is loaded once here; a load failure raises
    :class:`SSLError` and no decoder is created.  After construction the
    decoder holds only immutable state, so ``decode`` and ``lift`` may be
    called concurrently.
    """

    def __init__(
        self,
        source: Optional[ByteSource] = None,
        *,
        config: Optional[DecoderConfig] = None,
        dictionary: Optional[SemanticDictionary] = None,
        observer: Optional[TraceObserver] = None,
    ) -> None:
        self.config = config if config is not None else load_decoder_config()
        if dictionary is None:
            dictionary = SemanticDictionary.from_file(self.config.ssl_path)
        self.dictionary = dictionary
        self.source = source
        if observer is None and self.config.debug_decoder:
            observer = log_trace
        self.observer = observer

    def decode(
        self, address: int, delta: int = 0, source: Optional[ByteSource] = None
    ) -> DecodedInstr:
        source = source if source is not None else self.source
        if source is None:
            raise ValueError("No byte source to decode from")
        return decode_instruction(source, address, delta)

    def lift(self, instr: DecodedInstr) -> RTL:
        if not instr.valid:
            raise InvalidInstruction(instr)
        rtl = self.dictionary.instantiate(
            variant_key(instr.variant), instr.address, instr.operands
        )
        if self.config.fold_constants:
            rtl = fold_constants(rtl)
        if self.observer is not None:
            self.observer(instr, rtl)
        return rtl

    def instruction_name(self, total: int) -> Optional[str]:
        return instruction_name(total)


def disassemble(source: ByteSource, start: int, end: int, delta: int = 0) -> Iterator[DecodedInstr]:
    """Decode instructions linearly from ``start`` up to ``end``.

    Invalid instructions are yielded too and skipped by their length.
    """
    address = start
    while address < end:
        instr = decode_instruction(source, address, delta)
        if not instr.valid:
            logger.debug("Invalid opr total %#x at %#x", instr.total, address)
        yield instr
        address += instr.length


__all__ = [
    "InvalidInstruction",
    "LiftError",
    "SSLError",
    "ST20Decoder",
    "TemplateNotFound",
    "disassemble",
    "variant_key",
]
