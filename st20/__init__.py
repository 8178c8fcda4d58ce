"""ST20 instruction decoder and semantic lifter."""

from .config import DecoderConfig, load_decoder_config  # noqa: F401
from .decoder import (  # noqa: F401
    InvalidInstruction,
    LiftError,
    SSLError,
    ST20Decoder,
    TemplateNotFound,
    disassemble,
)
from .decoding import (  # noqa: F401
    ByteReader,
    DecodedInstr,
    FunctionCode,
    Imm,
    MemoryImage,
    Target,
    decode_instruction,
)
from .rtl import RTL, SemanticDictionary  # noqa: F401

__all__ = [
    "ByteReader",
    "DecodedInstr",
    "DecoderConfig",
    "FunctionCode",
    "Imm",
    "InvalidInstruction",
    "LiftError",
    "MemoryImage",
    "RTL",
    "SSLError",
    "ST20Decoder",
    "SemanticDictionary",
    "Target",
    "TemplateNotFound",
    "decode_instruction",
    "disassemble",
    "load_decoder_config",
]
