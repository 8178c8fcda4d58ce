"""Secondary (``opr``) opcode tables.

An ``opr`` instruction selects its operation with the fully folded prefix
total.  Non-negative totals index ``POSITIVE_OPCODES`` directly.  Negative
totals can only be built with ``nfix`` and index ``NEGATIVE_OPCODES`` after
undoing the complement that ``nfix`` applied to every nibble but the last.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Tuple

from ..constants import OPR_MASK, OPR_SIGN

POSITIVE_OPCODES: Dict[int, str] = {
    0x00: "rev",
    0x01: "lb",
    0x02: "bsub",
    0x03: "endp",
    0x04: "diff",
    0x05: "add",
    0x06: "gcall",
    0x07: "in",
    0x08: "prod",
    0x09: "gt",
    0x0A: "wsub",
    0x0B: "out",
    0x0C: "sub",
    0x0D: "startp",
    0x0E: "outbyte",
    0x0F: "outword",
    0x10: "seterr",
    0x12: "resetch",
    0x13: "csub0",
    0x15: "stopp",
    0x16: "ladd",
    0x17: "stlb",
    0x18: "sthf",
    0x19: "norm",
    0x1A: "ldiv",
    0x1B: "ldpi",
    0x1C: "stlf",
    0x1D: "xdble",
    0x1E: "ldpri",
    0x1F: "rem",
    0x20: "ret",
    0x21: "lend",
    0x22: "ldtimer",
    0x29: "testerr",
    0x2A: "testpranal",
    0x2B: "tin",
    0x2C: "div",
    0x2E: "dist",
    0x2F: "disc",
    0x30: "diss",
    0x31: "lmul",
    0x32: "not",
    0x33: "xor",
    0x34: "bcnt",
    0x35: "lshr",
    0x36: "lshl",
    0x37: "lsum",
    0x38: "lsub",
    0x39: "runp",
    0x3A: "xword",
    0x3B: "sb",
    0x3C: "gajw",
    0x3D: "savel",
    0x3E: "saveh",
    0x3F: "wcnt",
    0x40: "shr",
    0x41: "shl",
    0x42: "mint",
    0x43: "alt",
    0x44: "altwt",
    0x45: "altend",
    0x46: "and",
    0x47: "enbt",
    0x48: "enbc",
    0x49: "enbs",
    0x4A: "move",
    0x4B: "or",
    0x4C: "csngl",
    0x4D: "ccnt1",
    0x4E: "talt",
    0x4F: "ldiff",
    0x50: "sthb",
    0x51: "taltwt",
    0x52: "sum",
    0x53: "mul",
    0x54: "sttimer",
    0x55: "stoperr",
    0x56: "cword",
    0x57: "clrhalterr",
    0x58: "sethalterr",
    0x59: "testhalterr",
    0x5A: "dup",
    0x5B: "move2dinit",
    0x5C: "move2dall",
    0x5D: "move2dnonzero",
    0x5E: "move2dzero",
    0x5F: "gtu",
    0x63: "unpacksn",
    0x64: "slmul",
    0x65: "sulmul",
    0x68: "satadd",
    0x69: "satsub",
    0x6A: "satmul",
    0x6C: "postnormsn",
    0x6D: "roundsn",
    0x6E: "ldtraph",
    0x6F: "sttraph",
    0x71: "ldinf",
    0x72: "fmul",
    0x73: "cflerr",
    0x74: "crcword",
    0x75: "crcbyte",
    0x76: "bitcnt",
    0x77: "bitrevword",
    0x78: "bitrevnbits",
    0x79: "pop",
    0x7E: "ldmemstartval",
    0x81: "wsubdb",
    0x9C: "fptesterr",
    0xB0: "settimeslice",
    0xB8: "xbword",
    0xB9: "lbx",
    0xBA: "cb",
    0xBB: "cbu",
    0xC1: "ssub",
    0xC4: "intdis",
    0xC5: "intenb",
    0xC6: "ldtrapped",
    0xC7: "cir",
    0xC8: "ss",
    0xCA: "ls",
    0xCB: "sttrapped",
    0xCC: "ciru",
    0xCD: "gintdis",
    0xCE: "gintenb",
    0xF0: "devlb",
    0xF1: "devsb",
    0xF2: "devls",
    0xF3: "devss",
    0xF4: "devlw",
    0xF5: "devsw",
    # Both encodings are documented as the same operation.
    0xF6: "null",
    0xF7: "null",
    0xF8: "xsword",
    0xF9: "lsx",
    0xFA: "cs",
    0xFB: "csu",
    0x17C: "lddevid",
}

NEGATIVE_OPCODES: Dict[int, str] = {
    0x00: "swapqueue",
    0x01: "swaptimer",
    0x02: "insertqueue",
    0x03: "timeslice",
    0x04: "signal",
    0x05: "wait",
    0x06: "trapdis",
    0x07: "trapenb",
    0x0B: "tret",
    0x0C: "ldshadow",
    0x0D: "stshadow",
    0x1F: "iret",
    0x24: "devmove",
    0x2E: "restart",
    0x2F: "causeerror",
    0x30: "nop",
    0x4C: "stclock",
    0x4D: "ldclock",
    0x4E: "clockdis",
    0x4F: "clockenb",
    0x8C: "ldprodid",
    0x8D: "reboot",
}


def negative_index(total: int) -> int:
    """Map a negative ``opr`` total onto its ``NEGATIVE_OPCODES`` index.

    ``nfix`` complements its nibble before shifting, so every nibble above the
    last one arrives inverted while the final ``opr`` nibble is added as-is.
    """
    return (~total & ~0xF) | (total & 0xF)


def negative_total(index: int) -> int:
    """Inverse of :func:`negative_index` for non-negative indices."""
    return (~(index & ~0xF) & ~0xF) | (index & 0xF)


def instruction_name(total: int) -> Optional[str]:
    """Return the mnemonic selected by an ``opr`` total, or None if undefined."""
    if total >= 0:
        return POSITIVE_OPCODES.get(total)
    return NEGATIVE_OPCODES.get(negative_index(total))


def extended_id(total: int) -> int:
    if total >= 0:
        return OPR_MASK | total
    return OPR_MASK | OPR_SIGN | negative_index(total)


def decode_extended_id(ident: int) -> int:
    """Recover the ``opr`` total packed by :func:`extended_id`."""
    if not ident & OPR_MASK:
        raise ValueError(f"Not an extended instruction id: {ident:#x}")
    index = ident & (OPR_MASK - 1)
    if ident & OPR_SIGN:
        return negative_total(index)
    return index


def tables_are_disjoint(
    positive: Mapping[int, str] = POSITIVE_OPCODES,
    negative: Mapping[int, str] = NEGATIVE_OPCODES,
) -> bool:
    return not set(positive.values()) & set(negative.values())


def all_secondary_opcodes() -> Tuple[Tuple[int, str], ...]:
    """Every defined ``opr`` total with its mnemonic, positive totals first."""
    positive = tuple(sorted(POSITIVE_OPCODES.items()))
    negative = tuple(
        (negative_total(index), name) for index, name in sorted(NEGATIVE_OPCODES.items())
    )
    return positive + negative
