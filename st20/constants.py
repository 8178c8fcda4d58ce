"""Shared ST20 architecture constants.

The ST20 core is a 32-bit machine: words, addresses and the operand
accumulator are all 32 bits wide.
"""

WORD_BITS = 32
WORD_BYTES = WORD_BITS // 8

# Mask for addresses in the 32-bit address space.
ADDR_MASK = 0xFFFFFFFF

# Numeric instruction ids for extended (operate) opcodes carry this bit so
# they never collide with the primary function codes 0..15.
OPR_MASK = 1 << 16
# Set together with OPR_MASK when the secondary total was negative.
OPR_SIGN = 1 << 17

# Operands outside this range are rendered in hexadecimal by the trace.
TRACE_DECIMAL_LIMIT = 100
