"""
Property-based tests for the ST20 decoder.

Hypothesis strategies live in ``strategies``; the tests cover determinism,
instruction length and the prefix folding laws over arbitrary prefix chains.
"""
