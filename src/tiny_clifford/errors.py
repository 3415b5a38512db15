"""
Exception types raised by the conversion routines.

Both concrete errors derive from ``ValueError`` so callers that only care
about "bad input" can catch that, while callers that need to distinguish a
malformed argument from an operation the routine cannot handle can catch the
specific class.
"""


class TinyCliffordError(Exception):
    """Base class for errors raised by tiny-clifford."""


class InvalidArgument(TinyCliffordError, ValueError):
    """
    The input is malformed or inconsistent.

    Raised for non-Clifford unitaries or state vectors, unknown synthesis
    methods, redundant or missing stabilizers when the permissive flag is not
    set, and detectors that anticommute with a collapsing operation.
    """


class UnsupportedOperation(TinyCliffordError, ValueError):
    """A circuit contains an instruction the requested conversion cannot process."""
