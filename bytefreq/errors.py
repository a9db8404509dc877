"""Failure taxonomy for loading and decoding bytecode images."""

from __future__ import annotations


class BytecodeError(Exception):
    """Base class for every load, decode and scan failure."""

    pass


class MalformedHeader(BytecodeError):
    """Raised when the declared region sizes place a boundary outside the file."""

    pass


class UnterminatedStringPool(BytecodeError):
    """Raised when a non-empty string pool does not end with a NUL byte."""

    pass


class UnexpectedEnd(BytecodeError):
    """Raised when a field read would run past the end of the code section."""

    pass


class StringOutOfBounds(BytecodeError):
    """Raised when a string pool offset does not name a string inside the pool."""

    pass


class InvalidOpcode(BytecodeError):
    """Raised for an unrecognised opcode, location class, operator or pattern."""

    pass
