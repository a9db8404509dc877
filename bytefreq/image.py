"""Bytecode image: raw buffer, region boundaries and bounds-checked reads."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import (
    MalformedHeader,
    StringOutOfBounds,
    UnexpectedEnd,
    UnterminatedStringPool,
)
from . import constants

logger = logging.getLogger(__name__)


def le_int(data: bytes, offset: int, signed: bool = False) -> int:
    """Interpret four bytes at *offset* as a little-endian integer."""
    return int.from_bytes(
        data[offset : offset + constants.WORD_SIZE], "little", signed=signed
    )


@dataclass(frozen=True)
class BytecodeImage:
    """An immutable, fully loaded bytecode file.

    ``data`` holds everything after the fixed header: the public symbol
    table, the string pool and the code section, in that order. Code reads
    take offsets relative to the start of the code section.
    """

    string_pool_size: int
    global_area_size: int
    public_symbol_count: int
    data: bytes

    @classmethod
    def load(cls, raw: bytes) -> BytecodeImage:
        """Parse the header, check region boundaries and build an image.

        Raises:
            MalformedHeader: the header is truncated, or the symbol table or
                string pool extends to or past the end of the file.
            UnterminatedStringPool: the pool is non-empty and its last byte
                is not a NUL terminator.
        """
        if len(raw) < constants.HEADER_SIZE:
            raise MalformedHeader(
                f"File is {len(raw)} bytes, shorter than the "
                f"{constants.HEADER_SIZE}-byte header"
            )
        image = cls(
            string_pool_size=le_int(raw, 0),
            global_area_size=le_int(raw, constants.WORD_SIZE),
            public_symbol_count=le_int(raw, 2 * constants.WORD_SIZE),
            data=bytes(raw[constants.HEADER_SIZE :]),
        )

        if image.string_pool_start >= len(image.data):
            raise MalformedHeader(
                f"Incorrect metadata: {image.public_symbol_count} public symbols "
                f"do not fit in {len(image.data)} bytes"
            )
        if image.code_start >= len(image.data):
            raise MalformedHeader(
                f"Incorrect metadata: string pool of {image.string_pool_size} "
                f"bytes leaves no code section"
            )
        if (
            image.string_pool_size
            and image.data[image.code_start - 1] != constants.STRING_TERMINATOR
        ):
            raise UnterminatedStringPool(
                "Last string in the string pool is not NUL-terminated"
            )

        logger.debug(
            "Loaded image: %d public symbols, %d-byte string pool, "
            "%d-byte global area, %d-byte code section",
            image.public_symbol_count,
            image.string_pool_size,
            image.global_area_size,
            image.code_size,
        )
        return image

    # ── Region boundaries ────────────────────────────────────────

    @property
    def public_symbols_start(self) -> int:
        return 0

    @property
    def string_pool_start(self) -> int:
        return (
            self.public_symbols_start
            + constants.PUBLIC_SYMBOL_ENTRY_SIZE * self.public_symbol_count
        )

    @property
    def code_start(self) -> int:
        return self.string_pool_start + self.string_pool_size

    @property
    def code_size(self) -> int:
        return len(self.data) - self.code_start

    # ── Code section reads ───────────────────────────────────────

    def _check_span(self, offset: int, length: int) -> None:
        if offset < 0 or offset + length > self.code_size:
            raise UnexpectedEnd(
                f"Read of {length} byte(s) at code offset {offset:#x} runs past "
                f"the end of the {self.code_size}-byte code section"
            )

    def read_byte(self, offset: int) -> int:
        self._check_span(offset, 1)
        return self.data[self.code_start + offset]

    def read_u32(self, offset: int) -> int:
        self._check_span(offset, constants.WORD_SIZE)
        return le_int(self.data, self.code_start + offset)

    def read_i32(self, offset: int) -> int:
        self._check_span(offset, constants.WORD_SIZE)
        return le_int(self.data, self.code_start + offset, signed=True)

    def read_bytes(self, offset: int, length: int) -> bytes:
        self._check_span(offset, length)
        start = self.code_start + offset
        return self.data[start : start + length]

    # ── String pool ──────────────────────────────────────────────

    def read_string(self, pool_offset: int) -> str:
        """Return the NUL-terminated string at *pool_offset* in the pool."""
        if pool_offset < 0 or pool_offset >= self.string_pool_size:
            raise StringOutOfBounds(
                f"String pool offset {pool_offset} is outside the "
                f"{self.string_pool_size}-byte pool"
            )
        start = self.string_pool_start + pool_offset
        end = self.data.find(constants.STRING_TERMINATOR, start, self.code_start)
        if end == -1:
            raise StringOutOfBounds(
                f"String at pool offset {pool_offset} is not terminated "
                f"inside the pool"
            )
        return self.data[start:end].decode(constants.STRING_ENCODING, errors="replace")
