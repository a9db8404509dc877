"""Named constants: binary layout and mnemonic tables."""

from __future__ import annotations

HEADER_FIELDS = 3
WORD_SIZE = 4
HEADER_SIZE = HEADER_FIELDS * WORD_SIZE
PUBLIC_SYMBOL_ENTRY_SIZE = 8

OPCODE_SIZE = 1
CAPTURE_DESCRIPTOR_SIZE = OPCODE_SIZE + WORD_SIZE
CLOSURE_FIXED_SIZE = OPCODE_SIZE + 2 * WORD_SIZE
CLOSURE_COUNT_OFFSET = OPCODE_SIZE + WORD_SIZE

STRING_TERMINATOR = 0
STRING_ENCODING = "utf-8"

ADDRESS_HEX_WIDTH = 8

# Category nibbles
CATEGORY_BINOP = 0x0
CATEGORY_LD = 0x2
CATEGORY_LDA = 0x3
CATEGORY_ST = 0x4
CATEGORY_PATT = 0x6
CATEGORY_STOP = 0xF

CLOSURE_OPCODE = 0x54

BINOP_SYMBOLS: tuple[str, ...] = (
    "+",
    "-",
    "*",
    "/",
    "%",
    "<",
    "<=",
    ">",
    ">=",
    "==",
    "!=",
    "&&",
    "!!",
)

PATTERN_NAMES: tuple[str, ...] = (
    "=str",
    "#string",
    "#array",
    "#sexp",
    "#ref",
    "#val",
    "#fun",
)

STOP_TEXT = "<end>"
REPORT_SEPARATOR = " x "
