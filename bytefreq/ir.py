"""Instruction model: one tagged variant per bytecode instruction form."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Kind(str, Enum):
    # Sentinel
    STOP = "STOP"
    # Arithmetic / logic
    BINOP = "BINOP"
    # Constants and data
    CONST = "CONST"
    STRING = "STRING"
    SEXP = "SEXP"
    STI = "STI"
    STA = "STA"
    JMP = "JMP"
    END = "END"
    RET = "RET"
    DROP = "DROP"
    DUP = "DUP"
    SWAP = "SWAP"
    ELEM = "ELEM"
    # Memory
    LD = "LD"
    LDA = "LDA"
    ST = "ST"
    # Control
    CJMPZ = "CJMPz"
    CJMPNZ = "CJMPnz"
    BEGIN = "BEGIN"
    CBEGIN = "CBEGIN"
    CLOSURE = "CLOSURE"
    CALLC = "CALLC"
    CALL = "CALL"
    TAG = "TAG"
    ARRAY = "ARRAY"
    FAIL = "FAIL"
    LINE = "LINE"
    # Pattern tests
    PATT = "PATT"
    # Built-in calls
    CALL_READ = "Lread"
    CALL_WRITE = "Lwrite"
    CALL_LENGTH = "Llength"
    CALL_STRING = "Lstring"
    CALL_BARRAY = "Barray"


class Location(int, Enum):
    """Storage class addressed by load/store and closure captures."""

    GLOBAL = 0
    LOCAL = 1
    ARGUMENT = 2
    CAPTURED = 3

    @property
    def letter(self) -> str:
        return "GLAC"[self.value]


class Capture(BaseModel):
    model_config = ConfigDict(frozen=True)

    location: Location
    index: int


class Instruction(BaseModel):
    """A decoded instruction together with its raw encoding.

    Identity is the raw byte span: two instructions compare equal, hash
    alike and sort together exactly when their encodings are identical.
    """

    model_config = ConfigDict(frozen=True)

    kind: Kind
    raw: bytes
    operands: tuple[int, ...] = ()
    tag: str | None = None  # resolved string for SEXP / TAG
    operator: str | None = None  # BINOP symbol or PATT name
    location: Location | None = None  # LD / LDA / ST
    captures: tuple[Capture, ...] = ()

    @property
    def opcode(self) -> int:
        return self.raw[0]

    @property
    def length(self) -> int:
        return len(self.raw)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Instruction):
            return NotImplemented
        return self.raw == other.raw

    def __lt__(self, other: Instruction) -> bool:
        return self.raw < other.raw

    def __hash__(self) -> int:
        return hash(self.raw)

    def __str__(self) -> str:
        from .formatter import format_instruction

        return format_instruction(self)
