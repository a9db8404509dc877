"""Instruction decoder: opcode dispatch and length determination."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from .errors import InvalidOpcode, UnexpectedEnd
from .image import BytecodeImage
from .ir import Capture, Instruction, Kind, Location
from . import constants

logger = logging.getLogger(__name__)

# Operand field codes used in form layouts:
#   "i" signed Int, "u" unsigned Int (addresses), "s" Str (resolved pool offset)
_SIGNED = "i"
_UNSIGNED = "u"
_STR = "s"


@dataclass(frozen=True)
class _Form:
    """Fixed-length instruction form selected by a single opcode byte."""

    kind: Kind
    layout: str = ""
    operator: str | None = None
    location: Location | None = None

    @property
    def length(self) -> int:
        return constants.OPCODE_SIZE + constants.WORD_SIZE * len(self.layout)


def _build_forms() -> dict[int, _Form]:
    forms: dict[int, _Form] = {}

    for lo in range(0x10):
        forms[(constants.CATEGORY_STOP << 4) | lo] = _Form(Kind.STOP)

    for lo, symbol in enumerate(constants.BINOP_SYMBOLS, start=1):
        forms[(constants.CATEGORY_BINOP << 4) | lo] = _Form(Kind.BINOP, operator=symbol)

    forms.update(
        {
            0x10: _Form(Kind.CONST, _SIGNED),
            0x11: _Form(Kind.STRING, _SIGNED),
            0x12: _Form(Kind.SEXP, _STR + _SIGNED),
            0x13: _Form(Kind.STI),
            0x14: _Form(Kind.STA),
            0x15: _Form(Kind.JMP, _UNSIGNED),
            0x16: _Form(Kind.END),
            0x17: _Form(Kind.RET),
            0x18: _Form(Kind.DROP),
            0x19: _Form(Kind.DUP),
            0x1A: _Form(Kind.SWAP),
            0x1B: _Form(Kind.ELEM),
        }
    )

    memory_kinds = {
        constants.CATEGORY_LD: Kind.LD,
        constants.CATEGORY_LDA: Kind.LDA,
        constants.CATEGORY_ST: Kind.ST,
    }
    for hi, kind in memory_kinds.items():
        for location in Location:
            forms[(hi << 4) | location.value] = _Form(
                kind, _SIGNED, location=location
            )

    forms.update(
        {
            0x50: _Form(Kind.CJMPZ, _UNSIGNED),
            0x51: _Form(Kind.CJMPNZ, _UNSIGNED),
            0x52: _Form(Kind.BEGIN, _SIGNED + _SIGNED),
            0x53: _Form(Kind.CBEGIN, _SIGNED + _SIGNED),
            0x55: _Form(Kind.CALLC, _SIGNED),
            0x56: _Form(Kind.CALL, _UNSIGNED + _SIGNED),
            0x57: _Form(Kind.TAG, _STR + _SIGNED),
            0x58: _Form(Kind.ARRAY, _SIGNED),
            0x59: _Form(Kind.FAIL, _SIGNED + _SIGNED),
            0x5A: _Form(Kind.LINE, _SIGNED),
        }
    )

    for lo, name in enumerate(constants.PATTERN_NAMES):
        forms[(constants.CATEGORY_PATT << 4) | lo] = _Form(Kind.PATT, operator=name)

    forms.update(
        {
            0x70: _Form(Kind.CALL_READ),
            0x71: _Form(Kind.CALL_WRITE),
            0x72: _Form(Kind.CALL_LENGTH),
            0x73: _Form(Kind.CALL_STRING),
            0x74: _Form(Kind.CALL_BARRAY, _SIGNED),
        }
    )
    return forms


_FORMS: dict[int, _Form] = _build_forms()


def _decode_fixed(
    image: BytecodeImage, offset: int, form: _Form
) -> tuple[Instruction, int]:
    length = form.length
    raw = image.read_bytes(offset, length)

    operands: list[int] = []
    tag: str | None = None
    field_offset = offset + constants.OPCODE_SIZE
    for code in form.layout:
        if code == _STR:
            tag = image.read_string(image.read_u32(field_offset))
        elif code == _UNSIGNED:
            operands.append(image.read_u32(field_offset))
        else:
            operands.append(image.read_i32(field_offset))
        field_offset += constants.WORD_SIZE

    instruction = Instruction(
        kind=form.kind,
        raw=raw,
        operands=tuple(operands),
        tag=tag,
        operator=form.operator,
        location=form.location,
    )
    return instruction, length


def _decode_closure(image: BytecodeImage, offset: int) -> tuple[Instruction, int]:
    """Decode CLOSURE: fixed prefix first, then the capture tail it sizes."""
    entry = image.read_u32(offset + constants.OPCODE_SIZE)
    n_captures = image.read_u32(offset + constants.CLOSURE_COUNT_OFFSET)

    length = constants.CLOSURE_FIXED_SIZE + constants.CAPTURE_DESCRIPTOR_SIZE * n_captures
    remaining = image.code_size - offset
    if length > remaining:
        raise UnexpectedEnd(
            f"CLOSURE at code offset {offset:#x} declares {n_captures} captures "
            f"({length} bytes) but only {remaining} bytes remain"
        )

    captures: list[Capture] = []
    field_offset = offset + constants.CLOSURE_FIXED_SIZE
    for _ in range(n_captures):
        location_code = image.read_byte(field_offset)
        try:
            location = Location(location_code)
        except ValueError as exc:
            raise InvalidOpcode(
                f"Invalid CLOSURE capture location {location_code} at code "
                f"offset {field_offset:#x}"
            ) from exc
        index = image.read_i32(field_offset + constants.OPCODE_SIZE)
        captures.append(Capture(location=location, index=index))
        field_offset += constants.CAPTURE_DESCRIPTOR_SIZE

    instruction = Instruction(
        kind=Kind.CLOSURE,
        raw=image.read_bytes(offset, length),
        operands=(entry, n_captures),
        captures=tuple(captures),
    )
    return instruction, length


def decode(image: BytecodeImage, offset: int) -> tuple[Instruction, int]:
    """Decode the instruction starting at code *offset*.

    Returns:
        The decoded instruction and its length in bytes.

    Raises:
        InvalidOpcode: the opcode byte (or a closure capture location) is not
            a recognised form.
        UnexpectedEnd: any part of the instruction lies past the code section.
        StringOutOfBounds: a string operand names an offset outside the pool.
    """
    opcode = image.read_byte(offset)
    if opcode == constants.CLOSURE_OPCODE:
        return _decode_closure(image, offset)

    form = _FORMS.get(opcode)
    if form is None:
        raise InvalidOpcode(
            f"Invalid opcode {opcode:#04x} (category {opcode >> 4}, "
            f"sub-code {opcode & 0xF}) at code offset {offset:#x}"
        )
    return _decode_fixed(image, offset, form)


def disassemble(image: BytecodeImage) -> Iterator[tuple[int, Instruction]]:
    """Walk the code section linearly, yielding ``(offset, instruction)``.

    Stops at the STOP sentinel, which is not yielded. Reaching the end of
    the code section without a sentinel raises ``UnexpectedEnd``.
    """
    offset = 0
    while True:
        if offset >= image.code_size:
            raise UnexpectedEnd(
                f"Code section ended at offset {offset:#x} without a stop marker"
            )
        instruction, length = decode(image, offset)
        if instruction.kind == Kind.STOP:
            logger.debug("Stop marker at code offset %#x", offset)
            return
        yield offset, instruction
        offset += length
