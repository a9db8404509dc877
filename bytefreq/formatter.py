"""Canonical text rendering of decoded instructions."""

from __future__ import annotations

from typing import Callable

from .errors import InvalidOpcode
from .ir import Instruction, Kind
from . import constants


def _hex(address: int) -> str:
    return f"0x{address:0{constants.ADDRESS_HEX_WIDTH}x}"


def _bare(inst: Instruction) -> str:
    return inst.kind.value


def _space_int(inst: Instruction) -> str:
    return f"{inst.kind.value} {inst.operands[0]}"


def _tab_int(inst: Instruction) -> str:
    return f"{inst.kind.value}\t{inst.operands[0]}"


def _tab_int_pair(inst: Instruction) -> str:
    return f"{inst.kind.value}\t{inst.operands[0]} {inst.operands[1]}"


def _tab_address(inst: Instruction) -> str:
    return f"{inst.kind.value}\t{_hex(inst.operands[0])}"


def _tagged(inst: Instruction) -> str:
    if inst.tag is None:
        raise InvalidOpcode(f"{inst.kind.value} without a tag string")
    return f"{inst.kind.value}\t{inst.tag} {inst.operands[0]}"


def _memory(inst: Instruction) -> str:
    if inst.location is None:
        raise InvalidOpcode(f"{inst.kind.value} without a location class")
    return f"{inst.kind.value}\t{inst.location.letter}({inst.operands[0]})"


def _closure(inst: Instruction) -> str:
    captures = "".join(f" {c.location.letter}({c.index})" for c in inst.captures)
    return f"CLOSURE\t{_hex(inst.operands[0])}{captures}"


def _call(inst: Instruction) -> str:
    return f"CALL\t{_hex(inst.operands[0])} {inst.operands[1]}"


def _binop(inst: Instruction) -> str:
    if inst.operator not in constants.BINOP_SYMBOLS:
        raise InvalidOpcode(f"Invalid BINOP operator {inst.operator!r}")
    return f"BINOP {inst.operator}"


def _pattern(inst: Instruction) -> str:
    if inst.operator not in constants.PATTERN_NAMES:
        raise InvalidOpcode(f"Invalid PATT pattern {inst.operator!r}")
    return f"PATT\t{inst.operator}"


def _builtin(inst: Instruction) -> str:
    return f"CALL\t{inst.kind.value}"


def _builtin_array(inst: Instruction) -> str:
    return f"CALL\t{inst.kind.value}\t{inst.operands[0]}"


_RENDERERS: dict[Kind, Callable[[Instruction], str]] = {
    Kind.STOP: lambda inst: constants.STOP_TEXT,
    Kind.BINOP: _binop,
    Kind.CONST: _space_int,
    Kind.STRING: _space_int,
    Kind.SEXP: _tagged,
    Kind.STI: _bare,
    Kind.STA: _bare,
    Kind.JMP: _tab_address,
    Kind.END: _bare,
    Kind.RET: _bare,
    Kind.DROP: _bare,
    Kind.DUP: _bare,
    Kind.SWAP: _bare,
    Kind.ELEM: _bare,
    Kind.LD: _memory,
    Kind.LDA: _memory,
    Kind.ST: _memory,
    Kind.CJMPZ: _tab_address,
    Kind.CJMPNZ: _tab_address,
    Kind.BEGIN: _tab_int_pair,
    Kind.CBEGIN: _tab_int_pair,
    Kind.CLOSURE: _closure,
    Kind.CALLC: _tab_int,
    Kind.CALL: _call,
    Kind.TAG: _tagged,
    Kind.ARRAY: _tab_int,
    Kind.FAIL: _tab_int_pair,
    Kind.LINE: _tab_int,
    Kind.PATT: _pattern,
    Kind.CALL_READ: _builtin,
    Kind.CALL_WRITE: _builtin,
    Kind.CALL_LENGTH: _builtin,
    Kind.CALL_STRING: _builtin,
    Kind.CALL_BARRAY: _builtin_array,
}


def format_instruction(inst: Instruction) -> str:
    """Render *inst* as ``MNEMONIC<tab>operands``.

    Raises ``InvalidOpcode`` if the instruction lacks the operands its
    kind requires.
    """
    renderer = _RENDERERS.get(inst.kind)
    if renderer is None:
        raise InvalidOpcode(f"No rendering for instruction kind {inst.kind.value}")
    try:
        return renderer(inst)
    except IndexError as exc:
        raise InvalidOpcode(
            f"{inst.kind.value} is missing operands: {inst.operands}"
        ) from exc
