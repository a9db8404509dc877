"""Instruction frequency counting and report rendering."""

from __future__ import annotations

import logging
from collections import Counter

from .decoder import disassemble
from .formatter import format_instruction
from .image import BytecodeImage
from .ir import Instruction
from . import constants

logger = logging.getLogger(__name__)


def count_instructions(image: BytecodeImage) -> Counter[Instruction]:
    """Return a frequency map of distinct instructions in the code section.

    Instructions are keyed by their raw encoding. Any decode failure
    propagates before a map is returned.
    """
    counts = Counter(inst for _, inst in disassemble(image))
    logger.info(
        "Counted %d instructions (%d distinct)", sum(counts.values()), len(counts)
    )
    return counts


def scan(image: BytecodeImage) -> list[tuple[Instruction, int]]:
    """Count instructions and order them for reporting.

    Entries are sorted by count descending, then by raw encoding ascending.
    """
    counts = count_instructions(image)
    return sorted(counts.items(), key=lambda entry: (-entry[1], entry[0].raw))


def render_report(entries: list[tuple[Instruction, int]]) -> str:
    """Render ``<count> x <instruction>`` lines, one per entry."""
    return "\n".join(
        f"{count}{constants.REPORT_SEPARATOR}{format_instruction(inst)}"
        for inst, count in entries
    )
