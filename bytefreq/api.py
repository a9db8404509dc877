"""Composable API functions for bytecode frequency analysis.

Each function corresponds to a CLI workflow (default report, --listing)
but is callable programmatically without argparse.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .config import ReportConfig
from .decoder import disassemble
from .formatter import format_instruction
from .image import BytecodeImage
from .stats import render_report, scan
from . import constants

logger = logging.getLogger(__name__)


def load_image(path: str | Path) -> BytecodeImage:
    """Read a bytecode file fully into memory and load it.

    Raises:
        OSError: the file cannot be read.
        BytecodeError: the header or string pool is malformed.
    """
    logger.info("Loading bytecode image %s", path)
    return BytecodeImage.load(Path(path).read_bytes())


def frequency_report(image: BytecodeImage, config: ReportConfig = ReportConfig()) -> str:
    """Scan *image* and return the sorted frequency report.

    Args:
        image: A loaded bytecode image.
        config: Report options; ``top`` limits the number of lines.

    Returns:
        A multi-line string, one ``<count> x <instruction>`` line per entry.
    """
    entries = scan(image)
    if config.top > 0:
        logger.info("Keeping top %d of %d entries", config.top, len(entries))
        entries = entries[: config.top]
    return render_report(entries)


def dump_listing(image: BytecodeImage) -> str:
    """Return a linear listing of the code section up to the stop marker.

    Each line is the instruction's code offset in hex followed by its text.
    Nothing is returned if decoding fails part-way.
    """
    lines = [
        f"{offset:0{constants.ADDRESS_HEX_WIDTH}x}: {format_instruction(inst)}"
        for offset, inst in disassemble(image)
    ]
    return "\n".join(lines)
