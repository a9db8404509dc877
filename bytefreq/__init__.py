"""Stack-machine bytecode instruction frequency analyser."""

from .api import load_image, frequency_report, dump_listing  # noqa: F401
from .decoder import decode, disassemble  # noqa: F401
from .errors import (  # noqa: F401
    BytecodeError,
    InvalidOpcode,
    MalformedHeader,
    StringOutOfBounds,
    UnexpectedEnd,
    UnterminatedStringPool,
)
from .formatter import format_instruction  # noqa: F401
from .image import BytecodeImage  # noqa: F401
from .stats import count_instructions, render_report, scan  # noqa: F401
