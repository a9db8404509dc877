"""Shared helpers for building synthetic bytecode images."""

import struct

import pytest

from bytefreq.image import BytecodeImage

STOP = b"\xf0"


def encode_file(
    code: bytes,
    strings: tuple[str, ...] = (),
    public_symbols: int = 0,
    global_area_size: int = 0,
) -> bytes:
    """Assemble header, symbol table, string pool and *code* into file bytes."""
    pool = b"".join(s.encode("utf-8") + b"\0" for s in strings)
    header = struct.pack("<III", len(pool), global_area_size, public_symbols)
    symbols = b"\0" * (8 * public_symbols)
    return header + symbols + pool + code


def i32(value: int) -> bytes:
    return struct.pack("<i", value)


def u32(value: int) -> bytes:
    return struct.pack("<I", value)


@pytest.fixture
def make_image():
    """Factory fixture: ``make_image(code, strings=(), public_symbols=0)``."""

    def _make(code: bytes, strings: tuple[str, ...] = (), public_symbols: int = 0):
        return BytecodeImage.load(encode_file(code, strings, public_symbols))

    return _make


@pytest.fixture
def write_bytecode(tmp_path):
    """Factory fixture writing file bytes to a temp path and returning it."""

    def _write(data: bytes, name: str = "program.bc"):
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write
