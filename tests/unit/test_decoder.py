"""Tests for the instruction decoder: dispatch, lengths and bounds."""

import pytest

from bytefreq.decoder import decode, disassemble
from bytefreq.errors import InvalidOpcode, StringOutOfBounds, UnexpectedEnd
from bytefreq.ir import Capture, Kind, Location
from tests.unit.conftest import STOP, i32, u32

FIXED_FORMS = [
    (0x01, Kind.BINOP, 1),
    (0x0D, Kind.BINOP, 1),
    (0x10, Kind.CONST, 5),
    (0x11, Kind.STRING, 5),
    (0x12, Kind.SEXP, 9),
    (0x13, Kind.STI, 1),
    (0x14, Kind.STA, 1),
    (0x15, Kind.JMP, 5),
    (0x16, Kind.END, 1),
    (0x17, Kind.RET, 1),
    (0x18, Kind.DROP, 1),
    (0x19, Kind.DUP, 1),
    (0x1A, Kind.SWAP, 1),
    (0x1B, Kind.ELEM, 1),
    (0x20, Kind.LD, 5),
    (0x23, Kind.LD, 5),
    (0x31, Kind.LDA, 5),
    (0x42, Kind.ST, 5),
    (0x50, Kind.CJMPZ, 5),
    (0x51, Kind.CJMPNZ, 5),
    (0x52, Kind.BEGIN, 9),
    (0x53, Kind.CBEGIN, 9),
    (0x55, Kind.CALLC, 5),
    (0x56, Kind.CALL, 9),
    (0x57, Kind.TAG, 9),
    (0x58, Kind.ARRAY, 5),
    (0x59, Kind.FAIL, 9),
    (0x5A, Kind.LINE, 5),
    (0x60, Kind.PATT, 1),
    (0x66, Kind.PATT, 1),
    (0x70, Kind.CALL_READ, 1),
    (0x71, Kind.CALL_WRITE, 1),
    (0x72, Kind.CALL_LENGTH, 1),
    (0x73, Kind.CALL_STRING, 1),
    (0x74, Kind.CALL_BARRAY, 5),
    (0xF0, Kind.STOP, 1),
    (0xFF, Kind.STOP, 1),
]

INVALID_OPCODES = [
    0x00,
    0x0E,
    0x0F,
    0x1C,
    0x1F,
    0x24,
    0x34,
    0x4F,
    0x5B,
    0x5F,
    0x67,
    0x6F,
    0x75,
    0x7F,
    0x80,
    0xA3,
    0xE0,
]


class TestFixedForms:
    @pytest.mark.parametrize("opcode,kind,length", FIXED_FORMS)
    def test_kind_and_length(self, make_image, opcode, kind, length):
        code = bytes([opcode]) + b"\x00" * (length - 1) + STOP
        image = make_image(code, strings=("cons",))

        inst, size = decode(image, 0)

        assert inst.kind == kind
        assert size == length
        assert inst.length == length
        assert inst.raw == code[:length]

    def test_binop_operators(self, make_image):
        image = make_image(bytes(range(0x01, 0x0E)) + STOP)
        operators = [decode(image, offset)[0].operator for offset in range(13)]
        assert operators == [
            "+", "-", "*", "/", "%", "<", "<=", ">", ">=", "==", "!=", "&&", "!!"
        ]

    def test_pattern_names(self, make_image):
        image = make_image(bytes(range(0x60, 0x67)) + STOP)
        names = [decode(image, offset)[0].operator for offset in range(7)]
        assert names == ["=str", "#string", "#array", "#sexp", "#ref", "#val", "#fun"]

    @pytest.mark.parametrize(
        "lo,location",
        [
            (0, Location.GLOBAL),
            (1, Location.LOCAL),
            (2, Location.ARGUMENT),
            (3, Location.CAPTURED),
        ],
    )
    def test_memory_location_classes(self, make_image, lo, location):
        image = make_image(bytes([0x40 | lo]) + i32(12) + STOP)
        inst, _ = decode(image, 0)
        assert inst.kind == Kind.ST
        assert inst.location == location
        assert inst.operands == (12,)

    def test_const_is_signed(self, make_image):
        inst, _ = decode(make_image(b"\x10" + i32(-5) + STOP), 0)
        assert inst.operands == (-5,)

    def test_jump_target_is_unsigned(self, make_image):
        inst, _ = decode(make_image(b"\x15" + u32(0xDEADBEEF) + STOP), 0)
        assert inst.operands == (0xDEADBEEF,)

    def test_string_operand_is_not_resolved(self, make_image):
        inst, _ = decode(make_image(b"\x11" + i32(4) + STOP, strings=("abc",)), 0)
        assert inst.kind == Kind.STRING
        assert inst.operands == (4,)
        assert inst.tag is None

    def test_sexp_resolves_tag(self, make_image):
        image = make_image(b"\x12" + u32(4) + i32(2) + STOP, strings=("Nil", "Cons"))
        inst, _ = decode(image, 0)
        assert inst.tag == "Cons"
        assert inst.operands == (2,)

    def test_tag_resolves_tag(self, make_image):
        image = make_image(b"\x57" + u32(0) + i32(0) + STOP, strings=("Nil",))
        inst, _ = decode(image, 0)
        assert inst.kind == Kind.TAG
        assert inst.tag == "Nil"
        assert inst.operands == (0,)

    def test_sexp_tag_outside_pool(self, make_image):
        image = make_image(b"\x12" + u32(9) + i32(2) + STOP, strings=("Nil",))
        with pytest.raises(StringOutOfBounds):
            decode(image, 0)

    def test_call_address_and_arity(self, make_image):
        inst, _ = decode(make_image(b"\x56" + u32(0x2A) + i32(3) + STOP), 0)
        assert inst.operands == (0x2A, 3)

    def test_fail_line_and_column(self, make_image):
        inst, _ = decode(make_image(b"\x59" + i32(10) + i32(4) + STOP), 0)
        assert inst.operands == (10, 4)

    def test_decode_at_nonzero_offset(self, make_image):
        image = make_image(b"\x18" + b"\x58" + i32(7) + STOP)
        inst, size = decode(image, 1)
        assert inst.kind == Kind.ARRAY
        assert inst.operands == (7,)
        assert size == 5


class TestInvalidOpcodes:
    @pytest.mark.parametrize("opcode", INVALID_OPCODES)
    def test_unrecognised_opcode(self, make_image, opcode):
        image = make_image(bytes([opcode]) + b"\x00" * 8 + STOP)
        with pytest.raises(InvalidOpcode):
            decode(image, 0)

    def test_builtin_sub_code_five(self, make_image):
        with pytest.raises(InvalidOpcode):
            decode(make_image(b"\x75" + STOP), 0)


class TestTruncation:
    def test_truncated_const(self, make_image):
        image = make_image(b"\x10\x01\x00\x00")
        with pytest.raises(UnexpectedEnd):
            decode(image, 0)

    def test_truncated_two_word_form(self, make_image):
        image = make_image(b"\x52" + i32(1) + b"\x00\x00")
        with pytest.raises(UnexpectedEnd):
            decode(image, 0)

    def test_truncated_sexp_before_string_lookup(self, make_image):
        image = make_image(b"\x12" + u32(0) + b"\x01", strings=("Nil",))
        with pytest.raises(UnexpectedEnd):
            decode(image, 0)

    def test_offset_past_end(self, make_image):
        image = make_image(STOP)
        with pytest.raises(UnexpectedEnd):
            decode(image, 1)


class TestClosure:
    def test_no_captures(self, make_image):
        image = make_image(b"\x54" + u32(0x30) + u32(0) + STOP)
        inst, size = decode(image, 0)
        assert inst.kind == Kind.CLOSURE
        assert size == 9
        assert inst.operands == (0x30, 0)
        assert inst.captures == ()

    def test_captures_extend_length(self, make_image):
        code = b"\x54" + u32(0x30) + u32(2) + b"\x01" + i32(3) + b"\x03" + i32(0)
        image = make_image(code + STOP)

        inst, size = decode(image, 0)

        assert size == 19
        assert inst.raw == code
        assert inst.captures == (
            Capture(location=Location.LOCAL, index=3),
            Capture(location=Location.CAPTURED, index=0),
        )

    def test_missing_capture_descriptor(self, make_image):
        image = make_image(b"\x54" + u32(0x10) + u32(2) + b"\x01" + i32(3))
        with pytest.raises(UnexpectedEnd):
            decode(image, 0)

    def test_truncated_capture_count(self, make_image):
        image = make_image(b"\x54" + u32(0x10) + b"\x02\x00")
        with pytest.raises(UnexpectedEnd):
            decode(image, 0)

    def test_negative_capture_count(self, make_image):
        image = make_image(b"\x54" + u32(0x10) + i32(-1) + STOP)
        with pytest.raises(UnexpectedEnd):
            decode(image, 0)

    def test_invalid_capture_location(self, make_image):
        image = make_image(b"\x54" + u32(0x10) + u32(1) + b"\x04" + i32(0) + STOP)
        with pytest.raises(InvalidOpcode):
            decode(image, 0)


class TestIdentity:
    def test_identical_encodings_are_equal(self, make_image):
        image = make_image(b"\x10" + i32(1) + b"\x10" + i32(1) + STOP)
        first, _ = decode(image, 0)
        second, _ = decode(image, 5)
        assert first == second
        assert hash(first) == hash(second)

    def test_different_encodings_differ(self, make_image):
        image = make_image(b"\x10" + i32(1) + b"\x10" + i32(2) + STOP)
        first, _ = decode(image, 0)
        second, _ = decode(image, 5)
        assert first != second
        assert first < second


class TestDisassemble:
    def test_yields_offsets_until_stop(self, make_image):
        image = make_image(b"\x18" + b"\x10" + i32(3) + b"\x17" + STOP + b"\x18")
        listing = [(offset, inst.kind) for offset, inst in disassemble(image)]
        assert listing == [(0, Kind.DROP), (1, Kind.CONST), (6, Kind.RET)]

    def test_stop_only(self, make_image):
        assert list(disassemble(make_image(STOP))) == []

    def test_missing_stop_marker(self, make_image):
        image = make_image(b"\x18\x18")
        with pytest.raises(UnexpectedEnd):
            list(disassemble(image))

    def test_offsets_are_contiguous(self, make_image):
        code = (
            b"\x52" + i32(0) + i32(1)
            + b"\x54" + u32(0) + u32(1) + b"\x00" + i32(2)
            + b"\x21" + i32(0)
            + b"\x01"
            + b"\x17"
        )
        image = make_image(code + STOP)
        expected_offset = 0
        for offset, inst in disassemble(image):
            assert offset == expected_offset
            expected_offset += inst.length
        assert expected_offset == len(code)
