# =============================================================================
# test_encoders.py - Family Encoder Tests
# =============================================================================
# Tests for the instruction family encoders and bit-field helpers.
#
# Test coverage includes:
#   - Field packing and range checks
#   - Rotated immediates and register Operand2
#   - Branch, BX, data-processing, transfer, swap and SWI formats
# =============================================================================

import pytest
from arm_asm.assembler.encoders import (
    encode_branch,
    encode_branch_exchange,
    encode_data_processing,
    encode_rotated_immediate,
    encode_single_data_transfer,
    encode_software_interrupt,
    encode_swap,
    immediate_operand2,
    pack_fields,
    register_operand2,
    to_twos_complement,
)
from arm_asm.cpu import ConditionCode, Opcode, ShiftType
from arm_asm.errors import FieldOverflowError


AL = ConditionCode.AL


# =============================================================================
# Bit-Field Helpers
# =============================================================================

class TestPackFields:
    """Concatenation of range-checked fields."""

    def test_pack(self):
        bits = pack_fields((0b1010, 4, "a"), (0, 27, "b"), (1, 1, "c"))
        assert bits == "1010" + "0" * 27 + "1"
        assert len(bits) == 32

    def test_overflow(self):
        with pytest.raises(FieldOverflowError) as exc_info:
            pack_fields((16, 4, "Rd"), (0, 28, "rest"))
        assert exc_info.value.field == "Rd"
        assert exc_info.value.width == 4

    def test_negative(self):
        with pytest.raises(FieldOverflowError):
            pack_fields((-1, 4, "Rd"), (0, 28, "rest"))

    def test_wrong_total_width(self):
        with pytest.raises(ValueError):
            pack_fields((0, 4, "a"), (0, 4, "b"))

    def test_twos_complement(self):
        assert to_twos_complement(-1, 24, "offset") == 0xFFFFFF
        assert to_twos_complement(5, 24, "offset") == 5
        with pytest.raises(FieldOverflowError):
            to_twos_complement(1 << 23, 24, "offset")


class TestOperand2:
    """Immediate and register forms of Operand2."""

    @pytest.mark.parametrize("value,rotate,imm8", [
        (0, 0, 0),
        (255, 0, 0xFF),
        (0x3FC, 15, 0xFF),
        (0x104, 15, 0x41),
        (0xFF000000, 4, 0xFF),
        (0x1000, 10, 0x01),
    ])
    def test_rotated_immediate(self, value, rotate, imm8):
        assert encode_rotated_immediate(value) == (rotate, imm8)

    @pytest.mark.parametrize("value", [0x101, 0x12345678, -1])
    def test_unencodable_immediate(self, value):
        with pytest.raises(FieldOverflowError):
            encode_rotated_immediate(value)

    def test_immediate_operand2(self):
        assert immediate_operand2(0x3FC) == 0xFFF

    def test_register_operand2(self):
        assert register_operand2(2) == 2
        assert register_operand2(2, ShiftType.LSL, 2) == 0x102
        assert register_operand2(3, ShiftType.ROR, 31) == 0xFE3

    def test_shift_amount_range(self):
        with pytest.raises(FieldOverflowError):
            register_operand2(1, ShiftType.LSL, 32)


# =============================================================================
# Family Encoders
# =============================================================================

class TestBranchEncoders:
    """B, BL and BX."""

    def test_branch_zero_offset(self):
        assert encode_branch(AL, False, 0) == "11101010" + "0" * 24

    def test_branch_link_backwards(self):
        bits = encode_branch(ConditionCode.EQ, True, -2)
        assert bits == "00001011" + "1" * 23 + "0"

    def test_branch_out_of_range(self):
        with pytest.raises(FieldOverflowError):
            encode_branch(AL, False, 1 << 23)

    def test_branch_exchange(self):
        bits = encode_branch_exchange(AL, 14)
        assert bits == "1110" + "000100101111111111110001" + "1110"


class TestDataProcessingEncoder:
    """cond 00 I opcode S Rn Rd operand2."""

    def test_mov_register(self):
        bits = encode_data_processing(AL, Opcode.MOV, False, 0, 1, register_operand2(2), False)
        assert bits == "11100001101000000001000000000010"

    def test_add_immediate(self):
        bits = encode_data_processing(AL, Opcode.ADD, False, 1, 0, immediate_operand2(255), True)
        assert bits == "11100010100000010000000011111111"

    def test_set_flags_bit(self):
        bits = encode_data_processing(AL, Opcode.CMP, True, 3, 0, register_operand2(4), False)
        assert bits[11] == "1"
        assert bits[7:11] == "1010"


class TestTransferEncoders:
    """LDR/STR, SWP and SWI."""

    def test_load_symbol_offset(self):
        bits = encode_single_data_transfer(AL, True, 0, 0, 16)
        assert bits == "11100101100100000000000000010000"

    def test_store_byte_writeback(self):
        bits = encode_single_data_transfer(
            AL, False, 2, 3, 4, byte=True, writeback=True
        )
        # cond 01 I P U B W L Rn Rd offset
        assert bits == "1110" + "01" + "0" + "1" + "1" + "1" + "1" + "0" + "0011" + "0010" + "000000000100"

    def test_post_index_down(self):
        bits = encode_single_data_transfer(AL, True, 0, 1, 4, pre_index=False, up=False)
        assert bits[7] == "0"
        assert bits[8] == "0"

    def test_register_offset_sets_i(self):
        bits = encode_single_data_transfer(AL, True, 0, 1, register_offset=2)
        assert bits[6] == "1"
        assert bits[-4:] == "0010"

    def test_offset_overflow(self):
        with pytest.raises(FieldOverflowError):
            encode_single_data_transfer(AL, True, 0, 0, 0x1000)

    def test_swap(self):
        assert encode_swap(0, 1, 2) == "00000001000000100000000010010001"

    def test_software_interrupt(self):
        assert encode_software_interrupt(0xA) == "00001111000000000000000000001010"

    def test_software_interrupt_maximum(self):
        assert encode_software_interrupt(0xFFFFFF) == "00001111" + "1" * 24

    def test_software_interrupt_overflow(self):
        with pytest.raises(FieldOverflowError):
            encode_software_interrupt(0x1000000)
