"""
Instruction Family Encoders
===========================

One encoder per instruction family. Each takes already-resolved field
values (condition code, register indices, offsets) and returns the
instruction as a 32-character string of ``0``/``1``, bit 31 first.

Formats
-------
::

    Branch             cond 101 L offset24
    Branch/exchange    cond 0001 0010 1111 1111 1111 0001 Rm
    Data processing    cond 00 I opcode S Rn Rd operand2
    Single transfer    cond 01 I P U B W L Rn Rd offset12
    Swap               0000 0001 0000 Rn Rd 0000 1001 Rm
    Software interrupt 0000 1111 imm24

Every field is range-checked by pack_fields(); a value that does not fit
raises FieldOverflowError and nothing is returned, so a partially filled
word can never reach the object stream.

Operand2
--------
Register form (12 bits)::

    shift_imm(5) shift_type(2) 0 Rm(4)

Immediate form (12 bits)::

    rotate(4) imm8(8)        value = imm8 ROR (2 * rotate)
"""

from typing import Optional

from arm_asm.cpu import ConditionCode, Opcode, ShiftType
from arm_asm.errors import FieldOverflowError


WORD_BITS = 32

BRANCH_OFFSET_BITS = 24
SWI_IMMEDIATE_BITS = 24
TRANSFER_OFFSET_BITS = 12

# Fixed middle bits of BX: 0001 0010 1111 1111 1111 0001
BRANCH_EXCHANGE_PATTERN = 0b000100101111111111110001

# Leading nibble of the swap and software-interrupt formats
FIXED_CONDITION = 0b0000


# =============================================================================
# Bit-Field Packing
# =============================================================================

def pack_fields(*fields: tuple[int, int, str]) -> str:
    """
    Concatenate (value, width, name) fields, most significant first.

    Args:
        fields: Tuples of field value, bit width and field name

    Returns:
        32-character binary string

    Raises:
        FieldOverflowError: If a value is negative or wider than its field
    """
    word = 0
    total = 0
    for value, width, name in fields:
        if value < 0 or value >= (1 << width):
            raise FieldOverflowError(name, value, width)
        word = (word << width) | value
        total += width

    if total != WORD_BITS:
        raise ValueError(f"instruction format is {total} bits, expected {WORD_BITS}")

    return format(word, f"0{WORD_BITS}b")


def to_twos_complement(value: int, width: int, name: str) -> int:
    """
    Encode a signed value in width bits.

    Raises:
        FieldOverflowError: If value is outside the signed range
    """
    low = -(1 << (width - 1))
    high = (1 << (width - 1)) - 1
    if not low <= value <= high:
        raise FieldOverflowError(
            name, value, width,
            hint=f"signed range is {low} to {high}",
        )
    return value & ((1 << width) - 1)


def encode_rotated_immediate(value: int) -> tuple[int, int]:
    """
    Find the (rotate, imm8) pair for a data-processing immediate.

    The smallest rotation is chosen. Negative values are taken as their
    32-bit two's-complement pattern.

    Returns:
        Tuple of (rotate 0-15, imm8 0-255)

    Raises:
        FieldOverflowError: If value has no 8-bit rotated form
    """
    pattern = value & 0xFFFFFFFF
    if value < -(1 << 31) or value > 0xFFFFFFFF:
        raise FieldOverflowError("immediate", value, 32)

    for rotate in range(16):
        # Rotating left by 2*rotate undoes the ROR applied by the CPU
        shift = 2 * rotate
        imm8 = ((pattern << shift) | (pattern >> (WORD_BITS - shift))) & 0xFFFFFFFF
        if imm8 < 0x100:
            return rotate, imm8

    raise FieldOverflowError(
        "rotated immediate", value, 8,
        hint="immediates must be an 8-bit value rotated right by an even amount",
    )


def register_operand2(rm: int, shift: ShiftType = ShiftType.LSL, amount: int = 0) -> int:
    """Build the 12-bit register form of Operand2."""
    if not 0 <= amount <= 31:
        raise FieldOverflowError("shift amount", amount, 5)
    if not 0 <= rm <= 15:
        raise FieldOverflowError("Rm", rm, 4)
    return (amount << 7) | (int(shift) << 5) | rm


def immediate_operand2(value: int) -> int:
    """Build the 12-bit rotated-immediate form of Operand2."""
    rotate, imm8 = encode_rotated_immediate(value)
    return (rotate << 8) | imm8


# =============================================================================
# Family Encoders
# =============================================================================

def encode_branch(condition: ConditionCode, link: bool, offset: int) -> str:
    """
    Encode B/BL.

    Args:
        condition: Condition code
        link: True for BL
        offset: Signed word distance from the instruction after the branch
    """
    return pack_fields(
        (int(condition), 4, "condition"),
        (0b101, 3, "branch marker"),
        (int(link), 1, "link"),
        (to_twos_complement(offset, BRANCH_OFFSET_BITS, "branch offset"),
         BRANCH_OFFSET_BITS, "branch offset"),
    )


def encode_branch_exchange(condition: ConditionCode, rm: int) -> str:
    """Encode BX Rm."""
    return pack_fields(
        (int(condition), 4, "condition"),
        (BRANCH_EXCHANGE_PATTERN, 24, "BX pattern"),
        (rm, 4, "Rm"),
    )


def encode_data_processing(
    condition: ConditionCode,
    opcode: Opcode,
    set_flags: bool,
    rn: int,
    rd: int,
    operand2: int,
    immediate: bool,
) -> str:
    """
    Encode a data-processing instruction.

    Args:
        condition: Condition code
        opcode: Operation selector
        set_flags: S bit
        rn: First operand register index
        rd: Destination register index
        operand2: 12-bit Operand2 (see register_operand2/immediate_operand2)
        immediate: I bit; True when operand2 is a rotated immediate
    """
    return pack_fields(
        (int(condition), 4, "condition"),
        (0b00, 2, "data-processing marker"),
        (int(immediate), 1, "I"),
        (int(opcode), 4, "opcode"),
        (int(set_flags), 1, "S"),
        (rn, 4, "Rn"),
        (rd, 4, "Rd"),
        (operand2, 12, "operand2"),
    )


def encode_single_data_transfer(
    condition: ConditionCode,
    load: bool,
    rd: int,
    rn: int,
    offset: int = 0,
    *,
    pre_index: bool = True,
    up: bool = True,
    byte: bool = False,
    writeback: bool = False,
    register_offset: Optional[int] = None,
) -> str:
    """
    Encode LDR/STR.

    Args:
        condition: Condition code
        load: L bit; True for LDR
        rd: Source/destination register index
        rn: Base register index
        offset: Unsigned 12-bit immediate offset
        pre_index: P bit
        up: U bit; False subtracts the offset
        byte: B bit
        writeback: W bit
        register_offset: Index of an offset register (sets I); overrides offset
    """
    if register_offset is not None:
        immediate_flag = 1
        operand2 = register_operand2(register_offset)
    else:
        immediate_flag = 0
        operand2 = offset

    return pack_fields(
        (int(condition), 4, "condition"),
        (0b01, 2, "transfer marker"),
        (immediate_flag, 1, "I"),
        (int(pre_index), 1, "P"),
        (int(up), 1, "U"),
        (int(byte), 1, "B"),
        (int(writeback), 1, "W"),
        (int(load), 1, "L"),
        (rn, 4, "Rn"),
        (rd, 4, "Rd"),
        (operand2, TRANSFER_OFFSET_BITS, "transfer offset"),
    )


def encode_swap(rd: int, rm: int, rn: int) -> str:
    """
    Encode SWP Rd, Rm, [Rn].

    Args:
        rd: Destination register index
        rm: Source register index
        rn: Base register index
    """
    return pack_fields(
        (FIXED_CONDITION, 4, "condition"),
        (0b00010000, 8, "swap marker"),
        (rn, 4, "Rn"),
        (rd, 4, "Rd"),
        (0b00001001, 8, "swap pattern"),
        (rm, 4, "Rm"),
    )


def encode_software_interrupt(value: int) -> str:
    """Encode SWI/SVC with a 24-bit comment field."""
    return pack_fields(
        (FIXED_CONDITION, 4, "condition"),
        (0b1111, 4, "SWI marker"),
        (value, SWI_IMMEDIATE_BITS, "SWI immediate"),
    )
