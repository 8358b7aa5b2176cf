"""
ARM Instruction Subset Definition
=================================

This module holds the static architecture tables for the supported subset
of the 32-bit ARM instruction set: condition codes, data-processing
opcodes, register names, shift types, and the mnemonic decomposition used
by the instruction classifier.

Supported Families
------------------
Checked in this order when a mnemonic is classified:

1. **BL**  Branch with link          ``BL{cond} label``
2. **BX**  Branch and exchange       ``BX{cond} Rm``
3. **B**   Branch                    ``B{cond} label``
4. **Data processing**               ``ADD{cond}{S} Rd, Rn, Op2``
5. **Single data transfer**          ``LDR{cond}{B} Rd, addr``
6. **Software interrupt**            ``SWI &imm24`` / ``SVC &imm24``
7. **Swap**                          ``SWP Rd, Rm, [Rn]``

The order matters: ``BLS`` is ``B`` + ``LS`` and ``BLEQ`` is ``BL`` + ``EQ``.
A decomposition is only accepted when the rest of the mnemonic is a valid
suffix for that family, so the longer base names are tried first.

Condition Codes
---------------
| Code | Value | Meaning                      |
|------|-------|------------------------------|
| EQ   | 0000  | Z set                        |
| NE   | 0001  | Z clear                      |
| CS   | 0010  | C set (alias HS)             |
| CC   | 0011  | C clear (alias LO)           |
| MI   | 0100  | N set                        |
| PL   | 0101  | N clear                      |
| VS   | 0110  | V set                        |
| VC   | 0111  | V clear                      |
| HI   | 1000  | C set and Z clear            |
| LS   | 1001  | C clear or Z set             |
| GE   | 1010  | N == V                       |
| LT   | 1011  | N != V                       |
| GT   | 1100  | Z clear and N == V           |
| LE   | 1101  | Z set or N != V              |
| AL   | 1110  | always (no suffix)           |

Reference
---------
- ARM Architecture Reference Manual (ARMv4/v5), chapter A3
"""

from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import Optional


# =============================================================================
# Condition Codes
# =============================================================================

class ConditionCode(IntEnum):
    """
    Four-bit condition field values, bits [31:28] of every instruction.

    The fourteen named conditions take 0-13. AL (14) is the unconditional
    case and is deliberately outside the lookup table.
    """
    EQ = 0
    NE = 1
    CS = 2
    CC = 3
    MI = 4
    PL = 5
    VS = 6
    VC = 7
    HI = 8
    LS = 9
    GE = 10
    LT = 11
    GT = 12
    LE = 13
    AL = 14

    @property
    def bits(self) -> str:
        """Return the 4-character binary form of the code."""
        return format(self.value, "04b")


# The fourteen conditional suffixes, in table order
CONDITIONS: tuple[str, ...] = (
    "EQ", "NE", "CS", "CC", "MI", "PL", "VS",
    "VC", "HI", "LS", "GE", "LT", "GT", "LE",
)

CONDITION_TABLE: dict[str, ConditionCode] = {
    name: ConditionCode[name] for name in CONDITIONS
}

# Alternative spellings accepted in source
CONDITION_ALIASES: dict[str, ConditionCode] = {
    "HS": ConditionCode.CS,
    "LO": ConditionCode.CC,
    "AL": ConditionCode.AL,
}


def is_condition_suffix(text: str) -> bool:
    """Return True if text is a condition suffix (including AL and aliases)."""
    upper = text.upper()
    return upper in CONDITION_TABLE or upper in CONDITION_ALIASES


def resolve_condition(suffix: Optional[str]) -> ConditionCode:
    """
    Resolve a two-letter condition suffix to its condition code.

    An empty or unknown suffix means the instruction is unconditional and
    resolves to AL, never to the first table entry.

    Args:
        suffix: The text after the base mnemonic (e.g. "EQ" in "BEQ")

    Returns:
        The matching ConditionCode
    """
    if not suffix:
        return ConditionCode.AL
    upper = suffix.upper()
    if upper in CONDITION_TABLE:
        return CONDITION_TABLE[upper]
    return CONDITION_ALIASES.get(upper, ConditionCode.AL)


def condition_bits(code: ConditionCode) -> str:
    """Return the condition code as a 4-character binary string."""
    return ConditionCode(code).bits


# =============================================================================
# Data-Processing Opcodes
# =============================================================================

class Opcode(IntEnum):
    """Data-processing operation selector, bits [24:21]."""
    AND = 0b0000  # Rd = Rn & Op2
    EOR = 0b0001  # Rd = Rn ^ Op2
    SUB = 0b0010  # Rd = Rn - Op2
    RSB = 0b0011  # Rd = Op2 - Rn
    ADD = 0b0100  # Rd = Rn + Op2
    ADC = 0b0101  # Rd = Rn + Op2 + C
    SBC = 0b0110  # Rd = Rn - Op2 + C - 1
    RSC = 0b0111  # Rd = Op2 - Rn + C - 1
    TST = 0b1000  # flags from Rn & Op2
    TEQ = 0b1001  # flags from Rn ^ Op2
    CMP = 0b1010  # flags from Rn - Op2
    CMN = 0b1011  # flags from Rn + Op2
    ORR = 0b1100  # Rd = Rn | Op2
    MOV = 0b1101  # Rd = Op2
    BIC = 0b1110  # Rd = Rn & ~Op2
    MVN = 0b1111  # Rd = ~Op2

    @property
    def bits(self) -> str:
        return format(self.value, "04b")


DATA_PROCESSING_OPCODES: dict[str, Opcode] = {op.name: op for op in Opcode}

# Opcodes that only set flags: Rd field is zero and S is always 1
COMPARISON_OPCODES = frozenset({Opcode.TST, Opcode.TEQ, Opcode.CMP, Opcode.CMN})

# Opcodes that ignore Rn: Rn field is zero
MOVE_OPCODES = frozenset({Opcode.MOV, Opcode.MVN})


# =============================================================================
# Registers
# =============================================================================

REGISTERS: dict[str, int] = {f"R{n}": n for n in range(16)}

REGISTER_ALIASES: dict[str, int] = {
    "SP": 13,  # Stack pointer
    "LR": 14,  # Link register
    "PC": 15,  # Program counter
}

PROGRAM_COUNTER = 15


def register_index(name: str) -> Optional[int]:
    """Return the index of an architectural register name, or None."""
    upper = name.upper()
    if upper in REGISTERS:
        return REGISTERS[upper]
    return REGISTER_ALIASES.get(upper)


# =============================================================================
# Shifts (register form of Operand2)
# =============================================================================

class ShiftType(IntEnum):
    """Barrel shifter operation, bits [6:5] of a register Operand2."""
    LSL = 0b00
    LSR = 0b01
    ASR = 0b10
    ROR = 0b11


SHIFT_TYPES: dict[str, ShiftType] = {s.name: s for s in ShiftType}


# =============================================================================
# Instruction Families
# =============================================================================

class InstructionFamily(Enum):
    """Instruction families recognized by the classifier."""
    BRANCH_LINK = auto()
    BRANCH_EXCHANGE = auto()
    BRANCH = auto()
    DATA_PROCESSING = auto()
    SINGLE_DATA_TRANSFER = auto()
    SOFTWARE_INTERRUPT = auto()
    SWAP = auto()

    def __str__(self) -> str:
        return self.name.lower().replace("_", "-")


# Fixed priority order for classification
CLASSIFICATION_ORDER: tuple[InstructionFamily, ...] = (
    InstructionFamily.BRANCH_LINK,
    InstructionFamily.BRANCH_EXCHANGE,
    InstructionFamily.BRANCH,
    InstructionFamily.DATA_PROCESSING,
    InstructionFamily.SINGLE_DATA_TRANSFER,
    InstructionFamily.SOFTWARE_INTERRUPT,
    InstructionFamily.SWAP,
)

# Single data transfer: load flag per mnemonic
SINGLE_DATA_TRANSFER: dict[str, int] = {
    "LDR": 1,
    "STR": 0,
}

SOFTWARE_INTERRUPT = frozenset({"SWI", "SVC"})

SWAP = frozenset({"SWP"})

# Directive keywords that define a symbol
DEFINE_DIRECTIVES = frozenset({"DCD", "DCW"})


@dataclass(frozen=True)
class MnemonicInfo:
    """
    A mnemonic split into its parts.

    Attributes:
        family: The instruction family that claimed the mnemonic
        base: Base mnemonic without suffixes ("ADD", "BL", "LDR", ...)
        condition: Resolved condition (AL when no suffix)
        set_flags: True for an S suffix or a comparison opcode
        byte: True for the B suffix on LDR/STR
        has_condition: True if the source spelled a condition suffix
    """
    family: InstructionFamily
    base: str
    condition: ConditionCode = ConditionCode.AL
    set_flags: bool = False
    byte: bool = False
    has_condition: bool = False


def _split_flag_suffix(rest: str, flag: str) -> Optional[tuple[str, bool]]:
    """
    Split a remainder into (condition, flag present).

    Accepts "", flag, cond, cond+flag and flag+cond. An exact condition
    match is tried first so that "CS" stays carry-set rather than S + "C".
    """
    if rest == "" or is_condition_suffix(rest):
        return rest, False
    if rest == flag:
        return "", True
    if rest.endswith(flag) and is_condition_suffix(rest[:-len(flag)]):
        return rest[:-len(flag)], True
    if rest.startswith(flag) and is_condition_suffix(rest[len(flag):]):
        return rest[len(flag):], True
    return None


def _match_family(family: InstructionFamily, word: str) -> Optional[MnemonicInfo]:
    """Try to decompose word as a member of one family."""
    if family in (InstructionFamily.BRANCH_LINK,
                  InstructionFamily.BRANCH_EXCHANGE,
                  InstructionFamily.BRANCH):
        base = {
            InstructionFamily.BRANCH_LINK: "BL",
            InstructionFamily.BRANCH_EXCHANGE: "BX",
            InstructionFamily.BRANCH: "B",
        }[family]
        if not word.startswith(base):
            return None
        rest = word[len(base):]
        if rest and not is_condition_suffix(rest):
            return None
        return MnemonicInfo(family, base, resolve_condition(rest),
                            has_condition=bool(rest))

    if family is InstructionFamily.DATA_PROCESSING:
        opcode = DATA_PROCESSING_OPCODES.get(word[:3])
        if opcode is None:
            return None
        split = _split_flag_suffix(word[3:], "S")
        if split is None:
            return None
        cond, set_flags = split
        return MnemonicInfo(
            family, opcode.name, resolve_condition(cond),
            set_flags=set_flags or opcode in COMPARISON_OPCODES,
            has_condition=bool(cond),
        )

    if family is InstructionFamily.SINGLE_DATA_TRANSFER:
        base = word[:3]
        if base not in SINGLE_DATA_TRANSFER:
            return None
        split = _split_flag_suffix(word[3:], "B")
        if split is None:
            return None
        cond, byte = split
        return MnemonicInfo(family, base, resolve_condition(cond),
                            byte=byte, has_condition=bool(cond))

    if family is InstructionFamily.SOFTWARE_INTERRUPT:
        if word in SOFTWARE_INTERRUPT:
            return MnemonicInfo(family, word)
        return None

    if family is InstructionFamily.SWAP:
        if word in SWAP:
            return MnemonicInfo(family, word)
        return None

    return None


def decompose_mnemonic(word: str) -> Optional[MnemonicInfo]:
    """
    Classify a mnemonic by trying each family in priority order.

    Args:
        word: The first token of an instruction line (case-insensitive)

    Returns:
        MnemonicInfo for the first family that accepts the whole word,
        or None if no family does.

    Examples:
        >>> decompose_mnemonic("BLEQ").base
        'BL'
        >>> decompose_mnemonic("BLS").condition
        <ConditionCode.LS: 9>
    """
    upper = word.upper()
    for family in CLASSIFICATION_ORDER:
        info = _match_family(family, upper)
        if info is not None:
            return info
    return None


def is_mnemonic(word: str) -> bool:
    """Return True if word is an instruction mnemonic of any family."""
    return decompose_mnemonic(word) is not None


def is_directive(word: str) -> bool:
    """Return True if word is a symbol-defining directive keyword."""
    return word.upper() in DEFINE_DIRECTIVES
