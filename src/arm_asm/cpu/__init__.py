"""
ARM CPU Package
===============

Architecture definitions shared by the assembler stages: the condition
table, data-processing opcodes, register names, shift types and the
mnemonic decomposition used to classify instruction lines.

Keeping these tables in one place means the classifier, the register
resolver and the family encoders all agree on the same numbers.

Usage:
    from arm_asm.cpu import (
        ConditionCode,
        Opcode,
        resolve_condition,
        decompose_mnemonic,
    )
"""

# =============================================================================
# Public API Exports
# =============================================================================

from arm_asm.cpu.arm import (
    # Condition codes
    ConditionCode,
    CONDITIONS,
    CONDITION_TABLE,
    CONDITION_ALIASES,
    is_condition_suffix,
    resolve_condition,
    condition_bits,
    # Data processing
    Opcode,
    DATA_PROCESSING_OPCODES,
    COMPARISON_OPCODES,
    MOVE_OPCODES,
    # Registers
    REGISTERS,
    REGISTER_ALIASES,
    PROGRAM_COUNTER,
    register_index,
    # Shifts
    ShiftType,
    SHIFT_TYPES,
    # Families and classification
    InstructionFamily,
    CLASSIFICATION_ORDER,
    SINGLE_DATA_TRANSFER,
    SOFTWARE_INTERRUPT,
    SWAP,
    DEFINE_DIRECTIVES,
    MnemonicInfo,
    decompose_mnemonic,
    is_mnemonic,
    is_directive,
)

__all__ = [
    # Condition codes
    "ConditionCode",
    "CONDITIONS",
    "CONDITION_TABLE",
    "CONDITION_ALIASES",
    "is_condition_suffix",
    "resolve_condition",
    "condition_bits",
    # Data processing
    "Opcode",
    "DATA_PROCESSING_OPCODES",
    "COMPARISON_OPCODES",
    "MOVE_OPCODES",
    # Registers
    "REGISTERS",
    "REGISTER_ALIASES",
    "PROGRAM_COUNTER",
    "register_index",
    # Shifts
    "ShiftType",
    "SHIFT_TYPES",
    # Families and classification
    "InstructionFamily",
    "CLASSIFICATION_ORDER",
    "SINGLE_DATA_TRANSFER",
    "SOFTWARE_INTERRUPT",
    "SWAP",
    "DEFINE_DIRECTIVES",
    "MnemonicInfo",
    "decompose_mnemonic",
    "is_mnemonic",
    "is_directive",
]
