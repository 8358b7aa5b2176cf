"""
ARM Assembler - Two-Pass Assembler for a 32-bit ARM Instruction Subset
======================================================================

This package converts ARM assembly source into a stream of 32-bit
instruction encodings, each written as a 32-character string of ``0``
and ``1``.

Main Components
---------------
- **cpu**: Architecture tables
    Condition codes, data-processing opcodes, registers, shift types and
    mnemonic decomposition

- **assembler**: Two-pass assembler (armasm)
    Label pass, encode pass, family encoders and the object writer

Quick Start
-----------
Assemble a string:
    >>> from arm_asm import assemble
    >>> assemble("MOV R1, R2")
    ['11100001101000000001000000000010']

Assemble a file:
    >>> from arm_asm import Assembler
    >>> asm = Assembler()
    >>> asm.assemble_file("prog.s", "binary.obj")
    >>> if asm.has_errors():
    ...     print(asm.get_error_report())

Or use the command-line tool:
    $ armasm prog.s -o binary.obj

Reference Documentation
-----------------------
- ARM Architecture Reference Manual (ARMv4/v5)

Version History
---------------
1.0.0 - Initial release
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from arm_asm.assembler import Assembler, assemble, assemble_file
from arm_asm.config import AssemblerConfig
from arm_asm.errors import (
    ArmAsmError,
    AssemblerError,
    AssemblySyntaxError,
    MalformedDirectiveError,
    UnrecognizedMnemonicError,
    UnresolvedSymbolError,
    UnresolvedRegisterError,
    InvalidLiteralError,
    FieldOverflowError,
    ObjectWriteError,
    SourceLocation,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "AssemblerConfig",
    "assemble",
    "assemble_file",
    # Exception hierarchy
    "ArmAsmError",
    "AssemblerError",
    "AssemblySyntaxError",
    "MalformedDirectiveError",
    "UnrecognizedMnemonicError",
    "UnresolvedSymbolError",
    "UnresolvedRegisterError",
    "InvalidLiteralError",
    "FieldOverflowError",
    "ObjectWriteError",
    "SourceLocation",
]
