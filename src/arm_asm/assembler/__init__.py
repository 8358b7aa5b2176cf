"""
ARM Subset Assembler
====================

This package assembles a subset of the 32-bit ARM instruction set into a
stream of 32-character binary words, one per instruction.

Main Components
---------------
- **Assembler**: Main assembler class that orchestrates a run
- **Lexer**: Tokenizes one source line
- **Parser**: Classifies lines into labels, directives and instructions
- **CodeGenerator**: Two-pass encoding session
- **ObjectWriter**: Appends encoded words to the object file

Assembly Process
----------------
1. **Pass 1 (label pass)**:
   - Classify every line
   - Collect DCD/DCW constants and code labels into the Symbol Table
   - Assign each instruction its address (index * 4)

2. **Pass 2 (encode pass)**:
   - Resolve registers and symbols
   - Encode each instruction with its family encoder
   - Emit each word to the object stream as soon as it is encoded

Supported Instructions
----------------------
- B, BL, BX with all condition suffixes
- Data processing: AND EOR SUB RSB ADD ADC SBC RSC TST TEQ CMP CMN ORR MOV BIC MVN
- LDR/STR (with B suffix)
- SWI/SVC, SWP
- DCD/DCW symbol definitions

Example Usage
-------------
>>> from arm_asm.assembler import assemble
>>> assemble("SWI &A")
['00001111000000000000000000001010']
"""

from arm_asm.assembler.assembler import Assembler, assemble, assemble_file
from arm_asm.assembler.lexer import Lexer, Token, TokenType, tokenize_line
from arm_asm.assembler.parser import (
    Parser,
    Statement,
    Instruction,
    Directive,
    LabelDef,
    UnknownStatement,
    Operand,
    OperandKind,
    parse_line,
)
from arm_asm.assembler.codegen import CodeGenerator, ListingLine
from arm_asm.assembler.expressions import ExpressionEvaluator, parse_literal
from arm_asm.assembler.symbols import Symbol, SymbolKind, SymbolTable
from arm_asm.assembler.registers import RegisterResolver
from arm_asm.assembler.writer import ObjectWriter

__all__ = [
    # Main interface
    "Assembler",
    "assemble",
    "assemble_file",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize_line",
    # Parser
    "Parser",
    "Statement",
    "Instruction",
    "Directive",
    "LabelDef",
    "UnknownStatement",
    "Operand",
    "OperandKind",
    "parse_line",
    # Code generation
    "CodeGenerator",
    "ListingLine",
    "ExpressionEvaluator",
    "parse_literal",
    "Symbol",
    "SymbolKind",
    "SymbolTable",
    "RegisterResolver",
    "ObjectWriter",
]
