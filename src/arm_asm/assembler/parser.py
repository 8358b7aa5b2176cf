"""
ARM Instruction Classifier
==========================

This module turns the tokens of one source line into statements. It is
the classifier of the assembler: it decides whether a line is a
directive, a label, an instruction (and of which family), or something
no family recognizes.

Statement Types
---------------
1. **LabelDef**: ``loop:`` or a leading name in front of a mnemonic
   ```asm
   loop:   SUBS R1, R1, #1
   done    MOV  PC, LR
   ```

2. **Directive**: symbol definition
   ```asm
   count   DCD &10
   limit   DCW 200
   ```

3. **Instruction**: one instruction of a supported family
   ```asm
   BNE loop
   LDR R0, count
   SWI &11
   ```

4. **UnknownStatement**: a line that no family claims. The code generator
   decides whether that is an error or a warning.

Classification uses true tokenization: the first word is decomposed
exactly (see arm_asm.cpu.decompose_mnemonic), so a mnemonic appearing
inside another word can never claim a line.

Operand Kinds
-------------
| Syntax               | Kind      | Example          |
|----------------------|-----------|------------------|
| name                 | NAME      | R1, count, loop  |
| #value               | IMMEDIATE | #4, #&FF, #limit |
| value                | NUMBER    | &A (SWI)         |
| [Rn{, #off or Rm}]{!} | MEMORY | [R2, #-4]!      |
| LSL #n (etc.)        | SHIFT     | LSL #2           |
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

from arm_asm.errors import (
    AssemblySyntaxError,
    MalformedDirectiveError,
    SourceLocation,
)
from arm_asm.assembler.lexer import Token, TokenType, Lexer, strip_comment
from arm_asm.cpu import (
    MnemonicInfo,
    SHIFT_TYPES,
    decompose_mnemonic,
    is_directive,
)


# =============================================================================
# Operand Data Classes
# =============================================================================

class OperandKind(Enum):
    """Syntactic operand categories."""
    NAME = auto()        # Register or symbol name
    IMMEDIATE = auto()   # #value
    NUMBER = auto()      # Bare literal
    MEMORY = auto()      # [Rn], [Rn, #off], [Rn, Rm], optional !
    SHIFT = auto()       # LSL #n, LSR #n, ASR #n, ROR #n


@dataclass
class Operand:
    """
    One comma-separated instruction operand.

    Attributes:
        kind: The operand category
        text: Name, literal text, or shift mnemonic
        location: Where the operand starts
        base: Base register name (MEMORY)
        offset: Offset literal text (MEMORY, None when absent)
        index: Offset register name (MEMORY, None when absent)
        writeback: True for a trailing ``!`` (MEMORY)
        amount: Shift amount literal text (SHIFT)
    """
    kind: OperandKind
    text: str
    location: SourceLocation
    base: Optional[str] = None
    offset: Optional[str] = None
    index: Optional[str] = None
    writeback: bool = False
    amount: Optional[str] = None


# =============================================================================
# Statement Data Classes
# =============================================================================

@dataclass
class Statement:
    """
    Base class for all classified statements.

    Every statement keeps its location and the raw source line for
    error reporting and listings.
    """
    location: SourceLocation
    source: str


@dataclass
class LabelDef(Statement):
    """Code label; its value is the address of the next instruction."""
    name: str


@dataclass
class Directive(Statement):
    """
    Symbol-defining directive.

    Attributes:
        keyword: DCD or DCW
        name: The declared name (first token)
        value: The literal text (third token)
    """
    keyword: str
    name: str
    value: str


@dataclass
class Instruction(Statement):
    """
    Instruction of a recognized family.

    Attributes:
        mnemonic: Mnemonic as written (e.g. "ADDEQS")
        info: Decomposed mnemonic (family, base, condition, flags)
        operands: Parsed operands in source order
    """
    mnemonic: str
    info: MnemonicInfo
    operands: list[Operand] = field(default_factory=list)


@dataclass
class UnknownStatement(Statement):
    """A line whose first word no instruction family recognizes."""
    mnemonic: str


# =============================================================================
# Parser Implementation
# =============================================================================

class Parser:
    """
    Classifies one source line.

    Usage:
        parser = Parser("loop: SUBS R1, R1, #1", line_number=4)
        statements = parser.parse()
    """

    def __init__(self, line: str, line_number: int = 1, filename: str = "<input>"):
        self._lexer = Lexer(line, line_number, filename)
        self._source = self._lexer.source_line
        self._line_number = line_number
        self._filename = filename

    def parse(self) -> list[Statement]:
        """
        Classify the line into zero or more statements.

        Returns:
            Empty list for blank/comment-only lines; otherwise a label
            and/or one directive, instruction or unknown statement

        Raises:
            MalformedDirectiveError: For a directive with too few tokens
            AssemblySyntaxError: For malformed operands
        """
        text = strip_comment(self._source)
        fields = text.split()
        if not fields:
            return []

        if is_directive(fields[0]) or (len(fields) > 1 and is_directive(fields[1])):
            return [self._parse_directive(fields)]

        tokens = list(self._lexer.tokenize())
        statements: list[Statement] = []

        label = self._try_parse_label(tokens)
        if label is not None:
            statements.append(label)
            tokens = tokens[2:] if tokens[1:2] and tokens[1].type == TokenType.COLON else tokens[1:]

        if not tokens:
            return statements

        head = tokens[0]
        if head.type != TokenType.IDENTIFIER:
            raise AssemblySyntaxError(
                f"expected a mnemonic, found '{head.value}'",
                head.location,
                source_line=self._source,
            )

        info = decompose_mnemonic(head.value)
        if info is None:
            statements.append(UnknownStatement(head.location, self._source, head.value))
            return statements

        operands = [
            self._parse_operand(group, head)
            for group in self._split_operands(tokens[1:])
        ]
        statements.append(Instruction(head.location, self._source, head.value, info, operands))
        return statements

    # =========================================================================
    # Directives and Labels
    # =========================================================================

    def _location(self, column: int = 0) -> SourceLocation:
        return SourceLocation(self._filename, self._line_number, column)

    def _parse_directive(self, fields: list[str]) -> Directive:
        """Extract name (first field), keyword (second) and value (third)."""
        if len(fields) < 3 or not is_directive(fields[1]):
            raise MalformedDirectiveError(
                len(fields), self._location(), source_line=self._source
            )
        name = fields[0].rstrip(":")
        return Directive(self._location(1), self._source, fields[1].upper(), name, fields[2])

    def _try_parse_label(self, tokens: list[Token]) -> Optional[LabelDef]:
        """
        Recognize a label at the start of the line.

        Forms:
            name:            (optionally followed by an instruction)
            name MNEMONIC    (leading name that is not itself a mnemonic)
        """
        if not tokens or tokens[0].type != TokenType.IDENTIFIER:
            return None

        first = tokens[0]
        if len(tokens) > 1 and tokens[1].type == TokenType.COLON:
            return LabelDef(first.location, self._source, first.value)

        if (len(tokens) > 1
                and tokens[1].type == TokenType.IDENTIFIER
                and decompose_mnemonic(first.value) is None
                and decompose_mnemonic(tokens[1].value) is not None):
            return LabelDef(first.location, self._source, first.value)

        return None

    # =========================================================================
    # Operands
    # =========================================================================

    def _split_operands(self, tokens: list[Token]) -> list[list[Token]]:
        """Split on commas that are not inside square brackets."""
        if not tokens:
            return []

        groups: list[list[Token]] = [[]]
        depth = 0
        for token in tokens:
            if token.type == TokenType.LBRACKET:
                depth += 1
            elif token.type == TokenType.RBRACKET:
                depth -= 1
            if token.type == TokenType.COMMA and depth == 0:
                groups.append([])
            else:
                groups[-1].append(token)
        return groups

    def _parse_operand(self, group: list[Token], head: Token) -> Operand:
        """Classify one comma-separated operand."""
        if not group:
            raise AssemblySyntaxError(
                f"missing operand for '{head.value}'",
                head.location,
                source_line=self._source,
            )

        first = group[0]
        types = [t.type for t in group]

        if types == [TokenType.IDENTIFIER]:
            return Operand(OperandKind.NAME, first.value, first.location)

        if types == [TokenType.NUMBER]:
            return Operand(OperandKind.NUMBER, first.value, first.location)

        if first.type == TokenType.HASH:
            if len(group) == 2 and group[1].type in (TokenType.NUMBER, TokenType.IDENTIFIER):
                return Operand(OperandKind.IMMEDIATE, group[1].value, first.location)
            raise self._operand_error("expected a value after '#'", first)

        if first.type == TokenType.LBRACKET:
            return self._parse_memory(group)

        if (first.type == TokenType.IDENTIFIER
                and first.value.upper() in SHIFT_TYPES
                and len(group) == 3
                and group[1].type == TokenType.HASH
                and group[2].type == TokenType.NUMBER):
            return Operand(OperandKind.SHIFT, first.value.upper(), first.location,
                           amount=group[2].value)

        if first.type == TokenType.IDENTIFIER and first.value.upper() in SHIFT_TYPES:
            raise self._operand_error(
                "only immediate shift amounts are supported (e.g. LSL #2)", first
            )

        raise self._operand_error(
            "unexpected tokens in operand: " + " ".join(t.value for t in group), first
        )

    def _parse_memory(self, group: list[Token]) -> Operand:
        """Parse [Rn], [Rn, #off], [Rn, Rm], each with an optional trailing !."""
        first = group[0]
        writeback = group[-1].type == TokenType.BANG
        body = group[:-1] if writeback else group

        if body[-1].type != TokenType.RBRACKET:
            raise self._operand_error("missing ']'", first)
        inner = body[1:-1]

        if len(inner) == 1 and inner[0].type == TokenType.IDENTIFIER:
            return Operand(OperandKind.MEMORY, inner[0].value, first.location,
                           base=inner[0].value, writeback=writeback)

        if (len(inner) == 4
                and inner[0].type == TokenType.IDENTIFIER
                and inner[1].type == TokenType.COMMA
                and inner[2].type == TokenType.HASH
                and inner[3].type == TokenType.NUMBER):
            return Operand(OperandKind.MEMORY, inner[0].value, first.location,
                           base=inner[0].value, offset=inner[3].value,
                           writeback=writeback)

        if (len(inner) == 3
                and inner[0].type == TokenType.IDENTIFIER
                and inner[1].type == TokenType.COMMA
                and inner[2].type == TokenType.IDENTIFIER):
            return Operand(OperandKind.MEMORY, inner[0].value, first.location,
                           base=inner[0].value, index=inner[2].value,
                           writeback=writeback)

        raise self._operand_error("expected [Rn], [Rn, #offset] or [Rn, Rm]", first)

    def _operand_error(self, message: str, token: Token) -> AssemblySyntaxError:
        return AssemblySyntaxError(message, token.location, source_line=self._source)


def parse_line(line: str, line_number: int = 1, filename: str = "<input>") -> list[Statement]:
    """Classify one line of source."""
    return Parser(line, line_number, filename).parse()
