"""
ARM Assembly Line Lexer
=======================

This module splits one source line into tokens. The assembler is
line-oriented: every statement sits on a single line, so the lexer works
a line at a time and never produces NEWLINE tokens.

Token Types
-----------
- IDENTIFIER: Labels, mnemonics, directives, register and symbol names
- NUMBER: Decimal (42), hexadecimal (&2A, 0x2A), negative decimal (-4)
- HASH: ``#`` immediate marker
- COMMA, COLON, LBRACKET, RBRACKET, BANG: punctuation

Number tokens keep their raw text. Whether "10" means ten or sixteen
depends on the instruction (SWI operands are always hexadecimal), so the
conversion happens later in expressions.parse_literal().

Comments
--------
``;`` starts a comment that runs to the end of the line.

Example
-------
>>> from arm_asm.assembler.lexer import tokenize_line
>>> tokenize_line("loop: ADDS R1, R1, #&10  ; bump")
[Token(IDENTIFIER, 'loop', 1:1), Token(COLON, ':', 1:5), Token(IDENTIFIER, 'ADDS', 1:7), ...]
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator
import string

from arm_asm.errors import AssemblySyntaxError, SourceLocation


COMMENT_MARKER = ";"


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for one line of assembly."""

    IDENTIFIER = auto()  # Mnemonics, names
    NUMBER = auto()      # Numeric literal (raw text)
    HASH = auto()        # # (immediate marker)
    COMMA = auto()       # ,
    COLON = auto()       # : (label terminator)
    LBRACKET = auto()    # [
    RBRACKET = auto()    # ]
    BANG = auto()        # ! (write-back)


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from a source line.

    Attributes:
        type: The TokenType classification
        value: The raw token text
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: str
    line: int
    column: int
    filename: str = "<input>"

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)


# =============================================================================
# Comment Handling
# =============================================================================

def strip_comment(line: str) -> str:
    """Remove everything from the first ';' to the end of the line."""
    index = line.find(COMMENT_MARKER)
    if index == -1:
        return line
    return line[:index]


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes a single line of ARM assembly.

    Usage:
        lexer = Lexer("MOV R1, R2", line_number=3, filename="prog.s")
        tokens = list(lexer.tokenize())
    """

    # Characters that make up a word (identifier or number)
    WORD_CHARS = string.ascii_letters + string.digits + "_&."

    PUNCTUATION = {
        "#": TokenType.HASH,
        ",": TokenType.COMMA,
        ":": TokenType.COLON,
        "[": TokenType.LBRACKET,
        "]": TokenType.RBRACKET,
        "!": TokenType.BANG,
    }

    def __init__(self, line: str, line_number: int = 1, filename: str = "<input>"):
        """
        Initialize the lexer with one source line.

        Args:
            line: The raw line text (comments are stripped here)
            line_number: 1-based line number for locations
            filename: Source filename for error messages
        """
        self.source_line = line.rstrip("\r\n")
        self.text = strip_comment(self.source_line)
        self.line_number = line_number
        self.filename = filename
        self._pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the line.

        Yields:
            Token objects in line order

        Raises:
            AssemblySyntaxError: On a character that starts no token
        """
        while self._pos < len(self.text):
            char = self.text[self._pos]

            if char in " \t":
                self._pos += 1
                continue

            column = self._pos + 1

            if char in self.PUNCTUATION:
                self._pos += 1
                yield self._make_token(self.PUNCTUATION[char], char, column)
                continue

            if char == "-" and self._peek(1) and self._peek(1) in string.digits + "&":
                self._pos += 1
                word = "-" + self._scan_word()
                yield self._make_token(TokenType.NUMBER, word, column)
                continue

            if char in self.WORD_CHARS:
                word = self._scan_word()
                if word[0] in string.digits or word[0] == "&":
                    yield self._make_token(TokenType.NUMBER, word, column)
                else:
                    yield self._make_token(TokenType.IDENTIFIER, word, column)
                continue

            raise AssemblySyntaxError(
                f"unexpected character '{char}'",
                SourceLocation(self.filename, self.line_number, column),
                source_line=self.source_line,
            )

    def _peek(self, offset: int = 0) -> str:
        pos = self._pos + offset
        if pos >= len(self.text):
            return ""
        return self.text[pos]

    def _scan_word(self) -> str:
        start = self._pos
        # Note: '' in WORD_CHARS is True, so check for end of text first
        while self._pos < len(self.text) and self.text[self._pos] in self.WORD_CHARS:
            self._pos += 1
        return self.text[start:self._pos]

    def _make_token(self, token_type: TokenType, value: str, column: int) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=self.line_number,
            column=column,
            filename=self.filename,
        )


def tokenize_line(line: str, line_number: int = 1, filename: str = "<input>") -> list[Token]:
    """Tokenize one line and return the tokens as a list."""
    return list(Lexer(line, line_number, filename).tokenize())
