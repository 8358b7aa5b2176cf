"""
Literal and Operand Value Evaluation
====================================

This module turns operand text into integers. Two sources of values
exist in this assembler:

1. **Literals** written in the source
2. **Symbols** defined by DCD/DCW directives or by code labels

Literal Formats
---------------
| Format      | Prefix | Example | Value |
|-------------|--------|---------|-------|
| Decimal     | (none) | 42      | 42    |
| Hexadecimal | &      | &2A     | 42    |
| Hexadecimal | 0x     | 0x2A    | 42    |
| Negative    | -      | -4, -&4 | -4    |

Software-interrupt operands are always hexadecimal, with or without the
``&`` sigil, so parse_literal() takes the default base from the caller.

Example Usage
-------------
>>> from arm_asm.assembler.expressions import parse_literal, ExpressionEvaluator
>>> parse_literal("&FF")
255
>>> parse_literal("10", base=16)
16
>>> evaluator = ExpressionEvaluator(symbols)
>>> evaluator.evaluate("count")       # symbol lookup
"""

import difflib
import string
from typing import Optional

from arm_asm.errors import (
    InvalidLiteralError,
    UnresolvedSymbolError,
    SourceLocation,
)
from arm_asm.assembler.symbols import SymbolTable


HEX_SIGIL = "&"


# =============================================================================
# Literal Parsing
# =============================================================================

def is_literal(text: str) -> bool:
    """Return True if text looks like a numeric literal (not a name)."""
    if not text:
        return False
    body = text[1:] if text[0] == "-" else text
    return bool(body) and (body[0] in string.digits or body[0] == HEX_SIGIL)


def parse_literal(
    text: str,
    base: int = 10,
    location: Optional[SourceLocation] = None,
) -> int:
    """
    Parse a numeric literal.

    Args:
        text: Literal text ("42", "&2A", "0x2A", "-4")
        base: Base for unprefixed digits (10, or 16 for SWI operands)
        location: Where the literal appears, for error reporting

    Returns:
        The integer value

    Raises:
        InvalidLiteralError: If the text is not a valid literal
    """
    body = text.strip()
    negative = body.startswith("-")
    if negative:
        body = body[1:]

    digits_base = base
    if body.startswith(HEX_SIGIL):
        body = body[1:]
        digits_base = 16
    elif body[:2].lower() == "0x":
        body = body[2:]
        digits_base = 16

    valid = string.hexdigits if digits_base == 16 else string.digits
    if not body or any(c not in valid for c in body):
        raise InvalidLiteralError(text, digits_base, location)

    value = int(body, digits_base)
    return -value if negative else value


# =============================================================================
# Operand Evaluator
# =============================================================================

class ExpressionEvaluator:
    """
    Evaluates operand values against the Symbol Table.

    A value is either a literal or the name of a symbol. Unresolved names
    raise UnresolvedSymbolError with suggestions for near misses.

    Attributes:
        symbols: The Symbol Table built by the label pass
    """

    def __init__(self, symbols: SymbolTable):
        self.symbols = symbols

    def evaluate(self, text: str, location: Optional[SourceLocation] = None) -> int:
        """
        Evaluate a literal or symbol reference.

        Args:
            text: Literal text or symbol name
            location: Source location for error reporting

        Returns:
            The integer value

        Raises:
            InvalidLiteralError: For a malformed literal
            UnresolvedSymbolError: For an unknown symbol name
        """
        if is_literal(text):
            return parse_literal(text, location=location)
        return self.lookup(text, location)

    def lookup(self, name: str, location: Optional[SourceLocation] = None) -> int:
        """Return the value of a symbol, raising if it is undefined."""
        symbol = self.symbols.lookup(name)
        if symbol is None:
            raise UnresolvedSymbolError(
                name, location,
                similar_symbols=self.similar_symbols(name),
            )
        return symbol.value

    def similar_symbols(self, name: str) -> list[str]:
        """Return defined names that look like a misspelling of name."""
        return difflib.get_close_matches(name, self.symbols.names(), n=3, cutoff=0.6)
