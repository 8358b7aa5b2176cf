"""
Symbol Table
============

Names bound to values for one translation unit. Two kinds of symbol
exist:

- **Constants**, from directive lines ``name DCD value`` / ``name DCW value``
- **Labels**, from ``name:`` (or a bare leading name) in front of an
  instruction; the value is the byte address of that instruction

The table is an ordered, append-only sequence. Lookup returns the first
entry with a given name, so the first definition found by the label pass
is the one every reference resolves to. Later definitions of the same
name are still recorded (for listings and the debug dump) but are never
resolved against.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from arm_asm.errors import SourceLocation


# =============================================================================
# Symbol Table Entry
# =============================================================================

class SymbolKind(Enum):
    """Where a symbol came from."""
    CONSTANT = "DCD/DCW"
    LABEL = "label"


@dataclass(frozen=True)
class Symbol:
    """
    Symbol table entry.

    Attributes:
        name: Symbol name, as written in the source
        value: Literal value (constant) or byte address (label)
        location: Where the symbol was defined
        kind: CONSTANT or LABEL
    """
    name: str
    value: int
    location: SourceLocation
    kind: SymbolKind = SymbolKind.CONSTANT

    @property
    def is_label(self) -> bool:
        return self.kind is SymbolKind.LABEL


# =============================================================================
# Symbol Table
# =============================================================================

class SymbolTable:
    """
    Append-only symbol sequence with first-match lookup.

    Usage:
        table = SymbolTable()
        table.define("count", 10, location)
        table.lookup("count").value    # 10
    """

    def __init__(self):
        self._entries: list[Symbol] = []
        self._first: dict[str, Symbol] = {}

    def define(
        self,
        name: str,
        value: int,
        location: SourceLocation,
        kind: SymbolKind = SymbolKind.CONSTANT,
    ) -> Optional[Symbol]:
        """
        Append a symbol.

        Returns:
            None if this is the first definition of name, otherwise the
            earlier Symbol that stays authoritative
        """
        symbol = Symbol(name, value, location, kind)
        self._entries.append(symbol)
        existing = self._first.get(name)
        if existing is None:
            self._first[name] = symbol
        return existing

    def lookup(self, name: str) -> Optional[Symbol]:
        """Return the first symbol defined with this name, or None."""
        return self._first.get(name)

    def names(self) -> list[str]:
        """Return each defined name once, in definition order."""
        return list(self._first)

    def as_dict(self) -> dict[str, int]:
        """Return a name -> value mapping using first-definition values."""
        return {name: sym.value for name, sym in self._first.items()}

    def __contains__(self, name: str) -> bool:
        return name in self._first

    def __iter__(self) -> Iterator[Symbol]:
        """Iterate over every entry, duplicates included, in order."""
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
