"""
Register Resolver
=================

Maps register operands to their 4-bit index.

Architectural names (R0-R15, SP, LR, PC) are fixed. On top of those the
resolver keeps late bindings: when a transfer instruction moves a named
value (``LDR R0, count``), the name is bound to the transfer register so
later instructions may write ``count`` where a register is expected.

Bindings are an append-only ordered list of (name, index) pairs. Lookup
scans from the start, so the first binding for a name wins; nothing is
ever removed during a translation unit.
"""

import logging
from typing import Optional

from arm_asm.cpu import register_index
from arm_asm.errors import UnresolvedRegisterError, SourceLocation

logger = logging.getLogger(__name__)

# Value used for an unresolved register in permissive mode
FALLBACK_REGISTER = 0


class RegisterResolver:
    """
    Resolves register names and accumulates name bindings.

    Usage:
        registers = RegisterResolver()
        registers.resolve("R7")          # 7
        registers.bind("count", 0)
        registers.resolve("count")       # 0
    """

    def __init__(self):
        self._bindings: list[tuple[str, int]] = []

    def bind(self, name: str, value: int) -> None:
        """
        Append a late binding of name to a register index.

        Raises:
            ValueError: If value is not a 4-bit register index
        """
        if not 0 <= value <= 15:
            raise ValueError(f"register index out of range: {value}")
        self._bindings.append((name, value))
        logger.debug("bound '%s' to R%d", name, value)

    def lookup(self, name: str) -> Optional[int]:
        """Return the index for name, or None if it cannot be resolved."""
        index = register_index(name)
        if index is not None:
            return index
        for bound_name, value in self._bindings:
            if bound_name == name:
                return value
        return None

    def resolve(self, name: str, location: Optional[SourceLocation] = None) -> int:
        """
        Return the 4-bit index for name.

        Raises:
            UnresolvedRegisterError: If name is neither a register nor bound
        """
        index = self.lookup(name)
        if index is None:
            raise UnresolvedRegisterError(name, location)
        return index

    def is_register(self, name: str) -> bool:
        """Return True if name resolves to a register."""
        return self.lookup(name) is not None

    @property
    def bindings(self) -> tuple[tuple[str, int], ...]:
        """All bindings in the order they were made."""
        return tuple(self._bindings)
