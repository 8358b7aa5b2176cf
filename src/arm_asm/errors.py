"""
ARM Assembler Error Hierarchy
=============================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from ArmAsmError, allowing callers to catch every
assembler-related error with a single except clause if desired.

Exception Hierarchy
-------------------
ArmAsmError (base)
├── AssemblerError (per-line, recoverable)
│   ├── AssemblySyntaxError - malformed instruction or operand
│   ├── MalformedDirectiveError - DCD/DCW line with too few tokens
│   ├── UnrecognizedMnemonicError - no instruction family claims the line
│   ├── UnresolvedSymbolError - reference to an undefined label/constant
│   ├── UnresolvedRegisterError - name is not R0-R15 and has no binding
│   ├── InvalidLiteralError - literal does not parse
│   └── FieldOverflowError - value does not fit its bit-field
└── ObjectWriteError - output stream cannot be opened or written (fatal)

Design Philosophy
-----------------
Per-line errors carry the source location (filename, line, column) so the
report can point at the offending text. They are collected by the code
generator and never stop the remaining lines from being encoded. Only
ObjectWriteError aborts a run.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class ArmAsmError(Exception):
    """
    Base exception for all assembler errors.

        try:
            assembler.assemble_file("program.s", "binary.obj")
        except ArmAsmError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        if self.column > 0:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.filename}:{self.line}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(ArmAsmError):
    """
    Base exception for all per-line assembler errors.

    Encoders deep in the pipeline often raise without knowing where they
    are in the source; the code generator fills the location in later with
    attach().

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    category = "error"

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def attach(
        self,
        location: SourceLocation,
        source_line: Optional[str] = None,
    ) -> "AssemblerError":
        """
        Fill in a missing location and source line, then return self.

        Locations already set by the raiser are kept.
        """
        if self.location is None:
            self.location = location
        if self.source_line is None:
            self.source_line = source_line
        self.args = (self._format_message(),)
        return self

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            prog.s:15:9: error: unresolved symbol 'lopp'
                B lopp
                  ^
            hint: did you mean 'loop'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: {self.category}: {self.message}")
        else:
            parts.append(f"{self.category}: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class AssemblySyntaxError(AssemblerError):
    """
    Syntax error in assembly source code.

    Examples:
        - Unexpected character in a line
        - Missing operand (``BEQ`` with no target)
        - Wrong number of operands for the instruction family
    """
    category = "syntax error"


class MalformedDirectiveError(AssemblerError):
    """
    A DCD/DCW directive line has fewer than three tokens.

    The directive contributes no symbol; the label pass continues.
    """
    category = "syntax error"

    def __init__(
        self,
        token_count: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.token_count = token_count
        super().__init__(
            f"malformed directive: expected '<name> DCD|DCW <value>', "
            f"found {token_count} token(s)",
            location=location,
            hint="separate name, keyword and value with whitespace",
            source_line=source_line,
        )


class UnrecognizedMnemonicError(AssemblerError):
    """No instruction family claims the line."""
    category = "syntax error"

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        super().__init__(
            f"unrecognized mnemonic '{mnemonic}'",
            location=location,
            source_line=source_line,
        )


class UnresolvedSymbolError(AssemblerError):
    """
    Reference to a label or constant that has no Symbol Table entry.

    Raised during the encode pass, after every definition in the unit has
    been collected. Similar names are suggested to catch typos.
    """
    category = "unresolved symbol"

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []

        if not hint and self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UnresolvedRegisterError(AssemblerError):
    """A register name is not R0-R15 (or an alias) and has no binding."""
    category = "unresolved register"

    def __init__(
        self,
        name: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.name = name
        super().__init__(
            f"unknown register '{name}'",
            location=location,
            hint="registers are R0-R15, SP, LR, PC or a name bound by LDR/STR",
            source_line=source_line,
        )


class InvalidLiteralError(AssemblerError):
    """
    A numeric literal failed to parse.

    Literals are decimal, &-prefixed hexadecimal or 0x-prefixed hexadecimal.
    """
    category = "malformed literal"

    def __init__(
        self,
        text: str,
        base: int = 10,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.text = text
        self.base = base
        kind = "hexadecimal" if base == 16 else "numeric"
        super().__init__(
            f"invalid {kind} literal '{text}'",
            location=location,
            source_line=source_line,
        )


class FieldOverflowError(AssemblerError):
    """
    A computed value does not fit its destination bit-field.

    Examples:
        - SWI immediate above 0xFFFFFF (24 bits)
        - Transfer offset above 0xFFF (12 bits)
        - Branch distance beyond the signed 24-bit word offset
        - Data-processing immediate with no 8-bit rotated form
    """
    category = "field overflow"

    def __init__(
        self,
        field: str,
        value: int,
        width: int,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.field = field
        self.value = value
        self.width = width
        super().__init__(
            f"value {value:#x} does not fit the {width}-bit {field} field",
            location=location,
            hint=hint,
            source_line=source_line,
        )


# =============================================================================
# Output Exceptions
# =============================================================================

class ObjectWriteError(ArmAsmError):
    """
    The object stream could not be opened or written.

    This is the only fatal error: it aborts the run instead of being
    collected per line.
    """

    def __init__(self, target: str, reason: str):
        self.target = target
        self.reason = reason
        super().__init__(f"cannot write object output '{target}': {reason}")


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects errors and warnings for batch reporting.

    The code generator records every per-line error here and carries on
    with the next line, so one run reports all problems in the file.

    Example:
        collector = ErrorCollector()
        collector.add(UnresolvedSymbolError("loop", location))
        collector.add_warning("prog.s:4: duplicate symbol 'x' ignored")

        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self):
        self.errors: list[AssemblerError] = []
        self.warnings: list[str] = []

    def add(self, error: AssemblerError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

    def warning_count(self) -> int:
        """Return the number of collected warnings."""
        return len(self.warnings)

    def report(self) -> str:
        """
        Format all errors and warnings for display.

        Returns:
            Formatted string with all errors, warnings and a summary line
        """
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        if self.warnings:
            lines.append("Warnings:")
            for warning in self.warnings:
                lines.append(f"  {warning}")

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"\n{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors and warnings."""
        self.errors.clear()
        self.warnings.clear()
