"""
ARM Assembler - Main Interface
==============================

This module provides the main Assembler class, which is the primary interface
for assembling ARM source code. It coordinates the classifier, the code
generator and the object writer to turn a source file into a stream of
32-bit binary words.

Example Usage
-------------
>>> from arm_asm.assembler import Assembler
>>>
>>> asm = Assembler()
>>> words = asm.assemble_string('''
... count   DCD &10
... loop:   LDR  R0, count
...         SUBS R0, R0, #1
...         BNE  loop
...         SWI  &11
... ''')
>>> len(words)
4
>>> asm.get_symbols()
{'count': 16, 'loop': 0}

Command-Line Usage
------------------
The assembler can also be invoked from the command line:

    $ armasm prog.s -o binary.obj -l prog.lst -s prog.sym

Options:
    -o, --output FILE       Object file (default: binary.obj)
    -f, --format FORMAT     Object layout: lines or packed
    --append                Append to the object file
    --strict, --permissive  Treat unresolved names as errors or warnings
    -l, --listing FILE      Generate listing file
    -s, --symbols FILE      Generate symbol file
    -g, --debug             Print label and register tables
    -v, --verbose           Verbose output
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from arm_asm.config import AssemblerConfig
from arm_asm.assembler.codegen import CodeGenerator
from arm_asm.assembler.writer import ObjectWriter

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main ARM assembler class.

    Every assemble_* call starts a fresh CodeGenerator session, so symbols
    and register bindings never leak from one run into the next. The
    accessor methods report on the most recent run.

    Attributes:
        config: The AssemblerConfig used for every run
    """

    def __init__(self, config: Optional[AssemblerConfig] = None):
        """
        Initialize the assembler.

        Args:
            config: Run configuration (defaults to AssemblerConfig())
        """
        self.config = config or AssemblerConfig()
        self._codegen = CodeGenerator(self.config)

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_lines(
        self,
        lines: Sequence[str],
        writer: ObjectWriter,
        filename: str = "<input>",
    ) -> int:
        """
        Assemble source lines into an existing writer.

        Args:
            lines: Source lines in order
            writer: Destination for encoded words
            filename: Source name for error messages

        Returns:
            Number of instructions emitted

        Raises:
            ObjectWriteError: If the writer fails
        """
        self._codegen = CodeGenerator(self.config)
        count = self._codegen.generate(lines, writer, filename)
        logger.debug("Assembled %d instructions from %s", count, filename)
        return count

    def assemble_string(self, source: str, filename: str = "<input>") -> list[str]:
        """
        Assemble source code held in a string.

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            The encoded words, in source order
        """
        writer = ObjectWriter.in_memory(self.config.output_format)
        self.assemble_lines(source.splitlines(), writer, filename)
        return writer.words()

    def assemble_file(
        self,
        filepath: str | Path,
        output: str | Path | None = None,
    ) -> int:
        """
        Assemble a source file into an object file.

        Args:
            filepath: Path to assembly source file
            output: Object file path (defaults to config.default_output)

        Returns:
            Number of instructions emitted

        Raises:
            FileNotFoundError: If the source file does not exist
            ObjectWriteError: If the object file cannot be written
        """
        filepath = Path(filepath)
        output = Path(output) if output is not None else self.config.default_output

        logger.debug("Assembling %s -> %s", filepath, output)
        lines = filepath.read_text().splitlines()

        with ObjectWriter.open(output, self.config.output_format,
                               append=self.config.append) as writer:
            return self.assemble_lines(lines, writer, str(filepath))

    # =========================================================================
    # Output Methods
    # =========================================================================

    @property
    def instruction_count(self) -> int:
        """Number of instructions emitted by the last run."""
        return self._codegen.instruction_count

    def get_symbols(self) -> dict[str, int]:
        """
        Get the symbol table.

        Returns:
            Dictionary mapping symbol names to values
        """
        return self._codegen.get_symbols()

    def get_register_bindings(self) -> list[tuple[str, int]]:
        """
        Get the register bindings made by transfer instructions.

        Returns:
            (name, register index) pairs in binding order
        """
        return list(self._codegen.registers.bindings)

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            Assembly listing with addresses, encodings, and source
        """
        return self._codegen.get_listing()

    def dump_tables(self) -> str:
        """Get the label and register binding tables for debugging."""
        return self._codegen.dump_tables()

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write assembly listing file.

        Args:
            filepath: Output file path
        """
        Path(filepath).write_text(self.get_listing() + "\n")
        logger.debug("Wrote listing to %s", filepath)

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file, one ``name = &value`` per line.

        Args:
            filepath: Output file path
        """
        lines = [
            f"{name} = &{value:X}"
            for name, value in sorted(self.get_symbols().items())
        ]
        Path(filepath).write_text("\n".join(lines) + "\n" if lines else "")
        logger.debug("Wrote symbols to %s", filepath)

    # =========================================================================
    # Error Handling
    # =========================================================================

    def has_errors(self) -> bool:
        """
        Check if assembly produced errors.

        Returns:
            True if errors occurred
        """
        return self._codegen.has_errors()

    def get_error_report(self) -> str:
        """
        Get formatted error report.

        Returns:
            Error report string
        """
        return self._codegen.get_error_report()

    def get_warnings(self) -> list[str]:
        return list(self._codegen.errors.warnings)


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, config: Optional[AssemblerConfig] = None) -> list[str]:
    """
    Convenience function to assemble source code.

    Lines with errors contribute no word; use an Assembler instance to
    inspect the error report.

    Args:
        source: Assembly source code
        config: Optional run configuration

    Returns:
        The encoded words
    """
    return Assembler(config).assemble_string(source)


def assemble_file(
    filepath: str | Path,
    output: str | Path | None = None,
    config: Optional[AssemblerConfig] = None,
) -> int:
    """
    Convenience function to assemble a file.

    Args:
        filepath: Path to source file
        output: Object file path (defaults to config.default_output)
        config: Optional run configuration

    Returns:
        Number of instructions emitted
    """
    return Assembler(config).assemble_file(filepath, output)
