"""
armasm - ARM Assembler Command-Line Interface
=============================================

This module implements the command-line interface for the ARM subset
assembler.

Usage Examples
--------------
Basic assembly (writes binary.obj):
    $ armasm prog.s

With output file:
    $ armasm prog.s -o prog.obj

Original packed layout, appended to an existing object file:
    $ armasm prog.s --format packed --append

Generate listing and symbol files:
    $ armasm prog.s -o prog.obj -l prog.lst -s prog.sym

Print the label and register tables:
    $ armasm -g prog.s

Environment variables ARMASM_OUTPUT, ARMASM_FORMAT, ARMASM_STRICT and
ARMASM_APPEND provide defaults; command-line options override them.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from arm_asm import __version__
from arm_asm.assembler import Assembler
from arm_asm.config import OUTPUT_FORMATS, AssemblerConfig
from arm_asm.cli.errors import ExitCode, handle_cli_exception


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output object file (default: binary.obj)",
)
@click.option(
    "-f", "--format", "output_format",
    type=click.Choice(sorted(OUTPUT_FORMATS), case_sensitive=False),
    default=None,
    help="Object layout: one word per line, or words packed back to back",
)
@click.option(
    "--append",
    is_flag=True,
    help="Append to the object file instead of replacing it",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Report unresolved registers and unknown mnemonics as errors (default)",
)
@click.option(
    "--permissive",
    is_flag=True,
    help="Report unresolved registers and unknown mnemonics as warnings; "
         "an unresolved register encodes as R0",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "-g", "--debug",
    is_flag=True,
    help="Print the label and register binding tables",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="armasm")
def main(
    input_file: Path,
    output: Optional[Path],
    output_format: Optional[str],
    append: bool,
    strict: bool,
    permissive: bool,
    listing: Optional[Path],
    symbols: Optional[Path],
    debug: bool,
    verbose: bool,
) -> None:
    """
    Assemble ARM source code into 32-bit binary words.

    INPUT_FILE is the assembly source file to assemble.

    Each instruction becomes one 32-character string of 0s and 1s in the
    object file. Lines with errors are reported and skipped; the rest of
    the file is still assembled.

    \b
    Examples:
        armasm prog.s                   # Outputs binary.obj
        armasm prog.s -o out.obj        # Specify output file
        armasm prog.s --format packed   # Words back to back
    """
    setup_logging(verbose)

    try:
        if strict and permissive:
            raise click.BadParameter("--strict and --permissive are mutually exclusive")

        try:
            config = AssemblerConfig.from_env().with_overrides(
                output_format=output_format.lower() if output_format else None,
                strict=False if permissive else (True if strict else None),
                append=True if append else None,
            )
        except ValueError as e:
            raise click.BadParameter(str(e)) from e

        output_file = output if output is not None else config.default_output

        asm = Assembler(config)
        count = asm.assemble_file(input_file, output_file)

        if listing:
            asm.write_listing(listing)

        if symbols:
            asm.write_symbols(symbols)

        if debug:
            click.echo(asm.dump_tables())

        if asm.has_errors():
            click.echo(asm.get_error_report(), err=True)
            sys.exit(ExitCode.BUILD_ERROR)

        if asm.get_warnings():
            click.echo(asm.get_error_report(), err=True)

        click.echo(f"Assembled {count} instructions to {output_file}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
