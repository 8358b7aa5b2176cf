"""
ARM Assembler Command-Line Interface
====================================

This package provides the command-line tool for the assembler:

- **armasm**: ARM subset assembler

The tool is a Click-based CLI application with help text and
consistent exit codes (see arm_asm.cli.errors).
"""

__all__ = ["armasm"]
