"""
Assembler Configuration
=======================

Settings that change how a run behaves. Configuration can come from:
- Default values (defined here)
- Environment variables (AssemblerConfig.from_env)
- Command-line options (applied on top by the armasm CLI)

Environment variables (all optional):
    ARMASM_OUTPUT   Default object file path (default: binary.obj)
    ARMASM_FORMAT   Object format: "lines" or "packed" (default: lines)
    ARMASM_STRICT   "1"/"0": unresolved registers and unknown mnemonics
                    are errors (1) or warnings (0). Default: 1
    ARMASM_APPEND   "1"/"0": append to the object file instead of
                    replacing it. Default: 0
"""

from dataclasses import dataclass, replace
from pathlib import Path
import os


# Object format name -> separator written after each word
OUTPUT_FORMATS = {
    "lines": "\n",
    "packed": "",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be one of 1/0, true/false, yes/no, on/off (got '{value}')")


@dataclass(frozen=True)
class AssemblerConfig:
    """
    Configuration for one assembler run.

    Attributes:
        output_format: Object format, "lines" or "packed"
        strict: Report unresolved registers and unrecognized mnemonics as
                errors. When False they become warnings; an unresolved
                register then encodes as 0000 and an unknown line is skipped.
        append: Append to the object file rather than truncating it
        default_output: Object file used when none is given
        listing: Keep per-instruction listing rows
    """

    output_format: str = "lines"
    strict: bool = True
    append: bool = False
    default_output: Path = Path("binary.obj")
    listing: bool = True

    def __post_init__(self) -> None:
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"output_format must be one of {', '.join(OUTPUT_FORMATS)} "
                f"(got '{self.output_format}')"
            )

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """
        Create a configuration from environment variables.

        Raises:
            ValueError: If a variable holds an invalid value
        """
        config = cls()

        if output := os.environ.get("ARMASM_OUTPUT"):
            config = replace(config, default_output=Path(output))

        if fmt := os.environ.get("ARMASM_FORMAT"):
            config = replace(config, output_format=fmt.strip().lower())

        if strict := os.environ.get("ARMASM_STRICT"):
            config = replace(config, strict=_parse_bool("ARMASM_STRICT", strict))

        if append := os.environ.get("ARMASM_APPEND"):
            config = replace(config, append=_parse_bool("ARMASM_APPEND", append))

        return config

    def with_overrides(self, **overrides) -> "AssemblerConfig":
        """Return a copy with the non-None overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)
