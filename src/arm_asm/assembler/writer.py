"""
Object Writer
=============

Appends encoded instructions to the object stream in program order.

Object Formats
--------------
``lines`` (default)
    One 32-character word per line, each terminated by ``\\n``.

``packed``
    Words written back to back with no separator. This is the layout
    of a classic ``binary.obj``; a loader splits it every 32
    characters.

Each emit() writes and flushes before returning, so a word is on its way
to the file as soon as the encoder produced it. Any OSError becomes an
ObjectWriteError, which aborts the run.
"""

import io
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, TextIO

from arm_asm.config import OUTPUT_FORMATS
from arm_asm.errors import ObjectWriteError

logger = logging.getLogger(__name__)

WORD_LENGTH = 32


class ObjectWriter:
    """
    Writes 32-bit binary strings to a text stream.

    Usage:
        with ObjectWriter.open("binary.obj") as writer:
            writer.emit("0000" + "1111" + "0" * 24)

    Attributes:
        count: Number of words emitted so far
    """

    def __init__(self, stream: TextIO, fmt: str = "lines", name: str = "<stream>"):
        """
        Args:
            stream: Open text stream to append to
            fmt: Output format, "lines" or "packed"
            name: Display name of the target, for error messages
        """
        if fmt not in OUTPUT_FORMATS:
            raise ValueError(
                f"unknown object format '{fmt}' "
                f"(expected one of: {', '.join(OUTPUT_FORMATS)})"
            )
        self._stream = stream
        self._separator = OUTPUT_FORMATS[fmt]
        self.format = fmt
        self.name = name
        self.count = 0

    @classmethod
    @contextmanager
    def open(
        cls,
        path: str | Path,
        fmt: str = "lines",
        append: bool = False,
    ) -> Iterator["ObjectWriter"]:
        """
        Open a file and yield a writer for it.

        Args:
            path: Output file path
            fmt: Output format
            append: Append to an existing file instead of truncating it

        Raises:
            ObjectWriteError: If the file cannot be opened
        """
        mode = "a" if append else "w"
        try:
            stream = open(path, mode, encoding="ascii", newline="")
        except OSError as e:
            raise ObjectWriteError(str(path), e.strerror or str(e)) from e

        try:
            yield cls(stream, fmt, name=str(path))
        finally:
            stream.close()

    @classmethod
    def in_memory(cls, fmt: str = "lines") -> "ObjectWriter":
        """Create a writer backed by an in-memory buffer."""
        return cls(io.StringIO(), fmt, name="<memory>")

    def emit(self, bits: str) -> None:
        """
        Append one encoded instruction.

        Args:
            bits: 32-character string of '0'/'1'

        Raises:
            ValueError: If bits is not a complete 32-bit word
            ObjectWriteError: If the stream cannot be written
        """
        if len(bits) != WORD_LENGTH or set(bits) - {"0", "1"}:
            raise ValueError(f"not a {WORD_LENGTH}-bit binary word: {bits!r}")

        try:
            self._stream.write(bits + self._separator)
            self._stream.flush()
        except OSError as e:
            raise ObjectWriteError(self.name, e.strerror or str(e)) from e

        self.count += 1
        logger.debug("emitted word %d: %s", self.count, bits)

    def getvalue(self) -> str:
        """Return everything written, for in-memory writers."""
        if not isinstance(self._stream, io.StringIO):
            raise TypeError("getvalue() is only available on in-memory writers")
        return self._stream.getvalue()

    def words(self) -> list[str]:
        """Return the emitted words of an in-memory writer."""
        text = self.getvalue()
        if self._separator:
            return [w for w in text.split(self._separator) if w]
        return [text[i:i + WORD_LENGTH] for i in range(0, len(text), WORD_LENGTH)]
