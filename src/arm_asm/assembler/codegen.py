"""
ARM Code Generator
==================

This module runs the two-pass encoding session for one translation unit.

Pass 1 (label pass)
-------------------
Every line is classified once. Directive lines (``name DCD value``) add
constants to the Symbol Table, code labels are recorded, and each
instruction line is given its address (instruction index * 4; every
encoded form is exactly one word). Malformed directives are reported and
skipped.

Pass 2 (encode pass)
--------------------
Every instruction is resolved against the Register Resolver and Symbol
Table, handed to its family encoder, and the resulting word is passed to
the Object Writer immediately, in source order.

Error Policy
------------
Per-line errors are collected and the line contributes no word; the
remaining lines are still encoded. Only an ObjectWriteError (the output
stream failed) escapes generate().

All state (symbols, register bindings, listing, errors) belongs to one
CodeGenerator, so two runs never share anything.
"""

from dataclasses import dataclass
from typing import Optional, Sequence
import logging

from arm_asm.config import AssemblerConfig
from arm_asm.cpu import (
    COMPARISON_OPCODES,
    MOVE_OPCODES,
    SHIFT_TYPES,
    SINGLE_DATA_TRANSFER,
    InstructionFamily,
    Opcode,
)
from arm_asm.errors import (
    AssemblerError,
    AssemblySyntaxError,
    ErrorCollector,
    SourceLocation,
    UnrecognizedMnemonicError,
    UnresolvedRegisterError,
)
from arm_asm.assembler.encoders import (
    encode_branch,
    encode_branch_exchange,
    encode_data_processing,
    encode_single_data_transfer,
    encode_software_interrupt,
    encode_swap,
    immediate_operand2,
    register_operand2,
)
from arm_asm.assembler.expressions import ExpressionEvaluator, parse_literal
from arm_asm.assembler.parser import (
    Directive,
    Instruction,
    LabelDef,
    Operand,
    OperandKind,
    Statement,
    UnknownStatement,
    parse_line,
)
from arm_asm.assembler.registers import FALLBACK_REGISTER, RegisterResolver
from arm_asm.assembler.symbols import SymbolKind, SymbolTable
from arm_asm.assembler.writer import ObjectWriter

logger = logging.getLogger(__name__)

WORD_SIZE = 4

# Base register used when a transfer addresses a symbol directly
SYMBOL_BASE_REGISTER = 0


# =============================================================================
# Listing Entry
# =============================================================================

@dataclass(frozen=True)
class ListingLine:
    """
    One encoded instruction, for the listing file.

    Attributes:
        address: Byte address of the instruction
        bits: The 32-character encoding
        line: Source line number
        source: Source text (comment included)
    """
    address: int
    bits: str
    line: int
    source: str


@dataclass
class _SourceLine:
    """A classified line carried from pass 1 to pass 2."""
    number: int
    statements: list[Statement]


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Encodes one translation unit.

    Usage:
        codegen = CodeGenerator()
        with ObjectWriter.open("binary.obj") as writer:
            count = codegen.generate(lines, writer, "prog.s")
        if codegen.has_errors():
            print(codegen.get_error_report())
    """

    def __init__(self, config: Optional[AssemblerConfig] = None):
        self._config = config or AssemblerConfig()
        self._symbols = SymbolTable()
        self._registers = RegisterResolver()
        self._evaluator = ExpressionEvaluator(self._symbols)
        self._errors = ErrorCollector()
        self._listing: list[ListingLine] = []
        self._addresses: dict[int, int] = {}   # id(Instruction) -> address
        self._instruction_slots = 0
        self._emitted = 0

    # =========================================================================
    # Public Interface
    # =========================================================================

    def generate(
        self,
        lines: Sequence[str],
        writer: ObjectWriter,
        filename: str = "<input>",
    ) -> int:
        """
        Run both passes and emit every encodable instruction.

        Args:
            lines: Source lines in order
            writer: Destination for encoded words
            filename: Source name for diagnostics

        Returns:
            Number of instructions emitted

        Raises:
            ObjectWriteError: If the writer fails (fatal)
        """
        logger.debug("pass 1: %d lines from %s", len(lines), filename)
        classified = self._pass1(lines, filename)

        logger.debug(
            "pass 2: %d instruction slots, %d symbols",
            self._instruction_slots, len(self._symbols),
        )
        self._pass2(classified, writer)

        logger.debug(
            "generated %d words with %d errors and %d warnings",
            self._emitted, self._errors.error_count(), self._errors.warning_count(),
        )
        return self._emitted

    @property
    def instruction_count(self) -> int:
        """Number of instructions emitted by this session."""
        return self._emitted

    @property
    def symbols(self) -> SymbolTable:
        return self._symbols

    @property
    def registers(self) -> RegisterResolver:
        return self._registers

    @property
    def errors(self) -> ErrorCollector:
        return self._errors

    def get_symbols(self) -> dict[str, int]:
        """Return a dictionary of symbol names to (first-definition) values."""
        return self._symbols.as_dict()

    def has_errors(self) -> bool:
        """Check if any errors occurred during assembly."""
        return self._errors.has_errors()

    def get_error_report(self) -> str:
        """Get formatted error report."""
        return self._errors.report()

    def get_listing_lines(self) -> list[ListingLine]:
        return list(self._listing)

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            Listing with addresses, encodings and source lines, followed
            by the symbol table.
        """
        lines = []
        lines.append("ARM Assembler Listing")
        lines.append("=" * 72)
        lines.append("")
        lines.append(f"Addr      {'Encoding':32s}  Line  Source")
        lines.append("-" * 72)
        for entry in self._listing:
            lines.append(
                f"{entry.address:08X}  {entry.bits}  {entry.line:4d}  {entry.source.strip()}"
            )
        lines.append("")
        lines.append("Symbol Table")
        lines.append("-" * 30)
        for name, value in sorted(self._symbols.as_dict().items()):
            lines.append(f"{name:20s} = &{value:X}")
        return "\n".join(lines)

    def dump_tables(self) -> str:
        """
        Render the symbol entries and register bindings for debugging.

        Every entry is shown, including later duplicates that are never
        resolved against.
        """
        lines = ["*** LABELS ***"]
        for symbol in self._symbols:
            lines.append(
                f"{symbol.name} = &{symbol.value:X} "
                f"({symbol.kind.value}, line {symbol.location.line})"
            )
        lines.append("*** REGISTERS ***")
        for name, index in self._registers.bindings:
            lines.append(f"{name} -> R{index} ({index:04b})")
        return "\n".join(lines)

    # =========================================================================
    # Pass 1: Symbols and Addresses
    # =========================================================================

    def _pass1(self, lines: Sequence[str], filename: str) -> list[_SourceLine]:
        """
        First pass: classify lines, collect symbols, assign addresses.
        """
        classified: list[_SourceLine] = []
        pending_labels: list[LabelDef] = []

        for number, line in enumerate(lines, start=1):
            try:
                statements = parse_line(line, number, filename)
            except AssemblerError as e:
                self._errors.add(e)
                continue

            for stmt in statements:
                if isinstance(stmt, LabelDef):
                    pending_labels.append(stmt)

                elif isinstance(stmt, Directive):
                    self._define_constant(stmt)

                elif isinstance(stmt, Instruction):
                    address = self._instruction_slots * WORD_SIZE
                    self._addresses[id(stmt)] = address
                    self._instruction_slots += 1
                    for label in pending_labels:
                        self._define_label(label, address)
                    pending_labels.clear()

            classified.append(_SourceLine(number, statements))

        # Labels after the last instruction point just past the end
        end_address = self._instruction_slots * WORD_SIZE
        for label in pending_labels:
            self._define_label(label, end_address)

        return classified

    def _define_constant(self, directive: Directive) -> None:
        """Add a DCD/DCW constant to the Symbol Table."""
        try:
            value = parse_literal(directive.value, location=directive.location)
        except AssemblerError as e:
            self._errors.add(e.attach(directive.location, directive.source))
            return

        self._add_symbol(directive.name, value, directive.location, SymbolKind.CONSTANT)

    def _define_label(self, label: LabelDef, address: int) -> None:
        self._add_symbol(label.name, address, label.location, SymbolKind.LABEL)

    def _add_symbol(
        self,
        name: str,
        value: int,
        location: SourceLocation,
        kind: SymbolKind,
    ) -> None:
        existing = self._symbols.define(name, value, location, kind)
        if existing is not None:
            self._errors.add_warning(
                f"{location}: warning: '{name}' redefined; "
                f"the definition at line {existing.location.line} is used"
            )
        else:
            logger.debug("symbol %s = %#x (%s)", name, value, kind.value)

    # =========================================================================
    # Pass 2: Encoding
    # =========================================================================

    def _pass2(self, classified: list[_SourceLine], writer: ObjectWriter) -> None:
        """
        Second pass: encode instructions and forward them to the writer.
        """
        for source_line in classified:
            for stmt in source_line.statements:
                if isinstance(stmt, Instruction):
                    self._pass2_instruction(stmt, writer)
                elif isinstance(stmt, UnknownStatement):
                    self._report_unknown(stmt)

    def _pass2_instruction(self, inst: Instruction, writer: ObjectWriter) -> None:
        address = self._addresses[id(inst)]
        try:
            bits = self._encode(inst, address)
        except AssemblerError as e:
            self._errors.add(e.attach(inst.location, inst.source))
            return

        writer.emit(bits)
        self._emitted += 1
        if self._config.listing:
            self._listing.append(
                ListingLine(address, bits, inst.location.line, inst.source)
            )

    def _report_unknown(self, stmt: UnknownStatement) -> None:
        error = UnrecognizedMnemonicError(stmt.mnemonic, stmt.location, stmt.source)
        if self._config.strict:
            self._errors.add(error)
        else:
            self._errors.add_warning(
                f"{stmt.location}: warning: unrecognized mnemonic "
                f"'{stmt.mnemonic}', line skipped"
            )

    def _encode(self, inst: Instruction, address: int) -> str:
        """Dispatch to the encoder for the instruction's family."""
        family = inst.info.family

        if family in (InstructionFamily.BRANCH, InstructionFamily.BRANCH_LINK):
            return self._encode_branch(inst, address)
        if family is InstructionFamily.BRANCH_EXCHANGE:
            return self._encode_branch_exchange(inst)
        if family is InstructionFamily.DATA_PROCESSING:
            return self._encode_data_processing(inst)
        if family is InstructionFamily.SINGLE_DATA_TRANSFER:
            return self._encode_single_data_transfer(inst)
        if family is InstructionFamily.SWAP:
            return self._encode_swap(inst)
        if family is InstructionFamily.SOFTWARE_INTERRUPT:
            return self._encode_software_interrupt(inst)

        raise AssemblySyntaxError(f"unsupported instruction family {family}", inst.location)

    # =========================================================================
    # Family Handlers
    # =========================================================================

    def _encode_branch(self, inst: Instruction, address: int) -> str:
        """
        B/BL: the offset is the signed word distance from the instruction
        after the branch to the target.
        """
        self._expect_operands(inst, 1, "a branch target")
        target = inst.operands[0]

        if target.kind is OperandKind.NAME:
            target_address = self._evaluator.lookup(target.text, target.location)
        elif target.kind is OperandKind.NUMBER:
            target_address = parse_literal(target.text, location=target.location)
        else:
            raise AssemblySyntaxError(
                "branch target must be a label or an address",
                target.location,
            )

        if target_address % WORD_SIZE:
            raise AssemblySyntaxError(
                f"branch target &{target_address:X} is not word aligned",
                target.location,
            )

        offset = (target_address - (address + WORD_SIZE)) // WORD_SIZE
        link = inst.info.family is InstructionFamily.BRANCH_LINK
        return encode_branch(inst.info.condition, link, offset)

    def _encode_branch_exchange(self, inst: Instruction) -> str:
        self._expect_operands(inst, 1, "a register")
        rm = self._register(inst.operands[0])
        return encode_branch_exchange(inst.info.condition, rm)

    def _encode_data_processing(self, inst: Instruction) -> str:
        """
        Operand layouts:
            MOV/MVN Rd, Op2              (Rn = 0)
            CMP/CMN/TST/TEQ Rn, Op2      (Rd = 0, S = 1)
            OP Rd, Rn, Op2
            OP Rd, Op2                   (Rn = Rd)
        Op2 is #imm, Rm, or Rm followed by a shift operand.
        """
        opcode = Opcode[inst.info.base]
        operands = list(inst.operands)

        shift: Optional[Operand] = None
        if operands and operands[-1].kind is OperandKind.SHIFT:
            shift = operands.pop()

        if opcode in MOVE_OPCODES or opcode in COMPARISON_OPCODES:
            if len(operands) != 2:
                raise self._operand_count_error(inst, "2 operands (register, operand2)")
            first = self._register(operands[0])
            rd, rn = (first, 0) if opcode in MOVE_OPCODES else (0, first)
        elif len(operands) == 3:
            rd = self._register(operands[0])
            rn = self._register(operands[1])
        elif len(operands) == 2:
            rd = rn = self._register(operands[0])
        else:
            raise self._operand_count_error(inst, "2 or 3 operands")

        operand2, immediate = self._operand2(operands[-1], shift)
        return encode_data_processing(
            inst.info.condition, opcode, inst.info.set_flags,
            rn, rd, operand2, immediate,
        )

    def _operand2(self, operand: Operand, shift: Optional[Operand]) -> tuple[int, bool]:
        """Return (12-bit operand2, immediate flag)."""
        if operand.kind is OperandKind.IMMEDIATE:
            if shift is not None:
                raise AssemblySyntaxError(
                    "an immediate operand cannot be shifted", shift.location
                )
            value = self._evaluator.evaluate(operand.text, operand.location)
            return immediate_operand2(value), True

        if operand.kind is OperandKind.NAME:
            rm = self._register(operand)
            if shift is None:
                return register_operand2(rm), False
            amount = parse_literal(shift.amount, location=shift.location)
            return register_operand2(rm, SHIFT_TYPES[shift.text], amount), False

        raise AssemblySyntaxError(
            f"expected a register or #immediate, found '{operand.text}'",
            operand.location,
            hint="immediate values are written with '#', e.g. #4 or #&FF",
        )

    def _encode_single_data_transfer(self, inst: Instruction) -> str:
        """
        Address forms:
            symbol            Rn = 0, offset = symbol value; binds symbol -> Rd
            Rn / [Rn]         register indirect, offset 0
            [Rn, #off]{!}     pre-indexed, optional write-back
            [Rn, Rm]{!}       pre-indexed by register
            [Rn], #off        post-indexed
        """
        operands = inst.operands
        if len(operands) not in (2, 3):
            raise self._operand_count_error(inst, "a register and an address")

        load = bool(SINGLE_DATA_TRANSFER[inst.info.base])
        cond = inst.info.condition
        byte = inst.info.byte
        rd = self._register(operands[0])
        address = operands[1]

        if len(operands) == 3:
            post = operands[2]
            if (address.kind is not OperandKind.MEMORY or address.offset is not None
                    or address.index is not None
                    or address.writeback or post.kind is not OperandKind.IMMEDIATE):
                raise AssemblySyntaxError(
                    "post-indexed addressing is written [Rn], #offset",
                    address.location,
                )
            rn = self._register_name(address.base, address.location)
            offset = parse_literal(post.text, location=post.location)
            return encode_single_data_transfer(
                cond, load, rd, rn, abs(offset),
                pre_index=False, up=offset >= 0, byte=byte,
            )

        if address.kind is OperandKind.NAME:
            symbol = self._symbols.lookup(address.text)
            if symbol is not None:
                bits = encode_single_data_transfer(
                    cond, load, rd, SYMBOL_BASE_REGISTER, abs(symbol.value),
                    up=symbol.value >= 0, byte=byte,
                )
                # Bind only once the line has encoded
                self._registers.bind(address.text, rd)
                return bits
            if self._registers.lookup(address.text) is None:
                # Neither a register nor a symbol: report it as a missing symbol
                self._evaluator.lookup(address.text, address.location)
            rn = self._register(address)
            return encode_single_data_transfer(cond, load, rd, rn, 0, byte=byte)

        if address.kind is OperandKind.MEMORY:
            rn = self._register_name(address.base, address.location)
            if address.index is not None:
                rm = self._register_name(address.index, address.location)
                return encode_single_data_transfer(
                    cond, load, rd, rn, byte=byte,
                    writeback=address.writeback, register_offset=rm,
                )
            offset = 0
            if address.offset is not None:
                offset = parse_literal(address.offset, location=address.location)
            return encode_single_data_transfer(
                cond, load, rd, rn, abs(offset),
                up=offset >= 0, byte=byte, writeback=address.writeback,
            )

        raise AssemblySyntaxError(
            f"expected a symbol or [Rn] address, found '{address.text}'",
            address.location,
        )

    def _encode_swap(self, inst: Instruction) -> str:
        self._expect_operands(inst, 3, "Rd, Rm, [Rn]")
        rd = self._register(inst.operands[0])
        rm = self._register(inst.operands[1])
        base = inst.operands[2]
        if base.kind is OperandKind.MEMORY:
            if base.offset is not None or base.index is not None or base.writeback:
                raise AssemblySyntaxError("SWP takes a plain [Rn] base", base.location)
            rn = self._register_name(base.base, base.location)
        else:
            rn = self._register(base)
        return encode_swap(rd, rm, rn)

    def _encode_software_interrupt(self, inst: Instruction) -> str:
        """SWI/SVC: the operand is always read as hexadecimal."""
        self._expect_operands(inst, 1, "a hexadecimal value")
        operand = inst.operands[0]
        if operand.kind is OperandKind.MEMORY or operand.kind is OperandKind.SHIFT:
            raise AssemblySyntaxError(
                f"expected a hexadecimal value, found '{operand.text}'",
                operand.location,
            )
        value = parse_literal(operand.text, base=16, location=operand.location)
        return encode_software_interrupt(value)

    # =========================================================================
    # Operand Helpers
    # =========================================================================

    def _expect_operands(self, inst: Instruction, count: int, what: str) -> None:
        if len(inst.operands) != count:
            raise self._operand_count_error(inst, what)

    def _operand_count_error(self, inst: Instruction, what: str) -> AssemblySyntaxError:
        found = len(inst.operands)
        return AssemblySyntaxError(
            f"'{inst.mnemonic}' expects {what}, found {found} operand(s)",
            inst.location,
        )

    def _register(self, operand: Operand) -> int:
        """Resolve an operand that must name a register."""
        if operand.kind is not OperandKind.NAME:
            raise AssemblySyntaxError(
                f"expected a register, found '{operand.text}'",
                operand.location,
            )
        return self._register_name(operand.text, operand.location)

    def _register_name(self, name: str, location: SourceLocation) -> int:
        index = self._registers.lookup(name)
        if index is not None:
            return index
        if self._config.strict:
            raise UnresolvedRegisterError(name, location)
        self._errors.add_warning(
            f"{location}: warning: unresolved register '{name}' "
            f"encoded as R{FALLBACK_REGISTER}"
        )
        return FALLBACK_REGISTER
