# =============================================================================
# test_codegen.py - Code Generator Tests
# =============================================================================
# Tests for the two-pass encoding session.
#
# Test coverage includes:
#   - Label pass: constants, code labels, addresses, duplicates
#   - Encode pass for every family and operand form
#   - Forward references and branch offsets
#   - Register bindings made by transfers
#   - Strict and permissive handling of unresolved names
#   - Per-line error collection with 1-based line numbers
# =============================================================================

import pytest
from arm_asm.assembler.codegen import CodeGenerator
from arm_asm.assembler.writer import ObjectWriter
from arm_asm.config import AssemblerConfig
from arm_asm.cpu import COMPARISON_OPCODES, MOVE_OPCODES, Opcode
from arm_asm.errors import (
    AssemblySyntaxError,
    FieldOverflowError,
    InvalidLiteralError,
    MalformedDirectiveError,
    UnrecognizedMnemonicError,
    UnresolvedRegisterError,
    UnresolvedSymbolError,
)


# =============================================================================
# Helper Functions
# =============================================================================

def run(source: str, **config) -> tuple[list[str], CodeGenerator]:
    """Assemble source and return (words, session)."""
    codegen = CodeGenerator(AssemblerConfig(**config))
    writer = ObjectWriter.in_memory()
    codegen.generate(source.splitlines(), writer, "test.s")
    return writer.words(), codegen


def encode(line: str) -> str:
    """Assemble one error-free line and return its word."""
    words, codegen = run(line)
    assert not codegen.has_errors(), codegen.get_error_report()
    assert len(words) == 1
    return words[0]


def error_types(codegen: CodeGenerator) -> list[type]:
    return [type(e) for e in codegen.errors.errors]


PROGRAM = """\
count   DCD &10          ; loop counter start
loop:   LDR  R0, count
        SUBS R0, R0, #1
        BNE  loop
        SWI  &11
"""


# =============================================================================
# Whole Programs
# =============================================================================

class TestPrograms:
    """End-to-end encoding of small programs."""

    def test_program(self):
        words, codegen = run(PROGRAM)
        assert not codegen.has_errors()
        assert words == [
            "11100101100100000000000000010000",        # LDR R0, count
            "11100010010100000000000000000001",        # SUBS R0, R0, #1
            "00011010" + "1" * 22 + "01",              # BNE loop (offset -3)
            "00001111000000000000000000010001",        # SWI &11
        ]
        assert codegen.instruction_count == 4

    def test_symbols(self):
        _, codegen = run(PROGRAM)
        assert codegen.get_symbols() == {"count": 16, "loop": 0}

    def test_idempotent(self):
        """Two runs over the same lines give identical output."""
        first, _ = run(PROGRAM)
        second, _ = run(PROGRAM)
        assert first == second

    def test_sessions_are_independent(self):
        """Bindings from one run never leak into another."""
        _, codegen = run("x DCD 4\nLDR R3, x")
        assert codegen.registers.lookup("x") == 3
        words, other = run("MOV R0, x")
        assert other.has_errors()
        assert words == []

    def test_blank_and_comment_lines(self):
        words, codegen = run("\n; header\n\n   MOV R1, R2 ; copy\n")
        assert not codegen.has_errors()
        assert words == ["11100001101000000001000000000010"]


# =============================================================================
# Branches
# =============================================================================

class TestBranches:
    """Offsets are word distances from the instruction after the branch."""

    def test_forward_reference(self):
        words, codegen = run("B end\nMOV R0, R1\nend: SWI 0")
        assert not codegen.has_errors()
        assert words[0] == "11101010" + "0" * 23 + "1"

    def test_label_at_end_of_file(self):
        words, _ = run("B end\nend:")
        assert words == ["11101010" + "0" * 24]

    def test_branch_to_self(self):
        words, _ = run("here B here")
        assert words == ["11101010" + "1" * 24]

    def test_branch_link(self):
        words, _ = run("BL func\nfunc: MOV PC, LR")
        assert words[0] == "11101011" + "0" * 24

    def test_conditional_branch(self):
        """BLS is B with the LS condition, not BL with an S suffix."""
        words, codegen = run("top: BLS top")
        assert not codegen.has_errors()
        assert words == ["1001" + "1010" + "1" * 24]

    def test_branch_exchange(self):
        assert encode("BX LR") == "1110" + "000100101111111111110001" + "1110"

    def test_missing_target_is_syntax_error(self):
        """BEQ with no operand reports a syntax error and emits nothing."""
        words, codegen = run("BEQ")
        assert words == []
        assert error_types(codegen) == [AssemblySyntaxError]

    def test_undefined_target(self):
        words, codegen = run("B nowhere")
        assert words == []
        assert error_types(codegen) == [UnresolvedSymbolError]

    def test_misaligned_constant_target(self):
        _, codegen = run("addr DCD 6\nB addr")
        assert error_types(codegen) == [AssemblySyntaxError]

    def test_constant_target(self):
        words, _ = run("addr DCD 8\nB addr")
        assert words == ["11101010" + "0" * 23 + "1"]


# =============================================================================
# Data Processing
# =============================================================================

class TestDataProcessing:
    """Operand layouts and Operand2 forms."""

    def test_unconditional_is_always(self):
        assert encode("MOV R1, R2")[:4] == "1110"

    def test_destination_register_field(self):
        """Changing only Rd changes only bits 15-12."""
        first = encode("MOV R1, R2")
        second = encode("MOV R3, R2")
        assert first[:16] == second[:16]
        assert first[20:] == second[20:]
        assert first[16:20] == "0001"
        assert second[16:20] == "0011"

    def test_three_operands_with_shift(self):
        bits = encode("ADD R0, R1, R2, LSL #2")
        assert bits == "1110" + "00" + "0" + "0100" + "0" + "0001" + "0000" + "000100000010"

    def test_two_operand_form(self):
        bits = encode("ADD R1, R2")
        assert bits == "1110" + "00" + "0" + "0100" + "0" + "0001" + "0001" + "000000000010"

    def test_compare_immediate(self):
        bits = encode("CMP R1, #5")
        assert bits == "1110" + "00" + "1" + "1010" + "1" + "0001" + "0000" + "000000000101"

    def test_symbolic_immediate(self):
        words, codegen = run("limit DCD &FF\nMOV R0, #limit")
        assert not codegen.has_errors()
        assert words[0][-12:] == "000011111111"
        assert words[0][6] == "1"

    def test_conditional_with_flags(self):
        bits = encode("ADDEQS R0, R0, #1")
        assert bits[:4] == "0000"
        assert bits[11] == "1"

    def test_unencodable_immediate(self):
        words, codegen = run("MOV R0, #&101")
        assert words == []
        assert error_types(codegen) == [FieldOverflowError]

    def test_wrong_operand_count(self):
        _, codegen = run("MOV R0")
        assert error_types(codegen) == [AssemblySyntaxError]

    def test_bare_number_operand(self):
        _, codegen = run("MOV R0, 5")
        assert error_types(codegen) == [AssemblySyntaxError]
        assert "'#'" in codegen.get_error_report()

    @pytest.mark.parametrize("opcode", list(Opcode), ids=lambda op: op.name)
    def test_every_opcode_field(self, opcode):
        """Each mnemonic emits its own 4-bit opcode in a 32-bit word."""
        if opcode in MOVE_OPCODES or opcode in COMPARISON_OPCODES:
            line = f"{opcode.name} R1, #1"
        else:
            line = f"{opcode.name} R1, R2, #1"
        bits = encode(line)
        assert len(bits) == 32
        assert bits[:4] == "1110"
        assert bits[7:11] == opcode.bits
        assert bits[11] == ("1" if opcode in COMPARISON_OPCODES else "0")


# =============================================================================
# Single Data Transfer, Swap and Software Interrupt
# =============================================================================

class TestTransfers:
    """LDR/STR address forms and register bindings."""

    def test_register_indirect(self):
        bits = encode("LDR R0, [R1]")
        assert bits == "1110" + "01" + "011001" + "0001" + "0000" + "0" * 12

    def test_register_without_brackets(self):
        assert encode("LDR R0, R1") == encode("LDR R0, [R1]")

    def test_pre_indexed_down_with_writeback(self):
        bits = encode("STR R0, [R1, #-4]!")
        # I=0 P=1 U=0 B=0 W=1 L=0
        assert bits == "1110" + "01" + "010010" + "0001" + "0000" + "000000000100"

    def test_post_indexed(self):
        bits = encode("LDR R0, [R1], #4")
        # I=0 P=0 U=1 B=0 W=0 L=1
        assert bits == "1110" + "01" + "001001" + "0001" + "0000" + "000000000100"

    def test_byte_transfer(self):
        assert encode("STRB R2, [R3]")[9] == "1"

    def test_symbol_binds_register(self):
        """After LDR R1, count the name count resolves to R1."""
        words, codegen = run("count DCD 4\nLDR R1, count\nMOV R2, count")
        assert not codegen.has_errors()
        assert words[1] == "1110000110100000" + "0010" + "000000000001"
        assert codegen.registers.bindings == (("count", 1),)

    def test_first_binding_wins(self):
        words, _ = run("v DCD 0\nLDR R1, v\nLDR R2, v\nMOV R0, v")
        assert words[2][-4:] == "0001"

    def test_symbol_offset_overflow(self):
        _, codegen = run("far DCD &1000\nLDR R0, far")
        assert error_types(codegen) == [FieldOverflowError]

    def test_failed_transfer_binds_nothing(self):
        """A transfer that fails to encode leaves no register binding."""
        words, codegen = run("far DCD &1000\nLDR R5, far\nMOV R1, far")
        assert words == []
        assert codegen.registers.bindings == ()
        assert error_types(codegen) == [FieldOverflowError, UnresolvedRegisterError]

    def test_misspelled_symbol(self):
        words, codegen = run("count DCD 4\nLDR R0, cuont")
        assert words == []
        assert error_types(codegen) == [UnresolvedSymbolError]
        assert "did you mean" in codegen.get_error_report()
        assert "count" in codegen.get_error_report()

    def test_misspelled_symbol_permissive(self):
        """Permissive mode never turns an unknown transfer name into [R0]."""
        words, codegen = run("count DCD 4\nLDR R0, cuont", strict=False)
        assert words == []
        assert error_types(codegen) == [UnresolvedSymbolError]
        assert codegen.registers.bindings == ()

    def test_register_offset(self):
        bits = encode("LDR R0, [R1, R2]")
        # I=1 P=1 U=1 B=0 W=0 L=1
        assert bits == "1110" + "01" + "111001" + "0001" + "0000" + "000000000010"

    def test_register_offset_writeback(self):
        assert encode("STR R0, [R1, R2]!")[6:12] == "111010"

    def test_malformed_post_index(self):
        _, codegen = run("LDR R0, [R1, #4], #4")
        assert error_types(codegen) == [AssemblySyntaxError]

    def test_swap(self):
        assert encode("SWP R0, R1, [R2]") == "00000001000000100000000010010001"
        assert encode("SWP R0, R1, R2") == "00000001000000100000000010010001"


class TestSoftwareInterrupt:
    """SWI/SVC operands are always hexadecimal."""

    def test_swi_hex_sigil(self):
        assert encode("SWI &A") == "00001111000000000000000000001010"

    def test_swi_without_sigil_is_hex(self):
        assert encode("SWI 10") == "00001111" + format(0x10, "024b")
        assert encode("SWI A") == encode("SWI &A")

    def test_svc(self):
        assert encode("SVC 0x11") == encode("SWI &11")

    def test_swi_maximum(self):
        assert encode("SWI &FFFFFF") == "00001111" + "1" * 24

    def test_swi_overflow(self):
        words, codegen = run("SWI &1000000")
        assert words == []
        assert error_types(codegen) == [FieldOverflowError]

    def test_swi_invalid(self):
        _, codegen = run("SWI zz")
        assert error_types(codegen) == [InvalidLiteralError]

    def test_swi_missing_operand(self):
        _, codegen = run("SWI")
        assert error_types(codegen) == [AssemblySyntaxError]


# =============================================================================
# Label Pass
# =============================================================================

class TestLabelPass:
    """Symbol collection and directive handling."""

    def test_duplicate_symbol_first_wins(self):
        words, codegen = run("x DCD 1\nx DCD 2\nLDR R0, x")
        assert not codegen.has_errors()
        assert words[0][-12:] == "000000000001"
        assert codegen.errors.warning_count() == 1
        assert "line 1" in codegen.errors.warnings[0]

    def test_malformed_directive_continues(self):
        words, codegen = run("MOV R0, R1\ncount DCD\nMOV R1, R2")
        assert len(words) == 2
        assert error_types(codegen) == [MalformedDirectiveError]
        assert codegen.errors.errors[0].location.line == 2

    def test_invalid_directive_value(self):
        _, codegen = run("x DCD zz")
        assert error_types(codegen) == [InvalidLiteralError]
        assert "x" not in codegen.get_symbols()

    def test_error_line_keeps_address(self):
        """A line that fails to encode still occupies its address slot."""
        words, _ = run("MOV R0, #&101\nB next\nnext: SWI 0")
        # B at address 4, next at 8: offset 0
        assert words[0] == "11101010" + "0" * 24

    def test_dump_tables(self):
        _, codegen = run(PROGRAM)
        dump = codegen.dump_tables()
        assert "*** LABELS ***" in dump
        assert "count = &10" in dump
        assert "*** REGISTERS ***" in dump
        assert "count -> R0" in dump


# =============================================================================
# Strict and Permissive Modes
# =============================================================================

class TestStrictness:
    """Unresolved registers and unknown mnemonics."""

    def test_unresolved_register_strict(self):
        words, codegen = run("MOV R0, ghost")
        assert words == []
        assert error_types(codegen) == [UnresolvedRegisterError]

    def test_unresolved_register_permissive(self):
        words, codegen = run("MOV R1, ghost", strict=False)
        assert not codegen.has_errors()
        assert words == ["1110000110100000" + "0001" + "000000000000"]
        assert "ghost" in codegen.errors.warnings[0]

    def test_unknown_mnemonic_strict(self):
        words, codegen = run("NOP\nMOV R1, R2")
        assert len(words) == 1
        assert error_types(codegen) == [UnrecognizedMnemonicError]

    def test_unknown_mnemonic_permissive(self):
        words, codegen = run("NOP\nMOV R1, R2", strict=False)
        assert len(words) == 1
        assert not codegen.has_errors()
        assert codegen.errors.warning_count() == 1


# =============================================================================
# Error Reporting
# =============================================================================

class TestErrorReporting:
    """Per-line errors are collected with 1-based line numbers."""

    def test_errors_do_not_stop_the_pass(self):
        words, codegen = run("BEQ\nMOV R1, R2\nB nowhere\nSWI 1")
        assert len(words) == 2
        assert codegen.errors.error_count() == 2

    def test_line_numbers(self):
        _, codegen = run("MOV R1, R2\n\nBEQ")
        error = codegen.errors.errors[0]
        assert error.location.line == 3
        assert error.location.filename == "test.s"

    def test_report_contains_source(self):
        _, codegen = run("MOV R0, #&101")
        report = codegen.get_error_report()
        assert "test.s:1" in report
        assert "MOV R0, #&101" in report
        assert "1 error, 0 warnings" in report

    def test_listing(self):
        _, codegen = run(PROGRAM)
        listing = codegen.get_listing()
        assert "00000000  11100101100100000000000000010000     2" in listing
        assert "count" in listing
