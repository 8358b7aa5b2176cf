# =============================================================================
# test_expressions.py - Literal and Symbol Evaluation Tests
# =============================================================================
# Tests for literal parsing and operand evaluation against the Symbol Table.
#
# Test coverage includes:
#   - Decimal, &hex and 0x hex literals
#   - Base-16 default for software-interrupt operands
#   - Symbol lookup and unresolved-symbol suggestions
# =============================================================================

import pytest
from arm_asm.assembler.expressions import ExpressionEvaluator, is_literal, parse_literal
from arm_asm.assembler.symbols import SymbolKind, SymbolTable
from arm_asm.errors import InvalidLiteralError, SourceLocation, UnresolvedSymbolError


LOC = SourceLocation("test.s", 1)


# =============================================================================
# Literal Tests
# =============================================================================

class TestParseLiteral:
    """Numeric literal formats."""

    @pytest.mark.parametrize("text,value", [
        ("0", 0),
        ("42", 42),
        ("&2A", 42),
        ("&ff", 255),
        ("0x2A", 42),
        ("0X10", 16),
        ("-4", -4),
        ("-&10", -16),
    ])
    def test_formats(self, text, value):
        assert parse_literal(text) == value

    def test_base16_default(self):
        """Unprefixed digits are hexadecimal when the caller asks for base 16."""
        assert parse_literal("10", base=16) == 16
        assert parse_literal("A", base=16) == 10
        assert parse_literal("&A", base=16) == 10

    @pytest.mark.parametrize("text", ["", "&", "12AB", "0x", "-", "&G1", "ten"])
    def test_invalid(self, text):
        with pytest.raises(InvalidLiteralError):
            parse_literal(text)

    def test_invalid_hex_reports_base(self):
        with pytest.raises(InvalidLiteralError) as exc_info:
            parse_literal("XYZ", base=16, location=LOC)
        assert exc_info.value.base == 16
        assert "hexadecimal" in str(exc_info.value)
        assert exc_info.value.location == LOC

    def test_is_literal(self):
        assert is_literal("42")
        assert is_literal("&FF")
        assert is_literal("-1")
        assert not is_literal("count")
        assert not is_literal("")


# =============================================================================
# Evaluator Tests
# =============================================================================

class TestExpressionEvaluator:
    """Literal-or-symbol evaluation."""

    @pytest.fixture
    def evaluator(self):
        symbols = SymbolTable()
        symbols.define("count", 10, LOC)
        symbols.define("loop", 8, LOC, SymbolKind.LABEL)
        return ExpressionEvaluator(symbols)

    def test_literal(self, evaluator):
        assert evaluator.evaluate("&20") == 32

    def test_symbol(self, evaluator):
        assert evaluator.evaluate("count") == 10
        assert evaluator.lookup("loop") == 8

    def test_unresolved(self, evaluator):
        with pytest.raises(UnresolvedSymbolError) as exc_info:
            evaluator.evaluate("missing", LOC)
        assert exc_info.value.symbol == "missing"
        assert exc_info.value.location == LOC

    def test_suggestion(self, evaluator):
        with pytest.raises(UnresolvedSymbolError) as exc_info:
            evaluator.lookup("cuont")
        assert "count" in exc_info.value.similar_symbols
        assert "did you mean 'count'" in str(exc_info.value)
