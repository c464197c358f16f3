"""
Тесты для парсера выражений SSI.
"""

import pytest

from ssi.expr.model import (
    BinaryExpr,
    CompareExpr,
    ExprType,
    GroupExpr,
    NotExpr,
    NumberExpr,
    StringExpr,
    VariableExpr,
    WordExpr,
)
from ssi.expr.parser import MAX_NESTING, ExprParser, ParseError


class TestExprParser:

    def setup_method(self):
        self.parser = ExprParser()

    def test_operands(self):
        """Тест атомарных операндов"""
        assert self.parser.parse("$X") == VariableExpr(name="X")
        assert self.parser.parse("${X}") == VariableExpr(name="X")
        assert self.parser.parse("'a b'") == StringExpr(value="a b")
        assert self.parser.parse("42") == NumberExpr(value="42")
        assert self.parser.parse("word") == WordExpr(value="word")

    def test_comparison(self):
        assert self.parser.parse("$X != abc") == CompareExpr(
            left=VariableExpr(name="X"), operator="!=", right=WordExpr(value="abc"),
        )
        assert self.parser.parse("$X ge 10") == CompareExpr(
            left=VariableExpr(name="X"), operator="ge", right=NumberExpr(value="10"),
        )

    def test_and_binds_tighter_than_or(self):
        """Тест приоритетов: && сильнее ||"""
        result = self.parser.parse("$A || $B && $C")
        assert result == BinaryExpr(
            left=VariableExpr(name="A"),
            right=BinaryExpr(
                left=VariableExpr(name="B"),
                right=VariableExpr(name="C"),
                operator=ExprType.AND,
            ),
            operator=ExprType.OR,
        )

    def test_comparison_binds_tighter_than_and(self):
        result = self.parser.parse("$A = 1 && $B")
        assert result == BinaryExpr(
            left=CompareExpr(left=VariableExpr(name="A"), operator="=", right=NumberExpr(value="1")),
            right=VariableExpr(name="B"),
            operator=ExprType.AND,
        )

    def test_grouping(self):
        result = self.parser.parse("($A || $B) && $C")
        assert isinstance(result, BinaryExpr)
        assert result.operator == ExprType.AND
        assert result.left == GroupExpr(expr=BinaryExpr(
            left=VariableExpr(name="A"),
            right=VariableExpr(name="B"),
            operator=ExprType.OR,
        ))

    def test_not_is_right_associative(self):
        assert self.parser.parse("!!$A") == NotExpr(expr=NotExpr(expr=VariableExpr(name="A")))

    def test_not_applies_to_comparison(self):
        result = self.parser.parse("!$A = 1")
        assert result == NotExpr(expr=CompareExpr(
            left=VariableExpr(name="A"), operator="=", right=NumberExpr(value="1"),
        ))

    @pytest.mark.parametrize("text", [
        "",
        "   ",
        "$A &&",
        "($A",
        "$A $B",
        "= 1",
        "$A = 1 = 2",
        "()",
    ])
    def test_syntax_errors(self, text):
        with pytest.raises(ParseError):
            self.parser.parse(text)

    def test_error_position(self):
        with pytest.raises(ParseError) as exc:
            self.parser.parse("$A $B")
        assert exc.value.position == 3

    def test_nesting_limit(self):
        """Отрицания и скобки глубже предела дают ParseError, а не переполнение стека"""
        assert self.parser.parse("!" * MAX_NESTING + "$A") is not None
        with pytest.raises(ParseError, match="nested deeper"):
            self.parser.parse("!" * (MAX_NESTING + 1) + "$A")
        with pytest.raises(ParseError, match="nested deeper"):
            self.parser.parse("(" * 2000 + "1" + ")" * 2000)

    def test_nesting_limit_resets_between_parses(self):
        text = "(" * MAX_NESTING + "1" + ")" * MAX_NESTING
        assert self.parser.parse(text) is not None
        assert self.parser.parse(text) is not None

    def test_long_chains_are_not_nested(self):
        result = self.parser.parse(" && ".join(["$A"] * 500))
        assert isinstance(result, BinaryExpr)
        assert result.operator == ExprType.AND
