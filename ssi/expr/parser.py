"""
Парсер выражений SSI с рекурсивным спуском.

Строит абстрактное синтаксическое дерево (AST) из последовательности токенов.
Поддерживает приоритеты операторов и группировку в скобках.

Грамматика:
expression  → or_expr
or_expr     → and_expr ("||" and_expr)*
and_expr    → not_expr ("&&" not_expr)*
not_expr    → "!" not_expr | comparison
comparison  → operand (COMPARE operand)?
operand     → VARIABLE | STRING | NUMBER | IDENTIFIER | "(" expression ")"

COMPARE     → "==" | "=" | "!=" | "<" | "<=" | ">" | ">=" | eq | ne | lt | le | gt | ge
"""

from __future__ import annotations

from typing import List

from .lexer import ExprLexer, Token
from .model import (
    Expr,
    ExprType,
    VariableExpr,
    StringExpr,
    NumberExpr,
    WordExpr,
    CompareExpr,
    GroupExpr,
    NotExpr,
    BinaryExpr,
)

COMPARE_OPERATORS = {'==', '=', '!=', '<', '<=', '>', '>='}

# Предел вложенности отрицаний и скобок
MAX_NESTING = 64


class ParseError(Exception):
    """Ошибка парсинга выражения."""

    def __init__(self, message: str, position: int):
        self.message = message
        self.position = position
        super().__init__(f"Parse error at position {position}: {message}")


class ExprParser:
    """
    Парсер выражений с рекурсивным спуском.

    Преобразует список токенов в абстрактное синтаксическое дерево,
    соблюдая приоритеты операторов и правила группировки.
    """

    def __init__(self):
        self.lexer = ExprLexer()
        self._tokens: List[Token] = []
        self._position = 0
        self._depth = 0

    def parse(self, expression: str) -> Expr:
        """
        Парсит строку выражения в AST.

        Raises:
            ParseError: При синтаксической ошибке
            ValueError: При ошибке токенизации
        """
        self._tokens = self.lexer.tokenize(expression)
        self._position = 0
        self._depth = 0

        if len(self._tokens) == 1 and self._tokens[0].type == 'EOF':
            raise ParseError("Empty expression", 0)

        result = self._parse_or_expr()

        if not self._is_at_end():
            current = self._current_token()
            raise ParseError(f"Unexpected token '{current.value}'", current.position)

        return result

    def _parse_or_expr(self) -> Expr:
        """Парсит выражение с оператором || (низший приоритет)."""
        left = self._parse_and_expr()

        while self._match_operator("||"):
            right = self._parse_and_expr()
            left = BinaryExpr(left=left, right=right, operator=ExprType.OR)

        return left

    def _parse_and_expr(self) -> Expr:
        """Парсит выражение с оператором && (средний приоритет)."""
        left = self._parse_not_expr()

        while self._match_operator("&&"):
            right = self._parse_not_expr()
            left = BinaryExpr(left=left, right=right, operator=ExprType.AND)

        return left

    def _parse_not_expr(self) -> Expr:
        """Парсит отрицание (правая ассоциативность)."""
        if self._match_operator("!"):
            self._enter_nested()
            expr = self._parse_not_expr()
            self._depth -= 1
            return NotExpr(expr=expr)

        return self._parse_comparison()

    def _parse_comparison(self) -> Expr:
        """Парсит операнд и необязательное сравнение с другим операндом."""
        left = self._parse_operand()

        current = self._current_token()
        is_compare = (
            (current.type == 'OPERATOR' and current.value in COMPARE_OPERATORS)
            or current.type == 'KEYWORD'
        )
        if not is_compare:
            return left

        self._advance()
        right = self._parse_operand()
        return CompareExpr(left=left, operator=current.value, right=right)

    def _parse_operand(self) -> Expr:
        """Парсит атомарный операнд или группу в скобках."""
        if self._match_symbol("("):
            self._enter_nested()
            expr = self._parse_or_expr()
            self._depth -= 1
            if not self._match_symbol(")"):
                raise ParseError("Expected ')' after grouped expression", self._current_position())
            return GroupExpr(expr=expr)

        current = self._current_token()

        if current.type == 'VARIABLE':
            self._advance()
            return VariableExpr(name=current.value)
        if current.type == 'STRING':
            self._advance()
            return StringExpr(value=current.value)
        if current.type == 'NUMBER':
            self._advance()
            return NumberExpr(value=current.value)
        if current.type == 'IDENTIFIER':
            self._advance()
            return WordExpr(value=current.value)

        if current.type == 'EOF':
            raise ParseError("Unexpected end of expression", current.position)
        raise ParseError(f"Unexpected token '{current.value}'", current.position)

    def _enter_nested(self) -> None:
        self._depth += 1
        if self._depth > MAX_NESTING:
            raise ParseError(f"Expression nested deeper than {MAX_NESTING} levels", self._current_position())

    # Вспомогательные методы для работы с токенами

    def _current_token(self) -> Token:
        """Возвращает текущий токен без продвижения позиции."""
        if self._position >= len(self._tokens):
            return Token(type='EOF', value='', position=len(self._tokens))
        return self._tokens[self._position]

    def _current_position(self) -> int:
        return self._current_token().position

    def _is_at_end(self) -> bool:
        return self._current_token().type == 'EOF'

    def _advance(self) -> Token:
        """Продвигает позицию и возвращает предыдущий токен."""
        token = self._current_token()
        if not self._is_at_end():
            self._position += 1
        return token

    def _match_operator(self, operator: str) -> bool:
        """Проверяет и потребляет оператор."""
        current = self._current_token()
        if current.type == 'OPERATOR' and current.value == operator:
            self._advance()
            return True
        return False

    def _match_symbol(self, symbol: str) -> bool:
        """Проверяет и потребляет символ."""
        current = self._current_token()
        if current.type == 'SYMBOL' and current.value == symbol:
            self._advance()
            return True
        return False
