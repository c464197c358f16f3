"""
Модели данных для выражений SSI.

Содержит классы узлов AST для условий директив if/elif и для echo.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class ExprType(Enum):
    """Типы узлов выражения."""
    VARIABLE = "variable"
    STRING = "string"
    NUMBER = "number"
    WORD = "word"
    COMPARE = "compare"
    AND = "and"
    OR = "or"
    NOT = "not"
    GROUP = "group"  # для явной группировки в скобках


@dataclass
class Expr(ABC):
    """Базовый абстрактный класс для всех узлов выражения."""

    @abstractmethod
    def get_type(self) -> ExprType:
        """Возвращает тип узла."""
        pass

    def __str__(self) -> str:
        return self._to_string()

    @abstractmethod
    def _to_string(self) -> str:
        pass


@dataclass
class VariableExpr(Expr):
    """
    Ссылка на переменную: $name или ${name}

    Значение берётся из контекста; неопределённая переменная — пустая строка.
    """
    name: str

    def get_type(self) -> ExprType:
        return ExprType.VARIABLE

    def _to_string(self) -> str:
        return f"${{{self.name}}}"


@dataclass
class StringExpr(Expr):
    """
    Строковый литерал в одинарных кавычках: 'text'

    Ссылки $name внутри строки подставляются при вычислении.
    """
    value: str

    def get_type(self) -> ExprType:
        return ExprType.STRING

    def _to_string(self) -> str:
        return f"'{self.value}'"


@dataclass
class NumberExpr(Expr):
    """Числовой литерал; хранится в исходной записи."""
    value: str

    def get_type(self) -> ExprType:
        return ExprType.NUMBER

    def _to_string(self) -> str:
        return self.value


@dataclass
class WordExpr(Expr):
    """Слово без кавычек; трактуется как строка."""
    value: str

    def get_type(self) -> ExprType:
        return ExprType.WORD

    def _to_string(self) -> str:
        return self.value


@dataclass
class CompareExpr(Expr):
    """
    Сравнение: left op right

    Операторы ==, =, !=, <, <=, >, >= сравнивают числа, если обе стороны
    похожи на числа, иначе строки. eq, ne, lt, le, gt, ge — всегда строки.
    """
    left: Expr
    operator: str
    right: Expr

    def get_type(self) -> ExprType:
        return ExprType.COMPARE

    def _to_string(self) -> str:
        return f"{self.left} {self.operator} {self.right}"


@dataclass
class GroupExpr(Expr):
    """Группа в скобках: (expr)"""
    expr: Expr

    def get_type(self) -> ExprType:
        return ExprType.GROUP

    def _to_string(self) -> str:
        return f"({self.expr})"


@dataclass
class NotExpr(Expr):
    """Отрицание: !expr"""
    expr: Expr

    def get_type(self) -> ExprType:
        return ExprType.NOT

    def _to_string(self) -> str:
        return f"!{self.expr}"


@dataclass
class BinaryExpr(Expr):
    """
    Логическая операция: left && right, left || right
    """
    left: Expr
    right: Expr
    operator: ExprType  # AND или OR

    def get_type(self) -> ExprType:
        return self.operator

    def _to_string(self) -> str:
        op_str = "&&" if self.operator == ExprType.AND else "||"
        return f"{self.left} {op_str} {self.right}"


__all__ = [
    "Expr",
    "ExprType",
    "VariableExpr",
    "StringExpr",
    "NumberExpr",
    "WordExpr",
    "CompareExpr",
    "GroupExpr",
    "NotExpr",
    "BinaryExpr",
]
