"""
Вычислитель выражений SSI.

Проходит по AST выражения и вычисляет его в контексте переменных документа.
Результат операнда — строка, результат логической операции — bool;
истинность строки определяется по правилам SSI: "" и "0" ложны.
"""

from __future__ import annotations

import logging
import operator
import re
import time
from functools import lru_cache
from typing import Callable, Dict, List, Optional, Union, cast

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
from .parser import ExprParser, ParseError
from ..context import VariableContext
from ..tracing import trace

logger = logging.getLogger(__name__)

Value = Union[str, bool]

_INTERPOLATION = re.compile(r"\$\{(\w+)\}|\$(\w+)")
_TRAILING_ZONE = re.compile(r"\w+$")

_STRING_OPERATORS = {"eq": "==", "ne": "!=", "lt": "<", "le": "<=", "gt": ">", "ge": ">="}
_OPERATORS: Dict[str, Callable[[object, object], bool]] = {
    "==": operator.eq,
    "=": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


class EvaluationError(Exception):
    """Ошибка при вычислении выражения."""
    pass


def is_truthy(value: Value) -> bool:
    """Истинность значения: bool как есть, строка ложна только если "" или "0"."""
    if isinstance(value, bool):
        return value
    return value not in ("", "0")


def _to_text(value: Value) -> str:
    if isinstance(value, bool):
        return "1" if value else ""
    return value


def _as_number(text: str) -> Optional[float]:
    try:
        return float(text)
    except ValueError:
        return None


def format_time(timefmt: str, timestamp: float, *, gmt: bool = False) -> str:
    """
    Форматирует момент времени по strftime-шаблону.

    Для GMT зона в конце строки (если шаблон кончается на %Z) заменяется на "GMT".
    """
    if gmt:
        text = time.strftime(timefmt, time.gmtime(timestamp))
        if timefmt.endswith("%Z"):
            text = _TRAILING_ZONE.sub("GMT", text)
        return text
    return time.strftime(timefmt, time.localtime(timestamp))


def install_time_variables(context: VariableContext) -> None:
    """
    Устанавливает DATE_GMT, DATE_LOCAL и LAST_MODIFIED в контексте.

    Даты вычисляются один раз для каждого формата времени и кэшируются
    в контексте; LAST_MODIFIED пересчитывается для текущего файла.
    """
    fmt = context.config.timefmt
    now: Optional[float] = None

    for name, gmt in (("DATE_GMT", True), ("DATE_LOCAL", False)):
        value = context.cached_time(fmt, name)
        if value is None:
            now = now if now is not None else time.time()
            value = format_time(fmt, now, gmt=gmt)
            context.cache_time(fmt, name, value)
        context.set(name, value)

    if context.current_file is not None:
        info = context.resolver.stat(context.current_file)
        if info is not None:
            context.set("LAST_MODIFIED", format_time(fmt, info.mtime))


class ExpressionEvaluator:
    """
    Вычислитель выражений.

    Принимает AST выражения и контекст переменных, возвращает строку или bool.
    Глобального состояния нет: все переменные читаются из переданного контекста.
    """

    def __init__(self, context: VariableContext):
        self.context = context

    def evaluate(self, expr: Expr) -> Value:
        """
        Вычисляет значение узла.

        Raises:
            EvaluationError: При неизвестном типе узла или некорректном операторе
        """
        expr_type = expr.get_type()

        if expr_type == ExprType.VARIABLE:
            return self.lookup(cast(VariableExpr, expr).name)
        elif expr_type == ExprType.STRING:
            return self._interpolate(cast(StringExpr, expr).value)
        elif expr_type == ExprType.NUMBER:
            return cast(NumberExpr, expr).value
        elif expr_type == ExprType.WORD:
            return cast(WordExpr, expr).value
        elif expr_type == ExprType.COMPARE:
            return self._evaluate_compare(cast(CompareExpr, expr))
        elif expr_type == ExprType.GROUP:
            return self.evaluate(cast(GroupExpr, expr).expr)
        elif expr_type == ExprType.NOT:
            return not is_truthy(self.evaluate(cast(NotExpr, expr).expr))
        elif expr_type == ExprType.AND:
            return self._evaluate_and(cast(BinaryExpr, expr))
        elif expr_type == ExprType.OR:
            return self._evaluate_or(cast(BinaryExpr, expr))
        else:
            raise EvaluationError(f"Unknown expression type: {expr_type}")

    def lookup(self, name: str) -> str:
        """Значение переменной; неопределённая переменная — пустая строка."""
        value = self.context.get(name)
        if value is None:
            trace("Undefined SSI variable '%s'", name)
            return ""
        return str(value)

    def _interpolate(self, text: str) -> str:
        """Подставляет $name и ${name} внутри строкового литерала."""
        return _INTERPOLATION.sub(lambda m: self.lookup(m.group(1) or m.group(2)), text)

    def _evaluate_compare(self, expr: CompareExpr) -> bool:
        left = _to_text(self.evaluate(expr.left))
        right = _to_text(self.evaluate(expr.right))

        op = expr.operator
        if op in _STRING_OPERATORS:
            return _OPERATORS[_STRING_OPERATORS[op]](left, right)

        func = _OPERATORS.get(op)
        if func is None:
            raise EvaluationError(f"Unknown comparison operator: {op}")

        left_num, right_num = _as_number(left), _as_number(right)
        if left_num is not None and right_num is not None:
            return func(left_num, right_num)
        return func(left, right)

    def _evaluate_and(self, expr: BinaryExpr) -> bool:
        # Короткое вычисление
        return all(is_truthy(self.evaluate(e)) for e in _chain(expr))

    def _evaluate_or(self, expr: BinaryExpr) -> bool:
        return any(is_truthy(self.evaluate(e)) for e in _chain(expr))


def _chain(expr: BinaryExpr) -> List[Expr]:
    """
    Операнды цепочки одинаковых операторов слева направо.

    Парсер строит a && b && c как левое дерево; левая ветвь обходится циклом.
    """
    operands: List[Expr] = []
    node: Expr = expr
    while isinstance(node, BinaryExpr) and node.operator == expr.operator:
        operands.append(node.right)
        node = node.left
    operands.append(node)
    operands.reverse()
    return operands


@lru_cache(maxsize=256)
def _parse(expression: str) -> Expr:
    return ExprParser().parse(expression)


def evaluate(expression: str, context: VariableContext) -> Value:
    """
    Вычисляет строку выражения в контексте.

    Если выражение ссылается на переменные, перед вычислением устанавливаются
    встроенные временные переменные. Ошибки не выбрасываются: они логируются,
    а результатом становится пустая строка.
    """
    if "$" in expression:
        install_time_variables(context)

    try:
        return ExpressionEvaluator(context).evaluate(_parse(expression))
    except (ParseError, ValueError, EvaluationError, RecursionError) as e:
        logger.warning("Failed to evaluate SSI expression '%s': %s", expression, e)
        return ""


def evaluate_echo(name: str, context: VariableContext) -> str:
    """
    Значение переменной для echo; пустая строка, если её нет.

    Эквивалентно evaluate("${name}"), но допускает имена не только из букв, цифр и _
    (ключи окружения хоста могут содержать любые символы).
    """
    install_time_variables(context)
    return ExpressionEvaluator(context).lookup(name)


def evaluate_condition(expression: str, context: VariableContext) -> bool:
    """Истинность условия if/elif; при ошибке False."""
    return is_truthy(evaluate(expression, context))


__all__ = [
    "EvaluationError",
    "ExpressionEvaluator",
    "Value",
    "evaluate",
    "evaluate_echo",
    "evaluate_condition",
    "format_time",
    "install_time_variables",
    "is_truthy",
]
