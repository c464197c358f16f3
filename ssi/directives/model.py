"""
Модель директивы SSI и разбор тела тега.

Тело тега — всё между <!--# и -->, например: echo var="DATE_LOCAL"
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Dict, Optional

_NAME = re.compile(r"^(\w+)")
# Значения только в двойных кавычках, экранирование кавычек не поддерживается
_ATTRIBUTE = re.compile(r'(\w+)\s*=\s*"([^"]*)"')


class DirectiveName(enum.Enum):
    """Известные директивы; UNKNOWN — всё остальное."""
    SET = "set"
    ECHO = "echo"
    EXEC = "exec"
    FSIZE = "fsize"
    FLASTMOD = "flastmod"
    INCLUDE = "include"
    IF = "if"
    ELIF = "elif"
    ELSE = "else"
    ENDIF = "endif"
    CONFIG = "config"
    UNKNOWN = "unknown"

    @property
    def is_control(self) -> bool:
        """Управляющие директивы выполняются даже внутри подавленной ветки."""
        return self in _CONTROL


_CONTROL = frozenset({DirectiveName.IF, DirectiveName.ELIF, DirectiveName.ELSE, DirectiveName.ENDIF})


@dataclass(frozen=True)
class Directive:
    """
    Разобранная директива.

    Attributes:
        name: Распознанное имя
        raw_name: Имя как оно записано в теге ("" если имени нет)
        attributes: Атрибуты name="value" в порядке появления
        body: Исходное тело тега для диагностики
    """
    name: DirectiveName
    raw_name: str
    attributes: Dict[str, str] = field(default_factory=dict)
    body: str = ""

    def attr(self, key: str) -> Optional[str]:
        """
        Значение атрибута или None.

        Пустое значение считается отсутствующим, как и сам атрибут.
        """
        value = self.attributes.get(key)
        return value if value else None


def parse_directive(body: str) -> Directive:
    """
    Разбирает тело тега в Directive.

    Имя директивы — ведущая последовательность \\w-символов сразу после <!--#.
    Тело без такой последовательности даёт UNKNOWN.
    """
    match = _NAME.match(body)
    if not match:
        return Directive(name=DirectiveName.UNKNOWN, raw_name="", body=body)

    raw_name = match.group(1)
    try:
        name = DirectiveName(raw_name)
    except ValueError:
        name = DirectiveName.UNKNOWN

    attributes: Dict[str, str] = {}
    for key, value in _ATTRIBUTE.findall(body, match.end()):
        # Первое вхождение атрибута выигрывает
        attributes.setdefault(key, value)

    return Directive(name=name, raw_name=raw_name, attributes=attributes, body=body)


__all__ = ["DirectiveName", "Directive", "parse_directive"]
