"""
Лексер для разбора выражений SSI.

Выполняет токенизацию строки выражения, разбивая её на значимые элементы:
- Ссылки на переменные ($name, ${name})
- Строки в одинарных кавычках и числа
- Операторы (&&, ||, !, ==, !=, <, <=, >, >=, =) и ключевые слова (eq, ne, ...)
- Скобки
- Пробелы (игнорируются)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List


@dataclass
class Token:
    """
    Токен выражения.

    Attributes:
        type: Тип токена (VARIABLE, STRING, NUMBER, OPERATOR, KEYWORD, SYMBOL, IDENTIFIER, EOF)
        value: Значение токена (для VARIABLE — имя, для STRING — содержимое без кавычек)
        position: Позиция в исходной строке
    """
    type: str
    value: str
    position: int

    def __repr__(self):
        return f"Token({self.type}, '{self.value}', pos={self.position})"


class ExprLexer:
    """
    Лексер для разбиения строки выражения на токены.
    """

    # Спецификация токенов: (regex_pattern, token_type, ignore_flag)
    TOKEN_SPECS = [
        (r'\s+', 'WHITESPACE', True),

        # Переменные: ${name} проверяем раньше $name
        (r'\$\{(\w+)\}', 'VARIABLE', False),
        (r'\$(\w+)', 'VARIABLE', False),

        # Строки в одинарных кавычках (двойные заняты атрибутом expr="...")
        (r"'([^']*)'", 'STRING', False),

        # Двухсимвольные операторы раньше односимвольных
        (r'&&|\|\||==|!=|<=|>=|<|>|=|!', 'OPERATOR', False),

        (r'[()]', 'SYMBOL', False),

        # Число, только если сразу за ним идёт разделитель
        (r'\d+(?:\.\d+)?(?![^\s()!=<>&|])', 'NUMBER', False),

        # Слово без кавычек; ключевые слова определяем после захвата
        (r"[^\s()'\"!=<>&|$]+", 'IDENTIFIER', False),

        # Неизвестный символ (ошибка)
        (r'.', 'UNKNOWN', False),
    ]

    # Строковые операторы сравнения
    KEYWORDS = {'eq', 'ne', 'lt', 'le', 'gt', 'ge'}

    def __init__(self):
        self._compiled_patterns = [
            (re.compile(pattern, re.DOTALL), token_type, ignore)
            for pattern, token_type, ignore in self.TOKEN_SPECS
        ]

    def tokenize(self, text: str) -> List[Token]:
        """
        Разбивает строку на токены.

        Args:
            text: Строка выражения для разбора

        Returns:
            Список токенов, включая EOF в конце

        Raises:
            ValueError: При обнаружении неизвестного символа
        """
        tokens: List[Token] = []
        position = 0

        while position < len(text):
            for pattern, token_type, ignore in self._compiled_patterns:
                match = pattern.match(text, position)
                if not match:
                    continue

                if not ignore:
                    if token_type == 'UNKNOWN':
                        raise ValueError(f"Unexpected character '{match.group(0)}' at position {position}")

                    # Для переменных и строк значимо содержимое группы
                    value = match.group(1) if pattern.groups else match.group(0)

                    final_type = token_type
                    if token_type == 'IDENTIFIER' and value in self.KEYWORDS:
                        final_type = 'KEYWORD'

                    tokens.append(Token(type=final_type, value=value, position=position))

                position = match.end()
                break

        tokens.append(Token(type='EOF', value='', position=position))

        return tokens

