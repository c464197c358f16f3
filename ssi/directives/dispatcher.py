"""
Диспетчер директив SSI.

Фиксированное отображение DirectiveName → обработчик. Полнота таблицы
проверяется при создании диспетчера, так что новая директива без
обработчика обнаруживается сразу, а не на первом документе.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from .handlers import DirectiveHandlers, IncludeHandler
from .model import Directive, DirectiveName, parse_directive
from ..context import VariableContext

logger = logging.getLogger(__name__)

Handler = Callable[[Directive, VariableContext], str]


class DirectiveDispatcher:
    """
    Применяет директивы к контексту.

    Пока текущая ветка условного блока подавлена, выполняются только
    управляющие директивы; остальные не вычисляются вовсе
    (никаких exec, include или set в ложной ветке).
    """

    def __init__(self, handlers: Optional[DirectiveHandlers] = None):
        self.handlers = handlers or DirectiveHandlers()
        h = self.handlers
        self._table: Dict[DirectiveName, Handler] = {
            DirectiveName.SET: h.handle_set,
            DirectiveName.ECHO: h.handle_echo,
            DirectiveName.EXEC: h.handle_exec,
            DirectiveName.FSIZE: h.handle_fsize,
            DirectiveName.FLASTMOD: h.handle_flastmod,
            DirectiveName.INCLUDE: h.handle_include,
            DirectiveName.IF: h.handle_if,
            DirectiveName.ELIF: h.handle_elif,
            DirectiveName.ELSE: h.handle_else,
            DirectiveName.ENDIF: h.handle_endif,
            DirectiveName.CONFIG: h.handle_config,
            DirectiveName.UNKNOWN: h.handle_unknown,
        }

        missing = [name.value for name in DirectiveName if name not in self._table]
        if missing:
            raise RuntimeError(f"No handlers for SSI directives: {', '.join(missing)}")

    def set_include_handler(self, handler: IncludeHandler) -> None:
        """
        Устанавливает обработчик рекурсивного раскрытия для include.

        Args:
            handler: Функция (путь, контекст) -> раскрытый текст
        """
        self.handlers.include_handler = handler

    def dispatch(self, body: str, ctx: VariableContext) -> str:
        """Разбирает тело тега и применяет директиву."""
        return self.apply(parse_directive(body), ctx)

    def apply(self, directive: Directive, ctx: VariableContext) -> str:
        """
        Применяет разобранную директиву.

        Returns:
            Текст для подстановки; пустая строка для управляющих директив
            и для любой директивы внутри подавленной ветки
        """
        if ctx.suppressed and not directive.name.is_control:
            logger.debug("Skipping SSI directive '%s' in suppressed branch", directive.raw_name)
            return ""

        return self._table[directive.name](directive, ctx)


__all__ = ["DirectiveDispatcher", "Handler"]
