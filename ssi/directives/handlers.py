"""
Обработчики директив SSI.

Каждый обработчик получает разобранную директиву и контекст, может изменить
контекст и возвращает текст для подстановки вместо тега. Ошибки уровня
директивы не выбрасываются: результатом становится пустая строка или
плейсхолдер ошибки, а диагностика уходит в трассировку.
"""

from __future__ import annotations

import html
import logging
import os
import signal
import subprocess
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import quote

from .model import Directive
from ..context import SkipState, VariableContext
from ..expr.evaluator import evaluate_condition, evaluate_echo, format_time
from ..files import FileInfo, resolve_file_reference, resolve_virtual_reference
from ..tracing import trace

logger = logging.getLogger(__name__)

# Рекурсивное раскрытие включаемого файла (устанавливается экспандером)
IncludeHandler = Callable[[Path, VariableContext], str]


def resolve_reference(directive: Directive, ctx: VariableContext) -> Optional[Path]:
    """
    Путь к файлу из атрибута file="..." или virtual="...".

    file — относительно каталога текущего файла, virtual — относительно
    корня документов. Защита от выхода за пределы базы — забота FileResolver.
    """
    raw = directive.attr("file")
    if raw is not None:
        return resolve_file_reference(raw, ctx.current_file)

    raw = directive.attr("virtual")
    if raw is not None:
        return resolve_virtual_reference(raw, ctx.config.root_path())

    trace("Could not find file from SSI directive (%s)", directive.body)
    return None


def _encode(value: str, encoding: str) -> str:
    if encoding == "entity":
        return html.escape(value)
    if encoding == "url":
        return quote(value)
    if encoding != "none":
        trace("Unknown echo encoding '%s', value left as is", encoding)
    return value


def _kill_process_group(proc: subprocess.Popen) -> None:
    if hasattr(os, "killpg"):
        try:
            os.killpg(proc.pid, signal.SIGKILL)
            return
        except ProcessLookupError:
            pass
    proc.kill()


class DirectiveHandlers:
    """
    Реализации всех директив.

    Управляющие директивы (if/elif/else/endif) ведут машину состояний
    SkipState в контексте; остальные вызываются диспетчером только тогда,
    когда вывод не подавлен.
    """

    def __init__(self, include_handler: Optional[IncludeHandler] = None):
        self.include_handler = include_handler

    # ---- Переменные и вывод ----

    def handle_set(self, directive: Directive, ctx: VariableContext) -> str:
        name = directive.attr("var")
        if name is None:
            trace("Found SSI set directive, but no variable name (%s)", directive.body)
            return ""

        ctx.set(name, directive.attributes.get("value", ""))
        return ""

    def handle_echo(self, directive: Directive, ctx: VariableContext) -> str:
        name = directive.attr("var")
        if name is None:
            trace("Found SSI echo directive, but no variable name (%s)", directive.body)
            return ""

        value = evaluate_echo(name, ctx)
        return _encode(value, directive.attributes.get("encoding", "none"))

    def handle_exec(self, directive: Directive, ctx: VariableContext) -> str:
        cmd = directive.attr("cmd")
        if cmd is None:
            trace("Found SSI exec directive, but no command (%s)", directive.body)
            return ""

        if not ctx.config.exec_enabled:
            trace("SSI exec is disabled, refusing to run '%s'", cmd)
            return ctx.config.errmsg

        try:
            # Своя группа процессов: по таймауту завершаются и потомки оболочки
            proc = subprocess.Popen(
                cmd,
                shell=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                start_new_session=True,
            )
        except OSError as e:
            logger.warning("SSI exec '%s' failed: %s", cmd, e)
            return ""

        try:
            output, _ = proc.communicate(timeout=ctx.config.exec_timeout)
        except subprocess.TimeoutExpired:
            _kill_process_group(proc)
            proc.communicate()
            logger.warning("SSI exec '%s' timed out after %ss", cmd, ctx.config.exec_timeout)
            return ""

        return output.decode(ctx.config.encoding, errors="surrogateescape")

    # ---- Файлы ----

    def _stat_reference(self, directive: Directive, ctx: VariableContext) -> Optional[FileInfo]:
        path = resolve_reference(directive, ctx)
        if path is None:
            return None

        info = ctx.resolver.stat(path)
        if info is None:
            trace("SSI %s target '%s' does not exist", directive.raw_name, path)
        return info

    def handle_fsize(self, directive: Directive, ctx: VariableContext) -> str:
        info = self._stat_reference(directive, ctx)
        return str(info.size) if info is not None else ""

    def handle_flastmod(self, directive: Directive, ctx: VariableContext) -> str:
        info = self._stat_reference(directive, ctx)
        if info is None:
            return ""
        return format_time(ctx.config.timefmt, info.mtime)

    def handle_include(self, directive: Directive, ctx: VariableContext) -> str:
        info = self._stat_reference(directive, ctx)
        if info is None:
            return ""
        if not info.readable:
            trace("SSI include target '%s' is not readable", info.path)
            return ""

        if self.include_handler is None:
            raise RuntimeError(f"No include handler set for including '{info.path}'")
        return self.include_handler(info.path, ctx)

    # ---- Условные блоки ----

    def handle_if(self, directive: Directive, ctx: VariableContext) -> str:
        return self._evaluate_branch(directive.attr("expr"), directive, ctx)

    def handle_elif(self, directive: Directive, ctx: VariableContext) -> str:
        return self._evaluate_branch(directive.attr("expr"), directive, ctx)

    def handle_else(self, directive: Directive, ctx: VariableContext) -> str:
        return self._evaluate_branch("1", directive, ctx)

    def handle_endif(self, directive: Directive, ctx: VariableContext) -> str:
        ctx.skip = SkipState.NOT_IN_CONDITIONAL
        return ""

    def _evaluate_branch(self, condition: Optional[str], directive: Directive, ctx: VariableContext) -> str:
        """
        Переход машины состояний для if/elif/else.

        Если в цепочке уже была истинная ветка (ACTIVE_BRANCH или
        CHAIN_SATISFIED), текущая подавляется независимо от своего условия.
        Иначе условие вычисляется: истина → ACTIVE_BRANCH, ложь → AWAITING_BRANCH.
        """
        if condition is None:
            trace("Found SSI %s directive, but no expression (%s)", directive.raw_name, directive.body)
            return ""

        if ctx.skip in (SkipState.ACTIVE_BRANCH, SkipState.CHAIN_SATISFIED):
            ctx.skip = SkipState.CHAIN_SATISFIED
        elif evaluate_condition(condition, ctx):
            ctx.skip = SkipState.ACTIVE_BRANCH
        else:
            ctx.skip = SkipState.AWAITING_BRANCH

        return ""

    # ---- Прочее ----

    def handle_config(self, directive: Directive, ctx: VariableContext) -> str:
        errmsg = directive.attr("errmsg")
        timefmt = directive.attr("timefmt")
        if errmsg is None and timefmt is None:
            trace("Found SSI config directive without errmsg or timefmt (%s)", directive.body)
            return ""

        ctx.config = ctx.config.with_overrides(errmsg=errmsg, timefmt=timefmt)
        return ""

    def handle_unknown(self, directive: Directive, ctx: VariableContext) -> str:
        trace("Unknown SSI directive '%s'", directive.raw_name or directive.body)
        return ctx.config.errmsg


__all__ = ["DirectiveHandlers", "IncludeHandler", "resolve_reference"]
