"""
Контекст переменных для раскрытия SSI-документа.

Хранит пользовательские переменные (директива set), переменные запроса
(DOCUMENT_NAME, DOCUMENT_URI, QUERY_STRING_UNESCAPED и всё окружение хоста),
а также управляющее состояние: уровень пропуска условного блока, текущий
файл и активную конфигурацию.
"""

from __future__ import annotations

import enum
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .config.model import SsiConfig
from .files import FileResolver, LocalFileSystem


class SkipState(enum.Enum):
    """
    Состояние цепочки if/elif/else/endif.

    NOT_IN_CONDITIONAL и ACTIVE_BRANCH не подавляют вывод, но различаются:
    только первое означает «вне условного блока».
    """
    NOT_IN_CONDITIONAL = "not_in_conditional"
    # Текущая ветка ложна, ждём следующую ветку цепочки
    AWAITING_BRANCH = "awaiting_branch"
    # Текущая ветка истинна, вывод разрешён
    ACTIVE_BRANCH = "active_branch"
    # Одна из предыдущих веток уже сработала, всё до endif пропускается
    CHAIN_SATISFIED = "chain_satisfied"

    @property
    def suppresses(self) -> bool:
        return self in (SkipState.AWAITING_BRANCH, SkipState.CHAIN_SATISFIED)


@dataclass
class ScopeState:
    """
    Снимок затеняемой части контекста.

    Используется для стека состояний при входе/выходе из include.
    """
    document_name: Optional[Any]
    current_file: Optional[Path]
    skip: SkipState
    depth: int
    config: SsiConfig


class VariableContext:
    """
    Изменяемое окружение одного раскрытия документа.

    Один верхнеуровневый документ — один контекст. Вложенные include
    работают с тем же словарём переменных через shadow(): переменные,
    установленные внутри include, видны после него.
    """

    def __init__(
        self,
        variables: Optional[Mapping[str, Any]] = None,
        *,
        config: Optional[SsiConfig] = None,
        current_file: Optional[Path] = None,
        resolver: Optional[FileResolver] = None,
    ):
        self.variables: Dict[str, Any] = dict(variables or {})
        self.config: SsiConfig = config or SsiConfig()
        self.resolver: FileResolver = resolver or LocalFileSystem(self.config.encoding)
        self.current_file: Optional[Path] = current_file
        self.skip: SkipState = SkipState.NOT_IN_CONDITIONAL
        # Глубина вложенности include (0 для верхнего документа)
        self.depth = 0

        # Кэш DATE_GMT/DATE_LOCAL: (timefmt, name) -> value
        self._time_cache: Dict[Tuple[str, str], str] = {}

        self._scope_stack: List[ScopeState] = []

    @classmethod
    def for_document(
        cls,
        path: Path,
        env: Optional[Mapping[str, Any]] = None,
        config: Optional[SsiConfig] = None,
        resolver: Optional[FileResolver] = None,
    ) -> VariableContext:
        """
        Создаёт контекст верхнеуровневого документа.

        Все ключи окружения хоста становятся переменными; поверх них
        устанавливаются стандартные переменные SSI.
        """
        env = env or {}
        variables: Dict[str, Any] = dict(env)
        variables["DOCUMENT_NAME"] = str(path)
        variables["DOCUMENT_URI"] = env.get("REQUEST_URI") or ""
        variables["QUERY_STRING_UNESCAPED"] = env.get("QUERY_STRING") or ""
        return cls(variables, config=config, current_file=Path(path), resolver=resolver)

    # ---- Переменные ----

    def get(self, name: str, default: Any = None) -> Any:
        return self.variables.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self.variables[name] = value

    def delete(self, name: str) -> None:
        self.variables.pop(name, None)

    def __contains__(self, name: str) -> bool:
        return name in self.variables

    # ---- Условные блоки ----

    @property
    def suppressed(self) -> bool:
        """Подавлен ли сейчас вывод текста и директив."""
        return self.skip.suppresses

    # ---- Кэш временных переменных ----

    def cached_time(self, timefmt: str, name: str) -> Optional[str]:
        return self._time_cache.get((timefmt, name))

    def cache_time(self, timefmt: str, name: str, value: str) -> None:
        self._time_cache[(timefmt, name)] = value

    # ---- Затенение для include ----

    def enter_include_scope(self, document_name: str, current_file: Path) -> None:
        """
        Входит в скоуп включаемого документа.

        Сохраняет DOCUMENT_NAME, текущий файл, состояние пропуска, глубину
        и конфигурацию, затем переопределяет их для вложенного раскрытия.
        Директива config во включаемом файле действует только до его конца.
        """
        self._scope_stack.append(ScopeState(
            document_name=self.variables.get("DOCUMENT_NAME"),
            current_file=self.current_file,
            skip=self.skip,
            depth=self.depth,
            config=self.config,
        ))
        self.variables["DOCUMENT_NAME"] = document_name
        self.current_file = current_file
        self.skip = SkipState.NOT_IN_CONDITIONAL
        self.depth += 1

    def exit_include_scope(self) -> None:
        """
        Выходит из скоупа включаемого документа.

        Raises:
            RuntimeError: Если стек скоупов пуст (нет соответствующего входа)
        """
        if not self._scope_stack:
            raise RuntimeError("No include scope to exit (scope stack is empty)")

        state = self._scope_stack.pop()
        if state.document_name is None:
            self.variables.pop("DOCUMENT_NAME", None)
        else:
            self.variables["DOCUMENT_NAME"] = state.document_name
        self.current_file = state.current_file
        self.skip = state.skip
        self.depth = state.depth
        self.config = state.config

    @contextmanager
    def shadow(self, document_name: str, current_file: Path) -> Iterator[VariableContext]:
        """
        Затенённое представление контекста на время вложенного раскрытия.

        Восстановление гарантировано на любом пути выхода, включая исключения.
        """
        self.enter_include_scope(document_name, current_file)
        try:
            yield self
        finally:
            self.exit_include_scope()


__all__ = ["SkipState", "ScopeState", "VariableContext"]
