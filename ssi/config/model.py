"""
Модель конфигурации SSI-движка.

Все поля необязательны: отсутствующие ключи YAML получают значения по умолчанию.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

DEFAULT_ERRMSG = "[an error occurred while processing this directive]"
DEFAULT_TIMEFMT = "%A, %d-%b-%Y %H:%M:%S %Z"
DEFAULT_MAX_INCLUDE_DEPTH = 16


@dataclass(frozen=True)
class SsiConfig:
    # Плейсхолдер для неизвестных директив
    errmsg: str = DEFAULT_ERRMSG
    # strftime-шаблон для DATE_*, LAST_MODIFIED и flastmod
    timefmt: str = DEFAULT_TIMEFMT
    # База для virtual="..." (None → текущий каталог)
    document_root: Optional[str] = None
    # Выполнение внешних команд через <!--#exec cmd="..." -->
    exec_enabled: bool = True
    exec_timeout: Optional[float] = None
    # Кодировка документов и включаемых файлов
    encoding: str = "utf-8"
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH
    # Подробная трассировка директив в лог
    trace: bool = False

    def root_path(self) -> Path:
        """Абсолютный путь корня документов для virtual-ссылок."""
        return Path(self.document_root or ".").resolve()

    def with_overrides(self, **changes) -> SsiConfig:
        """Копия конфигурации с изменёнными полями (None пропускается)."""
        actual = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **actual) if actual else self


__all__ = ["SsiConfig", "DEFAULT_ERRMSG", "DEFAULT_TIMEFMT", "DEFAULT_MAX_INCLUDE_DEPTH"]
