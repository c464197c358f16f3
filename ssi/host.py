"""
Граница с хостом, отдающим статические файлы.

Хост решает, отдавать ли файл как есть или через движок SSI; движок
включается только для text/html. Заголовки HTTP и отдача прочих файлов
остаются на стороне хоста.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any, Mapping, Optional

from .config.model import SsiConfig
from .errors import ForbiddenError
from .expander import DocumentExpander
from .files import FileResolver, LocalFileSystem

SSI_CONTENT_TYPE = "text/html"


def is_ssi_document(path: Path, content_type: Optional[str] = None) -> bool:
    """
    Обрабатывать ли файл движком SSI.

    Args:
        path: Путь к запрошенному файлу
        content_type: Явно заданный тип содержимого (перекрывает угадывание по имени)
    """
    ctype = content_type or mimetypes.guess_type(str(path))[0] or "text/plain"
    return ctype == SSI_CONTENT_TYPE


def render_document(
    path: Path,
    env: Optional[Mapping[str, Any]] = None,
    config: Optional[SsiConfig] = None,
    resolver: Optional[FileResolver] = None,
) -> str:
    """
    Раскрывает верхнеуровневый документ.

    Args:
        path: Путь к документу
        env: Контекст запроса (REQUEST_URI, QUERY_STRING и любые другие ключи)
        config: Конфигурация движка
        resolver: Файловая возможность (по умолчанию — локальная ФС)

    Returns:
        Полностью раскрытый текст документа

    Raises:
        ForbiddenError: Если документ не существует, не читается или не открывается
    """
    config = config or SsiConfig()
    resolver = resolver or LocalFileSystem(config.encoding)
    path = Path(path)

    info = resolver.stat(path)
    if info is None:
        raise ForbiddenError(str(path), "cannot stat")
    if not info.readable:
        raise ForbiddenError(str(path), "not readable")

    expander = DocumentExpander(config, resolver)
    try:
        return expander.expand_document(path, env)
    except OSError as e:
        raise ForbiddenError(str(path), str(e)) from e


__all__ = ["SSI_CONTENT_TYPE", "is_ssi_document", "render_document"]
