"""
Раскрытие SSI-документов.

Публичный API, объединяющий сканер тегов, диспетчер директив и контекст
переменных: читает чанки источника, отдаёт текст между тегами
(если ветка не подавлена) и подставляет результат каждой директивы.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Optional

from .config.model import SsiConfig
from .context import VariableContext
from .directives.dispatcher import DirectiveDispatcher
from .files import FileResolver, LocalFileSystem
from .scanner import TagScanner
from .tracing import set_tracing, trace

logger = logging.getLogger(__name__)


class DocumentExpander:
    """
    Основной драйвер раскрытия.

    Синхронный и однопоточный: вложенные include раскрываются на месте,
    в глубину, до возврата к сканированию родительского документа.
    """

    def __init__(
        self,
        config: Optional[SsiConfig] = None,
        resolver: Optional[FileResolver] = None,
        dispatcher: Optional[DirectiveDispatcher] = None,
    ):
        """
        Args:
            config: Конфигурация движка (по умолчанию — дефолты)
            resolver: Файловая возможность для include/fsize/flastmod
            dispatcher: Диспетчер директив (передается извне для подмены обработчиков)
        """
        self.config = config or SsiConfig()
        self.resolver = resolver or LocalFileSystem(self.config.encoding)
        self.dispatcher = dispatcher or DirectiveDispatcher()
        self.dispatcher.set_include_handler(self.include)

        if self.config.trace:
            set_tracing(True)

    def new_context(self, path: Path, env: Optional[Mapping[str, Any]] = None) -> VariableContext:
        """Контекст верхнеуровневого документа с переменными запроса."""
        return VariableContext.for_document(Path(path), env, self.config, self.resolver)

    def iter_expand(self, chunks: Iterable[str], ctx: VariableContext) -> Iterator[str]:
        """
        Потоковое раскрытие: выдаёт фрагменты результата по мере сканирования.

        Args:
            chunks: Источник текста (файл, список строк, генератор)
            ctx: Контекст переменных документа

        Yields:
            Непустые фрагменты раскрытого текста
        """
        for event in TagScanner(chunks):
            if event.literal and not ctx.suppressed:
                yield event.literal

            if not event.has_tag:
                continue

            if not event.terminated:
                trace("Unterminated SSI directive in '%s': %r", ctx.get("DOCUMENT_NAME"), event.tag)

            result = self.dispatcher.dispatch(event.tag, ctx)
            if result and not ctx.suppressed:
                yield result

    def expand(self, chunks: Iterable[str], ctx: VariableContext) -> str:
        """Раскрывает источник целиком и возвращает текст."""
        return "".join(self.iter_expand(chunks, ctx))

    def expand_file(self, path: Path, ctx: VariableContext) -> str:
        """
        Раскрывает файл; файл закрывается при выходе, в том числе при ошибке.

        Raises:
            OSError: Если файл не удалось открыть или прочитать
        """
        with self.resolver.open(path) as chunks:
            return self.expand(chunks, ctx)

    def expand_document(self, path: Path, env: Optional[Mapping[str, Any]] = None) -> str:
        """Раскрывает верхнеуровневый документ с новым контекстом."""
        path = Path(path)
        return self.expand_file(path, self.new_context(path, env))

    def include(self, path: Path, ctx: VariableContext) -> str:
        """
        Раскрывает включаемый файл под затенённым контекстом.

        Ошибки чтения не распространяются на родительский документ:
        include в таком случае даёт пустую строку.
        """
        if ctx.depth >= ctx.config.max_include_depth:
            logger.warning(
                "SSI include depth limit (%d) reached, skipping '%s'",
                ctx.config.max_include_depth, path,
            )
            return ""

        try:
            with ctx.shadow(str(path), path):
                return self.expand_file(path, ctx)
        except (OSError, UnicodeError) as e:
            logger.warning("Failed to include '%s': %s", path, e)
            return ""


__all__ = ["DocumentExpander"]
