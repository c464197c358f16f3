"""
Доступ к файлам для директив fsize, flastmod и include.

Движок не работает с файловой системой напрямую: всё идёт через
FileResolver, который хост может подменить (например, на виртуальную ФС
или на реализацию с защитой от выхода за пределы корня).
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import ContextManager, Iterable, Iterator, Optional, Protocol


@dataclass(frozen=True)
class FileInfo:
    """Результат stat для файла."""
    path: Path
    size: int
    mtime: float
    readable: bool


class FileResolver(Protocol):
    """Минимальная файловая возможность, нужная движку."""

    def stat(self, path: Path) -> Optional[FileInfo]:
        """Информация о файле или None, если файла нет или это не файл."""
        ...

    def open(self, path: Path) -> ContextManager[Iterable[str]]:
        """
        Открывает файл как источник текстовых чанков.

        Должен закрывать файл при выходе из контекста, в том числе при ошибке.

        Raises:
            OSError: Если файл не удалось открыть
        """
        ...


class LocalFileSystem:
    """
    Реализация FileResolver поверх локальной файловой системы.

    Файлы читаются построчно в текстовом режиме с surrogateescape,
    так что байты, не декодируемые в заданной кодировке, переживают
    круговое преобразование без потерь.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def stat(self, path: Path) -> Optional[FileInfo]:
        try:
            st = os.stat(path)
        except OSError:
            return None
        if not os.path.isfile(path):
            return None
        return FileInfo(
            path=Path(path),
            size=st.st_size,
            mtime=st.st_mtime,
            readable=os.access(path, os.R_OK),
        )

    @contextmanager
    def open(self, path: Path) -> Iterator[Iterable[str]]:
        with open(path, "r", encoding=self.encoding, errors="surrogateescape", newline="") as fh:
            yield fh


def resolve_file_reference(raw: str, current_file: Optional[Path]) -> Path:
    """
    file="X": путь относительно каталога текущего файла.

    Абсолютный X остаётся абсолютным; без текущего файла база — текущий каталог.
    """
    parts = [p for p in raw.replace("\\", "/").split("/") if p]
    if raw.startswith("/"):
        return Path("/", *parts)
    base = current_file.parent if current_file is not None else Path(".")
    return base.joinpath(*parts)


def resolve_virtual_reference(raw: str, document_root: Path) -> Path:
    """virtual="X": путь относительно корня документов (ведущий / отбрасывается)."""
    parts = [p for p in raw.replace("\\", "/").split("/") if p]
    return document_root.joinpath(*parts)


__all__ = [
    "FileInfo",
    "FileResolver",
    "LocalFileSystem",
    "resolve_file_reference",
    "resolve_virtual_reference",
]
