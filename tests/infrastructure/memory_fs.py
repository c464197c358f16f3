"""
In-memory реализация FileResolver для тестов экспандера.

Позволяет проверять include/fsize/flastmod без диска и нарезать
содержимое файлов на мелкие чанки, чтобы теги попадали на границы чтения.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, Iterator, Mapping, Optional, Set

from ssi.config.model import SsiConfig
from ssi.context import VariableContext
from ssi.files import FileInfo


class MemoryFileSystem:
    """Словарь путь -> текст с фиксированным mtime."""

    def __init__(
        self,
        files: Mapping[str, str],
        *,
        mtime: float = 0.0,
        chunk_size: Optional[int] = None,
        unreadable: Iterable[str] = (),
    ):
        self.files: Dict[Path, str] = {Path(k): v for k, v in files.items()}
        self.mtime = mtime
        self.chunk_size = chunk_size
        self.unreadable: Set[Path] = {Path(p) for p in unreadable}
        self.opened: list[Path] = []

    def stat(self, path: Path) -> Optional[FileInfo]:
        path = Path(path)
        text = self.files.get(path)
        if text is None:
            return None
        return FileInfo(
            path=path,
            size=len(text.encode("utf-8")),
            mtime=self.mtime,
            readable=path not in self.unreadable,
        )

    @contextmanager
    def open(self, path: Path) -> Iterator[Iterable[str]]:
        path = Path(path)
        if path not in self.files or path in self.unreadable:
            raise FileNotFoundError(str(path))
        self.opened.append(path)
        yield self._chunks(self.files[path])

    def _chunks(self, text: str) -> Iterator[str]:
        if not self.chunk_size:
            yield text
            return
        for i in range(0, len(text), self.chunk_size):
            yield text[i:i + self.chunk_size]


def make_context(
    variables: Optional[Mapping[str, str]] = None,
    *,
    config: Optional[SsiConfig] = None,
    current_file: Optional[str] = None,
    fs: Optional[MemoryFileSystem] = None,
) -> VariableContext:
    """Контекст с in-memory файловой системой по умолчанию."""
    return VariableContext(
        variables,
        config=config,
        current_file=Path(current_file) if current_file else None,
        resolver=fs or MemoryFileSystem({}),
    )


__all__ = ["MemoryFileSystem", "make_context"]
