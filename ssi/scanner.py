"""
Инкрементальный поиск SSI-тегов в потоке чанков.

Сканер накапливает входные чанки в буфере и выделяет из него пары
«текст до тега + тело тега». Тег может быть разрезан границами чанков
как угодно, включая сами разделители <!--# и -->.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

START_DELIMITER = "<!--#"
# Пробелы перед --> принадлежат разделителю, а не телу директивы
END_PATTERN = re.compile(r"\s*-->")


@dataclass(frozen=True)
class ScanEvent:
    """
    Очередной результат сканирования.

    Attributes:
        literal: Текст, предшествующий тегу (или весь сброшенный буфер)
        tag: Тело тега между разделителями; None, если тега нет
        terminated: False, если источник закончился раньше закрывающего -->
    """
    literal: str
    tag: Optional[str] = None
    terminated: bool = True

    @property
    def has_tag(self) -> bool:
        return self.tag is not None


def _partial_start_length(buffer: str) -> int:
    """Длина хвоста буфера, который может оказаться началом <!--#."""
    for size in range(min(len(START_DELIMITER) - 1, len(buffer)), 0, -1):
        if buffer.endswith(START_DELIMITER[:size]):
            return size
    return 0


class TagScanner:
    """
    Менеджер буфера для поиска тегов поверх произвольно нарезанного ввода.

    Итерация выдаёт ScanEvent до исчерпания источника. Сканер никогда
    не блокируется сверх чтения источника: незакрытый тег в конце ввода
    выдаётся с terminated=False, и сканирование завершается.
    """

    def __init__(self, chunks: Iterable[str]):
        self._chunks = iter(chunks)
        self._buffer = ""
        self._exhausted = False

    def __iter__(self) -> Iterator[ScanEvent]:
        while True:
            event = self.next_event()
            if event is None:
                return
            yield event

    def next_event(self) -> Optional[ScanEvent]:
        """Следующее событие или None, если ввод полностью обработан."""
        while True:
            start = self._buffer.find(START_DELIMITER)
            if start >= 0:
                return self._scan_tag(start)

            if self._exhausted:
                if not self._buffer:
                    return None
                literal, self._buffer = self._buffer, ""
                return ScanEvent(literal)

            # Начала тега нет: сбрасываем буфер как текст, но придерживаем
            # хвост, который может продолжиться разделителем в следующем чанке
            split = len(self._buffer) - _partial_start_length(self._buffer)
            literal, self._buffer = self._buffer[:split], self._buffer[split:]
            self._read_more()
            if literal:
                return ScanEvent(literal)

    def _scan_tag(self, start: int) -> ScanEvent:
        """Дочитывает ввод до закрывающего разделителя тега, начатого в start."""
        body_start = start + len(START_DELIMITER)

        while True:
            match = END_PATTERN.search(self._buffer, body_start)
            if match:
                event = ScanEvent(
                    literal=self._buffer[:start],
                    tag=self._buffer[body_start:match.start()],
                )
                self._buffer = self._buffer[match.end():]
                return event

            if not self._read_more():
                # Ввод кончился внутри тега: всё прочитанное считается телом
                event = ScanEvent(
                    literal=self._buffer[:start],
                    tag=self._buffer[body_start:],
                    terminated=False,
                )
                self._buffer = ""
                return event

    def _read_more(self) -> bool:
        """Добавляет в буфер следующий непустой чанк; False — источник исчерпан."""
        if self._exhausted:
            return False
        for chunk in self._chunks:
            if chunk:
                self._buffer += chunk
                return True
        self._exhausted = True
        return False


def scan(chunks: Iterable[str]) -> Iterator[ScanEvent]:
    """
    Удобная функция для сканирования источника чанков.

    Args:
        chunks: Любой итерируемый источник строк (файл, список, генератор)

    Yields:
        ScanEvent: Очередной фрагмент текста и/или тег
    """
    return iter(TagScanner(chunks))


__all__ = ["START_DELIMITER", "END_PATTERN", "ScanEvent", "TagScanner", "scan"]
