"""
Операторская трассировка директив.

Диагностика вида «директива без обязательного атрибута» никогда не попадает
в документ; она пишется в логгер ssi.trace и видна только при включённой
трассировке (SSI_TRACE=1 или trace: true в конфигурации).
"""

from __future__ import annotations

import logging

from .config.load import trace_from_env

_LOG = logging.getLogger("ssi.trace")


def _setup_logging_once() -> None:
    if getattr(_setup_logging_once, "_inited", False):
        return
    _setup_logging_once._inited = True  # type: ignore[attr-defined]
    set_tracing(trace_from_env())
    if not _LOG.handlers:
        h = logging.StreamHandler()
        fmt = logging.Formatter("[%(levelname)s] %(name)s: %(message)s")
        h.setFormatter(fmt)
        _LOG.addHandler(h)


def set_tracing(enabled: bool) -> None:
    """Включает/выключает трассировку директив."""
    _LOG.setLevel(logging.DEBUG if enabled else logging.WARNING)


def trace(msg: str, *args) -> None:
    """Диагностическое сообщение; без трассировки отбрасывается."""
    _LOG.debug(msg, *args)


_setup_logging_once()

__all__ = ["set_tracing", "trace"]
