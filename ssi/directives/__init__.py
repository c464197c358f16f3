"""
Директивы SSI: модель, обработчики и диспетчер.
"""

from __future__ import annotations

from .dispatcher import DirectiveDispatcher
from .handlers import DirectiveHandlers, IncludeHandler, resolve_reference
from .model import Directive, DirectiveName, parse_directive

__all__ = [
    "DirectiveDispatcher",
    "DirectiveHandlers",
    "IncludeHandler",
    "resolve_reference",
    "Directive",
    "DirectiveName",
    "parse_directive",
]
