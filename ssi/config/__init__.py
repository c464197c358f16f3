"""
Configuration loading for the SSI engine.
"""

from __future__ import annotations

from .load import load_config, trace_from_env
from .model import SsiConfig, DEFAULT_ERRMSG, DEFAULT_TIMEFMT
from .typed import ConfigLoadError

__all__ = [
    "SsiConfig",
    "load_config",
    "trace_from_env",
    "ConfigLoadError",
    "DEFAULT_ERRMSG",
    "DEFAULT_TIMEFMT",
]
