"""
Загрузчик конфигурации движка из YAML.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from ruamel.yaml import YAML

from .model import SsiConfig
from .typed import ConfigLoadError, load_typed

# Single source of truth for configuration file naming.
CFG_FILE = "ssi.yaml"
TRACE_ENV = "SSI_TRACE"

_yaml = YAML(typ="safe")


def _read_yaml_map(path: Path) -> dict:
    """Читает YAML файл и возвращает словарь."""
    if not path.is_file():
        return {}
    raw = _yaml.load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigLoadError(f"YAML must be a mapping: {path}")
    return raw


def trace_from_env() -> bool:
    """Включена ли трассировка через переменную окружения SSI_TRACE."""
    return os.environ.get(TRACE_ENV, "").strip() not in ("", "0")


def load_config(path: Optional[Path] = None) -> SsiConfig:
    """
    Загрузить конфигурацию движка.

    • Если путь не задан — ищется ssi.yaml в текущем каталоге.
    • Если файла нет — возвращаются дефолты.
    • Неизвестные ключи и неверные типы → ConfigLoadError.
    • SSI_TRACE=1 включает трассировку поверх значения из файла.
    """
    cfg_path = path if path is not None else Path.cwd() / CFG_FILE
    if path is not None and not cfg_path.is_file():
        raise ConfigLoadError(f"Config file not found: {cfg_path}")

    raw = _read_yaml_map(cfg_path)
    cfg: SsiConfig = load_typed(SsiConfig, raw, path=cfg_path.name)

    if trace_from_env():
        cfg = cfg.with_overrides(trace=True)
    return cfg


__all__ = ["load_config", "trace_from_env", "CFG_FILE", "TRACE_ENV"]
