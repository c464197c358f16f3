from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any


def _default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, Path):
        return obj.as_posix()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def dumps(obj: Any) -> str:
    """
    JSON для вывода CLI: dataclass-объекты и пути сериализуются как есть.
    Без prettify и без завершающего перевода строки.
    """
    return json.dumps(obj, ensure_ascii=False, default=_default)
