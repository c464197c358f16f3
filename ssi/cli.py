from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Dict, Optional

from .config import load_config
from .config.model import SsiConfig
from .errors import SsiUserError
from .host import render_document
from .jsonic import dumps as jdumps
from .version import tool_version


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ssi",
        description="Server Side Includes expander",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    sub = p.add_subparsers(dest="cmd", required=True)

    # Общие аргументы конфигурации
    def add_common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument(
            "--config",
            metavar="FILE",
            help="YAML-конфигурация движка (по умолчанию ./ssi.yaml, если есть)",
        )
        sp.add_argument(
            "--root",
            metavar="DIR",
            help="корень документов для virtual=\"...\"",
        )
        sp.add_argument(
            "--no-exec",
            action="store_true",
            help="запретить <!--#exec cmd=\"...\" -->",
        )

    sp_render = sub.add_parser("render", help="Раскрыть SSI-документ в stdout")
    sp_render.add_argument("path", help="путь к документу")
    add_common(sp_render)
    sp_render.add_argument("--uri", help="REQUEST_URI запроса (→ DOCUMENT_URI)")
    sp_render.add_argument("--query", help="QUERY_STRING запроса (→ QUERY_STRING_UNESCAPED)")
    sp_render.add_argument(
        "--set",
        action="append",
        metavar="NAME=VALUE",
        help="дополнительная переменная окружения запроса (можно указать несколько)",
    )

    sp_config = sub.add_parser("config", help="Эффективная конфигурация (JSON)")
    add_common(sp_config)

    return p


def _parse_vars(items: list[str] | None) -> Dict[str, str]:
    """Парсит список 'NAME=VALUE' в словарь."""
    result: Dict[str, str] = {}
    if not items:
        return result

    for item in items:
        if "=" not in item:
            raise ValueError(f"Invalid variable format '{item}'. Expected 'NAME=VALUE'")
        name, value = item.split("=", 1)
        name = name.strip()
        if not name:
            raise ValueError(f"Empty variable name in '{item}'")
        result[name] = value

    return result


def _config(ns: argparse.Namespace) -> SsiConfig:
    cfg_path: Optional[Path] = Path(ns.config) if getattr(ns, "config", None) else None
    cfg = load_config(cfg_path)
    return cfg.with_overrides(
        document_root=getattr(ns, "root", None),
        exec_enabled=False if getattr(ns, "no_exec", False) else None,
    )


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)

    try:
        if ns.cmd == "render":
            env = _parse_vars(getattr(ns, "set", None))
            if ns.uri is not None:
                env["REQUEST_URI"] = ns.uri
            if ns.query is not None:
                env["QUERY_STRING"] = ns.query
            text = render_document(Path(ns.path), env, _config(ns))
            sys.stdout.write(text)
            return 0

        if ns.cmd == "config":
            sys.stdout.write(jdumps(_config(ns)))
            return 0

    except SsiUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2
    except ValueError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
