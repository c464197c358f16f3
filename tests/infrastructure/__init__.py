"""
Unified test infrastructure for the SSI engine.

Modules:
- file_utils: Utilities for creating documents and included files
- cli_utils: Running ssi.cli in a subprocess
- memory_fs: In-memory FileResolver for expander tests
"""

from .file_utils import write, write_site
from .cli_utils import run_cli, jload
from .memory_fs import MemoryFileSystem, make_context

__all__ = [
    # File utilities
    "write", "write_site",

    # CLI utilities
    "run_cli", "jload",

    # In-memory file system
    "MemoryFileSystem", "make_context",
]
