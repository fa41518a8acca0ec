"""I/O utilities for appserver.

This package provides safe, atomic file operations:
- Core: atomic writes, directory management, sentinel files
- YAML: read/write with locking
- Locking: file locking primitives
"""
from __future__ import annotations

from .core import (
    PathLike,
    atomic_write,
    ensure_directory,
    ensure_parent_dir,
    remove_file,
    touch_file,
)
from .locking import (
    LockTimeoutError,
    acquire_file_lock,
)
from .yaml import (
    dump_yaml_string,
    iter_yaml_files,
    read_yaml,
    write_yaml,
)

__all__ = [
    # core
    "PathLike",
    "ensure_parent_dir",
    "ensure_directory",
    "atomic_write",
    "touch_file",
    "remove_file",
    # yaml
    "read_yaml",
    "write_yaml",
    "dump_yaml_string",
    "iter_yaml_files",
    # locking
    "acquire_file_lock",
    "LockTimeoutError",
]
