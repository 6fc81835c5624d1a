"""Path normalization utilities.

Navigation compares the open file against directory entries, so both sides
go through the same rules:

- Absolute, user-expanded paths without resolving symlinks (a symlinked
  sibling stays addressed by its own name).
- Drive letter casing normalized on Windows.

Keep this module free of Qt dependencies.
"""

from __future__ import annotations

import os
from pathlib import Path

_DRIVE_PREFIX_LEN = 2


def _normalize_drive_letter(path_str: str) -> str:
    # Normalize drive letter casing on Windows ("c:\\" -> "C:\\").
    if len(path_str) >= _DRIVE_PREFIX_LEN and path_str[1] == ":":
        return path_str[0].upper() + path_str[1:]
    return path_str


def abs_path_str(path: str | Path) -> str:
    """Absolute, OS-native path string."""
    return _normalize_drive_letter(os.path.abspath(os.path.expanduser(os.fspath(path))))


def same_path(a: str | Path, b: str | Path) -> bool:
    return os.path.normcase(abs_path_str(a)) == os.path.normcase(abs_path_str(b))
