"""Sibling navigation inside the directory of the open image.

The listing is read fresh on every request and kept in the platform's native
enumeration order (no sorting). Candidates are a rotation of that order that
starts right after the current file and wraps back to it.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from huaga.errors import DirectoryUnreadable, NoCurrentPath, NoParentDirectory
from huaga.logger import get_logger
from huaga.path_utils import abs_path_str, same_path

_logger = get_logger("navigator")


class Direction(Enum):
    NEXT = "next"
    PREVIOUS = "previous"


def list_directory(directory: str) -> list[str]:
    """Entries of ``directory`` in native enumeration order."""
    with os.scandir(directory) as it:
        return [os.path.join(directory, entry.name) for entry in it]


class DirectoryNavigator:
    def __init__(self, list_dir: Callable[[str], list[str]] = list_directory) -> None:
        self._list_dir = list_dir

    def siblings_from(self, path: str | Path | None) -> list[str]:
        """Directory entries rotated to begin just after ``path``.

        If ``path`` is not in the listing (deleted meanwhile), the plain
        enumeration order is returned.
        """
        if path is None:
            raise NoCurrentPath("no image is open")
        current = abs_path_str(path)
        parent = os.path.dirname(current)
        if not parent or parent == current:
            raise NoParentDirectory(f"{current} has no parent directory")
        try:
            entries = self._list_dir(parent)
        except OSError as e:
            raise DirectoryUnreadable(f"cannot list {parent}: {e}") from e

        before: list[str] = []
        after: list[str] = []
        found = False
        for entry in entries:
            entry = abs_path_str(entry)
            if found:
                after.append(entry)
            else:
                before.append(entry)
                found = same_path(entry, current)
        if not found:
            _logger.debug("current path not in listing: %s", current)
        return after + before

    def next_candidates(self, path: str | Path | None) -> list[str]:
        return self.siblings_from(path)

    def previous_candidates(self, path: str | Path | None) -> list[str]:
        """Walk the rotation backwards from the immediate predecessor."""
        rotated = self.siblings_from(path)
        n = len(rotated)
        return [rotated[(2 * n - i - 2) % n] for i in range(n)]

    def candidates(self, path: str | Path | None, direction: Direction) -> list[str]:
        if direction is Direction.PREVIOUS:
            return self.previous_candidates(path)
        return self.next_candidates(path)
