"""Error taxonomy for the viewer core.

None of these are fatal: each is recovered at the seam that catches it
(navigation loop, render step, shell handlers).
"""

from __future__ import annotations


class HuagaError(RuntimeError):
    """Base class for all viewer core errors."""


class DecodeError(HuagaError):
    """File is missing, unreadable, or not a decodable image."""

    def __init__(self, path: object, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        msg = f"cannot decode {path}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class ScaleError(HuagaError):
    """Rescale target is non-positive or the resampler failed."""


class NavigationError(HuagaError):
    """Sibling navigation could not produce a candidate list."""


class NoCurrentPath(NavigationError):
    pass


class NoParentDirectory(NavigationError):
    pass


class DirectoryUnreadable(NavigationError):
    pass


class NoNavigableImage(NavigationError):
    """No candidate sibling decoded successfully."""
