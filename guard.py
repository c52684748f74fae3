"""
Protected path guard.

The list is compiled in and fixed for the life of the process. Every
deletion goes through `ProtectedPathGuard.is_protected` first.
"""

import os

HOME = os.path.expanduser("~")

SYSTEM_PATHS = (
    "/System",
    "/usr",
    "/bin",
    "/sbin",
    "/private/var/db",
)

PERSONAL_DIRS = (
    "Documents",
    "Photos Library.photoslibrary",
    os.path.join("Pictures", "Photos Library.photoslibrary"),
    "Movies",
    "Music",
    "Desktop",
)


def default_protected_paths(home: str = HOME) -> tuple[str, ...]:
    """System directories plus the personal-content folders under home."""
    return SYSTEM_PATHS + tuple(os.path.join(home, d) for d in PERSONAL_DIRS)


class ProtectedPathGuard:
    """Pure prefix match against a fixed set of absolute paths."""

    def __init__(self, prefixes=None):
        if prefixes is None:
            prefixes = default_protected_paths()
        # Trailing separators would break the boundary check below.
        self._prefixes = tuple(p.rstrip(os.sep) or os.sep for p in prefixes)

    @property
    def prefixes(self) -> tuple[str, ...]:
        return self._prefixes

    def is_protected(self, path: str) -> bool:
        for prefix in self._prefixes:
            boundary = prefix if prefix.endswith(os.sep) else prefix + os.sep
            if path == prefix or path.startswith(boundary):
                return True
        return False
