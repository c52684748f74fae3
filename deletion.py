"""
Trash-first deletion with a permanent-delete fallback.

Order of checks for every path:
  1. protected paths are refused, whatever the caller asked for
  2. dry-run never touches the filesystem
  3. force_permanent removes the path outright (caches, logs)
  4. otherwise: OS trash, then a move into ~/.Trash, then permanent removal
     only if the operator agrees
"""

import logging
import os
import shutil
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from rich.console import Console
from send2trash import send2trash

import display
from guard import ProtectedPathGuard

HOME = os.path.expanduser("~")


class DeletionOutcome(Enum):
    TRASHED = "trashed"
    DELETED = "deleted"
    REFUSED = "refused"
    FAILED = "failed"
    SKIPPED = "skipped"


def remove_path(path: str) -> None:
    """rm -rf for a single path. Raises OSError, including for a missing path."""
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.remove(path)


class DeletionStrategy:
    def __init__(
        self,
        guard: ProtectedPathGuard,
        log: logging.Logger,
        dry_run: bool = False,
        confirm: Optional[Callable[[str], bool]] = None,
        console: Optional[Console] = None,
        trash_dir: Optional[str] = None,
    ):
        self.guard = guard
        self.log = log
        self.dry_run = dry_run
        self.console = console if console is not None else display.console
        self.confirm = confirm if confirm is not None else (lambda prompt: display.confirm(prompt, out=self.console))
        self.trash_dir = trash_dir if trash_dir is not None else os.path.join(HOME, ".Trash")

    def is_protected(self, path: str) -> bool:
        return self.guard.is_protected(path) or self.guard.is_protected(os.path.abspath(path))

    def refuse_if_protected(self, path: str) -> bool:
        """Report and log a protected path. True means the caller must not touch it."""
        if not self.is_protected(path):
            return False
        display.print_error(f"REFUSED: '{path}' is a protected path. Skipping.", out=self.console)
        self.log.warning("REFUSED deletion of protected path: %s", path)
        return True

    def delete(self, path: str, force_permanent: bool = False) -> DeletionOutcome:
        if self.refuse_if_protected(path):
            return DeletionOutcome.REFUSED

        if self.dry_run:
            display.print_item(f"[DRY RUN] Would delete: {path}", style="dim", out=self.console)
            self.log.info("[DRY RUN] Would delete: %s", path)
            return DeletionOutcome.SKIPPED

        if not os.path.lexists(path):
            display.print_error(f"Failed to delete: {path} (no longer exists)", out=self.console)
            self.log.error("FAILED to delete: %s (path vanished)", path)
            return DeletionOutcome.FAILED

        if force_permanent:
            return self._remove(path, "rm -rf")

        if self._send_to_os_trash(path):
            display.print_ok(f"Moved to Trash: {path}", out=self.console)
            self.log.info("TRASHED: %s", path)
            return DeletionOutcome.TRASHED

        if self._move_to_trash_dir(path):
            display.print_ok(f"Moved to Trash: {path}", out=self.console)
            self.log.info("TRASHED (mv): %s", path)
            return DeletionOutcome.TRASHED

        display.print_warning(f"Could not trash '{path}'. Use rm? This is permanent.", out=self.console)
        if self.confirm("Delete permanently?"):
            return self._remove(path, "rm -rf fallback")

        display.print_item(f"Skipped: {path}", out=self.console)
        self.log.info("SKIPPED: %s", path)
        return DeletionOutcome.SKIPPED

    def _remove(self, path: str, how: str) -> DeletionOutcome:
        try:
            remove_path(path)
        except OSError as exc:
            display.print_error(f"Failed to delete: {path}", out=self.console)
            self.log.error("FAILED to delete: %s (%s)", path, exc)
            return DeletionOutcome.FAILED
        display.print_ok(f"Deleted: {path}", out=self.console)
        self.log.info("DELETED (%s): %s", how, path)
        return DeletionOutcome.DELETED

    def _send_to_os_trash(self, path: str) -> bool:
        try:
            send2trash(path)
        except OSError:
            return False
        return True

    def _move_to_trash_dir(self, path: str) -> bool:
        if not os.path.isdir(self.trash_dir):
            return False
        dest = self._free_trash_name(os.path.basename(path.rstrip(os.sep)))
        try:
            shutil.move(path, dest)
        except OSError:
            return False
        return True

    def _free_trash_name(self, name: str) -> str:
        """A destination in trash_dir that does not exist yet (Finder-style suffix on a clash)."""
        dest = os.path.join(self.trash_dir, name)
        if not os.path.lexists(dest):
            return dest
        stamped = f"{dest} {datetime.now().strftime('%H.%M.%S')}"
        candidate, n = stamped, 1
        while os.path.lexists(candidate):
            n += 1
            candidate = f"{stamped} {n}"
        return candidate
