"""Target directory reconciliation.

Decides whether a target directory can be scaffolded into without asking
the user, and empties it when overwriting has been authorized.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from enum import Enum
from pathlib import Path

from .errors import ScaffoldIOError


GIT_DIR = ".git"


class ReuseState(str, Enum):
    """Classification of a scaffold target directory."""

    MISSING = "missing"
    EMPTY = "empty"
    GIT_ONLY = "git_only"
    NEEDS_CONFIRMATION = "needs_confirmation"

    @property
    def requires_confirmation(self) -> bool:
        """Whether the target may only be used after the user agrees to empty it."""
        return self is ReuseState.NEEDS_CONFIRMATION


def _list_dir(path: Path) -> list[str]:
    try:
        return os.listdir(path)
    except OSError as exc:
        raise ScaffoldIOError(path, "list", exc.strerror or str(exc)) from exc


def classify_for_reuse(path: str | Path) -> ReuseState:
    """Classify *path* as a scaffold target.

    Only the immediate children are listed; subdirectories are never
    inspected.  A directory holding nothing but ``.git`` is treated as
    empty so that freshly cloned repositories can be scaffolded into.

    Raises:
        ScaffoldIOError: If *path* exists but cannot be listed (including
            when it is a regular file).
    """
    target = Path(path)
    if not target.exists():
        return ReuseState.MISSING

    entries = _list_dir(target)
    if not entries:
        return ReuseState.EMPTY
    if entries == [GIT_DIR]:
        return ReuseState.GIT_ONLY
    return ReuseState.NEEDS_CONFIRMATION


def can_skip_emptying(path: str | Path) -> bool:
    """Return ``True`` when *path* can be used without confirmation."""
    return not classify_for_reuse(path).requires_confirmation


def empty_directory(path: str | Path, *, preserve: Iterable[str] = ()) -> None:
    """Delete everything below *path*, keeping *path* itself.

    Descendants are removed in post-order: a directory is only removed
    once all of its children are gone.  Top-level entries named in
    *preserve* are left untouched.  Symbolic links are unlinked and never
    followed.  Entries that disappear while the walk is in progress are
    skipped.

    Nothing is rolled back on failure; entries already deleted stay
    deleted.

    Raises:
        ScaffoldIOError: If listing, unlinking or removing fails.
    """
    root = Path(path).resolve()
    if not root.exists():
        return

    keep = set(preserve)
    # (path, expanded) pairs; a directory is pushed once to expand its
    # children and again to be removed after them.
    stack: list[tuple[Path, bool]] = [
        (root / name, False) for name in _list_dir(root) if name not in keep
    ]

    while stack:
        entry, expanded = stack.pop()

        if expanded:
            try:
                entry.rmdir()
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise ScaffoldIOError(entry, "rmdir", exc.strerror or str(exc)) from exc
            continue

        if entry.is_dir() and not entry.is_symlink():
            try:
                children = os.listdir(entry)
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise ScaffoldIOError(entry, "list", exc.strerror or str(exc)) from exc
            stack.append((entry, True))
            stack.extend((entry / name, False) for name in children)
            continue

        try:
            entry.unlink(missing_ok=True)
        except OSError as exc:
            raise ScaffoldIOError(entry, "unlink", exc.strerror or str(exc)) from exc
