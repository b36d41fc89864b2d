"""Exceptions raised by the scaffolder core.

Every failure surfaces as a ``ScaffoldError`` subclass carrying enough
context (path, operation, manifest side) for the CLI to report it.
"""

from __future__ import annotations

from pathlib import Path


class ScaffoldError(Exception):
    """Base class for all scaffolding failures."""


class TemplateNotFoundError(ScaffoldError):
    """Raised when a template source path does not exist."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"Template not found: {self.path}")


class ScaffoldIOError(ScaffoldError):
    """Raised when a filesystem operation fails.

    Attributes:
        path: The path the operation was applied to.
        operation: Short name of the failed operation (``list``, ``read``,
            ``write``, ``unlink``, ``rmdir``, ``mkdir``).
    """

    def __init__(self, path: str | Path, operation: str, reason: str = "") -> None:
        self.path = Path(path)
        self.operation = operation
        message = f"Cannot {operation} {self.path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ManifestParseError(ScaffoldError):
    """Raised when a manifest involved in a merge is not a valid JSON object.

    ``side`` is ``"destination"`` for the manifest already present in the
    target directory and ``"template"`` for the one being copied in.
    """

    def __init__(self, path: str | Path, side: str, reason: str = "") -> None:
        self.path = Path(path)
        self.side = side
        message = f"Invalid {side} manifest {self.path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class OperationCancelled(ScaffoldError):
    """Raised when the user declines to overwrite a non-empty target."""

    def __init__(self, message: str = "Operation cancelled") -> None:
        super().__init__(message)
