"""Template tree rendering for project scaffolding.

Provides the TemplateRenderer class which copies a template directory tree
onto a target directory.  Files are copied byte-for-byte with two
exceptions:

* ``_name`` files are written as ``.name`` (packaging tools tend to drop
  literal dotfiles such as ``.gitignore`` from distributions).
* ``package.json`` is merged into an existing manifest instead of
  replacing it.

``node_modules`` directories inside a template are never copied.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from compokit.config import DEFAULT_TEMPLATE_DIR

from .errors import ScaffoldIOError, TemplateNotFoundError
from .manifest import MANIFEST_FILENAME, merge_manifest_files


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEPENDENCY_CACHE_DIR = "node_modules"
DOTFILE_PREFIX = "_"

_NEW_FILE_MODE = 0o666


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Copies template trees into scaffold targets.

    Named templates (``base``, ``vue``, ...) are subdirectories of
    ``template_dir``.  Arbitrary source paths can be rendered with
    :meth:`render`.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)

    # -- Named templates ---------------------------------------------------

    def template_path(self, name: str) -> Path:
        """Return the directory of the template called *name*.

        Raises:
            TemplateNotFoundError: If no such template exists or *name*
                points outside the template root.
        """
        root = self.template_dir.resolve()
        path = (root / name).resolve()
        if path == root or not path.is_relative_to(root) or not path.is_dir():
            raise TemplateNotFoundError(path)
        return path

    def render_template(self, name: str, output_dir: str | Path) -> list[Path]:
        """Render the template called *name* into *output_dir*."""
        return self.render(self.template_path(name), output_dir)

    def list_templates(self) -> list[str]:
        """Return a sorted list of the template names under the root."""
        if not self.template_dir.is_dir():
            return []
        return sorted(
            p.name
            for p in self.template_dir.iterdir()
            if p.is_dir() and p.name != DEPENDENCY_CACHE_DIR
        )

    # -- Tree rendering ----------------------------------------------------

    def render(self, source: str | Path, dest: str | Path) -> list[Path]:
        """Copy *source* (a file or directory) to *dest*.

        Directories are created before their entries are visited.  The
        walk uses an explicit stack, so deep templates do not hit the
        recursion limit.  Entry order is not significant.

        Returns:
            Destination paths of the files written, in write order.

        Raises:
            TemplateNotFoundError: If *source* does not exist.
            ManifestParseError: If a manifest merge meets invalid JSON.
            ScaffoldIOError: If reading, listing or writing fails.
        """
        source_path = Path(source).resolve()
        if not source_path.exists():
            raise TemplateNotFoundError(source_path)

        written: list[Path] = []
        stack: list[tuple[Path, Path]] = [(source_path, Path(dest).resolve())]

        while stack:
            src, dst = stack.pop()

            if src.is_dir():
                if src.name == DEPENDENCY_CACHE_DIR:
                    continue
                _make_dir(dst)
                try:
                    names = os.listdir(src)
                except OSError as exc:
                    raise ScaffoldIOError(src, "list", exc.strerror or str(exc)) from exc
                # Reversed so entries pop in listing order.
                stack.extend((src / name, dst / name) for name in reversed(names))
                continue

            written.append(self._render_file(src, dst))

        return written

    def _render_file(self, src: Path, dst: Path) -> Path:
        target = dst.parent / dotfile_name(dst.name)

        if target.name == MANIFEST_FILENAME and target.is_file():
            content = merge_manifest_files(target, src).encode("utf-8")
            mode = None
        else:
            try:
                content = src.read_bytes()
                mode = src.stat().st_mode & 0o777
            except OSError as exc:
                raise ScaffoldIOError(src, "read", exc.strerror or str(exc)) from exc

        write_atomic(target, content, mode=mode)
        return target


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------

def dotfile_name(name: str) -> str:
    """Map a template file name to its rendered name.

    ``_gitignore`` -> ``.gitignore``; names without a leading underscore
    are returned unchanged.  Only the first underscore is replaced, and a
    bare ``_`` is kept since ``.`` is not a usable file name.
    """
    if name.startswith(DOTFILE_PREFIX) and name != DOTFILE_PREFIX:
        return "." + name[len(DOTFILE_PREFIX):]
    return name


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _make_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ScaffoldIOError(path, "mkdir", exc.strerror or str(exc)) from exc


def _current_umask() -> int:
    # The umask can only be read by setting it.
    mask = os.umask(0)
    os.umask(mask)
    return mask


def write_atomic(path: str | Path, content: bytes, mode: int | None = None) -> None:
    """Write *content* to *path* through a sibling temporary file.

    The temporary file replaces *path* only once fully written, so a
    failed write leaves any previous file at *path* intact.

    A replaced file keeps its permissions.  A new file gets *mode* (the
    template file's permissions) or ``0o666``, filtered by the umask.
    """
    target = Path(path)
    _make_dir(target.parent)
    tmp_name = None
    try:
        if target.is_file():
            mode = target.stat().st_mode & 0o777
        else:
            mode = (_NEW_FILE_MODE if mode is None else mode) & ~_current_umask()
        with tempfile.NamedTemporaryFile(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(content)
        # NamedTemporaryFile creates 0600 files.
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, target)
    except OSError as exc:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
        raise ScaffoldIOError(target, "write", exc.strerror or str(exc)) from exc
