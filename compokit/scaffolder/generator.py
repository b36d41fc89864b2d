"""Main scaffolding orchestrator.

Takes ``ScaffoldOptions`` (the answers collected by the CLI) and turns a
target directory into a starter project:

1. classify the target and refuse to touch it without authorization,
2. empty it (or create it),
3. write the initial ``package.json``,
4. render the selected templates on top, merging manifests.

``ProjectGenerator.generate`` owns the target directory for the duration
of the call.  No other process may modify the target while it runs; no
locking is attempted.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field
from rich.markup import escape

from compokit.config import Config
from compokit.utils import console, print_warning

from .errors import OperationCancelled, ScaffoldIOError
from .manifest import MANIFEST_FILENAME, dump_manifest, initial_manifest
from .reconciler import ReuseState, classify_for_reuse, empty_directory
from .templates import TemplateRenderer, write_atomic


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class ScaffoldOptions(BaseModel):
    """Pydantic model describing the project to scaffold."""

    project_name: str = Field(..., min_length=1, description="Target directory name")
    package_name: str = Field(..., min_length=1, description="Name written to package.json")
    target_dir: Path = Field(..., description="Directory to scaffold into")
    overwrite: bool = Field(
        default=False, description="Authorization to empty a non-empty target"
    )
    framework: Optional[Literal["vue"]] = Field(
        default=None, description="Optional JavaScript framework template"
    )
    templates: Optional[list[str]] = Field(
        default=None,
        description="Explicit ordered template list (overrides base + framework)",
    )


class ScaffoldResult(BaseModel):
    """Outcome of a scaffold run."""

    root: Path
    reuse_state: ReuseState
    emptied: bool = False
    templates: list[str] = Field(default_factory=list)
    files: list[Path] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Scaffolds a project into a single target directory."""

    def __init__(self, config: Optional[Config] = None, *, verbose: bool = False) -> None:
        self.config = config or Config()
        self.renderer = TemplateRenderer(self.config.template_dir)
        self.verbose = verbose

    # -- Public API --------------------------------------------------------

    def generate(self, options: ScaffoldOptions, cwd: str | Path | None = None) -> ScaffoldResult:
        """Generate the project described by *options*.

        Args:
            options: Answers collected from the user.
            cwd: Base for a relative ``target_dir``.  Defaults to the
                process working directory.

        Returns:
            A ``ScaffoldResult`` describing what was done.

        Raises:
            OperationCancelled: If the target needs confirmation and
                ``options.overwrite`` is false.  The target is untouched.
            TemplateNotFoundError, ManifestParseError, ScaffoldIOError:
                Propagated from the core; already-written files remain.
        """
        base = Path(cwd) if cwd is not None else Path.cwd()
        root = (base / options.target_dir).resolve()
        templates = self.templates_for(options)

        # Resolve every template up front so a typo fails before any
        # destructive step.
        template_dirs = [self.renderer.template_path(name) for name in templates]

        # 1. Classify and authorize
        state = classify_for_reuse(root)
        if state.requires_confirmation and not options.overwrite:
            raise OperationCancelled()

        # 2. Prepare the target
        emptied = self._prepare_target(root, state, options.overwrite)

        console.print(f"\nScaffolding project in {escape(str(root))}...")

        # 3. Initial manifest
        manifest_path = root / MANIFEST_FILENAME
        manifest = initial_manifest(options.package_name, self.config.initial_version)
        write_atomic(manifest_path, dump_manifest(manifest).encode("utf-8"))
        files: list[Path] = [manifest_path]

        # 4. Templates, in order
        for template_dir in template_dirs:
            written = self.renderer.render(template_dir, root)
            if self.verbose:
                for path in written:
                    console.print(f"  [green]+[/green] {escape(str(path.relative_to(root)))}")
            files.extend(written)

        return ScaffoldResult(
            root=root,
            reuse_state=state,
            emptied=emptied,
            templates=templates,
            files=files,
        )

    def templates_for(self, options: ScaffoldOptions) -> list[str]:
        """Return the ordered template names to render for *options*."""
        if options.templates is not None:
            return list(options.templates)
        templates = [self.config.base_template]
        if options.framework:
            templates.append(options.framework)
        return templates

    # -- Target preparation ------------------------------------------------

    def _prepare_target(self, root: Path, state: ReuseState, overwrite: bool) -> bool:
        """Empty or create *root*; return ``True`` if it was emptied."""
        if state is ReuseState.MISSING:
            try:
                root.mkdir(parents=True)
            except OSError as exc:
                raise ScaffoldIOError(root, "mkdir", exc.strerror or str(exc)) from exc
            return False

        if overwrite and state.requires_confirmation:
            empty_directory(root, preserve=self.config.preserve_on_empty)
            print_warning(f"Removed existing files in {escape(str(root))}")
            return True
        return False
