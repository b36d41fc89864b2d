"""compo-kit scaffolder -- turns template trees into starter projects.

Quick usage::

    from compokit.scaffolder import ProjectGenerator, ScaffoldOptions

    options = ScaffoldOptions(
        project_name="my-kit",
        package_name="my-kit",
        target_dir="my-kit",
        framework="vue",
    )
    result = ProjectGenerator().generate(options)
"""

from compokit.scaffolder.errors import (
    ManifestParseError,
    OperationCancelled,
    ScaffoldError,
    ScaffoldIOError,
    TemplateNotFoundError,
)
from compokit.scaffolder.generator import ProjectGenerator, ScaffoldOptions, ScaffoldResult
from compokit.scaffolder.manifest import merge_manifests
from compokit.scaffolder.reconciler import (
    ReuseState,
    can_skip_emptying,
    classify_for_reuse,
    empty_directory,
)
from compokit.scaffolder.templates import TemplateRenderer

__all__ = [
    "ManifestParseError",
    "OperationCancelled",
    "ProjectGenerator",
    "ReuseState",
    "ScaffoldError",
    "ScaffoldIOError",
    "ScaffoldOptions",
    "ScaffoldResult",
    "TemplateNotFoundError",
    "TemplateRenderer",
    "can_skip_emptying",
    "classify_for_reuse",
    "empty_directory",
    "merge_manifests",
]
