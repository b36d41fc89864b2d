"""compo-kit command line interface.

Asks for the project name, overwrite confirmation, package name and
framework, then hands the answers to ``ProjectGenerator``.

Usage::

    create-compo-kit
    create-compo-kit my-kit --vue
    create-compo-kit . --force --default
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Optional

from jinja2 import Environment
from pydantic import ValidationError
from rich.markup import escape
from rich.prompt import Confirm, Prompt

from compokit.config import Config
from compokit.scaffolder import (
    OperationCancelled,
    ProjectGenerator,
    ScaffoldError,
    ScaffoldOptions,
    can_skip_emptying,
)
from compokit.utils import (
    PACKAGE_MANAGERS,
    console,
    get_command,
    is_valid_package_name,
    print_banner,
    print_error,
    print_summary_table,
    to_valid_package_name,
)


FRAMEWORK_CHOICES: dict[str, Optional[str]] = {"No": None, "Vue": "vue"}

NEXT_STEPS_TEMPLATE = """
Done. Now run:

{% if cd_path %}
  [bold green]cd {{ cd_path | markup }}[/bold green]
{% endif %}
  [bold green]{{ install | markup }}[/bold green]
  [bold green]{{ dev | markup }}[/bold green]
"""

_env = Environment(keep_trailing_newline=True, trim_blocks=True, lstrip_blocks=True)
_env.filters["markup"] = escape


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for ``create-compo-kit``."""
    parser = argparse.ArgumentParser(
        prog="create-compo-kit",
        description="Scaffold a new component kit project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  create-compo-kit\n"
            "  create-compo-kit my-kit --vue\n"
            "  create-compo-kit . --force --default\n"
        ),
    )
    parser.add_argument("target", nargs="?", default=None, help="Target directory")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Empty a non-empty target directory without asking",
    )
    parser.add_argument(
        "--default",
        action="store_true",
        help="Skip the feature prompts and use defaults (no framework)",
    )
    parser.add_argument("--vue", action="store_true", help="Add the Vue template")
    parser.add_argument(
        "--package-manager",
        choices=PACKAGE_MANAGERS,
        default=None,
        help="Package manager used in the printed instructions",
    )
    parser.add_argument(
        "--template-dir",
        default=None,
        help="Directory holding the templates (default: bundled templates)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="List every file written",
    )
    return parser


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def collect_options(args: argparse.Namespace, config: Config, cwd: Path) -> ScaffoldOptions:
    """Ask the questions not already answered by flags.

    Raises:
        OperationCancelled: If the user refuses to overwrite a non-empty
            target.
    """
    target = args.target
    if not target:
        answer = Prompt.ask("Project name:", default=config.default_project_name)
        target = answer.strip() or config.default_project_name

    overwrite = bool(args.force)
    if not overwrite and not can_skip_emptying(cwd / target):
        where = "Current directory" if target == "." else f'Target directory "{target}"'
        overwrite = Confirm.ask(f"{where} is not empty. Remove existing files and continue?")
        if not overwrite:
            raise OperationCancelled()

    package_name = target
    if not is_valid_package_name(package_name):
        initial = to_valid_package_name((cwd / target).resolve().name)
        while True:
            package_name = Prompt.ask("Package name:", default=initial).strip()
            if is_valid_package_name(package_name):
                break
            print_error("Invalid package.json name")

    if args.default or args.vue:
        framework = "vue" if args.vue else None
    else:
        choice = Prompt.ask(
            "Add a JavaScript framework?",
            choices=list(FRAMEWORK_CHOICES),
            default="No",
        )
        framework = FRAMEWORK_CHOICES[choice]

    return ScaffoldOptions(
        project_name=target,
        package_name=package_name,
        target_dir=Path(target),
        overwrite=overwrite,
        framework=framework,
    )


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def render_next_steps(root: Path, cwd: Path, package_manager: str) -> str:
    """Return the rich-markup instructions printed after scaffolding."""
    cd_path = ""
    if root != cwd:
        cd_path = os.path.relpath(root, cwd)
        if " " in cd_path:
            cd_path = f'"{cd_path}"'
    return _env.from_string(NEXT_STEPS_TEMPLATE).render(
        cd_path=cd_path,
        install=get_command(package_manager, "install"),
        dev=get_command(package_manager, "dev"),
    )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``create-compo-kit``."""
    args = build_parser().parse_args(argv)
    cwd = Path.cwd()

    try:
        config = Config.from_env()
        overrides: dict[str, object] = {}
        if args.template_dir:
            overrides["template_dir"] = Path(args.template_dir)
        if args.package_manager:
            overrides["package_manager"] = args.package_manager
        if overrides:
            config = config.model_copy(update=overrides)
    except ValidationError as exc:
        print_error(f"Invalid configuration: {escape(str(exc))}")
        sys.exit(1)

    print_banner()

    try:
        options = collect_options(args, config, cwd)
        result = ProjectGenerator(config, verbose=args.verbose).generate(options, cwd=cwd)
    except (OperationCancelled, KeyboardInterrupt, EOFError):
        console.print("[red]✖[/red] Operation cancelled")
        sys.exit(1)
    except ScaffoldError as exc:
        print_error(f"Error: {escape(str(exc))}")
        sys.exit(1)

    if args.verbose:
        print_summary_table(
            {
                "Root": str(result.root),
                "Templates": ", ".join(result.templates),
                "Files written": str(len(result.files)),
                "Emptied": "yes" if result.emptied else "no",
            },
            title="Scaffold",
        )

    console.print(render_next_steps(result.root, cwd, config.package_manager))


if __name__ == "__main__":
    main()
