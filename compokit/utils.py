"""Shared utility functions for compo-kit.

Provides package-name validation, package-manager command helpers and
Rich-based console output.  Nothing here touches the filesystem.
"""

from __future__ import annotations

import re
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Package names
# ---------------------------------------------------------------------------

_PACKAGE_NAME_RE = re.compile(
    r"^(?:@[a-z0-9-*~][a-z0-9-*._~]*/)?[a-z0-9-~][a-z0-9-._~]*$"
)


def is_valid_package_name(name: str) -> bool:
    """Return ``True`` if *name* is usable as an npm package name.

    Scoped names (``@scope/name``) are accepted.
    """
    return bool(_PACKAGE_NAME_RE.match(name))


def to_valid_package_name(name: str) -> str:
    """Derive a valid package name from a project or directory name.

    Examples::

        to_valid_package_name("My Project")   -> "my-project"
        to_valid_package_name("_private")     -> "private"
        to_valid_package_name("a@b!c")        -> "a-b-c"
    """
    result = name.strip().lower()
    result = re.sub(r"\s+", "-", result)
    result = re.sub(r"^[._]", "", result)
    return re.sub(r"[^a-z0-9-~]+", "-", result)


# ---------------------------------------------------------------------------
# Package managers
# ---------------------------------------------------------------------------

PACKAGE_MANAGERS: tuple[str, ...] = ("pnpm", "yarn", "npm")


def detect_package_manager(user_agent: str) -> Optional[str]:
    """Detect the package manager from an ``npm_config_user_agent`` value.

    The agent string looks like ``"pnpm/8.6.0 npm/? node/v18.16.0 linux x64"``.
    Returns ``None`` when none of the supported managers is named.
    """
    for manager in PACKAGE_MANAGERS:
        if re.search(rf"\b{manager}/", user_agent):
            return manager
    return None


def get_command(package_manager: str, script: str) -> str:
    """Return the shell command that runs *script* with *package_manager*.

    ``install`` is spelled ``yarn`` for yarn; other scripts need ``run``
    only under npm.
    """
    if script == "install":
        return "yarn" if package_manager == "yarn" else f"{package_manager} install"
    if package_manager == "npm":
        return f"npm run {script}"
    return f"{package_manager} {script}"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------

BANNER = "compo-kit - scaffold a component kit project"


def print_banner() -> None:
    """Print the start-up banner."""
    console.print()
    console.print(Panel(f"[bold cyan]{BANNER}[/bold cyan]", expand=False))
    console.print()


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
