"""compo-kit configuration.

Typed settings for a scaffold run.  Pydantic v2 models validate values at
construction time; ``Config.from_env`` builds an instance from environment
variables so the CLI and tests share one code path.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from compokit.utils import PACKAGE_MANAGERS, detect_package_manager


DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


class Config(BaseModel):
    """Global compo-kit configuration.

    Instances are created once by the CLI entry point and handed to the
    ``ProjectGenerator``.
    """

    template_dir: Path = Field(default=DEFAULT_TEMPLATE_DIR)
    default_project_name: str = Field(default="compo-kit-project", min_length=1)
    initial_version: str = Field(default="0.0.0", min_length=1)
    package_manager: str = Field(default="pnpm")
    base_template: str = Field(default="base", min_length=1)

    # Top-level entries kept when an existing target is emptied.
    preserve_on_empty: list[str] = Field(default_factory=lambda: [".git"])

    @field_validator("package_manager")
    @classmethod
    def _known_package_manager(cls, value: str) -> str:
        if value not in PACKAGE_MANAGERS:
            raise ValueError(
                f"Unsupported package manager {value!r} "
                f"(expected one of: {', '.join(PACKAGE_MANAGERS)})"
            )
        return value

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            COMPOKIT_TEMPLATE_DIR, COMPOKIT_PACKAGE_MANAGER,
            COMPOKIT_DEFAULT_PROJECT_NAME.

        When no package manager is configured explicitly it is detected
        from ``npm_config_user_agent`` (set when running under
        ``pnpm create`` / ``npm init`` / ``yarn create``).
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        if env.get("COMPOKIT_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(env["COMPOKIT_TEMPLATE_DIR"])
        if env.get("COMPOKIT_DEFAULT_PROJECT_NAME"):
            kwargs["default_project_name"] = env["COMPOKIT_DEFAULT_PROJECT_NAME"]

        manager = env.get("COMPOKIT_PACKAGE_MANAGER") or detect_package_manager(
            env.get("npm_config_user_agent", "")
        )
        if manager:
            kwargs["package_manager"] = manager

        return cls(**kwargs)
