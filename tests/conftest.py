"""Shared pytest fixtures for the compo-kit test suite.

Provides reusable fixtures for:
- Temporary target directories
- Building template trees from nested dicts
- Reading a directory tree back as ``{relative path: bytes}``
- A ``Config`` pointing at a throwaway template root
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from compokit.config import Config


TreeLayout = dict[str, Any]


def _write_tree(root: Path, layout: TreeLayout) -> Path:
    """Materialise *layout* under *root*.

    Dict values become directories, except under a ``package.json`` key
    where the dict is serialised as JSON.  ``str`` and ``bytes`` values are
    written as file contents.
    """
    root.mkdir(parents=True, exist_ok=True)
    for name, value in layout.items():
        path = root / name
        if name == "package.json" and isinstance(value, dict):
            path.write_text(json.dumps(value, indent=2), encoding="utf-8")
        elif isinstance(value, dict):
            _write_tree(path, value)
        elif isinstance(value, bytes):
            path.write_bytes(value)
        else:
            path.write_text(value, encoding="utf-8")
    return root


def _read_tree(root: Path) -> dict[str, bytes]:
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Existing, empty target directory."""
    project_dir = tmp_path / "test-project"
    project_dir.mkdir()
    yield project_dir


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[..., Path]:
    """Factory building a directory tree from a nested dict.

    Usage::

        def test_something(make_tree):
            src = make_tree({"_gitignore": "node_modules", "src": {"a.js": ""}})
    """
    counter = {"n": 0}

    def factory(layout: TreeLayout, root: Path | None = None) -> Path:
        if root is None:
            counter["n"] += 1
            root = tmp_path / f"tree-{counter['n']}"
        return _write_tree(root, layout)

    return factory


@pytest.fixture
def read_tree() -> Callable[[Path], dict[str, bytes]]:
    """Return a function mapping a tree to ``{posix relative path: bytes}``."""
    return _read_tree


# ---------------------------------------------------------------------------
# Templates & Config
# ---------------------------------------------------------------------------


@pytest.fixture
def template_root(make_tree, tmp_path: Path) -> Path:
    """A small template root with ``base`` and ``vue`` templates."""
    return make_tree(
        {
            "base": {
                "_gitignore": "node_modules\ndist\n",
                "README.md": "# Starter\n",
                "package.json": {
                    "private": True,
                    "scripts": {"dev": "vite", "build": "vite build"},
                    "devDependencies": {"vite": "^5.4.0"},
                },
                "src": {"main.js": "console.log('base')\n"},
                "node_modules": {"vite": {"index.js": "leftover"}},
            },
            "vue": {
                "package.json": {
                    "dependencies": {"vue": "^3.4.0"},
                    "devDependencies": {"@vitejs/plugin-vue": "^5.1.0"},
                },
                "src": {"main.js": "import { createApp } from 'vue'\n", "App.vue": "<template/>\n"},
            },
        },
        root=tmp_path / "templates",
    )


@pytest.fixture
def config(template_root: Path) -> Config:
    """Config using the throwaway template root."""
    return Config(template_dir=template_root)
