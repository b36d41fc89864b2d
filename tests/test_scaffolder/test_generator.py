"""Tests for the scaffolding orchestrator (compokit.scaffolder.generator).

Covers:
- ScaffoldOptions model validation
- Template selection (base, framework, explicit list)
- Generation into missing, empty, .git-only and populated targets
- Overwrite authorization and cancellation without mutation
- Initial manifest merged with template manifests
- Error propagation
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from compokit.config import Config
from compokit.scaffolder.errors import (
    ManifestParseError,
    OperationCancelled,
    TemplateNotFoundError,
)
from compokit.scaffolder.generator import ProjectGenerator, ScaffoldOptions, ScaffoldResult
from compokit.scaffolder.reconciler import ReuseState


pytestmark = pytest.mark.unit


def _options(target: Path | str, **overrides) -> ScaffoldOptions:
    values = {
        "project_name": "my-kit",
        "package_name": "my-kit",
        "target_dir": Path(target),
    }
    values.update(overrides)
    return ScaffoldOptions(**values)


# ---------------------------------------------------------------------------
# ScaffoldOptions
# ---------------------------------------------------------------------------


class TestScaffoldOptions:
    def test_defaults(self):
        opts = _options("x")
        assert opts.overwrite is False
        assert opts.framework is None
        assert opts.templates is None

    def test_framework_must_be_known(self):
        with pytest.raises(ValidationError):
            _options("x", framework="angular")

    def test_empty_package_name_rejected(self):
        with pytest.raises(ValidationError):
            _options("x", package_name="")


# ---------------------------------------------------------------------------
# Template selection
# ---------------------------------------------------------------------------


class TestTemplatesFor:
    def test_base_only(self, config: Config):
        assert ProjectGenerator(config).templates_for(_options("x")) == ["base"]

    def test_base_then_framework(self, config: Config):
        gen = ProjectGenerator(config)
        assert gen.templates_for(_options("x", framework="vue")) == ["base", "vue"]

    def test_explicit_list_wins(self, config: Config):
        gen = ProjectGenerator(config)
        opts = _options("x", framework="vue", templates=["vue"])
        assert gen.templates_for(opts) == ["vue"]

    def test_custom_base_template(self, template_root: Path):
        gen = ProjectGenerator(Config(template_dir=template_root, base_template="vue"))
        assert gen.templates_for(_options("x")) == ["vue"]


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------


class TestGenerate:
    def test_missing_target_is_created(self, config: Config, tmp_path: Path):
        result = ProjectGenerator(config).generate(_options("new-kit"), cwd=tmp_path)

        root = (tmp_path / "new-kit").resolve()
        assert isinstance(result, ScaffoldResult)
        assert result.root == root
        assert result.reuse_state is ReuseState.MISSING
        assert result.emptied is False
        assert (root / ".gitignore").exists()
        assert (root / "README.md").read_text() == "# Starter\n"
        assert not (root / "node_modules").exists()

    def test_manifest_is_initial_merged_with_template(self, config: Config, tmp_path: Path):
        ProjectGenerator(config).generate(_options("kit", package_name="@acme/kit"), cwd=tmp_path)

        manifest = json.loads((tmp_path / "kit" / "package.json").read_text())
        assert manifest == {
            "name": "@acme/kit",
            "version": "0.0.0",
            "private": True,
            "scripts": {"dev": "vite", "build": "vite build"},
            "devDependencies": {"vite": "^5.4.0"},
        }
        assert list(manifest)[:2] == ["name", "version"]

    def test_framework_template_layered_on_base(self, config: Config, tmp_path: Path):
        result = ProjectGenerator(config).generate(_options("kit", framework="vue"), cwd=tmp_path)

        root = result.root
        assert result.templates == ["base", "vue"]
        assert (root / "src" / "main.js").read_text() == "import { createApp } from 'vue'\n"
        assert (root / "src" / "App.vue").exists()
        manifest = json.loads((root / "package.json").read_text())
        assert manifest["dependencies"] == {"vue": "^3.4.0"}
        assert manifest["devDependencies"] == {
            "vite": "^5.4.0",
            "@vitejs/plugin-vue": "^5.1.0",
        }

    def test_custom_initial_version(self, template_root: Path, tmp_path: Path):
        config = Config(template_dir=template_root, initial_version="1.0.0-alpha")
        result = ProjectGenerator(config).generate(_options("kit"), cwd=tmp_path)
        assert json.loads((result.root / "package.json").read_text())["version"] == "1.0.0-alpha"

    def test_absolute_target_ignores_cwd(self, config: Config, tmp_path: Path):
        target = tmp_path / "abs"
        result = ProjectGenerator(config).generate(_options(target), cwd=tmp_path / "elsewhere")
        assert result.root == target.resolve()

    def test_empty_target_needs_no_authorization(self, config: Config, tmp_project_dir: Path):
        result = ProjectGenerator(config).generate(_options(tmp_project_dir))
        assert result.reuse_state is ReuseState.EMPTY
        assert result.emptied is False
        assert (tmp_project_dir / "package.json").exists()

    def test_git_only_target_keeps_git(self, config: Config, tmp_project_dir: Path):
        (tmp_project_dir / ".git").mkdir()
        (tmp_project_dir / ".git" / "HEAD").write_text("ref")

        result = ProjectGenerator(config).generate(_options(tmp_project_dir))

        assert result.reuse_state is ReuseState.GIT_ONLY
        assert (tmp_project_dir / ".git" / "HEAD").read_text() == "ref"

    def test_populated_target_without_overwrite_is_cancelled(self, config: Config, tmp_project_dir: Path):
        (tmp_project_dir / "precious.txt").write_text("keep")

        with pytest.raises(OperationCancelled):
            ProjectGenerator(config).generate(_options(tmp_project_dir))

        assert os.listdir(tmp_project_dir) == ["precious.txt"]

    def test_populated_target_with_overwrite_is_emptied(self, config: Config, tmp_project_dir: Path):
        (tmp_project_dir / "old").mkdir()
        (tmp_project_dir / "old" / "stale.js").write_text("x")
        (tmp_project_dir / "package.json").write_text('{"name": "old", "dependencies": {"left": "1"}}')
        (tmp_project_dir / ".git").mkdir()
        (tmp_project_dir / ".git" / "HEAD").write_text("ref")

        result = ProjectGenerator(config).generate(_options(tmp_project_dir, overwrite=True))

        assert result.reuse_state is ReuseState.NEEDS_CONFIRMATION
        assert result.emptied is True
        assert not (tmp_project_dir / "old").exists()
        assert (tmp_project_dir / ".git" / "HEAD").read_text() == "ref"
        manifest = json.loads((tmp_project_dir / "package.json").read_text())
        assert manifest["name"] == "my-kit"
        assert "dependencies" not in manifest

    def test_preserve_list_is_configurable(self, template_root: Path, tmp_project_dir: Path):
        (tmp_project_dir / ".git").mkdir()
        (tmp_project_dir / "x").write_text("")
        config = Config(template_dir=template_root, preserve_on_empty=[])

        ProjectGenerator(config).generate(_options(tmp_project_dir, overwrite=True))

        assert not (tmp_project_dir / ".git").exists()

    def test_result_lists_written_files(self, config: Config, tmp_path: Path):
        result = ProjectGenerator(config).generate(_options("kit"), cwd=tmp_path)

        names = {p.relative_to(result.root).as_posix() for p in result.files}
        assert {"package.json", ".gitignore", "README.md", "src/main.js"} <= names

    def test_verbose_lists_files(self, config: Config, tmp_path: Path, capsys):
        ProjectGenerator(config, verbose=True).generate(_options("kit"), cwd=tmp_path)
        out = capsys.readouterr().out
        assert "Scaffolding project in" in out
        assert ".gitignore" in out

    def test_unknown_template_fails_before_touching_target(self, config: Config, tmp_project_dir: Path):
        (tmp_project_dir / "precious.txt").write_text("keep")

        with pytest.raises(TemplateNotFoundError):
            ProjectGenerator(config).generate(
                _options(tmp_project_dir, overwrite=True, templates=["base", "react"])
            )

        assert (tmp_project_dir / "precious.txt").read_text() == "keep"

    def test_broken_template_manifest_propagates(self, make_tree, tmp_path: Path):
        root = make_tree({"base": {"package.json": "{ nope"}}, root=tmp_path / "broken")

        with pytest.raises(ManifestParseError) as exc_info:
            ProjectGenerator(Config(template_dir=root)).generate(_options("kit"), cwd=tmp_path)

        assert exc_info.value.side == "template"

    def test_bundled_templates(self, tmp_path: Path):
        result = ProjectGenerator().generate(_options("kit", framework="vue"), cwd=tmp_path)

        root = result.root
        assert (root / ".gitignore").exists()
        assert (root / "vite.config.js").exists()
        manifest = json.loads((root / "package.json").read_text())
        assert manifest["name"] == "my-kit"
        assert "vue" in manifest["dependencies"]
