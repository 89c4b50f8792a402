"""Unit tests for the second-stage initializer (saber_vue.scripts.init).

Tests cover:
- scripts section, README rename, template copy, gitignore handling
- Conditional template-dependency install (npm and Yarn)
- .template.dependencies.json consumption
- Custom and missing templates
- print_usage / _display_path
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from saber_vue.config import CreateAppConfig
from saber_vue.creator.installer import InstallError
from saber_vue.creator.models import ProjectSpec
from saber_vue.scripts.init import (
    TEMPLATE_DEPENDENCIES_FILE,
    InitResult,
    _display_path,
    build_app_scripts,
    init_project,
    merge_gitignore,
    print_usage,
    read_template_dependencies,
)
from saber_vue.scripts.templates import DEFAULT_TEMPLATE_DIR, TemplateError


def _spec(app: Path, **kwargs) -> ProjectSpec:
    return ProjectSpec(name=app.name, root_path=app, original_directory=app.parent, **kwargs)


def _manifest(app: Path) -> dict:
    return json.loads((app / "package.json").read_text())


@pytest.fixture
def app_without_vue(installed_app: Path) -> Path:
    manifest = _manifest(installed_app)
    del manifest["dependencies"]["vue"]
    (installed_app / "package.json").write_text(json.dumps(manifest))
    return installed_app


@pytest.fixture
def custom_template(tmp_path: Path) -> Path:
    template = tmp_path / "my-template"
    template.mkdir()
    (template / "gitignore").write_text("dist/\n")
    (template / "main.js").write_text("// custom\n")
    return template


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestBuildAppScripts:
    @pytest.mark.unit
    def test_scripts(self):
        assert build_app_scripts("saber-vue-scripts") == {
            "start": "saber-vue-scripts start",
            "build": "saber-vue-scripts build",
            "test": "saber-vue-scripts test --env=jsdom",
            "eject": "saber-vue-scripts eject",
        }


class TestMergeGitignore:
    @pytest.mark.unit
    def test_renamed_when_absent(self, tmp_project_dir: Path):
        (tmp_project_dir / "gitignore").write_text("node_modules/\n")
        merge_gitignore(tmp_project_dir)

        assert (tmp_project_dir / ".gitignore").read_text() == "node_modules/\n"
        assert not (tmp_project_dir / "gitignore").exists()

    @pytest.mark.unit
    def test_appended_to_existing(self, tmp_project_dir: Path):
        (tmp_project_dir / ".gitignore").write_text("secrets.env\n")
        (tmp_project_dir / "gitignore").write_text("node_modules/\n")
        merge_gitignore(tmp_project_dir)

        assert (tmp_project_dir / ".gitignore").read_text() == "secrets.env\nnode_modules/\n"
        assert not (tmp_project_dir / "gitignore").exists()

    @pytest.mark.unit
    def test_newline_added_between_contents(self, tmp_project_dir: Path):
        (tmp_project_dir / ".gitignore").write_text("secrets.env")
        (tmp_project_dir / "gitignore").write_text("node_modules/\n")
        merge_gitignore(tmp_project_dir)

        assert (tmp_project_dir / ".gitignore").read_text() == "secrets.env\nnode_modules/\n"

    @pytest.mark.unit
    def test_no_template_gitignore(self, tmp_project_dir: Path):
        (tmp_project_dir / ".gitignore").write_text("keep\n")
        merge_gitignore(tmp_project_dir)
        assert (tmp_project_dir / ".gitignore").read_text() == "keep\n"


class TestReadTemplateDependencies:
    @pytest.mark.unit
    def test_absent(self, tmp_project_dir: Path):
        assert read_template_dependencies(tmp_project_dir) == []

    @pytest.mark.unit
    def test_consumed(self, tmp_project_dir: Path):
        path = tmp_project_dir / TEMPLATE_DEPENDENCIES_FILE
        path.write_text(json.dumps({"dependencies": {"axios": "^0.18.0", "vuex": "3.0.1"}}))

        assert read_template_dependencies(tmp_project_dir) == ["axios@^0.18.0", "vuex@3.0.1"]
        assert not path.exists()


# ---------------------------------------------------------------------------
# init_project
# ---------------------------------------------------------------------------


class TestInitProject:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_default_template(self, installed_app: Path, fake_package_manager):
        result = await init_project(
            _spec(installed_app), "saber-vue-scripts", runner=fake_package_manager.run
        )

        assert isinstance(result, InitResult)
        assert result.app_path == installed_app
        assert result.template_path == DEFAULT_TEMPLATE_DIR
        assert result.readme_renamed is False
        assert result.used_yarn is False

        manifest = _manifest(installed_app)
        assert manifest["scripts"]["start"] == "saber-vue-scripts start"
        assert manifest["dependencies"]["vue"] == "2.5.16"

        assert (installed_app / "src" / "main.js").is_file()
        assert (installed_app / "index.html").is_file()
        assert (installed_app / ".gitignore").is_file()
        assert not (installed_app / "gitignore").exists()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_install_skipped_when_vue_present(self, installed_app: Path, fake_package_manager):
        result = await init_project(
            _spec(installed_app), "saber-vue-scripts", runner=fake_package_manager.run
        )
        assert result.installed == []
        assert fake_package_manager.calls == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_install_when_vue_missing(self, app_without_vue: Path, fake_package_manager):
        result = await init_project(
            _spec(app_without_vue), "saber-vue-scripts", runner=fake_package_manager.run
        )

        assert result.installed == ["react", "react-dom"]
        assert fake_package_manager.calls == [
            {"cmd": ["npm", "install", "--save", "react", "react-dom"], "cwd": app_without_vue}
        ]
        assert _manifest(app_without_vue)["dependencies"]["react"] == "16.4.0"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_verbose_npm_install(self, app_without_vue: Path):
        runner = AsyncMock()
        await init_project(_spec(app_without_vue, verbose=True), "saber-vue-scripts", runner=runner)

        cmd, cwd = runner.await_args.args
        assert cmd[:4] == ["npm", "install", "--save", "--verbose"]
        assert cwd == app_without_vue

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_yarn_lock_selects_yarn(self, app_without_vue: Path):
        (app_without_vue / "yarn.lock").write_text("")
        runner = AsyncMock()

        result = await init_project(_spec(app_without_vue), "saber-vue-scripts", runner=runner)

        cmd, _ = runner.await_args.args
        assert cmd == ["yarnpkg", "add", "react", "react-dom"]
        assert result.used_yarn is True

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_readme_renamed(self, installed_app: Path, fake_package_manager):
        (installed_app / "README.md").write_text("# mine")

        result = await init_project(
            _spec(installed_app), "saber-vue-scripts", runner=fake_package_manager.run
        )

        assert result.readme_renamed is True
        assert (installed_app / "README.old.md").read_text() == "# mine"
        assert (installed_app / "README.md").read_text().startswith("# my-vue-app")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_existing_gitignore_merged(self, installed_app: Path, fake_package_manager):
        (installed_app / ".gitignore").write_text("secrets.env\n")

        await init_project(_spec(installed_app), "saber-vue-scripts", runner=fake_package_manager.run)

        content = (installed_app / ".gitignore").read_text()
        assert content.startswith("secrets.env\n")
        assert "node_modules/" in content

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_custom_template_always_installs(self, installed_app: Path, custom_template: Path, fake_package_manager):
        spec = ProjectSpec(
            name=installed_app.name,
            root_path=installed_app,
            original_directory=custom_template.parent,
            template="my-template",
        )
        result = await init_project(spec, "saber-vue-scripts", runner=fake_package_manager.run)

        assert result.template_path == custom_template
        assert (installed_app / "main.js").read_text() == "// custom\n"
        assert (installed_app / ".gitignore").read_text() == "dist/\n"
        assert result.installed == ["react", "react-dom"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_template_dependencies_file(self, installed_app: Path, custom_template: Path):
        (custom_template / TEMPLATE_DEPENDENCIES_FILE).write_text(
            json.dumps({"dependencies": {"vuex": "3.0.1"}})
        )
        spec = _spec(installed_app, template=str(custom_template))
        runner = AsyncMock()

        result = await init_project(spec, "saber-vue-scripts", runner=runner)

        cmd, _ = runner.await_args.args
        assert cmd[-3:] == ["react", "react-dom", "vuex@3.0.1"]
        assert result.installed == ["react", "react-dom", "vuex@3.0.1"]
        assert not (installed_app / TEMPLATE_DEPENDENCIES_FILE).exists()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_template(self, installed_app: Path, capsys):
        runner = AsyncMock()
        spec = _spec(installed_app, template="does-not-exist")

        with pytest.raises(TemplateError) as exc_info:
            await init_project(spec, "saber-vue-scripts", runner=runner)

        assert exc_info.value.template_path == installed_app.parent / "does-not-exist"
        runner.assert_not_awaited()
        # scripts were already written
        assert "scripts" in _manifest(installed_app)
        # reported once, by whoever handles the error
        assert "Could not locate supplied template" not in capsys.readouterr().out

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_install_failure_propagates(self, app_without_vue: Path):
        runner = AsyncMock(side_effect=InstallError("failed", command="npm install --save react react-dom"))
        with pytest.raises(InstallError):
            await init_project(_spec(app_without_vue), "saber-vue-scripts", runner=runner)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_config_scripts_package_and_template_dependencies(self, app_without_vue: Path):
        config = CreateAppConfig(scripts_package="my-vue-scripts", template_dependencies=["vuex"])
        runner = AsyncMock()

        await init_project(_spec(app_without_vue), "my-vue-scripts", config=config, runner=runner)

        assert _manifest(app_without_vue)["scripts"]["build"] == "my-vue-scripts build"
        cmd, _ = runner.await_args.args
        assert cmd == ["npm", "install", "--save", "vuex"]


# ---------------------------------------------------------------------------
# Usage report
# ---------------------------------------------------------------------------


class TestPrintUsage:
    @pytest.mark.unit
    def test_display_path_short_when_in_cwd(self, installed_app: Path):
        assert _display_path(_spec(installed_app)) == "my-vue-app"

    @pytest.mark.unit
    def test_display_path_full_elsewhere(self, installed_app: Path, tmp_path: Path):
        spec = ProjectSpec(
            name=installed_app.name,
            root_path=installed_app,
            original_directory=tmp_path / "elsewhere",
        )
        assert _display_path(spec) == str(installed_app)

    @pytest.mark.unit
    def test_yarn_commands(self, installed_app: Path, capsys):
        print_usage(_spec(installed_app), use_yarn=True, readme_renamed=False)
        out = capsys.readouterr().out
        assert "yarn build" in out
        assert "Happy hacking!" in out
        assert "README.old.md" not in out

    @pytest.mark.unit
    def test_npm_commands_and_readme_note(self, installed_app: Path, capsys):
        print_usage(_spec(installed_app), use_yarn=False, readme_renamed=True)
        out = capsys.readouterr().out
        assert "npm run build" in out
        assert "npm start" in out
        assert "README.old.md" in out
