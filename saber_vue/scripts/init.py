"""Second-stage initializer: turns an app with dependencies into a project.

Runs once the creator has installed the scripts package.  It wires the
``scripts`` section of ``package.json``, copies the app template, normalises
``.gitignore``, installs the template's own dependencies and prints how to
get started.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

from pydantic import BaseModel, Field
from rich.markup import escape

from saber_vue.config import CreateAppConfig
from saber_vue.creator.installer import NPM, YARN, install_command
from saber_vue.creator.models import ProjectSpec
from saber_vue.scripts.templates import DEFAULT_TEMPLATE_DIR, TemplateError, TemplateRenderer
from saber_vue.utils import console, load_json, print_info, print_success, save_json

TEMPLATE_DEPENDENCIES_FILE = ".template.dependencies.json"

CommandRunner = Callable[[Sequence[str], Path], Awaitable[None]]


class InitResult(BaseModel):
    """What the second stage did to the app directory."""

    app_path: Path
    template_path: Path
    readme_renamed: bool = False
    used_yarn: bool = False
    installed: list[str] = Field(
        default_factory=list,
        description="Dependencies installed by this stage; empty when the install was skipped",
    )


def build_app_scripts(scripts_package: str) -> dict[str, str]:
    """Return the ``scripts`` section of a new app's manifest."""
    return {
        "start": f"{scripts_package} start",
        "build": f"{scripts_package} build",
        "test": f"{scripts_package} test --env=jsdom",
        "eject": f"{scripts_package} eject",
    }


def merge_gitignore(app_path: Path) -> None:
    """Rename the template's ``gitignore`` to ``.gitignore``.

    npm renames ``.gitignore`` to ``.npmignore`` when publishing, so templates
    ship it without the dot.  An existing ``.gitignore`` is appended to rather
    than replaced.
    """
    source = app_path / "gitignore"
    target = app_path / ".gitignore"
    if not source.exists():
        return

    if not target.exists():
        source.rename(target)
        return

    existing = target.read_text(encoding="utf-8")
    addition = source.read_text(encoding="utf-8")
    with target.open("a", encoding="utf-8") as fh:
        if existing and not existing.endswith("\n"):
            fh.write("\n")
        fh.write(addition)
    source.unlink()


def read_template_dependencies(app_path: Path) -> list[str]:
    """Consume ``.template.dependencies.json`` and return ``name@version`` specifiers."""
    path = app_path / TEMPLATE_DEPENDENCIES_FILE
    if not path.exists():
        return []

    dependencies = load_json(path).get("dependencies", {})
    path.unlink()
    return [f"{name}@{version}" for name, version in dependencies.items()]


def _display_path(spec: ProjectSpec) -> str:
    # the app name alone is enough when the app lives right where the CLI ran
    if spec.original_directory / spec.name == spec.root_path:
        return spec.name
    return str(spec.root_path)


def print_usage(spec: ProjectSpec, use_yarn: bool, readme_renamed: bool) -> None:
    """Print the success report and the commands available in the new app."""
    command = "yarn" if use_yarn else "npm"
    run = "" if use_yarn else "run "

    print_info()
    print_success(f"Success! Created {spec.name} at {spec.root_path}")
    print_info("Inside that directory, you can run several commands:")
    print_info()
    console.print(f"[cyan]  {command} start[/cyan]")
    print_info("    Starts the development server.")
    print_info()
    console.print(f"[cyan]  {command} {run}build[/cyan]")
    print_info("    Bundles the app into static files for production.")
    print_info()
    console.print(f"[cyan]  {command} test[/cyan]")
    print_info("    Starts the test runner.")
    print_info()
    console.print(f"[cyan]  {command} {run}eject[/cyan]")
    print_info("    Removes this tool and copies build dependencies, configuration files")
    print_info("    and scripts into the app directory. If you do this, you can't go back!")
    print_info()
    print_info("We suggest that you begin by typing:")
    print_info()
    console.print(f"[cyan]  cd[/cyan] {escape(_display_path(spec))}")
    console.print(f"  [cyan]{command} start[/cyan]")
    if readme_renamed:
        print_info()
        console.print("[yellow]You had a `README.md` file, we renamed it to `README.old.md`[/yellow]")
    print_info()
    print_info("Happy hacking!")


async def init_project(
    spec: ProjectSpec,
    package_name: str,
    *,
    config: CreateAppConfig | None = None,
    runner: CommandRunner = install_command,
) -> InitResult:
    """Materialise the app template inside ``spec.root_path``.

    Args:
        spec: The project being created; ``root_path`` already holds a
            ``package.json`` listing the installed dependencies.
        package_name: Name of the installed scripts package.
        config: Tool configuration (template dependencies, scripts package).
        runner: Executes the dependency install; raises on failure.

    Raises:
        TemplateError: If the template directory does not exist.
        InstallError: If installing the template dependencies fails.
    """
    config = config or CreateAppConfig()
    app_path = spec.root_path
    use_yarn = (app_path / "yarn.lock").exists()

    app_package = load_json(spec.manifest_path)
    app_package.setdefault("dependencies", {})
    app_package["scripts"] = build_app_scripts(config.scripts_package)
    save_json(app_package, spec.manifest_path)

    readme_renamed = (app_path / "README.md").exists()
    if readme_renamed:
        (app_path / "README.md").rename(app_path / "README.old.md")

    if spec.template:
        template_path = (spec.original_directory / spec.template).resolve()
    else:
        template_path = DEFAULT_TEMPLATE_DIR

    renderer = TemplateRenderer(template_path)
    if not renderer.exists():
        raise TemplateError(
            f"Could not locate supplied template: {template_path}",
            template_path=template_path,
        )

    renderer.copy_to(
        app_path,
        {
            "app_name": spec.name,
            "app_path": str(app_path),
            "use_yarn": use_yarn,
            "scripts_package": package_name,
        },
    )
    merge_gitignore(app_path)

    if use_yarn:
        cmd = [YARN, "add"]
    else:
        cmd = [NPM, "install", "--save"]
        if spec.verbose:
            cmd.append("--verbose")

    dependencies = [*config.template_dependencies, *read_template_dependencies(app_path)]
    cmd.extend(dependencies)

    installed: list[str] = []
    runtime = config.runtime_dependencies[0] if config.runtime_dependencies else "vue"
    if runtime not in app_package["dependencies"] or spec.template:
        print_info(f"Installing {', '.join(dependencies)} using {cmd[0]}...")
        print_info()
        await runner(cmd, app_path)
        installed = dependencies

    print_usage(spec, use_yarn, readme_renamed)

    return InitResult(
        app_path=app_path,
        template_path=template_path,
        readme_renamed=readme_renamed,
        used_yarn=use_yarn,
        installed=installed,
    )
