"""saber-vue-app creation pipeline.

Implements the linear creation sequence:

NameValidated          -- the directory basename obeys npm's naming rules.
DirectoryEnsured       -- the app directory exists.
SafetyChecked          -- nothing in it could be clobbered.
ManifestWritten        -- a bare ``package.json`` is in place.
PackageManagerDetected -- Yarn if ``yarnpkg`` runs, npm otherwise.
PackageNameResolved    -- the scripts package's name is known.
OnlineStatusChecked    -- Yarn may fall back to its offline cache.
DependenciesInstalled  -- vue, vue-router and the scripts package.
VersionsTightened      -- runtime deps moved from exact pins to caret ranges.
SecondStageDelegated   -- the template is materialised.

The first failure aborts the run.  Nothing is rolled back, so a failed run
leaves a partially populated directory behind.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import httpx
from rich.markup import escape

from saber_vue.config import CreateAppConfig
from saber_vue.creator.directory import is_safe_to_create_project_in
from saber_vue.creator.installer import InstallError, check_if_online, install, should_use_yarn
from saber_vue.creator.manifest import ManifestError, set_caret_range_for_runtime_deps, write_initial_manifest
from saber_vue.creator.models import ProjectSpec
from saber_vue.creator.naming import validate_project_name
from saber_vue.creator.package_name import PackageNameError, get_install_package, resolve_package_name
from saber_vue.scripts.templates import TemplateError
from saber_vue.utils import console, print_debug, print_error, print_info

if TYPE_CHECKING:
    from saber_vue.scripts.init import InitResult

# ---------------------------------------------------------------------------
# Stages & exceptions
# ---------------------------------------------------------------------------


class Stage(str, Enum):
    NAME_VALIDATED = "NameValidated"
    DIRECTORY_ENSURED = "DirectoryEnsured"
    SAFETY_CHECKED = "SafetyChecked"
    MANIFEST_WRITTEN = "ManifestWritten"
    PACKAGE_MANAGER_DETECTED = "PackageManagerDetected"
    PACKAGE_NAME_RESOLVED = "PackageNameResolved"
    ONLINE_STATUS_CHECKED = "OnlineStatusChecked"
    DEPENDENCIES_INSTALLED = "DependenciesInstalled"
    VERSIONS_TIGHTENED = "VersionsTightened"
    SECOND_STAGE_DELEGATED = "SecondStageDelegated"


class CreateAppError(Exception):
    """Raised when a creation stage fails irrecoverably."""

    def __init__(self, stage: Stage, message: str, command: str = "") -> None:
        self.stage = stage
        self.message = message
        self.command = command
        super().__init__(f"{stage.value}: {message}")


SecondStage = Callable[[ProjectSpec, str], Awaitable["InitResult"]]
PackageManagerProbe = Callable[[], bool]


# ---------------------------------------------------------------------------
# ProjectCreator
# ---------------------------------------------------------------------------


class ProjectCreator:
    """Creates a new Saber Vue app from a project directory argument.

    Attributes:
        config: Tool configuration.
        second_stage: Called with the final ``ProjectSpec`` and the scripts
            package name once dependencies are installed.
        detect_yarn: Probe deciding between Yarn and npm.
        http_client: Optional client used to fetch remote tarballs.
    """

    def __init__(
        self,
        config: CreateAppConfig | None = None,
        *,
        second_stage: SecondStage | None = None,
        detect_yarn: PackageManagerProbe = should_use_yarn,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or CreateAppConfig()
        self.second_stage = second_stage or self._default_second_stage
        self.detect_yarn = detect_yarn
        self.http_client = http_client

    async def _default_second_stage(self, spec: ProjectSpec, package_name: str) -> InitResult:
        # imported here: the second stage depends on this package
        from saber_vue.scripts.init import init_project

        return await init_project(spec, package_name, config=self.config)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def create(
        self,
        directory: str | Path,
        *,
        verbose: bool = False,
        scripts_version: str | None = None,
        template: str | None = None,
        original_directory: Path | None = None,
    ) -> InitResult:
        """Run every stage for *directory* and return the second stage's result.

        Raises:
            CreateAppError: On the first failing stage.
        """
        original_directory = original_directory or Path.cwd()
        root = (original_directory / directory).resolve()
        spec = ProjectSpec(
            name=root.name,
            root_path=root,
            verbose=verbose,
            original_directory=original_directory,
            template=template,
        )

        self._validate_name(spec.name)

        root.mkdir(parents=True, exist_ok=True)
        print_debug(f"{Stage.DIRECTORY_ENSURED.value}: {root}", verbose)

        if not is_safe_to_create_project_in(root, self.config.valid_files):
            console.print(
                f"The directory [green]{escape(str(directory))}[/green] contains files that could conflict."
            )
            print_info("Try using a new directory name.")
            raise CreateAppError(Stage.SAFETY_CHECKED, f"{root} contains files that could conflict")

        console.print(f"Creating a new Vue app in [green]{escape(str(root))}[/green].")
        print_info()

        write_initial_manifest(root, spec.name, self.config.initial_version)
        print_debug(f"{Stage.MANIFEST_WRITTEN.value}: {spec.manifest_path}", verbose)

        spec = spec.model_copy(update={"use_yarn": self.detect_yarn()})
        print_debug(
            f"{Stage.PACKAGE_MANAGER_DETECTED.value}: {'yarn' if spec.use_yarn else 'npm'}",
            verbose,
        )

        return await self.run(spec, scripts_version)

    async def run(self, spec: ProjectSpec, scripts_version: str | None = None) -> InitResult:
        """Install dependencies into a prepared app and hand over to the second stage."""
        install_package = get_install_package(scripts_version, self.config.scripts_package)
        dependencies = [*self.config.runtime_dependencies, install_package]

        try:
            package_name = await resolve_package_name(
                install_package,
                client=self.http_client,
                pattern=self.config.tarball_name_pattern,
            )
        except PackageNameError as exc:
            raise CreateAppError(Stage.PACKAGE_NAME_RESOLVED, str(exc)) from exc

        is_online = await check_if_online(spec.use_yarn, self.config.yarn_registry_host)
        print_debug(f"{Stage.ONLINE_STATUS_CHECKED.value}: online={is_online}", spec.verbose)

        console.print(
            f"Installing [cyan]vue[/cyan], and [cyan]{escape(package_name)}[/cyan]..."
        )
        print_info()
        try:
            await install(
                spec.use_yarn,
                dependencies,
                verbose=spec.verbose,
                is_online=is_online,
                cwd=spec.root_path,
            )
        except InstallError as exc:
            raise CreateAppError(
                Stage.DEPENDENCIES_INSTALLED, str(exc), command=exc.command
            ) from exc

        try:
            set_caret_range_for_runtime_deps(
                spec.root_path, package_name, self.config.runtime_dependencies
            )
        except ManifestError as exc:
            raise CreateAppError(Stage.VERSIONS_TIGHTENED, str(exc)) from exc

        print_debug(f"{Stage.SECOND_STAGE_DELEGATED.value}: {package_name}", spec.verbose)
        try:
            return await self.second_stage(spec, package_name)
        except (TemplateError, InstallError) as exc:
            raise CreateAppError(
                Stage.SECOND_STAGE_DELEGATED, str(exc), command=getattr(exc, "command", "")
            ) from exc

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_name(name: str) -> None:
        result = validate_project_name(name)
        if result.valid_for_new_packages:
            return

        console.print(
            f'Could not create a project called [red]"{escape(name)}"[/red] '
            "because of npm naming restrictions:"
        )
        for problem in result.problems:
            print_error(f"  *  {problem}")
        raise CreateAppError(
            Stage.NAME_VALIDATED,
            f'"{name}" violates npm naming rules: {"; ".join(result.problems)}',
        )
