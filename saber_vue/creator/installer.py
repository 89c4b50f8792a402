"""Package-manager detection and dependency installation.

Installs run as foreground child processes that inherit this process's
stdin/stdout/stderr, so npm's or Yarn's own progress output shows up live.
Nothing is retried: a non-zero exit surfaces as :class:`InstallError`
carrying the exact command line.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

from saber_vue.utils import check_host_resolves, print_info, print_warning, run_command

YARN = "yarnpkg"
NPM = "npm"


class InstallError(Exception):
    """Raised when the package manager exits with a non-zero code."""

    def __init__(self, message: str, command: str = "") -> None:
        self.command = command
        super().__init__(message)


def should_use_yarn() -> bool:
    """Return ``True`` if ``yarnpkg --version`` runs successfully.

    Any failure, including a missing binary, means npm is used instead.
    """
    try:
        subprocess.run(
            [YARN, "--version"],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return False
    return True


async def check_if_online(use_yarn: bool, registry_host: str = "registry.yarnpkg.com") -> bool:
    """Decide whether the install may hit the network.

    npm is always assumed to be online; for Yarn the registry host must
    resolve, otherwise the local Yarn cache is used.
    """
    if not use_yarn:
        return True
    return await check_host_resolves(registry_host)


def build_install_command(
    use_yarn: bool,
    dependencies: Sequence[str],
    *,
    verbose: bool = False,
    is_online: bool = True,
) -> list[str]:
    """Return the argv that adds *dependencies* with exact versions.

    Examples::

        build_install_command(True, ["vue"], is_online=False)
        -> ["yarnpkg", "add", "--exact", "--offline", "vue"]
        build_install_command(False, ["vue"])
        -> ["npm", "install", "--save", "--save-exact", "--loglevel", "error", "vue"]
    """
    if use_yarn:
        cmd = [YARN, "add", "--exact"]
        if not is_online:
            cmd.append("--offline")
        cmd.extend(dependencies)
    else:
        cmd = [NPM, "install", "--save", "--save-exact", "--loglevel", "error", *dependencies]

    if verbose:
        cmd.append("--verbose")
    return cmd


async def install(
    use_yarn: bool,
    dependencies: Sequence[str],
    *,
    verbose: bool = False,
    is_online: bool = True,
    cwd: str | Path | None = None,
) -> list[str]:
    """Install *dependencies* into the project at *cwd*.

    Returns:
        The command that was run.

    Raises:
        InstallError: If the package manager fails.
    """
    cmd = build_install_command(use_yarn, dependencies, verbose=verbose, is_online=is_online)
    if use_yarn and not is_online:
        print_warning("You appear to be offline.")
        print_warning("Falling back to the local Yarn cache.")
        print_info()

    await install_command(cmd, cwd=cwd)
    return cmd


async def install_command(cmd: Sequence[str], cwd: str | Path | None = None) -> None:
    """Run a package-manager command with inherited stdio.

    Raises:
        InstallError: If the command cannot be started or exits non-zero.
    """
    command_line = " ".join(cmd)
    try:
        returncode, _, _ = await run_command(list(cmd), cwd=cwd, capture=False)
    except OSError as exc:
        raise InstallError(f"Could not run `{command_line}`: {exc}", command=command_line) from exc

    if returncode != 0:
        raise InstallError(f"`{command_line}` failed", command=command_line)
