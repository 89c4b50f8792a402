"""Work out which package an install specifier refers to.

A specifier is whatever the user handed to ``--scripts-version``: a bare
name, ``name@version``, a ``.tgz`` path or URL, or a ``git+`` URL.  Only
tarballs need I/O: the archive is unpacked into a temporary directory and its
``package.json`` is read.  When that fails the name is guessed from the
filename instead.
"""

from __future__ import annotations

import asyncio
import re
import tarfile
import tempfile
from pathlib import Path, PurePosixPath

import httpx
from rich.markup import escape

from saber_vue.config import DEFAULT_TARBALL_NAME_PATTERN
from saber_vue.creator.versions import clean_semver
from saber_vue.utils import console, load_json, print_info

_GIT_NAME = re.compile(r"([^/]+)\.git(#.*)?$")


class PackageNameError(Exception):
    """Raised when no package name can be derived from a specifier."""

    def __init__(self, message: str, specifier: str = "") -> None:
        self.specifier = specifier
        super().__init__(message)


def get_install_package(version: str | None, default_package: str = "saber-vue-scripts") -> str:
    """Return the specifier to install for a ``--scripts-version`` value.

    Examples::

        get_install_package(None)      -> "saber-vue-scripts"
        get_install_package("1.0.1")   -> "saber-vue-scripts@1.0.1"
        get_install_package("my-fork") -> "my-fork"
    """
    valid = clean_semver(version)
    if valid:
        return f"{default_package}@{valid}"
    if version:
        # tarballs, git urls and forks are installed verbatim
        return version
    return default_package


async def resolve_package_name(
    install_package: str,
    *,
    client: httpx.AsyncClient | None = None,
    pattern: str = DEFAULT_TARBALL_NAME_PATTERN,
) -> str:
    """Return the package name an install specifier will produce.

    Args:
        install_package: The specifier handed to the package manager.
        client: Optional HTTP client used to download remote tarballs.
        pattern: Regex whose first group extracts a name from a tarball
            filename when the archive itself cannot be read.

    Raises:
        PackageNameError: If the specifier is a tarball or git URL whose
            name cannot be determined at all.
    """
    if ".tgz" in install_package:
        try:
            return await _name_from_tarball(install_package, client)
        except (httpx.HTTPError, OSError, tarfile.TarError, ValueError) as exc:
            print_info(f"Could not extract the package name from the archive: {exc}")
            assumed = name_from_tarball_filename(install_package, pattern)
            console.print(f'Based on the filename, assuming it is "[cyan]{escape(assumed)}[/cyan]"')
            return assumed

    if install_package.startswith("git+"):
        # git+https://github.com/mycompany/saber-vue-scripts.git
        # git+ssh://github.com/mycompany/saber-vue-scripts.git#v1.2.3
        match = _GIT_NAME.search(install_package)
        if not match:
            raise PackageNameError(
                f"Could not find a repository name in {install_package}",
                specifier=install_package,
            )
        return match.group(1)

    if install_package.find("@", 1) > 0:
        # skip index 0 so the @ of a scope is not taken for a version separator
        return install_package[0] + install_package[1:].split("@", 1)[0]

    return install_package


def name_from_tarball_filename(
    install_package: str,
    pattern: str = DEFAULT_TARBALL_NAME_PATTERN,
) -> str:
    """Guess a package name from a tarball path, dropping any semver suffix.

    Raises:
        PackageNameError: If *pattern* does not match.
    """
    match = re.match(pattern, install_package)
    if not match or not match.group(1):
        raise PackageNameError(
            f"Could not derive a package name from {install_package}",
            specifier=install_package,
        )
    return match.group(1)


# ---------------------------------------------------------------------------
# Tarball handling
# ---------------------------------------------------------------------------


async def _name_from_tarball(install_package: str, client: httpx.AsyncClient | None) -> str:
    with tempfile.TemporaryDirectory(prefix="saber-vue-", ignore_cleanup_errors=True) as tmpdir:
        tmp = Path(tmpdir)
        if install_package.startswith("http"):
            archive = tmp / "package.tgz"
            await _download(install_package, archive, client)
        else:
            archive = Path(install_package.removeprefix("file:"))

        extracted = tmp / "package"
        await asyncio.to_thread(_extract_archive, archive, extracted)
        return _read_manifest_name(extracted / "package.json")


async def _download(url: str, target: Path, client: httpx.AsyncClient | None) -> None:
    if client is None:
        async with httpx.AsyncClient(follow_redirects=True) as owned:
            await _stream_to_file(owned, url, target)
    else:
        await _stream_to_file(client, url, target)


async def _stream_to_file(client: httpx.AsyncClient, url: str, target: Path) -> None:
    async with client.stream("GET", url) as response:
        response.raise_for_status()
        with target.open("wb") as fh:
            async for chunk in response.aiter_bytes():
                fh.write(chunk)


def _extract_archive(archive: Path, dest: Path) -> None:
    """Unpack *archive* into *dest*, dropping the top-level folder."""
    dest.mkdir(parents=True, exist_ok=True)
    with tarfile.open(archive, "r:*") as tar:
        members: list[tarfile.TarInfo] = []
        for member in tar.getmembers():
            parts = PurePosixPath(member.name).parts
            if len(parts) < 2:
                continue
            member.name = str(PurePosixPath(*parts[1:]))
            members.append(member)
        tar.extractall(dest, members=members, filter="data")


def _read_manifest_name(manifest: Path) -> str:
    name = load_json(manifest).get("name")
    if not isinstance(name, str) or not name:
        raise ValueError(f"{manifest.name} has no name field")
    return name
