"""Shared pytest fixtures for the saber-vue-app test suite.

Provides reusable fixtures for:
- Temporary app directories with an installed-looking package.json
- npm tarballs built on the fly
- Mock subprocess helpers
- A fake package manager that records installs instead of running them
"""

from __future__ import annotations

import io
import json
import tarfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

INSTALLED_VERSIONS: dict[str, str] = {
    "vue": "2.5.16",
    "vue-router": "3.0.1",
    "saber-vue-scripts": "1.0.10",
    "my-vue-scripts": "0.8.2",
    "react": "16.4.0",
    "react-dom": "16.4.0",
}


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Empty app directory named like a valid npm package."""
    project_dir = tmp_path / "my-vue-app"
    project_dir.mkdir()
    yield project_dir


@pytest.fixture
def installed_app(tmp_project_dir: Path) -> Path:
    """App directory whose package.json looks like the first install finished."""
    manifest = {
        "name": "my-vue-app",
        "version": "0.1.0",
        "private": True,
        "dependencies": {
            "saber-vue-scripts": "1.0.10",
            "vue": "2.5.16",
            "vue-router": "3.0.1",
        },
    }
    (tmp_project_dir / "package.json").write_text(json.dumps(manifest, indent=2))
    return tmp_project_dir


# ---------------------------------------------------------------------------
# Tarballs
# ---------------------------------------------------------------------------

def _add_bytes(tar: tarfile.TarFile, name: str, data: bytes) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(data)
    tar.addfile(info, io.BytesIO(data))


def build_tarball_bytes(manifest: dict[str, Any] | None, top: str = "package") -> bytes:
    """Return a gzipped npm-style tarball holding *manifest* under ``top/``."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        _add_bytes(tar, f"{top}/index.js", b"module.exports = {}\n")
        if manifest is not None:
            _add_bytes(tar, f"{top}/package.json", json.dumps(manifest).encode("utf-8"))
    return buffer.getvalue()


@pytest.fixture
def make_tarball(tmp_path: Path):
    """Factory writing an npm-style ``.tgz`` to disk.

    Usage:
        def test_tarball(make_tarball):
            path = make_tarball("my-vue-scripts", filename="my-vue-scripts-0.8.2.tgz")
    """
    def factory(
        name: str | None,
        filename: str = "package.tgz",
        top: str = "package",
    ) -> Path:
        manifest = {"name": name, "version": "0.8.2"} if name is not None else None
        path = tmp_path / "tarballs" / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(build_tarball_bytes(manifest, top=top))
        return path

    return factory


# ---------------------------------------------------------------------------
# Subprocesses & package managers
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


class FakePackageManager:
    """Stands in for npm/Yarn: records installs and updates package.json.

    Dependencies are written with exact versions, the way ``--save-exact``
    leaves them.
    """

    def __init__(
        self,
        versions: dict[str, str] | None = None,
        aliases: dict[str, str] | None = None,
    ) -> None:
        self.versions = dict(INSTALLED_VERSIONS if versions is None else versions)
        # specifier -> package name, for tarballs and git urls
        self.aliases = dict(aliases or {})
        self.calls: list[dict[str, Any]] = []

    def _record(self, cwd: Path, dependencies: Sequence[str]) -> None:
        manifest_path = Path(cwd) / "package.json"
        manifest = json.loads(manifest_path.read_text())
        deps = manifest.setdefault("dependencies", {})
        for spec in dependencies:
            if spec in self.aliases:
                deps[self.aliases[spec]] = self.versions.get(self.aliases[spec], "1.0.0")
                continue
            name = spec[0] + spec[1:].split("@", 1)[0]
            pinned = spec[len(name) + 1:] if "@" in spec[1:] else self.versions.get(name, "1.0.0")
            deps[name] = pinned
        manifest_path.write_text(json.dumps(manifest, indent=2))

    async def install(
        self,
        use_yarn: bool,
        dependencies: Sequence[str],
        *,
        verbose: bool = False,
        is_online: bool = True,
        cwd: Path | None = None,
    ) -> list[str]:
        self.calls.append({
            "use_yarn": use_yarn,
            "dependencies": list(dependencies),
            "verbose": verbose,
            "is_online": is_online,
            "cwd": cwd,
        })
        self._record(cwd, dependencies)
        return list(dependencies)

    async def run(self, cmd: Sequence[str], cwd: Path) -> None:
        self.calls.append({"cmd": list(cmd), "cwd": cwd})
        self._record(cwd, [arg for arg in cmd[1:] if not arg.startswith("-") and arg not in ("add", "install")])


@pytest.fixture
def fake_package_manager() -> FakePackageManager:
    return FakePackageManager()


@pytest.fixture
def tarball_bytes():
    """The in-memory tarball builder, for tests serving archives over HTTP."""
    return build_tarball_bytes
