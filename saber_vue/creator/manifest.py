"""Reading and rewriting the new app's ``package.json``."""

from __future__ import annotations

from collections.abc import Iterable, MutableMapping
from pathlib import Path
from typing import Any

from rich.markup import escape

from saber_vue.creator.versions import is_valid_range
from saber_vue.utils import console, load_json, save_json

MANIFEST_NAME = "package.json"


class ManifestError(Exception):
    """Raised when ``package.json`` lacks an entry the creator relies on."""


def write_initial_manifest(root: str | Path, name: str, version: str = "0.1.0") -> Path:
    """Write the bare manifest every new app starts from."""
    manifest = {
        "name": name,
        "version": version,
        "private": True,
    }
    return save_json(manifest, Path(root) / MANIFEST_NAME)


def make_caret_range(dependencies: MutableMapping[str, Any], name: str) -> str:
    """Loosen ``dependencies[name]`` from an exact pin to a caret range.

    The exact version is kept when prefixing it with ``^`` would not yield a
    valid range.

    Returns:
        The value now stored for *name*.

    Raises:
        ManifestError: If *name* is not a dependency.
    """
    version = dependencies.get(name)
    if version is None:
        raise ManifestError(f"Missing {name} dependency in package.json")

    patched = f"^{version}"
    if not is_valid_range(patched):
        console.print(
            f"Unable to patch {escape(name)} dependency version because version "
            f"[red]{escape(str(version))}[/red] will become invalid [red]{escape(patched)}[/red]"
        )
        patched = version

    dependencies[name] = patched
    return patched


def set_caret_range_for_runtime_deps(
    root: str | Path,
    package_name: str,
    runtime_dependencies: Iterable[str] = ("vue", "vue-router"),
) -> dict[str, Any]:
    """Tighten the runtime dependencies recorded by the first install.

    Raises:
        ManifestError: If the manifest has no dependencies, or the scripts
            package or a runtime dependency is missing from them.
    """
    manifest_path = Path(root) / MANIFEST_NAME
    manifest = load_json(manifest_path)

    dependencies = manifest.get("dependencies")
    if not isinstance(dependencies, dict):
        raise ManifestError("Missing dependencies in package.json")

    if package_name not in dependencies:
        raise ManifestError(f"Unable to find {package_name} in package.json")

    for name in runtime_dependencies:
        make_caret_range(dependencies, name)

    save_json(manifest, manifest_path)
    return manifest
