"""Target-directory checks run before anything is written."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from saber_vue.config import DEFAULT_VALID_FILES


def conflicting_entries(
    root: str | Path,
    valid_files: Iterable[str] = DEFAULT_VALID_FILES,
) -> list[str]:
    """Return the sorted names of entries in *root* outside the allow-list."""
    allowed = set(valid_files)
    return sorted(entry.name for entry in Path(root).iterdir() if entry.name not in allowed)


def is_safe_to_create_project_in(
    root: str | Path,
    valid_files: Iterable[str] = DEFAULT_VALID_FILES,
) -> bool:
    """Return ``True`` if *root* only holds benign artifacts.

    Version-control metadata, IDE project files, a README and a LICENSE are
    tolerated; anything else could be overwritten by the template.
    """
    return not conflicting_entries(root, valid_files)
