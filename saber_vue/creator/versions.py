"""Semantic-version helpers with npm semantics."""

from __future__ import annotations

import semantic_version


def clean_semver(version: str | None) -> str | None:
    """Return the normalised form of *version* if it is a valid semver.

    Like npm's ``semver.valid`` this tolerates surrounding whitespace and a
    single leading ``v``; anything else that is not ``MAJOR.MINOR.PATCH[-pre][+build]``
    yields ``None``.
    """
    if not version:
        return None
    candidate = version.strip().removeprefix("v")
    try:
        return str(semantic_version.Version(candidate))
    except ValueError:
        return None


def is_valid_range(spec: str) -> bool:
    """Return ``True`` if *spec* is a syntactically valid npm version range."""
    try:
        semantic_version.NpmSpec(spec)
    except ValueError:
        return False
    return True
