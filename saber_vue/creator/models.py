"""Pydantic models shared by the creator and the second-stage initializer."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ProjectSpec(BaseModel):
    """Everything a creation stage needs to know about the app being built.

    Created once at CLI entry and never mutated.  A stage that discovers new
    facts (such as which package manager to use) derives a copy with
    ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Validated npm package name (the directory basename)")
    root_path: Path = Field(..., description="Absolute path of the app directory")
    use_yarn: bool = Field(default=False, description="Use yarnpkg instead of npm")
    verbose: bool = Field(default=False)
    original_directory: Path = Field(
        default_factory=Path.cwd,
        description="Directory the CLI was invoked from",
    )
    template: str | None = Field(
        default=None,
        description="Custom template directory, relative to original_directory",
    )

    @property
    def manifest_path(self) -> Path:
        """Path to the app's ``package.json``."""
        return self.root_path / "package.json"


class NameValidation(BaseModel):
    """Outcome of checking a name against npm's package-name rules."""

    valid_for_new_packages: bool
    valid_for_old_packages: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def problems(self) -> list[str]:
        return [*self.errors, *self.warnings]
