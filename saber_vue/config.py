"""saber-vue-app configuration.

Centralised, typed configuration for the project creator.  All settings use
Pydantic v2 models so they can be validated at construction time and
overridden from environment variables without boiler-plate.
"""

from __future__ import annotations

import os
import re
from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_VALID_FILES: tuple[str, ...] = (
    ".DS_Store",
    "Thumbs.db",
    ".git",
    ".gitignore",
    ".idea",
    "README.md",
    "LICENSE",
    "web.iml",
    ".hg",
    ".hgignore",
    ".hgcheck",
)

# e.g. my-vue-scripts-0.2.0-alpha.1.tgz -> my-vue-scripts
DEFAULT_TARBALL_NAME_PATTERN = r"^.+/(.+?)(?:-\d+.+)?\.tgz$"


class CreateAppConfig(BaseModel):
    """Knobs for a single ``saber-vue-app`` run.

    The defaults reproduce the stock tool.  Instances are typically created
    once by the CLI entry point and passed to the creator and to the
    second-stage initializer.
    """

    scripts_package: str = Field(
        default="saber-vue-scripts",
        description="Build-tooling package installed into every new app",
    )
    runtime_dependencies: list[str] = Field(
        default_factory=lambda: ["vue", "vue-router"],
        description="Installed with the scripts package and tightened to caret ranges",
    )
    template_dependencies: list[str] = Field(
        default_factory=lambda: ["react", "react-dom"],
        description="Installed by the second stage after the template is copied",
    )
    valid_files: list[str] = Field(
        default_factory=lambda: list(DEFAULT_VALID_FILES),
        description="Directory entries that may already exist in the target directory",
    )
    tarball_name_pattern: str = Field(
        default=DEFAULT_TARBALL_NAME_PATTERN,
        description="Fallback used to guess a package name from a tarball filename",
    )
    yarn_registry_host: str = Field(
        default="registry.yarnpkg.com",
        description="Host looked up to decide whether Yarn may go online",
    )
    initial_version: str = Field(default="0.1.0")

    @field_validator("tarball_name_pattern")
    @classmethod
    def _check_pattern(cls, value: str) -> str:
        try:
            compiled = re.compile(value)
        except re.error as exc:
            raise ValueError(f"invalid tarball name pattern: {exc}") from exc
        if compiled.groups < 1:
            raise ValueError("tarball name pattern must capture the package name in group 1")
        return value

    @classmethod
    def from_env(cls) -> "CreateAppConfig":
        """Build a ``CreateAppConfig`` from environment variables.

        Recognised variables (all optional):
            SABER_SCRIPTS_PACKAGE, SABER_YARN_REGISTRY_HOST,
            SABER_VALID_FILES (comma-separated).
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("SABER_SCRIPTS_PACKAGE"):
            kwargs["scripts_package"] = os.environ["SABER_SCRIPTS_PACKAGE"]
        if os.environ.get("SABER_YARN_REGISTRY_HOST"):
            kwargs["yarn_registry_host"] = os.environ["SABER_YARN_REGISTRY_HOST"]
        if os.environ.get("SABER_VALID_FILES"):
            kwargs["valid_files"] = [
                entry.strip()
                for entry in os.environ["SABER_VALID_FILES"].split(",")
                if entry.strip()
            ]
        return cls(**kwargs)
