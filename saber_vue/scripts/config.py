"""Paths and build/dev settings of a generated Saber Vue app.

``AppPaths`` resolves the fixed project layout from an app directory and
``load_saber_config`` merges an optional ``saber.config.yaml`` over the
built-in defaults.  The file is parsed with PyYAML, so plain JSON works too.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from saber_vue.utils import deep_merge

CONFIG_FILENAME = "saber.config.yaml"


class ConfigError(Exception):
    """Raised when the user's config file cannot be loaded."""


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


class AppPaths(BaseModel):
    """Well-known locations inside an app, derived from its root directory."""

    model_config = ConfigDict(frozen=True)

    app_directory: Path

    @classmethod
    def from_directory(cls, app_directory: str | Path | None = None) -> "AppPaths":
        """Resolve paths for *app_directory* (defaults to the working directory)."""
        root = Path(app_directory) if app_directory is not None else Path.cwd()
        return cls(app_directory=root.resolve())

    def resolve_app(self, relative_path: str) -> Path:
        return self.app_directory / relative_path

    @property
    def app_dist(self) -> Path:
        return self.resolve_app("dist")

    @property
    def app_dist_html(self) -> Path:
        return self.resolve_app("dist/index.html")

    @property
    def app_dist_static(self) -> Path:
        return self.resolve_app("dist/static")

    @property
    def app_html(self) -> Path:
        return self.resolve_app("index.html")

    @property
    def app_index_js(self) -> Path:
        return self.resolve_app("src/main.js")

    @property
    def app_src(self) -> Path:
        return self.resolve_app("src")

    @property
    def app_test(self) -> Path:
        return self.resolve_app("test")

    @property
    def app_config(self) -> Path:
        """Path to the optional user config file."""
        return self.resolve_app(CONFIG_FILENAME)

    @property
    def app_node_modules(self) -> Path:
        return self.resolve_app("node_modules")

    @property
    def app_assets(self) -> Path:
        return self.resolve_app("src/assets")

    @property
    def app_static(self) -> Path:
        return self.resolve_app("static")


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class _Section(BaseModel):
    # camelCase keys in the file, unknown keys passed through to the tooling.
    # Values are handed to the app's build tooling as written, so only the
    # section shapes are checked.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class BuildSettings(_Section):
    """Production build settings."""

    env: dict[str, Any] = Field(default_factory=lambda: {"NODE_ENV": '"production"'})
    assets_sub_directory: Any = "static"
    assets_public_path: Any = "/"
    production_source_map: Any = True
    # Gzip is off because most static hosts already compress assets.
    production_gzip: Any = False
    production_gzip_extensions: Any = Field(default_factory=lambda: ["js", "css"])
    # `npm run build --report` sets npm_config_report
    bundle_analyzer_report: Any = Field(
        default_factory=lambda: os.environ.get("npm_config_report")
    )


class DevSettings(_Section):
    """Development server settings."""

    env: dict[str, Any] = Field(default_factory=lambda: {"NODE_ENV": '"development"'})
    port: Any = 8080
    proxy_table: Any = Field(default_factory=dict)
    assets_sub_directory: Any = "static"
    assets_public_path: Any = "/"
    css_source_map: Any = False


class SaberConfig(_Section):
    """Merged build and dev configuration of an app."""

    build: BuildSettings = Field(default_factory=BuildSettings)
    dev: DevSettings = Field(default_factory=DevSettings)

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration with the file's camelCase keys."""
        return self.model_dump(by_alias=True)


def read_user_config(path: str | Path) -> dict[str, Any]:
    """Parse the config file at *path*, returning ``{}`` when it is absent.

    Raises:
        ConfigError: If the file is not valid YAML/JSON or is not a mapping.
    """
    config_path = Path(path)
    if not config_path.is_file():
        return {}

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Could not parse {config_path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")
    return data


def load_saber_config(paths: AppPaths | None = None) -> SaberConfig:
    """Return the defaults deep-merged with the app's config file, if any.

    Raises:
        ConfigError: If the file exists but is malformed.
    """
    paths = paths or AppPaths.from_directory()
    defaults = SaberConfig().to_dict()
    merged = deep_merge(defaults, read_user_config(paths.app_config))
    try:
        return SaberConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings in {paths.app_config}: {exc}") from exc
