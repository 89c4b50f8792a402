"""Second stage of app creation and the generated app's configuration."""

from saber_vue.scripts.config import AppPaths, ConfigError, SaberConfig, load_saber_config
from saber_vue.scripts.init import InitResult, init_project
from saber_vue.scripts.templates import TemplateError, TemplateRenderer

__all__ = [
    "AppPaths",
    "ConfigError",
    "InitResult",
    "SaberConfig",
    "TemplateError",
    "TemplateRenderer",
    "init_project",
    "load_saber_config",
]
