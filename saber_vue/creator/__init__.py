"""Project creator -- validates, installs and hands over to the second stage.

Quick usage::

    from saber_vue.creator import ProjectCreator

    creator = ProjectCreator()
    result = await creator.create("my-vue-app", scripts_version="1.2.3")
"""

from saber_vue.creator.installer import InstallError
from saber_vue.creator.manifest import ManifestError
from saber_vue.creator.models import NameValidation, ProjectSpec
from saber_vue.creator.package_name import PackageNameError
from saber_vue.creator.pipeline import CreateAppError, ProjectCreator, Stage

__all__ = [
    "CreateAppError",
    "InstallError",
    "ManifestError",
    "NameValidation",
    "PackageNameError",
    "ProjectCreator",
    "ProjectSpec",
    "Stage",
]
