"""Template materialisation for new apps.

Provides the TemplateRenderer class which copies an application template
directory into a target directory.  Files ending in ``.j2`` are rendered with
Jinja2 and written without the suffix; everything else is copied byte for
byte, overwriting whatever is already there.
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateError as JinjaTemplateError, select_autoescape

# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "template"

TEMPLATE_SUFFIX = ".j2"


class TemplateError(Exception):
    """Raised when a template cannot be located or rendered."""

    def __init__(self, message: str, template_path: Path | None = None) -> None:
        self.template_path = template_path
        super().__init__(message)


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Copies an app template, rendering ``.j2`` files on the way.

    Templates are rendered with a context dictionary that typically contains
    the app name, its path and the package manager in use.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["title_case"] = _title_case_filter

    def exists(self) -> bool:
        return self.template_dir.is_dir()

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template relative to the template directory."""
        template = self.env.get_template(template_path)
        return template.render(**context)

    def copy_to(self, target_dir: str | Path, context: dict[str, Any]) -> list[Path]:
        """Copy the whole template into *target_dir*.

        The directory structure is preserved: ``src/App.vue`` lands in
        ``<target_dir>/src/App.vue`` and ``README.md.j2`` is rendered to
        ``<target_dir>/README.md``.

        Returns:
            List of written file paths.

        Raises:
            TemplateError: If the template directory is missing or a ``.j2``
                file fails to render.
        """
        if not self.exists():
            raise TemplateError(
                f"Could not locate supplied template: {self.template_dir}",
                template_path=self.template_dir,
            )

        out_base = Path(target_dir)
        written: list[Path] = []

        for source in sorted(self.template_dir.rglob("*")):
            rel = source.relative_to(self.template_dir)
            if source.is_dir():
                (out_base / rel).mkdir(parents=True, exist_ok=True)
                continue

            if source.name.endswith(TEMPLATE_SUFFIX):
                output_file = out_base / str(rel)[: -len(TEMPLATE_SUFFIX)]
                try:
                    content = self.render(rel.as_posix(), context)
                except JinjaTemplateError as exc:
                    raise TemplateError(
                        f"Could not render {rel}: {exc}", template_path=source
                    ) from exc
                _write_file(output_file, content)
            else:
                output_file = out_base / rel
                output_file.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, output_file)
            written.append(output_file)

        return written


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _title_case_filter(value: str) -> str:
    """Convert ``my-vue-app`` or ``@scope/my_app`` to ``My Vue App``/``My App``."""
    base = value.rsplit("/", 1)[-1]
    parts = re.split(r"[-_.\s]+", base)
    return " ".join(word.capitalize() for word in parts if word)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_file(path: Path, content: str) -> None:
    """Create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
