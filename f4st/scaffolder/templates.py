"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``f4st/scaffolder/templates/`` directory and renders them with the project
context.  Rendering is strict: a template that references an undefined
placeholder raises :class:`~f4st.errors.TemplateError` instead of silently
producing an empty string.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
    TemplateSyntaxError,
    UndefinedError,
)

from f4st.errors import TemplateError


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project scaffolding.

    The renderer discovers ``.j2`` template files under a configurable
    template directory.  Templates are rendered with a context dictionary that
    contains the project placeholders (``project_name``, ``project_title``,
    ``package_name``).
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["title_case"] = title_case

    # -- Rendering ---------------------------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template file with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"shared/utils/format-date.ts.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.

        Raises:
            TemplateError: If the template is missing, malformed, or uses an
                undefined placeholder.
        """
        try:
            template = self.env.get_template(template_path)
            return template.render(**context)
        except TemplateNotFound as exc:
            raise TemplateError(
                f"Template not found: {exc.name}", paths=[template_path]
            ) from exc
        except (UndefinedError, TemplateSyntaxError) as exc:
            raise TemplateError(
                f"Cannot render {template_path}: {exc.message}", paths=[template_path]
            ) from exc

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string with the provided context.

        Used for target paths and for templates whose content is declared
        inline in the registry rather than stored as a file.
        """
        try:
            template = self.env.from_string(template_string)
            return template.render(**context)
        except (UndefinedError, TemplateSyntaxError) as exc:
            raise TemplateError(
                f"Cannot render {template_string!r}: {exc.message}"
            ) from exc

    # -- Utility -----------------------------------------------------------

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*.

        Paths are relative to the template root directory and use forward
        slashes.
        """
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*.j2")
        )


# ---------------------------------------------------------------------------
# Placeholder helpers
# ---------------------------------------------------------------------------


def title_case(value: str) -> str:
    """Convert ``my-app`` to ``My App``.

    Also registered as the ``title_case`` Jinja2 filter.
    """
    parts = re.split(r"[-_\s]+", value)
    return " ".join(word.capitalize() for word in parts if word)
