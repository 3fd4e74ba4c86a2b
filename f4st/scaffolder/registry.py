"""Declarative catalog of F4ST file templates.

Each :class:`FileTemplate` is tagged with the layer and (optionally) the
module it belongs to, names the file it renders to, and declares the public
symbols the Barrel Export Synthesizer re-exports from it.  Template content
lives in ``.j2`` files under ``f4st/scaffolder/templates/`` (or inline, for
small or test-only templates), so content can be swapped without touching
generation logic.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from f4st.scaffolder.templates import TemplateRenderer, title_case


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class ExportDeclaration(BaseModel):
    """A public symbol a template exposes through its module barrel."""

    model_config = ConfigDict(frozen=True)

    category: str = Field(..., description="Grouping in the barrel, e.g. 'hooks'")
    name: str = Field(..., description="Exported symbol name, e.g. 'useAuth'")
    type_only: bool = Field(
        default=False, description="Re-export with 'export type' (interfaces, type aliases)"
    )


class FileTemplate(BaseModel):
    """A single file template tagged with its layer and module."""

    model_config = ConfigDict(frozen=True)

    layer: str = Field(..., description="Owning layer name")
    module: Optional[str] = Field(
        default=None, description="Owning module; None for layer-level files"
    )
    target_path: str = Field(
        ..., description="Project-relative output path; may contain placeholders"
    )
    source: Optional[str] = Field(
        default=None, description="Template file relative to the template directory"
    )
    content: Optional[str] = Field(default=None, description="Inline template content")
    exports: tuple[ExportDeclaration, ...] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _exactly_one_body(self) -> "FileTemplate":
        if (self.source is None) == (self.content is None):
            raise ValueError("FileTemplate needs exactly one of 'source' or 'content'")
        return self

    @property
    def key(self) -> tuple[str, Optional[str]]:
        return (self.layer, self.module)


def build_context(project_name: str) -> dict[str, Any]:
    """Build the placeholder context shared by every template."""
    return {
        "project_name": project_name,
        "project_title": title_case(project_name),
        "package_name": project_name,
    }


# ---------------------------------------------------------------------------
# TemplateRegistry
# ---------------------------------------------------------------------------


class TemplateRegistry:
    """Read-only catalog of :class:`FileTemplate` entries.

    Templates keep their declaration order, which is the order the Plan
    Builder emits them in within a layer.
    """

    def __init__(
        self,
        templates: Iterable[FileTemplate],
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self._templates: tuple[FileTemplate, ...] = tuple(templates)
        self.renderer = renderer or TemplateRenderer()

    def __iter__(self):
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    @property
    def templates(self) -> tuple[FileTemplate, ...]:
        return self._templates

    def layers(self) -> list[str]:
        """Return the layer names that have templates, in first-seen order."""
        return list(dict.fromkeys(t.layer for t in self._templates))

    def for_layer(self, layer: str) -> list[FileTemplate]:
        """Return every template registered to *layer*."""
        return [t for t in self._templates if t.layer == layer]

    def get(self, layer: str, module: Optional[str] = None) -> list[FileTemplate]:
        """Return the templates registered under ``(layer, module)``."""
        return [t for t in self._templates if t.key == (layer, module)]

    def modules(self, layer: str) -> list[str]:
        """Return the module names of *layer*, in first-seen order."""
        return list(
            dict.fromkeys(t.module for t in self._templates if t.layer == layer and t.module)
        )

    def render(self, template: FileTemplate, project_name: str) -> tuple[str, str]:
        """Substitute every placeholder in *template*'s path and content.

        Returns:
            A ``(target_path, content)`` pair, both fully resolved.

        Raises:
            TemplateError: If the template uses an undefined placeholder.
        """
        context = build_context(project_name)
        target = self.renderer.render_string(template.target_path, context)
        if template.source is not None:
            content = self.renderer.render(template.source, context)
        else:
            content = self.renderer.render_string(template.content or "", context)
        return target, content


# ---------------------------------------------------------------------------
# Built-in F4ST catalog
# ---------------------------------------------------------------------------

def _file(
    layer: str,
    module: Optional[str],
    target: str,
    source: str,
    *exports: tuple[str, str] | tuple[str, str, bool],
) -> FileTemplate:
    return FileTemplate(
        layer=layer,
        module=module,
        target_path=target,
        source=source,
        exports=tuple(
            ExportDeclaration(category=e[0], name=e[1], type_only=len(e) > 2 and bool(e[2]))
            for e in exports
        ),
    )


def default_templates() -> list[FileTemplate]:
    """Return the built-in template catalog in declaration order."""
    return [
        # -- shared ---------------------------------------------------------
        _file("shared", "utils", "src/shared/utils/format-currency.ts",
              "shared/utils/format-currency.ts.j2", ("utils", "formatCurrency")),
        _file("shared", "utils", "src/shared/utils/format-date.ts",
              "shared/utils/format-date.ts.j2", ("utils", "formatDate")),
        _file("shared", "hooks", "src/shared/hooks/use-debounce.ts",
              "shared/hooks/use-debounce.ts.j2", ("hooks", "useDebounce")),
        _file("shared", "hooks", "src/shared/hooks/use-local-storage.ts",
              "shared/hooks/use-local-storage.ts.j2", ("hooks", "useLocalStorage")),
        _file("shared", "types", "src/shared/types/api-response.type.ts",
              "shared/types/api-response.type.ts.j2",
              ("types", "ApiResponse", True),
              ("types", "PaginatedResponse", True),
              ("types", "ApiError", True)),
        _file("shared", "validators", "src/shared/validators/is-email.ts",
              "shared/validators/is-email.ts.j2", ("validators", "isEmail")),
        _file("shared", "constants", "src/shared/constants/http-status.ts",
              "shared/constants/http-status.ts.j2", ("constants", "HTTP_STATUS")),
        # -- core -----------------------------------------------------------
        _file("core", "api", "src/core/api/client.ts",
              "core/api/client.ts.j2", ("api", "apiClient")),
        _file("core", "router", "src/core/router/router.ts",
              "core/router/router.ts.j2",
              ("router", "defineRoutes"),
              ("router", "matchRoute"),
              ("types", "RouteDefinition", True)),
        _file("core", "store", "src/core/store/provider.tsx",
              "core/store/provider.tsx.j2", ("providers", "StoreProvider")),
        _file("core", "ui", "src/core/ui/provider.tsx",
              "core/ui/provider.tsx.j2", ("providers", "UIProvider")),
        # -- modules --------------------------------------------------------
        _file("modules", "auth", "src/modules/auth/types/user.type.ts",
              "modules/auth/types/user.type.ts.j2",
              ("types", "User", True),
              ("types", "LoginCredentials", True),
              ("types", "AuthState", True)),
        # The API client stays private to the module.
        _file("modules", "auth", "src/modules/auth/api/auth-api.ts",
              "modules/auth/api/auth-api.ts.j2"),
        _file("modules", "auth", "src/modules/auth/hooks/use-auth.ts",
              "modules/auth/hooks/use-auth.ts.j2", ("hooks", "useAuth")),
        _file("modules", "auth", "src/modules/auth/components/login-form.tsx",
              "modules/auth/components/login-form.tsx.j2", ("components", "LoginForm")),
        # -- routes (route table, app shell, project files) -----------------
        _file("routes", None, "src/routes/app-routes.tsx", "routes/app-routes.tsx.j2"),
        _file("routes", None, "src/main.tsx", "routes/main.tsx.j2"),
        _file("routes", None, "src/App.tsx", "routes/App.tsx.j2"),
        _file("routes", None, "src/index.css", "routes/index.css.j2"),
        _file("routes", None, "package.json", "project/package.json.j2"),
        _file("routes", None, "tsconfig.json", "project/tsconfig.json.j2"),
        _file("routes", None, "tsconfig.node.json", "project/tsconfig.node.json.j2"),
        _file("routes", None, "vite.config.ts", "project/vite.config.ts.j2"),
        _file("routes", None, "index.html", "project/index.html.j2"),
        _file("routes", None, ".gitignore", "project/gitignore.j2"),
        _file("routes", None, "README.md", "project/README.md.j2"),
    ]


def default_registry(renderer: TemplateRenderer | None = None) -> TemplateRegistry:
    """Return the built-in F4ST template registry."""
    return TemplateRegistry(default_templates(), renderer=renderer)
