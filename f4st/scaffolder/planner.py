"""Plan Builder: turns a project name and layer selection into a GenerationPlan.

The plan is a fully resolved, side-effect-free list of file operations
computed before anything touches the filesystem.  Building the same plan twice
from identical inputs yields equal plans, which is what makes dry-run output
trustworthy.
"""

from __future__ import annotations

import logging
import posixpath
import re
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from f4st.errors import InputError, InvariantViolation, LayoutConflict
from f4st.layers.models import LayerDefinition, default_layers, layers_by_name
from f4st.layers.validator import validate_layers
from f4st.scaffolder.registry import FileTemplate, TemplateRegistry, default_registry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Project name grammar
# ---------------------------------------------------------------------------

PROJECT_NAME_RE = re.compile(r"[a-z0-9](?:[a-z0-9-]{0,212}[a-z0-9])?")
MAX_PROJECT_NAME_LENGTH = 214


def validate_project_name(name: str) -> str:
    """Return *name* unchanged if it is a valid project name.

    Valid names are 1-214 characters of lowercase letters, digits and
    hyphens, neither starting nor ending with a hyphen.

    Raises:
        InputError: If *name* does not match the grammar.
    """
    if not isinstance(name, str) or not PROJECT_NAME_RE.fullmatch(name):
        raise InputError(
            f"Invalid project name {name!r}: use 1-{MAX_PROJECT_NAME_LENGTH} lowercase "
            "letters, digits and hyphens, not starting or ending with a hyphen"
        )
    return name


# ---------------------------------------------------------------------------
# Plan models
# ---------------------------------------------------------------------------

OperationKind = Literal["template", "module-barrel", "layer-barrel"]


class ExportEntry(BaseModel):
    """A public symbol resolved to the project-relative file declaring it."""

    model_config = ConfigDict(frozen=True)

    category: str
    name: str
    source_path: str = Field(..., description="Project-relative POSIX path of the declaring file")
    type_only: bool = False


class PlannedOperation(BaseModel):
    """One file the generator will write."""

    model_config = ConfigDict(frozen=True)

    target_path: Path = Field(..., description="Absolute output path")
    rendered_content: str
    layer: str
    module: Optional[str] = None
    exports: tuple[ExportEntry, ...] = Field(default_factory=tuple)
    kind: OperationKind = "template"


class ProjectSpec(BaseModel):
    """Everything one invocation generates from: name, layers and templates."""

    model_config = ConfigDict(frozen=True)

    project_name: str
    selected_layers: tuple[LayerDefinition, ...]
    templates: tuple[FileTemplate, ...]


class GenerationPlan(BaseModel):
    """The ordered, immutable list of operations for one project."""

    model_config = ConfigDict(frozen=True)

    project_name: str
    root: Path = Field(..., description="Absolute project root directory")
    layers: tuple[str, ...] = Field(..., description="Selected layers in generation order")
    operations: tuple[PlannedOperation, ...] = Field(default_factory=tuple)

    def paths(self) -> list[Path]:
        """Return every target path in plan order."""
        return [op.target_path for op in self.operations]

    def relative_paths(self) -> list[str]:
        """Return every target path relative to the project root, POSIX style."""
        return [op.target_path.relative_to(self.root).as_posix() for op in self.operations]

    def extend(self, operations: Iterable[PlannedOperation]) -> "GenerationPlan":
        """Return a new plan with *operations* appended.

        Raises:
            LayoutConflict: If an appended operation targets a path already
                in the plan.
        """
        combined = self.operations + tuple(operations)
        _check_collisions(combined)
        return self.model_copy(update={"operations": combined})


# ---------------------------------------------------------------------------
# Plan construction
# ---------------------------------------------------------------------------


def resolve_layers(
    selected: Optional[Sequence[str]],
    layer_model: Sequence[LayerDefinition],
) -> list[LayerDefinition]:
    """Map selected layer names onto *layer_model*, in generation order.

    ``None`` or an empty selection means every layer.

    Raises:
        InputError: If a selected name is not a known layer.
        InvariantViolation: If the layer model itself is invalid.
    """
    ordered = validate_layers(layer_model)
    if not selected:
        return ordered

    known = layers_by_name(list(layer_model))
    unknown = [name for name in selected if name not in known]
    if unknown:
        raise InputError(
            f"Unknown layer(s): {', '.join(unknown)}; "
            f"known layers: {', '.join(known)}"
        )

    wanted = set(selected)
    chosen = [layer for layer in ordered if layer.name in wanted]
    for layer in chosen:
        missing = sorted(dep for dep in layer.allowed_dependencies if dep not in wanted)
        if missing:
            logger.warning(
                "Layer '%s' may depend on unselected layer(s): %s",
                layer.name, ", ".join(missing),
            )
    return chosen


def build_spec(
    project_name: str,
    selected_layers: Optional[Sequence[str]] = None,
    *,
    registry: TemplateRegistry,
    layer_model: Sequence[LayerDefinition],
) -> ProjectSpec:
    """Validate user input and assemble the immutable :class:`ProjectSpec`."""
    validate_project_name(project_name)
    layers = resolve_layers(selected_layers, layer_model)
    names = {layer.name for layer in layers}
    return ProjectSpec(
        project_name=project_name,
        selected_layers=tuple(layers),
        templates=tuple(t for t in registry if t.layer in names),
    )


def build_plan(
    project_name: str,
    selected_layers: Optional[Sequence[str]] = None,
    *,
    registry: TemplateRegistry | None = None,
    output_dir: str | Path = ".",
    layer_model: Sequence[LayerDefinition] | None = None,
) -> GenerationPlan:
    """Render every template of the selected layers into a GenerationPlan.

    Args:
        project_name: Name of the project; also the project root directory name.
        selected_layers: Layer names to generate.  ``None`` means all layers.
        registry: Template catalog.  Defaults to the built-in F4ST registry.
        output_dir: Parent directory of the project root.
        layer_model: Layer definitions.  Defaults to the canonical model.

    Returns:
        The plan, ordered by layer (leaves first) then template declaration.

    Raises:
        InputError: Bad project name or unknown layer.
        LayoutConflict: Two templates render to the same path.
        InvariantViolation: The layer model is invalid.
        TemplateError: A template uses an undefined placeholder.
    """
    registry = registry if registry is not None else default_registry()
    layer_model = list(layer_model) if layer_model is not None else default_layers()

    spec = build_spec(
        project_name, selected_layers, registry=registry, layer_model=layer_model
    )
    root = Path(output_dir).resolve() / spec.project_name

    operations: list[PlannedOperation] = []
    for layer in spec.selected_layers:
        for template in spec.templates:
            if template.layer != layer.name:
                continue
            operations.append(_plan_template(registry, template, spec.project_name, root))

    _check_collisions(operations)
    logger.debug("Planned %d file(s) for %s", len(operations), spec.project_name)
    return GenerationPlan(
        project_name=spec.project_name,
        root=root,
        layers=tuple(layer.name for layer in spec.selected_layers),
        operations=tuple(operations),
    )


def _plan_template(
    registry: TemplateRegistry,
    template: FileTemplate,
    project_name: str,
    root: Path,
) -> PlannedOperation:
    rel_target, content = registry.render(template, project_name)
    rel_target = _normalise_relative(rel_target)
    return PlannedOperation(
        target_path=root / rel_target,
        rendered_content=content,
        layer=template.layer,
        module=template.module,
        exports=tuple(
            ExportEntry(
                category=e.category,
                name=e.name,
                source_path=rel_target,
                type_only=e.type_only,
            )
            for e in template.exports
        ),
    )


def _normalise_relative(path: str) -> str:
    """Normalise a rendered target path and keep it inside the project root."""
    normalised = posixpath.normpath(path.replace("\\", "/"))
    if normalised.startswith(("/", "../")) or normalised in ("", ".", ".."):
        raise InvariantViolation(
            f"Template target escapes the project root: {path!r}", paths=[path]
        )
    return normalised


def _check_collisions(operations: Iterable[PlannedOperation]) -> None:
    seen: dict[Path, PlannedOperation] = {}
    for op in operations:
        previous = seen.get(op.target_path)
        if previous is not None:
            raise LayoutConflict(
                f"Two planned files resolve to the same path: {op.target_path} "
                f"({previous.layer}/{previous.module or '-'} and {op.layer}/{op.module or '-'})",
                paths=[op.target_path],
            )
        seen[op.target_path] = op
