"""Pydantic v2 models for the F4ST layer model.

Declares the fixed, ordered set of architectural layers and, for each, the
subset of other layers it may depend on.  The canonical table is the single
source of truth the dependency validator checks every layer set against.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


# ---------------------------------------------------------------------------
# Canonical dependency table
# ---------------------------------------------------------------------------

CANONICAL_DEPENDENCIES: dict[str, frozenset[str]] = {
    "shared": frozenset(),
    "core": frozenset({"shared"}),
    # Feature modules may also use each other, but only through their public
    # barrels; that rule is enforced on generated imports, not as a layer edge.
    "modules": frozenset({"core", "shared"}),
    "routes": frozenset({"modules", "core", "shared"}),
}

LAYER_NAMES: tuple[str, ...] = ("shared", "core", "modules", "routes")


# ---------------------------------------------------------------------------
# LayerDefinition
# ---------------------------------------------------------------------------


class LayerDefinition(BaseModel):
    """A single architectural layer and the layers it may import from."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Layer name, e.g. 'core'")
    allowed_dependencies: frozenset[str] = Field(
        default_factory=frozenset,
        description="Names of the layers this layer may depend on",
    )
    directory: str = Field(
        default="",
        validate_default=True,
        description="Project-relative directory holding the layer's files",
    )
    public_barrel: bool = Field(
        default=False,
        description="Whether a layer-root index.ts re-exports every module barrel",
    )
    description: str = Field(default="", description="What the layer contains")

    @field_validator("allowed_dependencies", mode="before")
    @classmethod
    def _coerce_dependencies(cls, value: object) -> object:
        if isinstance(value, (list, tuple, set)):
            return frozenset(value)
        return value

    @field_validator("directory")
    @classmethod
    def _default_directory(cls, value: str, info: ValidationInfo) -> str:
        if value:
            return value.strip("/")
        return f"src/{info.data.get('name', '')}"

    def may_depend_on(self, other: str) -> bool:
        """Return ``True`` if this layer is allowed to import from *other*."""
        return other in self.allowed_dependencies


# ---------------------------------------------------------------------------
# Default layer model
# ---------------------------------------------------------------------------


def default_layers() -> list[LayerDefinition]:
    """Return the canonical F4ST layer model in declaration order."""
    return [
        LayerDefinition(
            name="shared",
            allowed_dependencies=CANONICAL_DEPENDENCIES["shared"],
            public_barrel=True,
            description="Pure utilities with no dependencies",
        ),
        LayerDefinition(
            name="core",
            allowed_dependencies=CANONICAL_DEPENDENCIES["core"],
            public_barrel=True,
            description="Foundation and configuration (API client, router, state, UI)",
        ),
        LayerDefinition(
            name="modules",
            allowed_dependencies=CANONICAL_DEPENDENCIES["modules"],
            description="Business features, each exposing a public barrel",
        ),
        LayerDefinition(
            name="routes",
            allowed_dependencies=CANONICAL_DEPENDENCIES["routes"],
            description="Route table, application shell and project configuration",
        ),
    ]


def layers_by_name(layers: list[LayerDefinition]) -> dict[str, LayerDefinition]:
    """Index *layers* by name, preserving declaration order."""
    return {layer.name: layer for layer in layers}
