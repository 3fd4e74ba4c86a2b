"""Barrel Export Synthesizer.

Derives, per module, the public symbols its templates declare and emits one
aggregate ``index.ts`` per module, grouped by category in first-seen order.
Layers flagged with ``public_barrel`` also get a layer-root ``index.ts`` that
re-exports each of their module barrels.

A duplicate symbol name within one module is a registry defect and always
raises :class:`~f4st.errors.InvariantViolation`; it is never resolved by
letting the last declaration win.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Sequence
from typing import Optional

from f4st.errors import InvariantViolation
from f4st.layers.models import LayerDefinition, default_layers, layers_by_name
from f4st.scaffolder.planner import ExportEntry, GenerationPlan, PlannedOperation

logger = logging.getLogger(__name__)

BARREL_FILENAME = "index.ts"

_SOURCE_SUFFIXES = (".tsx", ".ts", ".jsx", ".js")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def synthesize_barrels(
    plan: GenerationPlan,
    layer_model: Sequence[LayerDefinition] | None = None,
) -> list[PlannedOperation]:
    """Build the barrel operations for *plan*.

    Returns module barrels in the order their modules first appear in the
    plan, followed by the layer barrels of every selected layer that has
    ``public_barrel`` set.  The returned operations are meant to be appended
    to the plan with :meth:`GenerationPlan.extend`.

    Raises:
        InvariantViolation: If two entries of one module share a symbol name.
    """
    layers = layers_by_name(list(layer_model) if layer_model is not None else default_layers())

    grouped: dict[tuple[str, str], list[ExportEntry]] = {}
    for op in plan.operations:
        if op.module is None or op.kind != "template":
            continue
        grouped.setdefault((op.layer, op.module), []).extend(op.exports)

    barrels: list[PlannedOperation] = []
    for (layer_name, module), entries in grouped.items():
        module_dir = _module_dir(layers, layer_name, module)
        _check_unique(module, entries)
        barrels.append(
            PlannedOperation(
                target_path=plan.root / module_dir / BARREL_FILENAME,
                rendered_content=render_module_barrel(entries, module_dir),
                layer=layer_name,
                module=module,
                exports=tuple(entries),
                kind="module-barrel",
            )
        )

    for layer_name in plan.layers:
        layer = layers.get(layer_name)
        if layer is None or not layer.public_barrel:
            continue
        modules = [module for (name, module) in grouped if name == layer_name]
        if not modules:
            continue
        barrels.append(
            PlannedOperation(
                target_path=plan.root / layer.directory / BARREL_FILENAME,
                rendered_content=render_layer_barrel(modules),
                layer=layer_name,
                module=None,
                kind="layer-barrel",
            )
        )

    logger.debug("Synthesized %d barrel file(s)", len(barrels))
    return barrels


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_module_barrel(entries: Sequence[ExportEntry], module_dir: str) -> str:
    """Render the export statements of one module's barrel.

    Entries are grouped by category (first-seen order); consecutive entries
    of one category that come from the same file share a statement.
    """
    categories: dict[str, list[ExportEntry]] = {}
    for entry in entries:
        categories.setdefault(entry.category, []).append(entry)

    lines = ["// Public API - only export what other modules need"]
    for category, members in categories.items():
        lines.append("")
        lines.append(f"// {category}")
        for type_only, specifier, names in _statements(members, module_dir):
            keyword = "export type" if type_only else "export"
            lines.append(f"{keyword} {{ {', '.join(names)} }} from '{specifier}';")
    return "\n".join(lines) + "\n"


def render_layer_barrel(modules: Sequence[str]) -> str:
    """Render a layer-root barrel re-exporting each module barrel."""
    return "".join(f"export * from './{module}';\n" for module in modules)


def _statements(
    members: Sequence[ExportEntry], module_dir: str
) -> list[tuple[bool, str, list[str]]]:
    statements: list[tuple[bool, str, list[str]]] = []
    for entry in members:
        specifier = _import_specifier(entry.source_path, module_dir)
        if statements and statements[-1][:2] == (entry.type_only, specifier):
            statements[-1][2].append(entry.name)
        else:
            statements.append((entry.type_only, specifier, [entry.name]))
    return statements


def _import_specifier(source_path: str, module_dir: str) -> str:
    """Return the relative module specifier for *source_path* from *module_dir*."""
    rel = posixpath.relpath(source_path, module_dir)
    for suffix in _SOURCE_SUFFIXES:
        if rel.endswith(suffix):
            rel = rel[: -len(suffix)]
            break
    return rel if rel.startswith("../") else f"./{rel}"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _module_dir(
    layers: dict[str, LayerDefinition], layer_name: str, module: str
) -> str:
    layer = layers.get(layer_name)
    base = layer.directory if layer is not None else f"src/{layer_name}"
    return posixpath.join(base, module)


def _check_unique(module: Optional[str], entries: Sequence[ExportEntry]) -> None:
    first_seen: dict[str, ExportEntry] = {}
    for entry in entries:
        previous = first_seen.get(entry.name)
        if previous is not None:
            raise InvariantViolation(
                f"Module '{module}' exports '{entry.name}' twice: from "
                f"{previous.source_path} and {entry.source_path}",
                paths=[previous.source_path, entry.source_path],
            )
        first_seen[entry.name] = entry
