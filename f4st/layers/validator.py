"""Dependency validation for the F4ST layer model.

Checks a layer set for conformance to the canonical dependency table and for
acyclicity, and produces the deterministic leaves-first generation order.
Also enforces the table on generated code by scanning ``@/<layer>`` alias
imports in planned TypeScript files.

All functions here are pure: they never touch the filesystem.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from f4st.errors import InvariantViolation
from f4st.layers.models import CANONICAL_DEPENDENCIES, LayerDefinition

if TYPE_CHECKING:
    from f4st.scaffolder.planner import GenerationPlan

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Layer table validation
# ---------------------------------------------------------------------------


def validate_layers(
    layers: Iterable[LayerDefinition],
    canonical: Mapping[str, frozenset[str]] = CANONICAL_DEPENDENCIES,
) -> list[LayerDefinition]:
    """Validate *layers* against *canonical* and return them leaves-first.

    Raises:
        InvariantViolation: If a layer is unknown to the canonical table,
            depends on itself, declares a dependency outside its canonical
            entry, or if the dependency graph contains a cycle.
    """
    layers = list(layers)
    seen: set[str] = set()
    for layer in layers:
        if layer.name in seen:
            raise InvariantViolation(f"Layer '{layer.name}' is declared more than once")
        seen.add(layer.name)

        if layer.name not in canonical:
            raise InvariantViolation(
                f"Layer '{layer.name}' is not part of the canonical layer table"
            )
        if layer.name in layer.allowed_dependencies:
            raise InvariantViolation(f"Layer '{layer.name}' declares a dependency on itself")

        extra = layer.allowed_dependencies - canonical[layer.name]
        if extra:
            raise InvariantViolation(
                f"Layer '{layer.name}' may not depend on {_join(sorted(extra))}; "
                f"allowed: {_join(sorted(canonical[layer.name])) or '(none)'}"
            )

    ordered = topological_order(layers)
    logger.debug("Generation order: %s", [layer.name for layer in ordered])
    return ordered


def topological_order(layers: Iterable[LayerDefinition]) -> list[LayerDefinition]:
    """Sort *layers* so that every dependency precedes its dependents.

    Edges run from a dependent layer to each of its ``allowed_dependencies``.
    Dependencies on layers absent from *layers* are ignored.  Layers with no
    dependency relation keep their declaration order.

    Raises:
        InvariantViolation: If the dependency graph contains a cycle.
    """
    layers = list(layers)
    names = {layer.name for layer in layers}
    pending: dict[str, set[str]] = {
        layer.name: {dep for dep in layer.allowed_dependencies if dep in names}
        for layer in layers
    }

    ordered: list[LayerDefinition] = []
    remaining = list(layers)
    while remaining:
        # Lowest declaration index among layers whose dependencies are all placed.
        ready = next((layer for layer in remaining if not pending[layer.name]), None)
        if ready is None:
            cycle = _find_cycle({layer.name: pending[layer.name] for layer in remaining})
            raise InvariantViolation(
                f"Layer dependencies form a cycle: {' -> '.join(cycle)}"
            )
        ordered.append(ready)
        remaining.remove(ready)
        for deps in pending.values():
            deps.discard(ready.name)

    return ordered


def _find_cycle(graph: dict[str, set[str]]) -> list[str]:
    """Return one cycle in *graph* as a closed path (first node repeated last)."""
    visiting: list[str] = []
    done: set[str] = set()

    def _visit(node: str) -> list[str] | None:
        if node in visiting:
            return visiting[visiting.index(node):] + [node]
        if node in done:
            return None
        visiting.append(node)
        for dep in sorted(graph.get(node, ())):
            found = _visit(dep)
            if found:
                return found
        visiting.pop()
        done.add(node)
        return None

    for start in graph:
        cycle = _visit(start)
        if cycle:
            return cycle
    return list(graph)


# ---------------------------------------------------------------------------
# Import enforcement on generated code
# ---------------------------------------------------------------------------

_ALIAS_IMPORT_RE = re.compile(
    r"""(?:import|export)\s[^;]*?from\s+['"]@/([A-Za-z0-9_-]+)((?:/[^'"]*)?)['"]"""
)

_SCANNED_SUFFIXES = (".ts", ".tsx")


def check_imports(plan: "GenerationPlan", layers: Iterable[LayerDefinition]) -> None:
    """Verify that every planned source file respects the layer table.

    A file in layer ``L`` may import ``@/X`` only if ``X`` is ``L`` itself or
    one of ``L``'s allowed dependencies.  Feature modules may reach other
    feature modules only through their public barrel (``@/modules/<name>``),
    never through a deep path.

    Raises:
        InvariantViolation: On the first forbidden import found.
    """
    by_name = {layer.name: layer for layer in layers}
    for op in plan.operations:
        if not op.target_path.name.endswith(_SCANNED_SUFFIXES):
            continue
        importer = by_name.get(op.layer)
        if importer is None:
            continue
        for target_layer, subpath in _ALIAS_IMPORT_RE.findall(op.rendered_content):
            if target_layer not in CANONICAL_DEPENDENCIES:
                continue
            if target_layer != importer.name and not importer.may_depend_on(target_layer):
                raise InvariantViolation(
                    f"'{importer.name}' may not import from '@/{target_layer}'",
                    paths=[op.target_path],
                )
            if target_layer == "modules":
                _check_module_import(op, subpath)


def _check_module_import(op, subpath: str) -> None:
    parts = [p for p in subpath.split("/") if p]
    if not parts:
        raise InvariantViolation(
            "Imports from '@/modules' must name a feature module",
            paths=[op.target_path],
        )
    if len(parts) > 1 and parts[0] != op.module:
        raise InvariantViolation(
            f"Deep import '@/modules{subpath}' bypasses the public API of "
            f"module '{parts[0]}'",
            paths=[op.target_path],
        )


def _join(items: Iterable[str]) -> str:
    return ", ".join(f"'{item}'" for item in items)
