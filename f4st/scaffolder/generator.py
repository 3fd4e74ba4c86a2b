"""Main scaffolding orchestrator.

Runs the validate → plan → execute pipeline: builds a GenerationPlan from the
layer model and template registry, checks generated imports against the layer
table, appends the synthesized barrel files, and hands the final plan to the
Generator Engine.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from f4st.config import Config
from f4st.layers.models import LayerDefinition, default_layers
from f4st.layers.validator import check_imports
from f4st.scaffolder.barrels import synthesize_barrels
from f4st.scaffolder.engine import ExecuteOptions, GeneratorEngine, Manifest
from f4st.scaffolder.planner import GenerationPlan, build_plan
from f4st.scaffolder.registry import TemplateRegistry, default_registry

logger = logging.getLogger(__name__)


class ProjectGenerator:
    """Main scaffolding orchestrator.

    Given a ``Config``, generates an F4ST project tree containing:
    - ``shared/`` utilities, hooks, types, validators and constants
    - ``core/`` API client, router, store and UI providers
    - ``modules/`` feature modules, each behind a public ``index.ts``
    - ``routes/`` route table, application shell and project configuration
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        registry: TemplateRegistry | None = None,
        layer_model: Sequence[LayerDefinition] | None = None,
    ) -> None:
        self.config = config or Config()
        self.registry = registry if registry is not None else default_registry()
        self.layer_model = list(layer_model) if layer_model is not None else default_layers()
        self.engine = GeneratorEngine(max_workers=self.config.max_workers)

    # -- Public API --------------------------------------------------------

    def plan(self, project_name: str, layers: Sequence[str] | None = None) -> GenerationPlan:
        """Build the complete plan (templates + barrels) without side effects.

        Args:
            project_name: Project name, validated against the name grammar.
            layers: Layer names to generate.  Defaults to ``config.layers``.
        """
        selected = list(layers) if layers is not None else list(self.config.layers)
        plan = build_plan(
            project_name,
            selected,
            registry=self.registry,
            output_dir=self.config.output_dir,
            layer_model=self.layer_model,
        )
        check_imports(plan, self.layer_model)
        return plan.extend(synthesize_barrels(plan, self.layer_model))

    async def execute(
        self,
        plan: GenerationPlan,
        *,
        dry_run: bool | None = None,
        force: bool | None = None,
    ) -> Manifest:
        """Execute a plan built by :meth:`plan`.

        ``dry_run`` and ``force`` default to the values in ``config``.
        """
        options = ExecuteOptions(
            dry_run=self.config.dry_run if dry_run is None else dry_run,
            force=self.config.force if force is None else force,
        )
        logger.info(
            "Generating %s into %s (layers: %s)",
            plan.project_name, plan.root, ", ".join(plan.layers),
        )
        return await self.engine.execute(plan, options)

    async def generate(
        self,
        project_name: str,
        layers: Sequence[str] | None = None,
        *,
        dry_run: bool | None = None,
        force: bool | None = None,
    ) -> Manifest:
        """Plan and execute in one step.

        Returns:
            The manifest of created (or, in dry-run, would-be-created) paths.
        """
        plan = self.plan(project_name, layers)
        return await self.execute(plan, dry_run=dry_run, force=force)
