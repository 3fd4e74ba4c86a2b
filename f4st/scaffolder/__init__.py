"""F4ST scaffolder -- plans and generates project file trees.

Quick usage::

    from f4st.scaffolder import ProjectGenerator
    from f4st.config import Config

    generator = ProjectGenerator(Config(output_dir="/tmp/output"))
    plan = generator.plan("my-app")           # side-effect free
    manifest = await generator.execute(plan)  # writes the files
"""

from f4st.scaffolder.barrels import synthesize_barrels
from f4st.scaffolder.engine import ExecuteOptions, GeneratorEngine, Manifest
from f4st.scaffolder.generator import ProjectGenerator
from f4st.scaffolder.planner import (
    ExportEntry,
    GenerationPlan,
    PlannedOperation,
    ProjectSpec,
    build_plan,
    validate_project_name,
)
from f4st.scaffolder.registry import (
    ExportDeclaration,
    FileTemplate,
    TemplateRegistry,
    default_registry,
)
from f4st.scaffolder.templates import TemplateRenderer

__all__ = [
    "ExecuteOptions",
    "ExportDeclaration",
    "ExportEntry",
    "FileTemplate",
    "GenerationPlan",
    "GeneratorEngine",
    "Manifest",
    "PlannedOperation",
    "ProjectGenerator",
    "ProjectSpec",
    "TemplateRegistry",
    "TemplateRenderer",
    "build_plan",
    "default_registry",
    "synthesize_barrels",
    "validate_project_name",
]
