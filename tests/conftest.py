"""Shared pytest fixtures for the F4ST scaffolder test suite.

Provides reusable fixtures for:
- Temporary output directories
- Generators and configs pointed at those directories
- Small inline template registries for targeted tests
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import pytest

from f4st.config import Config
from f4st.layers.models import default_layers
from f4st.scaffolder.generator import ProjectGenerator
from f4st.scaffolder.registry import ExportDeclaration, FileTemplate, TemplateRegistry


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Parent directory for generated projects (auto-cleanup)."""
    out = tmp_path / "out"
    out.mkdir()
    yield out


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep F4ST_* variables from the developer's shell out of every test."""
    for name in ("F4ST_OUTPUT_DIR", "F4ST_LAYERS", "F4ST_MAX_WORKERS", "F4ST_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_f4st_logger() -> None:
    """Undo handlers installed by ``configure_logging`` during a test."""
    yield
    logger = logging.getLogger("f4st")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------

@pytest.fixture
def config(output_dir: Path) -> Config:
    """A default Config writing into the temporary output directory."""
    return Config(output_dir=output_dir)


@pytest.fixture
def generator(config: Config) -> ProjectGenerator:
    """A ProjectGenerator using the built-in registry and layer model."""
    return ProjectGenerator(config)


# ---------------------------------------------------------------------------
# Inline registries
# ---------------------------------------------------------------------------

def _inline(
    layer: str,
    module: str | None,
    target: str,
    content: str,
    *exports: tuple,
) -> FileTemplate:
    """Build an inline FileTemplate; exports are ``(category, name[, type_only])``."""
    return FileTemplate(
        layer=layer,
        module=module,
        target_path=target,
        content=content,
        exports=tuple(
            ExportDeclaration(category=e[0], name=e[1], type_only=len(e) > 2 and e[2])
            for e in exports
        ),
    )


@pytest.fixture
def make_registry() -> Callable[..., TemplateRegistry]:
    """Factory building a TemplateRegistry from inline FileTemplates."""

    def _make(*templates: FileTemplate) -> TemplateRegistry:
        return TemplateRegistry(templates)

    return _make


@pytest.fixture
def inline_generator(config: Config, make_registry) -> Callable[..., ProjectGenerator]:
    """Factory building a ProjectGenerator over an inline registry."""

    def _make(*templates: FileTemplate) -> ProjectGenerator:
        return ProjectGenerator(
            config, registry=make_registry(*templates), layer_model=default_layers()
        )

    return _make


@pytest.fixture
def small_templates() -> list[FileTemplate]:
    """One template per layer, with a single module in ``shared`` and ``modules``."""
    return [
        _inline("shared", "utils", "src/shared/utils/noop.ts",
                "export const noop = () => {};\n", ("utils", "noop")),
        _inline("core", None, "src/core/config.ts",
                "export const config = { name: '{{ project_name }}' };\n"),
        _inline("modules", "todo", "src/modules/todo/hooks/use-todo.ts",
                "import { noop } from '@/shared/utils';\nexport const useTodo = noop;\n",
                ("hooks", "useTodo")),
        _inline("routes", None, "package.json",
                '{ "name": "{{ package_name }}" }\n'),
    ]


@pytest.fixture
def inline() -> Callable[..., FileTemplate]:
    """Factory building an inline FileTemplate (see ``_inline``)."""
    return _inline
