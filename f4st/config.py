"""F4ST scaffolder configuration.

Centralised, typed configuration for one generator run.  Settings use a
Pydantic v2 model so they are validated at construction time and can be
loaded from environment variables without boiler-plate.  CLI flags override
whatever the environment provides.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from f4st.layers.models import LAYER_NAMES


class Config(BaseModel):
    """Global F4ST scaffolder configuration.

    Instances are typically created once by the CLI entry point and then
    passed to :class:`~f4st.scaffolder.ProjectGenerator`.
    """

    output_dir: Path = Field(default=Path("."), description="Parent of the project root")
    layers: list[str] = Field(
        default_factory=lambda: list(LAYER_NAMES),
        description="Layers to generate, in any order",
    )
    max_workers: int = Field(default=8, ge=1, description="Concurrent file writes")
    force: bool = Field(default=False, description="Overwrite existing files")
    dry_run: bool = Field(default=False, description="Report without writing")
    json_output: bool = Field(default=False, description="Print machine-readable JSON")
    log_level: str = Field(default="WARNING", description="Logging level name")

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @classmethod
    def from_env(cls, **overrides: Any) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            F4ST_OUTPUT_DIR, F4ST_LAYERS, F4ST_MAX_WORKERS, F4ST_LOG_LEVEL.

        Keyword arguments whose value is not ``None`` override the
        environment.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("F4ST_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["F4ST_OUTPUT_DIR"])
        if os.environ.get("F4ST_LAYERS"):
            kwargs["layers"] = parse_layer_list(os.environ["F4ST_LAYERS"])
        if os.environ.get("F4ST_MAX_WORKERS"):
            kwargs["max_workers"] = int(os.environ["F4ST_MAX_WORKERS"])
        if os.environ.get("F4ST_LOG_LEVEL"):
            kwargs["log_level"] = os.environ["F4ST_LOG_LEVEL"]

        kwargs.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**kwargs)


def parse_layer_list(value: str) -> list[str]:
    """Split a comma-separated layer list, dropping blanks and duplicates."""
    names = [part.strip() for part in value.split(",")]
    return list(dict.fromkeys(name for name in names if name))
