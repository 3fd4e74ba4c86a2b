"""Structured error taxonomy for the F4ST scaffolder.

Every error carries a ``kind`` (stable machine-readable name), a
human-readable message, the paths involved, and the process exit code the CLI
maps it to.  Validation errors are raised before any filesystem mutation; only
:class:`ScaffoldIOError` can be raised after writes have begun.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

if TYPE_CHECKING:
    from f4st.scaffolder.engine import Manifest


class ScaffoldError(Exception):
    """Base class for every error the scaffolder reports."""

    kind: str = "ScaffoldError"
    exit_code: int = 1

    def __init__(self, message: str, paths: Iterable[str | Path] = ()) -> None:
        self.message = message
        self.paths: tuple[str, ...] = tuple(str(p) for p in paths)
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable representation of the error."""
        return {
            "kind": self.kind,
            "message": self.message,
            "paths": list(self.paths),
            "exit_code": self.exit_code,
        }

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class InputError(ScaffoldError):
    """Malformed project name or unknown layer selection."""

    kind = "InputError"
    exit_code = 1


class LayoutConflict(ScaffoldError):
    """A target path already exists, or two templates resolve to the same path."""

    kind = "LayoutConflict"
    exit_code = 2


class InvariantViolation(ScaffoldError):
    """A defect in the layer model or template registry.

    Raised for cyclic or out-of-table layer dependencies, forbidden imports in
    generated code, and duplicate exported symbols within a module.
    """

    kind = "InvariantViolation"
    exit_code = 3


class TemplateError(ScaffoldError):
    """A template references an undefined placeholder or fails to parse."""

    kind = "TemplateError"
    exit_code = 3


class ScaffoldIOError(ScaffoldError):
    """A filesystem failure during the write phase.

    ``manifest`` holds the paths successfully written before the failure so
    the caller can reconcile disk state.
    """

    kind = "IOError"
    exit_code = 4

    def __init__(
        self,
        message: str,
        paths: Iterable[str | Path] = (),
        manifest: "Manifest | None" = None,
    ) -> None:
        super().__init__(message, paths)
        self.manifest = manifest

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.manifest is not None:
            data["written"] = [str(p) for p in self.manifest.created_paths]
        return data
