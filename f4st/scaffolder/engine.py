"""Generator Engine: executes a GenerationPlan against the filesystem.

The engine is the only component that mutates the filesystem.  It refuses to
touch anything when a target already exists (unless forced), supports a
dry-run mode that reports exactly what a real run would create, and writes
files concurrently on a bounded pool of worker threads.

There is no rollback: if a write fails, the paths already written are
reported in the :class:`ScaffoldIOError`'s manifest and re-running with
``force`` is the recovery path.  Under ``force``, targets whose content is
already identical are left untouched and reported as skipped.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from pydantic import BaseModel, Field

from f4st.errors import LayoutConflict, ScaffoldIOError
from f4st.scaffolder.planner import GenerationPlan, PlannedOperation

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class ExecuteOptions(BaseModel):
    """Per-run switches for :meth:`GeneratorEngine.execute`."""

    dry_run: bool = Field(default=False, description="Report without writing")
    force: bool = Field(default=False, description="Overwrite existing files")


class Manifest(BaseModel):
    """The observable result of one run."""

    created_paths: list[Path] = Field(
        default_factory=list, description="Paths written (or, in dry-run, that would be)"
    )
    skipped_paths: list[Path] = Field(
        default_factory=list,
        description="Planned paths left untouched: unchanged under force, or not "
        "reached because the run stopped",
    )
    dry_run: bool = False

    def relative_to(self, root: Path) -> list[str]:
        """Return ``created_paths`` relative to *root*, POSIX style."""
        return [p.relative_to(root).as_posix() for p in self.created_paths]


# ---------------------------------------------------------------------------
# GeneratorEngine
# ---------------------------------------------------------------------------


class GeneratorEngine:
    """Writes planned files to disk, all-or-nothing at the pre-check stage."""

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.max_workers = max_workers

    # -- Public API --------------------------------------------------------

    async def execute(
        self,
        plan: GenerationPlan,
        options: ExecuteOptions | None = None,
    ) -> Manifest:
        """Execute *plan* and return the manifest of created paths.

        Raises:
            LayoutConflict: If ``force`` is off and any target already
                exists.  Nothing is written in that case.
            ScaffoldIOError: If the targets cannot be inspected (nothing is
                written) or a write fails.  Carries the partial manifest.
        """
        options = options or ExecuteOptions()

        if not options.force:
            try:
                existing = await asyncio.to_thread(self.existing_targets, plan)
            except OSError as exc:
                raise ScaffoldIOError(
                    f"Cannot inspect target paths: {exc.strerror or exc}",
                    paths=[exc.filename] if exc.filename else [plan.root],
                    manifest=Manifest(skipped_paths=plan.paths()),
                ) from exc
            if existing:
                raise LayoutConflict(
                    f"{len(existing)} target path(s) already exist; "
                    "remove them or re-run with --force",
                    paths=existing,
                )

        if options.dry_run:
            logger.info("Dry run: %d file(s) would be created", len(plan.operations))
            return Manifest(created_paths=plan.paths(), dry_run=True)

        return await self._write_all(plan.operations, skip_unchanged=options.force)

    def existing_targets(self, plan: GenerationPlan) -> list[Path]:
        """Return the planned target paths that already exist on disk."""
        return [path for path in plan.paths() if path.exists()]

    # -- Writing -----------------------------------------------------------

    async def _write_all(
        self,
        operations: tuple[PlannedOperation, ...],
        skip_unchanged: bool = False,
    ) -> Manifest:
        semaphore = asyncio.Semaphore(self.max_workers)
        stop = asyncio.Event()

        async def _write(op: PlannedOperation) -> bool:
            async with semaphore:
                if stop.is_set():
                    return False
                try:
                    if skip_unchanged and await asyncio.to_thread(
                        _is_unchanged, op.target_path, op.rendered_content
                    ):
                        logger.debug("Unchanged %s", op.target_path)
                        return False
                    await asyncio.to_thread(_write_file, op.target_path, op.rendered_content)
                except Exception:
                    stop.set()
                    raise
                logger.debug("Wrote %s", op.target_path)
                return True

        results = await asyncio.gather(
            *(_write(op) for op in operations), return_exceptions=True
        )

        created: list[Path] = []
        skipped: list[Path] = []
        failures: list[tuple[Path, BaseException]] = []
        for op, result in zip(operations, results):
            if result is True:
                created.append(op.target_path)
            elif isinstance(result, BaseException):
                failures.append((op.target_path, result))
            else:
                skipped.append(op.target_path)

        manifest = Manifest(created_paths=created, skipped_paths=skipped)
        if failures:
            path, exc = failures[0]
            if not isinstance(exc, Exception):
                raise exc
            reason = getattr(exc, "strerror", None) or exc
            raise ScaffoldIOError(
                f"Failed to write {path}: {reason}",
                paths=[p for p, _ in failures],
                manifest=manifest,
            ) from exc

        logger.info("Created %d file(s), %d unchanged", len(created), len(skipped))
        return manifest


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _is_unchanged(path: Path, content: str) -> bool:
    """Return ``True`` if *path* is a file whose bytes already equal *content*."""
    return path.is_file() and path.read_bytes() == content.encode("utf-8")


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
