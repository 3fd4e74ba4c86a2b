"""Tests for the Generator Engine (f4st.scaffolder.engine).

Covers:
- Concurrent writes and the resulting manifest
- Dry-run reporting without filesystem mutation
- The all-or-nothing pre-check for existing targets, and --force
- Write failures surfacing as ScaffoldIOError with a partial manifest
"""

from __future__ import annotations

import errno
from pathlib import Path
from unittest.mock import patch

import pytest

from f4st.errors import LayoutConflict, ScaffoldIOError
from f4st.scaffolder import engine as engine_module
from f4st.scaffolder.engine import ExecuteOptions, GeneratorEngine, Manifest
from f4st.scaffolder.planner import build_plan

pytestmark = pytest.mark.unit


@pytest.fixture
def plan(output_dir):
    return build_plan("my-app", output_dir=output_dir)


def _tree(root: Path) -> dict[str, bytes]:
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


class TestGeneratorEngine:
    def test_rejects_zero_workers(self):
        with pytest.raises(ValueError):
            GeneratorEngine(max_workers=0)

    async def test_writes_every_file(self, plan):
        manifest = await GeneratorEngine().execute(plan)
        assert manifest.created_paths == plan.paths()
        assert manifest.skipped_paths == []
        assert manifest.dry_run is False
        for op in plan.operations:
            assert op.target_path.read_text(encoding="utf-8") == op.rendered_content

    async def test_single_worker(self, plan):
        manifest = await GeneratorEngine(max_workers=1).execute(plan)
        assert manifest.created_paths == plan.paths()

    async def test_dry_run_writes_nothing(self, plan, output_dir):
        manifest = await GeneratorEngine().execute(plan, ExecuteOptions(dry_run=True))
        assert manifest.dry_run is True
        assert manifest.created_paths == plan.paths()
        assert list(output_dir.iterdir()) == []

    async def test_dry_run_matches_real_run(self, plan):
        dry = await GeneratorEngine().execute(plan, ExecuteOptions(dry_run=True))
        real = await GeneratorEngine().execute(plan)
        assert set(dry.created_paths) == set(real.created_paths)

    async def test_existing_target_aborts_before_writing(self, plan):
        existing = plan.root / "package.json"
        existing.parent.mkdir(parents=True)
        existing.write_text("keep me\n", encoding="utf-8")

        with pytest.raises(LayoutConflict) as exc_info:
            await GeneratorEngine().execute(plan)

        assert exc_info.value.paths == (str(existing),)
        assert exc_info.value.exit_code == 2
        assert _tree(plan.root) == {"package.json": b"keep me\n"}

    async def test_existing_target_reported_in_dry_run(self, plan):
        existing = plan.root / "src" / "main.tsx"
        existing.parent.mkdir(parents=True)
        existing.write_text("// mine\n", encoding="utf-8")

        with pytest.raises(LayoutConflict):
            await GeneratorEngine().execute(plan, ExecuteOptions(dry_run=True))

    async def test_unrelated_files_do_not_conflict(self, plan):
        plan.root.mkdir(parents=True)
        (plan.root / "notes.txt").write_text("hello\n", encoding="utf-8")
        manifest = await GeneratorEngine().execute(plan)
        assert len(manifest.created_paths) == len(plan.operations)
        assert (plan.root / "notes.txt").read_text(encoding="utf-8") == "hello\n"

    async def test_force_overwrites(self, plan):
        existing = plan.root / "package.json"
        existing.parent.mkdir(parents=True)
        existing.write_text("old\n", encoding="utf-8")

        manifest = await GeneratorEngine().execute(plan, ExecuteOptions(force=True))

        assert existing in manifest.created_paths
        assert existing.read_text(encoding="utf-8") != "old\n"

    async def test_force_skips_identical_files(self, plan):
        await GeneratorEngine().execute(plan)
        untouched = plan.paths()[0]
        mtime = untouched.stat().st_mtime_ns

        with patch("f4st.scaffolder.engine._write_file") as mock_write:
            manifest = await GeneratorEngine().execute(plan, ExecuteOptions(force=True))

        mock_write.assert_not_called()
        assert manifest.created_paths == []
        assert manifest.skipped_paths == plan.paths()
        assert untouched.stat().st_mtime_ns == mtime

    def test_existing_targets(self, plan):
        assert GeneratorEngine().existing_targets(plan) == []
        target = plan.paths()[0]
        target.parent.mkdir(parents=True)
        target.write_text("", encoding="utf-8")
        assert GeneratorEngine().existing_targets(plan) == [target]


class TestWriteFailure:
    async def test_failure_reports_partial_manifest(self, plan):
        real_write = engine_module._write_file
        calls = []

        def flaky_write(path, content):
            calls.append(path)
            if len(calls) == 3:
                raise OSError(errno.EACCES, "Permission denied", str(path))
            real_write(path, content)

        with patch("f4st.scaffolder.engine._write_file", side_effect=flaky_write):
            with pytest.raises(ScaffoldIOError) as exc_info:
                await GeneratorEngine(max_workers=1).execute(plan)

        paths = plan.paths()
        error = exc_info.value
        assert error.exit_code == 4
        assert error.paths == (str(paths[2]),)
        assert "Permission denied" in error.message
        assert error.manifest.created_paths == paths[:2]
        assert error.manifest.skipped_paths == paths[3:]
        assert all(p.exists() for p in paths[:2])
        assert not any(p.exists() for p in paths[2:])
        assert error.to_dict()["written"] == [str(p) for p in paths[:2]]

    async def test_no_writes_start_after_failure(self, plan):
        with patch(
            "f4st.scaffolder.engine._write_file",
            side_effect=OSError(errno.ENOSPC, "No space left on device"),
        ) as mock_write:
            with pytest.raises(ScaffoldIOError) as exc_info:
                await GeneratorEngine(max_workers=1).execute(plan)

        assert mock_write.call_count == 1
        assert exc_info.value.manifest.created_paths == []
        assert len(exc_info.value.manifest.skipped_paths) == len(plan.operations) - 1

    async def test_unreadable_target_in_precheck(self, plan, output_dir):
        denied = PermissionError(errno.EACCES, "Permission denied", str(plan.root))
        with patch.object(Path, "exists", side_effect=denied):
            with patch("f4st.scaffolder.engine._write_file") as mock_write:
                with pytest.raises(ScaffoldIOError) as exc_info:
                    await GeneratorEngine().execute(plan)

        mock_write.assert_not_called()
        error = exc_info.value
        assert error.exit_code == 4
        assert error.paths == (str(plan.root),)
        assert "Permission denied" in error.message
        assert error.manifest.created_paths == []
        assert error.manifest.skipped_paths == plan.paths()
        assert list(output_dir.iterdir()) == []

    async def test_non_os_error_keeps_partial_manifest(self, plan):
        real_write = engine_module._write_file
        calls = []

        def bad_encoding(path, content):
            calls.append(path)
            if len(calls) == 2:
                raise UnicodeEncodeError("utf-8", "\udcff", 0, 1, "surrogates not allowed")
            real_write(path, content)

        with patch("f4st.scaffolder.engine._write_file", side_effect=bad_encoding):
            with pytest.raises(ScaffoldIOError) as exc_info:
                await GeneratorEngine(max_workers=1).execute(plan)

        paths = plan.paths()
        error = exc_info.value
        assert isinstance(error.__cause__, UnicodeEncodeError)
        assert error.paths == (str(paths[1]),)
        assert error.manifest.created_paths == paths[:1]
        assert error.manifest.skipped_paths == paths[2:]
        assert len(calls) == 2


class TestManifest:
    def test_relative_to(self, tmp_path):
        manifest = Manifest(created_paths=[tmp_path / "a" / "b.ts", tmp_path / "c.json"])
        assert manifest.relative_to(tmp_path) == ["a/b.ts", "c.json"]

    def test_defaults(self):
        manifest = Manifest()
        assert manifest.created_paths == []
        assert manifest.skipped_paths == []
        assert manifest.dry_run is False
