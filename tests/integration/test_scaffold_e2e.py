"""Integration tests for the full validate -> plan -> execute pipeline.

These tests run the real CLI and generator against a temporary directory and
verify the generated F4ST tree: layout, barrels, rendered placeholders, and
that every ``@/`` import in the output resolves to a generated file.

No external tools (node, npm, tsc) are required.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

import pytest

from f4st.cli import main
from f4st.config import Config
from f4st.scaffolder import ProjectGenerator

pytestmark = pytest.mark.integration

_ALIAS_RE = re.compile(r"""from\s+['"]@/([^'"]+)['"]""")
_RELATIVE_RE = re.compile(r"""from\s+['"](\.{1,2}/[^'"]+)['"]""")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _files(root: Path) -> list[str]:
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())


def _resolves(base: Path) -> bool:
    """Return True if a TypeScript specifier at *base* points at a generated file."""
    candidates = [
        base.with_name(base.name + ".ts"),
        base.with_name(base.name + ".tsx"),
        base / "index.ts",
    ]
    return any(c.is_file() for c in candidates)


def _tree(root: Path) -> dict[str, bytes]:
    return {name: (root / name).read_bytes() for name in _files(root)}


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestScaffoldEndToEnd:
    def test_default_project(self, output_dir, capsys):
        assert main(["my-app", "--json", "-o", str(output_dir)]) == 0
        created = json.loads(capsys.readouterr().out)["created"]

        for suffix in (
            "src/shared/utils/index.ts",
            "src/core/api/index.ts",
            "src/modules/auth/index.ts",
            "package.json",
        ):
            assert any(path.endswith(suffix) for path in created), suffix

        root = output_dir / "my-app"
        assert len(_files(root)) == len(created)
        package = json.loads((root / "package.json").read_text(encoding="utf-8"))
        assert package["name"] == "my-app"
        assert "Welcome to My App" in (root / "src" / "App.tsx").read_text(encoding="utf-8")

    def test_aliased_and_relative_imports_resolve(self, output_dir):
        assert main(["my-app", "-o", str(output_dir)]) == 0
        root = output_dir / "my-app"
        src = root / "src"

        for name in _files(root):
            if not name.endswith((".ts", ".tsx")):
                continue
            path = root / name
            text = path.read_text(encoding="utf-8")
            for specifier in _ALIAS_RE.findall(text):
                assert _resolves(src / specifier), f"{name}: @/{specifier}"
            for specifier in _RELATIVE_RE.findall(text):
                assert _resolves(path.parent / specifier), f"{name}: {specifier}"

    def test_barrel_symbols_declared_in_sources(self, output_dir):
        assert main(["my-app", "-o", str(output_dir)]) == 0
        auth = output_dir / "my-app" / "src" / "modules" / "auth"
        barrel = (auth / "index.ts").read_text(encoding="utf-8")

        for names, specifier in re.findall(r"export (?:type )?\{ ([^}]+) \} from '([^']+)';", barrel):
            source = next(
                p for p in (auth / (specifier + ".ts"), auth / (specifier + ".tsx")) if p.is_file()
            )
            text = source.read_text(encoding="utf-8")
            for symbol in names.split(", "):
                assert re.search(rf"\b{symbol}\b", text), f"{symbol} missing from {source.name}"

    def test_layer_subset(self, output_dir):
        assert main(["my-app", "--layers=shared,core", "-o", str(output_dir)]) == 0
        files = _files(output_dir / "my-app")
        assert files
        assert all(f.startswith(("src/shared/", "src/core/")) for f in files)
        assert "src/shared/index.ts" in files
        assert "src/core/index.ts" in files

    def test_dry_run_matches_real_run(self, output_dir, capsys):
        assert main(["my-app", "--dry-run", "-o", str(output_dir)]) == 0
        planned = capsys.readouterr().out.splitlines()
        assert list(output_dir.iterdir()) == []

        assert main(["my-app", "--json", "-o", str(output_dir)]) == 0
        created = json.loads(capsys.readouterr().out)["created"]
        assert set(planned) == set(created)

    async def test_generation_is_deterministic(self, tmp_path):
        trees = []
        for run in ("first", "second"):
            out = tmp_path / run
            out.mkdir()
            await ProjectGenerator(Config(output_dir=out)).generate("my-app")
            trees.append(_tree(out / "my-app"))
        assert trees[0] == trees[1]

    def test_conflict_leaves_tree_untouched(self, output_dir):
        assert main(["my-app", "-o", str(output_dir)]) == 0
        root = output_dir / "my-app"
        (root / "src" / "App.tsx").write_text("// customised\n", encoding="utf-8")
        before = _tree(root)

        assert main(["my-app", "-o", str(output_dir)]) == 2
        assert _tree(root) == before

    def test_invalid_name(self, output_dir):
        assert main(["My App!", "-o", str(output_dir)]) == 1
        assert list(output_dir.iterdir()) == []
