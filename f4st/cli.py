"""Command-line front-end for the F4ST scaffolder.

Usage::

    f4st my-app
    f4st my-app --dry-run --json
    f4st my-app --layers=shared,core --output ./projects
    python -m f4st my-app --force

Exit codes: 0 success, 1 input error, 2 layout conflict, 3 invariant
violation (or internal template defect), 4 filesystem error.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from typing import Any

from f4st import __version__
from f4st.config import Config, parse_layer_list
from f4st.errors import InputError, ScaffoldError, ScaffoldIOError
from f4st.layers.models import LAYER_NAMES
from f4st.scaffolder.engine import Manifest
from f4st.scaffolder.generator import ProjectGenerator
from f4st.scaffolder.planner import GenerationPlan
from f4st.utils import (
    configure_logging,
    console,
    err_console,
    print_error,
    print_header,
    print_success,
    print_summary_table,
    print_warning,
)

EXIT_OK = 0
EXIT_INTERRUPTED = 130


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports bad arguments as :class:`InputError`."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise InputError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="f4st",
        description="Scaffold a frontend project with the F4ST layered architecture",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  f4st my-app\n"
            "  f4st my-app --dry-run\n"
            "  f4st my-app --layers=shared,core -o ./projects\n"
        ),
    )
    parser.add_argument(
        "project_name",
        help="Project name: lowercase letters, digits and hyphens",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite files that already exist",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the files that would be created without writing anything",
    )
    parser.add_argument(
        "--layers",
        default=None,
        help=f"Comma-separated layers to generate (default: {','.join(LAYER_NAMES)})",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Parent directory of the project (default: current directory)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print the manifest or error as JSON",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Log progress (-v) or debug detail (-vv) to stderr",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point.  Returns the process exit code."""
    json_output = False
    try:
        args = build_parser().parse_args(argv)
        json_output = args.json_output
        config = _config_from_args(args)
        configure_logging(config.log_level)

        generator = ProjectGenerator(config)
        plan = generator.plan(args.project_name)
        manifest = asyncio.run(generator.execute(plan))
    except ScaffoldError as exc:
        _report_error(exc, json_output)
        return exc.exit_code
    except KeyboardInterrupt:
        print_warning("Interrupted; re-run with --force to complete a partial tree.")
        return EXIT_INTERRUPTED

    _report_manifest(plan, manifest, json_output)
    return EXIT_OK


def run() -> None:
    """Console-script wrapper around :func:`main`."""
    sys.exit(main())


# ---------------------------------------------------------------------------
# Argument handling
# ---------------------------------------------------------------------------


def _config_from_args(args: argparse.Namespace) -> Config:
    layers = parse_layer_list(args.layers) if args.layers is not None else None
    if layers is not None and not layers:
        raise InputError("--layers needs at least one layer name")

    log_level = None
    if args.verbose == 1:
        log_level = "INFO"
    elif args.verbose > 1:
        log_level = "DEBUG"

    try:
        return Config.from_env(
            output_dir=args.output,
            layers=layers,
            force=args.force,
            dry_run=args.dry_run,
            json_output=args.json_output,
            log_level=log_level,
        )
    except ValueError as exc:
        raise InputError(f"Invalid configuration: {exc}") from exc


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def _report_manifest(plan: GenerationPlan, manifest: Manifest, json_output: bool) -> None:
    if json_output:
        console.out(json.dumps(_manifest_payload(plan, manifest), indent=2), highlight=False)
        return

    if manifest.dry_run:
        for path in manifest.created_paths:
            console.out(str(path), highlight=False)
        return

    summary = {
        "Project": plan.project_name,
        "Location": str(plan.root),
        "Layers": ", ".join(plan.layers),
        "Files created": str(len(manifest.created_paths)),
    }
    if manifest.skipped_paths:
        summary["Files unchanged"] = str(len(manifest.skipped_paths))

    print_header("F4ST - Project Initialization")
    print_summary_table(summary, title="Generated project")
    print_success("Project initialized successfully!")
    console.print()
    console.print("Next steps:", highlight=False)
    console.print(f"  cd {plan.root}", highlight=False, markup=False)
    console.print("  npm install", highlight=False)
    console.print("  npm run dev", highlight=False)


def _manifest_payload(plan: GenerationPlan, manifest: Manifest) -> dict[str, Any]:
    return {
        "project": plan.project_name,
        "root": str(plan.root),
        "layers": list(plan.layers),
        "dry_run": manifest.dry_run,
        "created": [str(p) for p in manifest.created_paths],
        "skipped": [str(p) for p in manifest.skipped_paths],
    }


def _report_error(exc: ScaffoldError, json_output: bool) -> None:
    if json_output:
        err_console.out(json.dumps({"error": exc.to_dict()}, indent=2), highlight=False)
        return

    print_error(str(exc))
    for path in exc.paths:
        err_console.print(f"  {path}", highlight=False, markup=False)
    if isinstance(exc, ScaffoldIOError) and exc.manifest is not None:
        written = len(exc.manifest.created_paths)
        print_warning(
            f"{written} file(s) were written before the failure; "
            "inspect them and re-run with --force."
        )


if __name__ == "__main__":
    run()
