"""Command-line entry point for catalog maintenance.

Usage::

    cuke-catalog --verbose generate --dir public/TestResultsJsons
    cuke-catalog fix-skipped cucumber.json [cucumber_fixed.json]
    cuke-catalog fix-formats --dir public/TestResultsJsons
    cuke-catalog analyze cucumber.json
    cuke-catalog cleanup --dir public/TestResultsJsons
    cuke-catalog serve
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .analysis import analyze_step_results, fix_report_formats, fix_skipped_file, load_features
from .config import load_catalog_settings
from .errors import CatalogError
from .ingestion import CatalogOrchestrator

DEFAULT_REPORTS_DIR = os.environ.get("CUKE_REPORTS_DIR", os.getcwd())


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cuke-catalog",
        description="Index, repair and clean up a directory of Cucumber JSON reports.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Rebuild index.json and stats.json")
    gen.add_argument("--dir", default=DEFAULT_REPORTS_DIR, help="Reports directory")
    gen.add_argument("--no-validate", action="store_true", help="Skip structural validation")
    gen.add_argument("--no-stats", action="store_true", help="Skip rollup statistics")
    gen.add_argument("--no-organize", action="store_true", help="Do not rename files to canonical names")

    fix = sub.add_parser("fix-skipped", help="Mark skipped steps with a duration as passed")
    fix.add_argument("input", type=Path)
    fix.add_argument("output", type=Path, nargs="?")

    fmt = sub.add_parser("fix-formats", help="Rewrite stored reports as bare feature arrays")
    fmt.add_argument("--dir", default=DEFAULT_REPORTS_DIR, help="Reports directory")

    ana = sub.add_parser("analyze", help="Print step status distribution for a report")
    ana.add_argument("input", type=Path)

    clean = sub.add_parser("cleanup", help="Hard-delete reports soft-deleted since the last deploy")
    clean.add_argument("--dir", default=DEFAULT_REPORTS_DIR, help="Reports directory")

    sub.add_parser("serve", help="Run the HTTP gateway")
    return parser.parse_args(argv)


def _generate(args: argparse.Namespace) -> int:
    settings = load_catalog_settings(
        args.dir,
        validate_reports=False if args.no_validate else None,
        generate_stats=False if args.no_stats else None,
        organize_files=False if args.no_organize else None,
    )
    index = CatalogOrchestrator(settings).rebuild()
    print(f"Index generation completed: {len(index.reports)} reports")
    if index.errors:
        print(f"Files with errors: {len(index.errors)}")
    if index.renames:
        print(f"Files renamed: {len(index.renames)}")
    if index.statistics:
        print(f"Pass rate: {index.statistics.passRate}%")
    return 0


def _fix_skipped(args: argparse.Namespace) -> int:
    fixed = fix_skipped_file(args.input, args.output)
    print(f"Fixed {fixed} steps" if fixed else "No steps needed fixing")
    return 0 if fixed else 1


def _fix_formats(args: argparse.Namespace) -> int:
    orchestrator = CatalogOrchestrator(load_catalog_settings(args.dir))
    processed = fix_report_formats(orchestrator.store)
    fixed = sum(1 for p in processed if p["action"] == "fixed")
    failed = sum(1 for p in processed if p["action"] == "error")
    if fixed:
        orchestrator.rebuild()
    print(f"Fixed {fixed} files, {failed} errors, {len(processed)} processed")
    return 1 if failed else 0


def _analyze(args: argparse.Namespace) -> int:
    print(json.dumps(analyze_step_results(load_features(args.input)), indent=2))
    return 0


def _cleanup(args: argparse.Namespace) -> int:
    result = CatalogOrchestrator(load_catalog_settings(args.dir)).cleanup()
    print(f"Deleted {len(result['deleted'])}, already gone {len(result['missing'])}, failed {len(result['failed'])}")
    return 1 if result["failed"] else 0


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    from cuke_gateway.config import config

    uvicorn.run("cuke_gateway.app:app", host=config.host, port=config.port)
    return 0


COMMANDS = {
    "generate": _generate,
    "fix-skipped": _fix_skipped,
    "fix-formats": _fix_formats,
    "analyze": _analyze,
    "cleanup": _cleanup,
    "serve": _serve,
}


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    try:
        return COMMANDS[args.command](args)
    except (CatalogError, OSError) as exc:
        print(f"{args.command} failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
