"""Command-line entry point for layoutlint.

Usage::

    layoutlint lib/ test/
    layoutlint . --order extended --format markdown --output docs/layout.md
    python -m layoutlint --explain
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from pydantic import ValidationError
from rich.markup import escape

from layoutlint.config import LintConfig
from layoutlint.reporter import ReportRenderer
from layoutlint.runner import LintRunner
from layoutlint.utils import console, print_error, print_header, print_success, print_warning

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="layoutlint",
        description="layoutlint -- check the declaration order of Elixir modules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  layoutlint lib/ test/\n"
            "  layoutlint . --order extended\n"
            "  layoutlint . --order moduledoc,behaviour,use,import,alias\n"
            "  layoutlint . --format json --output layout.json\n"
        ),
    )
    parser.add_argument(
        "paths",
        nargs="*",
        default=["."],
        help="Files or directories to check (default: current directory)",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="JSON configuration file (default: LAYOUTLINT_* environment variables)",
    )
    parser.add_argument(
        "--order",
        default=None,
        help="Preset name (default, extended) or comma-separated category list",
    )
    parser.add_argument(
        "--format", "-f",
        dest="fmt",
        choices=("table", "json", "markdown"),
        default="table",
        help="Report format (default: table)",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Write the json or markdown report to this file instead of the console",
    )
    parser.add_argument(
        "--explain",
        action="store_true",
        help="Print the required declaration order and exit",
    )
    return parser


def _load_config(args: argparse.Namespace) -> LintConfig:
    config = LintConfig.load(Path(args.config)) if args.config else LintConfig.from_env()
    if args.order:
        config = config.with_order(args.order)
    return config


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``layoutlint`` and ``python -m layoutlint``."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.output and args.fmt == "table":
        print_error("Error: --output needs --format json or --format markdown")
        return EXIT_USAGE

    try:
        config = _load_config(args)
    except (ValidationError, ValueError, OSError) as exc:
        print_error(f"Error: invalid configuration: {escape(str(exc))}")
        return EXIT_USAGE

    if args.explain:
        console.print(config.category_order().describe())
        return EXIT_OK

    missing = [p for p in args.paths if not Path(p).exists()]
    if missing:
        print_error(f"Error: path not found: {escape(', '.join(missing))}")
        return EXIT_USAGE

    runner = LintRunner(config)
    report = asyncio.run(runner.run(args.paths))

    if args.fmt == "table":
        print_header("Module Layout")
        runner.print_report(report)
        if report.files_checked == 0 and not report.errors:
            print_warning("No Elixir source files found")
    else:
        renderer = ReportRenderer()
        if args.output:
            path = asyncio.run(renderer.write(report, args.output, args.fmt))
            print_success(f"Report written to {path}")
        else:
            console.print(
                renderer.render(report, args.fmt),
                markup=False, highlight=False, emoji=False, soft_wrap=True,
            )

    return EXIT_OK if report.passed else EXIT_FAILED


if __name__ == "__main__":
    raise SystemExit(main())
