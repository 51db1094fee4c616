"""Lint runner for layoutlint.

Expands project paths into Elixir source files, checks them concurrently with
:class:`~layoutlint.checks.module_layout.ModuleLayoutCheck`, and collects the
results into a single :class:`LintReport`. Failures on one file are isolated
so the rest of the run continues.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, computed_field
from rich.markup import escape
from rich.table import Table

from layoutlint.checks.module_layout import ModuleLayoutCheck
from layoutlint.config import LintConfig
from layoutlint.parser.extractor import ExtractionError
from layoutlint.parser.models import Violation
from layoutlint.utils import collect_files, console, format_duration, pluralize, relative


# ---------------------------------------------------------------------------
# Report Models
# ---------------------------------------------------------------------------

class FileError(BaseModel):
    """A file that could not be checked."""

    file: str = Field(..., description="Path of the offending file")
    line: Optional[int] = Field(default=None, description="Line of the failure, when known")
    message: str = Field(..., description="Human-readable reason")


class LintReport(BaseModel):
    """Aggregated result of a lint run."""

    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="ISO-8601 timestamp of the run",
    )
    order: list[str] = Field(default_factory=list, description="Category order enforced")
    files_checked: int = Field(default=0, ge=0)
    violations: list[Violation] = Field(default_factory=list)
    errors: list[FileError] = Field(default_factory=list)
    duration: float = Field(default=0.0, ge=0.0, description="Wall-clock seconds")

    @computed_field
    @property
    def passed(self) -> bool:
        return not self.violations and not self.errors


# ---------------------------------------------------------------------------
# LintRunner
# ---------------------------------------------------------------------------

class LintRunner:
    """Checks a set of files and directories for module layout violations.

    Usage::

        runner = LintRunner(LintConfig())
        report = await runner.run(["lib/", "test/my_test.exs"])
        runner.print_report(report)
    """

    def __init__(self, config: LintConfig | None = None, check: ModuleLayoutCheck | None = None) -> None:
        self.config = config or LintConfig()
        self._check = check or ModuleLayoutCheck(self.config.category_order())

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self, paths: list[str | Path], base_dir: str | Path | None = None) -> LintReport:
        """Check every source file reachable from *paths*.

        Parameters
        ----------
        paths:
            Files and directories. A directory is scanned through its
            ``included`` subdirectories when it has any, otherwise as a whole.
            Files named explicitly are always checked.
        base_dir:
            Directory file names in the report are made relative to.
            Defaults to the current working directory.

        Returns
        -------
        LintReport
            Violations sorted by file and position, plus per-file errors.
        """
        started = time.monotonic()
        base = Path(base_dir or Path.cwd()).resolve()
        files, errors = self.discover(paths)

        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def _bounded(path: Path) -> tuple[list[Violation], FileError | None]:
            async with semaphore:
                return await self._check_one(path, relative(path.resolve(), base))

        results = await asyncio.gather(*(_bounded(f) for f in files))

        violations: list[Violation] = []
        for file_violations, error in results:
            violations.extend(file_violations)
            if error is not None:
                errors.append(error)

        violations.sort(key=lambda v: (v.file or "", v.line, v.column))
        errors.sort(key=lambda e: (e.file, e.line or 0))

        return LintReport(
            order=[c.value for c in self._check.order],
            files_checked=len(files),
            violations=violations,
            errors=errors,
            duration=time.monotonic() - started,
        )

    def discover(self, paths: list[str | Path]) -> tuple[list[Path], list[FileError]]:
        """Expand *paths* into a de-duplicated list of source files."""
        files: list[Path] = []
        errors: list[FileError] = []
        seen: set[Path] = set()

        for raw in paths:
            path = Path(raw)
            if path.is_file():
                candidates = [path]
            elif path.is_dir():
                candidates = self._expand_directory(path)
            else:
                errors.append(FileError(file=str(raw), message="Path does not exist"))
                continue
            for candidate in candidates:
                key = candidate.resolve()
                if key not in seen:
                    seen.add(key)
                    files.append(candidate)

        return files, errors

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _expand_directory(self, directory: Path) -> list[Path]:
        roots = [
            directory / name.rstrip("/")
            for name in self.config.included
            if (directory / name.rstrip("/")).is_dir()
        ]
        files: list[Path] = []
        for root in roots or [directory]:
            files.extend(collect_files(root, self.config.extensions, self.config.excluded))
        return files

    async def _check_one(self, path: Path, display_name: str) -> tuple[list[Violation], FileError | None]:
        """Check one file, turning read and parse failures into a FileError."""
        try:
            return await self._check.check_file(path, display_name), None
        except ExtractionError as exc:
            return [], FileError(file=display_name, line=exc.line, message=f"Could not parse: {exc}")
        except UnicodeDecodeError:
            return [], FileError(file=display_name, message="File is not valid UTF-8")
        except OSError as exc:
            return [], FileError(file=display_name, message=f"Could not read file: {exc}")

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def print_report(self, report: LintReport) -> None:
        """Pretty-print a lint report to the console using Rich."""
        if report.violations:
            table = Table(title="Module Layout Violations", show_lines=False)
            table.add_column("Location", style="cyan", no_wrap=True)
            table.add_column("Module", style="magenta")
            table.add_column("Category", width=20)
            table.add_column("Message")
            for v in report.violations:
                table.add_row(escape(v.location), v.module or "", v.category.value, escape(v.message))
            console.print(table)

        for error in report.errors:
            loc = error.file if error.line is None else f"{error.file}:{error.line}"
            console.print(f"[red]error[/red] {escape(loc)}: {escape(error.message)}")

        color = "green" if report.passed else "red"
        console.print(
            f"\n[bold {color}]{pluralize(report.files_checked, 'file')} checked, "
            f"{pluralize(len(report.violations), 'violation')}, "
            f"{pluralize(len(report.errors), 'error')}[/bold {color}] "
            f"[dim]({format_duration(report.duration)})[/dim]"
        )
