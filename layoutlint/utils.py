"""Shared utility functions for layoutlint.

Provides source file discovery, path formatting, and Rich-based console
output helpers used by the runner and the CLI.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from rich.console import Console
from rich.rule import Rule

console = Console()

_SKIP_DIRS = {".git", "_build", "deps", "node_modules", ".elixir_ls"}

# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def collect_files(
    root: Path,
    extensions: Iterable[str],
    excluded: Iterable[str] = (),
) -> list[Path]:
    """Recursively collect files matching *extensions* under *root*.

    Skips build and dependency directories, and any path (as a forward-slash
    string) matching one of the *excluded* regex patterns. Results are sorted.
    """
    return _walk(root, set(extensions), [re.compile(p) for p in excluded])


def _walk(root: Path, suffixes: set[str], patterns: list[re.Pattern[str]]) -> list[Path]:
    results: list[Path] = []
    for child in sorted(root.iterdir()):
        is_dir = child.is_dir()
        text = child.as_posix() + ("/" if is_dir else "")
        if any(p.search(text) for p in patterns):
            continue
        if is_dir:
            if child.name not in _SKIP_DIRS:
                results.extend(_walk(child, suffixes, patterns))
        elif child.suffix in suffixes:
            results.append(child)
    return results


def relative(path: Path, root: Path) -> str:
    """Return *path* relative to *root* as a forward-slash string."""
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(0.42)  -> "0.42s"
        format_duration(65.2)  -> "1m 5s"
    """
    if seconds < 0:
        return "0.00s"
    minutes = int(seconds // 60)
    if minutes:
        return f"{minutes}m {int(seconds % 60)}s"
    return f"{seconds:.2f}s"


def pluralize(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_header(title: str) -> None:
    """Print a full-width rule with *title*."""
    console.print()
    console.print(Rule(f"[bold cyan] {title} [/bold cyan]", style="cyan"))
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
