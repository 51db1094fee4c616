"""Report rendering for lint results.

Provides the ReportRenderer class which renders a
:class:`~layoutlint.runner.LintReport` to Markdown using Jinja2 templates from
the ``layoutlint/reporter/templates/`` directory, or to JSON through Pydantic
serialisation.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from layoutlint.runner import LintReport

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

FORMATS = ("markdown", "json")


class ReportRenderer:
    """Renders lint reports as Markdown or JSON."""

    MARKDOWN_TEMPLATE = "report.md.j2"

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render_markdown(self, report: LintReport) -> str:
        template = self.env.get_template(self.MARKDOWN_TEMPLATE)
        return template.render(report=report)

    def render_json(self, report: LintReport) -> str:
        return report.model_dump_json(indent=2)

    def render(self, report: LintReport, fmt: str) -> str:
        """Render *report* in *fmt* (``markdown`` or ``json``).

        Raises:
            ValueError: On an unknown format.
        """
        if fmt == "markdown":
            return self.render_markdown(report)
        if fmt == "json":
            return self.render_json(report)
        raise ValueError(f"Unknown report format: {fmt!r} (expected one of {', '.join(FORMATS)})")

    async def write(self, report: LintReport, output_path: str | Path, fmt: str) -> Path:
        """Render *report* and write it to *output_path*.

        Parent directories are created automatically.  Returns the output path.
        """
        content = self.render(report, fmt)
        out = Path(output_path)
        await asyncio.to_thread(_write_file, out, content)
        return out


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
