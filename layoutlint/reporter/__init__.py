"""Report rendering for layoutlint runs."""

from layoutlint.reporter.renderer import FORMATS, ReportRenderer

__all__ = ["FORMATS", "ReportRenderer"]
