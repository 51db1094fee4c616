"""layoutlint -- module layout checks for Elixir source files.

Verifies that the top-level declarations of every module appear in a
configured order (``@moduledoc``, ``@behaviour``, ``use``, ``import``, ...)
and reports the first misplaced entry of each category.

Usage::

    from layoutlint import ModuleLayoutCheck

    violations = ModuleLayoutCheck().check_source(source, file="lib/my_app.ex")
"""

from layoutlint.checks.module_layout import (
    DEFAULT_ORDER,
    EXTENDED_ORDER,
    CategoryOrder,
    ModuleLayoutCheck,
    validate_order,
)
from layoutlint.config import LintConfig
from layoutlint.parser.extractor import ExtractionError, extract_modules
from layoutlint.parser.models import DeclarationCategory, DeclarationEntry, Violation
from layoutlint.runner import LintReport, LintRunner

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_ORDER",
    "EXTENDED_ORDER",
    "CategoryOrder",
    "ModuleLayoutCheck",
    "validate_order",
    "LintConfig",
    "ExtractionError",
    "extract_modules",
    "DeclarationCategory",
    "DeclarationEntry",
    "Violation",
    "LintReport",
    "LintRunner",
]
