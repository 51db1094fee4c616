"""layoutlint declaration parser.

Splits Elixir source files into modules and their ordered top-level
declarations, ready for the module layout check.

Usage::

    from layoutlint.parser import extract_modules

    for module in extract_modules(source):
        print(module.name, [entry.category for entry in module.entries])
"""

from layoutlint.parser.models import (
    DeclarationCategory,
    DeclarationEntry,
    ModuleParts,
    Violation,
)
from layoutlint.parser.extractor import (
    Directives,
    ExtractionError,
    ParsedSource,
    extract_directives,
    extract_file,
    extract_modules,
    parse_source,
)

__all__ = [
    "DeclarationCategory",
    "DeclarationEntry",
    "ModuleParts",
    "Violation",
    "Directives",
    "ExtractionError",
    "ParsedSource",
    "extract_directives",
    "extract_file",
    "extract_modules",
    "parse_source",
]
