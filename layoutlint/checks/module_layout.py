"""Module layout check.

Verifies that the top-level declarations of every module appear in one
configured category order, e.g. ``@moduledoc`` before ``@behaviour`` before
``use`` before ``import``. Only the first misplaced entry of each category is
reported per module.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from layoutlint.parser.extractor import ParsedSource, extract_file, parse_source
from layoutlint.parser.models import (
    DeclarationCategory,
    DeclarationEntry,
    ModuleParts,
    Violation,
)


# ---------------------------------------------------------------------------
# Category Order
# ---------------------------------------------------------------------------

class CategoryOrder:
    """An ordered enumeration of declaration categories with a rank lookup.

    Lower ranks must appear first. Categories missing from the order do not
    take part in the check. Instances are immutable and safe to share between
    concurrent checks.
    """

    __slots__ = ("_categories", "_ranks")

    def __init__(self, categories: Iterable[DeclarationCategory | str]) -> None:
        ordered = tuple(DeclarationCategory(c) for c in categories)
        ranks: dict[DeclarationCategory, int] = {}
        for index, category in enumerate(ordered):
            if category in ranks:
                raise ValueError(f"Duplicate category in order: {category.value}")
            ranks[category] = index
        self._categories = ordered
        self._ranks: Mapping[DeclarationCategory, int] = MappingProxyType(ranks)

    @property
    def categories(self) -> tuple[DeclarationCategory, ...]:
        return self._categories

    @property
    def ranks(self) -> Mapping[DeclarationCategory, int]:
        """Read-only ``{category: rank}`` mapping."""
        return self._ranks

    def rank(self, category: DeclarationCategory) -> Optional[int]:
        """Return the rank of *category*, or ``None`` if it is not ordered."""
        return self._ranks.get(category)

    def describe(self) -> str:
        """Numbered explanation of the required order."""
        width = len(str(len(self._categories)))
        lines = ["Module parts should appear in the following order:", ""]
        for index, category in enumerate(self._categories, start=1):
            lines.append(f"  {index:>{width}}. {category.label}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self._categories)

    def __iter__(self):
        return iter(self._categories)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CategoryOrder):
            return NotImplemented
        return self._categories == other._categories

    def __hash__(self) -> int:
        return hash(self._categories)

    def __repr__(self) -> str:
        return f"CategoryOrder({[c.value for c in self._categories]!r})"


DEFAULT_ORDER = CategoryOrder([
    DeclarationCategory.MODULEDOC,
    DeclarationCategory.BEHAVIOUR,
    DeclarationCategory.USE,
    DeclarationCategory.IMPORT,
])

# Adapted from the community Elixir style guide's module attribute ordering.
EXTENDED_ORDER = CategoryOrder([
    DeclarationCategory.SHORTDOC,
    DeclarationCategory.MODULEDOC,
    DeclarationCategory.BEHAVIOUR,
    DeclarationCategory.USE,
    DeclarationCategory.IMPORT,
    DeclarationCategory.ALIAS,
    DeclarationCategory.REQUIRE,
    DeclarationCategory.MODULE_ATTRIBUTE,
    DeclarationCategory.DEFSTRUCT,
    DeclarationCategory.OPAQUE,
    DeclarationCategory.TYPE,
    DeclarationCategory.TYPEP,
    DeclarationCategory.CALLBACK,
    DeclarationCategory.MACROCALLBACK,
    DeclarationCategory.OPTIONAL_CALLBACKS,
    DeclarationCategory.PUBLIC_GUARD,
    DeclarationCategory.PUBLIC_MACRO,
    DeclarationCategory.PUBLIC_FUN,
    DeclarationCategory.IMPL,
    DeclarationCategory.PRIVATE_FUN,
])

PRESETS: dict[str, CategoryOrder] = {
    "default": DEFAULT_ORDER,
    "extended": EXTENDED_ORDER,
}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def placement_message(category: DeclarationCategory) -> str:
    return f"Invalid placement of {category.value}."


def validate_order(
    entries: Iterable[DeclarationEntry],
    order: CategoryOrder = DEFAULT_ORDER,
) -> list[Violation]:
    """Return the ordering violations in one module's declaration entries.

    Single left-to-right pass keeping the highest rank accepted so far. An
    entry ranked below it is out of order: the first such entry of each
    category is reported and the running maximum is left untouched. Entries
    whose category is not in *order* are ignored. Never raises.
    """
    highest: int | None = None
    reported: set[DeclarationCategory] = set()
    violations: list[Violation] = []

    for entry in entries:
        rank = order.rank(entry.category)
        if rank is None:
            continue
        if highest is not None and rank < highest:
            if entry.category not in reported:
                reported.add(entry.category)
                violations.append(
                    Violation(
                        category=entry.category,
                        line=entry.line,
                        column=entry.column,
                        message=placement_message(entry.category),
                    )
                )
            continue
        highest = rank

    return violations


# ---------------------------------------------------------------------------
# ModuleLayoutCheck
# ---------------------------------------------------------------------------

class ModuleLayoutCheck:
    """Runs :func:`validate_order` over every module of a source file."""

    name = "module-layout"

    def __init__(self, order: CategoryOrder | Sequence[DeclarationCategory | str] | None = None) -> None:
        if order is None:
            order = DEFAULT_ORDER
        elif not isinstance(order, CategoryOrder):
            order = CategoryOrder(order)
        self.order = order

    def check_modules(
        self, modules: Iterable[ModuleParts], file: str | None = None
    ) -> list[Violation]:
        """Validate each module independently; results sorted by position."""
        violations: list[Violation] = []
        for module in modules:
            for violation in validate_order(module.entries, self.order):
                violations.append(
                    violation.model_copy(update={"module": module.name, "file": file})
                )
        return sorted(violations, key=lambda v: (v.line, v.column))

    def check_source(self, source: str, file: str | None = None) -> list[Violation]:
        """Extract and validate *source*, honouring inline suppression comments.

        Raises:
            ExtractionError: If the source is malformed.
        """
        return self._check_parsed(parse_source(source), file)

    async def check_file(self, path: str | Path, display_name: str | None = None) -> list[Violation]:
        """Read, extract and validate a file off the event loop."""
        parsed = await extract_file(path)
        return self._check_parsed(parsed, display_name or str(path))

    def _check_parsed(self, parsed: ParsedSource, file: str | None) -> list[Violation]:
        if parsed.directives.file_disabled:
            return []
        return [
            v for v in self.check_modules(parsed.modules, file)
            if not parsed.directives.suppresses(v.line)
        ]
