"""layoutlint configuration.

Centralised, typed configuration for a lint run. All settings use Pydantic v2
models so they are validated at construction time and can be serialised
to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from layoutlint.checks.module_layout import DEFAULT_ORDER, PRESETS, CategoryOrder
from layoutlint.parser.models import DeclarationCategory


def parse_order(value: str) -> list[DeclarationCategory]:
    """Parse a preset name (``default``/``extended``) or a comma-separated category list.

    Raises:
        ValueError: On an unknown category name.
    """
    value = value.strip()
    if value in PRESETS:
        return list(PRESETS[value].categories)
    return [DeclarationCategory(part.strip()) for part in value.split(",") if part.strip()]


def _split_list(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class LintConfig(BaseModel):
    """Global layoutlint configuration.

    Instances are typically created once by the CLI entry point and then
    passed to :class:`~layoutlint.runner.LintRunner`.
    """

    order: list[DeclarationCategory] = Field(
        default_factory=lambda: list(DEFAULT_ORDER.categories),
        description="Required declaration order, lowest rank first",
    )
    included: list[str] = Field(
        default=["lib/", "src/", "test/", "web/", "apps/"],
        description="Directories scanned when a project root is given",
    )
    excluded: list[str] = Field(
        default=["/_build/", "/deps/", "/node_modules/"],
        description="Regex patterns of paths to skip",
    )
    extensions: list[str] = Field(default=[".ex", ".exs"])
    max_concurrency: int = Field(default=8, ge=1, description="Files checked at once")

    @field_validator("order")
    @classmethod
    def _unique_order(cls, value: list[DeclarationCategory]) -> list[DeclarationCategory]:
        if not value:
            raise ValueError("Order must name at least one category")
        seen: set[DeclarationCategory] = set()
        for category in value:
            if category in seen:
                raise ValueError(f"Duplicate category in order: {category.value}")
            seen.add(category)
        return value

    @field_validator("excluded")
    @classmethod
    def _valid_patterns(cls, value: list[str]) -> list[str]:
        for pattern in value:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"Invalid exclude pattern {pattern!r}: {exc}") from exc
        return value

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def category_order(self) -> CategoryOrder:
        """Return the configured order as a :class:`CategoryOrder`."""
        return CategoryOrder(self.order)

    def with_order(self, value: str) -> "LintConfig":
        """Return a copy using *value* (preset name or comma list) as the order."""
        return self.model_copy(update={"order": LintConfig(order=parse_order(value)).order})

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "LintConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "LintConfig":
        """Build a ``LintConfig`` from environment variables.

        Recognised variables (all optional):
            LAYOUTLINT_ORDER, LAYOUTLINT_INCLUDED, LAYOUTLINT_EXCLUDED,
            LAYOUTLINT_MAX_CONCURRENCY.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("LAYOUTLINT_ORDER"):
            kwargs["order"] = parse_order(os.environ["LAYOUTLINT_ORDER"])
        if os.environ.get("LAYOUTLINT_INCLUDED"):
            kwargs["included"] = _split_list(os.environ["LAYOUTLINT_INCLUDED"])
        if os.environ.get("LAYOUTLINT_EXCLUDED"):
            kwargs["excluded"] = _split_list(os.environ["LAYOUTLINT_EXCLUDED"])
        if os.environ.get("LAYOUTLINT_MAX_CONCURRENCY"):
            kwargs["max_concurrency"] = int(os.environ["LAYOUTLINT_MAX_CONCURRENCY"])
        return cls(**kwargs)
