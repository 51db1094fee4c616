"""Pydantic v2 models for the layoutlint declaration parser.

Defines the declaration categories recognised inside an Elixir module body,
the positioned entries the extractor produces, and the violation records the
module layout check reports.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class DeclarationCategory(str, Enum):
    """A class of top-level module construct subject to ordering rules."""
    SHORTDOC = "shortdoc"
    MODULEDOC = "moduledoc"
    BEHAVIOUR = "behaviour"
    USE = "use"
    IMPORT = "import"
    ALIAS = "alias"
    REQUIRE = "require"
    MODULE_ATTRIBUTE = "module_attribute"
    DEFSTRUCT = "defstruct"
    OPAQUE = "opaque"
    TYPE = "type"
    TYPEP = "typep"
    CALLBACK = "callback"
    MACROCALLBACK = "macrocallback"
    OPTIONAL_CALLBACKS = "optional_callbacks"
    PUBLIC_GUARD = "public_guard"
    PUBLIC_MACRO = "public_macro"
    PUBLIC_FUN = "public_fun"
    IMPL = "impl"
    PRIVATE_FUN = "private_fun"
    PRIVATE_MACRO = "private_macro"
    PRIVATE_GUARD = "private_guard"

    @property
    def label(self) -> str:
        """Human-readable name, e.g. ``"public function"``."""
        return _LABELS.get(self, self.value)


_LABELS: dict[DeclarationCategory, str] = {
    DeclarationCategory.SHORTDOC: "@shortdoc",
    DeclarationCategory.MODULEDOC: "@moduledoc",
    DeclarationCategory.BEHAVIOUR: "@behaviour",
    DeclarationCategory.MODULE_ATTRIBUTE: "custom module attributes",
    DeclarationCategory.OPAQUE: "@opaque",
    DeclarationCategory.TYPE: "@type",
    DeclarationCategory.TYPEP: "@typep",
    DeclarationCategory.CALLBACK: "@callback",
    DeclarationCategory.MACROCALLBACK: "@macrocallback",
    DeclarationCategory.OPTIONAL_CALLBACKS: "@optional_callbacks",
    DeclarationCategory.PUBLIC_GUARD: "public guards",
    DeclarationCategory.PUBLIC_MACRO: "public macros",
    DeclarationCategory.PUBLIC_FUN: "public functions",
    DeclarationCategory.IMPL: "behaviour callbacks",
    DeclarationCategory.PRIVATE_FUN: "private functions",
    DeclarationCategory.PRIVATE_MACRO: "private macros",
    DeclarationCategory.PRIVATE_GUARD: "private guards",
}


# ---------------------------------------------------------------------------
# Declaration Models
# ---------------------------------------------------------------------------

class DeclarationEntry(BaseModel):
    """One top-level construct found in a module body."""
    model_config = ConfigDict(frozen=True)

    category: DeclarationCategory = Field(..., description="Declaration category")
    line: int = Field(..., ge=1, description="1-based source line")
    column: int = Field(default=1, ge=1, description="1-based source column")


class ModuleParts(BaseModel):
    """A ``defmodule`` and its top-level declarations in source order."""
    name: str = Field(..., description="Fully-qualified module name")
    line: int = Field(..., ge=1, description="Line of the defmodule keyword")
    column: int = Field(default=1, ge=1, description="Column of the defmodule keyword")
    entries: list[DeclarationEntry] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Violation Model
# ---------------------------------------------------------------------------

class Violation(BaseModel):
    """A declaration found out of its required relative order."""
    model_config = ConfigDict(frozen=True)

    category: DeclarationCategory = Field(..., description="Category of the misplaced entry")
    line: int = Field(..., ge=1)
    column: int = Field(default=1, ge=1)
    message: str = Field(..., description="Human-readable description")
    module: Optional[str] = Field(default=None, description="Enclosing module name")
    file: Optional[str] = Field(default=None, description="Source file, when known")

    @property
    def location(self) -> str:
        """``file:line:column`` (file omitted when unknown)."""
        loc = f"{self.line}:{self.column}"
        return f"{self.file}:{loc}" if self.file else loc
