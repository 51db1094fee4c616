"""Shared pytest fixtures for the layoutlint test suite.

Provides reusable fixtures for:
- Building declaration entry lists directly (no parser needed)
- Sample Elixir sources with good and bad layouts
- Temporary Elixir project trees
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable

import pytest

from layoutlint.parser.models import DeclarationCategory, DeclarationEntry


# ---------------------------------------------------------------------------
# Entry builders
# ---------------------------------------------------------------------------

_SHORT_NAMES = {
    "doc": DeclarationCategory.MODULEDOC,
    "behaviour": DeclarationCategory.BEHAVIOUR,
    "use": DeclarationCategory.USE,
    "import": DeclarationCategory.IMPORT,
}


@pytest.fixture
def make_entries() -> Callable[..., list[DeclarationEntry]]:
    """Build entries from short names, one per line starting at line 2.

    ``make_entries("doc", "use")`` -> moduledoc at 2:3, use at 3:3.
    Full category values (``"public_fun"``) are accepted too.
    """

    def _make(*names: str) -> list[DeclarationEntry]:
        return [
            DeclarationEntry(
                category=_SHORT_NAMES.get(name) or DeclarationCategory(name),
                line=index + 2,
                column=3,
            )
            for index, name in enumerate(names)
        ]

    return _make


# ---------------------------------------------------------------------------
# Sample sources
# ---------------------------------------------------------------------------

@pytest.fixture
def good_source() -> str:
    """A module whose parts follow the default order."""
    return textwrap.dedent(
        """\
        defmodule Test do
          @moduledoc "some doc"

          @behaviour GenServer
          @behaviour Supervisor

          use GenServer

          import GenServer
        end
        """
    )


@pytest.fixture
def bad_source() -> str:
    """A module with @moduledoc after @behaviour and use after import."""
    return textwrap.dedent(
        """\
        defmodule MyApp.Worker do
          @behaviour GenServer
          @moduledoc \"\"\"
          Does work. Mentions do and end in prose.
          \"\"\"

          import Enum
          use GenServer

          def start_link(opts), do: GenServer.start_link(__MODULE__, opts)
        end
        """
    )


# ---------------------------------------------------------------------------
# Project trees
# ---------------------------------------------------------------------------

@pytest.fixture
def elixir_project(tmp_path: Path, good_source: str, bad_source: str) -> Path:
    """A small Mix-style project with lib/, test/ and a deps/ directory."""
    root = tmp_path / "my_app"
    (root / "lib" / "my_app").mkdir(parents=True)
    (root / "test").mkdir()
    (root / "deps" / "dep" / "lib").mkdir(parents=True)
    (root / "_build" / "dev").mkdir(parents=True)

    (root / "lib" / "my_app.ex").write_text(good_source, encoding="utf-8")
    (root / "lib" / "my_app" / "worker.ex").write_text(bad_source, encoding="utf-8")
    (root / "test" / "my_app_test.exs").write_text(
        "defmodule MyAppTest do\n  use ExUnit.Case\nend\n", encoding="utf-8"
    )
    (root / "lib" / "README.md").write_text("# not elixir\n", encoding="utf-8")
    # Dependency code is never checked.
    (root / "deps" / "dep" / "lib" / "dep.ex").write_text(bad_source, encoding="utf-8")
    (root / "_build" / "dev" / "gen.ex").write_text(bad_source, encoding="utf-8")
    yield root
