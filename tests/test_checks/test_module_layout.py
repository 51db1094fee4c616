"""Unit tests for the module layout check (layoutlint.checks.module_layout).

Tests cover:
- CategoryOrder ranks, presets, duplicates and description
- validate_order on directly-built entry lists
- ModuleLayoutCheck on Elixir source text and files
- Inline suppression comments
"""

from __future__ import annotations

import textwrap

import pytest

from layoutlint.checks.module_layout import (
    DEFAULT_ORDER,
    EXTENDED_ORDER,
    PRESETS,
    CategoryOrder,
    ModuleLayoutCheck,
    placement_message,
    validate_order,
)
from layoutlint.parser.extractor import ExtractionError
from layoutlint.parser.models import DeclarationCategory, DeclarationEntry


# ---------------------------------------------------------------------------
# CategoryOrder
# ---------------------------------------------------------------------------

class TestCategoryOrder:
    @pytest.mark.unit
    def test_default_ranks(self):
        assert DEFAULT_ORDER.rank(DeclarationCategory.MODULEDOC) == 0
        assert DEFAULT_ORDER.rank(DeclarationCategory.BEHAVIOUR) == 1
        assert DEFAULT_ORDER.rank(DeclarationCategory.USE) == 2
        assert DEFAULT_ORDER.rank(DeclarationCategory.IMPORT) == 3

    @pytest.mark.unit
    def test_unknown_category_has_no_rank(self):
        assert DEFAULT_ORDER.rank(DeclarationCategory.PUBLIC_FUN) is None

    @pytest.mark.unit
    def test_accepts_string_values(self):
        order = CategoryOrder(["use", "alias"])
        assert order.categories == (DeclarationCategory.USE, DeclarationCategory.ALIAS)

    @pytest.mark.unit
    def test_duplicate_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            CategoryOrder(["use", "import", "use"])

    @pytest.mark.unit
    def test_unknown_name_rejected(self):
        with pytest.raises(ValueError):
            CategoryOrder(["moduledoc", "bogus"])

    @pytest.mark.unit
    def test_ranks_are_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_ORDER.ranks[DeclarationCategory.ALIAS] = 9  # type: ignore[index]

    @pytest.mark.unit
    def test_extended_order_starts_with_docs(self):
        assert EXTENDED_ORDER.categories[:3] == (
            DeclarationCategory.SHORTDOC,
            DeclarationCategory.MODULEDOC,
            DeclarationCategory.BEHAVIOUR,
        )
        assert len(EXTENDED_ORDER) == 20
        assert EXTENDED_ORDER.rank(DeclarationCategory.PRIVATE_FUN) == 19

    @pytest.mark.unit
    def test_presets(self):
        assert PRESETS["default"] is DEFAULT_ORDER
        assert PRESETS["extended"] is EXTENDED_ORDER

    @pytest.mark.unit
    def test_equality(self):
        assert CategoryOrder(["moduledoc", "behaviour", "use", "import"]) == DEFAULT_ORDER
        assert CategoryOrder(["use"]) != DEFAULT_ORDER

    @pytest.mark.unit
    def test_describe_lists_labels_in_order(self):
        text = DEFAULT_ORDER.describe()
        assert text.startswith("Module parts should appear in the following order:")
        assert "1. @moduledoc" in text
        assert "4. import" in text
        assert text.index("@behaviour") < text.index("use")


# ---------------------------------------------------------------------------
# validate_order
# ---------------------------------------------------------------------------

class TestValidateOrder:
    @pytest.mark.unit
    def test_correct_order_has_no_violations(self, make_entries):
        assert validate_order(make_entries("doc", "behaviour", "use", "import")) == []

    @pytest.mark.unit
    def test_moduledoc_after_behaviour(self, make_entries):
        [violation] = validate_order(make_entries("behaviour", "doc"))
        assert violation.category == DeclarationCategory.MODULEDOC
        assert violation.message == "Invalid placement of moduledoc."
        assert (violation.line, violation.column) == (3, 3)

    @pytest.mark.unit
    def test_behaviour_after_use(self, make_entries):
        [violation] = validate_order(make_entries("use", "behaviour"))
        assert violation.category == DeclarationCategory.BEHAVIOUR
        assert violation.message == "Invalid placement of behaviour."

    @pytest.mark.unit
    def test_use_after_import(self, make_entries):
        [violation] = validate_order(make_entries("import", "use"))
        assert violation.category == DeclarationCategory.USE
        assert violation.message == "Invalid placement of use."

    @pytest.mark.unit
    def test_repeated_category_never_conflicts(self, make_entries):
        assert validate_order(make_entries("doc", "doc", "behaviour")) == []
        assert validate_order(make_entries("use", "use", "import", "import")) == []

    @pytest.mark.unit
    def test_empty_entries(self):
        assert validate_order([]) == []

    @pytest.mark.unit
    def test_absent_categories_are_skipped(self, make_entries):
        assert validate_order(make_entries("doc", "import")) == []

    @pytest.mark.unit
    def test_only_first_offender_per_category(self, make_entries):
        violations = validate_order(make_entries("import", "use", "use", "doc"))
        assert [v.category for v in violations] == [
            DeclarationCategory.USE,
            DeclarationCategory.MODULEDOC,
        ]
        assert violations[0].line == 3

    @pytest.mark.unit
    def test_running_maximum_not_lowered_by_violation(self, make_entries):
        # behaviour is misplaced after import; use is still behind import.
        violations = validate_order(make_entries("import", "behaviour", "use"))
        assert [v.category for v in violations] == [
            DeclarationCategory.BEHAVIOUR,
            DeclarationCategory.USE,
        ]

    @pytest.mark.unit
    def test_unordered_categories_ignored(self, make_entries):
        entries = make_entries("use", "public_fun", "private_fun", "import")
        assert validate_order(entries) == []

    @pytest.mark.unit
    def test_unordered_category_does_not_reset_maximum(self, make_entries):
        [violation] = validate_order(make_entries("import", "public_fun", "use"))
        assert violation.category == DeclarationCategory.USE

    @pytest.mark.unit
    def test_custom_order(self, make_entries):
        order = CategoryOrder(["import", "use"])
        assert validate_order(make_entries("import", "use"), order) == []
        [violation] = validate_order(make_entries("use", "import"), order)
        assert violation.category == DeclarationCategory.IMPORT

    @pytest.mark.unit
    def test_idempotent(self, make_entries):
        entries = make_entries("use", "doc", "import", "behaviour")
        assert validate_order(entries) == validate_order(entries)

    @pytest.mark.unit
    def test_accepts_any_iterable(self, make_entries):
        entries = make_entries("behaviour", "doc")
        assert len(validate_order(iter(entries))) == 1

    @pytest.mark.unit
    def test_placement_message(self):
        assert placement_message(DeclarationCategory.MODULE_ATTRIBUTE) == (
            "Invalid placement of module_attribute."
        )

    @pytest.mark.unit
    def test_single_out_of_order_transition_reports_its_position(self):
        entries = [
            DeclarationEntry(category=DeclarationCategory.MODULEDOC, line=2, column=3),
            DeclarationEntry(category=DeclarationCategory.IMPORT, line=4, column=3),
            DeclarationEntry(category=DeclarationCategory.BEHAVIOUR, line=9, column=5),
        ]
        [violation] = validate_order(entries)
        assert (violation.category, violation.line, violation.column) == (
            DeclarationCategory.BEHAVIOUR, 9, 5,
        )
        assert violation.module is None
        assert violation.file is None


# ---------------------------------------------------------------------------
# ModuleLayoutCheck on source text
# ---------------------------------------------------------------------------

class TestModuleLayoutCheck:
    @pytest.fixture
    def check(self) -> ModuleLayoutCheck:
        return ModuleLayoutCheck()

    @pytest.mark.unit
    def test_default_order(self, check):
        assert check.order is DEFAULT_ORDER

    @pytest.mark.unit
    def test_order_from_list(self):
        check = ModuleLayoutCheck(["use", "import"])
        assert check.order == CategoryOrder(["use", "import"])

    @pytest.mark.unit
    def test_good_layout(self, check, good_source):
        assert check.check_source(good_source) == []

    @pytest.mark.unit
    def test_moduledoc_must_appear_before_behaviour(self, check):
        source = textwrap.dedent(
            """\
            defmodule Test do
              @behaviour GenServer
              @moduledoc "some doc"
            end
            """
        )
        [issue] = check.check_source(source, file="lib/test.ex")
        assert issue.message == "Invalid placement of moduledoc."
        assert (issue.line, issue.column) == (3, 3)
        assert issue.module == "Test"
        assert issue.file == "lib/test.ex"

    @pytest.mark.unit
    def test_behaviour_must_appear_before_use(self, check):
        source = "defmodule Test do\n  use GenServer\n  @behaviour GenServer\nend\n"
        [issue] = check.check_source(source)
        assert issue.message == "Invalid placement of behaviour."

    @pytest.mark.unit
    def test_use_must_appear_before_import(self, check):
        source = "defmodule Test do\n  import GenServer\n  use GenServer\nend\n"
        [issue] = check.check_source(source)
        assert issue.message == "Invalid placement of use."

    @pytest.mark.unit
    def test_violations_sorted_by_position(self, check, bad_source):
        issues = check.check_source(bad_source)
        assert [(i.category, i.line) for i in issues] == [
            (DeclarationCategory.MODULEDOC, 3),
            (DeclarationCategory.USE, 8),
        ]

    @pytest.mark.unit
    def test_each_module_checked_independently(self, check):
        source = textwrap.dedent(
            """\
            defmodule A do
              import Enum
            end

            defmodule B do
              use GenServer
              import Enum
            end
            """
        )
        assert check.check_source(source) == []

    @pytest.mark.unit
    def test_nested_module_reported_with_qualified_name(self, check):
        source = textwrap.dedent(
            """\
            defmodule Outer do
              @moduledoc false

              defmodule Inner do
                use GenServer
                @behaviour GenServer
              end

              use Agent
            end
            """
        )
        [issue] = check.check_source(source)
        assert issue.module == "Outer.Inner"
        assert issue.line == 6
        assert issue.column == 5

    @pytest.mark.unit
    def test_extended_order_checks_functions(self):
        source = textwrap.dedent(
            """\
            defmodule Test do
              def run, do: :ok
              alias Foo.Bar
            end
            """
        )
        assert ModuleLayoutCheck().check_source(source) == []
        [issue] = ModuleLayoutCheck(EXTENDED_ORDER).check_source(source)
        assert issue.category == DeclarationCategory.ALIAS

    @pytest.mark.unit
    def test_malformed_source_raises(self, check):
        with pytest.raises(ExtractionError):
            check.check_source("defmodule Test do\n  use GenServer\n")


# ---------------------------------------------------------------------------
# Inline suppression
# ---------------------------------------------------------------------------

class TestSuppression:
    @pytest.mark.unit
    def test_disable_for_this_file(self):
        source = (
            "# layoutlint:disable-for-this-file\n"
            "defmodule Test do\n  import Enum\n  use GenServer\nend\n"
        )
        assert ModuleLayoutCheck().check_source(source) == []

    @pytest.mark.unit
    def test_disable_for_next_line(self):
        source = textwrap.dedent(
            """\
            defmodule Test do
              import Enum
              # layoutlint:disable-for-next-line
              use GenServer
              @behaviour GenServer
            end
            """
        )
        [issue] = ModuleLayoutCheck().check_source(source)
        assert issue.category == DeclarationCategory.BEHAVIOUR

    @pytest.mark.unit
    def test_directive_inside_string_is_ignored(self):
        source = textwrap.dedent(
            """\
            defmodule Test do
              @moduledoc "# layoutlint:disable-for-this-file"
              import Enum
              use GenServer
            end
            """
        )
        assert len(ModuleLayoutCheck().check_source(source)) == 1


# ---------------------------------------------------------------------------
# check_file
# ---------------------------------------------------------------------------

class TestCheckFile:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_check_file_uses_display_name(self, tmp_path, bad_source):
        path = tmp_path / "worker.ex"
        path.write_text(bad_source, encoding="utf-8")

        issues = await ModuleLayoutCheck().check_file(path, "lib/worker.ex")

        assert len(issues) == 2
        assert all(i.file == "lib/worker.ex" for i in issues)
        assert all(i.module == "MyApp.Worker" for i in issues)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_check_file_defaults_to_path(self, tmp_path, good_source):
        path = tmp_path / "good.ex"
        path.write_text(good_source, encoding="utf-8")
        assert await ModuleLayoutCheck().check_file(path) == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            await ModuleLayoutCheck().check_file(tmp_path / "missing.ex")
