"""Declaration extractor for Elixir source modules.

Turns Elixir source text into the flat, ordered list of top-level
declarations found in every ``defmodule`` body. Uses line-based lexical
scanning and regular expressions -- no Elixir runtime is needed.

Strings, charlists, sigils, heredocs and comments are blanked before keyword
scanning, and ``do``/``fn``/``end`` tokens are counted to know which lines sit
directly in a module body.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from .models import DeclarationCategory, DeclarationEntry, ModuleParts


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ExtractionError(Exception):
    """Raised when source text cannot be split into module declarations."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        super().__init__(f"line {line}: {message}" if line is not None else message)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_DEFMODULE_PATTERN = re.compile(r"^defmodule\s+((?:__MODULE__\.)?[A-Z][\w.]*)")
_ATTRIBUTE_PATTERN = re.compile(r"^@([a-z_]\w*)(.*)$")
_KEYWORD_PATTERN = re.compile(r"^(use|import|alias|require|defstruct)(?=[\s(]|$)")
_DEF_PATTERN = re.compile(
    r"^(defmacrop|defmacro|defguardp|defguard|defp|def)(?=[\s(]|$)"
)
_BLOCK_TOKEN_PATTERN = re.compile(r"(?<![\w:.@?!])(do|fn|end)(?![\w?!:])")
_SIGIL_PATTERN = re.compile(r"~(?:[a-z]|[A-Z][A-Z0-9]*)")
_DIRECTIVE_PATTERN = re.compile(r"^layoutlint:(disable-for-this-file|disable-for-next-line)\b")

_SIGIL_DELIMITERS = {
    "(": ")", "[": "]", "{": "}", "<": ">",
    "/": "/", "|": "|", '"': '"', "'": "'",
}

_ATTRIBUTE_CATEGORIES: dict[str, DeclarationCategory] = {
    "moduledoc": DeclarationCategory.MODULEDOC,
    "shortdoc": DeclarationCategory.SHORTDOC,
    "behaviour": DeclarationCategory.BEHAVIOUR,
    "type": DeclarationCategory.TYPE,
    "typep": DeclarationCategory.TYPEP,
    "opaque": DeclarationCategory.OPAQUE,
    "callback": DeclarationCategory.CALLBACK,
    "macrocallback": DeclarationCategory.MACROCALLBACK,
    "optional_callbacks": DeclarationCategory.OPTIONAL_CALLBACKS,
}

# Compiler and documentation attributes that are not part of the layout.
_IGNORED_ATTRIBUTES = frozenset({
    "after_compile", "before_compile", "compile", "deprecated", "doc",
    "typedoc", "dialyzer", "external_resource", "file", "on_definition",
    "on_load", "vsn", "spec", "impl",
})

_KEYWORD_CATEGORIES: dict[str, DeclarationCategory] = {
    "use": DeclarationCategory.USE,
    "import": DeclarationCategory.IMPORT,
    "alias": DeclarationCategory.ALIAS,
    "require": DeclarationCategory.REQUIRE,
    "defstruct": DeclarationCategory.DEFSTRUCT,
}

_PRIVATE = "private"
_IMPL = "impl"


# ---------------------------------------------------------------------------
# Result Models
# ---------------------------------------------------------------------------

class Directives(BaseModel):
    """Inline suppression comments found in a source file."""
    file_disabled: bool = Field(default=False)
    disabled_lines: set[int] = Field(
        default_factory=set, description="Lines whose violations are suppressed"
    )

    def suppresses(self, line: int) -> bool:
        return self.file_disabled or line in self.disabled_lines


class ParsedSource(BaseModel):
    """Everything the extractor learns from one source file."""
    modules: list[ModuleParts] = Field(default_factory=list)
    directives: Directives = Field(default_factory=Directives)


# ---------------------------------------------------------------------------
# Lexical Scanning
# ---------------------------------------------------------------------------

def _skip_interpolation(line: str, start: int) -> Optional[int]:
    """Return the index just past the ``}`` closing an interpolation.

    String and charlist literals inside the interpolation are skipped whole,
    so braces within them do not count.
    """
    depth = 1
    i = start
    n = len(line)
    while i < n:
        ch = line[i]
        if ch in "\"'":
            end = _skip_delimited(line, i + 1, ch, ch)
            if end is None:
                return None
            i = end
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return None


def _skip_delimited(
    line: str, start: int, opener: str, closer: str, interpolates: bool = True
) -> Optional[int]:
    """Return the index just past *closer*, or ``None`` if the line ends first.

    ``#{...}`` is only treated as interpolation when *interpolates* is set;
    uppercase sigils such as ``~S`` take their content literally.
    """
    depth = 0
    i = start
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if interpolates and line.startswith("#{", i):
            end = _skip_interpolation(line, i + 2)
            if end is None:
                return None
            i = end
            continue
        if opener != closer and ch == opener:
            depth += 1
        elif ch == closer:
            if depth == 0:
                return i + 1
            depth -= 1
        i += 1
    return None


class _LineScanner:
    """Blanks literal and comment text, one physical line at a time.

    Heredoc and multi-line string state is carried between lines so the caller
    only ever sees code. Blanked characters become spaces, keeping columns.
    """

    __slots__ = ("heredoc", "open_string", "open_line")

    def __init__(self) -> None:
        self.heredoc: str | None = None
        self.open_string: tuple[str, str, bool] | None = None
        self.open_line = 0

    @property
    def pending(self) -> bool:
        return self.heredoc is not None or self.open_string is not None

    def scan(self, line: str, lineno: int) -> tuple[str, str]:
        """Return ``(code, comment)`` for *line*."""
        out = [" "] * len(line)
        n = len(line)
        i = 0

        if self.heredoc is not None:
            stripped = line.lstrip()
            if not stripped.startswith(self.heredoc):
                return "".join(out), ""
            i = n - len(stripped) + 3
            while i < n and line[i].isalpha():
                i += 1
            self.heredoc = None
        elif self.open_string is not None:
            end = _skip_delimited(line, 0, *self.open_string)
            if end is None:
                return "".join(out), ""
            self.open_string = None
            i = end

        comment = ""
        while i < n:
            ch = line[i]
            if ch == "#":
                comment = line[i + 1:].strip()
                break
            if line.startswith('"""', i) or line.startswith("'''", i):
                self._open_heredoc(line[i:i + 3], lineno)
                break
            if ch in "\"'":
                end = _skip_delimited(line, i + 1, ch, ch)
                if end is None:
                    self._open_string(ch, ch, lineno)
                    break
                i = end
                continue
            if ch == "?" and i + 1 < n and (i == 0 or not (line[i - 1].isalnum() or line[i - 1] == "_")):
                # Character literal such as ?a or ?\n
                i += 3 if line[i + 1] == "\\" else 2
                continue
            if ch == "~":
                match = _SIGIL_PATTERN.match(line, i)
                if match and match.end() < n:
                    j = match.end()
                    if line.startswith('"""', j) or line.startswith("'''", j):
                        self._open_heredoc(line[j:j + 3], lineno)
                        break
                    closer = _SIGIL_DELIMITERS.get(line[j])
                    if closer is not None:
                        interpolates = line[i + 1].islower()
                        end = _skip_delimited(line, j + 1, line[j], closer, interpolates)
                        if end is None:
                            self._open_string(line[j], closer, lineno, interpolates)
                            break
                        i = end
                        while i < n and line[i].isalpha():
                            i += 1
                        continue
            out[i] = ch
            i += 1

        return "".join(out), comment

    def _open_heredoc(self, delimiter: str, lineno: int) -> None:
        self.heredoc = delimiter
        self.open_line = lineno

    def _open_string(
        self, opener: str, closer: str, lineno: int, interpolates: bool = True
    ) -> None:
        self.open_string = (opener, closer, interpolates)
        self.open_line = lineno


# ---------------------------------------------------------------------------
# Module Tracking
# ---------------------------------------------------------------------------

class _ModuleFrame:
    """An open ``defmodule`` block while scanning."""

    __slots__ = ("parts", "body_depth", "fun_modifier")

    def __init__(self, parts: ModuleParts, body_depth: int) -> None:
        self.parts = parts
        self.body_depth = body_depth
        self.fun_modifier: str | None = None

    def __repr__(self) -> str:
        return f"_ModuleFrame(name={self.parts.name!r}, depth={self.body_depth})"


def _qualify(name: str, outer: _ModuleFrame | None) -> str:
    """Resolve a nested module name against its enclosing module."""
    if name.startswith("__MODULE__."):
        name = name[len("__MODULE__."):]
    return f"{outer.parts.name}.{name}" if outer else name


def _fun_category(keyword: str, modifier: str | None) -> DeclarationCategory:
    """Map a definition keyword and pending ``@doc``/``@impl`` modifier to a category."""
    if keyword == "def":
        if modifier == _IMPL:
            return DeclarationCategory.IMPL
        return DeclarationCategory.PRIVATE_FUN if modifier == _PRIVATE else DeclarationCategory.PUBLIC_FUN
    if keyword == "defp":
        return DeclarationCategory.PRIVATE_FUN
    if keyword == "defmacro":
        if modifier == _IMPL:
            return DeclarationCategory.IMPL
        return DeclarationCategory.PRIVATE_MACRO if modifier == _PRIVATE else DeclarationCategory.PUBLIC_MACRO
    if keyword == "defmacrop":
        return DeclarationCategory.PRIVATE_MACRO
    if keyword == "defguard" and modifier is None:
        return DeclarationCategory.PUBLIC_GUARD
    return DeclarationCategory.PRIVATE_GUARD


def _classify(frame: _ModuleFrame, code: str) -> DeclarationCategory | None:
    """Classify one stripped line sitting directly in a module body.

    Updates the frame's pending function modifier as a side effect of
    ``@doc`` and ``@impl`` attributes.
    """
    attr = _ATTRIBUTE_PATTERN.match(code)
    if attr:
        name, rest = attr.group(1), attr.group(2).strip()
        if name == "doc":
            frame.fun_modifier = _PRIVATE if rest.startswith("false") else None
            return None
        if name == "impl":
            frame.fun_modifier = None if rest.startswith("false") else _IMPL
            return None
        if name in _ATTRIBUTE_CATEGORIES:
            return _ATTRIBUTE_CATEGORIES[name]
        if name in _IGNORED_ATTRIBUTES:
            return None
        return DeclarationCategory.MODULE_ATTRIBUTE

    keyword = _KEYWORD_PATTERN.match(code)
    if keyword:
        return _KEYWORD_CATEGORIES[keyword.group(1)]

    definition = _DEF_PATTERN.match(code)
    if definition:
        category = _fun_category(definition.group(1), frame.fun_modifier)
        frame.fun_modifier = None
        return category

    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_source(source: str) -> ParsedSource:
    """Extract every module's top-level declarations and the suppression directives.

    Raises:
        ExtractionError: On unterminated heredocs or strings, an unmatched
            ``end``, or a ``defmodule`` that is never closed.
    """
    scanner = _LineScanner()
    modules: list[ModuleParts] = []
    stack: list[_ModuleFrame] = []
    directives = Directives()
    depth = 0

    for lineno, raw in enumerate(source.splitlines(), start=1):
        code, comment = scanner.scan(raw, lineno)

        if comment:
            directive = _DIRECTIVE_PATTERN.match(comment)
            if directive and directive.group(1) == "disable-for-this-file":
                directives.file_disabled = True
            elif directive:
                directives.disabled_lines.add(lineno + 1)

        stripped = code.strip()
        if not stripped:
            continue
        column = len(code) - len(code.lstrip()) + 1

        if stack and depth == stack[-1].body_depth:
            category = _classify(stack[-1], stripped)
            if category is not None:
                stack[-1].parts.entries.append(
                    DeclarationEntry(category=category, line=lineno, column=column)
                )

        module_match = _DEFMODULE_PATTERN.match(stripped)
        pending_module = (
            ModuleParts(
                name=_qualify(module_match.group(1), stack[-1] if stack else None),
                line=lineno,
                column=column,
            )
            if module_match
            else None
        )

        for token in _BLOCK_TOKEN_PATTERN.finditer(code):
            if token.group(1) == "end":
                depth -= 1
                if depth < 0:
                    raise ExtractionError("unexpected 'end'", line=lineno)
                while stack and stack[-1].body_depth > depth:
                    stack.pop()
                continue
            depth += 1
            if pending_module is not None and token.group(1) == "do":
                modules.append(pending_module)
                stack.append(_ModuleFrame(pending_module, depth))
                pending_module = None

    if scanner.heredoc is not None:
        raise ExtractionError("unterminated heredoc", line=scanner.open_line)
    if scanner.open_string is not None:
        raise ExtractionError("unterminated string or sigil", line=scanner.open_line)
    if stack:
        raise ExtractionError(
            f"missing 'end' for module {stack[-1].parts.name}", line=stack[-1].parts.line
        )

    return ParsedSource(modules=modules, directives=directives)


def extract_modules(source: str) -> list[ModuleParts]:
    """Return the modules defined in *source*, in source order."""
    return parse_source(source).modules


def extract_directives(source: str) -> Directives:
    """Return the inline suppression directives found in *source*."""
    return parse_source(source).directives


async def _read_file(path: Path) -> str:
    """Read a file asynchronously using asyncio.to_thread."""
    return await asyncio.to_thread(path.read_text, "utf-8")


async def extract_file(path: str | Path) -> ParsedSource:
    """Read and parse an Elixir source file.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not valid UTF-8.
        ExtractionError: If the source is malformed.
    """
    content = await _read_file(Path(path))
    return parse_source(content)
