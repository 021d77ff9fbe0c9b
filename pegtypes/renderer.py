"""
pegtypes/renderer.py
====================

Serialises resolved rule types into a block of TypeScript declarations.

Layout::

    <header>
    // These types were autogenerated by pegtypes
    export type Start = Expression | Term;
    type Expression =
      | "first very long variant"
      | "second very long variant"
      | Term;

One declaration per rule, in the order given. A top-level union is wrapped
one variant per line when its single-line declaration is wider than
``MAX_LINE_WIDTH``. Everything else, including explicit type text, is
written as is.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import StringIO
from typing import Callable, Iterable, Optional

from pegtypes.typeexpr import TypeExpr, UnionType

__all__ = [
    "AUTOGENERATED_BANNER",
    "DEFAULT_HEADER",
    "MAX_LINE_WIDTH",
    "Declaration",
    "DeclarationEmitter",
    "render_declaration",
    "render_declarations",
]

DEFAULT_HEADER: str = "/* eslint-disable */"
AUTOGENERATED_BANNER: str = "// These types were autogenerated by pegtypes"
MAX_LINE_WIDTH: int = 80
INDENT: str = "  "


@dataclass(frozen=True)
class Declaration:
    """One ``type`` alias: identifier, rule type and visibility."""
    identifier: str
    expression: TypeExpr
    exported: bool = False


class DeclarationEmitter:
    """Line-oriented text buffer for declaration output."""

    def __init__(self, indent_str: str = INDENT) -> None:
        self._buffer = StringIO()
        self._indent_str = indent_str
        self._indent_level = 0

    def emit(self, line: str) -> None:
        """Emit a line at the current indentation."""
        if line.strip():
            self._buffer.write(self._indent_str * self._indent_level)
            self._buffer.write(line)
        self._buffer.write("\n")

    def emit_raw(self, text: str) -> None:
        """Emit text without indentation, newline-terminated."""
        self._buffer.write(text)
        self._buffer.write("\n")

    def indent(self) -> None:
        self._indent_level += 1

    def dedent(self) -> None:
        self._indent_level = max(0, self._indent_level - 1)

    def get_code(self) -> str:
        return self._buffer.getvalue()


def render_declaration(
    declaration: Declaration,
    name_of: Callable[[str], str],
    emitter: Optional[DeclarationEmitter] = None,
) -> str:
    """Render a single declaration, wrapping wide unions."""
    emitter = emitter or DeclarationEmitter()
    keyword = "export type" if declaration.exported else "type"
    head = f"{keyword} {declaration.identifier} ="
    expression = declaration.expression

    single = f"{head} {expression.render(name_of)};"
    if not isinstance(expression, UnionType) or len(single) <= MAX_LINE_WIDTH:
        emitter.emit_raw(single)
        return emitter.get_code()

    emitter.emit_raw(head)
    emitter.indent()
    members = expression.render_members(name_of)
    for index, member in enumerate(members):
        terminator = ";" if index == len(members) - 1 else ""
        emitter.emit(f"| {member}{terminator}")
    emitter.dedent()
    return emitter.get_code()


def render_declarations(
    declarations: Iterable[Declaration],
    name_of: Callable[[str], str],
    header: Optional[str] = None,
) -> str:
    """Header, banner, then every declaration in order."""
    emitter = DeclarationEmitter()
    emitter.emit_raw(DEFAULT_HEADER if header is None else header)
    emitter.emit_raw(AUTOGENERATED_BANNER)
    for declaration in declarations:
        render_declaration(declaration, name_of, emitter)
    return emitter.get_code()
