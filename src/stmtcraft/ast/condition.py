"""Boolean predicate nodes: comparisons, AND/OR combinators and raw fragments."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from stmtcraft.ast.base import Renderable
from stmtcraft.buffer import Buffer
from stmtcraft.dialect.base import Dialect
from stmtcraft.errors import UnsupportedType
from stmtcraft.interpolate import collection_members, is_collection, render_template, write_value


class CompareOp(StrEnum):
    EQ = "="
    NEQ = "!="
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="
    LIKE = "LIKE"
    NOT_LIKE = "NOT LIKE"


class BoolOp(StrEnum):
    AND = "AND"
    OR = "OR"


@dataclass(frozen=True)
class Expr:
    """Raw SQL fragment with ``?`` markers bound to ``args`` in order."""

    template: str
    args: tuple[Any, ...] = ()

    def render(self, dialect: Dialect, buf: Buffer) -> None:
        render_template(dialect, buf, self.template, self.args)


@dataclass(frozen=True)
class Ident:
    """An identifier quoted by the dialect, e.g. a projected or ordering column."""

    name: str

    def render(self, dialect: Dialect, buf: Buffer) -> None:
        buf.write(dialect.quote_identifier(self.name))


@dataclass(frozen=True)
class Comparison:
    """``column op value``.

    Equality against ``None`` becomes ``IS [NOT] NULL``; equality against a
    collection becomes ``[NOT] IN (...)``, and an empty collection collapses
    to the dialect's FALSE (for ``=``) or TRUE (for ``!=``) literal.
    """

    column: str
    op: CompareOp
    value: Any

    def render(self, dialect: Dialect, buf: Buffer) -> None:
        column = dialect.quote_identifier(self.column)
        if self.op in (CompareOp.EQ, CompareOp.NEQ):
            negated = self.op is CompareOp.NEQ
            if self.value is None:
                buf.write(f"{column} IS NOT NULL" if negated else f"{column} IS NULL")
                return
            if is_collection(self.value):
                if not collection_members(self.value):
                    buf.write(dialect.encode_bool(negated))
                    return
                buf.write(f"{column} NOT IN " if negated else f"{column} IN ")
                write_value(dialect, buf, self.value)
                return
        elif is_collection(self.value):
            raise UnsupportedType(self.value, f"operator {self.op} takes a single value")

        buf.write(f"{column} {self.op} ")
        write_value(dialect, buf, self.value)


@dataclass(frozen=True)
class Combinator:
    """AND/OR over child conditions, each child wrapped in parentheses."""

    op: BoolOp
    conditions: tuple[Renderable, ...] = ()

    def render(self, dialect: Dialect, buf: Buffer) -> None:
        if not self.conditions:
            # Identity element: empty AND is true, empty OR is false.
            buf.write(dialect.encode_bool(self.op is BoolOp.AND))
            return
        for i, cond in enumerate(self.conditions):
            if i:
                buf.write(f" {self.op} ")
            buf.write("(")
            cond.render(dialect, buf)
            buf.write(")")


def as_condition(condition: str | Renderable, args: tuple[Any, ...]) -> Renderable:
    """Normalize a ``where``/``having``/``on`` argument to a renderable node."""
    if isinstance(condition, str):
        return Expr(condition, args)
    if not isinstance(condition, Renderable):
        raise UnsupportedType(condition, "conditions must be SQL strings or renderable nodes")
    if args:
        raise UnsupportedType(args, "arguments are only accepted with a SQL string condition")
    return condition
