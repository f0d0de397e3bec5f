"""Immutable statement nodes: SELECT, INSERT, UPDATE, DELETE and UNION.

Fluent methods never modify the receiver; each returns a new node sharing the
untouched parts, so a statement can be extended from a common base and
rendered any number of times.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any, Self

from stmtcraft.ast.base import Query, Renderable
from stmtcraft.ast.condition import as_condition
from stmtcraft.buffer import Buffer
from stmtcraft.dialect.base import Dialect, UpsertStyle
from stmtcraft.errors import (
    ArgumentCountMismatch,
    ArgumentError,
    MissingAlias,
    MissingConflictTarget,
    MissingFromClause,
    MissingMembers,
    MissingTable,
    MissingValues,
    NoAssignments,
    StructuralError,
    UnsupportedFeature,
    UnsupportedType,
)
from stmtcraft.interpolate import write_value
from stmtcraft.mapping import record_columns

RecordMapper = Callable[[Any], list[tuple[str, Any]]]

Column = str | Renderable
Source = str | Renderable


class JoinType(StrEnum):
    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    FULL = "FULL"


class UnionKind(StrEnum):
    UNION = "UNION"
    UNION_ALL = "UNION ALL"


def check_column(column: Any) -> Column:
    if not isinstance(column, (str, Renderable)):
        raise UnsupportedType(column, "columns must be SQL strings or renderable nodes")
    return column


def _check_count(value: Any, clause: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ArgumentError(f"{clause} must be a non-negative integer, got {value!r}")
    return value


def _check_source(source: Any, alias: str | None) -> Source:
    if not isinstance(source, (str, Renderable)):
        raise UnsupportedType(source, "sources must be table names or renderable nodes")
    if alias and isinstance(source, Aliased):
        raise ArgumentError(f"Source is already aliased as '{source.alias}'")
    return source


def _render_column(dialect: Dialect, buf: Buffer, column: Column) -> None:
    if isinstance(column, str):
        buf.write(column)
    else:
        write_value(dialect, buf, column)


def _render_source(
    dialect: Dialect, buf: Buffer, source: Source, alias: str | None, context: str
) -> None:
    if isinstance(source, str):
        buf.write(dialect.quote_identifier(source))
    elif isinstance(source, Query):
        if not alias:
            raise MissingAlias(context)
        buf.write("(")
        source.render(dialect, buf)
        buf.write(")")
    else:
        source.render(dialect, buf)
    if alias:
        buf.write(f" AS {dialect.quote_identifier(alias)}")


def _render_conditions(
    dialect: Dialect, buf: Buffer, keyword: str, conditions: tuple[Renderable, ...]
) -> None:
    if not conditions:
        return
    buf.write(f" {keyword} ")
    for i, cond in enumerate(conditions):
        if i:
            buf.write(" AND ")
        buf.write("(")
        cond.render(dialect, buf)
        buf.write(")")


@dataclass(frozen=True)
class Aliased:
    """A subquery with an alias: ``(query) AS alias``."""

    query: Renderable
    alias: str

    def render(self, dialect: Dialect, buf: Buffer) -> None:
        _render_source(dialect, buf, self.query, self.alias, "aliased")


@dataclass(frozen=True)
class Join:
    """JOIN clause."""

    join_type: JoinType
    source: Source
    on: Renderable
    alias: str | None = None

    def render(self, dialect: Dialect, buf: Buffer) -> None:
        if self.join_type is JoinType.FULL and not dialect.capabilities.supports_full_join:
            raise UnsupportedFeature("FULL JOIN", dialect.name)
        buf.write(f" {self.join_type} JOIN ")
        _render_source(dialect, buf, self.source, self.alias, "JOIN")
        buf.write(" ON ")
        self.on.render(dialect, buf)


@dataclass(frozen=True)
class OrderByItem:
    """ORDER BY item with optional direction."""

    expr: Column
    direction: str | None = None

    def render(self, dialect: Dialect, buf: Buffer) -> None:
        _render_column(dialect, buf, self.expr)
        if self.direction:
            buf.write(f" {self.direction}")


class _Filtered:
    """``where`` shared by SELECT, UPDATE and DELETE."""

    conditions: tuple[Renderable, ...]

    def where(self, condition: str | Renderable, *args: Any) -> Self:
        """Add a condition; several calls are AND-ed together."""
        conditions = (*self.conditions, as_condition(condition, args))
        return replace(self, conditions=conditions)  # type: ignore[type-var]


class _Returning:
    """``RETURNING`` shared by INSERT, UPDATE and DELETE."""

    returning_columns: tuple[str, ...]

    def returning(self, *columns: str) -> Self:
        returning = (*self.returning_columns, *columns)
        return replace(self, returning_columns=returning)  # type: ignore[type-var]

    def _render_returning(self, dialect: Dialect, buf: Buffer) -> None:
        if not self.returning_columns:
            return
        buf.write(" RETURNING ")
        buf.write(", ".join(dialect.quote_identifier(c) for c in self.returning_columns))

    def _check_returning(self, dialect: Dialect) -> None:
        if self.returning_columns and not dialect.capabilities.supports_returning:
            raise UnsupportedFeature("RETURNING", dialect.name)


# -- SELECT -------------------------------------------------------------------


@dataclass(frozen=True)
class Select(_Filtered, Query):
    """A complete SELECT statement."""

    columns: tuple[Column, ...] = ()
    is_distinct: bool = False
    source: Source | None = None
    source_alias: str | None = None
    joins: tuple[Join, ...] = ()
    conditions: tuple[Renderable, ...] = ()
    groups: tuple[Column, ...] = ()
    having_conditions: tuple[Renderable, ...] = ()
    orders: tuple[OrderByItem, ...] = ()
    limit_count: int | None = None
    offset_count: int | None = None

    def distinct(self, enabled: bool = True) -> Self:
        return replace(self, is_distinct=enabled)

    def from_(self, source: Source, alias: str | None = None) -> Self:
        return replace(self, source=_check_source(source, alias), source_alias=alias)

    def join(
        self,
        source: Source,
        on: str | Renderable,
        *args: Any,
        join_type: JoinType = JoinType.INNER,
        alias: str | None = None,
    ) -> Self:
        j = Join(
            join_type=join_type,
            source=_check_source(source, alias),
            on=as_condition(on, args),
            alias=alias,
        )
        return replace(self, joins=(*self.joins, j))

    def left_join(
        self, source: Source, on: str | Renderable, *args: Any, alias: str | None = None
    ) -> Self:
        return self.join(source, on, *args, join_type=JoinType.LEFT, alias=alias)

    def right_join(
        self, source: Source, on: str | Renderable, *args: Any, alias: str | None = None
    ) -> Self:
        return self.join(source, on, *args, join_type=JoinType.RIGHT, alias=alias)

    def full_join(
        self, source: Source, on: str | Renderable, *args: Any, alias: str | None = None
    ) -> Self:
        return self.join(source, on, *args, join_type=JoinType.FULL, alias=alias)

    def group_by(self, *columns: Column) -> Self:
        return replace(self, groups=(*self.groups, *map(check_column, columns)))

    def having(self, condition: str | Renderable, *args: Any) -> Self:
        return replace(
            self, having_conditions=(*self.having_conditions, as_condition(condition, args))
        )

    def order_by(self, column: Column) -> Self:
        return replace(self, orders=(*self.orders, OrderByItem(check_column(column))))

    def order_asc(self, column: Column) -> Self:
        return replace(self, orders=(*self.orders, OrderByItem(check_column(column), "ASC")))

    def order_desc(self, column: Column) -> Self:
        return replace(self, orders=(*self.orders, OrderByItem(check_column(column), "DESC")))

    def limit(self, n: int) -> Self:
        return replace(self, limit_count=_check_count(n, "LIMIT"))

    def offset(self, n: int) -> Self:
        return replace(self, offset_count=_check_count(n, "OFFSET"))

    def as_(self, alias: str) -> Aliased:
        return Aliased(self, alias)

    def render(self, dialect: Dialect, buf: Buffer) -> None:
        caps = dialect.capabilities
        if self.source is None and not caps.supports_sourceless_select:
            raise MissingFromClause(dialect.name)
        if (
            self.offset_count is not None
            and self.limit_count is None
            and not caps.supports_offset_without_limit
        ):
            raise UnsupportedFeature("OFFSET without LIMIT", dialect.name)

        buf.write("SELECT ")
        if self.is_distinct:
            buf.write("DISTINCT ")
        if self.columns:
            for i, column in enumerate(self.columns):
                if i:
                    buf.write(", ")
                _render_column(dialect, buf, column)
        else:
            buf.write("*")

        if self.source is not None:
            buf.write(" FROM ")
            _render_source(dialect, buf, self.source, self.source_alias, "FROM")

        for join in self.joins:
            join.render(dialect, buf)

        _render_conditions(dialect, buf, "WHERE", self.conditions)

        if self.groups:
            buf.write(" GROUP BY ")
            for i, column in enumerate(self.groups):
                if i:
                    buf.write(", ")
                _render_column(dialect, buf, column)

        _render_conditions(dialect, buf, "HAVING", self.having_conditions)

        if self.orders:
            buf.write(" ORDER BY ")
            for i, item in enumerate(self.orders):
                if i:
                    buf.write(", ")
                item.render(dialect, buf)

        if self.limit_count is not None:
            buf.write(f" LIMIT {self.limit_count}")
        if self.offset_count is not None:
            buf.write(f" OFFSET {self.offset_count}")


# -- UNION --------------------------------------------------------------------


@dataclass(frozen=True)
class Union(Query):
    """UNION / UNION ALL of member queries, rendered in order."""

    kind: UnionKind = UnionKind.UNION
    members: tuple[Renderable, ...] = ()

    def as_(self, alias: str) -> Aliased:
        return Aliased(self, alias)

    def render(self, dialect: Dialect, buf: Buffer) -> None:
        if not self.members:
            raise MissingMembers(self.kind.value)
        for i, member in enumerate(self.members):
            if i:
                buf.write(f" {self.kind} ")
            if not _is_grouped(member):
                member.render(dialect, buf)
            elif dialect.capabilities.supports_parenthesized_compound:
                buf.write("(")
                member.render(dialect, buf)
                buf.write(")")
            else:
                # Compound members cannot be parenthesized; read from a derived table.
                buf.write("SELECT * FROM (")
                member.render(dialect, buf)
                alias = dialect.quote_identifier(f"_u{i + 1}")
                buf.write(f") AS {alias}")


def _is_grouped(member: Renderable) -> bool:
    """Whether a union member must be kept apart from its neighbours.

    A nested union would otherwise merge into the outer one left to right,
    and ORDER BY, LIMIT and OFFSET would apply to the whole compound.
    """
    if isinstance(member, Union):
        return True
    return isinstance(member, Select) and (
        bool(member.orders) or member.limit_count is not None or member.offset_count is not None
    )


# -- INSERT -------------------------------------------------------------------


@dataclass(frozen=True)
class ConflictAction:
    """One ``column = ...`` assignment of an upsert."""

    column: str
    value: Any = None
    use_proposed: bool = False


@dataclass(frozen=True)
class OnConflict:
    """Conflict target and resolution of an upsert."""

    target: tuple[str, ...] = ()
    actions: tuple[ConflictAction, ...] = ()
    ignore: bool = False


@dataclass(frozen=True)
class Insert(_Returning):
    """INSERT INTO table, from VALUES rows or from a SELECT."""

    table: str
    column_names: tuple[str, ...] = ()
    rows: tuple[tuple[Any, ...], ...] = ()
    query: Renderable | None = None
    conflict: OnConflict | None = None
    returning_columns: tuple[str, ...] = ()
    mapper: RecordMapper = field(default=record_columns, compare=False, repr=False)

    def columns(self, *columns: str) -> Self:
        return replace(self, column_names=(*self.column_names, *columns))

    def values(self, *values: Any) -> Self:
        return replace(self, rows=(*self.rows, tuple(values)))

    def record(self, record: Any) -> Self:
        """Add one row taken from ``record`` through the mapper.

        Without explicit columns the record's own columns become the column
        list; otherwise the listed columns are picked out of the record.
        """
        pairs = self.mapper(record)
        if not self.column_names:
            return replace(
                self,
                column_names=tuple(c for c, _ in pairs),
                rows=(*self.rows, tuple(v for _, v in pairs)),
            )
        by_column = dict(pairs)
        missing = [c for c in self.column_names if c not in by_column]
        if missing:
            raise ArgumentError(f"Record has no value for columns: {', '.join(missing)}")
        row = tuple(by_column[c] for c in self.column_names)
        return replace(self, rows=(*self.rows, row))

    def from_select(self, query: Renderable) -> Self:
        return replace(self, query=query)

    def on_conflict(self, *target: str) -> Self:
        conflict = self.conflict or OnConflict()
        return replace(self, conflict=replace(conflict, target=tuple(target)))

    def do_update(self, *columns: str) -> Self:
        """On conflict, overwrite ``columns`` with the values proposed for insertion."""
        actions = tuple(ConflictAction(c, use_proposed=True) for c in columns)
        return self._with_actions(actions)

    def do_update_set(self, column: str, value: Any) -> Self:
        """On conflict, set ``column`` to ``value``."""
        return self._with_actions((ConflictAction(column, value),))

    def do_nothing(self) -> Self:
        conflict = self.conflict or OnConflict()
        return replace(self, conflict=replace(conflict, actions=(), ignore=True))

    def _with_actions(self, actions: tuple[ConflictAction, ...]) -> Self:
        conflict = self.conflict or OnConflict()
        return replace(
            self,
            conflict=replace(conflict, actions=(*conflict.actions, *actions), ignore=False),
        )

    def render(self, dialect: Dialect, buf: Buffer) -> None:
        if not self.table:
            raise MissingTable("INSERT")
        if not self.rows and self.query is None:
            raise MissingValues(self.table)
        if self.rows and self.query is not None:
            raise StructuralError("INSERT cannot combine VALUES rows with a SELECT source")
        if self.conflict is not None and not dialect.capabilities.supports_upsert:
            raise UnsupportedFeature("upsert", dialect.name)
        self._check_returning(dialect)

        buf.write(f"INSERT INTO {dialect.quote_identifier(self.table)}")
        if self.column_names:
            cols = ", ".join(dialect.quote_identifier(c) for c in self.column_names)
            buf.write(f" ({cols})")

        if self.query is not None:
            buf.write(" ")
            self.query.render(dialect, buf)
        else:
            buf.write(" VALUES ")
            for i, row in enumerate(self.rows):
                if self.column_names and len(row) != len(self.column_names):
                    raise ArgumentCountMismatch(len(self.column_names), len(row), "INSERT row")
                if i:
                    buf.write(", ")
                buf.write("(")
                for j, value in enumerate(row):
                    if j:
                        buf.write(", ")
                    write_value(dialect, buf, value)
                buf.write(")")

        if self.conflict is not None:
            self._render_conflict(dialect, buf, self.conflict)
        self._render_returning(dialect, buf)

    def _render_conflict(self, dialect: Dialect, buf: Buffer, conflict: OnConflict) -> None:
        if dialect.capabilities.upsert_style is UpsertStyle.ON_DUPLICATE_KEY:
            if conflict.ignore:
                raise UnsupportedFeature("upsert DO NOTHING", dialect.name)
            if not conflict.actions:
                raise NoAssignments(self.table)
            buf.write(" ON DUPLICATE KEY UPDATE ")
        else:
            if conflict.ignore:
                buf.write(" ON CONFLICT")
                if conflict.target:
                    target = ", ".join(dialect.quote_identifier(c) for c in conflict.target)
                    buf.write(f" ({target})")
                buf.write(" DO NOTHING")
                return
            if not conflict.target:
                raise MissingConflictTarget(dialect.name)
            if not conflict.actions:
                raise NoAssignments(self.table)
            target = ", ".join(dialect.quote_identifier(c) for c in conflict.target)
            buf.write(f" ON CONFLICT ({target}) DO UPDATE SET ")

        for i, action in enumerate(conflict.actions):
            if i:
                buf.write(", ")
            column = dialect.quote_identifier(action.column)
            buf.write(f"{column} = ")
            if action.use_proposed:
                buf.write(dialect.proposed_value(column))
            else:
                write_value(dialect, buf, action.value)


# -- UPDATE -------------------------------------------------------------------


@dataclass(frozen=True)
class Assignment:
    column: str
    value: Any


@dataclass(frozen=True)
class Update(_Filtered, _Returning):
    """UPDATE table SET ... [WHERE ...]."""

    table: str
    assignments: tuple[Assignment, ...] = ()
    conditions: tuple[Renderable, ...] = ()
    returning_columns: tuple[str, ...] = ()
    mapper: RecordMapper = field(default=record_columns, compare=False, repr=False)

    def set(self, column: str, value: Any) -> Self:
        return replace(self, assignments=(*self.assignments, Assignment(column, value)))

    def set_map(self, values: Mapping[str, Any]) -> Self:
        added = tuple(Assignment(c, v) for c, v in values.items())
        return replace(self, assignments=(*self.assignments, *added))

    def set_record(self, record: Any) -> Self:
        added = tuple(Assignment(c, v) for c, v in self.mapper(record))
        return replace(self, assignments=(*self.assignments, *added))

    def render(self, dialect: Dialect, buf: Buffer) -> None:
        if not self.table:
            raise MissingTable("UPDATE")
        if not self.assignments:
            raise NoAssignments(self.table)
        self._check_returning(dialect)

        buf.write(f"UPDATE {dialect.quote_identifier(self.table)} SET ")
        for i, assignment in enumerate(self.assignments):
            if i:
                buf.write(", ")
            buf.write(f"{dialect.quote_identifier(assignment.column)} = ")
            write_value(dialect, buf, assignment.value)
        _render_conditions(dialect, buf, "WHERE", self.conditions)
        self._render_returning(dialect, buf)


# -- DELETE -------------------------------------------------------------------


@dataclass(frozen=True)
class Delete(_Filtered, _Returning):
    """DELETE FROM table [WHERE ...]."""

    table: str
    conditions: tuple[Renderable, ...] = ()
    returning_columns: tuple[str, ...] = ()

    def render(self, dialect: Dialect, buf: Buffer) -> None:
        if not self.table:
            raise MissingTable("DELETE")
        self._check_returning(dialect)

        buf.write(f"DELETE FROM {dialect.quote_identifier(self.table)}")
        _render_conditions(dialect, buf, "WHERE", self.conditions)
        self._render_returning(dialect, buf)
