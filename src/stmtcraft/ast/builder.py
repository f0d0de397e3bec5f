"""Convenience constructors for statements and conditions."""

from __future__ import annotations

from typing import Any

from stmtcraft.ast.base import Renderable
from stmtcraft.ast.condition import BoolOp, Combinator, CompareOp, Comparison, Expr, Ident
from stmtcraft.ast.statements import (
    Column,
    Delete,
    Insert,
    RecordMapper,
    Select,
    Union,
    UnionKind,
    Update,
    check_column,
)
from stmtcraft.mapping import record_columns

# Statements.


def select(*columns: Column) -> Select:
    """Start a SELECT with the given projection (raw SQL strings or nodes)."""
    return Select(columns=tuple(check_column(c) for c in columns))


def insert_into(table: str, mapper: RecordMapper = record_columns) -> Insert:
    return Insert(table=table, mapper=mapper)


def update(table: str, mapper: RecordMapper = record_columns) -> Update:
    return Update(table=table, mapper=mapper)


def delete_from(table: str) -> Delete:
    return Delete(table=table)


def union(*queries: Renderable) -> Union:
    return Union(kind=UnionKind.UNION, members=tuple(queries))


def union_all(*queries: Renderable) -> Union:
    return Union(kind=UnionKind.UNION_ALL, members=tuple(queries))


# Conditions.


def expr(template: str, *args: Any) -> Expr:
    """Raw SQL fragment; each unquoted ``?`` binds the next argument."""
    return Expr(template, args)


def ident(name: str) -> Ident:
    """Column or table name to be quoted by the dialect rather than written raw."""
    return Ident(name)


def eq(column: str, value: Any) -> Comparison:
    """``column = value``; ``None`` gives ``IS NULL``, a collection gives ``IN``."""
    return Comparison(column, CompareOp.EQ, value)


def neq(column: str, value: Any) -> Comparison:
    """``column != value``; ``None`` gives ``IS NOT NULL``, a collection ``NOT IN``."""
    return Comparison(column, CompareOp.NEQ, value)


def gt(column: str, value: Any) -> Comparison:
    return Comparison(column, CompareOp.GT, value)


def gte(column: str, value: Any) -> Comparison:
    return Comparison(column, CompareOp.GTE, value)


def lt(column: str, value: Any) -> Comparison:
    return Comparison(column, CompareOp.LT, value)


def lte(column: str, value: Any) -> Comparison:
    return Comparison(column, CompareOp.LTE, value)


def like(column: str, pattern: str) -> Comparison:
    return Comparison(column, CompareOp.LIKE, pattern)


def not_like(column: str, pattern: str) -> Comparison:
    return Comparison(column, CompareOp.NOT_LIKE, pattern)


def and_(*conditions: Renderable) -> Combinator:
    """Chain conditions with AND."""
    return Combinator(BoolOp.AND, tuple(conditions))


def or_(*conditions: Renderable) -> Combinator:
    """Chain conditions with OR."""
    return Combinator(BoolOp.OR, tuple(conditions))
