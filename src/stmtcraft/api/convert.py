"""Turn validated request schemas into statement trees."""

from __future__ import annotations

from stmtcraft.ast import builder
from stmtcraft.ast.base import Renderable
from stmtcraft.ast.statements import Delete, Insert, Select, Update
from stmtcraft.api.schemas import (
    CombinatorCondition,
    ComparisonCondition,
    Condition,
    DeleteStatement,
    InsertStatement,
    SelectStatement,
    Statement,
    UpdateStatement,
)

_COMPARISONS = {
    "eq": builder.eq,
    "neq": builder.neq,
    "gt": builder.gt,
    "gte": builder.gte,
    "lt": builder.lt,
    "lte": builder.lte,
    "like": builder.like,
    "not_like": builder.not_like,
}


def build_condition(cond: Condition) -> Renderable:
    match cond:
        case ComparisonCondition(op=op, column=column, value=value):
            return _COMPARISONS[op](column, value)
        case CombinatorCondition(op="and", conditions=children):
            return builder.and_(*(build_condition(c) for c in children))
        case CombinatorCondition(conditions=children):
            return builder.or_(*(build_condition(c) for c in children))
        case _:
            raise ValueError(f"Unknown condition type: {type(cond).__name__}")


def _build_select(body: SelectStatement) -> Select:
    stmt = builder.select(*map(builder.ident, body.columns)).distinct(body.distinct)
    if body.from_ is not None:
        stmt = stmt.from_(body.from_, alias=body.from_alias)
    for j in body.joins:
        stmt = stmt.join(j.table, build_condition(j.on), join_type=j.type, alias=j.alias)
    if body.where is not None:
        stmt = stmt.where(build_condition(body.where))
    if body.group_by:
        stmt = stmt.group_by(*map(builder.ident, body.group_by))
    if body.having is not None:
        stmt = stmt.having(build_condition(body.having))
    for order in body.order_by:
        if order.direction == "asc":
            stmt = stmt.order_asc(builder.ident(order.column))
        elif order.direction == "desc":
            stmt = stmt.order_desc(builder.ident(order.column))
        else:
            stmt = stmt.order_by(builder.ident(order.column))
    if body.limit is not None:
        stmt = stmt.limit(body.limit)
    if body.offset is not None:
        stmt = stmt.offset(body.offset)
    return stmt


def _build_insert(body: InsertStatement) -> Insert:
    stmt = builder.insert_into(body.table).columns(*body.columns)
    for row in body.values:
        stmt = stmt.values(*row)
    if body.on_conflict is not None or body.do_update or body.do_nothing:
        stmt = stmt.on_conflict(*(body.on_conflict or ()))
        if body.do_nothing:
            stmt = stmt.do_nothing()
        else:
            stmt = stmt.do_update(*body.do_update)
    return stmt.returning(*body.returning)


def _build_update(body: UpdateStatement) -> Update:
    stmt = builder.update(body.table).set_map(body.set)
    if body.where is not None:
        stmt = stmt.where(build_condition(body.where))
    return stmt.returning(*body.returning)


def _build_delete(body: DeleteStatement) -> Delete:
    stmt = builder.delete_from(body.table)
    if body.where is not None:
        stmt = stmt.where(build_condition(body.where))
    return stmt.returning(*body.returning)


def build_statement(body: Statement) -> Renderable:
    match body:
        case SelectStatement():
            return _build_select(body)
        case InsertStatement():
            return _build_insert(body)
        case UpdateStatement():
            return _build_update(body)
        case DeleteStatement():
            return _build_delete(body)
        case _:
            raise ValueError(f"Unknown statement type: {type(body).__name__}")
