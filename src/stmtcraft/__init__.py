"""stmtcraft: injection-safe SQL statement builder with per-backend dialects."""

from stmtcraft.ast.base import Query, Renderable
from stmtcraft.ast.builder import (
    and_,
    delete_from,
    eq,
    expr,
    gt,
    gte,
    ident,
    insert_into,
    like,
    lt,
    lte,
    neq,
    not_like,
    or_,
    select,
    union,
    union_all,
    update,
)
from stmtcraft.ast.condition import Combinator, Comparison, Expr, Ident
from stmtcraft.ast.statements import Delete, Insert, JoinType, Select, Union, Update
from stmtcraft.buffer import Buffer
from stmtcraft.compiler import CodeGenerator, RenderPipeline, RenderResult, to_sql
from stmtcraft.dialect import Dialect, DialectCapabilities, DialectRegistry
from stmtcraft.interpolate import interpolate
from stmtcraft.session import Session, Tx

__version__ = "0.1.0"

__all__ = [
    "Buffer",
    "CodeGenerator",
    "Combinator",
    "Comparison",
    "Delete",
    "Dialect",
    "DialectCapabilities",
    "DialectRegistry",
    "Expr",
    "Ident",
    "Insert",
    "JoinType",
    "Query",
    "RenderPipeline",
    "RenderResult",
    "Renderable",
    "Select",
    "Session",
    "Tx",
    "Union",
    "Update",
    "__version__",
    "and_",
    "delete_from",
    "eq",
    "expr",
    "gt",
    "gte",
    "ident",
    "insert_into",
    "interpolate",
    "like",
    "lt",
    "lte",
    "neq",
    "not_like",
    "or_",
    "select",
    "to_sql",
    "union",
    "union_all",
    "update",
]
