"""API request/response Pydantic schemas."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from stmtcraft.ast.statements import JoinType

# -- conditions ---------------------------------------------------------------


class ComparisonCondition(BaseModel):
    """``{"op": "eq", "column": "id", "value": 7}``; a list value means IN."""

    op: Literal["eq", "neq", "gt", "gte", "lt", "lte", "like", "not_like"]
    column: str
    value: Any = None


class CombinatorCondition(BaseModel):
    op: Literal["and", "or"]
    conditions: list[Condition] = []


Condition = Annotated[
    ComparisonCondition | CombinatorCondition,
    Field(discriminator="op"),
]

CombinatorCondition.model_rebuild()


# -- statements ---------------------------------------------------------------


class JoinSchema(BaseModel):
    type: JoinType = JoinType.INNER
    table: str
    alias: str | None = None
    on: Condition


class OrderSchema(BaseModel):
    column: str
    direction: Literal["asc", "desc"] | None = None


class SelectStatement(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["select"]
    columns: list[str] = Field(default_factory=lambda: ["*"])
    distinct: bool = False
    from_: str | None = Field(default=None, alias="from")
    from_alias: str | None = None
    joins: list[JoinSchema] = []
    where: Condition | None = None
    group_by: list[str] = []
    having: Condition | None = None
    order_by: list[OrderSchema] = []
    limit: int | None = Field(default=None, ge=0)
    offset: int | None = Field(default=None, ge=0)


class InsertStatement(BaseModel):
    kind: Literal["insert"]
    table: str
    columns: list[str] = []
    values: list[list[Any]] = []
    on_conflict: list[str] | None = None
    do_update: list[str] = []
    do_nothing: bool = False
    returning: list[str] = []


class UpdateStatement(BaseModel):
    kind: Literal["update"]
    table: str
    set: dict[str, Any] = {}
    where: Condition | None = None
    returning: list[str] = []


class DeleteStatement(BaseModel):
    kind: Literal["delete"]
    table: str
    where: Condition | None = None
    returning: list[str] = []


Statement = Annotated[
    SelectStatement | InsertStatement | UpdateStatement | DeleteStatement,
    Field(discriminator="kind"),
]


class RenderRequest(BaseModel):
    """Request body for POST /render."""

    dialect: str | None = Field(default=None, description="Dialect name; settings default if unset")
    interpolate: bool | None = Field(
        default=None, description="Inline literals instead of placeholders; dialect policy if unset"
    )
    validate_sql: bool | None = None
    pretty: bool | None = None
    statement: Statement


class RenderResponse(BaseModel):
    """Response body for POST /render."""

    sql: str
    params: list[Any] = []
    dialect: str
    interpolated: bool
    warnings: list[str] = []
    sql_valid: bool = True


class DialectInfo(BaseModel):
    name: str
    interpolate: bool
    capabilities: dict[str, Any]


class DialectListResponse(BaseModel):
    default: str
    dialects: list[DialectInfo]


class HealthResponse(BaseModel):
    status: str
    version: str


class ErrorResponse(BaseModel):
    """Standard error body for rendering failures."""

    error: str
    message: str
