"""Orchestrates a full render: dialect lookup → SQL generation → validation → formatting."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import sqlparse

from stmtcraft.ast.base import Renderable
from stmtcraft.compiler.codegen import CodeGenerator
from stmtcraft.compiler.validator import validate_sql
from stmtcraft.dialect.registry import DialectRegistry
from stmtcraft.settings import Settings


@dataclass
class RenderResult:
    """The result of rendering a statement for one dialect."""

    sql: str
    params: list[Any]
    dialect: str
    interpolated: bool
    warnings: list[str] = field(default_factory=list)
    sql_valid: bool = True


def format_sql(sql: str) -> str:
    """Pretty-print SQL with keyword-per-line formatting."""
    return sqlparse.format(sql, reindent=True, keyword_case="upper", indent_width=2).strip()


class RenderPipeline:
    """Renders statements with defaults taken from :class:`Settings`."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings if settings is not None else Settings()

    @property
    def settings(self) -> Settings:
        return self._settings

    def render(
        self,
        stmt: Renderable,
        dialect_name: str | None = None,
        interpolate: bool | None = None,
        validate: bool | None = None,
        pretty: bool | None = None,
    ) -> RenderResult:
        """Render ``stmt``; unset arguments fall back to the settings."""
        name = dialect_name or self._settings.sql_dialect
        dialect = DialectRegistry.get(name)
        if interpolate is None:
            interpolate = self._settings.sql_interpolate

        codegen = CodeGenerator(dialect, interpolate=interpolate)
        sql, params = codegen.generate(stmt)

        warnings: list[str] = []
        sql_valid = True
        if validate if validate is not None else self._settings.sql_validate:
            errors = validate_sql(sql, dialect.name)
            sql_valid = not errors
            warnings = [f"SQL validation: {e}" for e in errors]

        if pretty if pretty is not None else self._settings.sql_pretty:
            sql = format_sql(sql)

        return RenderResult(
            sql=sql,
            params=params,
            dialect=dialect.name,
            interpolated=codegen.interpolate,
            warnings=warnings,
            sql_valid=sql_valid,
        )
