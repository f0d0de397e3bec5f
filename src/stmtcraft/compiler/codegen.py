"""Statement tree → SQL text and parameters via dialect rendering."""

from __future__ import annotations

from typing import Any

from stmtcraft.ast.base import Renderable
from stmtcraft.buffer import Buffer
from stmtcraft.dialect.base import Dialect
from stmtcraft.dialect.registry import DialectRegistry


class CodeGenerator:
    """Generates SQL from a statement tree using a dialect.

    ``interpolate=None`` defers to the dialect's own policy.
    """

    def __init__(self, dialect: Dialect, interpolate: bool | None = None) -> None:
        self._dialect = dialect
        self._interpolate = dialect.interpolate if interpolate is None else interpolate

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def interpolate(self) -> bool:
        return self._interpolate

    def generate(self, stmt: Renderable) -> tuple[str, list[Any]]:
        """Render ``stmt`` into a fresh buffer and return its text and parameters."""
        buf = Buffer(interpolate=self._interpolate)
        stmt.render(self._dialect, buf)
        return buf.sql, buf.params


def to_sql(
    stmt: Renderable, dialect: Dialect | str, interpolate: bool | None = None
) -> tuple[str, list[Any]]:
    """Render ``stmt`` for a dialect given by instance or registered name."""
    if isinstance(dialect, str):
        dialect = DialectRegistry.get(dialect)
    return CodeGenerator(dialect, interpolate=interpolate).generate(stmt)
