"""SQLite dialect implementation."""

from __future__ import annotations

from stmtcraft.dialect.base import Dialect, DialectCapabilities, UpsertStyle
from stmtcraft.dialect.registry import DialectRegistry


@DialectRegistry.register
class SQLiteDialect(Dialect):
    """SQLite dialect with qmark placeholders and integer booleans."""

    forbidden_chars = frozenset({"\x00"})
    bool_literals = ("1", "0")

    @property
    def name(self) -> str:
        return "sqlite"

    @property
    def capabilities(self) -> DialectCapabilities:
        return DialectCapabilities(
            upsert_style=UpsertStyle.ON_CONFLICT,
            supports_transactions=True,
            supports_returning=True,
            supports_full_join=False,
            supports_sourceless_select=True,
            supports_offset_without_limit=False,
            supports_parenthesized_compound=False,
        )

    def proposed_value(self, column: str) -> str:
        return f"excluded.{column}"
