"""PostgreSQL dialect implementation."""

from __future__ import annotations

from stmtcraft.dialect.base import Dialect, DialectCapabilities, UpsertStyle
from stmtcraft.dialect.registry import DialectRegistry


@DialectRegistry.register
class PostgresDialect(Dialect):
    """PostgreSQL dialect with standard-conforming strings and ``$n`` placeholders."""

    forbidden_chars = frozenset({"\x00"})

    @property
    def name(self) -> str:
        return "postgres"

    @property
    def capabilities(self) -> DialectCapabilities:
        return DialectCapabilities(
            upsert_style=UpsertStyle.ON_CONFLICT,
            supports_transactions=True,
            supports_returning=True,
            supports_full_join=True,
            supports_sourceless_select=True,
            supports_offset_without_limit=True,
        )

    def encode_bytes(self, value: bytes) -> str:
        return f"'\\x{value.hex()}'::bytea"

    def placeholder(self, position: int) -> str:
        return f"${position}"

    def proposed_value(self, column: str) -> str:
        return f"EXCLUDED.{column}"
