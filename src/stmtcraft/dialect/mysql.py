"""MySQL dialect implementation."""

from __future__ import annotations

from stmtcraft.dialect.base import Dialect, DialectCapabilities, UpsertStyle
from stmtcraft.dialect.registry import DialectRegistry


@DialectRegistry.register
class MySQLDialect(Dialect):
    """MySQL dialect: backtick identifiers, backslash escapes and ON DUPLICATE KEY upserts."""

    identifier_quotes = ("`", "`")
    string_escapes = {
        "\x00": "\\0",
        "\n": "\\n",
        "\r": "\\r",
        "\\": "\\\\",
        "'": "\\'",
        '"': '\\"',
        "\x1a": "\\Z",
    }
    bool_literals = ("1", "0")

    @property
    def name(self) -> str:
        return "mysql"

    @property
    def capabilities(self) -> DialectCapabilities:
        return DialectCapabilities(
            upsert_style=UpsertStyle.ON_DUPLICATE_KEY,
            supports_transactions=True,
            supports_returning=False,
            supports_full_join=False,
            supports_sourceless_select=False,
            supports_offset_without_limit=False,
            backslash_escapes=True,
        )

    def proposed_value(self, column: str) -> str:
        return f"VALUES({column})"
