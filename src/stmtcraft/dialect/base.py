"""Abstract base dialect with capability flags and default literal encoding."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from enum import StrEnum
from functools import cached_property

from stmtcraft.errors import EscapeError, UnsupportedFeature


class UpsertStyle(StrEnum):
    ON_CONFLICT = "on_conflict"
    ON_DUPLICATE_KEY = "on_duplicate_key"


@dataclass(frozen=True)
class DialectCapabilities:
    """Flags indicating what SQL features a dialect supports."""

    upsert_style: UpsertStyle | None = None
    supports_transactions: bool = True
    supports_returning: bool = False
    supports_full_join: bool = True
    supports_sourceless_select: bool = False
    supports_offset_without_limit: bool = True
    backslash_escapes: bool = False
    supports_parenthesized_compound: bool = True

    @property
    def supports_upsert(self) -> bool:
        return self.upsert_style is not None


class Dialect(ABC):
    """Abstract base for all SQL dialects.

    Holds the lexical rules of one backend. Instances carry no per-render
    state and can be shared freely between threads.
    """

    # Opening and closing identifier quote.
    identifier_quotes: tuple[str, str] = ('"', '"')

    # Per-character replacements applied inside single-quoted string literals.
    string_escapes: dict[str, str] = {"'": "''"}

    # Characters that cannot appear in a string literal at all.
    forbidden_chars: frozenset[str] = frozenset()

    bool_literals: tuple[str, str] = ("TRUE", "FALSE")

    datetime_format = "%Y-%m-%d %H:%M:%S.%f"

    # Default policy: inline literals (True) or native placeholders (False).
    interpolate: bool = False

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def capabilities(self) -> DialectCapabilities: ...

    @cached_property
    def _escape_table(self) -> dict[int, str]:
        return str.maketrans(self.string_escapes)

    def quote_identifier(self, name: str) -> str:
        """Quote an identifier; dotted names are quoted part by part."""
        open_q, close_q = self.identifier_quotes
        parts = []
        for part in name.split("."):
            if part == "*":
                parts.append(part)
                continue
            escaped = part.replace(close_q, close_q * 2)
            parts.append(f"{open_q}{escaped}{close_q}")
        return ".".join(parts)

    def encode_string(self, value: str) -> str:
        for ch in self.forbidden_chars:
            if ch in value:
                raise EscapeError(
                    f"Dialect '{self.name}' cannot hold character {ch!r} in a string literal"
                )
        return "'" + value.translate(self._escape_table) + "'"

    def encode_bool(self, value: bool) -> str:
        return self.bool_literals[0] if value else self.bool_literals[1]

    def encode_bytes(self, value: bytes) -> str:
        return f"X'{value.hex()}'"

    def encode_datetime(self, value: datetime) -> str:
        if value.tzinfo is not None:
            value = value.astimezone(UTC).replace(tzinfo=None)
        return f"'{value.strftime(self.datetime_format)}'"

    def encode_date(self, value: date) -> str:
        return f"'{value.isoformat()}'"

    def encode_time(self, value: time) -> str:
        return f"'{value.isoformat(timespec='microseconds')}'"

    def placeholder(self, position: int) -> str:
        """Native bind marker for the 1-based parameter position."""
        return "?"

    def proposed_value(self, column: str) -> str:
        """SQL referring to the value an upsert tried to insert into ``column``."""
        raise UnsupportedFeature("upsert", self.name)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
