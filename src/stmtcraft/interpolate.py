"""Value interpolation: inline escaped literals or placeholders plus parameters.

Every value that reaches rendered SQL passes through :func:`write_value`
exactly once. The set of accepted Python types is closed; anything outside it
raises :class:`~stmtcraft.errors.UnsupportedType` instead of being stringified.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time
from decimal import Decimal
from enum import StrEnum
from typing import Any

from stmtcraft.ast.base import Query, Renderable
from stmtcraft.buffer import Buffer
from stmtcraft.dialect.base import Dialect
from stmtcraft.errors import ArgumentCountMismatch, EscapeError, UnsupportedType

PLACEHOLDER = "?"

_SCALAR_TYPES = (
    type(None),
    bool,
    int,
    float,
    Decimal,
    str,
    bytes,
    bytearray,
    memoryview,
    datetime,
    date,
    time,
)

_COLLECTION_TYPES = (list, tuple, set, frozenset, Mapping)


class ScanState(StrEnum):
    NORMAL = "normal"
    IN_SINGLE_QUOTE = "in_single_quote"
    IN_DOUBLE_QUOTE = "in_double_quote"
    IN_BACKTICK = "in_backtick"


_OPENERS: dict[str, ScanState] = {
    "'": ScanState.IN_SINGLE_QUOTE,
    '"': ScanState.IN_DOUBLE_QUOTE,
    "`": ScanState.IN_BACKTICK,
}
_CLOSERS: dict[ScanState, str] = {state: quote for quote, state in _OPENERS.items()}


def split_template(template: str, backslash_escapes: bool = False) -> list[str]:
    """Split a raw SQL template at every placeholder marker outside quotes.

    The scan is a four-state machine (normal, single-quoted, double-quoted,
    backtick-quoted); a marker only counts in the normal state. A doubled
    quote closes and immediately reopens the literal, which keeps the state
    correct without special handling. With ``backslash_escapes`` a backslash
    inside a quoted string escapes the following character.

    Returns ``n + 1`` literal segments for ``n`` markers.
    """
    segments: list[str] = []
    current: list[str] = []
    state = ScanState.NORMAL
    escaped = False
    for ch in template:
        if state is ScanState.NORMAL:
            if ch == PLACEHOLDER:
                segments.append("".join(current))
                current = []
                continue
            state = _OPENERS.get(ch, ScanState.NORMAL)
        elif escaped:
            escaped = False
        elif backslash_escapes and ch == "\\" and state is not ScanState.IN_BACKTICK:
            escaped = True
        elif ch == _CLOSERS[state]:
            state = ScanState.NORMAL
        current.append(ch)
    segments.append("".join(current))
    return segments


def is_collection(value: Any) -> bool:
    return isinstance(value, _COLLECTION_TYPES)


def collection_members(value: Mapping[Any, Any] | Sequence[Any] | set[Any]) -> list[Any]:
    """Members of a collection value; mappings contribute their keys only.

    Sets and mappings yield members in their own iteration order, which for
    sets is not stable across processes.
    """
    if isinstance(value, Mapping):
        members = list(value.keys())
    else:
        members = list(value)
    for member in members:
        _check_scalar(member)
    return members


def _check_scalar(value: Any) -> None:
    if isinstance(value, _COLLECTION_TYPES):
        raise UnsupportedType(value, "nested collections are not supported")
    if not isinstance(value, _SCALAR_TYPES):
        raise UnsupportedType(value)


def _plain_decimal(value: Decimal) -> str:
    if not value.is_finite():
        raise EscapeError(f"Cannot render non-finite number {value} as a SQL literal")
    return format(value, "f")


def interpolate(dialect: Dialect, value: Any) -> str:
    """Render ``value`` as an inline SQL literal for ``dialect``."""
    match value:
        case None:
            return "NULL"
        case bool():
            return dialect.encode_bool(value)
        case int():
            return str(int(value))
        case float():
            if not math.isfinite(value):
                raise EscapeError(f"Cannot render non-finite number {value} as a SQL literal")
            return _plain_decimal(Decimal(repr(value)))
        case Decimal():
            return _plain_decimal(value)
        case str():
            return dialect.encode_string(value)
        case bytes() | bytearray() | memoryview():
            return dialect.encode_bytes(bytes(value))
        case datetime():
            return dialect.encode_datetime(value)
        case date():
            return dialect.encode_date(value)
        case time():
            return dialect.encode_time(value)
        case Renderable():
            buf = Buffer(interpolate=True)
            write_value(dialect, buf, value)
            return buf.sql
        case list() | tuple() | set() | frozenset() | Mapping():
            members = collection_members(value)
            if not members:
                return "(NULL)"
            return "(" + ", ".join(interpolate(dialect, m) for m in members) + ")"
        case _:
            raise UnsupportedType(value)


def write_value(dialect: Dialect, buf: Buffer, value: Any) -> None:
    """Write ``value`` into ``buf`` as a literal or as bound placeholders."""
    if isinstance(value, Renderable):
        if isinstance(value, Query):
            buf.write("(")
            value.render(dialect, buf)
            buf.write(")")
        else:
            value.render(dialect, buf)
        return

    if buf.interpolate:
        buf.write(interpolate(dialect, value))
        return

    if is_collection(value):
        members = collection_members(value)
        if not members:
            buf.write("(NULL)")
            return
        buf.write("(")
        for i, member in enumerate(members):
            if i:
                buf.write(", ")
            buf.write(dialect.placeholder(buf.add_param(member)))
        buf.write(")")
        return

    _check_scalar(value)
    buf.write(dialect.placeholder(buf.add_param(value)))


def render_template(dialect: Dialect, buf: Buffer, template: str, args: Sequence[Any]) -> None:
    """Render a raw template, substituting one value per unquoted marker."""
    segments = split_template(template, dialect.capabilities.backslash_escapes)
    markers = len(segments) - 1
    if markers != len(args):
        raise ArgumentCountMismatch(markers, len(args))
    buf.write(segments[0])
    for arg, segment in zip(args, segments[1:], strict=True):
        write_value(dialect, buf, arg)
        buf.write(segment)
