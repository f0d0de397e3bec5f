"""The render contract shared by every node and by caller-supplied fragments."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from stmtcraft.buffer import Buffer
    from stmtcraft.dialect.base import Dialect


@runtime_checkable
class Renderable(Protocol):
    """Anything that can write itself into a buffer for a given dialect.

    Implementations must not mutate themselves while rendering, so one tree
    can be rendered any number of times, concurrently, into separate buffers.
    Errors are raised, never written into the buffer.
    """

    def render(self, dialect: Dialect, buf: Buffer) -> None: ...


class Query:
    """Marker base for statements that yield rows (SELECT, UNION).

    Queries are parenthesized when they appear as a value or a source.
    """
