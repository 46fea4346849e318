"""Pagination engine — forward-only cursor pages.

Learn: The classic "take + 1" trick. Ask storage for one row more than
the page size; if it comes back, there is a next page, and the cursor is
the id of the last row we actually return. No second query needed to
know whether more rows exist.

The total count is a separate query, outside any shared transaction. It
is a snapshot, so under concurrent writes it can disagree with the sum
of the pages — callers should treat it as approximate.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from bizdir.errors import BadRequestError

DEFAULT_TAKE = 10


class WindowSource(Protocol):
    async def fetch_window(
        self, limit: int, after: Optional[uuid.UUID] = None
    ) -> list[Any]:
        ...

    async def count(self) -> int:
        ...


@dataclass
class Page:
    nodes: list[Any]
    next_cursor: Optional[str]
    total_count: int


def parse_cursor(cursor: Optional[str]) -> Optional[uuid.UUID]:
    if cursor is None or cursor == "":
        return None
    try:
        return uuid.UUID(cursor)
    except ValueError:
        raise BadRequestError("Invalid pagination cursor")


async def paginate(
    source: WindowSource,
    take: Optional[int] = None,
    cursor: Optional[str] = None,
) -> Page:
    """Return one page of records plus the cursor for the next one."""
    if take is None:
        take = DEFAULT_TAKE
    if take <= 0:
        raise BadRequestError("take must be a positive integer")

    rows = await source.fetch_window(take + 1, after=parse_cursor(cursor))
    total_count = await source.count()

    has_next = len(rows) > take
    if has_next:
        rows = rows[:take]
    next_cursor = str(rows[-1].id) if has_next else None

    return Page(nodes=rows, next_cursor=next_cursor, total_count=total_count)
