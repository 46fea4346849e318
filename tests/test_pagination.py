"""Cursor pagination tests.

Learn: paginate() only needs fetch_window + count, so most of these run
against the in-memory business repository directly. The chain test walks
a whole listing page by page and checks nothing is skipped or repeated.
"""

import uuid
from datetime import datetime, timezone

import pytest

from bizdir.errors import BadRequestError
from bizdir.services.pagination import DEFAULT_TAKE, paginate, parse_cursor

SAME_INSTANT = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


async def _walk(source, take):
    pages, cursor = [], None
    while True:
        page = await paginate(source, take=take, cursor=cursor)
        pages.append(page)
        if page.next_cursor is None:
            return pages
        cursor = page.next_cursor


@pytest.mark.asyncio
async def test_chain_of_pages(businesses, make_account, make_business):
    owner, _ = await make_account("owner")
    created = [await make_business(owner.id, name=f"Listing {i}") for i in range(5)]
    newest_first = [b.id for b in reversed(created)]

    pages = await _walk(businesses, take=2)

    assert [len(p.nodes) for p in pages] == [2, 2, 1]
    assert [n.id for p in pages for n in p.nodes] == newest_first
    assert pages[0].next_cursor == str(pages[0].nodes[-1].id)
    assert pages[-1].next_cursor is None
    assert all(p.total_count == 5 for p in pages)


@pytest.mark.asyncio
async def test_exact_fit_has_no_next_cursor(businesses, make_account, make_business):
    owner, _ = await make_account("owner")
    for i in range(4):
        await make_business(owner.id, name=f"Listing {i}")
    first = await paginate(businesses, take=2)
    second = await paginate(businesses, take=2, cursor=first.next_cursor)
    assert len(second.nodes) == 2
    assert second.next_cursor is None


@pytest.mark.asyncio
async def test_identical_timestamps_use_id_tie_break(
    businesses, make_account, make_business
):
    owner, _ = await make_account("owner")
    created = [
        await make_business(owner.id, name=f"Same instant {i}", created_at=SAME_INSTANT)
        for i in range(5)
    ]

    pages = await _walk(businesses, take=2)
    seen = [n.id for p in pages for n in p.nodes]

    assert len(seen) == 5
    assert set(seen) == {b.id for b in created}
    assert seen == sorted(seen, reverse=True)


@pytest.mark.asyncio
async def test_empty_listing(businesses):
    page = await paginate(businesses)
    assert page.nodes == []
    assert page.next_cursor is None
    assert page.total_count == 0


@pytest.mark.asyncio
async def test_default_take(businesses, make_account, make_business):
    owner, _ = await make_account("owner")
    for i in range(DEFAULT_TAKE + 2):
        await make_business(owner.id, name=f"Listing {i}")
    page = await paginate(businesses)
    assert len(page.nodes) == DEFAULT_TAKE
    assert page.next_cursor is not None
    assert page.total_count == DEFAULT_TAKE + 2


@pytest.mark.asyncio
@pytest.mark.parametrize("take", [0, -1])
async def test_non_positive_take_rejected(businesses, take):
    with pytest.raises(BadRequestError):
        await paginate(businesses, take=take)


@pytest.mark.asyncio
async def test_malformed_cursor_rejected(businesses):
    with pytest.raises(BadRequestError):
        await paginate(businesses, take=2, cursor="not-a-uuid")


@pytest.mark.asyncio
async def test_unknown_cursor_returns_empty_page(
    businesses, make_account, make_business
):
    owner, _ = await make_account("owner")
    await make_business(owner.id)
    page = await paginate(businesses, take=2, cursor=str(uuid.uuid4()))
    assert page.nodes == []
    assert page.next_cursor is None
    assert page.total_count == 1


def test_parse_cursor_blank_means_first_page():
    assert parse_cursor(None) is None
    assert parse_cursor("") is None
    some_id = uuid.uuid4()
    assert parse_cursor(str(some_id)) == some_id
