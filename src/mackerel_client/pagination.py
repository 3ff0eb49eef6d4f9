"""
Lazy iteration over page-numbered listings.
"""

from __future__ import annotations

from typing import Callable, Iterator, Optional, Sequence, TypeVar

from mackerel_client.context import Context
from mackerel_client.errors import MackerelError

T = TypeVar("T")

PageFetcher = Callable[[Context, int], tuple[Sequence[T], bool]]


def paginate(
    ctx: Context,
    fetch_page: PageFetcher,
    *,
    start_page: int = 1,
) -> Iterator[tuple[Optional[T], Optional[MackerelError]]]:
    """Yield ``(item, None)`` for every item across pages.

    ``fetch_page(ctx, page)`` returns the page's items and whether another page
    follows. A failing fetch is yielded once as ``(None, error)`` and ends the
    sequence. Cancelling ``ctx`` stops the sequence at the next yield.
    """
    page = start_page
    while True:
        if ctx.done():
            return
        try:
            items, has_next_page = fetch_page(ctx, page)
        except MackerelError as exc:
            yield None, exc
            return
        for item in items:
            yield item, None
            if ctx.done():
                return
        if not has_next_page:
            return
        page += 1
