"""Full reloads of the store's paged listings."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from workflow_console.store.models import Page

logger = logging.getLogger(__name__)

T = TypeVar("T")


def collect_pages(
    fetch: Callable[[int, int], Page[T]],
    *,
    page_size: int,
    max_pages: int,
    listing: str,
) -> list[T]:
    """Fetch pages 0, 1, ... until the store reports the last one.

    Stops after `max_pages` pages and logs a warning when the listing was
    truncated.
    """

    items: list[T] = []
    for number in range(max_pages):
        page = fetch(number, page_size)
        items.extend(page.content)
        if page.is_last or not page.content:
            return items

    logger.warning(
        "Reload truncated",
        extra={"listing": listing, "max_pages": max_pages, "loaded": len(items)},
    )
    return items
