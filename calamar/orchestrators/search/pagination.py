"""Federated pagination: one flat page sliced from several networks' result lists.

Networks are laid end to end in iteration order; the requested page is the
slice [offset, offset + page_size) of that concatenation. Each network is then
read through its own client-side pages of the same size.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from calamar.contracts.entities_v1 import EntityPage, NetworkScopedItem
from calamar.orchestrators.search.models import PageRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NetworkWindow:
    """Local offsets [start, stop) of one network's share of the page."""

    network: str
    start: int
    stop: int

    def client_pages(self, page_size: int) -> list[int]:
        """Client page numbers (1-based) that cover this window."""
        if self.stop <= self.start:
            return []
        first = self.start // page_size + 1
        last = (self.stop - 1) // page_size + 1
        return list(range(first, last + 1))


def plan_windows(
    counts: Sequence[tuple[str, int]],
    page_request: PageRequest,
) -> list[NetworkWindow]:
    """Map the global page onto per-network windows, in network order."""
    page_start = page_request.offset
    page_stop = page_start + page_request.page_size
    windows: list[NetworkWindow] = []
    cursor = 0
    for network, count in counts:
        net_start, net_stop = cursor, cursor + count
        cursor = net_stop
        lo = max(page_start, net_start)
        hi = min(page_stop, net_stop)
        if lo < hi:
            windows.append(NetworkWindow(network=network, start=lo - net_start, stop=hi - net_start))
        if cursor >= page_stop:
            break
    return windows


def slice_window(
    window: NetworkWindow,
    pages: Mapping[int, EntityPage],
    page_size: int,
) -> list[NetworkScopedItem]:
    """Cut a network's window out of its fetched client pages."""
    items: list[NetworkScopedItem] = []
    for page_number in window.client_pages(page_size):
        page = pages.get(page_number)
        if page is None:
            continue
        page_offset = (page_number - 1) * page_size
        lo = max(window.start - page_offset, 0)
        hi = min(window.stop - page_offset, page_size)
        for entity in page.items[lo:hi]:
            items.append(NetworkScopedItem(network=window.network, data=entity))
    return items


def deduplicate_items(items: Sequence[NetworkScopedItem]) -> list[NetworkScopedItem]:
    """Drop repeated (network, id) pairs, keeping the first occurrence.

    Identical ids on different networks are distinct matches and both stay.
    """
    seen: set[tuple[str, str]] = set()
    unique: list[NetworkScopedItem] = []
    for item in items:
        if item.key in seen:
            continue
        seen.add(item.key)
        unique.append(item)
    if len(unique) != len(items):
        logger.debug("Pagination: dropped %s duplicate item(s)", len(items) - len(unique))
    return unique


def merge_windows(
    windows: Sequence[NetworkWindow],
    pages_by_network: Mapping[str, Mapping[int, EntityPage]],
    page_size: int,
) -> list[NetworkScopedItem]:
    """Concatenate every window's items in network order.

    Duplicates are not dropped here; callers dedupe and adjust their totals.
    """
    merged: list[NetworkScopedItem] = []
    for window in windows:
        merged.extend(slice_window(window, pages_by_network.get(window.network, {}), page_size))
    return merged
