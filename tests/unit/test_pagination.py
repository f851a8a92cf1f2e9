from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from calamar.contracts.entities_v1 import Entity, EntityPage, NetworkScopedItem
from calamar.orchestrators.search.models import PageRequest
from calamar.orchestrators.search.pagination import (
    NetworkWindow,
    deduplicate_items,
    merge_windows,
    plan_windows,
)


def _client_pages(ids: list[str], page_size: int) -> dict[int, EntityPage]:
    pages = {}
    for number in range(1, len(ids) // page_size + 2):
        chunk = ids[(number - 1) * page_size : number * page_size]
        pages[number] = EntityPage(items=[Entity(id=i) for i in chunk], total_count=len(ids))
    return pages


def test_plan_windows_spans_network_boundary():
    windows = plan_windows([("a", 7), ("b", 5)], PageRequest(page=1, page_size=10))

    assert windows == [
        NetworkWindow(network="a", start=0, stop=7),
        NetworkWindow(network="b", start=0, stop=3),
    ]


def test_plan_windows_second_page_reads_only_tail_of_last_network():
    windows = plan_windows([("a", 7), ("b", 5)], PageRequest(page=2, page_size=10))

    assert windows == [NetworkWindow(network="b", start=3, stop=5)]


def test_plan_windows_past_the_end_is_empty():
    assert plan_windows([("a", 7), ("b", 5)], PageRequest(page=3, page_size=10)) == []


def test_plan_windows_skips_empty_networks():
    windows = plan_windows([("a", 0), ("b", 2), ("c", 0)], PageRequest(page=1, page_size=10))

    assert windows == [NetworkWindow(network="b", start=0, stop=2)]


def test_client_pages_cover_window():
    assert NetworkWindow("a", start=6, stop=12).client_pages(5) == [2, 3]
    assert NetworkWindow("a", start=0, stop=5).client_pages(5) == [1]
    assert NetworkWindow("a", start=3, stop=3).client_pages(5) == []


def test_merge_windows_concatenates_in_network_order():
    a = [f"a{i}" for i in range(7)]
    b = [f"b{i}" for i in range(5)]
    pages = {"a": _client_pages(a, 10), "b": _client_pages(b, 10)}

    page_one = merge_windows(plan_windows([("a", 7), ("b", 5)], PageRequest(1, 10)), pages, 10)
    page_two = merge_windows(plan_windows([("a", 7), ("b", 5)], PageRequest(2, 10)), pages, 10)

    assert [i.data.id for i in page_one] == a + ["b0", "b1", "b2"]
    assert [i.data.id for i in page_two] == ["b3", "b4"]
    assert {i.network for i in page_two} == {"b"}


def test_deduplicate_keeps_same_id_on_different_networks():
    items = [
        NetworkScopedItem(network="a", data=Entity(id="1")),
        NetworkScopedItem(network="b", data=Entity(id="1")),
        NetworkScopedItem(network="a", data=Entity(id="1")),
    ]

    unique = deduplicate_items(items)

    assert [(i.network, i.data.id) for i in unique] == [("a", "1"), ("b", "1")]


@pytest.mark.property
@given(
    counts=st.lists(st.integers(min_value=0, max_value=25), min_size=1, max_size=4),
    page=st.integers(min_value=1, max_value=8),
    page_size=st.integers(min_value=1, max_value=12),
)
def test_federated_page_equals_slice_of_concatenation(counts, page, page_size):
    networks = [f"net{i}" for i in range(len(counts))]
    lists = {n: [f"{n}-{j}" for j in range(c)] for n, c in zip(networks, counts)}
    pages = {n: _client_pages(lists[n], page_size) for n in networks}
    request = PageRequest(page=page, page_size=page_size)

    merged = merge_windows(plan_windows(list(zip(networks, counts)), request), pages, page_size)

    flat = [(n, i) for n in networks for i in lists[n]]
    expected = flat[request.offset : request.offset + page_size]
    assert [(item.network, item.data.id) for item in merged] == expected
