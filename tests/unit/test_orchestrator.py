import asyncio

import pytest

from calamar.contracts.entities_v1 import EntityKind
from calamar.core.errors import (
    AllNetworksFailedError,
    MalformedQueryError,
    SearchOrchestrationError,
)
from calamar.orchestrators.search.models import PageRequest, Query, RedirectTarget
from calamar.orchestrators.search.orchestrator import SearchOrchestrator
from conftest import drain, ids


def _calls(clients) -> int:
    return sum(len(c.calls) for c in clients.values())


@pytest.mark.asyncio
async def test_single_match_across_kinds_yields_redirect(make_clients):
    clients = make_clients({EntityKind.BLOCKS: {"42": {"kusama": ["0000042-abc"]}}})
    orchestrator = SearchOrchestrator(clients)

    orchestrator.search(Query.create("42", ["polkadot", "kusama"]))
    result = await orchestrator.settled()

    assert result.total_count == 1
    assert result.redirect_target == RedirectTarget(
        kind=EntityKind.BLOCKS, network="kusama", id="0000042-abc"
    )
    assert result.redirect_target.path == "/kusama/block/0000042-abc"


@pytest.mark.asyncio
async def test_no_redirect_while_another_kind_is_loading(make_clients):
    clients = make_clients({EntityKind.EXTRINSICS: {"0xabc": {"polkadot": ["x1"]}}})
    clients[EntityKind.ACCOUNTS].hold("0xabc", "polkadot")
    orchestrator = SearchOrchestrator(clients)

    orchestrator.search(Query.create("0xabc", ["polkadot"]))
    await orchestrator.aggregator(EntityKind.EXTRINSICS).wait_settled()
    await drain()
    partial = orchestrator.snapshot()

    assert partial.total_count == 1
    assert partial.loading is True
    assert partial.redirect_target is None
    await orchestrator.aclose()


@pytest.mark.asyncio
async def test_more_than_one_match_has_no_redirect(make_clients):
    clients = make_clients(
        {
            EntityKind.BLOCKS: {"7": {"polkadot": ["b7"]}},
            EntityKind.EVENTS: {"7": {"polkadot": ["e7"]}},
        }
    )
    orchestrator = SearchOrchestrator(clients)

    orchestrator.search(Query.create("7", ["polkadot"]))
    result = await orchestrator.settled()

    assert result.total_count == 2
    assert result.redirect_target is None


@pytest.mark.asyncio
async def test_not_found_waits_for_every_kind(make_clients):
    clients = make_clients()
    release_blocks = clients[EntityKind.BLOCKS].hold("nothing", "polkadot")
    orchestrator = SearchOrchestrator(clients)

    orchestrator.search(Query.create("nothing", ["polkadot"]))
    await orchestrator.aggregator(EntityKind.ACCOUNTS).wait_settled()
    await drain()
    assert orchestrator.snapshot().accounts.not_found is True
    assert orchestrator.snapshot().not_found is False

    release_blocks.set()
    result = await orchestrator.settled()

    assert result.not_found is True
    assert result.loading is False


@pytest.mark.asyncio
async def test_kind_error_stays_local(make_clients):
    clients = make_clients(
        {
            EntityKind.ACCOUNTS: {"q": {"polkadot": ConnectionError("down")}},
            EntityKind.BLOCKS: {"q": {"polkadot": ["b1", "b2"]}},
        }
    )
    orchestrator = SearchOrchestrator(clients)

    orchestrator.search(Query.create("q", ["polkadot"]))
    result = await orchestrator.settled()

    assert isinstance(result.accounts.error, AllNetworksFailedError)
    assert ids(result.blocks) == ["b1", "b2"]
    assert result.error is None
    assert result.not_found is False


@pytest.mark.asyncio
async def test_zero_results_with_kind_error_is_not_not_found(make_clients):
    clients = make_clients({EntityKind.ACCOUNTS: {"q": {"polkadot": ConnectionError("down")}}})
    orchestrator = SearchOrchestrator(clients)

    orchestrator.search(Query.create("q", ["polkadot"]))
    result = await orchestrator.settled()

    assert result.total_count == 0
    assert result.not_found is False


@pytest.mark.asyncio
async def test_orchestration_fault_surfaces_as_page_error(make_clients):
    clients = make_clients({EntityKind.BLOCKS: {"q": {"polkadot": ["b1"]}}})

    async def broken_query(text, network, page, page_size):
        return None

    clients[EntityKind.EVENTS].query = broken_query
    orchestrator = SearchOrchestrator(clients)

    orchestrator.search(Query.create("q", ["polkadot"]))
    result = await orchestrator.settled()

    assert isinstance(result.error, SearchOrchestrationError)
    assert ids(result.blocks) == ["b1"]


@pytest.mark.asyncio
async def test_repeated_search_is_idempotent(make_clients):
    clients = make_clients({EntityKind.EVENTS: {"Balances": {"polkadot": ["e1", "e2"]}}})
    orchestrator = SearchOrchestrator(clients)
    pagination = {kind: PageRequest(page=1, page_size=10) for kind in EntityKind}

    orchestrator.search(Query.create("Balances", ["polkadot"]), pagination)
    first = await orchestrator.settled()
    calls = _calls(clients)
    second = orchestrator.search(Query.create("Balances", ["polkadot"]), pagination)

    assert _calls(clients) == calls
    assert second == first


@pytest.mark.asyncio
async def test_pagination_is_independent_per_kind(make_clients):
    clients = make_clients(
        {
            EntityKind.BLOCKS: {"q": {"polkadot": [f"b{i}" for i in range(15)]}},
            EntityKind.EVENTS: {"q": {"polkadot": [f"e{i}" for i in range(15)]}},
        }
    )
    orchestrator = SearchOrchestrator(clients)

    orchestrator.search(
        Query.create("q", ["polkadot"]),
        {EntityKind.BLOCKS: PageRequest(page=2, page_size=10), EntityKind.EVENTS: PageRequest(page=1, page_size=10)},
    )
    result = await orchestrator.settled()

    assert ids(result.blocks) == [f"b{i}" for i in range(10, 15)]
    assert ids(result.events) == [f"e{i}" for i in range(10)]


@pytest.mark.asyncio
async def test_empty_query_is_refused_without_calls(make_clients):
    clients = make_clients()
    orchestrator = SearchOrchestrator(clients)

    with pytest.raises(MalformedQueryError):
        orchestrator.search(Query.create("   ", ["polkadot"]))

    assert _calls(clients) == 0


@pytest.mark.asyncio
async def test_listener_is_notified_once_per_dispatch_and_per_settle(make_clients):
    clients = make_clients({EntityKind.BLOCKS: {"1": {"polkadot": ["b1"]}}})
    snapshots = []
    orchestrator = SearchOrchestrator(clients, on_change=snapshots.append)

    orchestrator.search(Query.create("1", ["polkadot"]))
    await orchestrator.settled()

    assert snapshots[0].loading is True
    assert snapshots[-1].loading is False
    assert len(snapshots) == 1 + len(EntityKind)


def test_missing_client_is_rejected(make_clients):
    clients = make_clients()
    del clients[EntityKind.EVENTS]

    with pytest.raises(ValueError, match="events"):
        SearchOrchestrator(clients)


@pytest.mark.asyncio
async def test_search_settles_again_after_aclose(make_clients):
    clients = make_clients({EntityKind.BLOCKS: {"7": {"polkadot": ["b7"]}}})
    clients[EntityKind.BLOCKS].hold("7", "polkadot")
    orchestrator = SearchOrchestrator(clients)
    query = Query.create("7", ["polkadot"])

    orchestrator.search(query)
    await orchestrator.aclose()
    clients[EntityKind.BLOCKS].hold("7", "polkadot").set()
    orchestrator.search(query)
    result = await asyncio.wait_for(orchestrator.settled(), timeout=0.5)

    assert result.loading is False
    assert ids(result.blocks) == ["b7"]
