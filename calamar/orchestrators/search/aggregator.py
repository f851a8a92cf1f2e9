"""Per-kind aggregator: fans one entity kind's query out to every selected network.

Each input change bumps a generation counter and starts a new aggregation task.
Tasks re-check their generation after every await and drop their result when a
newer input has arrived, so the last valid input wins regardless of arrival order.
Per-network client pages are memoized for the current Query, in flight or done.
"""

import asyncio
import time
from collections.abc import Callable, Iterable
from functools import partial

from calamar.contracts.entities_v1 import EntityKind, EntityPage
from calamar.core.errors import (
    AllNetworksFailedError,
    NetworkUnavailableError,
    SearchOrchestrationError,
)
from calamar.core.logger import logger
from calamar.orchestrators.search.constants import KindStatus
from calamar.orchestrators.search.interface import EntityQueryClient
from calamar.orchestrators.search.models import PageRequest, PageResult, Query
from calamar.orchestrators.search.pagination import (
    deduplicate_items,
    merge_windows,
    plan_windows,
)

ChangeListener = Callable[[EntityKind, PageResult], None]

_PageKey = tuple[str, int, int]  # (network, page, page_size)


class PerKindAggregator:
    """Produces one PageResult for one entity kind from N per-network queries."""

    def __init__(
        self,
        client: EntityQueryClient,
        on_change: ChangeListener | None = None,
    ) -> None:
        self._client = client
        self._kind = client.get_kind()
        self._on_change = on_change
        self._generation = 0
        self._input: tuple[Query, PageRequest] | None = None
        self._snapshot = PageResult()
        self._settled = asyncio.Event()
        self._settled.set()
        self._task: asyncio.Task | None = None
        self._cache_query: Query | None = None
        self._page_cache: dict[_PageKey, asyncio.Future] = {}

    @property
    def kind(self) -> EntityKind:
        return self._kind

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def snapshot(self) -> PageResult:
        return self._snapshot

    def request(
        self,
        query: Query,
        page_request: PageRequest,
        keep_previous_data: bool = False,
    ) -> PageResult:
        """Point the aggregator at new input and return the current snapshot.

        Unchanged input is a no-op. Must be called with a running event loop.
        """
        key = (query, page_request)
        if self._input == key:
            return self._snapshot

        self._generation += 1
        generation = self._generation
        self._input = key
        if self._cache_query != query:
            self._page_cache.clear()
            self._cache_query = query

        previous = self._snapshot
        if keep_previous_data:
            self._snapshot = PageResult(
                data=previous.data,
                total_count=previous.total_count,
                loading=True,
                failed_networks=previous.failed_networks,
                status=KindStatus.LOADING,
            )
        else:
            self._snapshot = PageResult(loading=True, status=KindStatus.LOADING)
        self._settled.clear()

        self._task = asyncio.get_running_loop().create_task(
            self._run(generation, query, page_request)
        )
        self._notify()
        return self._snapshot

    async def wait_settled(self) -> PageResult:
        """Wait until the current input has settled and return that snapshot."""
        await self._settled.wait()
        return self._snapshot

    async def aclose(self) -> None:
        """Cancel in-flight work. The aggregator can still take new requests."""
        tasks = [t for t in (self._task, *self._page_cache.values()) if t and not t.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._page_cache.clear()
        if not self._settled.is_set():
            # Cancelled input never settled; forget it so the same request runs again
            self._generation += 1
            self._input = None
            self._snapshot = PageResult()
            self._settled.set()
            self._notify()

    async def _run(self, generation: int, query: Query, page_request: PageRequest) -> None:
        started = time.monotonic()
        try:
            result = await self._aggregate(generation, query, page_request)
        except Exception as e:
            if generation != self._generation:
                return
            logger.error("%s aggregation crashed", self._kind, exception=e)
            result = PageResult(
                error=SearchOrchestrationError(self._kind, e),
                status=KindStatus.ERRORED,
            )
        if result is None or generation != self._generation:
            logger.debug("Aggregator %s: dropped stale generation %s", self._kind, generation)
            return

        self._snapshot = result
        self._settled.set()
        logger.kind_settled(
            self._kind,
            result.total_count,
            time.monotonic() - started,
            failed_networks=list(result.failed_networks),
            error=str(result.error) if result.error else None,
        )
        self._notify()

    async def _aggregate(
        self,
        generation: int,
        query: Query,
        page_request: PageRequest,
    ) -> PageResult | None:
        """Fetch and merge one flat page. Returns None once superseded."""
        networks = list(query.networks)
        page_size = page_request.page_size
        pages: dict[str, dict[int, EntityPage]] = {n: {} for n in networks}
        failures: dict[str, NetworkUnavailableError] = {}

        # First client page of every network yields the exact counts
        await self._fetch_all(query, ((n, 1) for n in networks), page_size, pages, failures)
        if generation != self._generation:
            return None
        counts = [(n, pages[n][1].total_count) for n in networks if n not in failures]

        while True:
            windows = plan_windows(counts, page_request)
            missing = [
                (w.network, p)
                for w in windows
                for p in w.client_pages(page_size)
                if p not in pages[w.network]
            ]
            if not missing:
                break
            await self._fetch_all(query, missing, page_size, pages, failures)
            if generation != self._generation:
                return None
            counts = [(n, c) for n, c in counts if n not in failures]

        if networks and len(failures) == len(networks):
            return PageResult(
                error=AllNetworksFailedError(self._kind, list(failures.values())),
                failed_networks=tuple(networks),
                status=KindStatus.ERRORED,
            )

        merged = merge_windows(windows, pages, page_size)
        data = deduplicate_items(merged)
        # Repeated (network, id) rows from a backend are not counted either
        duplicates = len(merged) - len(data)
        if duplicates:
            logger.warning("%s search returned %s duplicate item(s)", self._kind, duplicates)
        return PageResult(
            data=tuple(data),
            total_count=sum(c for _, c in counts) - duplicates,
            failed_networks=tuple(n for n in networks if n in failures),
            status=KindStatus.SETTLED,
        )

    async def _fetch_all(
        self,
        query: Query,
        targets: Iterable[tuple[str, int]],
        page_size: int,
        pages: dict[str, dict[int, EntityPage]],
        failures: dict[str, NetworkUnavailableError],
    ) -> None:
        """Fetch (network, page) pairs concurrently; failures never block siblings."""
        targets = [t for t in targets if t[0] not in failures]
        results = await asyncio.gather(
            *(self._fetch_page(query, network, page, page_size) for network, page in targets),
            return_exceptions=True,
        )
        for (network, page), result in zip(targets, results):
            if isinstance(result, Exception):
                if network not in failures:
                    failures[network] = NetworkUnavailableError(network, self._kind, result)
                    logger.warning("%s search on %s failed: %s", self._kind, network, result)
                continue
            pages[network][page] = result

    def _fetch_page(self, query: Query, network: str, page: int, page_size: int) -> asyncio.Future:
        key = (network, page, page_size)
        future = self._page_cache.get(key)
        if future is None:
            future = asyncio.ensure_future(
                self._client.query(query.text, network, page, page_size)
            )
            self._page_cache[key] = future
            future.add_done_callback(partial(self._forget_failed, key))
        return future

    def _forget_failed(self, key: _PageKey, future: asyncio.Future) -> None:
        # Failed pages are retried on the next request
        if future.cancelled() or future.exception() is not None:
            if self._page_cache.get(key) is future:
                del self._page_cache[key]

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self._kind, self._snapshot)
