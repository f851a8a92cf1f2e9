"""Search orchestrator: one aggregator per entity kind, composed into one SearchResult.

Pipeline:
  1. Refuse empty queries before anything is dispatched
  2. Point each kind's aggregator at the query and that kind's page request
  3. Compose the four snapshots (total count, loading, notFound, redirect target)
  4. Notify observers whenever any kind changes state
"""

import asyncio
from collections.abc import Callable, Mapping

from calamar.contracts.entities_v1 import EntityKind
from calamar.core.errors import MalformedQueryError
from calamar.core.logger import logger
from calamar.orchestrators.search.aggregator import PerKindAggregator
from calamar.orchestrators.search.constants import ENTITY_KINDS
from calamar.orchestrators.search.interface import EntityQueryClient
from calamar.orchestrators.search.models import (
    PageRequest,
    PageResult,
    Query,
    SearchResult,
)

SearchListener = Callable[[SearchResult], None]


class SearchOrchestrator:
    """Composes four independent per-kind aggregators."""

    def __init__(
        self,
        clients: Mapping[EntityKind, EntityQueryClient],
        on_change: SearchListener | None = None,
    ):
        missing = [kind for kind in ENTITY_KINDS if kind not in clients]
        if missing:
            raise ValueError(f"No entity query client for: {', '.join(missing)}")
        self._on_change = on_change
        self._aggregators = {
            kind: PerKindAggregator(clients[kind], on_change=self._kind_changed)
            for kind in ENTITY_KINDS
        }
        self._query: Query | None = None
        self._announced: Query | None = None
        self._dispatching = False

    @property
    def query(self) -> Query | None:
        return self._query

    def aggregator(self, kind: EntityKind) -> PerKindAggregator:
        return self._aggregators[kind]

    def snapshot(self) -> SearchResult:
        return SearchResult.compose({kind: agg.snapshot for kind, agg in self._aggregators.items()})

    def search(
        self,
        query: Query,
        pagination: Mapping[EntityKind, PageRequest] | None = None,
        keep_previous_data: bool = False,
    ) -> SearchResult:
        """Run (or keep running) the search for these inputs and return a snapshot.

        Identical inputs issue no new network calls. Kinds missing from
        ``pagination`` use page 1 with the default page size.
        """
        if not query.text.strip():
            raise MalformedQueryError(query.text)
        pagination = pagination or {}

        self._query = query
        if self._announced != query:
            self._announced = query
            logger.search_started(query.text, list(query.networks))

        before = self.snapshot()
        self._dispatching = True
        try:
            for kind, aggregator in self._aggregators.items():
                aggregator.request(
                    query,
                    pagination.get(kind, PageRequest()),
                    keep_previous_data=keep_previous_data,
                )
        finally:
            self._dispatching = False

        result = self.snapshot()
        if result != before and self._on_change is not None:
            self._on_change(result)
        return result

    async def settled(self) -> SearchResult:
        """Wait for every kind to settle on the current inputs."""
        while True:
            generations = [agg.generation for agg in self._aggregators.values()]
            await asyncio.gather(*(agg.wait_settled() for agg in self._aggregators.values()))
            # Inputs may have changed while waiting
            if generations == [agg.generation for agg in self._aggregators.values()]:
                break
        result = self.snapshot()
        target = result.redirect_target
        logger.search_settled(
            self._query.text if self._query else "",
            result.total_count,
            redirect=target.path if target else None,
        )
        return result

    async def aclose(self) -> None:
        await asyncio.gather(*(agg.aclose() for agg in self._aggregators.values()))

    def _kind_changed(self, kind: EntityKind, result: PageResult) -> None:
        # search() notifies once after all four kinds are dispatched
        if self._dispatching or self._on_change is None:
            return
        self._on_change(self.snapshot())
