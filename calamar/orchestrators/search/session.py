"""Search session: drives the orchestrator from a navigable location.

Owns the pieces of screen state that sit above the orchestrator:
  - which networks a location's names resolve to
  - whether the previous result may stay visible while reloading
    (only when query text and network names equal the last settled search)
  - the anti-flicker gate
  - the final outcome: redirect, loading, not found, error or results
"""

from calamar.core.config import config
from calamar.core.logger import logger
from calamar.networks.registry import NetworkRegistry
from calamar.orchestrators.search.constants import ViewOutcome
from calamar.orchestrators.search.gate import MinimumDisplayGate
from calamar.orchestrators.search.location import SearchLocation
from calamar.orchestrators.search.models import SearchResult, SearchView
from calamar.orchestrators.search.orchestrator import SearchOrchestrator

HOME_PATH = "/"


class SearchSession:
    def __init__(
        self,
        orchestrator: SearchOrchestrator,
        registry: NetworkRegistry,
        gate: MinimumDisplayGate | None = None,
        page_size: int | None = None,
    ):
        self._orchestrator = orchestrator
        self._registry = registry
        self._gate = gate or MinimumDisplayGate()
        self._page_size = page_size or config.page_size
        self._location: SearchLocation | None = None
        self._settled_text: str | None = None
        self._settled_networks: list[str] | None = None

    @property
    def location(self) -> SearchLocation | None:
        return self._location

    def update(self, location: SearchLocation) -> SearchView:
        """Apply a new location and return what to show right now."""
        self._location = location
        if location.is_empty:
            return SearchView(outcome=ViewOutcome.REDIRECT, query="", redirect_to=HOME_PATH)

        keep_previous_data = (
            location.query.strip() == self._settled_text
            and location.networks == self._settled_networks
        )
        self._gate.observe_query(location.query.strip())
        result = self._orchestrator.search(
            location.to_query(self._network_names(location)),
            location.pagination(self._page_size),
            keep_previous_data=keep_previous_data,
        )
        return self.view(result)

    async def resolve(self, location: SearchLocation) -> SearchView:
        """Apply a location and wait for the settled outcome (after the gate opens)."""
        view = self.update(location)
        if location.is_empty:
            return view
        await self._orchestrator.settled()
        await self._gate.wait()
        return self.view(self._orchestrator.snapshot())

    def view(self, result: SearchResult) -> SearchView:
        """Decide the outcome for a snapshot of the current search."""
        location = self._location or SearchLocation()
        if not result.loading:
            self._settled_text = location.query.strip()
            self._settled_networks = list(location.networks)

        holding = self._gate.is_holding()
        target = result.redirect_target
        if not holding and target is not None:
            return SearchView(
                outcome=ViewOutcome.REDIRECT,
                query=location.query,
                result=result,
                redirect_to=target.path,
            )
        if (result.loading and not result.has_data) or holding:
            return SearchView(outcome=ViewOutcome.LOADING, query=location.query, result=result)
        if result.not_found:
            return SearchView(outcome=ViewOutcome.NOT_FOUND, query=location.query, result=result)
        if result.error is not None:
            logger.warning("Search %r failed: %s", location.query, result.error)
            return SearchView(outcome=ViewOutcome.ERROR, query=location.query, result=result)
        return SearchView(outcome=ViewOutcome.RESULTS, query=location.query, result=result)

    def _network_names(self, location: SearchLocation) -> list[str]:
        # No explicit selection searches every selectable network
        if not location.networks:
            return [n.name for n in self._registry.list_selectable()]
        return [n.name for n in self._registry.resolve_many(location.networks)]
