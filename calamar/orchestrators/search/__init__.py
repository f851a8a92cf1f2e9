"""Federated search: per-kind aggregation across networks with stale-result suppression."""

from calamar.orchestrators.search.aggregator import PerKindAggregator
from calamar.orchestrators.search.gate import MinimumDisplayGate
from calamar.orchestrators.search.interface import EntityQueryClient
from calamar.orchestrators.search.location import SearchLocation
from calamar.orchestrators.search.models import (
    PageRequest,
    PageResult,
    Query,
    RedirectTarget,
    SearchResult,
    SearchView,
)
from calamar.orchestrators.search.orchestrator import SearchOrchestrator
from calamar.orchestrators.search.session import SearchSession

__all__ = [
    "EntityQueryClient",
    "MinimumDisplayGate",
    "PageRequest",
    "PageResult",
    "PerKindAggregator",
    "Query",
    "RedirectTarget",
    "SearchLocation",
    "SearchOrchestrator",
    "SearchResult",
    "SearchSession",
    "SearchView",
]
