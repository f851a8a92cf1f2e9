"""Orchestrators: federated search across entity kinds and networks."""

from calamar.orchestrators.search import SearchOrchestrator, SearchSession

__all__ = ["SearchOrchestrator", "SearchSession"]
