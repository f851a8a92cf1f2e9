"""One-shot interface: run a single search, print the outcome, exit."""

from __future__ import annotations

import asyncio

from calamar.contracts.entities_v1 import EntityKind
from calamar.networks.registry import NetworkRegistry
from calamar.orchestrators.search.backends import SquidTransport, build_squid_clients
from calamar.orchestrators.search.constants import ViewOutcome
from calamar.orchestrators.search.gate import MinimumDisplayGate
from calamar.orchestrators.search.location import SearchLocation
from calamar.orchestrators.search.models import SearchView
from calamar.orchestrators.search.orchestrator import SearchOrchestrator
from calamar.orchestrators.search.session import SearchSession


def format_view(view: SearchView) -> str:
    if view.outcome == ViewOutcome.REDIRECT:
        return f"→ {view.redirect_to}"
    if view.outcome == ViewOutcome.NOT_FOUND:
        return f"Nothing was found for query “{view.query}”"
    if view.outcome == ViewOutcome.ERROR:
        error = view.result.error if view.result else None
        return f"Unexpected error occurred while searching for “{view.query}”: {error}"
    if view.result is None:
        return f"Searching for “{view.query}”"

    lines = [f"Search results for query “{view.query}”"]
    for kind, result in view.result.by_kind().items():
        if result.error is not None:
            lines.append(f"  {kind}: error: {result.error}")
            continue
        if result.total_count == 0:
            continue
        down = f" (unavailable: {', '.join(result.failed_networks)})" if result.failed_networks else ""
        lines.append(f"  {kind} ({result.total_count}){down}")
        for item in result.data:
            lines.append(f"    /{item.network}/{kind.singular}/{item.data.id}")
    return "\n".join(lines)


async def run_oneshot(
    query: str,
    networks: list[str] | None = None,
    tab: EntityKind | None = None,
    page: int = 1,
) -> int:
    text = (query or "").strip()
    if not text:
        print("Error: query must not be empty")
        return 2

    registry = NetworkRegistry.from_config()
    unknown = [n for n in networks or [] if registry.resolve(n) is None]
    if unknown:
        print(f"Error: unknown network(s): {', '.join(unknown)}")
        return 2

    transport = SquidTransport(registry)
    orchestrator = SearchOrchestrator(build_squid_clients(transport))
    # No screen to flicker: skip the minimum display time
    session = SearchSession(orchestrator, registry, gate=MinimumDisplayGate(0))
    try:
        location = SearchLocation(query=text, networks=networks or [], tab=tab, page=page)
        view = await session.resolve(location)
        print(format_view(view))
        return 1 if view.outcome == ViewOutcome.ERROR else 0
    finally:
        await orchestrator.aclose()
        await transport.aclose()


def main(
    query: str,
    networks: list[str] | None = None,
    tab: EntityKind | None = None,
    page: int = 1,
) -> int:
    return asyncio.run(run_oneshot(query=query, networks=networks, tab=tab, page=page))


def list_networks() -> int:
    for network in NetworkRegistry.from_config().list_selectable():
        print(f"{network.name}\t{network.display_name}")
    return 0

