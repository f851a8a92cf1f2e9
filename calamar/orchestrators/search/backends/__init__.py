from calamar.contracts.entities_v1 import EntityKind
from calamar.orchestrators.search.backends.accounts import AccountSearchClient
from calamar.orchestrators.search.backends.blocks import BlockSearchClient
from calamar.orchestrators.search.backends.events import EventSearchClient
from calamar.orchestrators.search.backends.extrinsics import ExtrinsicSearchClient
from calamar.orchestrators.search.backends.squid import SquidEntityClient, SquidTransport
from calamar.orchestrators.search.interface import EntityQueryClient


def build_squid_clients(transport: SquidTransport) -> dict[EntityKind, EntityQueryClient]:
    """One squid-backed client per entity kind, sharing one transport."""
    clients: list[SquidEntityClient] = [
        AccountSearchClient(transport),
        BlockSearchClient(transport),
        ExtrinsicSearchClient(transport),
        EventSearchClient(transport),
    ]
    return {client.get_kind(): client for client in clients}


__all__ = [
    "AccountSearchClient",
    "BlockSearchClient",
    "EventSearchClient",
    "ExtrinsicSearchClient",
    "SquidTransport",
    "build_squid_clients",
]
