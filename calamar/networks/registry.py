"""Network registry: resolves user-facing network names to squid endpoints.

Each selectable network is served by a set of squids (one per squid type).
Endpoint URLs follow per-type templates; a few networks pin a specific squid
version for a type.
"""

import logging
from collections.abc import Callable, Iterable

from pydantic import BaseModel, Field

from calamar.core.config import config

logger = logging.getLogger(__name__)

SQUID_TYPES = ["archive", "balances", "explorer", "main", "stats"]

SQUID_URL_TEMPLATES: dict[str, Callable[[str, str], str]] = {
    "balances": lambda base, network: f"{base}/{network}-balances/graphql",
    "explorer": lambda base, network: f"{base}/gs-explorer-{network}/graphql",
    "main": lambda base, network: f"{base}/gs-main-{network}/graphql",
    "stats": lambda base, network: f"{base}/gs-stats-{network}/graphql",
}

FORCE_SQUID_URLS: dict[str, dict[str, str]] = {
    "kusama": {
        "stats": "https://squid.subsquid.io/chain-analytics-squid/v/kusama-multi-parallel-2-0/graphql",
    },
    "polkadot": {
        "stats": "https://squid.subsquid.io/chain-analytics-squid/v/polkadot-multi-parallel-2-0/graphql",
    },
}


def _humanize_network_name(name: str) -> str:
    return name.replace("-", " ").title()


class Network(BaseModel):
    """A selectable data network and its squid endpoints."""

    name: str
    display_name: str = ""
    squids: dict[str, str] = Field(default_factory=dict, description="squid type -> GraphQL URL")

    def squid_url(self, squid_type: str) -> str | None:
        return self.squids.get(squid_type)


def build_network(name: str, base_url: str | None = None) -> Network:
    """Derive a network's squid endpoints from the URL templates and overrides."""
    base = (base_url or config.squid_base_url).rstrip("/")
    squids = {squid_type: template(base, name) for squid_type, template in SQUID_URL_TEMPLATES.items()}
    squids.update(FORCE_SQUID_URLS.get(name, {}))
    return Network(name=name, display_name=_humanize_network_name(name), squids=squids)


class NetworkRegistry:
    """Ordered set of selectable networks."""

    def __init__(self, networks: Iterable[Network] = ()) -> None:
        self._networks: dict[str, Network] = {}
        for network in networks:
            self.register(network)

    @classmethod
    def from_config(cls) -> "NetworkRegistry":
        return cls(build_network(name) for name in config.networks)

    def register(self, network: Network) -> None:
        self._networks[network.name] = network
        logger.debug("Registered network %s: %s", network.name, sorted(network.squids))

    def resolve(self, name: str) -> Network | None:
        return self._networks.get(name)

    def resolve_many(self, names: Iterable[str]) -> list[Network]:
        """Resolve names in the given order, dropping unknown and repeated names."""
        resolved: list[Network] = []
        seen: set[str] = set()
        for name in names:
            if name in seen:
                continue
            seen.add(name)
            network = self.resolve(name)
            if network is None:
                logger.warning("Unknown network '%s' ignored", name)
                continue
            resolved.append(network)
        return resolved

    def list_selectable(self) -> list[Network]:
        return list(self._networks.values())

    def squid_url(self, network_name: str, squid_type: str) -> str | None:
        if squid_type not in SQUID_TYPES:
            raise ValueError(f"Unknown squid type: {squid_type}")
        network = self.resolve(network_name)
        return network.squid_url(squid_type) if network else None
