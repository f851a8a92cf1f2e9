"""Squid GraphQL transport and the shared entity-client base.

Every entity kind is served by a `<entities>Connection` query on one squid type
per network. Subsquid connection cursors are stringified offsets, so client page
N of size S starts after cursor ``(N - 1) * S``.
"""

import logging
import re
import time
from typing import Any

import httpx

from calamar.contracts.entities_v1 import ENTITY_MODELS, Entity, EntityKind, EntityPage
from calamar.core.config import config
from calamar.core.errors import SquidRequestError
from calamar.networks.registry import NetworkRegistry
from calamar.orchestrators.search.interface import EntityQueryClient

logger = logging.getLogger(__name__)

HASH_RE = re.compile(r"0x[0-9a-fA-F]{64}")
# Pallet, or Pallet.item (call or event name)
NAME_RE = re.compile(r"([A-Za-z][A-Za-z0-9]*)(?:\.([A-Za-z_][A-Za-z0-9_]*))?")

CONNECTION_QUERY = """
query ($where: %(where_type)s, $first: Int!, $after: String, $orderBy: [%(order_type)s!]!) {
  %(connection)s(where: $where, first: $first, after: $after, orderBy: $orderBy) {
    totalCount
    edges { node { %(fields)s } }
  }
}
"""


class SquidTransport:
    """Posts GraphQL documents to a network's squid and unwraps the response."""

    def __init__(
        self,
        registry: NetworkRegistry,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._registry = registry
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else config.request_timeout
        )

    async def execute(
        self,
        network: str,
        squid_type: str,
        document: str,
        variables: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = self._registry.squid_url(network, squid_type)
        if not url:
            raise SquidRequestError(f"{network}/{squid_type}", "no squid endpoint configured")

        t0 = time.monotonic()
        try:
            response = await self._client.post(
                url, json={"query": document, "variables": variables or {}}
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SquidRequestError(
                url, f"HTTP {e.response.status_code}", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise SquidRequestError(url, str(e) or type(e).__name__) from e
        elapsed_ms = round((time.monotonic() - t0) * 1000, 1)

        try:
            payload = response.json()
        except ValueError as e:
            raise SquidRequestError(url, "invalid JSON response") from e

        errors = payload.get("errors")
        if errors:
            first = errors[0] if isinstance(errors, list) and errors else errors
            message = first.get("message") if isinstance(first, dict) else str(first)
            raise SquidRequestError(url, f"GraphQL error: {message}")

        logger.debug("Squid %s/%s answered in %.1fms", network, squid_type, elapsed_ms)
        return payload.get("data") or {}

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def upper_first(name: str) -> str:
    return name[:1].upper() + name[1:]


def flatten_block(node: dict[str, Any]) -> dict[str, Any]:
    """Lift nested `block { id height timestamp }` onto the node."""
    flat = dict(node)
    block = flat.pop("block", None) or {}
    flat.setdefault("blockId", block.get("id"))
    flat.setdefault("blockHeight", block.get("height"))
    flat.setdefault("timestamp", block.get("timestamp"))
    return flat


class SquidEntityClient(EntityQueryClient):
    """Entity client backed by one squid connection query.

    Subclasses describe the connection and translate the query text into a
    `where` clause; text that cannot match this kind yields an empty page
    without a request.
    """

    kind: EntityKind
    squid_type = "explorer"
    connection = ""
    where_type = ""
    order_type = ""
    order_by: list[str] = ["id_ASC"]
    fields = "id"

    def __init__(self, transport: SquidTransport) -> None:
        self._transport = transport

    def get_kind(self) -> EntityKind:
        return self.kind

    def build_where(self, text: str) -> dict[str, Any] | None:
        raise NotImplementedError

    def node_to_entity(self, node: dict[str, Any]) -> Entity:
        return ENTITY_MODELS[self.kind].model_validate(node)

    def is_exact_match(self, entity: Entity, text: str) -> bool:
        return entity.id == text

    async def query(
        self,
        text: str,
        network: str,
        page: int,
        page_size: int,
    ) -> EntityPage:
        where = self.build_where(text.strip())
        if where is None:
            return EntityPage()

        document = CONNECTION_QUERY % {
            "where_type": self.where_type,
            "order_type": self.order_type,
            "connection": self.connection,
            "fields": self.fields,
        }
        variables: dict[str, Any] = {
            "where": where,
            "first": page_size,
            "after": str((page - 1) * page_size) if page > 1 else None,
            "orderBy": self.order_by,
        }
        data = await self._transport.execute(network, self.squid_type, document, variables)
        return self._parse_connection(data, network, text.strip())

    def _parse_connection(self, data: dict[str, Any], network: str, text: str) -> EntityPage:
        connection = data.get(self.connection)
        if not isinstance(connection, dict):
            raise SquidRequestError(network, f"missing '{self.connection}' in response")

        items: list[Entity] = []
        for edge in connection.get("edges") or []:
            node = edge.get("node") if isinstance(edge, dict) else None
            if not isinstance(node, dict):
                continue
            try:
                items.append(self.node_to_entity(node))
            except ValueError as e:
                logger.debug("Squid %s: skipped malformed %s node: %s", network, self.kind, e)

        # Exact identifier match leads its page; sort is stable otherwise
        items.sort(key=lambda entity: 0 if self.is_exact_match(entity, text) else 1)
        return EntityPage(items=items, total_count=int(connection.get("totalCount") or 0))
