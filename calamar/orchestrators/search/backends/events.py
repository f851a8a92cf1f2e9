"""Event search on the explorer squid: by `Pallet` or `Pallet.Event` name."""

from typing import Any

from calamar.contracts.entities_v1 import Entity, EntityKind, Event
from calamar.orchestrators.search.backends.squid import (
    NAME_RE,
    SquidEntityClient,
    flatten_block,
    upper_first,
)


class EventSearchClient(SquidEntityClient):
    kind = EntityKind.EVENTS
    connection = "eventsConnection"
    where_type = "EventWhereInput"
    order_type = "EventOrderByInput"
    order_by = ["id_DESC"]
    fields = "id palletName eventName indexInBlock block { id height timestamp } extrinsic { id }"

    def build_where(self, text: str) -> dict[str, Any] | None:
        match = NAME_RE.fullmatch(text)
        if not match:
            return None
        pallet, event = match.groups()
        where: dict[str, Any] = {"palletName_eq": upper_first(pallet)}
        if event:
            where["eventName_eq"] = upper_first(event)
        return where

    def node_to_entity(self, node: dict[str, Any]) -> Entity:
        flat = flatten_block(node)
        extrinsic = flat.pop("extrinsic", None) or {}
        flat.setdefault("extrinsicId", extrinsic.get("id"))
        return Event.model_validate(flat)
