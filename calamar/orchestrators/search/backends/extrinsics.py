"""Extrinsic search on the explorer squid: by hash or by `Pallet.call` name."""

from typing import Any

from calamar.contracts.entities_v1 import Entity, EntityKind, Extrinsic
from calamar.orchestrators.search.backends.squid import (
    HASH_RE,
    NAME_RE,
    SquidEntityClient,
    flatten_block,
    upper_first,
)


class ExtrinsicSearchClient(SquidEntityClient):
    kind = EntityKind.EXTRINSICS
    connection = "extrinsicsConnection"
    where_type = "ExtrinsicWhereInput"
    order_type = "ExtrinsicOrderByInput"
    order_by = ["id_DESC"]
    fields = (
        "id hash palletName callName signer success indexInBlock version specVersion tip fee "
        "block { id height timestamp }"
    )

    def build_where(self, text: str) -> dict[str, Any] | None:
        if HASH_RE.fullmatch(text):
            return {"hash_eq": text.lower()}
        match = NAME_RE.fullmatch(text)
        if not match:
            return None
        pallet, call = match.groups()
        where: dict[str, Any] = {"palletName_eq": upper_first(pallet)}
        if call:
            where["callName_eq"] = call
        return where

    def node_to_entity(self, node: dict[str, Any]) -> Entity:
        return Extrinsic.model_validate(flatten_block(node))

    def is_exact_match(self, entity: Entity, text: str) -> bool:
        return isinstance(entity, Extrinsic) and entity.hash.lower() == text.lower()
