"""Block search on the explorer squid: by hash or by height."""

from typing import Any

from calamar.contracts.entities_v1 import Block, Entity, EntityKind
from calamar.orchestrators.search.backends.squid import HASH_RE, SquidEntityClient


class BlockSearchClient(SquidEntityClient):
    kind = EntityKind.BLOCKS
    connection = "blocksConnection"
    where_type = "BlockWhereInput"
    order_type = "BlockOrderByInput"
    order_by = ["height_DESC", "id_ASC"]
    fields = "id hash height timestamp specVersion"

    def build_where(self, text: str) -> dict[str, Any] | None:
        if HASH_RE.fullmatch(text):
            return {"hash_eq": text.lower()}
        if text.isdigit():
            return {"height_eq": int(text)}
        return None

    def is_exact_match(self, entity: Entity, text: str) -> bool:
        if not isinstance(entity, Block):
            return False
        return entity.hash.lower() == text.lower() or str(entity.height) == text
