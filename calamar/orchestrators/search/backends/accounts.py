"""Account search on the balances squid (exact address lookup)."""

import re
from typing import Any

from calamar.contracts.entities_v1 import Account, Entity, EntityKind
from calamar.orchestrators.search.backends.squid import HASH_RE, SquidEntityClient

# SS58 address: base58 alphabet, 46-48 characters for 32-byte public keys
SS58_RE = re.compile(r"[1-9A-HJ-NP-Za-km-z]{46,48}")


class AccountSearchClient(SquidEntityClient):
    kind = EntityKind.ACCOUNTS
    squid_type = "balances"
    connection = "accountsConnection"
    where_type = "AccountWhereInput"
    order_type = "AccountOrderByInput"
    order_by = ["id_ASC"]
    fields = "id"

    def build_where(self, text: str) -> dict[str, Any] | None:
        if HASH_RE.fullmatch(text):
            return {"id_eq": text.lower()}
        if SS58_RE.fullmatch(text):
            return {"id_eq": text}
        return None

    def node_to_entity(self, node: dict[str, Any]) -> Entity:
        return Account(id=node["id"], address=node["id"])

    def is_exact_match(self, entity: Entity, text: str) -> bool:
        return entity.id.lower() == text.lower()
