from calamar.contracts.entities_v1 import (
    Account,
    Block,
    Entity,
    EntityKind,
    EntityPage,
    Event,
    Extrinsic,
    NetworkScopedItem,
)

__all__ = [
    "Account",
    "Block",
    "Entity",
    "EntityKind",
    "EntityPage",
    "Event",
    "Extrinsic",
    "NetworkScopedItem",
]
