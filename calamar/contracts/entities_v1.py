"""Entity Contract v1.

Defines the canonical types exchanged between entity query clients and the
search aggregation engine:
  - Entity kinds and their payload shapes (Account, Block, Extrinsic, Event)
  - Client response page (EntityPage)
  - Network-tagged result item (NetworkScopedItem)

Every entity carries a string ``id``; ``(network, id)`` identifies a match.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Entity kinds
# ---------------------------------------------------------------------------


class EntityKind(StrEnum):
    ACCOUNTS = "accounts"
    BLOCKS = "blocks"
    EXTRINSICS = "extrinsics"
    EVENTS = "events"

    @property
    def singular(self) -> str:
        """Path segment of the detail view, e.g. 'block'."""
        return self.value[:-1]


# ---------------------------------------------------------------------------
# Entity payloads
# ---------------------------------------------------------------------------


class Entity(BaseModel):
    """Base payload: anything with a stable identifier."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str


class Account(Entity):
    address: str | None = None


class Block(Entity):
    hash: str
    height: int
    timestamp: str | None = None
    spec_version: int | None = Field(default=None, alias="specVersion")


class Extrinsic(Entity):
    hash: str
    block_id: str = Field(alias="blockId")
    block_height: int = Field(alias="blockHeight")
    pallet_name: str = Field(alias="palletName")
    call_name: str = Field(alias="callName")
    timestamp: str | None = None
    signer: str | None = None
    success: bool = True
    index_in_block: int = Field(default=0, alias="indexInBlock")
    version: int | None = None
    spec_version: int | None = Field(default=None, alias="specVersion")
    tip: int | None = None
    fee: int | None = None

    @field_validator("tip", "fee", mode="before")
    @classmethod
    def _parse_big_int(cls, v: Any) -> int | None:
        # Squids serialize BigInt as strings
        if v is None or v == "":
            return None
        return int(v)


class Event(Entity):
    block_id: str = Field(alias="blockId")
    block_height: int = Field(alias="blockHeight")
    pallet_name: str = Field(alias="palletName")
    event_name: str = Field(alias="eventName")
    extrinsic_id: str | None = Field(default=None, alias="extrinsicId")
    index_in_block: int | None = Field(default=None, alias="indexInBlock")
    timestamp: str | None = None


ENTITY_MODELS: dict[EntityKind, type[Entity]] = {
    EntityKind.ACCOUNTS: Account,
    EntityKind.BLOCKS: Block,
    EntityKind.EXTRINSICS: Extrinsic,
    EntityKind.EVENTS: Event,
}


# ---------------------------------------------------------------------------
# Client response and aggregated items
# ---------------------------------------------------------------------------


class EntityPage(BaseModel):
    """One page of matches returned by an entity query client for one network."""

    items: list[Entity] = Field(default_factory=list)
    total_count: int = Field(default=0, ge=0, description="Exact count across all pages")


class NetworkScopedItem(BaseModel):
    """A single match tagged with the network it came from."""

    model_config = ConfigDict(frozen=True)

    network: str
    data: Entity

    @property
    def key(self) -> tuple[str, str]:
        return (self.network, self.data.id)
