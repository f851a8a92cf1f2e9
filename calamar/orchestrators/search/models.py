"""Search inputs and result snapshots for the aggregation pipeline.

Inputs (Query, PageRequest) are immutable and hashable; they key the
aggregators' memoization. Results (PageResult, SearchResult) are immutable
snapshots handed to callers; a new snapshot is built on every state change.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from calamar.contracts.entities_v1 import EntityKind, NetworkScopedItem
from calamar.core.errors import SearchOrchestrationError
from calamar.orchestrators.search.constants import (
    ENTITY_KINDS,
    REDIRECT_PRECEDENCE,
    KindStatus,
    ViewOutcome,
)


@dataclass(frozen=True, eq=False)
class Query:
    """Search text plus the ordered set of networks to search.

    Equality ignores network order; iteration order still drives result order.
    """

    text: str
    networks: tuple[str, ...] = ()

    @classmethod
    def create(cls, text: str, networks: Iterable[str]) -> Query:
        return cls(text=text.strip(), networks=tuple(dict.fromkeys(networks)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Query):
            return NotImplemented
        return self.text == other.text and frozenset(self.networks) == frozenset(other.networks)

    def __hash__(self) -> int:
        return hash((self.text, frozenset(self.networks)))


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    page_size: int = 10

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be > 0, got {self.page_size}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass(frozen=True)
class PageResult:
    """One entity kind's view: a flat page merged across networks."""

    data: tuple[NetworkScopedItem, ...] = ()
    total_count: int = 0
    loading: bool = False
    error: Exception | None = None
    failed_networks: tuple[str, ...] = ()
    status: KindStatus = KindStatus.IDLE

    @property
    def not_found(self) -> bool:
        return self.total_count == 0 and not self.loading and self.error is None


@dataclass(frozen=True)
class RedirectTarget:
    """The single global match the caller should navigate to."""

    kind: EntityKind
    network: str
    id: str

    @property
    def path(self) -> str:
        return f"/{self.network}/{self.kind.singular}/{self.id}"


@dataclass(frozen=True)
class SearchResult:
    """Four per-kind results plus fields derived from all of them."""

    accounts: PageResult = field(default_factory=PageResult)
    blocks: PageResult = field(default_factory=PageResult)
    extrinsics: PageResult = field(default_factory=PageResult)
    events: PageResult = field(default_factory=PageResult)

    @classmethod
    def compose(cls, results: dict[EntityKind, PageResult]) -> SearchResult:
        return cls(**{kind.value: results.get(kind, PageResult()) for kind in ENTITY_KINDS})

    def for_kind(self, kind: EntityKind) -> PageResult:
        return getattr(self, kind.value)

    def by_kind(self) -> dict[EntityKind, PageResult]:
        return {kind: self.for_kind(kind) for kind in ENTITY_KINDS}

    @property
    def total_count(self) -> int:
        return sum(r.total_count for r in self.by_kind().values())

    @property
    def loading(self) -> bool:
        return any(r.loading for r in self.by_kind().values())

    @property
    def has_data(self) -> bool:
        return any(r.data for r in self.by_kind().values())

    @property
    def error(self) -> Exception | None:
        """Page-level error. Per-kind failures stay on their PageResult."""
        for result in self.by_kind().values():
            if isinstance(result.error, SearchOrchestrationError):
                return result.error
        return None

    @property
    def not_found(self) -> bool:
        results = self.by_kind().values()
        return all(r.status == KindStatus.SETTLED and r.not_found for r in results)

    @property
    def redirect_target(self) -> RedirectTarget | None:
        """Set only once every kind has settled and exactly one item matched."""
        if self.loading or self.total_count != 1:
            return None
        for kind in REDIRECT_PRECEDENCE:
            data = self.for_kind(kind).data
            if data:
                item = data[0]
                return RedirectTarget(kind=kind, network=item.network, id=item.data.id)
        return None


@dataclass(frozen=True)
class SearchView:
    """Resolved screen state: what to show and the data behind it."""

    outcome: ViewOutcome
    query: str
    result: SearchResult | None = None
    redirect_to: str | None = None
