"""Navigable location: the URL parameters a search is reproducible from.

    ?query=0xabc&network=polkadot&network=kusama&tab=blocks&page=2

Only the active tab carries the page; background tabs stay on page 1.
"""

from __future__ import annotations

from urllib.parse import parse_qs, urlencode

from pydantic import BaseModel, Field, field_validator

from calamar.contracts.entities_v1 import EntityKind
from calamar.orchestrators.search.constants import ENTITY_KINDS
from calamar.orchestrators.search.models import PageRequest, Query


class SearchLocation(BaseModel):
    query: str = ""
    networks: list[str] = Field(default_factory=list)
    tab: EntityKind | None = None
    page: int = 1

    @field_validator("page", mode="before")
    @classmethod
    def _coerce_page(cls, v: object) -> int:
        try:
            page = int(v)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 1
        return page if page >= 1 else 1

    @field_validator("tab", mode="before")
    @classmethod
    def _coerce_tab(cls, v: object) -> EntityKind | None:
        if v is None or isinstance(v, EntityKind):
            return v
        try:
            return EntityKind(str(v).strip().lower())
        except ValueError:
            return None

    @classmethod
    def from_query_string(cls, qs: str) -> SearchLocation:
        params = parse_qs(qs.lstrip("?"), keep_blank_values=True)
        return cls(
            query=(params.get("query") or [""])[0],
            networks=[n for n in params.get("network", []) if n],
            tab=(params.get("tab") or [None])[0],
            page=(params.get("page") or [1])[0],
        )

    def to_query_string(self) -> str:
        params: list[tuple[str, str]] = [("query", self.query)]
        params.extend(("network", n) for n in self.networks)
        if self.tab is not None:
            params.append(("tab", self.tab.value))
        if self.page != 1:
            params.append(("page", str(self.page)))
        return urlencode(params)

    @property
    def is_empty(self) -> bool:
        return not self.query.strip()

    def to_query(self, networks: list[str] | None = None) -> Query:
        """Query for this location; ``networks`` overrides the raw names once resolved."""
        return Query.create(self.query, self.networks if networks is None else networks)

    def pagination(self, page_size: int) -> dict[EntityKind, PageRequest]:
        return {
            kind: PageRequest(page=self.page if kind == self.tab else 1, page_size=page_size)
            for kind in ENTITY_KINDS
        }

    def with_tab(self, tab: EntityKind) -> SearchLocation:
        """Switching tabs keeps query and networks and resets the page."""
        return self.model_copy(update={"tab": tab, "page": 1})

    def with_page(self, page: int) -> SearchLocation:
        return self.model_copy(update={"page": max(1, page)})
