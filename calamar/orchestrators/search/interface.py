"""Standard interface for entity query clients used by the aggregators.

One client per entity kind; each call targets a single network and returns an
EntityPage with an exact total count.
"""

from abc import ABC, abstractmethod

from calamar.contracts.entities_v1 import EntityKind, EntityPage


class EntityQueryClient(ABC):
    """Base class for all entity query clients."""

    @abstractmethod
    async def query(
        self,
        text: str,
        network: str,
        page: int,
        page_size: int,
    ) -> EntityPage:
        """Return one page of matches on ``network``. Raise on failure.

        ``total_count`` must be exact and stable for an unchanged ``text``.
        Must be safe to call concurrently with different pages.
        """

    @abstractmethod
    def get_kind(self) -> EntityKind:
        """Entity kind served by this client."""
