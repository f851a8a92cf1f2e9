"""Shared typed constants for search orchestration control flow."""

from enum import StrEnum

from calamar.contracts.entities_v1 import EntityKind

# Fixed tab order of the results screen
ENTITY_KINDS: tuple[EntityKind, ...] = (
    EntityKind.ACCOUNTS,
    EntityKind.BLOCKS,
    EntityKind.EXTRINSICS,
    EntityKind.EVENTS,
)

# Which kind wins when resolving the single global match
REDIRECT_PRECEDENCE: tuple[EntityKind, ...] = (
    EntityKind.EXTRINSICS,
    EntityKind.BLOCKS,
    EntityKind.ACCOUNTS,
    EntityKind.EVENTS,
)


class KindStatus(StrEnum):
    """Per-kind aggregation state."""

    IDLE = "idle"
    LOADING = "loading"
    SETTLED = "settled"
    ERRORED = "errored"


class ViewOutcome(StrEnum):
    """What the search screen should show for the current state."""

    REDIRECT = "redirect"
    LOADING = "loading"
    NOT_FOUND = "not_found"
    ERROR = "error"
    RESULTS = "results"
