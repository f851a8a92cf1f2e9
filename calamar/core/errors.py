"""Error taxonomy for search aggregation."""

from __future__ import annotations


class CalamarSearchError(Exception):
    """Base class for all search errors."""


class MalformedQueryError(CalamarSearchError):
    """Query text is empty or whitespace; no search is run."""

    def __init__(self, text: str | None = None):
        super().__init__("Search query must not be empty")
        self.text = text


class NetworkUnavailableError(CalamarSearchError):
    """One network's entity query failed. Partial, non-fatal."""

    def __init__(self, network: str, kind: str, cause: BaseException | None = None):
        detail = f": {cause}" if cause else ""
        super().__init__(f"{kind} search on '{network}' failed{detail}")
        self.network = network
        self.kind = kind
        self.cause = cause


class AllNetworksFailedError(CalamarSearchError):
    """Every selected network failed for one entity kind."""

    def __init__(self, kind: str, failures: list[NetworkUnavailableError]):
        networks = ", ".join(f.network for f in failures) or "(none)"
        super().__init__(f"{kind} search failed on all networks: {networks}")
        self.kind = kind
        self.failures = failures


class SearchOrchestrationError(CalamarSearchError):
    """Unexpected fault inside aggregation. Surfaced as the page-level error."""

    def __init__(self, kind: str, cause: BaseException):
        super().__init__(f"{kind} aggregation crashed: {cause}")
        self.kind = kind
        self.cause = cause


class SquidRequestError(CalamarSearchError):
    """HTTP or GraphQL failure talking to a squid endpoint."""

    def __init__(self, url: str, message: str, status_code: int | None = None):
        super().__init__(f"{url}: {message}")
        self.url = url
        self.status_code = status_code
