import asyncio
import os
import tempfile
from collections.abc import Sequence

import pytest

# Keep the event log out of the working tree; must precede calamar imports
os.environ.setdefault("CALAMAR_LOGS_DIR", tempfile.mkdtemp(prefix="calamar-logs-"))

from calamar.contracts.entities_v1 import Entity, EntityKind, EntityPage
from calamar.orchestrators.search.interface import EntityQueryClient

# text -> network -> matching ids, or the exception that network raises
Dataset = dict[str, dict[str, list[str] | Exception]]


class FakeEntityClient(EntityQueryClient):
    """In-memory entity client with per-request holds for ordering tests."""

    def __init__(self, kind: EntityKind, datasets: Dataset | None = None):
        self.kind = kind
        self.datasets = datasets or {}
        self.calls: list[tuple[str, str, int, int]] = []
        self._holds: dict[tuple[str, str, int | None], asyncio.Event] = {}

    def hold(self, text: str, network: str, page: int | None = None) -> asyncio.Event:
        """Block matching requests until the returned event is set."""
        event = asyncio.Event()
        self._holds[(text, network, page)] = event
        return event

    async def query(self, text: str, network: str, page: int, page_size: int) -> EntityPage:
        self.calls.append((text, network, page, page_size))
        hold = self._holds.get((text, network, page)) or self._holds.get((text, network, None))
        if hold is not None:
            await hold.wait()
        data = self.datasets.get(text, {}).get(network, [])
        if isinstance(data, Exception):
            raise data
        start = (page - 1) * page_size
        return EntityPage(
            items=[Entity(id=i) for i in data[start : start + page_size]],
            total_count=len(data),
        )

    def get_kind(self) -> EntityKind:
        return self.kind


async def drain(rounds: int = 20) -> None:
    """Let scheduled tasks run to completion or to their next hold."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def make_client():
    def _make(kind: EntityKind = EntityKind.BLOCKS, datasets: Dataset | None = None) -> FakeEntityClient:
        return FakeEntityClient(kind, datasets)

    return _make


@pytest.fixture
def make_clients():
    def _make(datasets_by_kind: dict[EntityKind, Dataset] | None = None) -> dict[EntityKind, FakeEntityClient]:
        datasets_by_kind = datasets_by_kind or {}
        return {kind: FakeEntityClient(kind, datasets_by_kind.get(kind)) for kind in EntityKind}

    return _make


def ids(result) -> list[str]:
    return [item.data.id for item in result.data]


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "property: property-based deterministic tests")
    config.addinivalue_line(
        "markers", "integration: requires live squid endpoints"
    )


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration/e2e tests against live squid endpoints.",
    )


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: Sequence[pytest.Item],
) -> None:
    run_integration = config.getoption("--run-integration")
    skip_integration = pytest.mark.skip(
        reason="integration/e2e is opt-in; rerun with --run-integration"
    )

    for item in items:
        if "tests/e2e/" in item.nodeid:
            item.add_marker("integration")
        if item.get_closest_marker("integration") and not run_integration:
            item.add_marker(skip_integration)
