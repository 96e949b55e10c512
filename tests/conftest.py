import json

import httpx
import pytest

from fastnetmon_exporter.config import ExporterConfig
from fastnetmon_exporter.fetcher import BlockedIPFetcher

API_URL = "http://fastnetmon.test:10007/blackhole"


def blackhole_body(values, success=True) -> bytes:
    return json.dumps({"success": success, "values": values}).encode("utf-8")


class StubFetcher:
    """Returns queued bodies or raises queued errors, one per fetch."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0
        self.closed = False

    async def fetch(self) -> bytes:
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def config():
    return ExporterConfig(api_url=API_URL, user="admin", password="secret")


@pytest.fixture
def mock_fetcher(config):
    """Build a real fetcher whose requests are answered by ``handler``."""
    def _build(handler):
        return BlockedIPFetcher(config, transport=httpx.MockTransport(handler))
    return _build
