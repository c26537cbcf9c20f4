"""Shared fixtures: fake Graph transport, fake credentials, manual clock."""
import os
import sys
from unittest.mock import MagicMock

import httpx
import pytest

# Ensure the project root is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from triggers.graph_auth import Credential
from triggers.graph_client import GraphClient


class ManualClock:
    """time.time stand-in that only moves when told to."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeGraph:
    """Routes requests to queued response factories by URL path suffix; records every call.

    The last factory queued for a route keeps answering once the others are used up.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, suffix: str, *responses):
        self.routes.setdefault(suffix, []).extend(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path
        # Longest suffix wins so ".../transcripts/f1" beats ".../transcripts"
        for suffix in sorted(self.routes, key=len, reverse=True):
            if path.endswith(suffix):
                queue = self.routes[suffix]
                resp = queue.pop(0) if len(queue) > 1 else queue[0]
                return resp()
        return httpx.Response(404, text="not found")

    def paths(self):
        return [c.url.path for c in self.calls]


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fake_graph():
    return FakeGraph()


@pytest.fixture
def graph_client(fake_graph, sleeps):
    http = httpx.Client(transport=httpx.MockTransport(fake_graph.handler))
    client = GraphClient(base_url="https://graph.test/beta", http_client=http, sleep=sleeps.append)
    yield client
    client.close()


@pytest.fixture
def credentials(clock):
    """Credential provider double; every acquire() issues tok-1, tok-2, ..."""
    provider = MagicMock()
    counter = {"n": 0}

    def acquire():
        counter["n"] += 1
        return Credential(token=f"tok-{counter['n']}", acquired_at=clock())

    provider.acquire.side_effect = acquire
    return provider
