"""Tests that chain reads do not stall the event loop."""

import asyncio
import threading
import time

import httpx

from launchpool.api.endpoints import get_pool_source
from launchpool.api.main import app
from launchpool.pool import RpcPoolSource
from tests.helpers import POOL

NODE_DELAY = 1.0


class TestSlowPoolReads:
    """A pool read waiting on the RPC node runs off the event loop."""

    def test_health_answers_while_pool_read_in_flight(self) -> None:
        read_started = threading.Event()

        def slow_node(request: httpx.Request) -> httpx.Response:
            read_started.set()
            time.sleep(NODE_DELAY)
            return httpx.Response(503)

        source = RpcPoolSource("http://rpc.test", client=httpx.Client(transport=httpx.MockTransport(slow_node)))

        async def health_during_pool_read() -> tuple[float, httpx.Response, httpx.Response]:
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                start = time.perf_counter()
                pool_request = asyncio.create_task(client.get(f"/pools/{POOL}"))
                while not read_started.is_set():
                    await asyncio.sleep(0.01)
                health = await client.get("/health")
                elapsed = time.perf_counter() - start
                return elapsed, health, await pool_request

        app.dependency_overrides[get_pool_source] = lambda: source
        try:
            elapsed, health, pool_response = asyncio.run(health_during_pool_read())
        finally:
            app.dependency_overrides.clear()

        assert health.status_code == 200
        assert elapsed < NODE_DELAY / 2
        # the node answered 503, surfaced as a chain read failure
        assert pool_response.status_code == 502
