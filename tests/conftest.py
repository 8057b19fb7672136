"""Pytest configuration and fixtures."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from launchpool.api.endpoints import get_pool_source
from launchpool.api.main import app
from launchpool.math import ONE
from launchpool.pool import InMemoryPoolSource, PoolQuoter, WeightedPool
from tests.helpers import POOL_2, WEIGHT_50, make_pool


@pytest.fixture
def pool() -> WeightedPool:
    """80/20 PEPE/WBNB launch pool with a 0.3% fee."""
    return make_pool()


@pytest.fixture
def balanced_pool() -> WeightedPool:
    """50/50 pool with 1000 of each token and no fee."""
    return make_pool(
        address=POOL_2,
        balances=(1_000 * ONE, 1_000 * ONE),
        weights=(WEIGHT_50, WEIGHT_50),
        fee_bps=0,
    )


@pytest.fixture
def source(pool: WeightedPool, balanced_pool: WeightedPool) -> InMemoryPoolSource:
    """In-memory source holding both test pools."""
    return InMemoryPoolSource([pool, balanced_pool])


@pytest.fixture
def quoter(source: InMemoryPoolSource) -> PoolQuoter:
    return PoolQuoter(source)


# =============================================================================
# API client with injected pool source
# =============================================================================


@pytest.fixture
def client(source: InMemoryPoolSource) -> Iterator[TestClient]:
    """TestClient whose pool source is the in-memory test source."""
    app.dependency_overrides[get_pool_source] = lambda: source
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
