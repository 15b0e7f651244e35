"""Shared fixtures for E2E tests."""

import pytest
import pytest_asyncio

from tinyflux_py.examples import counter


@pytest_asyncio.fixture
async def counter_store():
    """Provide the counter example store with a short API delay."""
    store = counter.build_store(api_delay=0.01)
    yield store
    store.teardown()


@pytest.fixture
def recorded_values():
    """Collects emitted values for assertions."""
    return []
