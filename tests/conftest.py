"""Test configuration and global fixtures.

`service` is parametrized over both store backends so every facade test
runs against the in-memory store and against SQLAlchemy on aiosqlite.
"""

import pytest

from shorts_service.backends.memory import InMemoryShortsStore
from shorts_service.backends.sqlalchemy import SQLAlchemyShortsStore
from shorts_service.bootstrap import build_service


@pytest.fixture
def memory_store():
    return InMemoryShortsStore()


@pytest.fixture
async def sql_store():
    store = SQLAlchemyShortsStore.from_url("sqlite+aiosqlite:///:memory:")
    await store.create_all()
    yield store
    await store.dispose()


@pytest.fixture(params=["memory", "sqlalchemy"])
async def store(request):
    if request.param == "memory":
        yield InMemoryShortsStore()
        return

    store = SQLAlchemyShortsStore.from_url("sqlite+aiosqlite:///:memory:")
    await store.create_all()
    yield store
    await store.dispose()


@pytest.fixture
def service(store):
    return build_service(store)
