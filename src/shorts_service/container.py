"""
Dependency Injector container for the shorts service.

Configuration keys:
    store.backend   "memory" (default) or "sqlalchemy"
    store.url       async SQLAlchemy URL, e.g. "sqlite+aiosqlite:///shorts.db"
    log_level       logging level name (default "INFO")

Usage:
    container = Container()
    container.config.from_dict({"store": {"backend": "sqlalchemy", "url": url}})
    await container.init_resources()
    service = container.shorts_service()
"""

import logging
from typing import AsyncIterator

from dependency_injector import containers, providers

from .backends.memory import InMemoryShortsStore
from .backends.sqlalchemy import SQLAlchemyShortsStore
from .bootstrap import build_command_registry, build_query_registry, store_uow_factory
from .mediator import CommandMediator, QueryMediator
from .protocols import ShortsStore
from .service import ShortsService


async def init_store(store: ShortsStore) -> AsyncIterator[ShortsStore]:
    """Create the schema on start and release connections on shutdown."""
    create_all = getattr(store, "create_all", None)
    if create_all is not None:
        await create_all()
    yield store
    dispose = getattr(store, "dispose", None)
    if dispose is not None:
        await dispose()


class Container(containers.DeclarativeContainer):
    """IoC Container wiring store -> registries -> mediators -> service."""

    config = providers.Configuration(
        default={"store": {"backend": "memory", "url": None}, "log_level": "INFO"}
    )

    logging_setup = providers.Resource(
        logging.basicConfig,
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # === Storage ===

    store = providers.Selector(
        config.store.backend,
        memory=providers.Singleton(InMemoryShortsStore),
        sqlalchemy=providers.Singleton(SQLAlchemyShortsStore.from_url, url=config.store.url),
    )

    store_lifecycle = providers.Resource(init_store, store=store)

    uow_factory = providers.Callable(store_uow_factory, store)

    # === Dispatch ===

    query_registry = providers.Singleton(build_query_registry, store=store)
    command_registry = providers.Singleton(build_command_registry, store=store)

    query_mediator = providers.Singleton(QueryMediator, registry=query_registry)
    command_mediator = providers.Singleton(
        CommandMediator,
        registry=command_registry,
        uow_factory=uow_factory,
    )

    # === Facade ===

    shorts_service = providers.Singleton(
        ShortsService,
        query_mediator=query_mediator,
        command_mediator=command_mediator,
    )
