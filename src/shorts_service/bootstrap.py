"""
Composition: bind every message type to its handler.

Registration is explicit; each registry is verified against the full
message catalogue and frozen before it is handed to a mediator, so a
missing handler fails at startup rather than on the first request.
"""
import logging
from typing import Callable, Optional

from .commands import ALL_COMMANDS
from .handler_registry import HandlerRegistry, command_registry, query_registry
from .handlers import COMMAND_HANDLERS, QUERY_HANDLERS
from .mediator import CommandMediator, QueryMediator
from .protocols import ShortsStore, UnitOfWork
from .queries import ALL_QUERIES
from .service import ShortsService

logger = logging.getLogger(__name__)


def build_query_registry(store: ShortsStore) -> HandlerRegistry:
    registry = query_registry()
    for handler_class in QUERY_HANDLERS:
        registry.register_handler(handler_class(store))
    registry.verify(ALL_QUERIES)
    registry.freeze()
    return registry


def build_command_registry(store: ShortsStore) -> HandlerRegistry:
    registry = command_registry()
    for handler_class in COMMAND_HANDLERS:
        registry.register_handler(handler_class(store))
    registry.verify(ALL_COMMANDS)
    registry.freeze()
    return registry


def store_uow_factory(store: ShortsStore) -> Optional[Callable[[], UnitOfWork]]:
    """The store's UnitOfWork factory, if it has one."""
    return getattr(store, "unit_of_work", None)


def build_service(
    store: ShortsStore, uow_factory: Optional[Callable[[], UnitOfWork]] = None
) -> ShortsService:
    """
    Wire a ShortsService on top of a store.

    Usage:
        service = build_service(InMemoryShortsStore())
        short = await service.create_short({"media": "clip.mp4"}, user_id="u1")
    """
    queries = QueryMediator(build_query_registry(store))
    commands = CommandMediator(
        build_command_registry(store),
        uow_factory=uow_factory or store_uow_factory(store),
    )
    logger.info(
        f"Shorts service ready: {len(queries.registry)} queries, "
        f"{len(commands.registry)} commands on {type(store).__name__}"
    )
    return ShortsService(queries, commands)
