import logging
from typing import Any, Callable, Optional
from contextvars import ContextVar

from .core import Command, Query
from .handler_registry import HandlerRegistry, command_registry, query_registry
from .middleware import MiddlewareDefinition
from .protocols import UnitOfWork

logger = logging.getLogger(__name__)

# Context variable for current unit of work (enables nested commands)
_current_uow: ContextVar[Optional[UnitOfWork]] = ContextVar("current_uow", default=None)


def get_current_uow() -> Optional[UnitOfWork]:
    """Get the current unit of work from context (if any)."""
    return _current_uow.get()


class _Dispatcher:
    """
    Shared dispatch algorithm: resolve, wrap in middlewares, await.

    Not used directly; `QueryMediator` and `CommandMediator` are kept as
    distinct types so reads and writes cannot be sent to the wrong side.
    """

    def __init__(self, registry: HandlerRegistry):
        self._registry = registry

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    def register(self, message_type: type, handler: object) -> None:
        """Register a handler for a message type."""
        self._registry.register(message_type, handler)

    async def _dispatch(self, message: Any) -> Any:
        handler = self._registry.resolve(type(message))
        logger.debug(
            f"Dispatching {type(message).__name__} to {type(handler).__name__}"
        )
        return await self._dispatch_with_middlewares(message, handler)

    async def _dispatch_with_middlewares(self, message: Any, handler: object) -> Any:
        """
        Execute the handler wrapped in its middleware chain.

        Middlewares are applied in registration order, so the top-most
        decorator on the handler class is the outermost layer.
        """
        middlewares = getattr(handler.__class__, "_middlewares", [])

        async def execute_handler(msg):
            return await handler.handle(msg)

        handler_func = execute_handler

        for middleware_item in middlewares:
            if isinstance(middleware_item, MiddlewareDefinition):
                try:
                    middleware_instance = middleware_item.middleware_class(
                        **middleware_item.kwargs
                    )
                except Exception as e:
                    logger.error(
                        f"Failed to instantiate middleware {middleware_item.middleware_class}: {e}"
                    )
                    raise
            else:
                middleware_instance = middleware_item

            handler_func = middleware_instance.apply(handler_func, message)

        return await handler_func(message)


class QueryMediator(_Dispatcher):
    """
    Routes queries to their handlers.

    Queries run without a unit of work. Handler failures propagate unchanged.

    Usage:
        queries = QueryMediator(registry)
        shorts = await queries.execute(GetAllShortsQuery())
    """

    def __init__(self, registry: Optional[HandlerRegistry] = None):
        super().__init__(registry if registry is not None else query_registry())

    async def execute(self, query: Query) -> Any:
        """
        Send a query to its handler.

        Raises:
            UnregisteredMessageError: If no handler is bound to the query type.
        """
        return await self._dispatch(query)


class CommandMediator(_Dispatcher):
    """
    Routes commands to their handlers.

    Commands automatically get UoW scope when a factory is configured:
    - Root commands create a new UoW (commit on success, rollback on failure)
    - Nested commands reuse parent's UoW (shared transaction)

    Usage:
        commands = CommandMediator(registry, uow_factory=store.unit_of_work)
        short = await commands.execute(CreateShortCommand(short=payload, user_id="u1"))
    """

    def __init__(
        self,
        registry: Optional[HandlerRegistry] = None,
        uow_factory: Optional[Callable[[], UnitOfWork]] = None,
    ):
        """
        Initialize the mediator.

        Args:
            registry: Command handler registry
            uow_factory: Factory function to create UnitOfWork instances
        """
        super().__init__(registry if registry is not None else command_registry())
        self._uow_factory = uow_factory

    async def execute(self, command: Command, uow: Optional[UnitOfWork] = None) -> Any:
        """
        Send a command to its handler.

        Args:
            command: The command to send
            uow: Optional unit of work overriding the factory

        Raises:
            UnregisteredMessageError: If no handler is bound to the command type.
        """
        # Resolve before opening a transaction so an unknown type does no work
        self._registry.resolve(type(command))

        if _current_uow.get() is not None:
            return await self._dispatch(command)

        uow = uow or (self._uow_factory() if self._uow_factory else None)
        if uow is None:
            return await self._dispatch(command)

        async with uow:
            token = _current_uow.set(uow)
            try:
                return await self._dispatch(command)
            finally:
                _current_uow.reset(token)
