"""
Registry for command and query handlers.

A `HandlerRegistry` maps each message type to its single handler. One
registry exists per message kind (commands, queries), so the read/write
split is kept by the registries themselves and not by convention.

Registries are filled once at composition time and frozen afterwards;
`resolve` is a plain dictionary lookup on every dispatch.
"""
import inspect
import logging
from typing import Any, Dict, Iterable, List, Optional, Type

from .core import AbstractCommand, AbstractQuery
from .exceptions import (
    DuplicateHandlerError,
    RegistryFrozenError,
    UnregisteredMessageError,
)

logger = logging.getLogger("shorts_service")


def handled_message_type(handler: Any) -> Optional[type]:
    """
    Find the message type a handler is bound to.

    Uses the `handles` class attribute when set, otherwise the type
    annotation of the first argument of `handle`.

    Returns:
        The message type, or None if it cannot be determined.
    """
    declared = getattr(handler, "handles", None)
    if isinstance(declared, type):
        return declared

    handle = getattr(handler, "handle", None)
    if handle is None:
        return None

    try:
        params = list(inspect.signature(handle).parameters.values())
    except (TypeError, ValueError):
        return None

    # Bound methods drop `self`; plain functions on the class keep it
    if params and params[0].name == "self":
        params = params[1:]
    if not params:
        return None

    annotation = params[0].annotation
    if annotation is inspect.Parameter.empty or not isinstance(annotation, type):
        return None
    return annotation


class HandlerRegistry:
    """
    Mapping from message type to its single handler.

    Usage:
        queries = HandlerRegistry(AbstractQuery)
        queries.register(GetAllShortsQuery, GetAllShortsHandler(store))
        queries.freeze()

        handler = queries.resolve(GetAllShortsQuery)
    """

    def __init__(self, message_kind: Type = object, name: Optional[str] = None):
        """
        Initialize the registry.

        Args:
            message_kind: Marker base class every registered message type must
                inherit from (e.g. AbstractCommand).
            name: Label used in log messages.
        """
        self._message_kind = message_kind
        self._name = name or message_kind.__name__
        self._handlers: Dict[Type, Any] = {}
        self._frozen = False

    @property
    def message_kind(self) -> Type:
        return self._message_kind

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, message_type: Type, handler: Any) -> None:
        """
        Bind a handler to a message type.

        Raises:
            TypeError: If message_type is not of this registry's kind.
            DuplicateHandlerError: If message_type is already bound. The
                existing binding is kept.
            RegistryFrozenError: If the registry has been frozen.
        """
        if not isinstance(message_type, type) or not issubclass(
            message_type, self._message_kind
        ):
            raise TypeError(
                f"Cannot register {getattr(message_type, '__name__', message_type)} "
                f"in the {self._name} registry: it does not inherit from "
                f"{self._message_kind.__name__}"
            )

        if self._frozen:
            raise RegistryFrozenError(message_type)

        existing = self._handlers.get(message_type)
        if existing is not None:
            raise DuplicateHandlerError(message_type, existing, handler)

        self._handlers[message_type] = handler
        logger.debug(
            f"Registered {type(handler).__name__} for {message_type.__name__} ({self._name})"
        )

    def register_handler(self, handler: Any) -> Type:
        """
        Register a handler under the message type it declares.

        Returns:
            The message type the handler was bound to.
        """
        message_type = handled_message_type(handler)
        if message_type is None:
            raise TypeError(
                f"Could not register {type(handler).__name__}: set `handles` or "
                f"annotate the first argument of handle()"
            )
        self.register(message_type, handler)
        return message_type

    def resolve(self, message_type: Type) -> Any:
        """
        Get the handler bound to a message type.

        Raises:
            UnregisteredMessageError: If no handler is bound.
        """
        try:
            return self._handlers[message_type]
        except KeyError:
            raise UnregisteredMessageError(message_type) from None

    def verify(self, message_types: Iterable[Type]) -> None:
        """
        Check that every expected message type has a handler.

        Meant to run once at startup so a missing registration fails before
        any request is served.

        Raises:
            UnregisteredMessageError: For the first type without a handler.
        """
        for message_type in message_types:
            if message_type not in self._handlers:
                logger.error(
                    f"Startup verification failed: {message_type.__name__} has no handler ({self._name})"
                )
                raise UnregisteredMessageError(message_type)

    def freeze(self) -> None:
        """Make the registry read-only."""
        self._frozen = True

    def message_types(self) -> List[Type]:
        """Registered message types, in registration order."""
        return list(self._handlers)

    def __contains__(self, message_type: object) -> bool:
        return message_type in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)


def command_registry() -> HandlerRegistry:
    """Create an empty registry for command handlers."""
    return HandlerRegistry(AbstractCommand, name="commands")


def query_registry() -> HandlerRegistry:
    """Create an empty registry for query handlers."""
    return HandlerRegistry(AbstractQuery, name="queries")
