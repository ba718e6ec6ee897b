"""Core CQRS components - Commands, Queries and their Handlers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import logging
import uuid
from typing import TypeVar, Generic, Optional

logger = logging.getLogger(__name__)

TResult = TypeVar("TResult")


def generate_message_id() -> str:
    """Generate a unique message ID."""
    return str(uuid.uuid4())


class AbstractCommand:
    """
    Marker interface for all Commands.

    Commands represent an intent to change the state of the system.
    They should be named in the imperative, e.g., 'CreateShort', 'DeleteReport'.
    """

    pass


class AbstractQuery:
    """
    Marker interface for all Queries.

    Queries request information from the system without modifying state.
    They should be named to describe the data needed, e.g., 'GetAllShorts'.
    """

    pass


@dataclass(frozen=True, kw_only=True)
class Command(AbstractCommand):
    """
    Base dataclass for Commands.

    Commands are immutable once constructed. Includes an auto-generated
    unique ID and optional correlation tracking.
    Subclasses should use @dataclass(frozen=True).
    """

    _command_id: str = field(default_factory=generate_message_id, repr=False)
    _correlation_id: Optional[str] = field(default=None, repr=False, compare=False)

    @property
    def command_id(self) -> str:
        """Get command ID."""
        return self._command_id

    @property
    def correlation_id(self) -> Optional[str]:
        """Get correlation ID."""
        return self._correlation_id


@dataclass(frozen=True, kw_only=True)
class Query(AbstractQuery):
    """
    Base dataclass for Queries.

    Queries are immutable once constructed. Includes an auto-generated
    unique ID and optional correlation tracking.
    Subclasses should use @dataclass(frozen=True).
    """

    _query_id: str = field(default_factory=generate_message_id, repr=False)
    _correlation_id: Optional[str] = field(default=None, repr=False, compare=False)

    @property
    def query_id(self) -> str:
        """Get query ID."""
        return self._query_id

    @property
    def correlation_id(self) -> Optional[str]:
        """Get correlation ID."""
        return self._correlation_id


class CommandHandler(ABC, Generic[TResult]):
    """
    Base class for handling Commands.

    Each handler handles exactly one command type. The type is taken from
    the `handles` class attribute, or from the annotation of the first
    argument of `handle` when `handles` is not set.

    Handlers are registered explicitly at composition time, see
    `HandlerRegistry.register_handler`.
    """

    handles: Optional[type] = None

    @abstractmethod
    async def handle(self, command: Command) -> TResult:
        """Handle the command and return its result."""
        raise NotImplementedError


class QueryHandler(ABC, Generic[TResult]):
    """
    Base class for handling Queries.

    Each handler handles exactly one query type. Query handlers must not
    mutate domain state.
    """

    handles: Optional[type] = None

    @abstractmethod
    async def handle(self, query: Query) -> TResult:
        """Handle the query and return its result."""
        raise NotImplementedError
