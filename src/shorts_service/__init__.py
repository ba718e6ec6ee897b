"""
# shorts-service

Command/query dispatch for shorts, their tags and moderation reports.

## Core Components

### CQRS
- `Command`, `Query` - Immutable message types
- `CommandHandler`, `QueryHandler` - Handler base classes
- `HandlerRegistry` - One handler per message type
- `QueryMediator`, `CommandMediator` - Route messages to handlers

### Domain
- `Short`, `Tag`, `Report` - Entities
- `ShortsService` - Facade issuing one message per operation

### Middleware
- `ValidatorMiddleware` - Input validation
- `LoggingMiddleware` - Request logging

### Backends
- `backends.memory` - In-memory store (testing, development)
- `backends.sqlalchemy` - SQLAlchemy UoW and store

### Composition
- `bootstrap.build_service` - Explicit wiring on top of a store
- `container.Container` - Dependency Injector container
"""

from .core import (
    Command,
    Query,
    CommandHandler,
    QueryHandler,
)
from .handler_registry import HandlerRegistry
from .mediator import CommandMediator, QueryMediator, get_current_uow
from .middleware import (
    middleware,
    ValidatorMiddleware,
    LoggingMiddleware,
)
from .exceptions import (
    ShortsServiceError,
    UnregisteredMessageError,
    DuplicateHandlerError,
    RegistryFrozenError,
    NotFoundError,
    ValidationError,
    ConflictError,
)
from .domain import (
    Short,
    Tag,
    Report,
    ShortCreateInput,
    ShortUpdateInput,
    ShortCreateTagInput,
    ShortReportInput,
)
from .protocols import ShortsStore, UnitOfWork
from .service import ShortsService
from .bootstrap import build_service

__version__ = "0.1.0"

__all__ = [
    # Core CQRS
    "Command",
    "Query",
    "CommandHandler",
    "QueryHandler",
    "HandlerRegistry",
    "CommandMediator",
    "QueryMediator",
    "get_current_uow",
    # Middleware
    "middleware",
    "ValidatorMiddleware",
    "LoggingMiddleware",
    # Errors
    "ShortsServiceError",
    "UnregisteredMessageError",
    "DuplicateHandlerError",
    "RegistryFrozenError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    # Domain
    "Short",
    "Tag",
    "Report",
    "ShortCreateInput",
    "ShortUpdateInput",
    "ShortCreateTagInput",
    "ShortReportInput",
    # Protocols
    "ShortsStore",
    "UnitOfWork",
    # Facade
    "ShortsService",
    "build_service",
]
