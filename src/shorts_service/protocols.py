"""Protocol definitions for the shorts service.

All protocols use @runtime_checkable for structural typing support.
"""
from typing import Protocol, TypeVar, runtime_checkable, Any, Optional, List, Callable, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from .domain import Short, Tag, Report
    from .validation import ValidationResult

T = TypeVar('T')


@runtime_checkable
class UnitOfWork(Protocol):
    """
    Unit of Work protocol for transaction management.

    Implementations should handle transaction lifecycle:
    - Begin transaction on __aenter__
    - Commit on successful __aexit__
    - Rollback on exception in __aexit__
    """

    async def __aenter__(self) -> 'UnitOfWork':
        """Start the unit of work scope."""
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        """End the unit of work scope, commit or rollback."""
        ...

    async def commit(self) -> None:
        """Explicitly commit the transaction."""
        ...

    async def rollback(self) -> None:
        """Explicitly rollback the transaction."""
        ...


@runtime_checkable
class Middleware(Protocol):
    """
    Middleware protocol.

    A middleware wraps the handler call for one message and returns the
    wrapped coroutine function.
    """

    def apply(self, handler_func: Callable, message: Any) -> Callable:
        """Wrap handler_func for the given message."""
        ...


@runtime_checkable
class Validator(Protocol[T]):
    """Validator protocol used by ValidatorMiddleware."""

    async def validate(self, message: T) -> 'ValidationResult':
        """Validate a message and return the collected errors."""
        ...


@runtime_checkable
class ShortsStore(Protocol):
    """
    Storage boundary used by the handlers.

    Methods returning Optional yield None when the addressed entity does
    not exist; bulk tag methods return the number of affected rows.
    Mutations that touch several tables (add_short with tags, delete_short)
    must be atomic.
    """

    # --- Shorts ---

    async def list_shorts(self) -> List['Short']:
        ...

    async def get_short(self, short_id: str) -> Optional['Short']:
        ...

    async def list_shorts_by_user(self, user_id: str) -> List['Short']:
        ...

    async def list_shorts_by_tag(self, tag: str) -> List['Short']:
        ...

    async def add_short(self, short: 'Short', tags: Sequence[str] = ()) -> 'Short':
        ...

    async def update_short(self, short_id: str, changes: dict) -> Optional['Short']:
        ...

    async def delete_short(self, short_id: str) -> Optional['Short']:
        """Delete a short together with its tags and reports."""
        ...

    # --- Tags ---

    async def list_tags(self) -> List['Tag']:
        """All tags, ordered by short id, then tag text."""
        ...

    async def list_tags_by_short(self, short_id: str) -> List['Tag']:
        """Tags of one short in alphabetical order."""
        ...

    async def add_tag(self, short_id: str, tag: str) -> Optional['Tag']:
        """
        Add a tag; returns None if the short already carries it.

        Raises NotFoundError if the short does not exist.
        """
        ...

    async def rename_tag(self, tag: str, new_tag: str) -> int:
        ...

    async def rename_tag_on_short(self, short_id: str, tag: str, new_tag: str) -> int:
        ...

    async def delete_tag(self, tag: str) -> int:
        ...

    async def delete_tags_by_short(self, short_id: str) -> int:
        ...

    async def delete_tag_on_short(self, short_id: str, tag: str) -> int:
        ...

    # --- Reports ---

    async def list_reports(self) -> List['Report']:
        ...

    async def list_reports_by_user(self, user_id: str) -> List['Report']:
        ...

    async def list_reports_for_short(self, short_id: str) -> List['Report']:
        ...

    async def get_report(self, short_id: str, user_id: str) -> Optional['Report']:
        ...

    async def add_report(self, report: 'Report') -> 'Report':
        """
        Add a report.

        Raises ConflictError if (short_id, user_id) is taken and NotFoundError
        if the short does not exist.
        """
        ...

    async def delete_report(self, short_id: str, user_id: str) -> Optional['Report']:
        ...
