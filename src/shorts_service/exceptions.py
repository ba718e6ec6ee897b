"""Exceptions for the shorts service."""
from typing import Dict, Any, List


class ShortsServiceError(Exception):
    """Base exception for all shorts service errors."""
    pass


class UnregisteredMessageError(ShortsServiceError):
    """Raised when no handler is registered for a message type."""

    def __init__(self, message_type: type):
        self.message_type = message_type
        super().__init__(f"No handler registered for {message_type.__name__}")


class DuplicateHandlerError(ShortsServiceError):
    """Raised when a second handler is registered for an already bound message type."""

    def __init__(self, message_type: type, existing: Any, rejected: Any):
        """
        Initialize duplicate handler error.

        Args:
            message_type: The message type that is already bound.
            existing: The handler that stays bound.
            rejected: The handler whose registration was refused.
        """
        self.message_type = message_type
        self.existing = existing
        self.rejected = rejected
        super().__init__(
            f"{message_type.__name__} is already handled by "
            f"{type(existing).__name__}, cannot register {type(rejected).__name__}"
        )


class RegistryFrozenError(ShortsServiceError):
    """Raised when registering on a registry after composition has finished."""

    def __init__(self, message_type: type):
        self.message_type = message_type
        super().__init__(
            f"Cannot register a handler for {message_type.__name__}: registry is frozen"
        )


class ValidationError(ShortsServiceError):
    """Raised when a command payload is malformed."""

    def __init__(self, message_type: str, errors: Dict[str, List[str]]):
        """
        Initialize validation error.

        Args:
            message_type: The type of message that failed.
            errors: Dictionary of validation errors {field: [messages]}.
        """
        self.message_type = message_type
        self.errors = errors
        super().__init__(f"Validation failed for {message_type}: {errors}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "error": "validation_error",
            "message_type": self.message_type,
            "errors": self.errors,
        }


class NotFoundError(ShortsServiceError):
    """Raised when a requested entity or relation does not exist."""

    def __init__(self, entity_type: str, entity_id: Any):
        """
        Initialize not found error.

        Args:
            entity_type: The name/type of the entity.
            entity_id: The ID (or composite key) of the requested entity.
        """
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with ID '{entity_id}' not found")


class ConflictError(ShortsServiceError):
    """Raised when a uniqueness rule is violated."""

    def __init__(self, entity_type: str, key: Any):
        self.entity_type = entity_type
        self.key = key
        super().__init__(f"{entity_type} with key '{key}' already exists")
