"""Validation machinery."""
from typing import Dict, List, Any, TypeVar, Type, Optional
from dataclasses import dataclass

import pydantic

from .exceptions import ValidationError
from .protocols import Validator

TModel = TypeVar('TModel', bound=pydantic.BaseModel)


@dataclass
class ValidationResult:
    """Standard validation result."""

    errors: Dict[str, List[str]]

    def has_errors(self) -> bool:
        """Check if there are any validation errors."""
        return len(self.errors) > 0

    @classmethod
    def success(cls) -> 'ValidationResult':
        """Create a successful validation result (no errors)."""
        return cls(errors={})

    @classmethod
    def failure(cls, errors: Dict[str, List[str]]) -> 'ValidationResult':
        """
        Create a failed validation result.

        Args:
            errors: Dictionary mapping field names to lists of error messages.
        """
        return cls(errors=errors)

    @classmethod
    def from_pydantic(cls, exc: pydantic.ValidationError, prefix: str = "") -> 'ValidationResult':
        """Collect pydantic's error list into {field: [messages]}."""
        errors: Dict[str, List[str]] = {}
        for error in exc.errors():
            loc = ".".join(str(part) for part in error.get("loc", ())) or "__root__"
            if prefix:
                loc = f"{prefix}.{loc}" if loc != "__root__" else prefix
            errors.setdefault(loc, []).append(error.get("msg", "Invalid value"))
        return cls(errors=errors)


class CompositeValidator:
    """Runs multiple validators in sequence."""

    def __init__(self, validators: List[Validator]):
        self.validators = validators

    async def validate(self, message: Any) -> ValidationResult:
        all_errors: Dict[str, List[str]] = {}

        for validator in self.validators:
            result = await validator.validate(message)
            if result.has_errors():
                for field, msgs in result.errors.items():
                    all_errors.setdefault(field, []).extend(msgs)

        return ValidationResult(errors=all_errors)


# =============================================================================
# Pydantic Support
# =============================================================================


def parse_payload(model: Type[TModel], payload: Any, message_type: str) -> TModel:
    """
    Coerce a payload (model instance or mapping) into `model`.

    Raises:
        ValidationError: With pydantic's errors translated to {field: [messages]}.
    """
    if payload is None:
        raise ValidationError(message_type, {"payload": ["Payload is required"]})
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(message_type, ValidationResult.from_pydantic(e).errors) from e


class PydanticValidator:
    """
    Validates one attribute of a message against a Pydantic model.

    Subclasses set `model` and, if the payload lives elsewhere than
    `message.payload`, `field`.

    Usage:
        class ShortCreateValidator(PydanticValidator):
            model = ShortCreateInput

        @middleware.validate(ShortCreateValidator)
        class CreateShortHandler(CommandHandler[Short]):
            ...
    """

    model: Optional[Type[pydantic.BaseModel]] = None
    field: str = "payload"

    async def validate(self, message: Any) -> ValidationResult:
        if self.model is None:
            raise TypeError(f"{type(self).__name__} must define `model`")

        value = getattr(message, self.field, None)
        if value is None:
            return ValidationResult.failure({self.field: ["Payload is required"]})

        try:
            self.model.model_validate(value)
        except pydantic.ValidationError as e:
            return ValidationResult.from_pydantic(e, prefix=self.field)
        return ValidationResult.success()


class TextFieldsValidator:
    """
    Requires the listed string attributes of a message to be non-blank.

    Usage:
        class RenameTagValidator(TextFieldsValidator):
            fields = ("tag", "new_tag")
    """

    fields: tuple = ()

    async def validate(self, message: Any) -> ValidationResult:
        errors: Dict[str, List[str]] = {}
        for name in self.fields:
            value = getattr(message, name, None)
            if not isinstance(value, str) or not value.strip():
                errors.setdefault(name, []).append("Must be a non-empty string")
        return ValidationResult(errors=errors)
