"""Domain entities and input payloads - Short, Tag, Report."""

from datetime import datetime, timezone
from typing import Annotated, List, Optional
import uuid

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


def default_id_generator() -> str:
    """
    Generate a unique ID for entities.

    Returns:
        A UUID4 string.
    """
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_tag(value: str) -> str:
    """Strip a tag's text; empty text is rejected."""
    text = value.strip() if isinstance(value, str) else value
    if not text:
        raise ValueError("Tag text must not be empty")
    return text


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as read back from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


TagText = Annotated[str, AfterValidator(normalize_tag)]
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


# =============================================================================
# Entities
# =============================================================================


class Short(BaseModel):
    """
    A short-form content post owned by a user.

    Entities are compared by ID, not by their attributes.
    """

    model_config = ConfigDict(from_attributes=True, validate_assignment=True)

    id: str = Field(default_factory=default_id_generator)
    user_id: str
    media: str
    thumbnail: Optional[str] = None
    description: Optional[str] = None
    archived: bool = False
    created_at: UtcDatetime = Field(default_factory=utc_now)

    def __eq__(self, other) -> bool:
        return isinstance(other, Short) and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


class Tag(BaseModel):
    """A free-text label on a short, keyed by (short_id, tag)."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    short_id: str
    tag: str


class Report(BaseModel):
    """
    A moderation complaint against a short.

    At this boundary a report is addressed by (short_id, user_id); the
    surrogate `id` is kept for storage only.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=default_id_generator)
    short_id: str
    user_id: str
    reason: str
    created_at: UtcDatetime = Field(default_factory=utc_now)

    @property
    def key(self) -> tuple:
        return (self.short_id, self.user_id)


# =============================================================================
# Inputs
# =============================================================================


class ShortCreateInput(BaseModel):
    """Payload for creating a short."""

    model_config = ConfigDict(str_strip_whitespace=True)

    media: str = Field(..., min_length=1)
    thumbnail: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=2000)
    tags: List[TagText] = Field(default_factory=list)


class ShortUpdateInput(BaseModel):
    """Payload for updating a short; unset fields are left unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    thumbnail: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=2000)
    archived: bool = False

    def changes(self) -> dict:
        """Fields explicitly provided by the caller, without the id."""
        return self.model_dump(exclude_unset=True, exclude={"id"})


class ShortCreateTagInput(BaseModel):
    """Payload for attaching a tag to a short."""

    short_id: str = Field(..., min_length=1)
    tag: TagText


class ShortReportInput(BaseModel):
    """Payload for reporting a short."""

    model_config = ConfigDict(str_strip_whitespace=True)

    short_id: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1, max_length=1000)
