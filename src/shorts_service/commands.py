"""Command messages for shorts, tags and reports.

Payload-carrying commands accept either the matching input model from
`shorts_service.domain` or a plain mapping; handlers validate it.
"""

from dataclasses import dataclass
from typing import Any

from .core import Command


# === Shorts ===


@dataclass(frozen=True)
class CreateShortCommand(Command):
    short: Any
    user_id: str


@dataclass(frozen=True)
class UpdateShortCommand(Command):
    short: Any


@dataclass(frozen=True)
class DeleteShortCommand(Command):
    id: str


# === Tags ===


@dataclass(frozen=True)
class CreateTagCommand(Command):
    tag: Any


@dataclass(frozen=True)
class UpdateTagsCommand(Command):
    tag: str
    new_tag: str


@dataclass(frozen=True)
class UpdateTagByShortCommand(Command):
    short_id: str
    tag: str
    new_tag: str


@dataclass(frozen=True)
class DeleteTagsCommand(Command):
    tag: str


@dataclass(frozen=True)
class DeleteTagsByShortCommand(Command):
    short_id: str


@dataclass(frozen=True)
class DeleteTagByShortTagCommand(Command):
    short_id: str
    tag: str


# === Reports ===


@dataclass(frozen=True)
class CreateReportCommand(Command):
    report: Any
    user_id: str


@dataclass(frozen=True)
class DeleteReportCommand(Command):
    short_id: str
    user_id: str


ALL_COMMANDS = (
    CreateShortCommand,
    UpdateShortCommand,
    DeleteShortCommand,
    CreateTagCommand,
    UpdateTagsCommand,
    UpdateTagByShortCommand,
    DeleteTagsCommand,
    DeleteTagsByShortCommand,
    DeleteTagByShortTagCommand,
    CreateReportCommand,
    DeleteReportCommand,
)
