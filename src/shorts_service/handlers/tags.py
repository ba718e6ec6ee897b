"""Handlers for tag queries and commands.

Tags are free text. Bulk commands return a status string describing what
changed; a command addressing a tag that does not exist raises NotFoundError.
"""

import logging
from typing import List, Optional

from ..commands import (
    CreateTagCommand,
    DeleteTagByShortTagCommand,
    DeleteTagsByShortCommand,
    DeleteTagsCommand,
    UpdateTagByShortCommand,
    UpdateTagsCommand,
)
from ..core import CommandHandler, QueryHandler
from ..domain import ShortCreateTagInput, Tag
from ..exceptions import NotFoundError
from ..middleware import middleware
from ..protocols import ShortsStore
from ..queries import GetAllTagsQuery, GetTagsByShortIdQuery
from ..validation import PydanticValidator, TextFieldsValidator, parse_payload

logger = logging.getLogger(__name__)


class CreateTagValidator(PydanticValidator):
    model = ShortCreateTagInput
    field = "tag"


class RenameTagValidator(TextFieldsValidator):
    fields = ("tag", "new_tag")


class RenameTagOnShortValidator(TextFieldsValidator):
    fields = ("short_id", "tag", "new_tag")


class TagRequiredValidator(TextFieldsValidator):
    fields = ("tag",)


# === Queries ===


class GetAllTagsHandler(QueryHandler[List[Tag]]):
    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, query: GetAllTagsQuery) -> List[Tag]:
        return await self.store.list_tags()


class GetTagsByShortIdHandler(QueryHandler[List[Tag]]):
    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, query: GetTagsByShortIdQuery) -> List[Tag]:
        return await self.store.list_tags_by_short(query.short_id)


# === Commands ===


@middleware.log()
@middleware.validate(CreateTagValidator)
class CreateTagHandler(CommandHandler[Optional[Tag]]):
    """
    Attaches a tag to a short.

    Returns None when the short already carries the tag.
    """

    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, command: CreateTagCommand) -> Optional[Tag]:
        payload = parse_payload(ShortCreateTagInput, command.tag, type(command).__name__)
        created = await self.store.add_tag(payload.short_id, payload.tag)
        if created is None:
            logger.debug(f"Short {payload.short_id} is already tagged '{payload.tag}'")
        return created


@middleware.log()
@middleware.validate(RenameTagValidator)
class UpdateTagsHandler(CommandHandler[str]):
    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, command: UpdateTagsCommand) -> str:
        tag, new_tag = command.tag.strip(), command.new_tag.strip()
        count = await self.store.rename_tag(tag, new_tag)
        if count == 0:
            raise NotFoundError("Tag", tag)
        return f"Renamed tag '{tag}' to '{new_tag}' on {count} short(s)"


@middleware.log()
@middleware.validate(RenameTagOnShortValidator)
class UpdateTagByShortHandler(CommandHandler[str]):
    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, command: UpdateTagByShortCommand) -> str:
        tag, new_tag = command.tag.strip(), command.new_tag.strip()
        count = await self.store.rename_tag_on_short(command.short_id, tag, new_tag)
        if count == 0:
            raise NotFoundError("Tag", (command.short_id, tag))
        return f"Renamed tag '{tag}' to '{new_tag}' on short {command.short_id}"


@middleware.log()
@middleware.validate(TagRequiredValidator)
class DeleteTagsHandler(CommandHandler[str]):
    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, command: DeleteTagsCommand) -> str:
        tag = command.tag.strip()
        count = await self.store.delete_tag(tag)
        if count == 0:
            raise NotFoundError("Tag", tag)
        return f"Deleted tag '{tag}' from {count} short(s)"


@middleware.log()
class DeleteTagsByShortHandler(CommandHandler[str]):
    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, command: DeleteTagsByShortCommand) -> str:
        count = await self.store.delete_tags_by_short(command.short_id)
        return f"Deleted {count} tag(s) from short {command.short_id}"


@middleware.log()
@middleware.validate(TagRequiredValidator)
class DeleteTagByShortTagHandler(CommandHandler[str]):
    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, command: DeleteTagByShortTagCommand) -> str:
        tag = command.tag.strip()
        count = await self.store.delete_tag_on_short(command.short_id, tag)
        if count == 0:
            raise NotFoundError("Tag", (command.short_id, tag))
        return f"Deleted tag '{tag}' from short {command.short_id}"
