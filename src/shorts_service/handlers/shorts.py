"""Handlers for short queries and commands."""

import logging
from typing import List

from ..commands import CreateShortCommand, DeleteShortCommand, UpdateShortCommand
from ..core import CommandHandler, QueryHandler
from ..domain import Short, ShortCreateInput, ShortUpdateInput
from ..exceptions import NotFoundError
from ..middleware import middleware
from ..protocols import ShortsStore
from ..queries import (
    GetAllShortsQuery,
    GetShortByIdQuery,
    GetShortsByTagQuery,
    GetShortsByUserQuery,
)
from ..validation import (
    CompositeValidator,
    PydanticValidator,
    TextFieldsValidator,
    parse_payload,
)

logger = logging.getLogger(__name__)


class _ShortCreatePayload(PydanticValidator):
    model = ShortCreateInput
    field = "short"


class _UserIdRequired(TextFieldsValidator):
    fields = ("user_id",)


class CreateShortValidator(CompositeValidator):
    def __init__(self):
        super().__init__([_ShortCreatePayload(), _UserIdRequired()])


class UpdateShortValidator(PydanticValidator):
    model = ShortUpdateInput
    field = "short"


# === Queries ===


class GetAllShortsHandler(QueryHandler[List[Short]]):
    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, query: GetAllShortsQuery) -> List[Short]:
        return await self.store.list_shorts()


class GetShortByIdHandler(QueryHandler[Short]):
    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, query: GetShortByIdQuery) -> Short:
        short = await self.store.get_short(query.id)
        if short is None:
            raise NotFoundError("Short", query.id)
        return short


class GetShortsByUserHandler(QueryHandler[List[Short]]):
    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, query: GetShortsByUserQuery) -> List[Short]:
        return await self.store.list_shorts_by_user(query.user_id)


class GetShortsByTagHandler(QueryHandler[List[Short]]):
    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, query: GetShortsByTagQuery) -> List[Short]:
        return await self.store.list_shorts_by_tag(query.tag.strip())


# === Commands ===


@middleware.log()
@middleware.validate(CreateShortValidator)
class CreateShortHandler(CommandHandler[Short]):
    """Creates a short and, atomically, its initial tags."""

    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, command: CreateShortCommand) -> Short:
        payload = parse_payload(ShortCreateInput, command.short, type(command).__name__)
        short = Short(
            user_id=command.user_id,
            media=payload.media,
            thumbnail=payload.thumbnail,
            description=payload.description,
        )
        # Keep first occurrence order, drop repeats
        tags = list(dict.fromkeys(payload.tags))
        return await self.store.add_short(short, tags)


@middleware.log()
@middleware.validate(UpdateShortValidator)
class UpdateShortHandler(CommandHandler[Short]):
    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, command: UpdateShortCommand) -> Short:
        payload = parse_payload(ShortUpdateInput, command.short, type(command).__name__)
        updated = await self.store.update_short(payload.id, payload.changes())
        if updated is None:
            raise NotFoundError("Short", payload.id)
        return updated


@middleware.log()
class DeleteShortHandler(CommandHandler[Short]):
    """
    Deletes a short.

    Tags and reports of the short are removed in the same store call, so a
    failure never leaves a half-deleted short behind.
    """

    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, command: DeleteShortCommand) -> Short:
        deleted = await self.store.delete_short(command.id)
        if deleted is None:
            raise NotFoundError("Short", command.id)
        logger.info(f"Deleted short {command.id} with its tags and reports")
        return deleted
