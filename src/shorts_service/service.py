"""Shorts facade: one mediator call per operation."""

from typing import Any, List, Optional

from .commands import (
    CreateReportCommand,
    CreateShortCommand,
    CreateTagCommand,
    DeleteReportCommand,
    DeleteShortCommand,
    DeleteTagByShortTagCommand,
    DeleteTagsByShortCommand,
    DeleteTagsCommand,
    UpdateShortCommand,
    UpdateTagByShortCommand,
    UpdateTagsCommand,
)
from .domain import Report, Short, Tag
from .mediator import CommandMediator, QueryMediator
from .queries import (
    GetAllReportsQuery,
    GetAllShortsQuery,
    GetAllTagsQuery,
    GetReportQuery,
    GetReportsByUserQuery,
    GetReportsForShortQuery,
    GetShortByIdQuery,
    GetShortsByTagQuery,
    GetShortsByUserQuery,
    GetTagsByShortIdQuery,
)


class ShortsService:
    """
    Entry point for shorts, tags and reports.

    Holds no business logic: every method builds one message and hands it
    to the query or command mediator. Failures raised by handlers
    (NotFoundError, ValidationError, ConflictError) reach the caller
    unchanged.

    Payload arguments accept the input models from `shorts_service.domain`
    or plain mappings with the same fields.
    """

    def __init__(self, query_mediator: QueryMediator, command_mediator: CommandMediator):
        self.queries = query_mediator
        self.commands = command_mediator

    # === Shorts ===

    async def find_all_shorts(self) -> List[Short]:
        """Find all shorts."""
        return await self.queries.execute(GetAllShortsQuery())

    async def find_short_by_id(self, id: str) -> Short:
        """
        Find a short by id.

        Raises:
            NotFoundError: If no short has this id.
        """
        return await self.queries.execute(GetShortByIdQuery(id))

    async def find_shorts_by_user(self, user_id: str) -> List[Short]:
        """Find all shorts owned by a user."""
        return await self.queries.execute(GetShortsByUserQuery(user_id))

    async def find_shorts_by_tag(self, tag: str) -> List[Short]:
        """Find all shorts carrying a tag."""
        return await self.queries.execute(GetShortsByTagQuery(tag))

    async def create_short(self, short: Any, user_id: str) -> Short:
        """
        Create a short for a user.

        Args:
            short: ShortCreateInput (media, thumbnail, description, tags)
            user_id: The resolved id of the owning user
        """
        return await self.commands.execute(CreateShortCommand(short, user_id))

    async def update_short(self, short: Any) -> Short:
        """Update a short; `short` is a ShortUpdateInput carrying the id."""
        return await self.commands.execute(UpdateShortCommand(short))

    async def delete_short(self, id: str) -> Short:
        """Delete a short together with its tags and reports."""
        return await self.commands.execute(DeleteShortCommand(id))

    # === Tags ===

    async def find_all_tags(self) -> List[Tag]:
        return await self.queries.execute(GetAllTagsQuery())

    async def find_tags_by_short_id(self, id: str) -> List[Tag]:
        return await self.queries.execute(GetTagsByShortIdQuery(id))

    async def create_tag(self, tag: Any) -> Optional[Tag]:
        """
        Attach a tag to a short.

        Returns None if the short already carries the tag.
        """
        return await self.commands.execute(CreateTagCommand(tag))

    async def update_tags(self, tag: str, new_tag: str) -> str:
        """Rename a tag on every short carrying it."""
        return await self.commands.execute(UpdateTagsCommand(tag, new_tag))

    async def update_tag_by_short_id(self, short_id: str, tag: str, new_tag: str) -> str:
        """Rename a tag on one short."""
        return await self.commands.execute(UpdateTagByShortCommand(short_id, tag, new_tag))

    async def delete_tags(self, tag: str) -> str:
        """Remove a tag from every short."""
        return await self.commands.execute(DeleteTagsCommand(tag))

    async def delete_tags_by_short_id(self, short_id: str) -> str:
        """Remove all tags from a short."""
        return await self.commands.execute(DeleteTagsByShortCommand(short_id))

    async def delete_tag_by_short_tag(self, short_id: str, tag: str) -> str:
        """Remove one tag from one short."""
        return await self.commands.execute(DeleteTagByShortTagCommand(short_id, tag))

    # === Reports ===

    async def get_all_reports(self) -> List[Report]:
        return await self.queries.execute(GetAllReportsQuery())

    async def get_reports_by_user(self, user_id: str) -> List[Report]:
        return await self.queries.execute(GetReportsByUserQuery(user_id))

    async def get_reports_for_short(self, short_id: str) -> List[Report]:
        return await self.queries.execute(GetReportsForShortQuery(short_id))

    async def get_report(self, short_id: str, user_id: str) -> Optional[Report]:
        """Get the report a user filed against a short, or None."""
        return await self.queries.execute(GetReportQuery(short_id, user_id))

    async def report_short(self, report: Any, user_id: str) -> Report:
        """
        Report a short.

        Raises:
            ConflictError: If the user already reported this short.
        """
        return await self.commands.execute(CreateReportCommand(report, user_id))

    async def delete_report(self, short_id: str, user_id: str) -> Report:
        return await self.commands.execute(DeleteReportCommand(short_id, user_id))
