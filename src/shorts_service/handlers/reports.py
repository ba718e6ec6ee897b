"""Handlers for report queries and commands."""

from typing import List, Optional

from ..commands import CreateReportCommand, DeleteReportCommand
from ..core import CommandHandler, QueryHandler
from ..domain import Report, ShortReportInput
from ..exceptions import NotFoundError
from ..middleware import middleware
from ..protocols import ShortsStore
from ..queries import (
    GetAllReportsQuery,
    GetReportQuery,
    GetReportsByUserQuery,
    GetReportsForShortQuery,
)
from ..validation import (
    CompositeValidator,
    PydanticValidator,
    TextFieldsValidator,
    parse_payload,
)


class _ReportPayload(PydanticValidator):
    model = ShortReportInput
    field = "report"


class _UserIdRequired(TextFieldsValidator):
    fields = ("user_id",)


class CreateReportValidator(CompositeValidator):
    def __init__(self):
        super().__init__([_ReportPayload(), _UserIdRequired()])


# === Queries ===


class GetAllReportsHandler(QueryHandler[List[Report]]):
    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, query: GetAllReportsQuery) -> List[Report]:
        return await self.store.list_reports()


class GetReportsByUserHandler(QueryHandler[List[Report]]):
    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, query: GetReportsByUserQuery) -> List[Report]:
        return await self.store.list_reports_by_user(query.user_id)


class GetReportsForShortHandler(QueryHandler[List[Report]]):
    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, query: GetReportsForShortQuery) -> List[Report]:
        return await self.store.list_reports_for_short(query.short_id)


class GetReportHandler(QueryHandler[Optional[Report]]):
    """Returns None, not an error, when the pair has no report."""

    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, query: GetReportQuery) -> Optional[Report]:
        return await self.store.get_report(query.short_id, query.user_id)


# === Commands ===


@middleware.log()
@middleware.validate(CreateReportValidator)
class CreateReportHandler(CommandHandler[Report]):
    """
    Files a report for (short_id, user_id).

    Uniqueness is enforced by the store; a second report for the same pair
    raises ConflictError and leaves the first one untouched.
    """

    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, command: CreateReportCommand) -> Report:
        payload = parse_payload(ShortReportInput, command.report, type(command).__name__)
        report = Report(
            short_id=payload.short_id,
            user_id=command.user_id,
            reason=payload.reason,
        )
        return await self.store.add_report(report)


@middleware.log()
class DeleteReportHandler(CommandHandler[Report]):
    def __init__(self, store: ShortsStore):
        self.store = store

    async def handle(self, command: DeleteReportCommand) -> Report:
        deleted = await self.store.delete_report(command.short_id, command.user_id)
        if deleted is None:
            raise NotFoundError("Report", (command.short_id, command.user_id))
        return deleted
