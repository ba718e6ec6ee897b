"""Query and command handlers for shorts, tags and reports."""

from .shorts import (
    GetAllShortsHandler,
    GetShortByIdHandler,
    GetShortsByUserHandler,
    GetShortsByTagHandler,
    CreateShortHandler,
    UpdateShortHandler,
    DeleteShortHandler,
)
from .tags import (
    GetAllTagsHandler,
    GetTagsByShortIdHandler,
    CreateTagHandler,
    UpdateTagsHandler,
    UpdateTagByShortHandler,
    DeleteTagsHandler,
    DeleteTagsByShortHandler,
    DeleteTagByShortTagHandler,
)
from .reports import (
    GetAllReportsHandler,
    GetReportsByUserHandler,
    GetReportsForShortHandler,
    GetReportHandler,
    CreateReportHandler,
    DeleteReportHandler,
)

QUERY_HANDLERS = (
    GetAllShortsHandler,
    GetShortByIdHandler,
    GetShortsByUserHandler,
    GetShortsByTagHandler,
    GetAllTagsHandler,
    GetTagsByShortIdHandler,
    GetAllReportsHandler,
    GetReportsByUserHandler,
    GetReportsForShortHandler,
    GetReportHandler,
)

COMMAND_HANDLERS = (
    CreateShortHandler,
    UpdateShortHandler,
    DeleteShortHandler,
    CreateTagHandler,
    UpdateTagsHandler,
    UpdateTagByShortHandler,
    DeleteTagsHandler,
    DeleteTagsByShortHandler,
    DeleteTagByShortTagHandler,
    CreateReportHandler,
    DeleteReportHandler,
)

__all__ = [cls.__name__ for cls in QUERY_HANDLERS + COMMAND_HANDLERS] + [
    "QUERY_HANDLERS",
    "COMMAND_HANDLERS",
]
