"""Query messages for shorts, tags and reports."""

from dataclasses import dataclass

from .core import Query


# === Shorts ===


@dataclass(frozen=True)
class GetAllShortsQuery(Query):
    pass


@dataclass(frozen=True)
class GetShortByIdQuery(Query):
    id: str


@dataclass(frozen=True)
class GetShortsByUserQuery(Query):
    user_id: str


@dataclass(frozen=True)
class GetShortsByTagQuery(Query):
    tag: str


# === Tags ===


@dataclass(frozen=True)
class GetAllTagsQuery(Query):
    pass


@dataclass(frozen=True)
class GetTagsByShortIdQuery(Query):
    short_id: str


# === Reports ===


@dataclass(frozen=True)
class GetAllReportsQuery(Query):
    pass


@dataclass(frozen=True)
class GetReportsByUserQuery(Query):
    user_id: str


@dataclass(frozen=True)
class GetReportsForShortQuery(Query):
    short_id: str


@dataclass(frozen=True)
class GetReportQuery(Query):
    short_id: str
    user_id: str


ALL_QUERIES = (
    GetAllShortsQuery,
    GetShortByIdQuery,
    GetShortsByUserQuery,
    GetShortsByTagQuery,
    GetAllTagsQuery,
    GetTagsByShortIdQuery,
    GetAllReportsQuery,
    GetReportsByUserQuery,
    GetReportsForShortQuery,
    GetReportQuery,
)
