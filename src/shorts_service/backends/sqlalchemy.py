"""SQLAlchemy backend - Unit of Work, table models and the shorts store."""

from contextlib import asynccontextmanager
from datetime import datetime
import logging
from typing import AsyncIterator, Callable, List, Optional, Sequence

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    delete,
    select,
    update,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..domain import Report, Short, Tag
from ..exceptions import ConflictError, NotFoundError
from ..mediator import get_current_uow

logger = logging.getLogger(__name__)


# =============================================================================
# Unit of Work
# =============================================================================


class SQLAlchemyUnitOfWork:
    """
    SQLAlchemy-based Unit of Work implementation.

    Implements the UnitOfWork protocol for transaction management.

    Usage:
        engine = create_async_engine("postgresql+asyncpg://...")
        session_factory = async_sessionmaker(engine)
        uow_factory = lambda: SQLAlchemyUnitOfWork(session_factory)

        async with uow_factory() as uow:
            # uow.session is the AsyncSession
            result = await uow.session.execute(...)
            # Auto-commits on exit, auto-rollbacks on exception
    """

    def __init__(
        self,
        session_factory: "async_sessionmaker[AsyncSession]" = None,
        session: AsyncSession = None,
    ):
        """
        Initialize Unit of Work.

        Args:
            session_factory: Factory to create new sessions (preferred)
            session: Existing session to wrap (for nested UoW)
        """
        self._session_factory = session_factory
        self._session = session
        self._owns_session = session is None

    @property
    def session(self) -> AsyncSession:
        """Get the current session."""
        if self._session is None:
            raise RuntimeError("UnitOfWork not started. Use 'async with uow:'")
        return self._session

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        """Start the unit of work scope."""
        if self._owns_session:
            if self._session_factory is None:
                raise RuntimeError("No session factory provided")
            self._session = self._session_factory()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        """End the unit of work scope."""
        try:
            if exc_type is None:
                await self.commit()
            else:
                await self.rollback()
        finally:
            if self._owns_session and self._session:
                await self._session.close()
                self._session = None
        return False

    async def commit(self) -> None:
        """Explicitly commit the transaction."""
        if self._session:
            await self._session.commit()

    async def rollback(self) -> None:
        """Explicitly rollback the transaction."""
        if self._session:
            await self._session.rollback()

    async def flush(self) -> None:
        """Flush pending changes without committing."""
        if self._session:
            await self._session.flush()


def create_uow_factory(
    engine: AsyncEngine = None,
    session_factory: "async_sessionmaker[AsyncSession]" = None,
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """
    Create a UnitOfWork factory function.

    Args:
        engine: SQLAlchemy async engine (will create session factory)
        session_factory: Pre-configured session factory

    Returns:
        Factory function that creates new UnitOfWork instances
    """
    if session_factory is None and engine is not None:
        session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )

    if session_factory is None:
        raise ValueError("Either engine or session_factory must be provided")

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory=session_factory)

    return factory


# =============================================================================
# Table models
# =============================================================================


class Base(DeclarativeBase):
    pass


class ShortModel(Base):
    __tablename__ = "shorts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    media: Mapped[str] = mapped_column(Text, nullable=False)
    thumbnail: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class TagModel(Base):
    __tablename__ = "short_tags"

    short_id: Mapped[str] = mapped_column(
        ForeignKey("shorts.id", ondelete="CASCADE"), primary_key=True
    )
    tag: Mapped[str] = mapped_column(String, primary_key=True, index=True)


class ReportModel(Base):
    __tablename__ = "short_reports"
    __table_args__ = (
        UniqueConstraint("short_id", "user_id", name="uq_short_reports_short_user"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    short_id: Mapped[str] = mapped_column(
        ForeignKey("shorts.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# =============================================================================
# Store
# =============================================================================


class SQLAlchemyShortsStore:
    """
    ShortsStore backed by an async SQLAlchemy engine.

    Inside a command dispatched with `unit_of_work` as the mediator's
    uow_factory, every call joins the command's session and is committed
    or rolled back with it. Outside one (queries, direct use) each call
    runs in its own short-lived transaction.

    Usage:
        store = SQLAlchemyShortsStore.from_url("sqlite+aiosqlite:///shorts.db")
        await store.create_all()
        commands = CommandMediator(registry, uow_factory=store.unit_of_work)
    """

    def __init__(self, session_factory: "async_sessionmaker[AsyncSession]"):
        self._session_factory = session_factory
        self._uow_factory = create_uow_factory(session_factory=session_factory)

    @classmethod
    def from_url(cls, url: str, **engine_kwargs) -> "SQLAlchemyShortsStore":
        engine = create_async_engine(url, **engine_kwargs)
        return cls(async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False))

    @property
    def engine(self) -> AsyncEngine:
        return self._session_factory.kw["bind"]

    def unit_of_work(self) -> SQLAlchemyUnitOfWork:
        """UnitOfWork factory for the command mediator."""
        return self._uow_factory()

    async def create_all(self) -> None:
        """Create the tables if they do not exist."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        uow = get_current_uow()
        if isinstance(uow, SQLAlchemyUnitOfWork):
            yield uow.session
            await uow.session.flush()
            return

        async with self._uow_factory() as own:
            yield own.session

    # --- Shorts ---

    async def list_shorts(self) -> List[Short]:
        async with self._session() as session:
            stmt = select(ShortModel).order_by(ShortModel.created_at, ShortModel.id)
            rows = (await session.execute(stmt)).scalars().all()
            return [Short.model_validate(row) for row in rows]

    async def get_short(self, short_id: str) -> Optional[Short]:
        async with self._session() as session:
            row = await session.get(ShortModel, short_id)
            return Short.model_validate(row) if row else None

    async def list_shorts_by_user(self, user_id: str) -> List[Short]:
        async with self._session() as session:
            stmt = (
                select(ShortModel)
                .where(ShortModel.user_id == user_id)
                .order_by(ShortModel.created_at, ShortModel.id)
            )
            rows = (await session.execute(stmt)).scalars().all()
            return [Short.model_validate(row) for row in rows]

    async def list_shorts_by_tag(self, tag: str) -> List[Short]:
        async with self._session() as session:
            stmt = (
                select(ShortModel)
                .join(TagModel, TagModel.short_id == ShortModel.id)
                .where(TagModel.tag == tag)
                .order_by(ShortModel.created_at, ShortModel.id)
            )
            rows = (await session.execute(stmt)).scalars().all()
            return [Short.model_validate(row) for row in rows]

    async def add_short(self, short: Short, tags: Sequence[str] = ()) -> Short:
        async with self._session() as session:
            session.add(ShortModel(**short.model_dump()))
            for tag in dict.fromkeys(tags):
                session.add(TagModel(short_id=short.id, tag=tag))
            try:
                await session.flush()
            except IntegrityError as e:
                raise ConflictError("Short", short.id) from e
            return short.model_copy()

    async def update_short(self, short_id: str, changes: dict) -> Optional[Short]:
        async with self._session() as session:
            row = await session.get(ShortModel, short_id)
            if row is None:
                return None
            for name, value in changes.items():
                setattr(row, name, value)
            await session.flush()
            return Short.model_validate(row)

    async def delete_short(self, short_id: str) -> Optional[Short]:
        async with self._session() as session:
            row = await session.get(ShortModel, short_id)
            if row is None:
                return None
            deleted = Short.model_validate(row)
            await session.execute(delete(TagModel).where(TagModel.short_id == short_id))
            await session.execute(
                delete(ReportModel).where(ReportModel.short_id == short_id)
            )
            await session.delete(row)
            await session.flush()
            return deleted

    # --- Tags ---

    async def list_tags(self) -> List[Tag]:
        async with self._session() as session:
            stmt = select(TagModel).order_by(TagModel.short_id, TagModel.tag)
            rows = (await session.execute(stmt)).scalars().all()
            return [Tag.model_validate(row) for row in rows]

    async def list_tags_by_short(self, short_id: str) -> List[Tag]:
        async with self._session() as session:
            stmt = (
                select(TagModel)
                .where(TagModel.short_id == short_id)
                .order_by(TagModel.tag)
            )
            rows = (await session.execute(stmt)).scalars().all()
            return [Tag.model_validate(row) for row in rows]

    async def add_tag(self, short_id: str, tag: str) -> Optional[Tag]:
        async with self._session() as session:
            if await session.get(ShortModel, short_id) is None:
                raise NotFoundError("Short", short_id)
            if await session.get(TagModel, (short_id, tag)) is not None:
                return None
            session.add(TagModel(short_id=short_id, tag=tag))
            try:
                await session.flush()
            except IntegrityError as e:
                # Lost a race against an identical insert
                raise ConflictError("Tag", (short_id, tag)) from e
            return Tag(short_id=short_id, tag=tag)

    async def _rename(
        self, session: AsyncSession, tag: str, new_tag: str, short_id: Optional[str] = None
    ) -> int:
        stmt = select(TagModel.short_id).where(TagModel.tag == tag)
        if short_id is not None:
            stmt = stmt.where(TagModel.short_id == short_id)
        short_ids = list((await session.execute(stmt)).scalars().all())
        if not short_ids or tag == new_tag:
            return len(short_ids)

        # Shorts already carrying new_tag merge into it
        merged = set(
            (
                await session.execute(
                    select(TagModel.short_id).where(
                        TagModel.tag == new_tag, TagModel.short_id.in_(short_ids)
                    )
                )
            ).scalars()
        )
        if merged:
            await session.execute(
                delete(TagModel).where(
                    TagModel.tag == tag, TagModel.short_id.in_(merged)
                )
            )
        renamed = [sid for sid in short_ids if sid not in merged]
        if renamed:
            await session.execute(
                update(TagModel)
                .where(TagModel.tag == tag, TagModel.short_id.in_(renamed))
                .values(tag=new_tag)
                .execution_options(synchronize_session=False)
            )
        session.expire_all()
        return len(short_ids)

    async def rename_tag(self, tag: str, new_tag: str) -> int:
        async with self._session() as session:
            return await self._rename(session, tag, new_tag)

    async def rename_tag_on_short(self, short_id: str, tag: str, new_tag: str) -> int:
        async with self._session() as session:
            return await self._rename(session, tag, new_tag, short_id=short_id)

    async def delete_tag(self, tag: str) -> int:
        async with self._session() as session:
            result = await session.execute(delete(TagModel).where(TagModel.tag == tag))
            return result.rowcount

    async def delete_tags_by_short(self, short_id: str) -> int:
        async with self._session() as session:
            result = await session.execute(
                delete(TagModel).where(TagModel.short_id == short_id)
            )
            return result.rowcount

    async def delete_tag_on_short(self, short_id: str, tag: str) -> int:
        async with self._session() as session:
            result = await session.execute(
                delete(TagModel).where(TagModel.short_id == short_id, TagModel.tag == tag)
            )
            return result.rowcount

    # --- Reports ---

    async def _list_reports(self, *criteria) -> List[Report]:
        async with self._session() as session:
            stmt = (
                select(ReportModel)
                .where(*criteria)
                .order_by(ReportModel.created_at, ReportModel.id)
            )
            rows = (await session.execute(stmt)).scalars().all()
            return [Report.model_validate(row) for row in rows]

    async def list_reports(self) -> List[Report]:
        return await self._list_reports()

    async def list_reports_by_user(self, user_id: str) -> List[Report]:
        return await self._list_reports(ReportModel.user_id == user_id)

    async def list_reports_for_short(self, short_id: str) -> List[Report]:
        return await self._list_reports(ReportModel.short_id == short_id)

    async def get_report(self, short_id: str, user_id: str) -> Optional[Report]:
        async with self._session() as session:
            stmt = select(ReportModel).where(
                ReportModel.short_id == short_id, ReportModel.user_id == user_id
            )
            row = (await session.execute(stmt)).scalar_one_or_none()
            return Report.model_validate(row) if row else None

    async def add_report(self, report: Report) -> Report:
        async with self._session() as session:
            if await session.get(ShortModel, report.short_id) is None:
                raise NotFoundError("Short", report.short_id)
            existing = await session.execute(
                select(ReportModel.id).where(
                    ReportModel.short_id == report.short_id,
                    ReportModel.user_id == report.user_id,
                )
            )
            if existing.first() is not None:
                raise ConflictError("Report", report.key)
            session.add(ReportModel(**report.model_dump()))
            try:
                await session.flush()
            except IntegrityError as e:
                # The unique constraint decides concurrent inserts
                raise ConflictError("Report", report.key) from e
            return report.model_copy()

    async def delete_report(self, short_id: str, user_id: str) -> Optional[Report]:
        async with self._session() as session:
            stmt = select(ReportModel).where(
                ReportModel.short_id == short_id, ReportModel.user_id == user_id
            )
            row = (await session.execute(stmt)).scalar_one_or_none()
            if row is None:
                return None
            deleted = Report.model_validate(row)
            await session.delete(row)
            await session.flush()
            return deleted
