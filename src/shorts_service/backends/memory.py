"""In-memory store backend for testing and development."""

import asyncio
from typing import Dict, List, Optional, Sequence, Tuple

from ..domain import Report, Short, Tag
from ..exceptions import ConflictError, NotFoundError


class InMemoryShortsStore:
    """
    In-memory implementation of the ShortsStore protocol.

    NOT for production use - no persistence.
    Mutations are serialised by a single asyncio.Lock, which makes the
    multi-step ones (delete_short, add_short with tags) atomic and lets
    exactly one of two racing add_report calls win.

    Entities are copied on the way in and out so callers never hold
    references to stored state.

    Usage:
        store = InMemoryShortsStore()
        short = await store.add_short(Short(user_id="u1", media="a.mp4"), ["funny"])
    """

    def __init__(self):
        self._shorts: Dict[str, Short] = {}
        self._tags: Dict[str, List[str]] = {}
        self._reports: Dict[Tuple[str, str], Report] = {}
        self._lock = asyncio.Lock()

    # --- Shorts ---

    async def list_shorts(self) -> List[Short]:
        return [short.model_copy() for short in self._shorts.values()]

    async def get_short(self, short_id: str) -> Optional[Short]:
        short = self._shorts.get(short_id)
        return short.model_copy() if short else None

    async def list_shorts_by_user(self, user_id: str) -> List[Short]:
        return [s.model_copy() for s in self._shorts.values() if s.user_id == user_id]

    async def list_shorts_by_tag(self, tag: str) -> List[Short]:
        return [
            s.model_copy()
            for s in self._shorts.values()
            if tag in self._tags.get(s.id, ())
        ]

    async def add_short(self, short: Short, tags: Sequence[str] = ()) -> Short:
        async with self._lock:
            if short.id in self._shorts:
                raise ConflictError("Short", short.id)
            self._shorts[short.id] = short.model_copy()
            self._tags[short.id] = list(dict.fromkeys(tags))
            return short.model_copy()

    async def update_short(self, short_id: str, changes: dict) -> Optional[Short]:
        async with self._lock:
            short = self._shorts.get(short_id)
            if short is None:
                return None
            updated = Short.model_validate({**short.model_dump(), **changes})
            self._shorts[short_id] = updated
            return updated.model_copy()

    async def delete_short(self, short_id: str) -> Optional[Short]:
        async with self._lock:
            short = self._shorts.pop(short_id, None)
            if short is None:
                return None
            self._tags.pop(short_id, None)
            for key in [k for k in self._reports if k[0] == short_id]:
                del self._reports[key]
            return short

    # --- Tags ---

    async def list_tags(self) -> List[Tag]:
        return [
            Tag(short_id=short_id, tag=tag)
            for short_id in sorted(self._tags)
            for tag in sorted(self._tags[short_id])
        ]

    async def list_tags_by_short(self, short_id: str) -> List[Tag]:
        return [Tag(short_id=short_id, tag=tag) for tag in sorted(self._tags.get(short_id, ()))]

    async def add_tag(self, short_id: str, tag: str) -> Optional[Tag]:
        async with self._lock:
            if short_id not in self._shorts:
                raise NotFoundError("Short", short_id)
            tags = self._tags.setdefault(short_id, [])
            if tag in tags:
                return None
            tags.append(tag)
            return Tag(short_id=short_id, tag=tag)

    def _rename(self, short_id: str, tag: str, new_tag: str) -> int:
        tags = self._tags.get(short_id, [])
        if tag not in tags:
            return 0
        if tag != new_tag:
            if new_tag in tags:
                # Merge into the existing tag
                tags.remove(tag)
            else:
                tags[tags.index(tag)] = new_tag
        return 1

    async def rename_tag(self, tag: str, new_tag: str) -> int:
        async with self._lock:
            return sum(self._rename(short_id, tag, new_tag) for short_id in list(self._tags))

    async def rename_tag_on_short(self, short_id: str, tag: str, new_tag: str) -> int:
        async with self._lock:
            return self._rename(short_id, tag, new_tag)

    async def delete_tag(self, tag: str) -> int:
        async with self._lock:
            count = 0
            for tags in self._tags.values():
                if tag in tags:
                    tags.remove(tag)
                    count += 1
            return count

    async def delete_tags_by_short(self, short_id: str) -> int:
        async with self._lock:
            tags = self._tags.get(short_id, [])
            count = len(tags)
            tags.clear()
            return count

    async def delete_tag_on_short(self, short_id: str, tag: str) -> int:
        async with self._lock:
            tags = self._tags.get(short_id, [])
            if tag not in tags:
                return 0
            tags.remove(tag)
            return 1

    # --- Reports ---

    async def list_reports(self) -> List[Report]:
        return [r.model_copy() for r in self._reports.values()]

    async def list_reports_by_user(self, user_id: str) -> List[Report]:
        return [r.model_copy() for r in self._reports.values() if r.user_id == user_id]

    async def list_reports_for_short(self, short_id: str) -> List[Report]:
        return [r.model_copy() for r in self._reports.values() if r.short_id == short_id]

    async def get_report(self, short_id: str, user_id: str) -> Optional[Report]:
        report = self._reports.get((short_id, user_id))
        return report.model_copy() if report else None

    async def add_report(self, report: Report) -> Report:
        async with self._lock:
            if report.short_id not in self._shorts:
                raise NotFoundError("Short", report.short_id)
            if report.key in self._reports:
                raise ConflictError("Report", report.key)
            self._reports[report.key] = report.model_copy()
            return report.model_copy()

    async def delete_report(self, short_id: str, user_id: str) -> Optional[Report]:
        async with self._lock:
            return self._reports.pop((short_id, user_id), None)

    def clear(self) -> None:
        """Remove all shorts, tags and reports (for testing)."""
        self._shorts.clear()
        self._tags.clear()
        self._reports.clear()
