import asyncio
import pytest
import pydantic

from shorts_service.backends.memory import InMemoryShortsStore
from shorts_service.domain import Report, Short, Tag
from shorts_service.exceptions import ConflictError, NotFoundError


def make_short(user_id="u1", **kwargs) -> Short:
    return Short(user_id=user_id, media=kwargs.pop("media", "clip.mp4"), **kwargs)


@pytest.mark.asyncio
async def test_add_and_get_short(memory_store):
    short = await memory_store.add_short(make_short(), ["funny", "cats", "funny"])

    fetched = await memory_store.get_short(short.id)
    assert fetched == short
    assert [t.tag for t in await memory_store.list_tags_by_short(short.id)] == ["cats", "funny"]


@pytest.mark.asyncio
async def test_returned_entities_are_copies(memory_store):
    short = await memory_store.add_short(make_short(description="original"))

    fetched = await memory_store.get_short(short.id)
    fetched.description = "changed"

    assert (await memory_store.get_short(short.id)).description == "original"


@pytest.mark.asyncio
async def test_add_short_duplicate_id(memory_store):
    short = make_short()
    await memory_store.add_short(short)
    with pytest.raises(ConflictError):
        await memory_store.add_short(short)


@pytest.mark.asyncio
async def test_update_short(memory_store):
    short = await memory_store.add_short(make_short())

    updated = await memory_store.update_short(short.id, {"archived": True})

    assert updated.archived is True
    assert updated.media == short.media
    assert await memory_store.update_short("missing", {"archived": True}) is None


@pytest.mark.asyncio
async def test_update_short_revalidates(memory_store):
    short = await memory_store.add_short(make_short())

    with pytest.raises(pydantic.ValidationError):
        await memory_store.update_short(short.id, {"archived": None})

    assert (await memory_store.get_short(short.id)).archived is False


@pytest.mark.asyncio
async def test_delete_short_cascades(memory_store):
    short = await memory_store.add_short(make_short(), ["funny"])
    other = await memory_store.add_short(make_short(), ["funny"])
    await memory_store.add_report(Report(short_id=short.id, user_id="u2", reason="spam"))
    await memory_store.add_report(Report(short_id=other.id, user_id="u2", reason="spam"))

    deleted = await memory_store.delete_short(short.id)

    assert deleted.id == short.id
    assert await memory_store.get_short(short.id) is None
    assert await memory_store.list_tags_by_short(short.id) == []
    assert await memory_store.list_reports_for_short(short.id) == []
    # Other short untouched
    assert len(await memory_store.list_reports_for_short(other.id)) == 1
    assert await memory_store.list_tags() == [Tag(short_id=other.id, tag="funny")]
    assert await memory_store.delete_short(short.id) is None


@pytest.mark.asyncio
async def test_add_tag_idempotent(memory_store):
    short = await memory_store.add_short(make_short())

    assert await memory_store.add_tag(short.id, "funny") == Tag(short_id=short.id, tag="funny")
    assert await memory_store.add_tag(short.id, "funny") is None
    assert len(await memory_store.list_tags_by_short(short.id)) == 1


@pytest.mark.asyncio
async def test_add_tag_unknown_short(memory_store):
    with pytest.raises(NotFoundError):
        await memory_store.add_tag("missing", "funny")


@pytest.mark.asyncio
async def test_rename_merges_into_existing_tag(memory_store):
    a = await memory_store.add_short(make_short(), ["lol", "funny"])
    b = await memory_store.add_short(make_short(), ["lol"])

    assert await memory_store.rename_tag("lol", "funny") == 2

    assert [t.tag for t in await memory_store.list_tags_by_short(a.id)] == ["funny"]
    assert [t.tag for t in await memory_store.list_tags_by_short(b.id)] == ["funny"]
    assert await memory_store.rename_tag("lol", "funny") == 0


@pytest.mark.asyncio
async def test_rename_on_short_only(memory_store):
    a = await memory_store.add_short(make_short(), ["lol"])
    b = await memory_store.add_short(make_short(), ["lol"])

    assert await memory_store.rename_tag_on_short(a.id, "lol", "haha") == 1

    assert [t.tag for t in await memory_store.list_tags_by_short(a.id)] == ["haha"]
    assert [t.tag for t in await memory_store.list_tags_by_short(b.id)] == ["lol"]


@pytest.mark.asyncio
async def test_delete_tags(memory_store):
    a = await memory_store.add_short(make_short(), ["x", "y"])
    b = await memory_store.add_short(make_short(), ["x"])

    assert await memory_store.delete_tag_on_short(a.id, "y") == 1
    assert await memory_store.delete_tag_on_short(a.id, "y") == 0
    assert await memory_store.delete_tag("x") == 2
    assert await memory_store.list_tags() == []
    assert await memory_store.delete_tags_by_short(b.id) == 0


@pytest.mark.asyncio
async def test_list_shorts_by_user_and_tag(memory_store):
    a = await memory_store.add_short(make_short("u1"), ["funny"])
    b = await memory_store.add_short(make_short("u2"), ["funny"])
    await memory_store.add_short(make_short("u2"))

    assert [s.id for s in await memory_store.list_shorts_by_user("u1")] == [a.id]
    assert [s.id for s in await memory_store.list_shorts_by_tag("funny")] == [a.id, b.id]
    assert await memory_store.list_shorts_by_tag("sad") == []


@pytest.mark.asyncio
async def test_report_uniqueness(memory_store):
    short = await memory_store.add_short(make_short())
    first = await memory_store.add_report(Report(short_id=short.id, user_id="u2", reason="spam"))

    with pytest.raises(ConflictError):
        await memory_store.add_report(Report(short_id=short.id, user_id="u2", reason="other"))

    stored = await memory_store.get_report(short.id, "u2")
    assert stored.id == first.id
    assert stored.reason == "spam"


@pytest.mark.asyncio
async def test_concurrent_reports_exactly_one_wins(memory_store):
    short = await memory_store.add_short(make_short())

    results = await asyncio.gather(
        *(
            memory_store.add_report(Report(short_id=short.id, user_id="u2", reason=str(i)))
            for i in range(5)
        ),
        return_exceptions=True,
    )

    successes = [r for r in results if isinstance(r, Report)]
    conflicts = [r for r in results if isinstance(r, ConflictError)]
    assert len(successes) == 1
    assert len(conflicts) == 4
    assert len(await memory_store.list_reports()) == 1


@pytest.mark.asyncio
async def test_report_unknown_short(memory_store):
    with pytest.raises(NotFoundError):
        await memory_store.add_report(Report(short_id="missing", user_id="u1", reason="spam"))


@pytest.mark.asyncio
async def test_delete_report(memory_store):
    short = await memory_store.add_short(make_short())
    await memory_store.add_report(Report(short_id=short.id, user_id="u2", reason="spam"))

    deleted = await memory_store.delete_report(short.id, "u2")

    assert deleted.key == (short.id, "u2")
    assert await memory_store.get_report(short.id, "u2") is None
    assert await memory_store.delete_report(short.id, "u2") is None


def test_clear():
    store = InMemoryShortsStore()
    store._shorts["x"] = make_short()
    store.clear()
    assert store._shorts == {}
