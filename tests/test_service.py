"""End-to-end tests of ShortsService, run against every store backend."""

import asyncio
import pytest

from shorts_service.domain import (
    ShortCreateInput,
    ShortCreateTagInput,
    ShortReportInput,
    ShortUpdateInput,
)
from shorts_service.exceptions import ConflictError, NotFoundError, ValidationError


async def create(service, user_id="u1", **payload):
    payload.setdefault("media", "clip.mp4")
    return await service.create_short(payload, user_id)


# --- Shorts ---


@pytest.mark.asyncio
async def test_create_and_find_short(service):
    short = await service.create_short(
        ShortCreateInput(media="clip.mp4", description="cat video"), "u1"
    )

    assert short.user_id == "u1"
    assert short.archived is False

    found = await service.find_short_by_id(short.id)
    assert found.id == short.id
    assert found.description == "cat video"
    assert [s.id for s in await service.find_all_shorts()] == [short.id]


@pytest.mark.asyncio
async def test_find_short_by_unknown_id(service):
    with pytest.raises(NotFoundError) as exc:
        await service.find_short_by_id("missing")

    assert exc.value.entity_type == "Short"
    assert exc.value.entity_id == "missing"


@pytest.mark.asyncio
async def test_find_shorts_by_user(service):
    mine = await create(service, "u1")
    await create(service, "u2")

    assert [s.id for s in await service.find_shorts_by_user("u1")] == [mine.id]
    assert await service.find_shorts_by_user("nobody") == []


@pytest.mark.asyncio
async def test_create_short_with_tags_then_delete(service):
    short = await create(service, tags=["funny"])

    assert [s.id for s in await service.find_shorts_by_tag("funny")] == [short.id]
    assert [t.tag for t in await service.find_tags_by_short_id(short.id)] == ["funny"]

    deleted = await service.delete_short(short.id)

    assert deleted.id == short.id
    assert await service.find_tags_by_short_id(short.id) == []
    assert await service.find_shorts_by_tag("funny") == []
    with pytest.raises(NotFoundError):
        await service.find_short_by_id(short.id)


@pytest.mark.asyncio
async def test_create_short_drops_repeated_tags(service):
    short = await create(service, tags=[" funny", "funny ", "cats"])

    tags = sorted(t.tag for t in await service.find_tags_by_short_id(short.id))
    assert tags == ["cats", "funny"]


@pytest.mark.asyncio
async def test_create_short_rejects_bad_payload(service):
    with pytest.raises(ValidationError) as exc:
        await service.create_short({"media": ""}, "u1")

    assert exc.value.message_type == "CreateShortCommand"
    assert "short.media" in exc.value.errors
    assert await service.find_all_shorts() == []


@pytest.mark.asyncio
async def test_create_short_requires_user(service):
    with pytest.raises(ValidationError) as exc:
        await create(service, user_id="  ")

    assert "user_id" in exc.value.errors


@pytest.mark.asyncio
async def test_create_short_rejects_empty_tag(service):
    with pytest.raises(ValidationError) as exc:
        await create(service, tags=["ok", "   "])

    assert "short.tags.1" in exc.value.errors

    assert await service.find_all_tags() == []


@pytest.mark.asyncio
async def test_update_short(service):
    short = await create(service, description="old")

    updated = await service.update_short(ShortUpdateInput(id=short.id, archived=True))

    assert updated.archived is True
    assert updated.description == "old"
    assert (await service.find_short_by_id(short.id)).archived is True


@pytest.mark.asyncio
async def test_update_short_rejects_null_archived(service):
    short = await create(service)

    with pytest.raises(ValidationError) as exc:
        await service.update_short({"id": short.id, "archived": None})

    assert "short.archived" in exc.value.errors
    assert (await service.find_short_by_id(short.id)).archived is False


@pytest.mark.asyncio
async def test_update_short_keeps_unset_fields(service):
    short = await create(service, description="old")
    await service.update_short({"id": short.id, "archived": True})

    updated = await service.update_short({"id": short.id, "description": None})

    assert updated.description is None
    assert updated.archived is True


@pytest.mark.asyncio
async def test_created_at_survives_round_trip(service):
    short = await create(service)
    report = await service.report_short({"short_id": short.id, "reason": "spam"}, "u2")

    found = await service.find_short_by_id(short.id)
    found_report = await service.get_report(short.id, "u2")

    assert found.created_at.tzinfo is not None
    assert found.created_at == short.created_at
    assert found_report.created_at.tzinfo is not None
    assert found_report.created_at == report.created_at


@pytest.mark.asyncio
async def test_update_unknown_short(service):
    with pytest.raises(NotFoundError):
        await service.update_short({"id": "missing", "description": "x"})


@pytest.mark.asyncio
async def test_update_short_requires_id(service):
    with pytest.raises(ValidationError) as exc:
        await service.update_short({"description": "x"})

    assert "short.id" in exc.value.errors


@pytest.mark.asyncio
async def test_delete_unknown_short(service):
    with pytest.raises(NotFoundError):
        await service.delete_short("missing")


@pytest.mark.asyncio
async def test_delete_short_removes_reports(service):
    short = await create(service)
    await service.report_short({"short_id": short.id, "reason": "spam"}, "u2")

    await service.delete_short(short.id)

    assert await service.get_reports_for_short(short.id) == []
    assert await service.get_all_reports() == []


# --- Tags ---


@pytest.mark.asyncio
async def test_create_tag(service):
    short = await create(service)

    tag = await service.create_tag(ShortCreateTagInput(short_id=short.id, tag="  funny "))

    assert tag.short_id == short.id
    assert tag.tag == "funny"
    assert await service.create_tag({"short_id": short.id, "tag": "funny"}) is None
    assert len(await service.find_all_tags()) == 1


@pytest.mark.asyncio
async def test_create_tag_unknown_short(service):
    with pytest.raises(NotFoundError):
        await service.create_tag({"short_id": "missing", "tag": "funny"})


@pytest.mark.asyncio
async def test_create_tag_rejects_empty_text(service):
    short = await create(service)

    with pytest.raises(ValidationError) as exc:
        await service.create_tag({"short_id": short.id, "tag": "   "})

    assert "tag.tag" in exc.value.errors


@pytest.mark.asyncio
async def test_update_tags_everywhere(service):
    a = await create(service, tags=["lol"])
    b = await create(service, tags=["lol", "haha"])

    status = await service.update_tags("lol", "haha")

    assert status == "Renamed tag 'lol' to 'haha' on 2 short(s)"
    assert [t.tag for t in await service.find_tags_by_short_id(a.id)] == ["haha"]
    assert [t.tag for t in await service.find_tags_by_short_id(b.id)] == ["haha"]
    assert await service.find_shorts_by_tag("lol") == []
    assert all(t.tag != "lol" for t in await service.find_all_tags())
    assert len(await service.find_all_tags()) == 2


@pytest.mark.asyncio
async def test_update_unknown_tag(service):
    with pytest.raises(NotFoundError):
        await service.update_tags("nothing", "something")


@pytest.mark.asyncio
async def test_update_tags_rejects_blank(service):
    with pytest.raises(ValidationError) as exc:
        await service.update_tags("lol", " ")

    assert exc.value.errors == {"new_tag": ["Must be a non-empty string"]}


@pytest.mark.asyncio
async def test_update_tag_on_one_short(service):
    a = await create(service, tags=["lol"])
    b = await create(service, tags=["lol"])

    status = await service.update_tag_by_short_id(a.id, "lol", "haha")

    assert status == f"Renamed tag 'lol' to 'haha' on short {a.id}"
    assert [t.tag for t in await service.find_tags_by_short_id(a.id)] == ["haha"]
    assert [t.tag for t in await service.find_tags_by_short_id(b.id)] == ["lol"]

    with pytest.raises(NotFoundError):
        await service.update_tag_by_short_id(a.id, "lol", "haha")


@pytest.mark.asyncio
async def test_delete_tags_everywhere(service):
    a = await create(service, tags=["x", "y"])
    await create(service, tags=["x"])

    assert await service.delete_tags("x") == "Deleted tag 'x' from 2 short(s)"
    assert [t.tag for t in await service.find_all_tags()] == ["y"]
    assert [t.short_id for t in await service.find_all_tags()] == [a.id]

    with pytest.raises(NotFoundError):
        await service.delete_tags("x")


@pytest.mark.asyncio
async def test_delete_tags_by_short(service):
    a = await create(service, tags=["x", "y"])
    b = await create(service, tags=["x"])

    assert await service.delete_tags_by_short_id(a.id) == f"Deleted 2 tag(s) from short {a.id}"
    assert await service.find_tags_by_short_id(a.id) == []
    assert len(await service.find_tags_by_short_id(b.id)) == 1

    # Nothing left to remove is not an error
    assert await service.delete_tags_by_short_id(a.id) == f"Deleted 0 tag(s) from short {a.id}"


@pytest.mark.asyncio
async def test_delete_tag_by_short_tag(service):
    short = await create(service, tags=["x", "y"])

    status = await service.delete_tag_by_short_tag(short.id, "x")

    assert status == f"Deleted tag 'x' from short {short.id}"
    assert [t.tag for t in await service.find_tags_by_short_id(short.id)] == ["y"]

    with pytest.raises(NotFoundError) as exc:
        await service.delete_tag_by_short_tag(short.id, "x")
    assert exc.value.entity_type == "Tag"


@pytest.mark.asyncio
async def test_find_shorts_by_tag_strips_text(service):
    short = await create(service, tags=["funny"])

    assert [s.id for s in await service.find_shorts_by_tag("  funny ")] == [short.id]


@pytest.mark.asyncio
async def test_tags_of_short_are_alphabetical(service):
    short = await create(service, tags=["zebra", "apple"])
    await service.create_tag({"short_id": short.id, "tag": "mango"})

    tags = [t.tag for t in await service.find_tags_by_short_id(short.id)]

    assert tags == ["apple", "mango", "zebra"]


# --- Reports ---


@pytest.mark.asyncio
async def test_concurrent_reports_for_same_pair(service):
    short = await create(service)

    results = await asyncio.gather(
        *(
            service.report_short({"short_id": short.id, "reason": f"spam {i}"}, "u1")
            for i in range(5)
        ),
        return_exceptions=True,
    )

    conflicts = [r for r in results if isinstance(r, ConflictError)]
    winners = [r for r in results if not isinstance(r, BaseException)]
    assert len(winners) == 1
    assert len(conflicts) == 4

    stored = await service.get_reports_for_short(short.id)
    assert [r.id for r in stored] == [winners[0].id]


@pytest.mark.asyncio
async def test_report_short_once_per_user(service):
    short = await create(service)

    first = await service.report_short(ShortReportInput(short_id=short.id, reason="spam"), "u1")

    with pytest.raises(ConflictError):
        await service.report_short({"short_id": short.id, "reason": "again"}, "u1")

    second = await service.report_short({"short_id": short.id, "reason": "nsfw"}, "u2")

    assert {r.id for r in await service.get_reports_for_short(short.id)} == {first.id, second.id}
    assert (await service.get_report(short.id, "u1")).reason == "spam"


@pytest.mark.asyncio
async def test_get_report(service):
    short = await create(service)
    report = await service.report_short({"short_id": short.id, "reason": "spam"}, "u1")

    found = await service.get_report(short.id, "u1")

    assert found.id == report.id
    assert found.key == (short.id, "u1")
    assert await service.get_report(short.id, "u2") is None


@pytest.mark.asyncio
async def test_report_unknown_short(service):
    with pytest.raises(NotFoundError):
        await service.report_short({"short_id": "missing", "reason": "spam"}, "u1")


@pytest.mark.asyncio
async def test_report_rejects_bad_payload(service):
    short = await create(service)

    with pytest.raises(ValidationError) as exc:
        await service.report_short({"short_id": short.id, "reason": ""}, "")

    assert "report.reason" in exc.value.errors
    assert "user_id" in exc.value.errors
    assert await service.get_all_reports() == []


@pytest.mark.asyncio
async def test_reports_by_user(service):
    a = await create(service)
    b = await create(service)
    await service.report_short({"short_id": a.id, "reason": "spam"}, "u1")
    await service.report_short({"short_id": b.id, "reason": "spam"}, "u1")
    await service.report_short({"short_id": a.id, "reason": "spam"}, "u2")

    assert {r.short_id for r in await service.get_reports_by_user("u1")} == {a.id, b.id}
    assert len(await service.get_all_reports()) == 3


@pytest.mark.asyncio
async def test_delete_report(service):
    short = await create(service)
    report = await service.report_short({"short_id": short.id, "reason": "spam"}, "u1")

    deleted = await service.delete_report(short.id, "u1")

    assert deleted.id == report.id
    assert await service.get_report(short.id, "u1") is None

    with pytest.raises(NotFoundError):
        await service.delete_report(short.id, "u1")

    # The pair can be reported again once the first report is gone
    await service.report_short({"short_id": short.id, "reason": "spam"}, "u1")
