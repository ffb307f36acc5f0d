"""
Concurrency tests for version allocation and restore

Each writer gets its own session, as independent requests would.
"""

import asyncio

import pytest

from content_service.schemas.content import ContentUpdate
from content_service.services import content_service, content_version_service, version_store
from content_service.services.content_repository import ContentRepository

WRITERS = 8


class TestConcurrentWriters:
    @pytest.mark.asyncio
    async def test_concurrent_updates_produce_gap_free_versions(self, make_content, session_factory):
        content = await make_content(title="Shared")

        async def writer(i: int):
            async with session_factory() as session:
                await content_service.update_content(
                    content.id, ContentUpdate(title=f"Title {i}"), f"user-{i}", session
                )

        await asyncio.gather(*(writer(i) for i in range(WRITERS)))

        async with session_factory() as session:
            versions = await version_store.get_versions(content.id, session)
            current = await content_service.get_content(content.id, session)

        assert [v.version for v in versions] == list(range(WRITERS + 1, 0, -1))
        assert versions[0].snapshot["title"] == current.title

    @pytest.mark.asyncio
    async def test_mixed_concurrent_mutations_stay_gap_free(self, make_content, session_factory):
        content = await make_content(title="Mixed")
        async with session_factory() as session:
            first = await version_store.get_version(content.id, 1, session)
            first_id = first.id

        async def update(i: int):
            async with session_factory() as session:
                await content_service.update_content(content.id, ContentUpdate(body=f"Body {i}"), "editor", session)

        async def tag(name: str):
            async with session_factory() as session:
                await content_service.attach_tags(content.id, [name], "tagger", session)

        async def restore():
            async with session_factory() as session:
                await content_version_service.restore_version(content.id, first_id, "restorer", session)

        await asyncio.gather(update(1), tag("alpha"), restore(), update(2), tag("beta"), restore())

        async with session_factory() as session:
            versions = await version_store.get_versions(content.id, session)

        assert sorted(v.version for v in versions) == list(range(1, 8))

    @pytest.mark.asyncio
    async def test_different_contents_are_numbered_independently(self, make_content, session_factory):
        first = await make_content(title="First")
        second = await make_content(title="Second")

        async def bump(content_id: str, i: int):
            async with session_factory() as session:
                await content_service.update_content(content_id, ContentUpdate(body=f"Body {i}"), None, session)

        await asyncio.gather(*(bump(c.id, i) for i in range(3) for c in (first, second)))

        async with session_factory() as session:
            for content in (first, second):
                versions = await version_store.get_versions(content.id, session)
                assert [v.version for v in versions] == [4, 3, 2, 1]


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancelled_restore_leaves_no_trace(self, make_content, session_factory, monkeypatch):
        content = await make_content(title="Original Title", tags=["keep"])
        async with session_factory() as session:
            await content_service.update_content(content.id, ContentUpdate(title="Edited"), "editor", session)
            first = await version_store.get_version(content.id, 1, session)
            first_id = first.id

        reached_tags = asyncio.Event()
        real_replace_tags = ContentRepository.replace_tags

        async def slow_replace_tags(self, content_id, tag_names):
            await real_replace_tags(self, content_id, tag_names)
            reached_tags.set()
            await asyncio.sleep(30)

        monkeypatch.setattr(ContentRepository, "replace_tags", slow_replace_tags)

        async def restore():
            async with session_factory() as session:
                await content_version_service.restore_version(content.id, first_id, "restorer", session)

        task = asyncio.create_task(restore())
        await asyncio.wait_for(reached_tags.wait(), timeout=10)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        async with session_factory() as session:
            current = await content_service.get_content(content.id, session)
            total = await version_store.count_versions(content.id, session)

        assert current.title == "Edited"
        assert current.tags == ["keep"]
        assert total == 2
