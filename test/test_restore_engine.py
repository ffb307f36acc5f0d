"""
Tests for restoring content from a version snapshot
"""

import logging

import pytest

from content_service.exceptions import InvalidArgumentError, StorageError, VersionNotFoundError
from content_service.schemas.content import ContentUpdate, MetadataIn
from content_service.services import content_service, restore_engine, version_store


async def version_id(content_id: str, version: int, db) -> str:
    row = await version_store.get_version(content_id, version, db)
    return row.id


class TestRestoreFromVersion:
    @pytest.mark.asyncio
    async def test_restore_reproduces_original_state(self, make_content, test_db):
        content = await make_content(
            title="Original Title",
            body="Original Body",
            resource_url="https://cdn.example.com/a.pdf",
            tags=["alpha"],
            metadata={"subject": "math", "duration": 10},
        )
        await content_service.update_content(
            content.id,
            ContentUpdate(
                title="Changed",
                body="Changed Body",
                resource_url=None,
                tags=["beta"],
                metadata=MetadataIn(subject="science", duration=45),
            ),
            "editor",
            test_db,
        )

        await restore_engine.restore_from_version(content.id, await version_id(content.id, 1, test_db), "user-1", test_db)

        restored = await content_service.get_content(content.id, test_db)
        assert restored.title == "Original Title"
        assert restored.body == "Original Body"
        assert restored.resource_url == "https://cdn.example.com/a.pdf"
        assert restored.tags == ["alpha"]
        assert restored.metadata.subject == "math"
        assert restored.metadata.duration == 10

    @pytest.mark.asyncio
    async def test_restore_appends_version_with_note(self, make_content, test_db):
        content = await make_content()
        await content_service.update_content(content.id, ContentUpdate(title="Changed"), "editor", test_db)

        await restore_engine.restore_from_version(content.id, await version_id(content.id, 1, test_db), "user-1", test_db)

        versions = await version_store.get_versions(content.id, test_db)
        assert [v.version for v in versions] == [3, 2, 1]
        assert versions[0].change_note == "Restored from version 1"
        assert versions[0].created_by == "user-1"
        assert versions[0].snapshot == versions[2].snapshot

    @pytest.mark.asyncio
    async def test_restore_twice_is_idempotent(self, make_content, test_db):
        content = await make_content(tags=["alpha"])
        await content_service.update_content(
            content.id, ContentUpdate(title="Changed", tags=["beta", "gamma"]), "editor", test_db
        )
        target = await version_id(content.id, 1, test_db)

        await restore_engine.restore_from_version(content.id, target, "user-1", test_db)
        first = await content_service.get_content(content.id, test_db)
        await restore_engine.restore_from_version(content.id, target, "user-1", test_db)
        second = await content_service.get_content(content.id, test_db)

        assert first.model_dump(exclude={"updated_at"}) == second.model_dump(exclude={"updated_at"})
        versions = await version_store.get_versions(content.id, test_db)
        assert [v.version for v in versions] == [4, 3, 2, 1]
        assert versions[0].snapshot == versions[1].snapshot
        assert versions[0].id != versions[1].id

    @pytest.mark.asyncio
    async def test_restore_clears_archival_state(self, make_content, test_db):
        content = await make_content()
        await content_service.archive_content(content.id, "user-1", test_db)
        archived_version = await version_id(content.id, 2, test_db)

        await restore_engine.restore_from_version(content.id, archived_version, "user-1", test_db)

        restored = await content_service.get_content(content.id, test_db)
        assert restored.is_archived is False
        assert restored.archived_at is None

    @pytest.mark.asyncio
    async def test_snapshot_without_metadata_leaves_metadata_alone(self, make_content, test_db):
        content = await make_content()
        await content_service.update_content(
            content.id, ContentUpdate(metadata=MetadataIn(subject="history")), "editor", test_db
        )

        await restore_engine.restore_from_version(content.id, await version_id(content.id, 1, test_db), "user-1", test_db)

        restored = await content_service.get_content(content.id, test_db)
        assert restored.metadata is not None
        assert restored.metadata.subject == "history"

    @pytest.mark.asyncio
    async def test_restore_to_empty_tag_set_removes_all_tags(self, make_content, test_db):
        content = await make_content(tags=[])
        await content_service.update_content(content.id, ContentUpdate(tags=["x", "y"]), "editor", test_db)

        await restore_engine.restore_from_version(content.id, await version_id(content.id, 1, test_db), "user-1", test_db)

        restored = await content_service.get_content(content.id, test_db)
        assert restored.tags == []

    @pytest.mark.asyncio
    async def test_version_of_other_content_is_rejected(self, make_content, test_db):
        content_id = (await make_content(title="Mine")).id
        other_id = (await make_content(title="Theirs")).id
        await content_service.update_content(content_id, ContentUpdate(title="Mine, edited"), "editor", test_db)
        foreign_version = await version_id(other_id, 1, test_db)

        with pytest.raises(InvalidArgumentError) as exc_info:
            await restore_engine.restore_from_version(content_id, foreign_version, "user-1", test_db)

        assert exc_info.value.status_code == 400
        unchanged = await content_service.get_content(content_id, test_db)
        assert unchanged.title == "Mine, edited"
        assert await version_store.count_versions(content_id, test_db) == 2

    @pytest.mark.asyncio
    async def test_unknown_version_id_raises_not_found(self, make_content, test_db):
        content = await make_content()

        with pytest.raises(VersionNotFoundError):
            await restore_engine.restore_from_version(content.id, "missing-version", "user-1", test_db)

    @pytest.mark.asyncio
    async def test_failed_append_rolls_back_whole_restore(self, make_content, test_db, monkeypatch):
        content_id = (await make_content(tags=["alpha"])).id
        await content_service.update_content(
            content_id, ContentUpdate(title="Changed", tags=["beta"]), "editor", test_db
        )
        target = await version_id(content_id, 1, test_db)

        async def broken_append(*args, **kwargs):
            raise StorageError("Cannot create version snapshot", operation="create_snapshot")

        monkeypatch.setattr(version_store, "append_snapshot", broken_append)

        with pytest.raises(StorageError) as exc_info:
            await restore_engine.restore_from_version(content_id, target, "user-1", test_db)

        assert "content was not changed" in exc_info.value.message
        unchanged = await content_service.get_content(content_id, test_db)
        assert unchanged.title == "Changed"
        assert unchanged.tags == ["beta"]
        assert await version_store.count_versions(content_id, test_db) == 2

    @pytest.mark.asyncio
    async def test_restore_is_logged_with_structured_fields(self, make_content, test_db, caplog):
        content_id = (await make_content()).id
        await content_service.update_content(content_id, ContentUpdate(title="Changed"), "editor", test_db)
        target = await version_id(content_id, 1, test_db)
        caplog.set_level(logging.INFO, logger="content_service.services.restore_engine")

        await restore_engine.restore_from_version(content_id, target, "user-1", test_db)

        record = next(r for r in caplog.records if r.name == "content_service.services.restore_engine")
        assert record.getMessage() == f"Content {content_id} restored from version 1 as version 3 by user-1"
        assert record.content_id == content_id
        assert record.version == 3
        assert record.actor_id == "user-1"
