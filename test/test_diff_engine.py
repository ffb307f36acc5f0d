"""
Tests for the field-by-field version diff
"""

import pytest

from content_service.exceptions import VersionNotFoundError
from content_service.schemas.content import ContentUpdate, MetadataIn
from content_service.schemas.content_version import ContentSnapshot, MetadataSnapshot
from content_service.services import content_service, diff_engine


class TestDiffSnapshots:
    def test_identical_snapshots_have_no_changes(self):
        snapshot = ContentSnapshot(title="Same", content_type="article", tags=["a"])
        assert diff_engine.diff_snapshots(snapshot, snapshot) == {}

    def test_scalar_fields_reported_individually(self):
        a = ContentSnapshot(title="A", body="one", content_type="article")
        b = ContentSnapshot(title="B", body="one", content_type="video")

        changes = diff_engine.diff_snapshots(a, b)

        assert set(changes) == {"title", "content_type"}
        assert changes["title"].from_ == "A"
        assert changes["title"].to == "B"

    def test_field_cleared_to_none(self):
        a = ContentSnapshot(title="T", content_type="article", resource_url="https://cdn.example.com/x")
        b = ContentSnapshot(title="T", content_type="article")

        changes = diff_engine.diff_snapshots(a, b)

        assert changes["resource_url"].from_ == "https://cdn.example.com/x"
        assert changes["resource_url"].to is None

    def test_metadata_reported_as_whole_record(self):
        a = ContentSnapshot(title="T", content_type="article", metadata=MetadataSnapshot(subject="math"))
        b = ContentSnapshot(title="T", content_type="article", metadata=MetadataSnapshot(subject="math", duration=5))

        changes = diff_engine.diff_snapshots(a, b)

        assert list(changes) == ["metadata"]
        assert changes["metadata"].from_["duration"] is None
        assert changes["metadata"].to == {
            "subject": "math",
            "topic": None,
            "difficulty": None,
            "duration": 5,
            "prerequisites": None,
        }

    def test_metadata_added(self):
        a = ContentSnapshot(title="T", content_type="article")
        b = ContentSnapshot(title="T", content_type="article", metadata=MetadataSnapshot(topic="loops"))

        changes = diff_engine.diff_snapshots(a, b)

        assert changes["metadata"].from_ is None
        assert changes["metadata"].to["topic"] == "loops"

    def test_tags_compared_as_sets(self):
        a = ContentSnapshot(title="T", content_type="article", tags=["b", "a"])
        b = ContentSnapshot(title="T", content_type="article", tags=["a", "b"])
        assert diff_engine.diff_snapshots(a, b) == {}

    def test_tag_change_lists_full_sorted_sets(self):
        a = ContentSnapshot(title="T", content_type="article", tags=["b", "a"])
        b = ContentSnapshot(title="T", content_type="article", tags=["c", "a"])

        changes = diff_engine.diff_snapshots(a, b)

        assert changes["tags"].from_ == ["a", "b"]
        assert changes["tags"].to == ["a", "c"]

    def test_serialized_change_uses_from_key(self):
        change = diff_engine.diff_snapshots(
            ContentSnapshot(title="A", content_type="article"),
            ContentSnapshot(title="B", content_type="article"),
        )["title"]
        assert change.model_dump(by_alias=True) == {"from": "A", "to": "B"}


class TestCompareVersions:
    @pytest.mark.asyncio
    async def test_compare_version_with_itself(self, make_content, test_db):
        content = await make_content()

        comparison = await diff_engine.compare_versions(content.id, 1, 1, test_db)

        assert comparison.has_changes is False
        assert comparison.changes == {}
        assert comparison.version_a.version == comparison.version_b.version == 1

    @pytest.mark.asyncio
    async def test_compare_is_directional(self, make_content, test_db):
        content = await make_content(title="A")
        await content_service.update_content(
            content.id, ContentUpdate(title="B", metadata=MetadataIn(subject="art")), "editor", test_db
        )

        forward = await diff_engine.compare_versions(content.id, 1, 2, test_db)
        backward = await diff_engine.compare_versions(content.id, 2, 1, test_db)

        assert forward.changes["title"].from_ == "A"
        assert backward.changes["title"].from_ == "B"
        assert forward.changes["metadata"].from_ is None
        assert backward.changes["metadata"].to is None

    @pytest.mark.asyncio
    async def test_missing_version_raises_not_found(self, make_content, test_db):
        content = await make_content()

        with pytest.raises(VersionNotFoundError):
            await diff_engine.compare_versions(content.id, 1, 5, test_db)
