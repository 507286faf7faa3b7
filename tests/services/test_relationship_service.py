"""
Tests for the relationship service facade.

Tests cover:
1. Family resolution from any member
2. Aggregated families and visualization projections
3. Per-creator family listing
4. User-defined relationship create/update/delete and hierarchy removal
"""

import pytest

from engagerr.models import (
    ChartTheme,
    CreateRelationshipRequest,
    CreationMethod,
    NodeSizing,
    RelationshipType,
    UpdateRelationshipRequest,
    VisualizationOptions,
)
from engagerr.utils.exceptions import (
    ContentNotFoundError,
    CycleDetectedError,
    DuplicateRelationshipError,
    MultipleParentsError,
    RelationshipNotFoundError,
)


class TestFamilies:
    """Tests for family resolution."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_snapshot_from_child(self, podcast_service):
        snapshot = await podcast_service.get_family_snapshot("blog_post")

        assert snapshot.root_id == "podcast_42"
        assert {i.id for i in snapshot.items} == {"podcast_42", "yt_clip", "blog_post"}
        assert len(snapshot.relationships) == 2

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_family_carries_aggregate(self, podcast_service):
        family = await podcast_service.get_family("podcast_42")

        assert family.aggregate_metrics.total_views == 100_700
        assert family.aggregate_metrics.platform_count == 3

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_reference_linked_family_left_out(self, podcast_service, make_item, make_edge):
        await podcast_service.upsert_content([make_item("other", hours=72)])
        await podcast_service.store.add_relationship(
            make_edge("other", "yt_clip", RelationshipType.REFERENCE)
        )

        family = await podcast_service.get_family("yt_clip")

        assert family.root_id == "podcast_42"
        assert "other" not in family
        assert family.orphan_ids == ["other"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_unknown_content(self, podcast_service):
        with pytest.raises(ContentNotFoundError):
            await podcast_service.get_family_snapshot("nope")

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_visualization(self, podcast_service):
        options = VisualizationOptions(node_sizing=NodeSizing.FIXED, theme=ChartTheme.DARK)

        data = await podcast_service.get_visualization("yt_clip", options)

        assert data.root_id == "podcast_42"
        assert len(data.nodes) == 3
        assert len(data.edges) == 2
        assert data.node("podcast_42").border_color == "#FFFFFF"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_creator_families_largest_first(self, podcast_service, make_item):
        await podcast_service.upsert_content(
            [
                make_item("solo", hours=-5, views=10),
                make_item("guest_post", hours=1, creator_id="creator_2"),
            ]
        )

        families = await podcast_service.get_creator_families("creator_1")

        assert [f.root_id for f in families] == ["podcast_42", "solo"]
        assert [f.size for f in families] == [3, 1]
        assert families[0].aggregate_metrics.total_views == 100_700
        assert families[1].aggregate_metrics.total_views == 10
        assert await podcast_service.get_creator_families("creator_9") == []


class TestRelationships:
    """Tests for user-defined relationship edits."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create(self, podcast_service, make_item):
        await podcast_service.upsert_content([make_item("tweet", hours=50)])

        created = await podcast_service.create_relationship(
            CreateRelationshipRequest(
                source_content_id="blog_post",
                target_content_id="tweet",
                relationship_type=RelationshipType.DERIVATIVE,
            )
        )

        assert created.creation_method == CreationMethod.USER_DEFINED
        assert created.confidence == 1.0
        family = await podcast_service.get_family("tweet")
        assert family.path_of("tweet") == "podcast_42.blog_post.tweet"
        assert family.max_depth == 2

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_cycle_rejected(self, podcast_service):
        with pytest.raises(CycleDetectedError):
            await podcast_service.create_relationship(
                CreateRelationshipRequest(
                    source_content_id="blog_post",
                    target_content_id="podcast_42",
                    relationship_type=RelationshipType.REFERENCE,
                )
            )

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_second_parent_rejected(self, podcast_service):
        with pytest.raises(MultipleParentsError):
            await podcast_service.create_relationship(
                CreateRelationshipRequest(
                    source_content_id="yt_clip",
                    target_content_id="blog_post",
                    relationship_type=RelationshipType.PARENT,
                )
            )

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_update_and_delete(self, podcast_service):
        updated = await podcast_service.update_relationship(
            "rel_podcast_42_blog_post",
            UpdateRelationshipRequest(relationship_type=RelationshipType.REPURPOSED),
        )
        assert updated.relationship_type == RelationshipType.REPURPOSED

        await podcast_service.delete_relationship("rel_podcast_42_blog_post")

        with pytest.raises(RelationshipNotFoundError):
            await podcast_service.get_relationship("rel_podcast_42_blog_post")
        family = await podcast_service.get_family("podcast_42")
        assert "blog_post" not in family

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_remove_from_hierarchy_reattaches_children(
        self, podcast_service, make_item, make_edge
    ):
        await podcast_service.upsert_content([make_item("tweet", hours=30)])
        await podcast_service.store.add_relationship(
            make_edge("yt_clip", "tweet", RelationshipType.DERIVATIVE)
        )

        reattached = await podcast_service.remove_from_hierarchy("yt_clip")

        assert [e.source_content_id for e in reattached] == ["podcast_42"]
        family = await podcast_service.get_family("tweet")
        assert family.path_of("tweet") == "podcast_42.tweet"
        assert "yt_clip" not in family
        assert (await podcast_service.get_family("yt_clip")).size == 1

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_remove_from_hierarchy_rejects_conflict(
        self, podcast_service, make_item, make_edge
    ):
        await podcast_service.upsert_content([make_item("tweet", hours=30)])
        await podcast_service.store.add_relationship(make_edge("yt_clip", "tweet"))
        await podcast_service.store.add_relationship(
            make_edge("podcast_42", "tweet", RelationshipType.REFERENCE)
        )

        with pytest.raises(DuplicateRelationshipError):
            await podcast_service.remove_from_hierarchy("yt_clip")

        family = await podcast_service.get_family("tweet")
        assert family.path_of("tweet") == "podcast_42.yt_clip.tweet"
