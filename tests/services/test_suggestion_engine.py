"""
Tests for the suggestion engine.

Tests cover:
1. Listing with default and explicit thresholds
2. Boundary validation of classifier payloads
3. Approval through validated writes (including rejected approvals)
4. Rejection
5. Generation from the heuristic classifier
"""

import pytest

from engagerr.models import (
    ContentType,
    CreationMethod,
    PlatformType,
    RelationshipType,
    parse_suggestion,
)
from engagerr.utils.exceptions import (
    MultipleParentsError,
    SuggestionNotFoundError,
    ValidationError,
)


def payload(source: str, target: str, relationship_type: str = "parent", confidence: float = 0.8) -> dict:
    return {
        "source_content_id": source,
        "suggested_content_id": target,
        "relationship_type": relationship_type,
        "confidence": confidence,
        "reason": "Published a day apart",
    }


class TestListSuggestions:
    """Tests for list_suggestions."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_default_threshold_hides_low_confidence(self, podcast_service):
        engine = podcast_service.suggestions
        await engine.ingest(
            [
                payload("yt_clip", "blog_post", "reference", 0.49),
                payload("yt_clip", "podcast_42", "reference", 0.5),
            ]
        )

        listed = await engine.list_suggestions("yt_clip")

        assert [s.confidence for s in listed] == [0.5]
        assert len(await engine.list_suggestions("yt_clip", confidence_threshold=0.0)) == 2

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_limit(self, podcast_service):
        engine = podcast_service.suggestions
        await engine.ingest([payload("yt_clip", "blog_post", "reference", 0.6 + i / 100) for i in range(5)])

        assert len(await engine.list_suggestions("yt_clip", limit=2)) == 2

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_invalid_arguments(self, podcast_service):
        engine = podcast_service.suggestions

        with pytest.raises(ValidationError):
            await engine.list_suggestions("yt_clip", confidence_threshold=1.5)
        with pytest.raises(ValidationError):
            await engine.list_suggestions("yt_clip", limit=0)


class TestIngest:
    """Tests for boundary parsing."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_malformed_payload_rejected(self, podcast_service):
        bad = payload("yt_clip", "blog_post", "cousin")

        with pytest.raises(ValidationError) as exc_info:
            await podcast_service.suggestions.ingest([payload("yt_clip", "blog_post"), bad])

        assert exc_info.value.context["index"] == 1
        assert await podcast_service.suggestions.list_suggestions("yt_clip", 0.0) == []

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_self_suggestions_dropped(self, podcast_service):
        stored = await podcast_service.suggestions.ingest(
            [payload("yt_clip", "yt_clip"), payload("yt_clip", "blog_post", "reaction")]
        )

        assert [s.relationship_type for s in stored] == ["reaction"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_accepts_parsed_suggestions(self, podcast_service):
        parsed = parse_suggestion(payload("blog_post", "yt_clip", "reference"))

        stored = await podcast_service.suggestions.ingest([parsed])

        assert stored[0].id == parsed.id


class TestApproveReject:
    """Tests for resolving suggestions."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_approve_creates_ai_relationship(self, podcast_service, make_item):
        await podcast_service.upsert_content(
            [make_item("ig_reel", PlatformType.INSTAGRAM, ContentType.REEL, views=900, hours=30)]
        )
        [pending] = await podcast_service.suggestions.ingest(
            [payload("yt_clip", "ig_reel", "repurposed", 0.9)]
        )

        relationship = await podcast_service.suggestions.approve(pending)

        assert relationship.creation_method == CreationMethod.AI_SUGGESTED
        assert relationship.relationship_type == RelationshipType.REPURPOSED
        family = await podcast_service.get_family("ig_reel")
        assert family.path_of("ig_reel") == "podcast_42.yt_clip.ig_reel"
        assert await podcast_service.suggestions.list_suggestions("ig_reel", 0.0) == []

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_approving_second_parent_fails_and_keeps_graph(self, podcast_service, make_item):
        # blog_post already has parent podcast_42; Z suggests itself as another parent
        await podcast_service.upsert_content([make_item("other_root", PlatformType.YOUTUBE, hours=-5)])
        [pending] = await podcast_service.suggestions.ingest(
            [payload("other_root", "blog_post", "parent", 0.95)]
        )

        with pytest.raises(MultipleParentsError) as exc_info:
            await podcast_service.suggestions.approve(pending.id)

        assert exc_info.value.context["existing_parent_id"] == "podcast_42"
        assert exc_info.value.context["proposed_parent_id"] == "other_root"
        family = await podcast_service.get_family("blog_post")
        assert family.node("blog_post").parent_id == "podcast_42"
        still_pending = await podcast_service.suggestions.list_suggestions("blog_post")
        assert [s.id for s in still_pending] == [pending.id]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_reject_discards(self, podcast_service):
        [pending] = await podcast_service.suggestions.ingest([payload("yt_clip", "blog_post", "reference")])

        await podcast_service.suggestions.reject(pending)

        assert await podcast_service.suggestions.list_suggestions("yt_clip", 0.0) == []
        with pytest.raises(SuggestionNotFoundError):
            await podcast_service.suggestions.approve(pending.id)

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_rejected_pair_can_be_suggested_again(self, podcast_service):
        [first] = await podcast_service.suggestions.ingest([payload("yt_clip", "blog_post", "reference")])
        await podcast_service.suggestions.reject(first.id)

        [second] = await podcast_service.suggestions.ingest([payload("yt_clip", "blog_post", "reference")])

        assert second.id != first.id
        assert len(await podcast_service.suggestions.list_suggestions("blog_post")) == 1


class TestGenerate:
    """Tests for classifier-backed generation."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_generate_stores_suggestions(self, service, make_item):
        video = make_item(
            "yt_video", PlatformType.YOUTUBE, ContentType.VIDEO, title="Building a Python web scraper"
        )
        short = make_item(
            "tt_short",
            PlatformType.TIKTOK,
            ContentType.SHORT,
            hours=24,
            title="Python web scraper in 60 seconds",
        )
        await service.upsert_content([video, short])

        generated = await service.suggestions.generate(video, [short])
        listed = await service.suggestions.list_suggestions("tt_short")

        assert [s.id for s in listed] == [s.id for s in generated]
        assert listed[0].relationship_type == "parent"
