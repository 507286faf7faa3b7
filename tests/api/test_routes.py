"""
Route tests for the content graph API.

Structural rejections map to 409, missing resources to 404 and invalid
input to 422, each carrying the error type and a readable message.
"""

import pytest
from httpx import ASGITransport, AsyncClient

import app as app_module


class TestHealth:
    """Tests for service endpoints."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_health(self, api):
        response = await api.get("/health")

        assert response.status_code == 200
        assert response.json()["service_initialized"] is True
        assert response.json()["store_backend"] == "sqlite"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_root(self, api):
        response = await api.get("/")
        assert response.json()["name"] == "Engagerr Content Graph API"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_uninitialized_service(self):
        app_module.service = None
        transport = ASGITransport(app=app_module.app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/content/podcast_42/family")

        assert response.status_code == 503


class TestFamilyRoutes:
    """Tests for family, metrics and visualization routes."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_family(self, api):
        response = await api.get("/content/yt_clip/family")
        body = response.json()

        assert response.status_code == 200
        assert body["root_id"] == "podcast_42"
        assert len(body["items"]) == 3
        assert len(body["relationships"]) == 2

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_missing_content(self, api):
        response = await api.get("/content/nope/family")

        assert response.status_code == 404
        assert response.json()["error_type"] == "content_not_found"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_metrics(self, api):
        response = await api.get("/content/podcast_42/family/metrics")
        body = response.json()

        assert response.status_code == 200
        assert body["aggregate_metrics"]["total_views"] == 100_700
        assert body["content_count"] == 3
        assert body["max_depth"] == 1
        breakdown = {b["platform"]: b["views_percentage"] for b in body["display"]["platform_breakdown"]}
        assert breakdown == {"youtube": 84.41, "podcast": 12.41, "blog": 3.18}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_visualization(self, api):
        response = await api.get(
            "/content/blog_post/visualization", params={"node_sizing": "fixed", "theme": "branded"}
        )
        body = response.json()

        assert response.status_code == 200
        assert body["root_id"] == "podcast_42"
        assert {n["size"] for n in body["nodes"]} == {40.0}
        assert body["nodes"][0]["color"] == "#2563EB"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_visualization_bad_theme(self, api):
        response = await api.get("/content/blog_post/visualization", params={"theme": "neon"})
        assert response.status_code == 422

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_creator_families(self, api, make_item):
        solo = make_item("solo", hours=90, views=25)
        await api.post("/content/items", json=[solo.model_dump(mode="json")])

        response = await api.get("/creators/creator_1/families")
        body = response.json()

        assert response.status_code == 200
        assert [f["root_id"] for f in body] == ["podcast_42", "solo"]
        assert body[0]["content_count"] == 3
        assert body[0]["aggregate_metrics"]["total_views"] == 100_700
        assert body[1]["aggregate_metrics"]["total_views"] == 25

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_unknown_creator_has_no_families(self, api):
        response = await api.get("/creators/nobody/families")

        assert response.status_code == 200
        assert response.json() == []


class TestRelationshipRoutes:
    """Tests for relationship routes."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_and_delete(self, api, make_item):
        item = make_item("tweet", hours=50)
        await api.post("/content/items", json=[item.model_dump(mode="json")])

        created = await api.post(
            "/content/relationships",
            json={
                "source_content_id": "yt_clip",
                "target_content_id": "tweet",
                "relationship_type": "reaction",
            },
        )
        assert created.status_code == 201
        relationship_id = created.json()["id"]
        assert created.json()["creation_method"] == "user_defined"

        fetched = await api.get(f"/content/relationships/{relationship_id}")
        assert fetched.json()["relationship_type"] == "reaction"

        deleted = await api.delete(f"/content/relationships/{relationship_id}")
        assert deleted.json() == {"id": relationship_id, "deleted": True}
        assert (await api.get(f"/content/relationships/{relationship_id}")).status_code == 404

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_cycle_is_conflict(self, api):
        response = await api.post(
            "/content/relationships",
            json={
                "source_content_id": "yt_clip",
                "target_content_id": "podcast_42",
                "relationship_type": "reference",
            },
        )
        body = response.json()

        assert response.status_code == 409
        assert body["error_type"] == "cycle_detected"
        assert "cycle" in body["message"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_update(self, api):
        response = await api.patch(
            "/content/relationships/rel_podcast_42_yt_clip", json={"confidence": 0.4}
        )

        assert response.status_code == 200
        assert response.json()["confidence"] == 0.4

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_invalid_body(self, api):
        response = await api.post(
            "/content/relationships",
            json={"source_content_id": "yt_clip", "target_content_id": "blog_post"},
        )
        assert response.status_code == 422

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_remove_from_hierarchy(self, api, make_item):
        item = make_item("tweet", hours=50)
        await api.post("/content/items", json=[item.model_dump(mode="json")])
        await api.post(
            "/content/relationships",
            json={
                "source_content_id": "yt_clip",
                "target_content_id": "tweet",
                "relationship_type": "reaction",
            },
        )

        response = await api.delete("/content/yt_clip/hierarchy")
        body = response.json()

        assert response.status_code == 200
        assert body["content_id"] == "yt_clip"
        [moved] = body["reattached"]
        assert moved["source_content_id"] == "podcast_42"
        assert moved["relationship_type"] == "reaction"
        family = (await api.get("/content/tweet/family")).json()
        assert {i["id"] for i in family["items"]} == {"podcast_42", "blog_post", "tweet"}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_remove_without_preserving_descendants(self, api):
        response = await api.delete(
            "/content/blog_post/hierarchy", params={"preserve_descendants": "false"}
        )

        assert response.status_code == 200
        assert response.json()["reattached"] == []
        family = (await api.get("/content/podcast_42/family")).json()
        assert {i["id"] for i in family["items"]} == {"podcast_42", "yt_clip"}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_remove_missing_content(self, api):
        response = await api.delete("/content/nope/hierarchy")

        assert response.status_code == 404
        assert response.json()["error_type"] == "content_not_found"


class TestSuggestionRoutes:
    """Tests for suggestion routes."""

    def _payload(self, target: str, relationship_type: str, confidence: float) -> dict:
        return {
            "source_content_id": "podcast_42",
            "suggested_content_id": target,
            "relationship_type": relationship_type,
            "confidence": confidence,
            "reason": "Published the same week",
        }

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_ingest_and_list(self, api, make_item):
        await api.post("/content/items", json=[make_item("ig", hours=5).model_dump(mode="json")])
        ingested = await api.post(
            "/content/suggestions",
            json=[self._payload("ig", "derivative", 0.8), self._payload("ig", "reference", 0.3)],
        )
        assert ingested.json()["ingested"] == 2

        default = await api.get("/content/ig/suggestions")
        everything = await api.get("/content/ig/suggestions", params={"confidence_threshold": 0})

        assert [s["relationship_type"] for s in default.json()] == ["derivative"]
        assert len(everything.json()) == 2

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_threshold_out_of_range(self, api):
        response = await api.get("/content/ig/suggestions", params={"confidence_threshold": 2})
        assert response.status_code == 422

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_malformed_suggestion(self, api):
        response = await api.post("/content/suggestions", json=[self._payload("ig", "sibling", 0.8)])

        assert response.status_code == 422
        assert response.json()["error_type"] == "validation_error"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_approve_second_parent_conflict(self, api):
        ingested = await api.post(
            "/content/suggestions",
            json=[
                {
                    "source_content_id": "yt_clip",
                    "suggested_content_id": "blog_post",
                    "relationship_type": "parent",
                    "confidence": 0.9,
                    "reason": "Shared title",
                }
            ],
        )
        suggestion_id = ingested.json()["ids"][0]

        response = await api.post(f"/content/suggestions/{suggestion_id}/approve")
        body = response.json()

        assert response.status_code == 409
        assert body["error_type"] == "multiple_parents"
        assert body["context"]["existing_parent_id"] == "podcast_42"
        family = (await api.get("/content/blog_post/family")).json()
        parents = [
            r["source_content_id"]
            for r in family["relationships"]
            if r["target_content_id"] == "blog_post"
        ]
        assert parents == ["podcast_42"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_approve_and_reject(self, api, make_item):
        await api.post("/content/items", json=[make_item("ig", hours=5).model_dump(mode="json")])
        ingested = await api.post(
            "/content/suggestions",
            json=[self._payload("ig", "repurposed", 0.9), self._payload("ig", "reference", 0.7)],
        )
        approve_id, reject_id = ingested.json()["ids"]

        approved = await api.post(f"/content/suggestions/{approve_id}/approve")
        rejected = await api.post(f"/content/suggestions/{reject_id}/reject")

        assert approved.status_code == 200
        assert approved.json()["creation_method"] == "ai_suggested"
        assert rejected.json() == {"id": reject_id, "rejected": True}
        assert (await api.get("/content/ig/suggestions")).json() == []
        assert (await api.post(f"/content/suggestions/{reject_id}/reject")).status_code == 404
