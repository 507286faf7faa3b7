"""
Shared fixtures for Engagerr tests.

Content factories build small families by hand so every test can state the
exact views, platforms and publish times it depends on.
"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient

import app as app_module
from engagerr.config import Config, LoggingConfig, StoreConfig
from engagerr.models import (
    ContentItem,
    ContentMetrics,
    ContentRelationship,
    ContentType,
    PlatformType,
    RelationshipType,
)
from engagerr.services import RelationshipService

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


def make_item(
    content_id: str,
    platform: PlatformType = PlatformType.YOUTUBE,
    content_type: ContentType = ContentType.VIDEO,
    views: int | None = 0,
    likes: int = 0,
    comments: int = 0,
    shares: int = 0,
    estimated_value: float | None = None,
    hours: float = 0,
    title: str | None = None,
    description: str | None = None,
    creator_id: str = "creator_1",
) -> ContentItem:
    """Build a content item; ``views=None`` leaves metrics unset."""
    metrics = None
    if views is not None:
        metrics = ContentMetrics(
            views=views,
            likes=likes,
            comments=comments,
            shares=shares,
            estimated_value=estimated_value,
        )
    return ContentItem(
        id=content_id,
        platform_type=platform,
        content_type=content_type,
        title=title or f"Content {content_id}",
        description=description,
        published_at=BASE_TIME + timedelta(hours=hours),
        creator_id=creator_id,
        metrics=metrics,
    )


def make_edge(
    source: str,
    target: str,
    relationship_type: RelationshipType = RelationshipType.PARENT,
    edge_id: str | None = None,
) -> ContentRelationship:
    return ContentRelationship(
        id=edge_id or f"rel_{source}_{target}",
        source_content_id=source,
        target_content_id=target,
        relationship_type=relationship_type,
    )


@pytest.fixture
def podcast_items() -> list[ContentItem]:
    """Podcast episode repurposed into a YouTube clip and a blog post."""
    return [
        make_item(
            "podcast_42",
            PlatformType.PODCAST,
            ContentType.PODCAST_EPISODE,
            views=12_500,
            likes=400,
            comments=80,
            shares=20,
            estimated_value=150.0,
            title="Podcast Ep#42",
        ),
        make_item(
            "yt_clip",
            PlatformType.YOUTUBE,
            ContentType.SHORT,
            views=85_000,
            likes=4_000,
            comments=600,
            shares=400,
            estimated_value=900.0,
            hours=24,
            title="YouTube clip",
        ),
        make_item(
            "blog_post",
            PlatformType.BLOG,
            ContentType.BLOG_POST,
            views=3_200,
            likes=100,
            comments=30,
            shares=70,
            hours=48,
            title="Blog post",
        ),
    ]


@pytest.fixture
def podcast_edges() -> list[ContentRelationship]:
    return [
        make_edge("podcast_42", "yt_clip", RelationshipType.REPURPOSED),
        make_edge("podcast_42", "blog_post", RelationshipType.DERIVATIVE),
    ]


@pytest.fixture
def deep_items() -> list[ContentItem]:
    """root -> (a -> (a1, a2), b -> b1 -> b1x) on mixed platforms."""
    return [
        make_item("root", PlatformType.YOUTUBE, ContentType.VIDEO, views=1000),
        make_item("a", PlatformType.TIKTOK, ContentType.SHORT, views=500, hours=1),
        make_item("b", PlatformType.INSTAGRAM, ContentType.REEL, views=300, hours=2),
        make_item("a1", PlatformType.TWITTER, ContentType.TWEET, views=50, hours=3),
        make_item("a2", PlatformType.TWITTER, ContentType.TWEET, views=40, hours=4),
        make_item("b1", PlatformType.LINKEDIN, ContentType.POST, views=30, hours=5),
        make_item("b1x", PlatformType.LINKEDIN, ContentType.POST, views=None, hours=6),
    ]


@pytest.fixture
def deep_edges() -> list[ContentRelationship]:
    return [
        make_edge("root", "a", RelationshipType.CHILD),
        make_edge("root", "b", RelationshipType.REPURPOSED),
        make_edge("a", "a1", RelationshipType.DERIVATIVE),
        make_edge("a", "a2", RelationshipType.REACTION),
        make_edge("b", "b1", RelationshipType.PARENT),
        make_edge("b1", "b1x", RelationshipType.DERIVATIVE),
        make_edge("a1", "b", RelationshipType.REFERENCE),
    ]


@pytest.fixture
def test_config(tmp_path) -> Config:
    """Config with a throwaway database and console-only logging."""
    return Config(
        store=StoreConfig(backend="sqlite", db_path=str(tmp_path / "engagerr.db")),
        logging=LoggingConfig(log_to_file=False),
    )


@pytest.fixture(name="make_item")
def make_item_factory():
    return make_item


@pytest.fixture(name="make_edge")
def make_edge_factory():
    return make_edge


@pytest.fixture
async def service(test_config) -> AsyncGenerator[RelationshipService, None]:
    """Fresh service over its own SQLite file."""
    service = RelationshipService(test_config)
    await service.initialize()
    yield service
    await service.close()


@pytest.fixture
async def podcast_service(service, podcast_items, podcast_edges) -> RelationshipService:
    """Service holding the podcast family."""
    await service.upsert_content(podcast_items)
    for edge in podcast_edges:
        await service.store.add_relationship(edge)
    return service


@pytest.fixture
async def asgi_transport(podcast_service) -> AsyncGenerator[ASGITransport, None]:
    """In-process transport to the API, backed by the podcast service."""
    app_module.service = podcast_service
    yield ASGITransport(app=app_module.app)
    app_module.service = None


@pytest.fixture
async def api(asgi_transport) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for route tests."""
    async with AsyncClient(transport=asgi_transport, base_url="http://test") as client:
        yield client
