"""
Content item models.

A ContentItem is one piece of published content on one platform. Items are
immutable once ingested; the only sanctioned change is a metrics refresh,
which produces a new item.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from engagerr.models.paths import PATH_SEPARATOR


class PlatformType(str, Enum):
    """Platforms a creator can publish content on."""

    YOUTUBE = "youtube"
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    TWITTER = "twitter"
    LINKEDIN = "linkedin"
    PODCAST = "podcast"
    BLOG = "blog"


class ContentType(str, Enum):
    """Kinds of content across platforms."""

    VIDEO = "video"
    POST = "post"
    STORY = "story"
    REEL = "reel"
    SHORT = "short"
    TWEET = "tweet"
    ARTICLE = "article"
    PODCAST_EPISODE = "podcast_episode"
    BLOG_POST = "blog_post"
    LIVESTREAM = "livestream"


# Long-form content that is typically repurposed into shorter pieces
LONG_FORM_TYPES = frozenset(
    {
        ContentType.VIDEO,
        ContentType.PODCAST_EPISODE,
        ContentType.ARTICLE,
        ContentType.BLOG_POST,
        ContentType.LIVESTREAM,
    }
)


class ContentMetrics(BaseModel):
    """Performance snapshot for a content item."""

    model_config = ConfigDict(frozen=True)

    views: int = Field(default=0, ge=0)
    likes: int = Field(default=0, ge=0)
    comments: int = Field(default=0, ge=0)
    shares: int = Field(default=0, ge=0)
    engagement_rate: float = Field(default=0.0, ge=0.0)
    estimated_value: float | None = Field(default=None, ge=0.0)
    clicks: int | None = Field(default=None, ge=0)
    average_watch_time: float | None = Field(default=None, ge=0.0)
    completion_rate: float | None = Field(default=None, ge=0.0, le=1.0)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def engagements(self) -> int:
        """Total engagements (likes + comments + shares)."""
        return self.likes + self.comments + self.shares


class ContentItem(BaseModel):
    """One piece of published content."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    platform_type: PlatformType
    content_type: ContentType
    title: str
    published_at: datetime
    creator_id: str
    metrics: ContentMetrics | None = None
    url: str | None = None
    description: str | None = None
    thumbnail: str | None = None

    @field_validator("id")
    @classmethod
    def _id_is_path_safe(cls, value: str) -> str:
        if PATH_SEPARATOR in value:
            raise ValueError(f"content id must not contain '{PATH_SEPARATOR}': {value!r}")
        return value

    def with_metrics(self, metrics: ContentMetrics) -> "ContentItem":
        """Return a copy of this item with refreshed metrics."""
        return self.model_copy(update={"metrics": metrics})

    def metric_value(self, name: str) -> float:
        """
        Read a numeric metric by name, 0 when the item has no metrics.

        Args:
            name: Metric attribute, e.g. "views" or "engagements"

        Returns:
            Metric value as float
        """
        if self.metrics is None:
            return 0.0
        value = getattr(self.metrics, name, None)
        return float(value) if value is not None else 0.0
