"""
Content family models.

A family is the tree of content reachable from one root over parent-class
relationships. Families are produced by the graph builder and are treated
as immutable snapshots; any edit yields a new family.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from engagerr.models.content import ContentItem, ContentType, PlatformType
from engagerr.models.paths import common_path_prefix, is_ancestor_path, path_segments
from engagerr.models.relationships import ContentRelationship, RelationshipType


class PlatformBreakdown(BaseModel):
    """Per-platform slice of a family's aggregate metrics."""

    model_config = ConfigDict(frozen=True)

    platform: PlatformType
    content_count: int = 0
    views: int = 0
    engagements: int = 0
    views_percentage: float = 0.0
    engagements_percentage: float = 0.0


class AggregateMetrics(BaseModel):
    """
    Family-level metrics rolled up from every node.

    Values are kept at full precision; ``to_display`` rounds them for
    presentation.
    """

    model_config = ConfigDict(frozen=True)

    total_views: int = 0
    total_engagements: int = 0
    total_likes: int = 0
    total_shares: int = 0
    total_comments: int = 0
    overall_engagement_rate: float = 0.0
    estimated_total_value: float = 0.0
    platform_breakdown: list[PlatformBreakdown] = Field(default_factory=list)
    content_count: int = 0
    platform_count: int = 0

    def breakdown_for(self, platform: PlatformType) -> PlatformBreakdown | None:
        """Bucket for one platform, None if the family has no content there."""
        for bucket in self.platform_breakdown:
            if bucket.platform == platform:
                return bucket
        return None

    def to_display(self, digits: int = 2) -> dict[str, Any]:
        """Rounded, JSON-friendly view for dashboards."""
        return {
            "total_views": self.total_views,
            "total_engagements": self.total_engagements,
            "total_likes": self.total_likes,
            "total_shares": self.total_shares,
            "total_comments": self.total_comments,
            "overall_engagement_rate": round(self.overall_engagement_rate * 100, digits),
            "estimated_total_value": round(self.estimated_total_value, digits),
            "content_count": self.content_count,
            "platform_count": self.platform_count,
            "platform_breakdown": [
                {
                    "platform": bucket.platform.value,
                    "content_count": bucket.content_count,
                    "views": bucket.views,
                    "engagements": bucket.engagements,
                    "views_percentage": round(bucket.views_percentage, digits),
                    "engagements_percentage": round(bucket.engagements_percentage, digits),
                }
                for bucket in self.platform_breakdown
            ],
        }


class FamilyNode(BaseModel):
    """A content item placed in the family hierarchy."""

    model_config = ConfigDict(frozen=True)

    content: ContentItem
    path: str
    depth: int = Field(..., ge=0)
    parent_id: str | None = None

    @property
    def id(self) -> str:
        return self.content.id

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


class FamilyStatistics(BaseModel):
    """Structural summary of a family."""

    content_by_platform: dict[str, int] = Field(default_factory=dict)
    content_by_type: dict[str, int] = Field(default_factory=dict)
    relationships_by_type: dict[str, int] = Field(default_factory=dict)
    platform_count: int = 0
    max_depth: int = 0


class ContentFamily(BaseModel):
    """
    Root-anchored content hierarchy.

    ``nodes`` holds the root first, then the rest breadth-first. Ancestry
    queries work on each node's path, so they never walk edges.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    root_id: str
    nodes: list[FamilyNode]
    relationships: list[ContentRelationship] = Field(default_factory=list)
    aggregate_metrics: AggregateMetrics | None = None
    orphan_ids: list[str] = Field(default_factory=list)
    built_at: datetime | None = None

    _by_id: dict[str, FamilyNode] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._by_id = {node.id: node for node in self.nodes}

    # ═══════════════════════════════════════════════════════════════════════
    # LOOKUPS
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def root(self) -> FamilyNode:
        return self._by_id[self.root_id]

    @property
    def items(self) -> list[ContentItem]:
        return [node.content for node in self.nodes]

    @property
    def size(self) -> int:
        return len(self.nodes)

    @property
    def max_depth(self) -> int:
        return max((node.depth for node in self.nodes), default=0)

    def __contains__(self, content_id: object) -> bool:
        return content_id in self._by_id

    def node(self, content_id: str) -> FamilyNode | None:
        return self._by_id.get(content_id)

    def path_of(self, content_id: str) -> str | None:
        node = self._by_id.get(content_id)
        return node.path if node else None

    # ═══════════════════════════════════════════════════════════════════════
    # PATH QUERIES
    # ═══════════════════════════════════════════════════════════════════════

    def is_ancestor(self, ancestor_id: str, descendant_id: str) -> bool:
        """Whether ``ancestor_id`` lies strictly above ``descendant_id``."""
        ancestor = self._by_id.get(ancestor_id)
        descendant = self._by_id.get(descendant_id)
        if ancestor is None or descendant is None:
            return False
        return is_ancestor_path(ancestor.path, descendant.path)

    def descendants_of(self, content_id: str) -> list[FamilyNode]:
        """All nodes below ``content_id``, in family order."""
        node = self._by_id.get(content_id)
        if node is None:
            return []
        return [n for n in self.nodes if is_ancestor_path(node.path, n.path)]

    def ancestors_of(self, content_id: str) -> list[FamilyNode]:
        """Nodes from the root down to the parent of ``content_id``."""
        node = self._by_id.get(content_id)
        if node is None:
            return []
        return [self._by_id[segment] for segment in path_segments(node.path)[:-1]]

    def children_of(self, content_id: str) -> list[FamilyNode]:
        """Direct children of ``content_id``, in sibling order."""
        return [n for n in self.nodes if n.parent_id == content_id]

    def has_descendants(self, content_id: str) -> bool:
        return any(n.parent_id == content_id for n in self.nodes)

    def common_ancestor(self, content_ids: list[str]) -> FamilyNode | None:
        """
        Deepest node that is an ancestor-or-self of every given id.

        Returns:
            The shared node, or None when any id is outside the family
        """
        paths = [self.path_of(cid) for cid in content_ids]
        if not paths or any(p is None for p in paths):
            return None
        prefix = common_path_prefix(paths)
        if prefix is None:
            return None
        return self._by_id.get(path_segments(prefix)[-1])

    # ═══════════════════════════════════════════════════════════════════════
    # SUMMARIES
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def statistics(self) -> FamilyStatistics:
        by_platform: dict[str, int] = {}
        by_type: dict[str, int] = {}
        for node in self.nodes:
            platform = node.content.platform_type.value
            content_type = node.content.content_type.value
            by_platform[platform] = by_platform.get(platform, 0) + 1
            by_type[content_type] = by_type.get(content_type, 0) + 1

        by_relationship: dict[str, int] = {}
        for rel in self.relationships:
            key = rel.relationship_type.value
            by_relationship[key] = by_relationship.get(key, 0) + 1

        return FamilyStatistics(
            content_by_platform=by_platform,
            content_by_type=by_type,
            relationships_by_type=by_relationship,
            platform_count=len(by_platform),
            max_depth=self.max_depth,
        )

    def count_by_type(self, content_type: ContentType) -> int:
        return sum(1 for n in self.nodes if n.content.content_type == content_type)

    def relationships_of_type(self, relationship_type: RelationshipType) -> list[ContentRelationship]:
        return [r for r in self.relationships if r.relationship_type == relationship_type]

    def with_aggregate(self, metrics: AggregateMetrics) -> "ContentFamily":
        """Copy of this family carrying freshly computed metrics."""
        return self.model_copy(update={"aggregate_metrics": metrics})


class FamilySnapshot(BaseModel):
    """
    Raw family payload as served by the backend.

    The renderer builds the ContentFamily locally from this, so validation
    runs on the same code path on both sides of the wire.
    """

    root_id: str
    items: list[ContentItem]
    relationships: list[ContentRelationship] = Field(default_factory=list)
