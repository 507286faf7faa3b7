"""
Render-ready graph projections and visualization options.

These models are produced by the visualization adapter and consumed by the
renderer. They carry no domain logic of their own.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from engagerr.models.content import ContentType, PlatformType
from engagerr.models.relationships import RelationshipType


class NodeSizing(str, Enum):
    """Strategy for sizing nodes."""

    METRIC = "metric"
    DEPTH = "depth"
    FIXED = "fixed"


class ChartTheme(str, Enum):
    """Color themes for the graph."""

    LIGHT = "light"
    DARK = "dark"
    BRANDED = "branded"
    PLATFORM_SPECIFIC = "platform_specific"


class LayoutType(str, Enum):
    """Layout algorithms the renderer can run."""

    HIERARCHICAL = "hierarchical"
    FORCE_DIRECTED = "force-directed"


class LayoutDirection(str, Enum):
    """Growth direction of the hierarchical layout."""

    UP_DOWN = "UD"
    DOWN_UP = "DU"
    LEFT_RIGHT = "LR"
    RIGHT_LEFT = "RL"


class GraphNode(BaseModel):
    """One drawable node."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    platform: PlatformType
    content_type: ContentType
    size: float
    color: str
    text_color: str
    border_color: str
    border_width: float
    depth: int = 0
    path: str = ""
    is_root: bool = False
    views: int = 0
    engagements: int = 0
    url: str | None = None
    thumbnail: str | None = None
    x: float | None = None
    y: float | None = None


class GraphEdge(BaseModel):
    """One drawable directed edge."""

    model_config = ConfigDict(frozen=True)

    id: str
    source: str
    target: str
    relationship_type: RelationshipType
    label: str
    width: float
    color: str
    dash_array: str | None = None
    arrow_size: float = 8.0
    confidence: float = 1.0


class GraphData(BaseModel):
    """Nodes and edges for one render pass."""

    model_config = ConfigDict(frozen=True)

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
    root_id: str | None = None

    @classmethod
    def empty(cls) -> "GraphData":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def node(self, node_id: str) -> GraphNode | None:
        return next((n for n in self.nodes if n.id == node_id), None)

    def edge(self, edge_id: str) -> GraphEdge | None:
        return next((e for e in self.edges if e.id == edge_id), None)


class VisualizationOptions(BaseModel):
    """Caller-controlled rendering options."""

    layout: LayoutType = LayoutType.HIERARCHICAL
    direction: LayoutDirection = LayoutDirection.UP_DOWN
    node_sizing: NodeSizing = NodeSizing.METRIC
    size_metric: str = "views"
    theme: ChartTheme = ChartTheme.LIGHT
    platform_colors: dict[PlatformType, str] = Field(default_factory=dict)
    show_labels: bool = True
    label_max_length: int = Field(default=30, ge=4)
    node_spacing: float = Field(default=100.0, gt=0)
    rank_spacing: float = Field(default=150.0, gt=0)
    animation_duration_ms: int = Field(default=300, ge=0)
