"""
Family to render-graph projection.

Maps a ContentFamily onto drawable nodes and edges: sizes from metrics or
depth, fills from the platform palette, label contrast from luminance and a
fixed style per relationship type. Collapsed subtrees are filtered by path
prefix, never by walking edges.
"""

import math
from collections.abc import Iterable

from engagerr.core.visualization.palette import (
    ARROW_SIZE,
    EDGE_ALPHA,
    contrast_color,
    edge_style,
    get_theme,
    with_alpha,
)
from engagerr.models import (
    ContentFamily,
    FamilyNode,
    GraphData,
    GraphEdge,
    GraphNode,
    NodeSizing,
    VisualizationOptions,
    relationship_label,
)
from engagerr.utils.exceptions import RenderFailureError

MIN_NODE_SIZE = 20.0
MAX_NODE_SIZE = 100.0
FIXED_NODE_SIZE = 40.0
DEPTH_BASE_SIZE = 60.0
DEPTH_SIZE_RANGE = 40.0

ROOT_BORDER_WIDTH = 3.0
NODE_BORDER_WIDTH = 1.0


def metric_size(value: float) -> float:
    """Log-scaled node size, clamped to [20, 100]."""
    size = MIN_NODE_SIZE + 10 * math.log10(max(value, 0.0) + 1)
    return min(MAX_NODE_SIZE, max(MIN_NODE_SIZE, size))


def depth_size(depth: int, max_depth: int) -> float:
    """Shallower nodes are drawn larger; the root gets the base size."""
    if max_depth <= 0:
        return DEPTH_BASE_SIZE
    return max(MIN_NODE_SIZE, DEPTH_BASE_SIZE - depth * DEPTH_SIZE_RANGE / max_depth)


def node_size(node: FamilyNode, max_depth: int, options: VisualizationOptions) -> float:
    if options.node_sizing == NodeSizing.METRIC:
        return metric_size(node.content.metric_value(options.size_metric))
    if options.node_sizing == NodeSizing.DEPTH:
        return depth_size(node.depth, max_depth)
    return FIXED_NODE_SIZE


def truncate_label(title: str, max_length: int) -> str:
    if len(title) <= max_length:
        return title
    return title[: max_length - 3].rstrip() + "..."


def to_graph_data(
    family: ContentFamily,
    options: VisualizationOptions | None = None,
    collapsed: Iterable[str] = (),
) -> GraphData:
    """
    Project a family into render-ready nodes and edges.

    Args:
        family: Built content family
        options: Sizing, theme and label options
        collapsed: Ids whose subtrees are hidden

    Returns:
        GraphData with the root first

    Raises:
        RenderFailureError: If the family cannot be projected
    """
    options = options or VisualizationOptions()
    theme = get_theme(options.theme, options.platform_colors)
    max_depth = family.max_depth

    nodes: list[GraphNode] = []
    colors: dict[str, str] = {}
    try:
        for node in family.nodes:
            item = node.content
            fill = theme.fill_for(item.platform_type, node.depth)
            colors[node.id] = fill
            metrics = item.metrics
            nodes.append(
                GraphNode(
                    id=node.id,
                    label=truncate_label(item.title, options.label_max_length)
                    if options.show_labels
                    else "",
                    platform=item.platform_type,
                    content_type=item.content_type,
                    size=node_size(node, max_depth, options),
                    color=fill,
                    text_color=contrast_color(fill),
                    border_color=theme.emphasis if node.is_root else fill,
                    border_width=ROOT_BORDER_WIDTH if node.is_root else NODE_BORDER_WIDTH,
                    depth=node.depth,
                    path=node.path,
                    is_root=node.is_root,
                    views=metrics.views if metrics else 0,
                    engagements=metrics.engagements if metrics else 0,
                    url=item.url,
                    thumbnail=item.thumbnail,
                )
            )

        edges = []
        for rel in family.relationships:
            width, dash = edge_style(rel.relationship_type)
            edges.append(
                GraphEdge(
                    id=rel.id,
                    source=rel.source_content_id,
                    target=rel.target_content_id,
                    relationship_type=rel.relationship_type,
                    label=relationship_label(rel.relationship_type),
                    width=width,
                    color=with_alpha(colors[rel.source_content_id], EDGE_ALPHA),
                    dash_array=dash,
                    arrow_size=ARROW_SIZE,
                    confidence=rel.confidence,
                )
            )
    except (KeyError, ValueError) as e:
        raise RenderFailureError(
            f"Failed to project family '{family.id}': {e}", context={"family_id": family.id}
        ) from e

    data = GraphData(nodes=nodes, edges=edges, root_id=family.root_id)
    collapsed = set(collapsed)
    if collapsed:
        data = visible_graph(data, collapsed, family)
    return data


def hidden_ids(collapsed_ids: Iterable[str], family: ContentFamily) -> set[str]:
    """Every id lying under a collapsed node."""
    hidden: set[str] = set()
    for content_id in collapsed_ids:
        hidden.update(node.id for node in family.descendants_of(content_id))
    return hidden


def visible_graph(
    data: GraphData, collapsed_ids: Iterable[str], family: ContentFamily
) -> GraphData:
    """
    Drop the subtrees of collapsed nodes and any edge touching them.

    Collapsed nodes themselves stay visible.
    """
    hidden = hidden_ids(collapsed_ids, family)
    if not hidden:
        return data
    return GraphData(
        nodes=[n for n in data.nodes if n.id not in hidden],
        edges=[e for e in data.edges if e.source not in hidden and e.target not in hidden],
        root_id=data.root_id,
    )
