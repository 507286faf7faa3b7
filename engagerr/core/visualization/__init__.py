"""
Visualization adapter for content families.

Projects a ContentFamily into GraphData (nodes, edges) for the renderer.
"""

from engagerr.core.visualization.adapter import (
    depth_size,
    hidden_ids,
    metric_size,
    to_graph_data,
    visible_graph,
)
from engagerr.core.visualization.palette import (
    PLATFORM_COLORS,
    THEMES,
    Theme,
    contrast_color,
    edge_style,
    get_theme,
)

__all__ = [
    "to_graph_data",
    "visible_graph",
    "hidden_ids",
    "metric_size",
    "depth_size",
    "contrast_color",
    "edge_style",
    "get_theme",
    "Theme",
    "THEMES",
    "PLATFORM_COLORS",
]
