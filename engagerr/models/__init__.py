"""
Data models for Engagerr.

Core models:
- ContentItem, ContentMetrics: Published content and its performance
- ContentRelationship, RelationshipType: Directed edges between content
- ContentFamily, FamilyNode: Root-anchored hierarchy with paths
- AggregateMetrics, PlatformBreakdown: Family-level rollups
- ContentSuggestion: Tagged union of AI relationship suggestions
- GraphData, GraphNode, GraphEdge: Render-ready projections
"""

from engagerr.models.content import (
    LONG_FORM_TYPES,
    ContentItem,
    ContentMetrics,
    ContentType,
    PlatformType,
)
from engagerr.models.family import (
    AggregateMetrics,
    ContentFamily,
    FamilyNode,
    FamilySnapshot,
    FamilyStatistics,
    PlatformBreakdown,
)
from engagerr.models.graph import (
    ChartTheme,
    GraphData,
    GraphEdge,
    GraphNode,
    LayoutDirection,
    LayoutType,
    NodeSizing,
    VisualizationOptions,
)
from engagerr.models.paths import (
    PATH_SEPARATOR,
    common_path_prefix,
    is_ancestor_path,
    make_path,
    parent_path,
    path_depth,
    path_segments,
    validate_path,
)
from engagerr.models.relationships import (
    PARENT_CLASS_TYPES,
    ContentRelationship,
    CreateRelationshipRequest,
    CreationMethod,
    RelationshipType,
    UpdateRelationshipRequest,
    is_parent_class,
    relationship_label,
)
from engagerr.models.suggestion import (
    ChildSuggestion,
    ContentSuggestion,
    DerivativeSuggestion,
    ParentSuggestion,
    ReactionSuggestion,
    ReferenceSuggestion,
    RepurposedSuggestion,
    dump_suggestions,
    parse_suggestion,
    parse_suggestions,
)

__all__ = [
    # Content
    "ContentItem",
    "ContentMetrics",
    "ContentType",
    "PlatformType",
    "LONG_FORM_TYPES",
    # Relationships
    "ContentRelationship",
    "RelationshipType",
    "CreationMethod",
    "PARENT_CLASS_TYPES",
    "CreateRelationshipRequest",
    "UpdateRelationshipRequest",
    "is_parent_class",
    "relationship_label",
    # Paths
    "PATH_SEPARATOR",
    "make_path",
    "path_segments",
    "path_depth",
    "parent_path",
    "is_ancestor_path",
    "common_path_prefix",
    "validate_path",
    # Family
    "ContentFamily",
    "FamilyNode",
    "FamilySnapshot",
    "FamilyStatistics",
    "AggregateMetrics",
    "PlatformBreakdown",
    # Suggestions
    "ContentSuggestion",
    "ParentSuggestion",
    "ChildSuggestion",
    "DerivativeSuggestion",
    "RepurposedSuggestion",
    "ReactionSuggestion",
    "ReferenceSuggestion",
    "parse_suggestion",
    "parse_suggestions",
    "dump_suggestions",
    # Graph projections
    "GraphData",
    "GraphNode",
    "GraphEdge",
    "NodeSizing",
    "ChartTheme",
    "LayoutType",
    "LayoutDirection",
    "VisualizationOptions",
]
