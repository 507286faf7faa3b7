"""
Service layer for Engagerr.

Services:
- RelationshipService: Backend facade over store, builder and aggregator
- SuggestionEngine: Lists, ingests and resolves AI suggestions
- HeuristicSuggestionClassifier: Reference suggestion producer
- EngagerrClient: HTTP client for the content graph API
- GraphRenderer: Interactive family view state container
"""

from engagerr.services.client import EngagerrClient
from engagerr.services.relationship_service import RelationshipService
from engagerr.services.renderer import (
    GraphRenderer,
    GraphViewProps,
    MutationResult,
    RendererState,
    ViewTransform,
)
from engagerr.services.suggestion_classifier import HeuristicSuggestionClassifier
from engagerr.services.suggestion_engine import SuggestionEngine

__all__ = [
    "RelationshipService",
    "SuggestionEngine",
    "HeuristicSuggestionClassifier",
    "EngagerrClient",
    "GraphRenderer",
    "GraphViewProps",
    "MutationResult",
    "RendererState",
    "ViewTransform",
]
