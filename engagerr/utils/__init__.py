"""Utility modules for Engagerr."""

from engagerr.utils.exceptions import (
    STRUCTURAL_ERRORS,
    ConfigurationError,
    ContentNotFoundError,
    CycleDetectedError,
    DuplicateRelationshipError,
    EngagerrError,
    FetchFailureError,
    GraphError,
    InvalidRootError,
    InvalidStateTransitionError,
    MultipleParentsError,
    MutationInProgressError,
    NotFoundError,
    OrphanContentError,
    RelationshipNotFoundError,
    RenderFailureError,
    StoreError,
    StructuralConflictError,
    SuggestionBelowThresholdError,
    SuggestionNotFoundError,
    ValidationError,
)
from engagerr.utils.id_generator import (
    generate_content_id,
    generate_relationship_id,
    generate_suggestion_id,
)
from engagerr.utils.logger import get_logger, setup_logging

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # ID Generators
    "generate_relationship_id",
    "generate_suggestion_id",
    "generate_content_id",
    # Exceptions
    "EngagerrError",
    "GraphError",
    "CycleDetectedError",
    "MultipleParentsError",
    "OrphanContentError",
    "InvalidRootError",
    "DuplicateRelationshipError",
    "StructuralConflictError",
    "SuggestionBelowThresholdError",
    "FetchFailureError",
    "RenderFailureError",
    "StoreError",
    "ValidationError",
    "NotFoundError",
    "ContentNotFoundError",
    "RelationshipNotFoundError",
    "SuggestionNotFoundError",
    "ConfigurationError",
    "InvalidStateTransitionError",
    "MutationInProgressError",
    "STRUCTURAL_ERRORS",
]
