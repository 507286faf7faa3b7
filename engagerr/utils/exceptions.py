"""
Custom exception hierarchy for Engagerr.

Provides structured error types for the content relationship graph.
All exceptions inherit from EngagerrError for easy catching.

Structural errors (cycles, multiple parents, lost races) are expected,
recoverable outcomes of collaborative editing. Their messages are shown to
the user verbatim, so they always say *why* an operation was rejected.
"""


class EngagerrError(Exception):
    """
    Base exception for all Engagerr errors.
    All custom exceptions should inherit from this class.
    """

    error_type = "engagerr_error"

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize Engagerr error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict:
        """Serialize the error for API responses."""
        return {"error_type": self.error_type, "message": self.message, "context": self.context}


class GraphError(EngagerrError):
    """
    Base exception for content graph structure violations.
    The graph is left untouched whenever one of these is raised.
    """

    error_type = "graph_error"


class CycleDetectedError(GraphError):
    """
    Raised when a relationship would create a path back to an ancestor.
    """

    error_type = "cycle_detected"


class MultipleParentsError(GraphError):
    """
    Raised when a content item would receive a second parent-class edge.
    """

    error_type = "multiple_parents"


class OrphanContentError(GraphError):
    """
    Raised in strict builds when content has no path to the family root.
    """

    error_type = "orphan_content"


class InvalidRootError(GraphError):
    """
    Raised when the requested family root has a parent of its own.
    """

    error_type = "invalid_root"


class DuplicateRelationshipError(GraphError):
    """
    Raised when a relationship already exists between two content items.
    """

    error_type = "duplicate_relationship"


class StructuralConflictError(GraphError):
    """
    Raised when a concurrent edit committed first and invalidated this one.
    """

    error_type = "structural_conflict"


class SuggestionBelowThresholdError(EngagerrError):
    """
    Suggestion confidence is below the surfacing threshold.
    Used internally to filter suggestions, never shown to the user.
    """

    error_type = "suggestion_below_threshold"


class FetchFailureError(EngagerrError):
    """
    Network or backend failure while fetching or submitting graph data.
    """

    error_type = "fetch_failure"


class RenderFailureError(EngagerrError):
    """
    Layout or projection failure inside the renderer.
    """

    error_type = "render_failure"


class StoreError(EngagerrError):
    """
    Relationship store operation errors.
    Raised when the backing database fails.
    """

    error_type = "store_error"


class ValidationError(EngagerrError):
    """
    Validation errors.
    Raised when input validation fails or data is invalid.
    """

    error_type = "validation_error"


class NotFoundError(EngagerrError):
    """
    Resource not found errors.
    Raised when a requested resource (content, relationship, suggestion) doesn't exist.
    """

    error_type = "not_found"


class ContentNotFoundError(NotFoundError):
    """Content item doesn't exist."""

    error_type = "content_not_found"


class RelationshipNotFoundError(NotFoundError):
    """Relationship doesn't exist."""

    error_type = "relationship_not_found"


class SuggestionNotFoundError(NotFoundError):
    """Suggestion doesn't exist or was already resolved."""

    error_type = "suggestion_not_found"


class ConfigurationError(EngagerrError):
    """
    Configuration errors.
    Raised when configuration is invalid or missing required values.
    """

    error_type = "configuration_error"


class InvalidStateTransitionError(EngagerrError):
    """
    Renderer was asked to move between two states that are not connected.
    """

    error_type = "invalid_state_transition"


class MutationInProgressError(EngagerrError):
    """
    A structural mutation is already pending for this family.
    """

    error_type = "mutation_in_progress"


STRUCTURAL_ERRORS: dict[str, type[GraphError]] = {
    cls.error_type: cls
    for cls in (
        CycleDetectedError,
        MultipleParentsError,
        OrphanContentError,
        InvalidRootError,
        DuplicateRelationshipError,
        StructuralConflictError,
    )
}
