"""
Content relationship service - the backend facade.

Brings together:
- Relationship store (validated writes, component loading)
- Graph builder and metric aggregator
- Suggestion engine
- Visualization adapter
"""

from engagerr.config import Config
from engagerr.core.hierarchy import build_family, find_root_id
from engagerr.core.metrics import aggregate
from engagerr.core.relationship_store import RelationshipStore, RelationshipStoreFactory
from engagerr.core.visualization import to_graph_data
from engagerr.models import (
    ContentFamily,
    ContentItem,
    ContentRelationship,
    CreateRelationshipRequest,
    CreationMethod,
    FamilySnapshot,
    GraphData,
    UpdateRelationshipRequest,
    VisualizationOptions,
)
from engagerr.services.suggestion_engine import SuggestionEngine
from engagerr.utils.exceptions import GraphError, RelationshipNotFoundError
from engagerr.utils.logger import get_logger

logger = get_logger(__name__)


class RelationshipService:
    """
    Content relationship graph service.

    Features:
    - Family snapshots resolved from any member
    - Per-creator family listing
    - Built families with aggregate metrics
    - Validated relationship create/update/delete
    - Suggestion listing and resolution
    - Render-ready graph projections
    """

    def __init__(self, config: Config, store: RelationshipStore | None = None):
        """
        Initialize relationship service.

        Args:
            config: Configuration object
            store: Relationship store (created from config when omitted)
        """
        self.config = config
        self.store = store or RelationshipStoreFactory.create(config)
        self.suggestions = SuggestionEngine(self.store, config)

    async def initialize(self) -> None:
        """Initialize the backing store."""
        logger.info("Initializing relationship service")
        await self.store.initialize()
        logger.info("Relationship service ready")

    async def close(self) -> None:
        """Close the backing store."""
        logger.info("Shutting down relationship service")
        await self.store.close()

    # ═══════════════════════════════════════════════════════════
    # CONTENT
    # ═══════════════════════════════════════════════════════════

    async def upsert_content(self, items: list[ContentItem]) -> int:
        """Insert content items or refresh their metrics."""
        return await self.store.upsert_content(items)

    # ═══════════════════════════════════════════════════════════
    # FAMILIES
    # ═══════════════════════════════════════════════════════════

    async def get_family_snapshot(self, content_id: str) -> FamilySnapshot:
        """
        Raw family containing ``content_id``.

        The root is found by walking parent-class edges upward; content
        connected only through references to another family is left out.

        Raises:
            ContentNotFoundError: If the content does not exist
            GraphError: If the stored graph is structurally invalid
        """
        family = await self._build(content_id)
        return FamilySnapshot(
            root_id=family.root_id,
            items=family.items,
            relationships=family.relationships,
        )

    async def get_family(self, content_id: str) -> ContentFamily:
        """Built family containing ``content_id``, with aggregate metrics."""
        family = await self._build(content_id)
        return family.with_aggregate(aggregate(family))

    async def get_visualization(
        self, content_id: str, options: VisualizationOptions | None = None
    ) -> GraphData:
        """Render-ready projection of the family containing ``content_id``."""
        family = await self._build(content_id)
        return to_graph_data(family, options)

    async def get_creator_families(self, creator_id: str) -> list[ContentFamily]:
        """
        Every family headed by one of a creator's content items.

        Returns:
            Built families with aggregate metrics, largest first
        """
        families = []
        for root_id in await self.store.list_family_roots(creator_id):
            families.append(await self.get_family(root_id))
        families.sort(key=lambda f: (-f.size, f.root_id))
        logger.debug(f"Found {len(families)} families for creator {creator_id}")
        return families

    async def _build(self, content_id: str) -> ContentFamily:
        items, edges = await self.store.get_component(content_id)
        root_id = find_root_id(content_id, edges)
        family = build_family(root_id, items, edges)
        logger.debug(f"Resolved family {root_id} for {content_id} ({family.size} nodes)")
        return family

    # ═══════════════════════════════════════════════════════════
    # RELATIONSHIPS
    # ═══════════════════════════════════════════════════════════

    async def create_relationship(self, request: CreateRelationshipRequest) -> ContentRelationship:
        """
        Create a user-defined relationship.

        Raises:
            ContentNotFoundError: If either endpoint does not exist
            GraphError: If the edge would break the hierarchy
        """
        relationship = ContentRelationship(
            source_content_id=request.source_content_id,
            target_content_id=request.target_content_id,
            relationship_type=request.relationship_type,
            confidence=1.0,
            creation_method=CreationMethod.USER_DEFINED,
        )
        try:
            return await self.store.add_relationship(relationship)
        except GraphError as e:
            logger.warning(
                f"Rejected relationship {request.source_content_id} -> "
                f"{request.target_content_id}: {e.message}"
            )
            raise

    async def update_relationship(
        self, relationship_id: str, request: UpdateRelationshipRequest
    ) -> ContentRelationship:
        """
        Change the type or confidence of a relationship.

        Raises:
            RelationshipNotFoundError: If it does not exist
            GraphError: If the change would break the hierarchy
        """
        try:
            return await self.store.update_relationship(
                relationship_id,
                relationship_type=request.relationship_type,
                confidence=request.confidence,
            )
        except GraphError as e:
            logger.warning(f"Rejected update of {relationship_id}: {e.message}")
            raise

    async def delete_relationship(self, relationship_id: str) -> None:
        """Delete a relationship."""
        await self.store.delete_relationship(relationship_id)

    async def remove_from_hierarchy(
        self, content_id: str, preserve_descendants: bool = True
    ) -> list[ContentRelationship]:
        """
        Take content out of its family, reattaching its children to its parent.

        With ``preserve_descendants=False`` the content leaves together with
        its whole subtree.

        Raises:
            ContentNotFoundError: If the content does not exist
            GraphError: If a reattached relationship would break the hierarchy
        """
        try:
            return await self.store.remove_from_hierarchy(content_id, preserve_descendants)
        except GraphError as e:
            logger.warning(f"Rejected removal of {content_id} from its family: {e.message}")
            raise

    async def get_relationship(self, relationship_id: str) -> ContentRelationship:
        """
        Fetch a relationship.

        Raises:
            RelationshipNotFoundError: If it does not exist
        """
        relationship = await self.store.get_relationship(relationship_id)
        if relationship is None:
            raise RelationshipNotFoundError(
                f"Relationship '{relationship_id}' not found",
                context={"relationship_id": relationship_id},
            )
        return relationship
