"""
Content family builder.

Turns a flat set of content items and relationships into a ContentFamily:
validates the edge set, assigns hierarchical paths breadth-first from the
root and separates out content that cannot be reached. The same checks back
every relationship write, so a family that was accepted by the store always
builds.
"""

from collections import defaultdict, deque
from collections.abc import Iterable
from datetime import UTC, datetime

from engagerr.models import (
    ContentFamily,
    ContentItem,
    ContentRelationship,
    FamilyNode,
    is_ancestor_path,
    make_path,
    path_depth,
)
from engagerr.utils.exceptions import (
    ContentNotFoundError,
    CycleDetectedError,
    DuplicateRelationshipError,
    InvalidRootError,
    MultipleParentsError,
    OrphanContentError,
)
from engagerr.utils.logger import get_logger

logger = get_logger(__name__)


def find_cycle(edges: Iterable[ContentRelationship]) -> list[str] | None:
    """
    Depth-first search for a directed cycle over all edges.

    Returns:
        The content ids along the cycle (first id repeated at the end), or
        None if the edge set is acyclic
    """
    adjacency: dict[str, list[str]] = defaultdict(list)
    for edge in edges:
        adjacency[edge.source_content_id].append(edge.target_content_id)

    WHITE, GREY, BLACK = 0, 1, 2
    color: dict[str, int] = defaultdict(int)

    for start in list(adjacency):
        if color[start] != WHITE:
            continue

        # Iterative DFS; the stack holds (node, iterator over its targets)
        stack = [(start, iter(adjacency[start]))]
        trail = [start]
        color[start] = GREY
        while stack:
            node, targets = stack[-1]
            advanced = False
            for target in targets:
                if color[target] == GREY:
                    return trail[trail.index(target) :] + [target]
                if color[target] == WHITE:
                    color[target] = GREY
                    stack.append((target, iter(adjacency[target])))
                    trail.append(target)
                    advanced = True
                    break
            if not advanced:
                color[node] = BLACK
                stack.pop()
                trail.pop()

    return None


def _reaches(start: str, goal: str, edges: Iterable[ContentRelationship]) -> list[str] | None:
    """Breadth-first search from ``start`` to ``goal``; returns the path found."""
    adjacency: dict[str, list[str]] = defaultdict(list)
    for edge in edges:
        adjacency[edge.source_content_id].append(edge.target_content_id)

    previous: dict[str, str | None] = {start: None}
    queue = deque([start])
    while queue:
        node = queue.popleft()
        if node == goal:
            path = [node]
            while previous[path[-1]] is not None:
                path.append(previous[path[-1]])
            return list(reversed(path))
        for target in adjacency[node]:
            if target not in previous:
                previous[target] = node
                queue.append(target)
    return None


def validate_relationship(
    candidate: ContentRelationship, existing: Iterable[ContentRelationship]
) -> None:
    """
    Check that adding ``candidate`` keeps the graph a single-parent DAG.

    Any existing edge with the candidate's id is ignored, so the same check
    validates updates in place.

    Args:
        candidate: Relationship about to be written
        existing: Relationships already in the graph

    Raises:
        CycleDetectedError: Self-loop, or the target already reaches the source
        DuplicateRelationshipError: An edge already joins the same pair
        MultipleParentsError: Target already has a parent-class edge
    """
    source = candidate.source_content_id
    target = candidate.target_content_id
    others = [e for e in existing if e.id != candidate.id]

    if source == target:
        raise CycleDetectedError(
            f"Content '{source}' cannot be related to itself",
            context={"source_content_id": source, "target_content_id": target},
        )

    for edge in others:
        if edge.source_content_id == source and edge.target_content_id == target:
            raise DuplicateRelationshipError(
                f"A {edge.relationship_type.value} relationship already exists "
                f"from '{source}' to '{target}'",
                context={"relationship_id": edge.id, "source_content_id": source, "target_content_id": target},
            )

    if candidate.is_parent_class:
        for edge in others:
            if edge.is_parent_class and edge.target_content_id == target:
                raise MultipleParentsError(
                    f"Content '{target}' already has parent '{edge.source_content_id}'; "
                    f"it cannot also be placed under '{source}'",
                    context={
                        "content_id": target,
                        "existing_parent_id": edge.source_content_id,
                        "proposed_parent_id": source,
                    },
                )

    loop = _reaches(target, source, others)
    if loop is not None:
        raise CycleDetectedError(
            f"Relating '{source}' to '{target}' would create a cycle: "
            + " -> ".join(loop + [target]),
            context={"source_content_id": source, "target_content_id": target, "cycle": loop + [target]},
        )


def parent_edges(edges: Iterable[ContentRelationship]) -> dict[str, ContentRelationship]:
    """
    Index parent-class edges by target.

    Raises:
        MultipleParentsError: If any content has two parent-class edges
    """
    by_target: dict[str, ContentRelationship] = {}
    for edge in edges:
        if not edge.is_parent_class:
            continue
        target = edge.target_content_id
        existing = by_target.get(target)
        if existing is not None:
            raise MultipleParentsError(
                f"Content '{target}' has two parents: "
                f"'{existing.source_content_id}' and '{edge.source_content_id}'",
                context={
                    "content_id": target,
                    "parent_ids": [existing.source_content_id, edge.source_content_id],
                },
            )
        by_target[target] = edge
    return by_target


def find_root_id(content_id: str, edges: Iterable[ContentRelationship]) -> str:
    """
    Walk parent-class edges upward from ``content_id`` to its family root.

    Raises:
        CycleDetectedError: If the upward walk revisits a node
        MultipleParentsError: If the edge set gives some node two parents
    """
    parents = parent_edges(edges)
    seen = {content_id}
    current = content_id
    while current in parents:
        current = parents[current].source_content_id
        if current in seen:
            raise CycleDetectedError(
                f"Parent chain of '{content_id}' loops back through '{current}'",
                context={"content_id": content_id, "cycle_at": current},
            )
        seen.add(current)
    return current


def build_family(
    root_id: str,
    items: Iterable[ContentItem],
    edges: Iterable[ContentRelationship],
    strict: bool = False,
) -> ContentFamily:
    """
    Build a content family rooted at ``root_id``.

    Args:
        root_id: Id of the family root
        items: Candidate content items; anything unreachable becomes an orphan
        edges: Relationships among the items
        strict: Raise on orphans instead of reporting them

    Returns:
        ContentFamily with paths assigned and aggregate metrics unset

    Raises:
        ContentNotFoundError: ``root_id`` is not among the items
        CycleDetectedError: The edge set contains a cycle
        MultipleParentsError: Some content has two parent-class edges
        InvalidRootError: ``root_id`` has a parent of its own
        OrphanContentError: ``strict`` is set and some content is unreachable
    """
    by_id = {item.id: item for item in items}
    edges = list(edges)

    if root_id not in by_id:
        raise ContentNotFoundError(
            f"Root content '{root_id}' not found", context={"content_id": root_id}
        )

    cycle = find_cycle(edges)
    if cycle is not None:
        raise CycleDetectedError(
            "Relationships contain a cycle: " + " -> ".join(cycle),
            context={"cycle": cycle},
        )

    parents = parent_edges(edges)
    if root_id in parents:
        raise InvalidRootError(
            f"Content '{root_id}' cannot be a family root: "
            f"it is a child of '{parents[root_id].source_content_id}'",
            context={"content_id": root_id, "parent_id": parents[root_id].source_content_id},
        )

    children: dict[str, list[ContentItem]] = defaultdict(list)
    for target, edge in parents.items():
        if target in by_id and edge.source_content_id in by_id:
            children[edge.source_content_id].append(by_id[target])
    for siblings in children.values():
        siblings.sort(key=lambda item: (item.published_at, item.id))

    root = by_id[root_id]
    nodes = [FamilyNode(content=root, path=root.id, depth=0, parent_id=None)]
    queue = deque(nodes)
    while queue:
        node = queue.popleft()
        for child in children[node.id]:
            path = make_path(node.path, child.id)
            child_node = FamilyNode(
                content=child, path=path, depth=path_depth(path), parent_id=node.id
            )
            nodes.append(child_node)
            queue.append(child_node)

    paths = {node.id: node.path for node in nodes}
    relationships = [
        e for e in edges if e.source_content_id in paths and e.target_content_id in paths
    ]

    for edge in relationships:
        source_path = paths[edge.source_content_id]
        target_path = paths[edge.target_content_id]
        if target_path == source_path or is_ancestor_path(target_path, source_path):
            raise CycleDetectedError(
                f"Relationship '{edge.id}' points from '{edge.source_content_id}' "
                f"back to its ancestor '{edge.target_content_id}'",
                context={"relationship_id": edge.id, "source_path": source_path, "target_path": target_path},
            )

    orphan_ids = sorted(cid for cid in by_id if cid not in paths)
    if orphan_ids:
        if strict:
            raise OrphanContentError(
                f"{len(orphan_ids)} content item(s) have no path to root '{root_id}'",
                context={"root_id": root_id, "orphan_ids": orphan_ids},
            )
        logger.warning(f"Family '{root_id}' excludes {len(orphan_ids)} orphan(s): {orphan_ids}")

    logger.debug(
        f"Built family '{root_id}': {len(nodes)} nodes, {len(relationships)} relationships"
    )

    return ContentFamily(
        id=root_id,
        root_id=root_id,
        nodes=nodes,
        relationships=relationships,
        orphan_ids=orphan_ids,
        built_at=datetime.now(UTC),
    )
