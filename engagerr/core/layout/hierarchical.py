"""
Tidy-tree layout for content hierarchies.

Leaves take consecutive slots along the breadth axis, parents are centered
over their children and each depth level is one rank further from the root.
"""

from collections import defaultdict

from engagerr.models import GraphData, LayoutDirection, parent_path, path_segments


def hierarchical_layout(
    data: GraphData,
    node_spacing: float = 100.0,
    rank_spacing: float = 150.0,
    direction: LayoutDirection = LayoutDirection.UP_DOWN,
) -> dict[str, tuple[float, float]]:
    """
    Place nodes of a (possibly collapsed) family graph.

    Nodes are linked through their paths, so hidden subtrees simply do not
    take up space. A node whose parent is not in ``data`` is laid out as an
    additional tree beside the root.

    Returns:
        Mapping of node id to (x, y), with the root at the origin
    """
    if not data.nodes:
        return {}

    present = {node.id for node in data.nodes}
    order = {node.id: i for i, node in enumerate(data.nodes)}
    depth: dict[str, int] = {}
    children: dict[str | None, list[str]] = defaultdict(list)

    for node in data.nodes:
        head = parent_path(node.path)
        parent = path_segments(head)[-1] if head else None
        if parent not in present:
            parent = None
        children[parent].append(node.id)

    for siblings in children.values():
        siblings.sort(key=order.__getitem__)

    breadth: dict[str, float] = {}
    next_slot = 0

    for top in children[None]:
        # Post-order walk; a parent is placed once all of its children are
        stack = [(top, 0, False)]
        while stack:
            node_id, level, expanded = stack.pop()
            kids = children.get(node_id, [])
            if expanded:
                breadth[node_id] = (breadth[kids[0]] + breadth[kids[-1]]) / 2
                continue
            depth[node_id] = level
            if not kids:
                breadth[node_id] = float(next_slot)
                next_slot += 1
                continue
            stack.append((node_id, level, True))
            stack.extend((kid, level + 1, False) for kid in reversed(kids))

    anchor_id = data.root_id if data.root_id in breadth else children[None][0]
    anchor = breadth[anchor_id]

    positions: dict[str, tuple[float, float]] = {}
    for node_id, slot in breadth.items():
        across = (slot - anchor) * node_spacing
        along = depth[node_id] * rank_spacing
        if direction == LayoutDirection.UP_DOWN:
            positions[node_id] = (across, along)
        elif direction == LayoutDirection.DOWN_UP:
            positions[node_id] = (across, -along)
        elif direction == LayoutDirection.LEFT_RIGHT:
            positions[node_id] = (along, across)
        else:
            positions[node_id] = (-along, across)
    return positions
