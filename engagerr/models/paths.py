"""
Hierarchical path helpers.

A path is the dot-joined chain of content ids from the family root down to a
node, e.g. ``root.childA.grandchildB``. Ancestry, depth and common ancestors
are all answered by prefix arithmetic on these strings.
"""

PATH_SEPARATOR = "."


def make_path(parent_path: str | None, content_id: str) -> str:
    """Path of a node given its parent's path (None for the root)."""
    if not parent_path:
        return content_id
    return f"{parent_path}{PATH_SEPARATOR}{content_id}"


def path_segments(path: str) -> list[str]:
    """Split a path into its content ids, root first."""
    return path.split(PATH_SEPARATOR) if path else []


def path_depth(path: str) -> int:
    """Number of ancestors of the node at this path (root is 0)."""
    return max(len(path_segments(path)) - 1, 0)


def parent_path(path: str) -> str | None:
    """Path of the parent node, None for a root path."""
    head, sep, _ = path.rpartition(PATH_SEPARATOR)
    return head if sep else None


def is_ancestor_path(ancestor: str, descendant: str) -> bool:
    """
    Strict ancestry test.

    ``a`` is an ancestor of ``a.b`` and ``a.b.c`` but not of ``a`` itself,
    nor of ``ab.c``: the match must end on a segment boundary.
    """
    return descendant.startswith(ancestor + PATH_SEPARATOR)


def common_path_prefix(paths: list[str]) -> str | None:
    """
    Longest common segment prefix of the given paths.

    Returns:
        The shared prefix path, or None when the paths share no root
    """
    if not paths:
        return None

    split = [path_segments(p) for p in paths]
    shared: list[str] = []
    for segments in zip(*split, strict=False):
        if any(s != segments[0] for s in segments):
            break
        shared.append(segments[0])

    return PATH_SEPARATOR.join(shared) if shared else None


def validate_path(path: str) -> bool:
    """True if the path is non-empty and has no empty segments."""
    return bool(path) and all(path_segments(path))
