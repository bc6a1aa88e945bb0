"""Node helpers for tree-shaped configuration data.

A configuration node is a plain dict mapping string keys to scalars, nested
nodes, or lists of nodes/scalars. This module holds the reserved key names,
the in-place content swap used by the optimistic lock merge, and the path
renderer used in diagnostics.
"""

from typing import Any, Dict, Iterable, Union

# Content hash of the node as currently held in this copy of the tree
HASH_KEY = "_.hash"

# Hash the client observed when it originally read the node (client side only)
OLD_HASH_KEY = "_.old_hash"

# Stable identity of a node inside a list, used to pair list elements
UUID_KEY = "_.uuid"

PathSegment = Union[str, int]


def is_node(value: Any) -> bool:
    """Return True if value is a configuration node (a dict)."""
    return isinstance(value, dict)


def is_lock_protected(node: Dict[str, Any], hash_key: str = HASH_KEY) -> bool:
    """Return True if node carries a content hash and is subject to locking."""
    return hash_key in node


def swap_contents(node_a: Dict[str, Any], node_b: Dict[str, Any]) -> None:
    """Exchange the full contents of two nodes in place.

    After the call node_a holds exactly what node_b held and vice versa,
    reserved hash keys included. Object identity of both dicts is preserved,
    so parents referencing them see the new contents.

    Args:
        node_a: First node
        node_b: Second node
    """
    if node_a is node_b:
        return

    tmp = dict(node_a)

    node_a.clear()
    node_a.update(node_b)

    node_b.clear()
    node_b.update(tmp)


def strip_keys(node: Dict[str, Any], keys: Iterable[str]) -> None:
    """Remove the given keys from node (not recursive), ignoring missing ones."""
    for key in keys:
        node.pop(key, None)


def _escape_segment(segment: PathSegment) -> str:
    # '~' first so the '~' introduced for '/' is not escaped again
    return str(segment).replace("~", "~0").replace("/", "~1")


def render_path(segments: Iterable[PathSegment]) -> str:
    """Render path segments (outermost first) as a human readable string.

    Segments are joined with '/'. A '~' inside a segment is written as '~0'
    and a '/' as '~1' so that the rendered path stays unambiguous.

    Example:
        >>> render_path(["devices", "0", "ae/title"])
        'devices/0/ae~1title'

    Args:
        segments: Property keys and list indices, outermost first

    Returns:
        Rendered path, empty string for the root
    """
    return "/".join(_escape_segment(segment) for segment in segments)
