"""Content hashing for lock-protected configuration nodes.

A node's hash is the SHA-256 of its canonical JSON form with the reserved
hash keys removed. Nested lock-protected nodes are replaced by a placeholder
that keeps only their identity (the uuid key), so an edit inside a nested
lock never changes the hash of the enclosing lock. Changing which nested
locks a node holds, or their order in a list, does.
"""

import hashlib
import json
import logging
from typing import Any, Dict

from .nodes import HASH_KEY, OLD_HASH_KEY, UUID_KEY, is_node
from .traverser import NodeFilter, traverse_node

logger = logging.getLogger(__name__)

# Key of the identity placeholder standing in for a nested lock-protected node
LOCKED_NODE_PLACEHOLDER = "<olocked>"


def canonical_json(data: Any) -> bytes:
    """Serialize data to canonical JSON bytes.

    Uses sorted keys, compact separators and UTF-8 encoding so that the same
    content always produces the same bytes regardless of key order. Values
    that are not JSON types are written via str().
    """
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    ).encode("utf-8")


def _hash_input(
    value: Any,
    hash_key: str,
    old_hash_key: str,
    uuid_key: str,
    top_level: bool = False,
) -> Any:
    if is_node(value):
        if not top_level and hash_key in value:
            return {LOCKED_NODE_PLACEHOLDER: value.get(uuid_key)}
        return {
            k: _hash_input(v, hash_key, old_hash_key, uuid_key)
            for k, v in value.items()
            if k not in (hash_key, old_hash_key)
        }
    if isinstance(value, list):
        return [
            _hash_input(element, hash_key, old_hash_key, uuid_key)
            for element in value
        ]
    return value


def node_hash(
    node: Dict[str, Any],
    hash_key: str = HASH_KEY,
    old_hash_key: str = OLD_HASH_KEY,
    uuid_key: str = UUID_KEY,
) -> str:
    """Compute the optimistic lock hash of a node.

    Args:
        node: Node to hash
        hash_key: Reserved key holding the current hash
        old_hash_key: Reserved key holding the baseline hash
        uuid_key: Key identifying nested lock-protected nodes

    Returns:
        Hex digest of SHA-256 hash
    """
    payload = _hash_input(node, hash_key, old_hash_key, uuid_key, top_level=True)
    return hashlib.sha256(canonical_json(payload)).hexdigest()


class HashCalculationFilter(NodeFilter):
    """Recomputes the hash of every lock-protected node of a tree.

    With keep_baseline set, the hash a node carries before recalculation is
    first moved to the baseline key, unless the node already has a baseline.
    This is how a client tree is prepared for a merge: the hash it read
    becomes the baseline and the current hash reflects its edits.

    Attributes:
        hash_key: Reserved key holding the current hash
        old_hash_key: Reserved key holding the baseline hash
        keep_baseline: Whether to move the existing hash to the baseline key
        uuid_key: Key identifying nested lock-protected nodes
        calculated: Number of nodes whose hash was recomputed
    """

    def __init__(
        self,
        hash_key: str = HASH_KEY,
        old_hash_key: str = OLD_HASH_KEY,
        keep_baseline: bool = False,
        uuid_key: str = UUID_KEY,
    ):
        self.hash_key = hash_key
        self.old_hash_key = old_hash_key
        self.keep_baseline = keep_baseline
        self.uuid_key = uuid_key
        self.calculated = 0

    def before_node(self, node: Dict[str, Any]) -> None:
        if self.hash_key not in node:
            return

        if self.keep_baseline and self.old_hash_key not in node:
            node[self.old_hash_key] = node[self.hash_key]

        node[self.hash_key] = node_hash(
            node, self.hash_key, self.old_hash_key, self.uuid_key
        )
        self.calculated += 1


def calculate_hashes(
    tree: Dict[str, Any],
    hash_key: str = HASH_KEY,
    old_hash_key: str = OLD_HASH_KEY,
    keep_baseline: bool = False,
    uuid_key: str = UUID_KEY,
) -> int:
    """Recompute the hash of every lock-protected node of a tree in place.

    Args:
        tree: Root of the tree
        hash_key: Reserved key holding the current hash
        old_hash_key: Reserved key holding the baseline hash
        keep_baseline: Move the existing hash to old_hash_key first
        uuid_key: Key identifying nested lock-protected nodes

    Returns:
        Number of lock-protected nodes found
    """
    hash_filter = HashCalculationFilter(
        hash_key, old_hash_key, keep_baseline, uuid_key
    )
    traverse_node(tree, hash_filter)
    logger.debug(f"Calculated {hash_filter.calculated} optimistic lock hashes")
    return hash_filter.calculated
