"""Configuration tree primitives.

This package provides the node helpers, tree traversal drivers, content
hashing and path rendering that the optimistic lock merge is built on.
"""

from src.config_tree.errors import ConfigTreeError, MalformedNodeError
from src.config_tree.hashing import (
    HashCalculationFilter,
    calculate_hashes,
    canonical_json,
    node_hash,
)
from src.config_tree.nodes import (
    HASH_KEY,
    OLD_HASH_KEY,
    UUID_KEY,
    is_lock_protected,
    is_node,
    render_path,
    strip_keys,
    swap_contents,
)
from src.config_tree.traverser import (
    DualNodeFilter,
    NodeFilter,
    dual_traverse_nodes,
    traverse_node,
)

__all__ = [
    # Errors
    'ConfigTreeError',
    'MalformedNodeError',
    # Reserved keys
    'HASH_KEY',
    'OLD_HASH_KEY',
    'UUID_KEY',
    # Nodes
    'is_node',
    'is_lock_protected',
    'render_path',
    'strip_keys',
    'swap_contents',
    # Traversal
    'NodeFilter',
    'DualNodeFilter',
    'traverse_node',
    'dual_traverse_nodes',
    # Hashing
    'HashCalculationFilter',
    'calculate_hashes',
    'canonical_json',
    'node_hash',
]
