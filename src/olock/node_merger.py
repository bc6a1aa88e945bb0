"""Optimistic lock merge of a client configuration tree into the backend one.

This module provides the OptimisticLockNodeMerger, which prepares the hash
annotations of both trees, runs the OptimisticLockMergeFilter over them and
cleans up the merged result so it can be persisted.
"""

import copy
import logging
from typing import Any, Dict, Optional

from src.config_tree.hashing import calculate_hashes
from src.config_tree.nodes import strip_keys
from src.config_tree.traverser import NodeFilter, dual_traverse_nodes, traverse_node
from src.olock.errors import MergeConflictError
from src.olock.merge_filter import OptimisticLockMergeFilter
from src.olock.models import MergeConfig, MergeResult

logger = logging.getLogger(__name__)


class _StripKeysFilter(NodeFilter):
    """Removes the given keys from every node of a tree."""

    def __init__(self, *keys: str):
        self.keys = keys

    def before_node(self, node: Dict[str, Any]) -> None:
        strip_keys(node, self.keys)


class OptimisticLockNodeMerger:
    """Merges client edits into the backend tree with hash-based locking.

    The client tree is expected to be the tree a client read earlier, with the
    hash annotations it received still in place, plus the client's edits. The
    backend tree is the current persisted state. Lock-protected nodes are the
    nodes carrying the hash key.

    Conflicts are detected per lock-protected node. Non-conflicting changes
    from both sides are preserved: a locked node the client did not edit takes
    the backend's content, a locked node only the client edited keeps the
    client's content.

    Example:
        >>> merger = OptimisticLockNodeMerger()
        >>> result = merger.merge(backend_tree, client_tree)
        >>> store.save(result.merged_node)
    """

    def __init__(self, config: Optional[MergeConfig] = None):
        """Initialize node merger.

        Args:
            config: Merge options (defaults to MergeConfig())
        """
        self.config = config or MergeConfig()

    def merge(self, backend_node: Dict[str, Any], client_node: Dict[str, Any]) -> MergeResult:
        """Merge client_node into backend_node.

        With config.copy_inputs (the default) both trees are deep-copied first
        and the caller's trees are left untouched. Otherwise both trees are
        modified in place and client_node becomes the merged tree; after a
        conflict neither tree may be reused.

        Args:
            backend_node: Current persisted tree
            client_node: Baseline read by the client plus the client's edits

        Returns:
            MergeResult with the merged tree and the per-lock decisions

        Raises:
            MergeConflictError: If a locked node was changed on both sides
            MalformedNodeError: If a locked client node has no baseline hash
        """
        config = self.config

        if config.copy_inputs:
            backend_node = copy.deepcopy(backend_node)
            client_node = copy.deepcopy(client_node)

        # backend hashes describe what is persisted now
        backend_locks = calculate_hashes(
            backend_node, config.hash_key, config.old_hash_key,
            uuid_key=config.uuid_key,
        )
        # the hash the client read becomes its baseline
        client_locks = calculate_hashes(
            client_node, config.hash_key, config.old_hash_key,
            keep_baseline=True, uuid_key=config.uuid_key,
        )
        logger.info(
            f"Starting optimistic lock merge: {backend_locks} backend locks, "
            f"{client_locks} client locks"
        )

        merge_filter = OptimisticLockMergeFilter(config.hash_key, config.old_hash_key)
        try:
            dual_traverse_nodes(backend_node, client_node, merge_filter, config.uuid_key)
        except MergeConflictError as e:
            logger.warning(f"Optimistic lock merge rejected: {e}")
            raise

        traverse_node(client_node, _StripKeysFilter(config.old_hash_key))
        if config.recalculate_hashes:
            calculate_hashes(
                client_node, config.hash_key, config.old_hash_key,
                uuid_key=config.uuid_key,
            )

        result = MergeResult(merged_node=client_node, decisions=merge_filter.decisions)
        logger.info(
            f"Optimistic lock merge complete: "
            f"{len(result.kept_client_paths)} kept from client, "
            f"{len(result.adopted_backend_paths)} adopted from backend"
        )
        return result
