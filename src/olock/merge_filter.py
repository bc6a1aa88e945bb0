"""Hash-based optimistic locking merge of two configuration trees.

This module provides the OptimisticLockMergeFilter, a DualNodeFilter that is
driven over a backend tree (current persisted state) and a client tree
(baseline plus client edits, annotated with baseline hashes). At every
lock-protected node it compares the client's current hash, the client's
baseline hash and the backend's current hash, and either keeps the client's
content, adopts the backend's content, or aborts with a MergeConflictError.

After a successful walk the client tree holds the merged result. Both trees
are modified: adopting the backend's content exchanges the contents of the
two nodes, so below such a node the physical "backend" node holds the client's
content and the other way round. The mode stack records which of the two
situations the walk is in.
"""

import logging
from typing import Any, Dict, List

from src.config_tree.errors import MalformedNodeError
from src.config_tree.nodes import (
    HASH_KEY,
    OLD_HASH_KEY,
    is_lock_protected,
    render_path,
    swap_contents,
)
from src.config_tree.traverser import DualNodeFilter
from src.olock.errors import MergeConflictError
from src.olock.models import LockDecision, LockResolution

logger = logging.getLogger(__name__)


def resolve_lock(client_now: Any, client_baseline: Any, backend_now: Any) -> LockResolution:
    """Classify a lock-protected node by three-way hash comparison.

    Args:
        client_now: Hash of the client's current content
        client_baseline: Hash the client observed when it read the node
        backend_now: Hash of the backend's current content

    Returns:
        ADOPT_BACKEND if the client did not edit the node, KEEP_CLIENT if
        only the client did, CONFLICT if both sides left the baseline
    """
    if client_baseline == client_now:
        return LockResolution.ADOPT_BACKEND
    if client_baseline == backend_now:
        return LockResolution.KEEP_CLIENT
    return LockResolution.CONFLICT


class OptimisticLockMergeFilter(DualNodeFilter):
    """Merges a client tree into a backend tree under optimistic locking.

    Use one instance per merge: the mode stack, the path and the recorded
    decisions belong to a single walk. The first node of every callback pair
    is the backend node, the second one the client node.

    Example:
        >>> merge_filter = OptimisticLockMergeFilter()
        >>> dual_traverse_nodes(backend, client, merge_filter)
        >>> # client now holds the merged tree

    Attributes:
        hash_key: Reserved key holding a node's current content hash
        old_hash_key: Reserved key holding the client's baseline hash
        decisions: LockDecision per lock-protected node visited so far
    """

    def __init__(self, hash_key: str = HASH_KEY, old_hash_key: str = OLD_HASH_KEY):
        self.hash_key = hash_key
        self.old_hash_key = old_hash_key
        self.decisions: List[LockDecision] = []

        self._path: List[str] = []

        # True: backend content is authoritative for the current subtree and
        # sits in the client slot. False: client content is authoritative.
        self._is_merging: List[bool] = [False]

    @property
    def depth(self) -> int:
        """Number of frames on the mode stack (1 outside of any node)."""
        return len(self._is_merging)

    @property
    def is_merging(self) -> bool:
        """Mode of the innermost node being visited."""
        return self._is_merging[-1]

    @property
    def current_path(self) -> str:
        """Rendered path of the location currently visited."""
        return render_path(self._path)

    def before_node(self, backend_node: Dict[str, Any], client_node: Dict[str, Any]) -> None:
        if not is_lock_protected(client_node, self.hash_key):
            # not locked, inherit the parent's mode
            self._is_merging.append(self._is_merging[-1])
            return

        if self._is_merging[-1]:
            self._merge_node(backend_node, client_node)
        else:
            self._scan_node(backend_node, client_node)

    def after_node(self, backend_node: Dict[str, Any], client_node: Dict[str, Any]) -> None:
        if len(self._is_merging) <= 1:
            raise RuntimeError("after_node() called without a matching before_node()")
        self._is_merging.pop()

    def before_node_property(self, key: str) -> None:
        self._path.append(key)

    def after_node_property(self, key: str) -> None:
        self._path.pop()

    def before_list_element(self, backend_index: int, client_index: int) -> None:
        # show the index of the list that currently holds the client's content
        if self._is_merging[-1]:
            self._path.append(str(backend_index))
        else:
            self._path.append(str(client_index))

    def after_list_element(self, backend_index: int, client_index: int) -> None:
        self._path.pop()

    def _scan_node(self, backend_node: Dict[str, Any], client_node: Dict[str, Any]) -> None:
        """Apply the lock check while client content sits in the client slot."""
        resolution = self._resolve(actual_client=client_node, actual_backend=backend_node)

        if resolution is LockResolution.ADOPT_BACKEND:
            # client did not touch this node, take the backend's version and
            # keep merging from the backend below it
            self._is_merging.append(True)
            swap_contents(backend_node, client_node)
            self._record(resolution, swapped=True)
        else:
            self._is_merging.append(False)
            self._record(resolution, swapped=False)

    def _merge_node(self, backend_node: Dict[str, Any], client_node: Dict[str, Any]) -> None:
        """Apply the lock check below a node whose contents were swapped.

        An ancestor swap left the client's content in the physical backend
        node and the backend's content in the physical client node.
        """
        actual_client = backend_node
        actual_backend = client_node

        resolution = self._resolve(actual_client=actual_client, actual_backend=actual_backend)

        if resolution is LockResolution.ADOPT_BACKEND:
            self._is_merging.append(True)
            self._record(resolution, swapped=False)
        else:
            # client edit nested inside a backend-dominated subtree, bring the
            # client's content back into the client slot
            self._is_merging.append(False)
            swap_contents(actual_backend, actual_client)
            self._record(resolution, swapped=True)

    def _resolve(
        self,
        actual_client: Dict[str, Any],
        actual_backend: Dict[str, Any],
    ) -> LockResolution:
        """Run the three-way comparison, raising on conflict.

        Raises:
            MalformedNodeError: If the client side has no baseline hash
            MergeConflictError: If client and backend both changed the node
        """
        if self.old_hash_key not in actual_client:
            raise MalformedNodeError(
                f"lock-protected node has no baseline hash '{self.old_hash_key}'",
                self.current_path,
            )

        client_now = actual_client.get(self.hash_key)
        client_baseline = actual_client[self.old_hash_key]
        backend_now = actual_backend.get(self.hash_key)

        resolution = resolve_lock(client_now, client_baseline, backend_now)

        if resolution is LockResolution.CONFLICT:
            raise MergeConflictError(
                path=self.current_path,
                client_hash=client_now,
                backend_hash=backend_now,
                baseline_hash=client_baseline,
            )

        return resolution

    def _record(self, resolution: LockResolution, swapped: bool) -> None:
        path = self.current_path
        self.decisions.append(LockDecision(path=path, resolution=resolution, swapped=swapped))
        logger.debug(
            f"Lock at '{path or '/'}': {resolution.value}"
            f"{' (swapped)' if swapped else ''}, merging={self._is_merging[-1]}"
        )
