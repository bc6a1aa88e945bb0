"""Data models for the optimistic lock merge.

This module defines the data structures shared by the merge filter, the node
merger and the configuration loader.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from src.config_tree.nodes import HASH_KEY, OLD_HASH_KEY, UUID_KEY


class LockResolution(Enum):
    """Outcome of the three-way hash comparison at a lock-protected node."""

    ADOPT_BACKEND = "adopt_backend"  # Client did not edit the node
    KEEP_CLIENT = "keep_client"  # Client edited, backend unchanged since baseline
    CONFLICT = "conflict"  # Both sides diverged from the baseline


@dataclass
class LockDecision:
    """Decision taken at one lock-protected node during a merge.

    Attributes:
        path: Rendered path of the node ("" for the root)
        resolution: Which side's content the merged node holds
        swapped: Whether node contents were exchanged to apply the decision
    """

    path: str
    resolution: LockResolution
    swapped: bool


@dataclass
class MergeResult:
    """Result of a successful optimistic lock merge.

    Attributes:
        merged_node: Root of the merged tree, ready to be persisted
        decisions: One LockDecision per lock-protected node, in walk order
    """

    merged_node: Dict[str, Any]
    decisions: List[LockDecision] = field(default_factory=list)

    @property
    def adopted_backend_paths(self) -> List[str]:
        """Paths of locked nodes whose content comes from the backend."""
        return [
            d.path for d in self.decisions
            if d.resolution is LockResolution.ADOPT_BACKEND
        ]

    @property
    def kept_client_paths(self) -> List[str]:
        """Paths of locked nodes whose content comes from the client."""
        return [
            d.path for d in self.decisions
            if d.resolution is LockResolution.KEEP_CLIENT
        ]


@dataclass
class MergeConfig:
    """Options of the optimistic lock node merger.

    Attributes:
        hash_key: Reserved key holding a node's current content hash
        old_hash_key: Reserved key holding the client's baseline hash
        uuid_key: Key pairing list elements by identity during the walk
        copy_inputs: Merge deep copies and leave the caller's trees untouched
        recalculate_hashes: Recompute hashes on the merged tree
    """

    hash_key: str = HASH_KEY
    old_hash_key: str = OLD_HASH_KEY
    uuid_key: str = UUID_KEY
    copy_inputs: bool = True
    recalculate_hashes: bool = True
