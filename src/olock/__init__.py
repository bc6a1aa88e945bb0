"""Hash-based optimistic locking for configuration trees.

This package detects conflicting concurrent changes to lock-protected
subtrees of a configuration tree and merges all non-conflicting changes of a
client tree and the backend tree into a single result.
"""

from src.olock.config_loader import MergeConfigLoader
from src.olock.errors import (
    MergeConfigError,
    MergeConfigFilesystemError,
    MergeConflictError,
    OptimisticLockError,
)
from src.olock.merge_filter import OptimisticLockMergeFilter, resolve_lock
from src.olock.models import LockDecision, LockResolution, MergeConfig, MergeResult
from src.olock.node_merger import OptimisticLockNodeMerger

__all__ = [
    # Errors
    'OptimisticLockError',
    'MergeConflictError',
    'MergeConfigError',
    'MergeConfigFilesystemError',
    # Components
    'OptimisticLockMergeFilter',
    'OptimisticLockNodeMerger',
    'MergeConfigLoader',
    'resolve_lock',
    # Models
    'LockDecision',
    'LockResolution',
    'MergeConfig',
    'MergeResult',
]
