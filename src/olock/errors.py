"""Typed exception hierarchy for optimistic lock merge errors.

This module defines all custom exceptions raised by the olock package.
All exceptions inherit from ConfigTreeError base class for easy catching and
include descriptive messages with context to help with debugging.
"""

from typing import Any, Optional

from src.config_tree.errors import ConfigTreeError


class OptimisticLockError(ConfigTreeError):
    """Base exception for all optimistic lock merge errors."""
    pass


class MergeConflictError(OptimisticLockError):
    """Raised when both the client and the backend changed a locked subtree.

    The whole merge is rejected. Both trees that took part in the walk may
    already hold swapped contents and must be discarded; the caller has to
    re-read the backend state and resubmit.

    Attributes:
        path: Rendered path of the conflicting node ("" for the root)
        client_hash: Hash of the client's current content
        backend_hash: Hash of the backend's current content
        baseline_hash: Hash the client observed when it read the node
    """

    def __init__(
        self,
        path: str,
        client_hash: Any,
        backend_hash: Any,
        baseline_hash: Any = None,
    ):
        node_description = f"'{path}' node" if path else "node"
        super().__init__(
            f"Cannot merge {node_description} because new hash '{client_hash}' "
            f"does not match old one '{backend_hash}' "
            f"(both changed since baseline '{baseline_hash}')."
        )
        self.path = path
        self.client_hash = client_hash
        self.backend_hash = backend_hash
        self.baseline_hash = baseline_hash


class MergeConfigError(OptimisticLockError):
    """Raised when merge configuration validation fails."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Merge configuration error in field '{config_field}': {message}"
        else:
            full_message = f"Merge configuration error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message


class MergeConfigFilesystemError(OptimisticLockError):
    """Raised when reading or writing a merge configuration file fails."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Merge config file {operation} failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason
