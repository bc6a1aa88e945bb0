"""Typed exception hierarchy for configuration tree errors.

This module defines the base exception of the project and the structural
errors raised when a tree violates the node contract. All exceptions inherit
from ConfigTreeError for easy catching and include descriptive messages with
context to help with debugging.
"""

from typing import Optional


class ConfigTreeError(Exception):
    """Base exception for all config-olock-merge errors.

    Use this to catch any application-level error raised by the library.
    """
    pass


class MalformedNodeError(ConfigTreeError):
    """Raised when a node does not satisfy the structure an operation needs.

    This signals a programming error in whoever built the tree (for example a
    lock-protected client node without a baseline hash), not a recoverable
    merge outcome.

    Attributes:
        path: Rendered path of the offending node ("" for the root)
        reason: What is wrong with the node
    """

    def __init__(self, reason: str, path: Optional[str] = None):
        if path:
            message = f"Malformed node '{path}': {reason}"
        else:
            message = f"Malformed node: {reason}"
        super().__init__(message)
        self.path = path or ""
        self.reason = reason
