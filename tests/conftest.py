"""Root pytest configuration for all tests.

Provides a configuration tree shaped like a device configuration, with
lock-protected nodes at several levels, as a client would have read it.
"""

import copy
import logging

import pytest

from src.config_tree.hashing import calculate_hashes
from src.config_tree.nodes import HASH_KEY, UUID_KEY

# Keep library debug output out of test logs unless a test asks for it.
logging.getLogger("src").setLevel(logging.INFO)


@pytest.fixture
def baseline_tree():
    """Tree as the client read it: every locked node carries its current hash.

    Locked nodes: connection, each application entity, each entity's
    transferCapabilities, and extension.archive with its nested storage.
    The root and extension are not locked.
    """
    tree = {
        "deviceName": "archive",
        "connection": {
            HASH_KEY: None,
            "hostname": "localhost",
            "port": 104,
        },
        "appEntities": [
            {
                HASH_KEY: None,
                UUID_KEY: "ae-1",
                "aeTitle": "ARCHIVE",
                "transferCapabilities": {
                    HASH_KEY: None,
                    "sopClasses": ["1.2.840.10008.5.1.4.1.1.2"],
                },
            },
            {
                HASH_KEY: None,
                UUID_KEY: "ae-2",
                "aeTitle": "STORESCP",
                "transferCapabilities": {
                    HASH_KEY: None,
                    "sopClasses": [],
                },
            },
        ],
        "extension": {
            "archive": {
                HASH_KEY: None,
                "retentionDays": 30,
                "storage": {
                    HASH_KEY: None,
                    "path": "/var/archive",
                },
            },
        },
    }
    calculate_hashes(tree)
    return tree


@pytest.fixture
def backend_tree(baseline_tree):
    """Backend copy of the baseline; tests apply concurrent changes to it."""
    return copy.deepcopy(baseline_tree)


@pytest.fixture
def client_tree(baseline_tree):
    """Client copy of the baseline; tests apply client edits to it."""
    return copy.deepcopy(baseline_tree)
