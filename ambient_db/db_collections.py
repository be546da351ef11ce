"""
Named collections of the Ambient document database.

Each member's value is the wire-visible collection name used by the
external database client. Which document type lives in which collection is
recorded in the registry (see registry.py), not here.

Invariants:
    - Collection names are snake_case and never change once documents exist
    - Adding a collection is safe; renaming or removing one is not
"""

from __future__ import annotations

from enum import Enum


class DbCollections(str, Enum):
    """Top-level and child collections."""

    PACKAGES = "packages"
    PROFILES = "profiles"
    API_KEYS = "api_keys"
    DEPLOYMENTS = "deployments"
    SERVERS = "servers"
    SERVER_LOGS = "server_logs"
    RUNNING_SERVERS = "running_servers"
    SHARDED_SERVERS = "sharded_servers"
    UPVOTES = "upvotes"
    ACTIVITIES = "activities"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_str(cls, value: str) -> DbCollections:
        """Parse a wire collection name.

        Raises:
            ValueError: If value is not a known collection name
        """
        for collection in cls:
            if collection.value == value:
                return collection
        valid = [c.value for c in cls]
        raise ValueError(f"Invalid collection '{value}'. Valid collections: {valid}")

    def collection_path(self) -> str:
        """Path of the collection itself."""
        return self.value

    def doc_path(self, doc_id: str) -> str:
        """Path of a document in this collection."""
        if not doc_id:
            raise ValueError("Document id cannot be empty")
        return f"{self.value}/{doc_id}"
