"""
Collection registry for ambient-db.

This module binds each document type to exactly one collection:
- Registering document types against collections
- Lookup in both directions (type -> collection, collection -> type)
- Building collection and document paths, including child collections
- Schema fingerprinting

The default registry is populated with every document type and frozen on
first use.

Invariants:
    - A type is bound to exactly one collection and a collection holds
      exactly one type
    - A child collection's parent is bound before the child
    - Bindings never change after freeze()

Example:
    >>> from ambient_db.registry import get_registry
    >>> get_registry().collection_for(DbRunningServer)
    <DbCollections.RUNNING_SERVERS: 'running_servers'>
"""

from __future__ import annotations

import hashlib
import json
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import BaseModel

from .db_collections import DbCollections
from .errors import UnboundCollectionError
from .models import (
    DbActivity,
    DbApiKey,
    DbDeployment,
    DbPackage,
    DbProfile,
    DbRunningServer,
    DbServer,
    DbServerLog,
    DbShardedServer,
    DbUpvote,
)

# Global registry
_global_registry: CollectionRegistry | None = None
_registry_lock = threading.Lock()


class RegistryFrozenError(Exception):
    """Registry is frozen and cannot be modified."""

    pass


class DuplicateRegistrationError(Exception):
    """Type or collection is already bound."""

    pass


@dataclass(frozen=True)
class CollectionBinding:
    """A document type bound to its collection.

    Attributes:
        collection: Collection the documents live in
        model: Document type
        parent: Parent collection for child collections
    """

    collection: DbCollections
    model: type[BaseModel]
    parent: Optional[DbCollections] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {
            "collection": self.collection.value,
            "type": self.model.__name__,
            "schema": self.model.model_json_schema(),
        }
        if self.parent is not None:
            result["parent"] = self.parent.value
        return result


class CollectionRegistry:
    """Static table of document type to collection bindings.

    Example:
        >>> registry = CollectionRegistry()
        >>> registry.register(DbServer, DbCollections.SERVERS)
        >>> registry.register(DbServerLog, DbCollections.SERVER_LOGS, parent=DbCollections.SERVERS)
        >>> registry.freeze()
    """

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._by_model: dict[type[BaseModel], CollectionBinding] = {}
        self._by_collection: dict[DbCollections, CollectionBinding] = {}
        self._frozen = False
        self._fingerprint: str | None = None
        self._lock = threading.Lock()

    @property
    def frozen(self) -> bool:
        """Whether registry is frozen."""
        return self._frozen

    @property
    def fingerprint(self) -> str | None:
        """Schema fingerprint (available after freeze)."""
        return self._fingerprint

    def register(
        self,
        model: type[BaseModel],
        collection: DbCollections,
        parent: Optional[DbCollections] = None,
    ) -> None:
        """Bind a document type to a collection.

        Args:
            model: Document type
            collection: Collection its documents live in
            parent: Parent collection, for child collections

        Raises:
            RegistryFrozenError: If registry is frozen
            DuplicateRegistrationError: If the type or collection is already bound
            UnboundCollectionError: If parent is given but not bound
        """
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError("Cannot register: registry is frozen")

            if model in self._by_model:
                existing = self._by_model[model]
                raise DuplicateRegistrationError(
                    f"type {model.__name__} already bound to '{existing.collection.value}'"
                )
            if collection in self._by_collection:
                existing = self._by_collection[collection]
                raise DuplicateRegistrationError(
                    f"collection '{collection.value}' already holds {existing.model.__name__}"
                )
            if parent is not None and parent not in self._by_collection:
                raise UnboundCollectionError(
                    f"parent collection '{parent.value}' is not bound", target=parent.value
                )

            binding = CollectionBinding(collection=collection, model=model, parent=parent)
            self._by_model[model] = binding
            self._by_collection[collection] = binding

    def binding(self, target: Union[type[BaseModel], DbCollections]) -> CollectionBinding:
        """Get the binding of a document type or collection.

        Raises:
            UnboundCollectionError: If nothing is bound
        """
        if isinstance(target, DbCollections):
            binding = self._by_collection.get(target)
            name = target.value
        else:
            binding = self._by_model.get(target)
            name = target.__name__
        if binding is None:
            raise UnboundCollectionError(f"No collection binding for {name}", target=name)
        return binding

    def collection_for(self, model: type[BaseModel]) -> DbCollections:
        """Collection a document type is stored in."""
        return self.binding(model).collection

    def model_for(self, collection: DbCollections) -> type[BaseModel]:
        """Document type stored in a collection."""
        return self.binding(collection).model

    def is_bound(self, target: Union[type[BaseModel], DbCollections]) -> bool:
        if isinstance(target, DbCollections):
            return target in self._by_collection
        return target in self._by_model

    def collection_path(
        self,
        target: Union[type[BaseModel], DbCollections],
        parent_id: Optional[str] = None,
    ) -> str:
        """Path of the collection holding target.

        Child collections need the id of their parent document;
        top-level collections must not be given one.

        Raises:
            ValueError: If parent_id is missing for a child collection or
                given for a top-level one
        """
        binding = self.binding(target)
        if binding.parent is None:
            if parent_id is not None:
                raise ValueError(
                    f"'{binding.collection.value}' is a top-level collection, got parent_id"
                )
            return binding.collection.collection_path()
        if not parent_id:
            raise ValueError(
                f"'{binding.collection.value}' is a child of '{binding.parent.value}', "
                "parent_id is required"
            )
        parent_path = self.collection_path(binding.parent)
        return f"{parent_path}/{parent_id}/{binding.collection.value}"

    def document_path(
        self,
        target: Union[type[BaseModel], DbCollections],
        doc_id: str,
        parent_id: Optional[str] = None,
    ) -> str:
        """Path of a document of target."""
        if not doc_id:
            raise ValueError("Document id cannot be empty")
        return f"{self.collection_path(target, parent_id)}/{doc_id}"

    def bindings(self) -> Iterator[CollectionBinding]:
        """Iterate over all bindings in registration order."""
        yield from self._by_collection.values()

    def freeze(self) -> str:
        """Freeze registry and compute fingerprint.

        Returns:
            Schema fingerprint

        Raises:
            RegistryFrozenError: If already frozen
        """
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError("Registry is already frozen")

            self._fingerprint = self._compute_fingerprint()
            self._frozen = True
            return self._fingerprint

    def _compute_fingerprint(self) -> str:
        """Compute SHA-256 fingerprint."""
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        hash_bytes = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
        return f"sha256:{hash_bytes}"

    def to_dict(self) -> dict:
        """Convert to dictionary, sorted by collection name."""
        return {
            "collections": [
                self._by_collection[c].to_dict()
                for c in sorted(self._by_collection, key=lambda c: c.value)
            ],
        }

    def to_json(self, indent: int | None = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)


def build_default_registry() -> CollectionRegistry:
    """Registry with every Ambient document type bound. Not frozen."""
    registry = CollectionRegistry()
    registry.register(DbPackage, DbCollections.PACKAGES)
    registry.register(DbProfile, DbCollections.PROFILES)
    registry.register(DbApiKey, DbCollections.API_KEYS)
    registry.register(DbDeployment, DbCollections.DEPLOYMENTS)
    registry.register(DbServer, DbCollections.SERVERS)
    registry.register(DbServerLog, DbCollections.SERVER_LOGS, parent=DbCollections.SERVERS)
    registry.register(DbRunningServer, DbCollections.RUNNING_SERVERS)
    registry.register(
        DbShardedServer, DbCollections.SHARDED_SERVERS, parent=DbCollections.RUNNING_SERVERS
    )
    registry.register(DbUpvote, DbCollections.UPVOTES)
    registry.register(DbActivity, DbCollections.ACTIVITIES)
    return registry


def get_registry() -> CollectionRegistry:
    """Get the global registry, building and freezing it on first use."""
    global _global_registry
    with _registry_lock:
        if _global_registry is None:
            registry = build_default_registry()
            registry.freeze()
            _global_registry = registry
        return _global_registry


def reset_registry() -> None:
    """Reset the global registry (for testing only)."""
    global _global_registry
    with _registry_lock:
        _global_registry = None
