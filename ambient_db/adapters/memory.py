"""
In-memory document store for testing.

This module provides a process-local DocumentStore for:
- Unit and integration tests
- Local development without a Firestore project

Documents are kept in their JSON wire form, so every write and read goes
through the same encode/decode path as a real backend.

Invariants:
    - All data is lost on process exit
    - Safe to use from multiple coroutines
"""

from __future__ import annotations

import asyncio
import builtins
import logging
from collections import defaultdict
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel

from ..codec import decode_document, encode_document
from ..db_collections import DbCollections
from ..registry import CollectionRegistry, get_registry
from .base import (
    DocumentNotFoundError,
    ModelT,
    StoreConnectionError,
    check_update_fields,
)

logger = logging.getLogger(__name__)


class InMemoryDocumentStore:
    """In-memory implementation of DocumentStore.

    Example:
        >>> store = InMemoryDocumentStore()
        >>> await store.connect()
        >>> await store.set(profile, "user1")
        >>> await store.get(DbProfile, "user1")
    """

    def __init__(self, registry: Optional[CollectionRegistry] = None) -> None:
        self._registry = registry or get_registry()
        self._collections: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self._connected = False
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        """Whether connected (always true after connect())."""
        return self._connected

    async def connect(self) -> None:
        """Connect (no-op for in-memory)."""
        self._connected = True
        logger.debug("InMemoryDocumentStore connected")

    async def close(self) -> None:
        """Close and clear all data."""
        self._connected = False
        self._collections.clear()
        logger.debug("InMemoryDocumentStore closed")

    def _check_connected(self) -> None:
        if not self._connected:
            raise StoreConnectionError("Not connected")

    async def get(
        self,
        model: type[ModelT],
        doc_id: str,
        parent_id: Optional[str] = None,
    ) -> Optional[ModelT]:
        self._check_connected()
        path = self._registry.collection_path(model, parent_id)
        async with self._lock:
            raw = self._collections[path].get(doc_id)
        if raw is None:
            return None
        return decode_document(model, raw)

    async def get_fragment(
        self,
        fragment: type[ModelT],
        collection: DbCollections,
        doc_id: str,
        parent_id: Optional[str] = None,
    ) -> Optional[ModelT]:
        self._check_connected()
        path = self._registry.collection_path(collection, parent_id)
        async with self._lock:
            raw = self._collections[path].get(doc_id)
        if raw is None:
            return None
        return decode_document(fragment, raw)

    async def set(
        self,
        doc: BaseModel,
        doc_id: str,
        parent_id: Optional[str] = None,
    ) -> None:
        self._check_connected()
        path = self._registry.collection_path(type(doc), parent_id)
        raw = encode_document(doc, mode="json")
        async with self._lock:
            self._collections[path][doc_id] = raw
        logger.debug("Set %s/%s", path, doc_id)

    async def update(
        self,
        model: type[ModelT],
        doc_id: str,
        fields: Mapping[str, Any],
        parent_id: Optional[str] = None,
    ) -> ModelT:
        self._check_connected()
        check_update_fields(model, fields)
        path = self._registry.collection_path(model, parent_id)
        async with self._lock:
            raw = self._collections[path].get(doc_id)
            if raw is None:
                raise DocumentNotFoundError(f"{path}/{doc_id}")
            merged = dict(raw)
            merged.update(fields)
            updated = decode_document(model, merged)
            self._collections[path][doc_id] = encode_document(updated, mode="json")
        logger.debug("Updated %s/%s fields=%s", path, doc_id, sorted(fields))
        return updated

    async def delete(
        self,
        model: type[BaseModel],
        doc_id: str,
        parent_id: Optional[str] = None,
    ) -> None:
        self._check_connected()
        path = self._registry.collection_path(model, parent_id)
        async with self._lock:
            self._collections[path].pop(doc_id, None)

    async def list(
        self,
        model: type[ModelT],
        parent_id: Optional[str] = None,
    ) -> builtins.list[tuple[str, ModelT]]:
        self._check_connected()
        path = self._registry.collection_path(model, parent_id)
        async with self._lock:
            items = sorted(self._collections[path].items())
        return [(doc_id, decode_document(model, raw)) for doc_id, raw in items]

    # Testing helpers

    def raw(self, path: str, doc_id: str) -> Optional[dict[str, Any]]:
        """Stored wire form of a document, bypassing decoding."""
        return self._collections.get(path, {}).get(doc_id)

    def put_raw(self, path: str, doc_id: str, data: Mapping[str, Any]) -> None:
        """Store a document as-is, e.g. one written by an older schema version."""
        self._collections[path][doc_id] = dict(data)
