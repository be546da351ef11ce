"""
Firestore document store.

Native adapter over the google-cloud-firestore async client. Documents are
written in "python" encode mode so timestamps are stored as Firestore
timestamps; snapshots come back as datetimes and decode directly.

Invariants:
    - Partial updates are validated against the full document before they
      are written
    - Nothing here writes outside the collection the registry binds a type to

How to change safely:
    - Test against the Firestore emulator (AMBIENT_DB_EMULATOR_HOST) first
"""

from __future__ import annotations

import builtins
import logging
import os
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

# Try to import the Firestore client, provide helpful message if not installed
try:
    from google.cloud import firestore

    FIRESTORE_AVAILABLE = True
except ImportError:
    FIRESTORE_AVAILABLE = False
    firestore = None


class FirestoreDocumentStore:
    """Firestore implementation of DocumentStore.

    Attributes:
        settings: ambient-db settings (project, database, emulator)

    Example:
        >>> store = FirestoreDocumentStore(Settings(project_id="ambient-prod"))
        >>> await store.connect()
        >>> await store.get(DbPackage, package_id)
    """

    def __init__(
        self,
        settings: Any = None,
        *,
        client: Any = None,
        registry: Optional[CollectionRegistry] = None,
    ) -> None:
        """Initialize Firestore store.

        Args:
            settings: Settings instance; ignored when client is given
            client: Pre-built async Firestore client
            registry: Collection registry (default: global registry)
        """
        self.settings = settings
        self._client = client
        self._owns_client = client is None
        self._registry = registry or get_registry()
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        """Create the Firestore client.

        Raises:
            StoreConnectionError: If google-cloud-firestore is not installed
        """
        if self._client is None:
            if not FIRESTORE_AVAILABLE:
                raise StoreConnectionError(
                    "google-cloud-firestore is not installed. "
                    "Install with: pip install 'ambient-db[firestore]'"
                )
            if self.settings is not None and self.settings.emulator_host:
                # The client library reads the emulator address from the
                # process environment; an address already set there wins.
                os.environ.setdefault("FIRESTORE_EMULATOR_HOST", self.settings.emulator_host)
            kwargs: dict[str, Any] = {}
            if self.settings is not None:
                kwargs["project"] = self.settings.project_id
                kwargs["database"] = self.settings.database
            self._client = firestore.AsyncClient(**kwargs)
        self._connected = True
        logger.info("Firestore store connected")

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None
        self._connected = False
        logger.debug("Firestore store closed")

    def _document(self, path: str, doc_id: str) -> Any:
        if not self._connected:
            raise StoreConnectionError("Not connected")
        return self._client.collection(path).document(doc_id)

    async def get(
        self,
        model: type[ModelT],
        doc_id: str,
        parent_id: Optional[str] = None,
    ) -> Optional[ModelT]:
        path = self._registry.collection_path(model, parent_id)
        snapshot = await self._document(path, doc_id).get()
        if not snapshot.exists:
            return None
        return decode_document(model, snapshot.to_dict())

    async def get_fragment(
        self,
        fragment: type[ModelT],
        collection: DbCollections,
        doc_id: str,
        parent_id: Optional[str] = None,
    ) -> Optional[ModelT]:
        path = self._registry.collection_path(collection, parent_id)
        snapshot = await self._document(path, doc_id).get(
            field_paths=list(fragment.model_fields)
        )
        if not snapshot.exists:
            return None
        return decode_document(fragment, snapshot.to_dict() or {})

    async def set(
        self,
        doc: BaseModel,
        doc_id: str,
        parent_id: Optional[str] = None,
    ) -> None:
        path = self._registry.collection_path(type(doc), parent_id)
        await self._document(path, doc_id).set(encode_document(doc, mode="python"))
        logger.debug("Set %s/%s", path, doc_id)

    async def update(
        self,
        model: type[ModelT],
        doc_id: str,
        fields: Mapping[str, Any],
        parent_id: Optional[str] = None,
    ) -> ModelT:
        check_update_fields(model, fields)
        path = self._registry.collection_path(model, parent_id)
        ref = self._document(path, doc_id)
        snapshot = await ref.get()
        if not snapshot.exists:
            raise DocumentNotFoundError(f"{path}/{doc_id}")

        merged = snapshot.to_dict()
        merged.update(fields)
        updated = decode_document(model, merged)
        encoded = encode_document(updated, mode="python")
        await ref.update({name: encoded[name] for name in fields})
        logger.debug("Updated %s/%s fields=%s", path, doc_id, sorted(fields))
        return updated

    async def delete(
        self,
        model: type[BaseModel],
        doc_id: str,
        parent_id: Optional[str] = None,
    ) -> None:
        path = self._registry.collection_path(model, parent_id)
        await self._document(path, doc_id).delete()

    async def list(
        self,
        model: type[ModelT],
        parent_id: Optional[str] = None,
    ) -> builtins.list[tuple[str, ModelT]]:
        if not self._connected:
            raise StoreConnectionError("Not connected")
        path = self._registry.collection_path(model, parent_id)
        items = []
        async for snapshot in self._client.collection(path).stream():
            items.append((snapshot.id, decode_document(model, snapshot.to_dict())))
        return sorted(items, key=lambda item: item[0])
