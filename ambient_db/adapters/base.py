"""
Base protocol and errors for document store adapters.

The document models are one canonical schema; each storage backend gets
its own adapter implementing the DocumentStore protocol. Adapters are
selected by configuration (create_document_store), never by branching
inside the schema.

Invariants:
    - The collection of a document is always taken from the registry, so a
      type cannot be written to the wrong collection
    - Every read goes through decode_document, so legacy fields are
      migrated and defaults filled in
    - Adapters never validate server state transitions

How to change safely:
    - Protocol changes require updating all implementations
    - Keep InMemoryDocumentStore behaviour identical to the production
      backend for everything tests rely on
"""

from __future__ import annotations

import builtins
from abc import abstractmethod
from collections.abc import Mapping
from typing import (
    TYPE_CHECKING,
    Any,
    Optional,
    Protocol,
    TypeVar,
    runtime_checkable,
)

from pydantic import BaseModel

from ..db_collections import DbCollections
from ..errors import AmbientDbError, UnknownFieldError

if TYPE_CHECKING:
    from ..config import Settings

ModelT = TypeVar("ModelT", bound=BaseModel)


class StoreError(AmbientDbError):
    """Base exception for document store operations."""

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message, code=code or "STORE_ERROR")


class StoreConnectionError(StoreError):
    """Store is not connected, or the backend is unavailable."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="STORE_CONNECTION_ERROR")


class DocumentNotFoundError(StoreError):
    """Document does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Document not found: {path}", code="NOT_FOUND")
        self.path = path


def check_update_fields(model: type[BaseModel], fields: Mapping[str, Any]) -> None:
    """Reject partial updates naming fields the type does not have.

    Raises:
        UnknownFieldError: For the first unknown field
    """
    known = list(model.model_fields)
    for name in fields:
        if name not in model.model_fields:
            raise UnknownFieldError(name, model.__name__, known)


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol for document store backends.

    Example:
        >>> store = create_document_store(Settings())
        >>> await store.connect()
        >>> await store.set(profile, user_id)
        >>> profile = await store.get(DbProfile, user_id)
    """

    @abstractmethod
    async def connect(self) -> None:
        """Connect to the backend.

        Must be called before any other operations.

        Raises:
            StoreConnectionError: If connection fails
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release backend resources."""
        ...

    @abstractmethod
    async def get(
        self,
        model: type[ModelT],
        doc_id: str,
        parent_id: Optional[str] = None,
    ) -> Optional[ModelT]:
        """Read a document.

        Args:
            model: Document type (selects the collection)
            doc_id: Document id
            parent_id: Parent document id, for child collections

        Returns:
            The decoded document, or None if it does not exist

        Raises:
            DocumentDecodeError: If the stored document does not match model
        """
        ...

    @abstractmethod
    async def get_fragment(
        self,
        fragment: type[ModelT],
        collection: DbCollections,
        doc_id: str,
        parent_id: Optional[str] = None,
    ) -> Optional[ModelT]:
        """Read only the fields of a feature fragment from any document."""
        ...

    @abstractmethod
    async def set(
        self,
        doc: BaseModel,
        doc_id: str,
        parent_id: Optional[str] = None,
    ) -> None:
        """Create or overwrite a document."""
        ...

    @abstractmethod
    async def update(
        self,
        model: type[ModelT],
        doc_id: str,
        fields: Mapping[str, Any],
        parent_id: Optional[str] = None,
    ) -> ModelT:
        """Update some fields of an existing document.

        Returns:
            The document after the update

        Raises:
            DocumentNotFoundError: If the document does not exist
            UnknownFieldError: If fields names a field model does not have
            DocumentDecodeError: If the result does not match model
        """
        ...

    @abstractmethod
    async def delete(
        self,
        model: type[BaseModel],
        doc_id: str,
        parent_id: Optional[str] = None,
    ) -> None:
        """Remove a document. Deleting a missing document is a no-op."""
        ...

    @abstractmethod
    async def list(
        self,
        model: type[ModelT],
        parent_id: Optional[str] = None,
    ) -> builtins.list[tuple[str, ModelT]]:
        """All documents of a collection as (id, document), sorted by id."""
        ...

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether currently connected to the backend."""
        ...


def create_document_store(settings: "Settings") -> DocumentStore:
    """Factory function to create a document store from configuration.

    Raises:
        ValueError: If backend is not supported
    """
    from ..config import StoreBackend
    from .firestore import FirestoreDocumentStore
    from .memory import InMemoryDocumentStore

    if settings.backend == StoreBackend.MEMORY:
        return InMemoryDocumentStore()
    elif settings.backend == StoreBackend.FIRESTORE:
        return FirestoreDocumentStore(settings)
    else:
        raise ValueError(f"Unsupported store backend: {settings.backend}")
