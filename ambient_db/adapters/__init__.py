"""
Document store adapters for ambient-db.

One canonical schema (ambient_db.models), one adapter per backend:
- Firestore (production)
- In-memory (tests and local development)

How to change safely:
    - New backends must implement the DocumentStore protocol
    - Register new backends in create_document_store
"""

from .base import (
    DocumentNotFoundError,
    DocumentStore,
    StoreConnectionError,
    StoreError,
    create_document_store,
)
from .firestore import FirestoreDocumentStore
from .memory import InMemoryDocumentStore

__all__ = [
    # Protocol and errors
    "DocumentStore",
    "StoreError",
    "StoreConnectionError",
    "DocumentNotFoundError",
    # Factory
    "create_document_store",
    # Implementations
    "FirestoreDocumentStore",
    "InMemoryDocumentStore",
]
