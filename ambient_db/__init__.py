"""
ambient-db - Document schema shared by the Ambient client and backend.

This package defines the shape of every document stored in the Ambient
document database, and the few pure functions that go with them:
- Document models (packages, deployments, profiles, API keys, servers,
  running servers, upvotes, activity feed)
- Collection registry binding each document type to one collection
- Deterministic ids (API-key hashing, running-server ids, upvote ids)
- Content tag normalization, including migration of legacy content flags
- Storage adapters (Firestore, in-memory) over one canonical schema

Example:
    >>> from ambient_db import DbRunningServer, Region
    >>> DbRunningServer.document_id(Region.EU, None, "https://assets.ambient.run/abc", "")
    'EU-abc'

Invariants:
    - Every collection-backed type lives in exactly one collection
    - Document ids of API keys, running servers and upvotes are derived
      from content, never assigned
    - Persistence, querying and transport belong to the database client

Version: 0.4.0
"""

__version__ = "0.4.0"

from .codec import decode_document, encode_document
from .content import (
    AssetContent,
    DbPackageContent,
    LegacyDbPackageContent,
    ModContent,
    PackageContent,
    PlayableContent,
    ToolContent,
    normalize_content,
    tags_from_content,
    tags_from_legacy,
)
from .db_collections import DbCollections
from .errors import (
    AmbientDbError,
    DocumentDecodeError,
    UnboundCollectionError,
    UnknownFieldError,
)
from .features import DbDeletable, DbUpvotable, FeatNamed, FeatUpvotable
from .ids import (
    ASSETS_URL_PREFIX,
    DbUpvoteId,
    Region,
    derive_running_server_id,
    hash_api_key,
)
from .models import (
    Activity,
    DbActivity,
    DbApiKey,
    DbDeployment,
    DbMessage,
    DbPackage,
    DbProfile,
    DbRunningServer,
    DbServer,
    DbServerLog,
    DbShardedServer,
    DbUpvote,
    File,
    MessagePosted,
    PackageDeployed,
    ServerLogSource,
    ServerState,
)
from .registry import (
    CollectionRegistry,
    DuplicateRegistrationError,
    RegistryFrozenError,
    get_registry,
    reset_registry,
)

__all__ = [
    # Version
    "__version__",
    # Collections
    "DbCollections",
    "CollectionRegistry",
    "get_registry",
    "reset_registry",
    # Documents
    "DbPackage",
    "DbDeployment",
    "File",
    "DbProfile",
    "DbApiKey",
    "DbServer",
    "ServerState",
    "DbServerLog",
    "ServerLogSource",
    "DbRunningServer",
    "DbShardedServer",
    "DbUpvote",
    "DbActivity",
    "Activity",
    "PackageDeployed",
    "MessagePosted",
    "DbMessage",
    "FeatNamed",
    "FeatUpvotable",
    "DbDeletable",
    "DbUpvotable",
    # Content
    "DbPackageContent",
    "PackageContent",
    "PlayableContent",
    "AssetContent",
    "ToolContent",
    "ModContent",
    "LegacyDbPackageContent",
    "normalize_content",
    "tags_from_content",
    "tags_from_legacy",
    # Ids
    "ASSETS_URL_PREFIX",
    "Region",
    "DbUpvoteId",
    "hash_api_key",
    "derive_running_server_id",
    # Codec
    "encode_document",
    "decode_document",
    # Errors
    "AmbientDbError",
    "DocumentDecodeError",
    "UnboundCollectionError",
    "UnknownFieldError",
    "RegistryFrozenError",
    "DuplicateRegistrationError",
]
