"""
Document shapes of the Ambient document database.

One pydantic model per stored document type. The models are the canonical
schema shared by every storage adapter: timestamps are plain datetimes here
and each adapter maps them to its backend's representation.

Invariants:
    - Fields are only ever added, and added fields carry a default, so
      documents written by older versions keep decoding
    - Unknown fields in stored documents are ignored
    - Deletion of packages is a flag (deleted=True), not a removal

How to change safely:
    - Add new fields with defaults
    - Never rename a field without a validation alias for the old name
    - Bind new document types to a collection in registry.py
"""

from __future__ import annotations

import hashlib
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .content import DbPackageContent, PackageContent, PlayableContent, normalize_content
from .db_collections import DbCollections
from .ids import DbUpvoteId, Region, derive_running_server_id


class _Document(BaseModel):
    model_config = ConfigDict(extra="ignore")


class DbPackage(_Document):
    owner_id: str
    created: datetime
    updated: datetime
    deleted: bool = False
    latest_deployment: str = ""
    deployments: list[str] = Field(default_factory=list)
    # Featured-by-Ambient score; None when not featured
    featured: Optional[float] = None
    latest_screenshot_url: str = ""
    latest_readme_url: str = ""
    total_upvotes: int = 0

    # Pulled from the package manifest
    name: str = ""
    content: list[DbPackageContent] = Field(default_factory=list)
    public: bool = False

    @field_validator("content", mode="before")
    @classmethod
    def _migrate_content(cls, value: Any) -> list[DbPackageContent]:
        return normalize_content(value)


MD5Digest = Annotated[
    list[Annotated[int, Field(ge=0, le=255)]],
    Field(min_length=16, max_length=16),
]


class File(BaseModel):
    """A file uploaded as part of a deployment."""

    path: str
    size: int = Field(ge=0)
    md5: MD5Digest

    @field_validator("md5", mode="before")
    @classmethod
    def _digest_bytes(cls, value: Any) -> Any:
        if isinstance(value, (bytes, bytearray)):
            return list(value)
        return value

    @classmethod
    def from_bytes(cls, path: str, data: bytes) -> File:
        """Describe a file from its contents."""
        return cls(path=path, size=len(data), md5=hashlib.md5(data).digest())

    def digest(self) -> bytes:
        return bytes(self.md5)


class DbDeployment(_Document):
    package_id: str
    # The user that deployed this
    user_id: str = ""
    files: list[File]
    ambient_version: str
    ambient_revision: str = ""
    created: datetime
    has_screenshot: bool = False
    has_readme: bool = False
    # Temporary deployments may be deleted 24h after creation
    temporary: bool = False

    # Pulled from the package manifest
    name: str = ""
    version: str = ""
    content: PackageContent = Field(default_factory=PlayableContent)

    def content_tags(self) -> list[DbPackageContent]:
        """Tags to copy onto the parent package."""
        return normalize_content(self.content)


class DbProfile(_Document):
    created: datetime
    name: str = ""
    username: str = ""
    bio: str = ""
    github: str = ""
    twitter: str = ""
    instagram: str = ""
    linkedin: str = ""
    twitch: str = ""
    website: str = ""


class DbApiKey(_Document):
    """An API key. Stored under hash_api_key(raw_key); the raw key is never stored."""

    created: datetime
    user_id: str
    name: str


class ServerState(str, Enum):
    """Lifecycle of a server. Set directly by the server host; no transitions are enforced."""

    STARTING = "Starting"
    RUNNING = "Running"
    STOPPED = "Stopped"


class DbServer(_Document):
    name: str = ""
    context: str
    deploy_url: str
    host: str
    state: ServerState
    created: datetime
    updated: Optional[datetime] = None
    stopped: Optional[datetime] = None
    player_count: Optional[int] = None
    region: Region = Region.EU
    package_id: str = ""
    deployment_id: str = ""
    owner_id: str = ""


class ServerLogSource(str, Enum):
    STDOUT = "Stdout"
    STDERR = "Stderr"


class DbServerLog(_Document):
    """A log entry from a server. Child collection of DbServer."""

    timestamp: datetime
    message: str
    source: Optional[ServerLogSource] = None


class DbRunningServer(_Document):
    server_id: str
    deploy_url: str
    context: str
    region: Region = Region.EU
    package_id: str = ""
    deployment_id: str = ""
    owner_id: str = ""

    @staticmethod
    def document_id(
        region: Region | str,
        fleet: Optional[str],
        deploy_url: str,
        context: str,
    ) -> str:
        """See derive_running_server_id."""
        return derive_running_server_id(region, fleet, deploy_url, context)

    def doc_id(self, fleet: Optional[str] = None) -> str:
        """Document id of this running server."""
        return derive_running_server_id(self.region, fleet, self.deploy_url, self.context)


class DbShardedServer(_Document):
    """A shard of a running server. Child collection of DbRunningServer."""

    server_id: str


class DbUpvote(_Document):
    collection: DbCollections
    created: datetime
    user_id: str
    item_id: str

    def upvote_id(self) -> DbUpvoteId:
        return DbUpvoteId(user_id=self.user_id, object_id=self.item_id)


class PackageDeployed(BaseModel):
    type: Literal["PackageDeployed"] = "PackageDeployed"
    package_id: str
    deployment_id: str
    version: str = ""


class MessagePosted(BaseModel):
    type: Literal["MessagePosted"] = "MessagePosted"
    path: str


Activity = Annotated[Union[PackageDeployed, MessagePosted], Field(discriminator="type")]


class DbActivity(_Document):
    """An entry in the append-only activity feed."""

    timestamp: datetime
    user_id: str = ""
    content: Activity


class DbMessage(_Document):
    user_id: str
    created: datetime
    content: str
