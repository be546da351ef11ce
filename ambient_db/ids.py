"""
Deterministic document identifiers.

Some documents are not addressed by an externally assigned id but by an id
derived from their content:
- API keys are stored under the hash of the raw key
- Running servers are stored under an id derived from region, fleet,
  deploy URL and context
- Upvotes are stored under "<user_id>_<object_id>"

All functions here are pure and safe to call from any thread.

Invariants:
    - The same inputs always produce the same id
    - Changing any derivation rule orphans every existing document
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import Enum

ASSETS_URL_PREFIX = "https://assets.ambient.run/"

# Contexts this long could be mistaken for a hash suffix
_HASH_HEX_LEN = hashlib.sha256().digest_size * 2


class Region(str, Enum):
    """Deployment locality. The value is used as the id prefix."""

    EU = "EU"
    US = "US"

    def __str__(self) -> str:
        return self.value


def _is_ascii_alnum(value: str) -> bool:
    return value.isascii() and value.isalnum()


def hash_api_key(api_key: str) -> str:
    """Hash a raw API key for storage.

    The raw key is never stored; this digest is both the lookup key and the
    document id of the DbApiKey.
    """
    hasher = hashlib.sha256()
    hasher.update(b"ambient")
    hasher.update(api_key.encode("utf-8"))
    return hasher.hexdigest()


def derive_running_server_id(
    region: Region | str,
    fleet: str | None,
    deploy_url: str,
    context: str,
) -> str:
    """Derive the document id of a running server.

    Trusted asset URLs with a short alphanumeric context give a readable id
    ("EU-canary-somedeployment-context"). Anything else is hashed so that
    different inputs can never concatenate to the same id.

    Args:
        region: Deployment region
        fleet: Optional fleet label, ASCII alphanumeric only
        deploy_url: URL of the deployment being served
        context: Server context string

    Returns:
        The document id

    Raises:
        AssertionError: If fleet contains non-alphanumeric characters
    """
    if fleet and not _is_ascii_alnum(fleet):
        raise AssertionError(f"fleet must be ASCII alphanumeric, got {fleet!r}")

    prefix = Region(region).value
    if fleet:
        prefix = f"{prefix}-{fleet}"

    if deploy_url.startswith(ASSETS_URL_PREFIX):
        id_part = deploy_url[len(ASSETS_URL_PREFIX):]
        if _is_ascii_alnum(id_part):
            if context == "":
                return f"{prefix}-{id_part}"
            if _is_ascii_alnum(context) and len(context) < _HASH_HEX_LEN:
                return f"{prefix}-{id_part}-{context}"

    hasher = hashlib.sha256()
    hasher.update(b"url:")
    hasher.update(deploy_url.encode("utf-8"))
    hasher.update(b"context:")
    hasher.update(context.encode("utf-8"))
    return f"{prefix}-{hasher.hexdigest()}"


@dataclass(frozen=True)
class DbUpvoteId:
    """Composite id of an upvote: one per user and object."""

    user_id: str
    object_id: str

    def __str__(self) -> str:
        return f"{self.user_id}_{self.object_id}"

    @classmethod
    def parse(cls, value: str) -> DbUpvoteId:
        """Parse "<user_id>_<object_id>". The object id may contain '_'.

        Raises:
            ValueError: If the separator or either part is missing
        """
        user_id, sep, object_id = value.partition("_")
        if not sep or not user_id or not object_id:
            raise ValueError(f"Invalid upvote id '{value}', expected '<user_id>_<object_id>'")
        return cls(user_id=user_id, object_id=object_id)
