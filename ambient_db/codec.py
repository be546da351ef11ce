"""
Document encoding and decoding.

Documents cross the storage boundary as plain dictionaries:
- "json" mode: the wire form (timestamps as RFC 3339 strings, enums as
  their names, wire field names such as "schema" and "mod_")
- "python" mode: same keys, but datetimes are kept for backends with a
  native timestamp type

Decoding failures are reported as DocumentDecodeError, never as the
underlying pydantic error.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import DocumentDecodeError
from .registry import get_registry

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

EncodeMode = Literal["json", "python"]


def encode_document(doc: BaseModel, *, mode: EncodeMode = "json") -> dict[str, Any]:
    """Encode a document for storage.

    Args:
        doc: Document to encode
        mode: "json" for the wire form, "python" to keep datetimes

    Returns:
        Dictionary using wire field names
    """
    if mode not in ("json", "python"):
        raise ValueError(f"Invalid encode mode '{mode}'. Must be one of: json, python")
    return doc.model_dump(mode=mode, by_alias=True)


def decode_document(model: type[ModelT], data: Mapping[str, Any]) -> ModelT:
    """Decode a stored document into its declared type.

    Absent defaulted fields get their defaults; legacy content records are
    migrated to tags.

    Raises:
        DocumentDecodeError: If data does not match the declared shape
    """
    try:
        return model.model_validate(dict(data))
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
        registry = get_registry()
        collection = registry.collection_for(model).value if registry.is_bound(model) else None
        logger.debug("Decode of %s failed: %s", model.__name__, errors)
        raise DocumentDecodeError(model.__name__, collection=collection, errors=errors) from e
